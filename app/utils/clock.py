from datetime import datetime, timezone


def utcnow() -> datetime:
    # naive UTC, matches the DateTime columns on both postgres and sqlite
    return datetime.now(timezone.utc).replace(tzinfo=None)
