from datetime import datetime, timedelta

from app.models.session import UserSession
from app.models.user import UserStatus
from app.utils.sessions import issue_session, purge_expired_sessions, resolve_session, revoke_session

T0 = datetime(2026, 1, 1, 12, 0, 0)


def test_issue_sets_30_day_expiry(db, make_user):
    user = make_user()
    session = issue_session(db, user.id, now=T0)
    assert session.expires == T0 + timedelta(days=30)
    assert len(session.id) >= 40


def test_session_ids_are_unique(db, make_user):
    user = make_user()
    ids = {issue_session(db, user.id, now=T0).id for _ in range(5)}
    assert len(ids) == 5


def test_resolve_returns_owner(db, make_user):
    user = make_user()
    session = issue_session(db, user.id, now=T0)
    resolved = resolve_session(db, session.id, now=T0 + timedelta(days=1))
    assert resolved is not None
    assert resolved.id == user.id


def test_resolve_unknown_or_empty(db):
    assert resolve_session(db, "nope") is None
    assert resolve_session(db, None) is None
    assert resolve_session(db, "") is None


def test_expired_session_is_deleted_on_read(db, make_user):
    user = make_user()
    session = issue_session(db, user.id, now=T0)
    sid = session.id

    later = T0 + timedelta(days=30, seconds=1)
    assert resolve_session(db, sid, now=later) is None
    assert db.query(UserSession).filter(UserSession.id == sid).count() == 0
    # gone even when read with the issuing clock
    assert resolve_session(db, sid, now=T0) is None


def test_session_valid_exactly_at_expiry(db, make_user):
    user = make_user()
    session = issue_session(db, user.id, now=T0)
    assert resolve_session(db, session.id, now=T0 + timedelta(days=30)) is not None


def test_warned_user_still_resolves(db, make_user):
    user = make_user(status=UserStatus.WARNED)
    session = issue_session(db, user.id, now=T0)
    assert resolve_session(db, session.id, now=T0) is not None


def test_banned_or_suspended_user_session_is_revoked(db, make_user):
    for i, status in enumerate((UserStatus.BANNED, UserStatus.SUSPENDED)):
        user = make_user(email=f"u{i}@example.com")
        session = issue_session(db, user.id, now=T0)
        sid = session.id

        user.status = status
        db.commit()

        assert resolve_session(db, sid, now=T0) is None
        assert db.query(UserSession).filter(UserSession.id == sid).count() == 0


def test_multiple_sessions_coexist_and_revoke_is_scoped(db, make_user):
    user = make_user()
    a = issue_session(db, user.id, now=T0).id
    b = issue_session(db, user.id, now=T0).id

    revoke_session(db, a)
    assert resolve_session(db, a, now=T0) is None
    assert resolve_session(db, b, now=T0) is not None


def test_revoke_is_idempotent(db, make_user):
    user = make_user()
    sid = issue_session(db, user.id, now=T0).id
    revoke_session(db, sid)
    revoke_session(db, sid)
    revoke_session(db, None)
    assert db.query(UserSession).count() == 0


def test_purge_removes_only_expired(db, make_user):
    user = make_user()
    issue_session(db, user.id, now=T0 - timedelta(days=40))
    live = issue_session(db, user.id, now=T0).id

    assert purge_expired_sessions(db, now=T0) == 1
    remaining = [s.id for s in db.query(UserSession).all()]
    assert remaining == [live]
