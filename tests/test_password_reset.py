from datetime import datetime, timedelta

import pytest

from app.models.password_reset_token import PasswordResetToken
from app.models.user import User
from app.utils.hashing import verify_password
from app.utils.password_reset import (
    EXPIRED,
    INVALID,
    PasswordReuseError,
    ResetTokenError,
    consume_reset_token,
    hash_token,
    issue_reset_token,
    purge_expired_reset_tokens,
    validate_reset_token,
)

T0 = datetime(2026, 3, 1, 8, 0, 0)


def _stored_hash(db, user_id):
    db.expire_all()
    return db.query(User).filter(User.id == user_id).one().password_hash


def test_issue_stores_only_the_token_hash(db, make_user):
    user = make_user()
    token = issue_reset_token(db, user.id, now=T0)

    row = db.query(PasswordResetToken).one()
    assert row.token_hash == hash_token(token)
    assert row.token_hash != token
    assert row.expires_at == T0 + timedelta(hours=24)


def test_validate_returns_user_and_email(db, make_user):
    user = make_user(email="a@x.com")
    token = issue_reset_token(db, user.id, now=T0)
    assert validate_reset_token(db, token, now=T0 + timedelta(hours=1)) == (user.id, "a@x.com")


def test_validate_unknown_token(db):
    with pytest.raises(ResetTokenError) as exc:
        validate_reset_token(db, "does-not-exist")
    assert exc.value.reason == INVALID


def test_expired_token_validate_then_consume(db, make_user):
    user = make_user()
    before = _stored_hash(db, user.id)
    token = issue_reset_token(db, user.id, now=T0)
    later = T0 + timedelta(hours=24, seconds=1)

    with pytest.raises(ResetTokenError) as exc:
        validate_reset_token(db, token, now=later)
    assert exc.value.reason == EXPIRED
    # validate is read-only
    assert db.query(PasswordResetToken).count() == 1

    with pytest.raises(ResetTokenError) as exc:
        consume_reset_token(db, token, "newpass123", now=later)
    assert exc.value.reason == EXPIRED

    assert _stored_hash(db, user.id) == before
    assert db.query(PasswordResetToken).count() == 0


def test_consume_sets_new_password_and_deletes_token(db, make_user):
    user = make_user(password="longenough1")
    token = issue_reset_token(db, user.id, now=T0)

    consume_reset_token(db, token, "newpass123", now=T0 + timedelta(hours=2))

    new_hash = _stored_hash(db, user.id)
    assert verify_password("newpass123", new_hash)
    assert not verify_password("longenough1", new_hash)
    assert db.query(PasswordResetToken).count() == 0


def test_consume_succeeds_at_most_once(db, make_user):
    user = make_user()
    token = issue_reset_token(db, user.id, now=T0)
    consume_reset_token(db, token, "newpass123", now=T0)

    with pytest.raises(ResetTokenError) as exc:
        consume_reset_token(db, token, "another-pass-9", now=T0)
    assert exc.value.reason == INVALID
    assert verify_password("newpass123", _stored_hash(db, user.id))


def test_consume_rejects_current_password_and_keeps_token(db, make_user):
    user = make_user(password="longenough1")
    before = _stored_hash(db, user.id)
    token = issue_reset_token(db, user.id, now=T0)

    with pytest.raises(PasswordReuseError):
        consume_reset_token(db, token, "longenough1", now=T0)

    assert _stored_hash(db, user.id) == before
    # still usable with a different password
    consume_reset_token(db, token, "fresh-pass-1", now=T0)
    assert verify_password("fresh-pass-1", _stored_hash(db, user.id))


def test_reissue_keeps_older_tokens_live(db, make_user):
    user = make_user()
    first = issue_reset_token(db, user.id, now=T0)
    second = issue_reset_token(db, user.id, now=T0 + timedelta(minutes=5))
    assert first != second

    assert validate_reset_token(db, first, now=T0)[0] == user.id
    assert validate_reset_token(db, second, now=T0)[0] == user.id

    consume_reset_token(db, first, "newpass123", now=T0)
    # the other token is independent
    consume_reset_token(db, second, "newpass456", now=T0)
    assert verify_password("newpass456", _stored_hash(db, user.id))


def test_purge_expired_tokens(db, make_user):
    user = make_user()
    issue_reset_token(db, user.id, now=T0 - timedelta(days=2))
    live = issue_reset_token(db, user.id, now=T0)

    assert purge_expired_reset_tokens(db, now=T0) == 1
    assert db.query(PasswordResetToken).one().token_hash == hash_token(live)
