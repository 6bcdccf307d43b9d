from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from app.core.exceptions import InvalidTokenError, TokenExpiredError
from app.core.security import SessionTokenManager, hash_password, verify_password
from app.domain.models.user import PublicIdentity

IDENTITY = PublicIdentity(id="user-1", username="ada", image=None)


def test_password_hash_round_trip():
    password_hash = hash_password("correct horse")

    assert password_hash != "correct horse"
    assert verify_password("correct horse", password_hash) is True
    assert verify_password("wrong horse", password_hash) is False


def test_malformed_stored_hash_is_a_mismatch():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_session_token_expires_after_thirty_days():
    tokens = SessionTokenManager(secret_key="test-secret")
    issued = datetime(2024, 1, 1, tzinfo=timezone.utc)

    claims = jwt.get_unverified_claims(tokens.issue(IDENTITY, now=issued))

    assert claims["sub"] == "user-1"
    assert claims["exp"] - claims["iat"] == int(timedelta(days=30).total_seconds())
    assert "password" not in claims


def test_expired_token_is_rejected():
    tokens = SessionTokenManager(secret_key="test-secret")
    token = tokens.issue(IDENTITY, now=datetime.now(timezone.utc) - timedelta(days=31))

    with pytest.raises(TokenExpiredError):
        tokens.decode(token)


def test_token_signed_with_another_key_is_rejected():
    token = SessionTokenManager(secret_key="other-secret").issue(IDENTITY)

    with pytest.raises(InvalidTokenError):
        SessionTokenManager(secret_key="test-secret").decode(token)


def test_token_without_identity_claims_is_rejected():
    token = jwt.encode(
        {"exp": int((datetime.now(timezone.utc) + timedelta(days=1)).timestamp())},
        "test-secret",
        algorithm="HS256",
    )

    with pytest.raises(InvalidTokenError):
        SessionTokenManager(secret_key="test-secret").decode(token)
