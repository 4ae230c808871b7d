from datetime import timedelta

import jwt
import pytest

from farm_directory.errors import AuthError, AuthReason
from farm_directory.security import TokenCodec, hash_password, verify_password

from conftest import ClockStub

SECRET = "unit-secret-0123456789abcdef0123456789abcdef"


@pytest.fixture
def clock():
    return ClockStub()


@pytest.fixture
def codec(clock):
    return TokenCodec(SECRET, clock=clock)


def test_password_hash_roundtrip():
    hashed = hash_password("correct horse", rounds=4)
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)


def test_verify_password_rejects_malformed_hash():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_token_carries_identity(codec):
    identity = codec.verify(codec.issue(7, "user", "approved"))

    assert identity.account_id == 7
    assert identity.role == "user"
    assert identity.status == "approved"


def test_token_lifetime_is_exactly_one_hour(codec):
    claims = codec.decode(codec.issue(1, "user", "approved"))
    assert claims["exp"] - claims["iat"] == 3600


def test_token_valid_until_expiry_then_expired(codec, clock):
    token = codec.issue(1, "admin", "approved")

    clock.advance(minutes=59, seconds=59)
    assert codec.verify(token).account_id == 1

    clock.advance(seconds=1)
    with pytest.raises(AuthError) as exc:
        codec.verify(token)
    assert exc.value.reason is AuthReason.EXPIRED
    assert exc.value.status_code == 401


def test_missing_token(codec):
    with pytest.raises(AuthError) as exc:
        codec.verify(None)
    assert exc.value.reason is AuthReason.MISSING


def test_token_signed_with_other_secret_is_invalid(codec, clock):
    other = TokenCodec("another-secret-0123456789abcdef0123456789ab", clock=clock)
    with pytest.raises(AuthError) as exc:
        codec.verify(other.issue(1, "admin", "approved"))
    assert exc.value.reason is AuthReason.INVALID


def test_garbage_token_is_invalid(codec):
    with pytest.raises(AuthError) as exc:
        codec.verify("not.a.token")
    assert exc.value.reason is AuthReason.INVALID


def test_token_without_expiry_is_invalid(codec):
    token = jwt.encode({"sub": "1", "role": "admin", "status": "approved", "iat": 0}, SECRET, algorithm="HS256")
    with pytest.raises(AuthError) as exc:
        codec.verify(token)
    assert exc.value.reason is AuthReason.INVALID


def test_custom_ttl(clock):
    codec = TokenCodec(SECRET, ttl=timedelta(minutes=5), clock=clock)
    token = codec.issue(1, "user", "approved")
    clock.advance(minutes=5)
    with pytest.raises(AuthError):
        codec.verify(token)
