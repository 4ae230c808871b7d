# farm_directory/security.py
"""
Password hashing (bcrypt) and signed session tokens (PyJWT).

Tokens are HS256 JWTs carrying the account id (``sub``), role and status as
they were at login time, plus ``iat``/``exp``. There is no refresh: once a
token expires the user logs in again, which is also the point at which an
admin's status change becomes visible to that user's requests.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

import bcrypt
import jwt

from farm_directory.errors import AuthError, AuthReason

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time check of a password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash, or an over-long password on newer bcrypt
        return False


@dataclass(frozen=True)
class Identity:
    account_id: int
    role: str
    status: str


class TokenCodec:
    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(hours=1),
        clock: Clock | None = None,
    ):
        self._secret = secret
        self._algorithm = algorithm
        self.ttl = ttl
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def issue(self, account_id: int, role: str, status: str) -> str:
        now = self._clock()
        claims = {
            "sub": str(account_id),
            "role": role,
            "status": status,
            "iat": int(now.timestamp()),
            "exp": int((now + self.ttl).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> dict:
        """Signature-checked claims; expiry is judged against our own clock in ``verify``."""
        return jwt.decode(
            token,
            self._secret,
            algorithms=[self._algorithm],
            options={
                "verify_exp": False,
                "verify_iat": False,
                "require": ["sub", "exp", "iat"],
            },
        )

    def verify(self, token: str | None) -> Identity:
        if not token:
            raise AuthError(AuthReason.MISSING)
        try:
            claims = self.decode(token)
        except jwt.InvalidTokenError as e:
            logger.info("Rejected token: %s", e)
            raise AuthError(AuthReason.INVALID) from None

        try:
            expires_at = int(claims["exp"])
            account_id = int(claims["sub"])
        except (TypeError, ValueError):
            raise AuthError(AuthReason.INVALID) from None

        if self._clock().timestamp() >= expires_at:
            raise AuthError(AuthReason.EXPIRED)

        return Identity(
            account_id=account_id,
            role=str(claims.get("role", "")),
            status=str(claims.get("status", "")),
        )
