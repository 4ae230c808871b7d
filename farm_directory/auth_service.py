# farm_directory/auth_service.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from farm_directory import crud, models
from farm_directory.errors import InvalidCredentials, NotFoundError, ValidationError
from farm_directory.lifecycle import AccountStatus, Role
from farm_directory.security import (
    MAX_PASSWORD_BYTES,
    Identity,
    TokenCodec,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class AuthService:
    def __init__(self, tokens: Optional[TokenCodec] = None, *, bcrypt_rounds: int = 10):
        # DI; tokens may be left out by callers that never log anyone in (cli)
        self.tokens = tokens
        self._rounds = bcrypt_rounds
        self._dummy_hash: Optional[str] = None

    @staticmethod
    def _check_password_policy(password: str) -> None:
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError("Password is too long.")

    def _dummy(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = hash_password("not-a-real-password", self._rounds)
        return self._dummy_hash

    def register(self, db: Session, *, email: str, password: str, name: Optional[str]) -> models.User:
        self._check_password_policy(password)
        user = crud.create_user(
            db,
            email=email,
            password_hash=hash_password(password, self._rounds),
            name=name,
        )
        logger.info("Registered account %s, waiting for approval", user.id)
        return user

    def create_account(
        self,
        db: Session,
        *,
        email: str,
        password: str,
        name: Optional[str],
        role: Role,
        status: AccountStatus,
    ) -> models.User:
        """Seeding path: same policy as registration, but role/status chosen by the caller."""
        self._check_password_policy(password)
        return crud.create_user(
            db,
            email=email,
            password_hash=hash_password(password, self._rounds),
            name=name,
            role=role,
            status=status,
        )

    def login(self, db: Session, *, email: str, password: str) -> tuple[models.User, str]:
        user = crud.get_user_by_email(db, email)
        if user is None:
            # still pay for a bcrypt check so timing does not reveal unknown emails
            verify_password(password, self._dummy())
            logger.info("Failed login attempt")
            raise InvalidCredentials()
        if not verify_password(password, user.password_hash):
            logger.info("Failed login attempt for account %s", user.id)
            raise InvalidCredentials()

        token = self.tokens.issue(user.id, user.role, user.status)
        logger.info("Account %s logged in", user.id)
        return user, token

    def current_account(self, db: Session, identity: Identity) -> models.User:
        user = crud.get_user(db, identity.account_id)
        if user is None:
            raise NotFoundError("Account not found")
        return user
