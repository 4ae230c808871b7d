from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from farm_directory import models
from farm_directory.config import Settings
from farm_directory.lifecycle import AccountStatus, FarmStatus, Role
from farm_directory.main import create_app


UTC = timezone.utc
PASSWORD = "password123"

BASE_SETTINGS = Settings(
    jwt_secret="test-secret-0123456789abcdef0123456789abcdef",
    database_url="sqlite://",
    bcrypt_rounds=4,
    rate_limit_enabled=False,
)


class ClockStub:
    """Mutable clock so tests can control token issue/expiry times."""

    def __init__(self, initial: datetime | None = None):
        self._now = initial or datetime(2025, 1, 1, tzinfo=UTC)

    def set(self, value: datetime) -> None:
        self._now = value

    def advance(self, **delta_kwargs) -> None:
        self._now += timedelta(**delta_kwargs)

    def __call__(self) -> datetime:
        return self._now


class Harness:
    """TestClient plus direct store access for arranging state."""

    def __init__(self, client: TestClient, clock: ClockStub):
        self.client = client
        self.clock = clock
        self.app = client.app
        self.sessions = self.app.state.sessionmaker

    def add_account(
        self,
        email: str,
        *,
        password: str = PASSWORD,
        name: str | None = None,
        role: Role = Role.USER,
        status: AccountStatus = AccountStatus.APPROVED,
    ) -> int:
        with self.sessions() as db:
            user = self.app.state.auth_service.create_account(
                db, email=email, password=password, name=name or email.split("@")[0], role=role, status=status
            )
            return user.id

    def add_farm(self, owner_id: int | None, *, status: FarmStatus = FarmStatus.APPROVED, **fields) -> int:
        values = {"name": "Farm", "location": None, "products": None, "latitude": None, "longitude": None}
        values.update(fields)
        with self.sessions() as db:
            farm = models.Farm(owner_id=owner_id, status=status, **values)
            db.add(farm)
            db.commit()
            return farm.id

    def get_farm(self, farm_id: int) -> models.Farm | None:
        with self.sessions() as db:
            return db.get(models.Farm, farm_id)

    def get_user(self, user_id: int) -> models.User | None:
        with self.sessions() as db:
            return db.get(models.User, user_id)

    def token_for(self, email: str, password: str = PASSWORD) -> str:
        resp = self.client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.json()
        token = resp.cookies["token"]
        # keep the jar empty so each request authenticates with its own header
        self.client.cookies.clear()
        return token

    def auth(self, email: str, password: str = PASSWORD) -> dict:
        return {"Authorization": f"Bearer {self.token_for(email, password)}"}


@pytest.fixture
def make_harness():
    """Factory so a test can tweak settings; every app gets its own in-memory db."""
    opened: list[TestClient] = []

    def _make(**overrides) -> Harness:
        clock = ClockStub()
        app = create_app(replace(BASE_SETTINGS, **overrides), clock=clock)
        client = TestClient(app)
        client.__enter__()
        opened.append(client)
        return Harness(client, clock)

    yield _make

    for client in opened:
        client.__exit__(None, None, None)


@pytest.fixture
def harness(make_harness) -> Harness:
    return make_harness()
