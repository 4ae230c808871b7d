# farm_directory/lifecycle.py
"""
Roles, moderation statuses and the transitions an admin may apply.
"""
from __future__ import annotations

import enum
from typing import Mapping

from farm_directory.errors import StateError, ValidationError


class Role(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class AccountStatus(str, enum.Enum):
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"


class FarmStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    SUSPENDED = "suspended"
    DELETED = "deleted"


ACCOUNT_TRANSITIONS: Mapping[AccountStatus, frozenset[AccountStatus]] = {
    AccountStatus.PENDING_APPROVAL: frozenset({AccountStatus.APPROVED, AccountStatus.REJECTED}),
    AccountStatus.APPROVED: frozenset({AccountStatus.SUSPENDED}),
    AccountStatus.SUSPENDED: frozenset({AccountStatus.APPROVED}),
    AccountStatus.REJECTED: frozenset({AccountStatus.APPROVED}),
}

FARM_TRANSITIONS: Mapping[FarmStatus, frozenset[FarmStatus]] = {
    FarmStatus.PENDING_APPROVAL: frozenset({FarmStatus.APPROVED, FarmStatus.SUSPENDED}),
    FarmStatus.APPROVED: frozenset({FarmStatus.SUSPENDED, FarmStatus.DELETED}),
    FarmStatus.SUSPENDED: frozenset({FarmStatus.APPROVED, FarmStatus.DELETED}),
}


def parse_account_status(value: str) -> AccountStatus:
    try:
        return AccountStatus(value)
    except ValueError:
        raise ValidationError("Unknown account status.") from None


def parse_farm_status(value: str) -> FarmStatus:
    try:
        return FarmStatus(value)
    except ValueError:
        raise ValidationError("Unknown farm status.") from None


def check_account_transition(current: str, requested: str) -> AccountStatus:
    """Return the target status, or raise StateError if the move is not allowed."""
    target = parse_account_status(requested)
    source = parse_account_status(current)
    if target not in ACCOUNT_TRANSITIONS.get(source, frozenset()):
        raise StateError(source.value, target.value)
    return target


def check_farm_transition(current: str, requested: str) -> FarmStatus:
    target = parse_farm_status(requested)
    source = parse_farm_status(current)
    # draft and deleted have no outgoing moves
    if target not in FARM_TRANSITIONS.get(source, frozenset()):
        raise StateError(source.value, target.value)
    return target


def can_create_listing(role: str, status: str) -> bool:
    return status == AccountStatus.APPROVED.value or role == Role.ADMIN.value


def can_delete_listing(account_id: int, role: str, owner_id: int | None) -> bool:
    return role == Role.ADMIN.value or (owner_id is not None and account_id == owner_id)
