# farm_directory/directory_service.py
"""
Listing and moderation workflows. Authorization decisions that depend on
the stored row (ownership) are made here; role gates live in ``deps``.
"""
from __future__ import annotations

import logging
import math
from typing import Optional

from sqlalchemy.orm import Session

from farm_directory import crud, models, query, schemas
from farm_directory.errors import AuthError, AuthReason, NotFoundError
from farm_directory.lifecycle import (
    can_delete_listing,
    check_account_transition,
    check_farm_transition,
)
from farm_directory.security import Identity

logger = logging.getLogger(__name__)


class DirectoryService:
    def __init__(self, *, include_unapproved: bool = False):
        self.include_unapproved = include_unapproved

    # ---------- public ----------

    def public_farms(self, db: Session) -> list[models.Farm]:
        return crud.list_farms(db, approved_only=not self.include_unapproved)

    def browse(
        self,
        db: Session,
        *,
        search_term: Optional[str] = None,
        origin: Optional[query.Origin] = None,
        category: Optional[str] = None,
    ) -> list[query.ListingView]:
        return query.compute_view(
            self.public_farms(db),
            search_term=search_term,
            origin=origin,
            selected_category=category,
        )

    def categories(self, db: Session) -> list[str]:
        return query.category_vocabulary(self.public_farms(db))

    # ---------- owners ----------

    def submit(self, db: Session, identity: Identity, payload) -> models.Farm:
        """Caller must already have passed ``deps.require_approved_or_admin``."""
        farm = crud.create_farm(db, payload, owner_id=identity.account_id)
        logger.info("Account %s submitted farm %s for approval", identity.account_id, farm.id)
        return farm

    def remove(self, db: Session, identity: Identity, farm_id: int) -> None:
        farm = crud.get_farm(db, farm_id)
        if not can_delete_listing(identity.account_id, identity.role, farm.owner_id):
            raise AuthError(AuthReason.FORBIDDEN, "Unauthorized")
        crud.delete_farm(db, farm)
        logger.info("Farm %s deleted by account %s", farm_id, identity.account_id)

    # ---------- admin ----------

    def set_user_status(self, db: Session, admin: Identity, user_id: int, requested: str) -> models.User:
        user = crud.get_user(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        target = check_account_transition(user.status, requested)
        previous = user.status
        user = crud.set_user_status(db, user, target)
        logger.info("Admin %s moved account %s from %s to %s", admin.account_id, user_id, previous, target.value)
        return user

    def set_farm_status(
        self,
        db: Session,
        admin: Identity,
        farm_id: int,
        requested: str,
        *,
        admin_notes: Optional[str] = None,
    ) -> models.Farm:
        farm = crud.get_farm(db, farm_id)
        target = check_farm_transition(farm.status, requested)
        previous = farm.status
        farm = crud.set_farm_status(db, farm, target, admin_notes=admin_notes)
        logger.info("Admin %s moved farm %s from %s to %s", admin.account_id, farm_id, previous, target.value)
        return farm

    def all_farms(self, db: Session) -> list[models.Farm]:
        return crud.list_farms_with_owner(db)


def view_item(view: query.ListingView) -> schemas.FarmListItem:
    item = schemas.FarmListItem.model_validate(view.listing)
    # inf (no coordinates) is not valid JSON, it goes out as null
    if view.distance is not None and math.isfinite(view.distance):
        item.distance_km = round(view.distance, 3)
    return item
