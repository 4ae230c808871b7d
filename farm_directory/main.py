# farm_directory/main.py
"""
ASGI entrypoint::

    JWT_SECRET=... uvicorn farm_directory.main:create_app --factory

Everything stateful (engine, sessionmaker, services, rate-limit counters)
hangs off ``app.state``; routes reach it through the dependencies in
``farm_directory.deps``.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Response, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from farm_directory import crud, query, schemas
from farm_directory.auth_service import AuthService
from farm_directory.config import Settings
from farm_directory.db import get_db, init_db, make_engine, make_sessionmaker
from farm_directory.deps import (
    get_auth_service,
    get_directory_service,
    get_identity,
    get_settings,
    require_admin,
    require_approved_or_admin,
)
from farm_directory.directory_service import DirectoryService, view_item
from farm_directory.errors import ValidationError, register_exception_handlers
from farm_directory.lifecycle import AccountStatus, Role
from farm_directory.logging_config import setup_logging
from farm_directory.ratelimit import RateLimiter, rate_limit
from farm_directory.security import Clock, Identity, TokenCodec

logger = logging.getLogger(__name__)

# ---------- auth ----------

auth_router = APIRouter(prefix="/auth", tags=["auth"], dependencies=[Depends(rate_limit("auth"))])


@auth_router.post("/register", response_model=schemas.RegisterOut, status_code=status.HTTP_201_CREATED)
def register(
    body: schemas.RegisterIn,
    db: Session = Depends(get_db),
    svc: AuthService = Depends(get_auth_service),
):
    user = svc.register(db, email=body.email, password=body.password, name=body.name)
    return {"message": "User registered. Waiting for admin approval.", "user_id": user.id}


@auth_router.post("/login", response_model=schemas.LoginOut)
def login(
    body: schemas.LoginIn,
    response: Response,
    db: Session = Depends(get_db),
    svc: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    user, token = svc.login(db, email=body.email, password=body.password)
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=int(svc.tokens.ttl.total_seconds()),
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return {"message": "Logged in", "user": user}


@auth_router.post("/logout", response_model=schemas.Message)
def logout(response: Response, settings: Settings = Depends(get_settings)):
    response.delete_cookie(settings.session_cookie_name)
    return {"message": "Logged out"}


@auth_router.get("/me", response_model=schemas.UserOut)
def me(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    svc: AuthService = Depends(get_auth_service),
):
    return svc.current_account(db, identity)


# ---------- farms ----------

farms_router = APIRouter(prefix="/farms", tags=["farms"])


@farms_router.get("", response_model=List[schemas.FarmListItem])
def list_farms(
    q: Optional[str] = None,
    category: Optional[str] = None,
    lat: Optional[float] = Query(None, ge=-90, le=90, allow_inf_nan=False),
    lon: Optional[float] = Query(None, ge=-180, le=180, allow_inf_nan=False),
    db: Session = Depends(get_db),
    svc: DirectoryService = Depends(get_directory_service),
):
    if (lat is None) != (lon is None):
        raise ValidationError("lat and lon must be given together.")
    origin = query.Origin(lat, lon) if lat is not None else None
    views = svc.browse(db, search_term=q, origin=origin, category=category)
    return [view_item(v) for v in views]


@farms_router.get("/categories", response_model=List[str])
def list_categories(
    db: Session = Depends(get_db),
    svc: DirectoryService = Depends(get_directory_service),
):
    return svc.categories(db)


@farms_router.post("", response_model=schemas.FarmCreated, status_code=status.HTTP_201_CREATED)
def create_farm(
    body: schemas.FarmCreate,
    identity: Identity = Depends(require_approved_or_admin),
    db: Session = Depends(get_db),
    svc: DirectoryService = Depends(get_directory_service),
):
    farm = svc.submit(db, identity, body)
    return {"id": farm.id, "message": "Farm submitted for approval"}


@farms_router.delete("/{farm_id}", response_model=schemas.Message)
def delete_farm(
    farm_id: int,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    svc: DirectoryService = Depends(get_directory_service),
):
    svc.remove(db, identity, farm_id)
    return {"message": "Farm deleted"}


# ---------- admin ----------

admin_router = APIRouter(prefix="/admin", tags=["admin"])


@admin_router.get("/users", response_model=List[schemas.UserOut])
def admin_list_users(_: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    return crud.list_users(db)


@admin_router.put("/users/{user_id}", response_model=schemas.Message)
def admin_update_user(
    user_id: int,
    body: schemas.StatusUpdate,
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
    svc: DirectoryService = Depends(get_directory_service),
):
    user = svc.set_user_status(db, admin, user_id, body.status)
    return {"message": f"User status updated to {user.status}"}


@admin_router.get("/farms", response_model=List[schemas.AdminFarmOut])
def admin_list_farms(
    _: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
    svc: DirectoryService = Depends(get_directory_service),
):
    return svc.all_farms(db)


@admin_router.put("/farms/{farm_id}", response_model=schemas.Message)
def admin_update_farm(
    farm_id: int,
    body: schemas.FarmStatusUpdate,
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
    svc: DirectoryService = Depends(get_directory_service),
):
    farm = svc.set_farm_status(db, admin, farm_id, body.status, admin_notes=body.admin_notes)
    return {"message": f"Farm status updated to {farm.status}"}


# ---------- assembly ----------

api_router = APIRouter(prefix="/api", dependencies=[Depends(rate_limit("api"))])


@api_router.get("/status")
def api_status():
    return {"status": "ok"}


api_router.include_router(auth_router)
api_router.include_router(farms_router)
api_router.include_router(admin_router)


def seed_admin(sessionmaker_factory, auth: AuthService, settings: Settings) -> None:
    """Create the configured admin on an empty database."""
    if not (settings.seed_admin_email and settings.seed_admin_password):
        return
    with sessionmaker_factory() as db:
        if crud.count_users(db) > 0:
            return
        auth.create_account(
            db,
            email=settings.seed_admin_email,
            password=settings.seed_admin_password,
            name=settings.seed_admin_name,
            role=Role.ADMIN,
            status=AccountStatus.APPROVED,
        )
        logger.info("Seeded admin account %s", settings.seed_admin_email)


def create_app(settings: Settings | None = None, *, clock: Clock | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level)

    app = FastAPI(title="Farm Directory API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    engine = make_engine(settings.database_url)
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = make_sessionmaker(engine)
    app.state.auth_service = AuthService(
        TokenCodec(
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(minutes=settings.access_token_ttl_minutes),
            clock=clock,
        ),
        bcrypt_rounds=settings.bcrypt_rounds,
    )
    app.state.directory_service = DirectoryService(include_unapproved=settings.public_include_unapproved)
    app.state.rate_limiter = RateLimiter(
        {"auth": settings.auth_rate_limit, "api": settings.api_rate_limit},
        enabled=settings.rate_limit_enabled,
    )

    app.include_router(api_router)

    # Create tables at startup
    @app.on_event("startup")
    def _init_db():
        init_db(engine)
        seed_admin(app.state.sessionmaker, app.state.auth_service, settings)

    return app
