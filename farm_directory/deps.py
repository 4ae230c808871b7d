# farm_directory/deps.py
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from farm_directory.auth_service import AuthService
from farm_directory.config import Settings
from farm_directory.directory_service import DirectoryService
from farm_directory.errors import AuthError, AuthReason
from farm_directory.lifecycle import Role, can_create_listing
from farm_directory.security import Identity

bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_directory_service(request: Request) -> DirectoryService:
    return request.app.state.directory_service


def session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    settings: Settings = Depends(get_settings),
) -> Optional[str]:
    """Cookie first, then ``Authorization: Bearer``."""
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token
    return credentials.credentials if credentials else None


def get_identity(
    token: Optional[str] = Depends(session_token),
    svc: AuthService = Depends(get_auth_service),
) -> Identity:
    return svc.tokens.verify(token)


def require_admin(identity: Identity = Depends(get_identity)) -> Identity:
    if identity.role != Role.ADMIN.value:
        raise AuthError(AuthReason.FORBIDDEN)
    return identity


def require_approved_or_admin(identity: Identity = Depends(get_identity)) -> Identity:
    if not can_create_listing(identity.role, identity.status):
        raise AuthError(AuthReason.PENDING_APPROVAL)
    return identity
