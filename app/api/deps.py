import hmac
from typing import Optional
from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session
from app.auth_local import decode_access_token
from app.core_settings import Settings, get_settings
from app.domain.catalog import StaticCatalog
from app.domain.errors import ConfigurationError, Unauthorized
from app.domain.models import User
from app.infrastructure.db import get_db
from shared.core import set_request_context

BEARER_PREFIX = "Bearer "

def get_catalog(request: Request) -> StaticCatalog:
    return request.app.state.catalog

def require_admin(
    x_admin_token: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Fails closed: without a configured ADMIN_TOKEN no admin call is allowed."""
    if not settings.ADMIN_TOKEN:
        raise ConfigurationError("Admin token is not configured")
    if not x_admin_token or not hmac.compare_digest(x_admin_token.encode(), settings.ADMIN_TOKEN.encode()):
        raise Unauthorized()

def get_current_user(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise Unauthorized("Missing token")
    token_data = decode_access_token(settings, authorization[len(BEARER_PREFIX):])
    if not token_data or not str(token_data.get("sub", "")).isdigit():
        raise Unauthorized("Invalid token")
    user = db.get(User, int(token_data["sub"]))
    if user is None:
        raise Unauthorized("Invalid token")
    set_request_context(user_id=user.id)
    return user
