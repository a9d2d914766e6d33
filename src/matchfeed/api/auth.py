"""Static basic-auth gate for the /api routes."""

from __future__ import annotations

import secrets

import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

log = structlog.get_logger(__name__)

_basic = HTTPBasic(auto_error=False)

_CHALLENGE = {"WWW-Authenticate": 'Basic realm="Protected"'}


def _unauthorized() -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized", headers=_CHALLENGE)


def require_basic_auth(
    request: Request,
    credentials: HTTPBasicCredentials | None = Depends(_basic),
) -> str:
    """Return the username. Rejects everything while credentials are not configured."""
    settings = request.app.state.settings
    username, password = settings.auth_username, settings.auth_password
    if not username or not password:
        log.warning("auth_not_configured", path=request.url.path)
        raise _unauthorized()
    if credentials is None:
        raise _unauthorized()
    user_ok = secrets.compare_digest(credentials.username.encode(), username.encode())
    pass_ok = secrets.compare_digest(credentials.password.encode(), password.encode())
    if not (user_ok and pass_ok):
        raise _unauthorized()
    return credentials.username
