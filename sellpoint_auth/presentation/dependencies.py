from typing import Annotated

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from sellpoint_auth.application.bans import BanEnforcement
from sellpoint_auth.application.password_reset import PasswordResetHandshake
from sellpoint_auth.application.sessions import SessionManager
from sellpoint_auth.domain.entities import ROLE_ADMIN, DeviceFingerprint, Session
from sellpoint_auth.presentation.device import device_from_user_agent
from sellpoint_auth.wiring import Services

bearer_scheme = HTTPBearer(auto_error=False)


def get_services(request: Request) -> Services:
    # This is set in sellpoint_auth.main lifespan()
    return request.app.state.services


def get_session_manager(
    services: Annotated[Services, Depends(get_services)],
) -> SessionManager:
    return services.session_manager


def get_password_reset(
    services: Annotated[Services, Depends(get_services)],
) -> PasswordResetHandshake:
    return services.password_reset


def get_ban_enforcement(
    services: Annotated[Services, Depends(get_services)],
) -> BanEnforcement:
    return services.bans


def get_device(request: Request) -> DeviceFingerprint:
    return device_from_user_agent(request.headers.get("user-agent"))


async def get_current_session(
    auth: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> Session:
    """Fresh store lookup on every request; revoked and expired look the same."""
    if auth is None or not auth.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    session = await session_manager.resolve(auth.credentials)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


def require_admin(
    session: Annotated[Session, Depends(get_current_session)],
) -> Session:
    # authorization reads the session's role snapshot, not the user record
    if ROLE_ADMIN not in session.roles:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="admin role required"
        )
    return session
