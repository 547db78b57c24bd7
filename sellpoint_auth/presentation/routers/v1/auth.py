import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
from fastapi.websockets import WebSocketState

from sellpoint_auth.application.login import login
from sellpoint_auth.application.register import register
from sellpoint_auth.application.sessions import SessionManager
from sellpoint_auth.domain.entities import DeviceFingerprint, Session
from sellpoint_auth.presentation.dependencies import (
    get_current_session,
    get_device,
    get_services,
    get_session_manager,
)
from sellpoint_auth.schemas.requests import LoginIn, RegisterIn
from sellpoint_auth.schemas.responses import OkOut, RevokedOut, SessionOut, TokenOut
from sellpoint_auth.wiring import Services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

# websocket close code for a session that cannot be registered
INVALID_SESSION_CLOSE_CODE = 4404


@router.post("/login", response_model=TokenOut)
async def post_login(
    body: LoginIn,
    services: Annotated[Services, Depends(get_services)],
    device: Annotated[DeviceFingerprint, Depends(get_device)],
):
    token = await login(
        users=services.users,
        hasher=services.hasher,
        bans=services.bans,
        session_manager=services.session_manager,
        identifier=body.login,
        password=body.password,
        device=device,
    )
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid credentials"
        )
    return TokenOut(token=token)


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=TokenOut)
async def post_register(
    body: RegisterIn,
    services: Annotated[Services, Depends(get_services)],
    device: Annotated[DeviceFingerprint, Depends(get_device)],
):
    token = await register(
        users=services.users,
        hasher=services.hasher,
        session_manager=services.session_manager,
        email=body.email,
        password=body.password,
        device=device,
    )
    return TokenOut(token=token)


@router.post("/logout", response_model=OkOut)
async def post_logout(
    session: Annotated[Session, Depends(get_current_session)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
):
    await session_manager.revoke(session.id)
    return OkOut()


@router.get("/sessions", response_model=list[SessionOut])
async def get_sessions(
    session: Annotated[Session, Depends(get_current_session)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
):
    active = await session_manager.list_active(session.user_id)
    return [SessionOut.from_session(s, current_id=session.id) for s in active]


@router.delete("/sessions/{session_id}", response_model=OkOut)
async def delete_session(
    session_id: str,
    session: Annotated[Session, Depends(get_current_session)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
):
    await session_manager.revoke_owned(session_id, session.user_id)
    return OkOut()


@router.post("/sessions/revoke-all", response_model=RevokedOut)
async def post_revoke_all_sessions(
    session: Annotated[Session, Depends(get_current_session)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
):
    revoked = await session_manager.revoke_all_for_user(session.user_id, notify=True)
    return RevokedOut(revoked=len(revoked))


@router.websocket("/sessions/ws")
async def session_push_channel(websocket: WebSocket, session_id: str):
    """
    Clients keep this socket open to be told when their session is ended
    elsewhere (logout from another device, ban).
    """
    services: Services = websocket.app.state.services
    await websocket.accept()

    session = await services.session_manager.resolve(session_id)
    if session is None:
        await websocket.send_json(
            {"event": "Error", "message": "Session not found or revoked"}
        )
        await websocket.close(code=INVALID_SESSION_CLOSE_CODE)
        return

    services.connections.register(session.id, websocket)
    await websocket.send_json(
        {"event": "Registered", "message": "Session registered successfully"}
    )
    try:
        # a forced logout closes the socket from our side and ends the loop
        while websocket.application_state == WebSocketState.CONNECTED:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("push connection closed", extra={"session_id": session.id})
    finally:
        services.connections.unregister(session.id, websocket)
