from typing import Annotated

from fastapi import APIRouter, Depends

from sellpoint_auth.application.account_deletion import (
    delete_account,
    send_delete_account_code,
)
from sellpoint_auth.application.email_verification import (
    confirm_email,
    send_email_verification_code,
)
from sellpoint_auth.domain.entities import Session
from sellpoint_auth.presentation.dependencies import get_current_session, get_services
from sellpoint_auth.schemas.requests import CodeIn
from sellpoint_auth.schemas.responses import AcceptedOut, OkOut
from sellpoint_auth.wiring import Services

router = APIRouter(prefix="/users/me", tags=["Account"])


@router.post("/email/code", status_code=202, response_model=AcceptedOut)
async def post_email_code(
    session: Annotated[Session, Depends(get_current_session)],
    services: Annotated[Services, Depends(get_services)],
):
    await send_email_verification_code(
        services.users, services.email_verifier, session.user_id
    )
    return AcceptedOut()


@router.post("/email/verify", response_model=OkOut)
async def post_email_verify(
    body: CodeIn,
    session: Annotated[Session, Depends(get_current_session)],
    services: Annotated[Services, Depends(get_services)],
):
    await confirm_email(
        services.users, services.email_verifier, session.user_id, body.code
    )
    return OkOut()


@router.post("/delete/code", status_code=202, response_model=AcceptedOut)
async def post_delete_code(
    session: Annotated[Session, Depends(get_current_session)],
    services: Annotated[Services, Depends(get_services)],
):
    await send_delete_account_code(
        services.users, services.delete_account_verifier, session.user_id
    )
    return AcceptedOut()


@router.post("/delete", response_model=OkOut)
async def post_delete_account(
    body: CodeIn,
    session: Annotated[Session, Depends(get_current_session)],
    services: Annotated[Services, Depends(get_services)],
):
    await delete_account(
        users=services.users,
        verifier=services.delete_account_verifier,
        session_manager=services.session_manager,
        purge=services.purge,
        user_id=session.user_id,
        code=body.code,
    )
    return OkOut()
