from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status

from sellpoint_auth.application.password_reset import PasswordResetHandshake
from sellpoint_auth.domain.services import new_opaque_token
from sellpoint_auth.presentation.dependencies import get_password_reset
from sellpoint_auth.schemas.requests import (
    PasswordResetCommitIn,
    PasswordResetRequestIn,
    PasswordResetVerifyIn,
)
from sellpoint_auth.schemas.responses import AccessCodeOut, OkOut, ResetRequestedOut

router = APIRouter(prefix="/auth/password-reset", tags=["Password reset"])


@router.post("", status_code=202, response_model=ResetRequestedOut)
async def post_request_reset(
    body: PasswordResetRequestIn,
    background_tasks: BackgroundTasks,
    password_reset: Annotated[PasswordResetHandshake, Depends(get_password_reset)],
):
    # the mail goes out after the response is sent
    reset_token = await password_reset.request_reset(
        body.login, schedule=background_tasks.add_task
    )
    # unknown accounts get a token that can never verify, so both answers look alike
    return ResetRequestedOut(reset_token=reset_token or new_opaque_token())


@router.post("/verify", response_model=AccessCodeOut)
async def post_verify_code(
    body: PasswordResetVerifyIn,
    password_reset: Annotated[PasswordResetHandshake, Depends(get_password_reset)],
):
    access_code = await password_reset.verify_code(body.reset_token, body.code)
    if access_code is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid code")
    return AccessCodeOut(access_code=access_code)


@router.post("/commit", response_model=OkOut)
async def post_commit(
    body: PasswordResetCommitIn,
    password_reset: Annotated[PasswordResetHandshake, Depends(get_password_reset)],
):
    await password_reset.commit(body.new_password, body.access_code)
    return OkOut()
