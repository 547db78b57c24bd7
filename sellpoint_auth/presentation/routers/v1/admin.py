from functools import reduce
from operator import or_
from typing import Annotated

from fastapi import APIRouter, Depends

from sellpoint_auth.application.bans import BanEnforcement
from sellpoint_auth.application.roles import remove_user_role, set_user_role
from sellpoint_auth.domain.entities import BanScope, Session
from sellpoint_auth.presentation.dependencies import (
    get_ban_enforcement,
    get_services,
    require_admin,
)
from sellpoint_auth.schemas.requests import BanCreateIn
from sellpoint_auth.schemas.responses import BanOut, OkOut
from sellpoint_auth.wiring import Services

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/bans", status_code=201, response_model=BanOut)
async def post_ban(
    body: BanCreateIn,
    admin: Annotated[Session, Depends(require_admin)],
    bans: Annotated[BanEnforcement, Depends(get_ban_enforcement)],
):
    scope = reduce(or_, (BanScope[name.upper()] for name in body.scopes), BanScope.NONE)
    ban = await bans.ban(
        target_user_id=body.user_id,
        admin_id=admin.user_id,
        reason=body.reason,
        banned_until=body.banned_until,
        scope=scope,
    )
    return BanOut.from_ban(ban)


@router.delete("/bans/{ban_id}", response_model=OkOut)
async def delete_ban(
    ban_id: str,
    admin: Annotated[Session, Depends(require_admin)],
    bans: Annotated[BanEnforcement, Depends(get_ban_enforcement)],
):
    await bans.unban(ban_id, admin.user_id)
    return OkOut()


@router.get("/users/{user_id}/bans", response_model=list[BanOut])
async def get_user_bans(
    user_id: str,
    admin: Annotated[Session, Depends(require_admin)],
    bans: Annotated[BanEnforcement, Depends(get_ban_enforcement)],
):
    return [BanOut.from_ban(b) for b in await bans.list_for_user(user_id)]


@router.post("/users/{user_id}/roles/{role}", response_model=OkOut)
async def post_user_role(
    user_id: str,
    role: str,
    admin: Annotated[Session, Depends(require_admin)],
    services: Annotated[Services, Depends(get_services)],
):
    await set_user_role(services.users, services.session_manager, user_id, role)
    return OkOut()


@router.delete("/users/{user_id}/roles/{role}", response_model=OkOut)
async def delete_user_role(
    user_id: str,
    role: str,
    admin: Annotated[Session, Depends(require_admin)],
    services: Annotated[Services, Depends(get_services)],
):
    await remove_user_role(services.users, services.session_manager, user_id, role)
    return OkOut()
