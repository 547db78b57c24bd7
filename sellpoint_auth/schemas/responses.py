from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from sellpoint_auth.domain.entities import Ban, BanScope, Session


class AcceptedOut(BaseModel):
    status: Literal["accepted"] = "accepted"


class OkOut(BaseModel):
    status: Literal["ok"] = "ok"


class TokenOut(BaseModel):
    token: str = Field(..., description="Session token, sent back as a Bearer token")


class ResetRequestedOut(BaseModel):
    status: Literal["accepted"] = "accepted"
    reset_token: str


class AccessCodeOut(BaseModel):
    access_code: str


class RevokedOut(BaseModel):
    revoked: int


class SessionOut(BaseModel):
    id: str
    browser: str
    os: str
    device: str
    created_at: datetime
    expires_at: datetime
    roles: list[str]
    current: bool = False

    @classmethod
    def from_session(cls, session: Session, *, current_id: str | None = None) -> "SessionOut":
        return cls(
            id=session.id,
            browser=session.device.browser,
            os=session.device.os,
            device=session.device.device,
            created_at=session.created_at,
            expires_at=session.expires_at,
            roles=list(session.roles),
            current=session.id == current_id,
        )


class BanOut(BaseModel):
    id: str
    user_id: str
    admin_id: str
    reason: str
    banned_at: datetime
    banned_until: datetime | None
    scopes: list[str]

    @classmethod
    def from_ban(cls, ban: Ban) -> "BanOut":
        return cls(
            id=ban.id,
            user_id=ban.user_id,
            admin_id=ban.admin_id,
            reason=ban.reason,
            banned_at=ban.banned_at,
            banned_until=ban.banned_until,
            scopes=[
                flag.name.lower()
                for flag in (BanScope.COMMENTS, BanScope.ORDERS, BanScope.LOGIN, BanScope.MESSAGING)
                if flag in ban.scope
            ],
        )
