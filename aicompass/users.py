from __future__ import annotations

from fastapi import Depends, Header, HTTPException, status
from pydantic import BaseModel

from aicompass.config import Config, get_config

ANONYMOUS_USER_ID = "anonymous"


class User(BaseModel):
    user_id: str


async def get_current_user(
    x_user_id: str | None = Header(default=None),
    authorization: str | None = Header(default=None),
    config: Config = Depends(get_config),
) -> User:
    """Resolve the user forwarded by the identity provider in front of us."""
    if config.api_token and authorization != f"Bearer {config.api_token}":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API token")

    if x_user_id:
        return User(user_id=x_user_id)
    if config.allow_anonymous:
        return User(user_id=ANONYMOUS_USER_ID)
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing user identity")
