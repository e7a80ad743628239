from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response
from fastapi.security import OAuth2PasswordRequestForm

from app.api.deps import (
    AccessUser,
    AnyTokenUser,
    AuthContext,
    RefreshUser,
    authenticate_user,
    get_settings,
)
from app.core.config import Settings
from app.core.errors import ApiError
from app.core.security import create_token_pair
from app.schemas.auth import TokenInfo, TokenPair

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")


def _no_store(response: Response) -> None:
    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"


def _token_info(ctx: AuthContext) -> TokenInfo:
    return TokenInfo(
        token_type=ctx.token_type,
        subject=ctx.subject,
        expires_at=ctx.decoded.exp,
        claims=ctx.decoded.claims,
    )


@router.post("/token", response_model=TokenPair)
def login_for_token_pair(
    response: Response,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TokenPair:
    user = authenticate_user(
        username=form_data.username, password=form_data.password, settings=settings
    )
    if not user:
        logger.warning("Failed login for %r", form_data.username)
        raise ApiError.unauthorized("Incorrect username or password")

    _no_store(response)
    return TokenPair(**create_token_pair(subject=user.username, settings=settings))


@router.post("/refresh", response_model=TokenPair)
def refresh_token_pair(
    ctx: RefreshUser,
    response: Response,
    settings: Annotated[Settings, Depends(get_settings)],
) -> TokenPair:
    if not ctx.subject:
        raise ApiError.unauthorized("Invalid token")
    _no_store(response)
    return TokenPair(**create_token_pair(subject=ctx.subject, settings=settings))


@router.get("/me", response_model=TokenInfo)
def read_token_me(ctx: AccessUser) -> TokenInfo:
    return _token_info(ctx)


@router.get("/verify", response_model=TokenInfo)
def verify_any_token(ctx: AnyTokenUser) -> TokenInfo:
    return _token_info(ctx)
