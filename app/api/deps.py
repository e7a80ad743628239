from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request, Response
from fastapi.security import OAuth2PasswordBearer

from app.clients.tomorrow import TomorrowClient
from app.core.config import Settings
from app.core.errors import ApiError
from app.core.security import (
    DecodedToken,
    TokenType,
    decode_token,
    decode_typed_token,
    seconds_until_expiry,
    verify_password,
)
from app.db.mongo import Database
from app.schemas.auth import User
from app.services.weather import WeatherService

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)

TOKEN_QUERY_PARAM = "token"
TOKEN_COOKIE = "token"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_weather_client(request: Request) -> TomorrowClient:
    return request.app.state.weather_client


def get_weather_service(
    client: Annotated[TomorrowClient, Depends(get_weather_client)],
) -> WeatherService:
    return WeatherService(client=client)


def get_database(request: Request) -> Database:
    return request.app.state.database


def authenticate_user(*, username: str, password: str, settings: Settings) -> User | None:
    if username != settings.admin_username:
        return None
    if not verify_password(password, settings.admin_password_hash):
        return None
    return User(username=username)


@dataclass(frozen=True)
class AuthContext:
    decoded: DecodedToken
    token: str
    token_type: str | None

    @property
    def subject(self) -> str | None:
        return self.decoded.subject


def get_request_token(
    request: Request,
    header_token: Annotated[str | None, Depends(oauth2_scheme)],
) -> str | None:
    """Authorization header first, then ``?token=``, then the ``token`` cookie."""
    if header_token:
        return header_token
    query_token = request.query_params.get(TOKEN_QUERY_PARAM)
    if query_token:
        return query_token
    cookie_token = request.cookies.get(TOKEN_COOKIE)
    if cookie_token:
        return cookie_token
    return None


def _attach(request: Request, decoded: DecodedToken, token: str) -> AuthContext:
    ctx = AuthContext(decoded=decoded, token=token, token_type=decoded.token_type)
    request.state.auth_user = decoded
    request.state.auth_token = token
    request.state.token_type = ctx.token_type
    return ctx


def _set_expiry_headers(response: Response, ctx: AuthContext, settings: Settings) -> None:
    remaining = seconds_until_expiry(ctx.decoded)
    if remaining is None or remaining > settings.token_expiry_warning_minutes * 60:
        return
    response.headers["X-Token-Expiry-Warning"] = "true"
    response.headers["X-Token-Expires-In"] = str(remaining)
    response.headers["X-Token-Type"] = ctx.token_type or "unknown"


def require_token(
    request: Request,
    token: Annotated[str | None, Depends(get_request_token)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthContext:
    if not token:
        raise ApiError.unauthorized("Authentication token required")
    return _attach(request, decode_token(token, settings), token)


def _require_typed(
    request: Request, token: str | None, settings: Settings, expected: TokenType
) -> AuthContext:
    if not token:
        raise ApiError.unauthorized(f"{expected.capitalize()} token required")
    return _attach(request, decode_typed_token(token, settings, expected), token)


def require_access_token(
    request: Request,
    response: Response,
    token: Annotated[str | None, Depends(get_request_token)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthContext:
    ctx = _require_typed(request, token, settings, "access")
    _set_expiry_headers(response, ctx, settings)
    return ctx


def require_refresh_token(
    request: Request,
    token: Annotated[str | None, Depends(get_request_token)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthContext:
    return _require_typed(request, token, settings, "refresh")


def optional_access_token(
    request: Request,
    token: Annotated[str | None, Depends(get_request_token)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthContext | None:
    if not token:
        return None
    try:
        return _attach(request, decode_typed_token(token, settings, "access"), token)
    except ApiError as e:
        logger.debug("Ignoring invalid optional token: %s", e.detail)
        return None


AnyTokenUser = Annotated[AuthContext, Depends(require_token)]
AccessUser = Annotated[AuthContext, Depends(require_access_token)]
RefreshUser = Annotated[AuthContext, Depends(require_refresh_token)]
OptionalUser = Annotated[AuthContext | None, Depends(optional_access_token)]
