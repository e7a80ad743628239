from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Literal

import jwt
from passlib.context import CryptContext

from app.core.config import Settings
from app.core.errors import ApiError

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

TokenType = Literal["access", "refresh"]
TOKEN_SCOPE = "api_access"


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


@dataclass(frozen=True)
class DecodedToken:
    """Verified JWT claims.

    Only the standard claims and the ``tokenType`` discriminator are typed;
    anything else the issuer put in the payload is reachable through
    :meth:`get` and :attr:`claims`, untouched.
    """

    claims: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.claims.get(key, default)

    @property
    def exp(self) -> int | None:
        value = self.claims.get("exp")
        return int(value) if isinstance(value, (int, float)) else None

    @property
    def iat(self) -> int | None:
        value = self.claims.get("iat")
        return int(value) if isinstance(value, (int, float)) else None

    @property
    def token_type(self) -> str | None:
        value = self.claims.get("tokenType")
        return value if isinstance(value, str) else None

    @property
    def subject(self) -> str | None:
        value = self.claims.get("sub")
        return value if isinstance(value, str) else None

    @property
    def issuer(self) -> str | None:
        return self.claims.get("iss")

    @property
    def audience(self) -> str | list[str] | None:
        return self.claims.get("aud")

    @property
    def jwt_id(self) -> str | None:
        return self.claims.get("jti")


def create_token(
    *,
    payload: dict[str, Any],
    settings: Settings,
    expires_delta: timedelta,
) -> str:
    now = datetime.now(tz=timezone.utc)
    claims: dict[str, Any] = {**payload, "iat": now, "exp": now + expires_delta}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def create_access_token(
    *,
    subject: str,
    settings: Settings,
    extra_claims: dict[str, Any] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    payload: dict[str, Any] = {**(extra_claims or {}), "sub": subject, "tokenType": "access"}
    return create_token(
        payload=payload,
        settings=settings,
        expires_delta=expires_delta or timedelta(minutes=settings.access_token_expire_minutes),
    )


def create_refresh_token(
    *,
    subject: str,
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> str:
    return create_token(
        payload={"sub": subject, "tokenType": "refresh"},
        settings=settings,
        expires_delta=expires_delta or timedelta(days=settings.refresh_token_expire_days),
    )


def create_token_pair(
    *, subject: str, settings: Settings, extra_claims: dict[str, Any] | None = None
) -> dict[str, Any]:
    return {
        "access_token": create_access_token(
            subject=subject, settings=settings, extra_claims=extra_claims
        ),
        "refresh_token": create_refresh_token(subject=subject, settings=settings),
        "token_type": "bearer",
        "expires_in": settings.access_token_expire_minutes * 60,
        "scope": TOKEN_SCOPE,
    }


def decode_token(token: str, settings: Settings) -> DecodedToken:
    """Verify signature and expiry, mapping each failure to its own 401 message."""
    if not token or not token.strip():
        raise ApiError.unauthorized("Token is required")

    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            options={"require": ["exp"], "verify_aud": False},
        )
    except jwt.ExpiredSignatureError as e:
        raise ApiError.unauthorized("Token has expired") from e
    except jwt.ImmatureSignatureError as e:
        raise ApiError.unauthorized("Token not active yet") from e
    except jwt.InvalidSignatureError as e:
        raise ApiError.unauthorized("Invalid token") from e
    except jwt.DecodeError as e:
        raise ApiError.unauthorized("Malformed token") from e
    except jwt.PyJWTError as e:
        raise ApiError.unauthorized("Invalid token") from e

    return DecodedToken(claims=payload)


def decode_typed_token(token: str, settings: Settings, expected: TokenType) -> DecodedToken:
    decoded = decode_token(token, settings)
    if decoded.token_type != expected:
        raise ApiError.unauthorized(f"Invalid token type - {expected} token required")
    return decoded


def seconds_until_expiry(decoded: DecodedToken, *, now: datetime | None = None) -> int | None:
    if decoded.exp is None:
        return None
    now = now or datetime.now(tz=timezone.utc)
    return decoded.exp - int(now.timestamp())
