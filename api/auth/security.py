"""
Auth security helpers.
"""

from __future__ import annotations

import os
import time
from typing import Any

import jwt


class AuthSecurityError(RuntimeError):
    pass


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return os.environ.get("JWT_SECRET", "dev-change-this-secret").strip() or "dev-change-this-secret"


def jwt_algorithm() -> str:
    return os.environ.get("JWT_ALG", "HS256").strip() or "HS256"


def access_token_expire_minutes() -> int:
    return _env_int("ACCESS_TOKEN_EXPIRE_MIN", 60)


def now_epoch_s() -> int:
    return int(time.time())


def build_access_token(*, subject: str, email: str | None = None, role: str = "user") -> str:
    issued_at = now_epoch_s()
    expires_at = issued_at + (access_token_expire_minutes() * 60)

    payload: dict[str, Any] = {
        "sub": subject,
        "role": role,
        "type": "access",
        "iat": issued_at,
        "exp": expires_at,
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_access_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Unauthorized: No token provided")

    try:
        payload = jwt.decode(raw, jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.ExpiredSignatureError as exc:
        raise AuthSecurityError("Unauthorized: Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Unauthorized: Invalid token") from exc

    token_type = str(payload.get("type") or "access").strip().lower()
    if token_type != "access":
        raise AuthSecurityError("Unauthorized: Token is not an access token")

    subject = str(payload.get("sub") or "").strip()
    if not subject:
        raise AuthSecurityError("Unauthorized: Token has no subject")

    return payload
