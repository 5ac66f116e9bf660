from __future__ import annotations

import functools
from typing import Any, Callable, TypeVar

import jwt
from flask import current_app, g, request

from jobgenie.utils.errors import ApiError


_T = TypeVar("_T", bound=Callable[..., Any])


def _decode_token(token: str) -> dict[str, Any]:
    cfg = current_app.config["CFG"]
    try:
        return jwt.decode(token, cfg.JWT_SECRET, algorithms=["HS256"])
    except jwt.ExpiredSignatureError as e:
        raise ApiError("AUTH_INVALID", "Token expired", status=401) from e
    except jwt.InvalidTokenError as e:
        raise ApiError("AUTH_INVALID", "Invalid authentication token", status=401) from e


def _bearer_token() -> str:
    authz = str(request.headers.get("Authorization") or "").strip()
    if authz.lower().startswith("bearer "):
        return authz.split(" ", 1)[1].strip()
    return str(request.cookies.get("access_token") or "").strip()


def get_current_user() -> dict[str, str]:
    """Identity from the bearer token. Account state is checked by the handlers that need it."""
    token = _bearer_token()
    if not token:
        raise ApiError("AUTH_INVALID", "Authentication token required", status=401)

    payload = _decode_token(token)
    sub = str(payload.get("sub") or "").strip()
    if not sub:
        raise ApiError("AUTH_INVALID", "Invalid token payload", status=401)

    user = {
        "id": sub,
        "email": str(payload.get("email") or "").strip().lower(),
        "role": str(payload.get("role") or "").strip().lower(),
    }
    g.current_user = user
    return user


def require_roles(roles: list[str]) -> Callable[[_T], _T]:
    allowed = {str(r or "").lower().strip() for r in (roles or []) if str(r or "").strip()}

    def _decorator(fn: _T) -> _T:
        @functools.wraps(fn)
        def _wrapped(*args, **kwargs):
            user = get_current_user()
            if allowed and user["role"] not in allowed:
                raise ApiError("FORBIDDEN", "Insufficient role", status=403, details={"required": sorted(allowed)})
            return fn(*args, **kwargs)

        return _wrapped  # type: ignore[return-value]

    return _decorator
