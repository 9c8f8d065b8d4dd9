"""Bearer-token seam.

Token issuance and user storage live outside the core; this module only signs
and verifies HS256 tokens with the app ``SECRET_KEY`` and exposes decorators
that put the principal on ``flask.g``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Iterable, Optional

import jwt
from flask import current_app, g, request

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError


@dataclass(frozen=True)
class Principal:
    user_id: int
    role: Role


def issue_token(
    *,
    user_id: int,
    role: Role,
    secret_key: str,
    ttl_minutes: int = 60,
    algorithm: str = "HS256",
) -> str:
    expires = datetime.now(timezone.utc) + timedelta(minutes=int(ttl_minutes))
    payload = {"sub": str(user_id), "role": role.value, "exp": expires}
    return jwt.encode(payload, secret_key, algorithm=algorithm)


def decode_token(token: str, *, secret_key: str, algorithm: str = "HS256") -> Principal:
    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired", reason="token_expired") from None
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token", reason="invalid_token") from None

    try:
        return Principal(user_id=int(payload["sub"]), role=Role(payload["role"]))
    except (KeyError, ValueError):
        raise AuthenticationError("Invalid token", reason="invalid_token") from None


def _bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    token = header.split(" ", 1)[1].strip()
    if not token or token.lower() in {"null", "undefined"}:
        return None
    return token


def current_principal() -> Optional[Principal]:
    return getattr(g, "principal", None)


def roles_required(roles: Iterable[Role] = ()):
    """Require a valid bearer token; an empty ``roles`` accepts any role."""

    allowed = frozenset(roles)

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            token = _bearer_token()
            if not token:
                raise AuthenticationError("Authentication required")

            principal = decode_token(
                token,
                secret_key=current_app.config["SECRET_KEY"],
                algorithm=current_app.config.get("JWT_ALGORITHM", "HS256"),
            )
            if allowed and principal.role not in allowed:
                raise AuthorizationError("Permission denied")

            g.principal = principal
            return view(*args, **kwargs)

        return wrapper

    return decorator


token_required = roles_required()
