"""Session Tokens: signed bearer tokens carrying the caller's identity claims.

Invariants:
    - Tokens are HMAC-signed JWTs; any decoding failure is UnauthorizedError,
      including a validly signed token without exp or sub
    - Claims: sub (user id), role, schoolId, iat, exp
    - Pure functions: secret, lifetime and clock are parameters, no settings
      lookup here (api/guards.session_token_for binds them to settings)

Design Decisions:
    - python-jose for encode/decode: same library the other FastAPI services use
    - Role and school in the claims are hints only; the guard re-reads the user row
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from schoolhub.core.domain_types import SchoolId, UserId
from schoolhub.core.errors import ErrorContext, UnauthorizedError


@dataclass(frozen=True)
class SessionClaims:
    user_id: UserId
    role: str
    school_id: SchoolId
    expires_at: datetime


def issue_session_token(
    user_id: str,
    role: str,
    school_id: str,
    *,
    secret: str,
    algorithm: str = "HS256",
    ttl: timedelta,
    now: datetime | None = None,
) -> str:
    """Sign a session token for the given user."""
    issued_at = now or datetime.now(timezone.utc)
    claims = {
        "sub": user_id,
        "role": role,
        "schoolId": school_id,
        "iat": issued_at,
        "exp": issued_at + ttl,
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


def read_session_token(
    token: str, *, secret: str, algorithms: list[str],
) -> SessionClaims:
    """Verify signature and expiry, return the claims or raise UnauthorizedError."""
    try:
        payload = jwt.decode(
            token, secret, algorithms=algorithms,
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise UnauthorizedError(
            ErrorContext(debug_info={"reason": str(e)}),
        ) from e

    user_id = payload.get("sub")
    school_id = payload.get("schoolId")
    if not user_id or not school_id:
        raise UnauthorizedError(
            ErrorContext(debug_info={"reason": "missing identity claims"}),
        )
    return SessionClaims(
        user_id=UserId(user_id),
        role=payload.get("role", ""),
        school_id=SchoolId(school_id),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )
