"""Request Guards: the authenticate → authorize steps shared by every route.

Invariants:
    - get_current_session raises UnauthorizedError for missing, invalid, expired
      tokens and for users that no longer exist or are inactive
    - require_roles(...) raises ForbiddenError when the caller's role is outside
      the allow-list; it always authenticates first
    - Guards are FastAPI dependencies, so they run before the request body is
      validated: 401/403 win over 400

Design Decisions:
    - Role and school are re-read from the users row, not trusted from the token,
      so deactivation and role changes apply immediately
    - HTTPBearer(auto_error=False): a missing header reaches our own 401 envelope
      instead of FastAPI's default 403
    - The resolved caller is recorded on request.state for the access log
"""

import logging
from datetime import timedelta

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.config import Settings, get_settings
from schoolhub.core.domain_types import SchoolId, SessionUser, UserId
from schoolhub.core.errors import ErrorContext, ForbiddenError, UnauthorizedError
from schoolhub.core.session_tokens import issue_session_token, read_session_token
from schoolhub.infrastructure.database import get_db
from schoolhub.models import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_session(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> SessionUser:
    """Session Provider: resolve the caller or fail with 401."""
    if credentials is None:
        raise UnauthorizedError()
    claims = read_session_token(
        credentials.credentials,
        secret=settings.session_secret_key,
        algorithms=[settings.session_algorithm],
    )
    user = await db.get(User, claims.user_id)
    if user is None or not user.is_active:
        raise UnauthorizedError(ErrorContext(user_id=claims.user_id))
    request.state.school_id = user.school_id
    request.state.user_id = user.id
    return SessionUser(
        id=UserId(user.id), role=user.role, school_id=SchoolId(user.school_id),
    )


def require_roles(*roles: str):
    """Dependency factory: authenticated caller whose role is in `roles`."""
    allowed = frozenset(roles)

    async def _guard(
        session: SessionUser = Depends(get_current_session),
    ) -> SessionUser:
        if not session.has_role(allowed):
            raise ForbiddenError(
                ErrorContext(user_id=session.id, school_id=session.school_id),
            )
        return session

    return _guard


async def require_admin(
    session: SessionUser = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
) -> SessionUser:
    """Mutations: caller must hold one of settings.admin_roles."""
    return await require_roles(*settings.admin_roles)(session)


def session_token_for(user: User, settings: Settings) -> str:
    """Sign a session token for `user` with the configured secret and lifetime."""
    return issue_session_token(
        user.id, user.role, user.school_id,
        secret=settings.session_secret_key,
        algorithm=settings.session_algorithm,
        ttl=timedelta(minutes=settings.session_ttl_minutes),
    )
