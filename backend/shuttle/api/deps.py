"""
Request dependencies: the per-request session context and the capability
gate every protected endpoint declares.
"""

from typing import Optional

from fastapi import Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shuttle.core.config import get_settings
from shuttle.core.context import SessionContext, resolve_language
from shuttle.core.exceptions import Forbidden, NotAuthenticated
from shuttle.core.logging import bind_session
from shuttle.core.security import get_current_user_id
from shuttle.db.session import get_db
from shuttle.services.auth_service import resolve_identity


def get_language(
    lang: Optional[str] = Query(None, description="th or en"),
    accept_language: Optional[str] = Header(None),
) -> str:
    return resolve_language(lang, accept_language, get_settings().DEFAULT_LANGUAGE)


async def get_session(
    user_id: str = Depends(get_current_user_id),
    language: str = Depends(get_language),
    db: AsyncSession = Depends(get_db),
) -> SessionContext:
    user = await resolve_identity(db, user_id)
    if user is None:
        raise NotAuthenticated("Session user no longer exists")
    bind_session(user.id, user.role)
    return SessionContext(user=user, language=language)


def require(action: str):
    """Dependency factory: the caller's role must allow `action`."""

    async def _check(ctx: SessionContext = Depends(get_session)) -> SessionContext:
        if not ctx.can(action):
            raise Forbidden(f"Role {ctx.role} may not {action.replace('_', ' ')}", action=action)
        return ctx

    return _check
