"""
Registration, employee-code login and the session view.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shuttle.api.deps import get_language, get_session, require
from shuttle.core.context import SessionContext, capabilities_for
from shuttle.core.exceptions import NotFound
from shuttle.core.security import create_access_token
from shuttle.db.session import get_db
from shuttle.schemas.user import UserCreate, UserLogin, UserResponse, ProfileUpdate, SessionResponse, Token
from shuttle.services.auth_service import register_user, login_auth, update_profile

router = APIRouter(tags=["Authentication"])


def _session_view(user: UserResponse, language: str) -> dict:
    caps = capabilities_for(user.role)
    return {
        "user": user,
        "language": language,
        "screens": list(caps.screens),
        "actions": sorted(caps.actions),
    }


@router.post("/auth/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a rider account."""
    return await register_user(db, user_data)


@router.post("/auth/login", response_model=Token)
async def login(
    login_data: UserLogin,
    language: str = Depends(get_language),
    db: AsyncSession = Depends(get_db),
):
    """Log in with an employee code and receive a session token."""
    user = await login_auth(db, login_data.employee_code)
    if user is None:
        raise NotFound("Employee code not found")
    token = create_access_token(data={"sub": user.id, "role": user.role})
    return Token(access_token=token, **_session_view(user, language))


@router.get("/session", response_model=SessionResponse)
async def current_session(ctx: SessionContext = Depends(get_session)):
    """Who am I, which screens may I open."""
    return SessionResponse(**_session_view(ctx.user, ctx.language))


@router.patch("/session/profile", response_model=UserResponse)
async def edit_profile(
    changes: ProfileUpdate,
    ctx: SessionContext = Depends(require("edit_profile")),
    db: AsyncSession = Depends(get_db),
):
    return await update_profile(db, ctx.user.id, changes)
