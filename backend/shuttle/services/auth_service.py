"""
Rider registration, employee-code login and profile edits.

Two employee codes are reserved: they never touch the users table and map
to fixed admin and driver identities.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shuttle.core.config import get_settings
from shuttle.core.exceptions import AlreadyRegistered, NotFound, PersistenceFailure, ValidationError
from shuttle.core.logging import get_logger
from shuttle.core.metrics import record_store_failure
from shuttle.models.user import User
from shuttle.schemas.user import UserCreate, UserResponse, ProfileUpdate

logger = get_logger(__name__)


def reserved_identities() -> dict[str, UserResponse]:
    settings = get_settings()
    return {
        settings.ADMIN_EMPLOYEE_CODE: UserResponse(
            id=settings.ADMIN_EMPLOYEE_CODE,
            employee_code=settings.ADMIN_EMPLOYEE_CODE,
            name="Admin System",
            department="IT",
            phone="0000",
            role="admin",
        ),
        settings.DRIVER_EMPLOYEE_CODE: UserResponse(
            id=settings.DRIVER_EMPLOYEE_CODE,
            employee_code=settings.DRIVER_EMPLOYEE_CODE,
            name="Driver Staff",
            department="Transport",
            phone="081-234-5678",
            role="driver",
        ),
    }


async def register_user(db: AsyncSession, user_data: UserCreate) -> User:
    """
    Register a new rider.
    Raises 409 if the employee code is taken or reserved.
    """
    if user_data.employee_code in reserved_identities():
        raise AlreadyRegistered("Employee code is reserved")

    result = await db.execute(select(User.id).where(User.employee_code == user_data.employee_code))
    if result.first() is not None:
        logger.warning("registration_failed", reason="code_exists", employee_code=user_data.employee_code)
        raise AlreadyRegistered("Employee code already registered")

    user = User(
        employee_code=user_data.employee_code,
        name=user_data.name,
        department=user_data.department,
        phone=user_data.phone,
        role="rider",
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same code
        await db.rollback()
        raise AlreadyRegistered("Employee code already registered") from None
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("store_write_failed", operation="register_user", error=str(e))
        record_store_failure("register_user")
        raise PersistenceFailure("Could not register, please try again") from e

    logger.info("user_registered", user_id=user.id, employee_code=user.employee_code)
    return user


async def login_auth(db: AsyncSession, employee_code: str) -> Optional[UserResponse]:
    """Look up an employee code. Returns None when unknown or storage is down."""
    employee_code = employee_code.strip()
    if not employee_code:
        raise ValidationError("Employee code is required")

    reserved = reserved_identities().get(employee_code)
    if reserved is not None:
        logger.info("user_logged_in", user_id=reserved.id, role=reserved.role, reserved=True)
        return reserved

    try:
        result = await db.execute(select(User).where(User.employee_code == employee_code))
        user = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error("store_read_failed", operation="login_auth", error=str(e))
        record_store_failure("login_auth")
        await db.rollback()
        return None

    if user is None:
        logger.warning("login_failed", employee_code=employee_code)
        return None

    logger.info("user_logged_in", user_id=user.id, role=user.role)
    return UserResponse.model_validate(user)


async def resolve_identity(db: AsyncSession, user_id: str) -> Optional[UserResponse]:
    """Current identity behind a session token."""
    for identity in reserved_identities().values():
        if identity.id == user_id:
            return identity

    try:
        user = await db.get(User, user_id)
    except SQLAlchemyError as e:
        logger.error("store_read_failed", operation="resolve_identity", error=str(e))
        record_store_failure("resolve_identity")
        await db.rollback()
        return None
    return UserResponse.model_validate(user) if user else None


async def update_profile(db: AsyncSession, user_id: str, changes: ProfileUpdate) -> UserResponse:
    """Riders may change name, department and phone; nothing else."""
    fields = changes.model_dump(exclude_none=True)
    try:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        for field, value in fields.items():
            setattr(user, field, value)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("store_write_failed", operation="update_profile", user_id=user_id, error=str(e))
        record_store_failure("update_profile")
        await db.rollback()
        raise PersistenceFailure("Could not update profile, please try again") from e

    logger.info("profile_updated", user_id=user_id, fields=sorted(fields))
    return UserResponse.model_validate(user)
