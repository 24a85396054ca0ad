from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.core.database import is_storable_id
from jobboard.core.exceptions import FieldErrors, RecordInvalid
from jobboard.core.logging_config import get_logger
from jobboard.core.security import hash_password, validate_password_strength, verify_password
from jobboard.models import User
from jobboard.schemas.user import UserCreate

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """Sign-up, credential checks and admin flag management."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: int) -> Optional[User]:
        if not is_storable_id(user_id):
            return None
        return await self.db.get(User, user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def list_users(self) -> List[User]:
        result = await self.db.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    async def sign_up(self, data: UserCreate) -> User:
        """
        Create an account. New accounts are never admins.

        Raises:
            RecordInvalid: Duplicate e-mail or weak password
        """
        errors: FieldErrors = {}

        if await self.get_by_email(data.email) is not None:
            errors["email"] = ["has already been taken"]

        strong, problem = validate_password_strength(data.password)
        if not strong:
            errors["password"] = [problem]

        if errors:
            raise RecordInvalid(errors)

        user = User(
            email=normalize_email(data.email),
            hashed_password=hash_password(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            admin=False,
        )
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError:
            # Another sign-up took the address between the check and the insert
            await self.db.rollback()
            raise RecordInvalid({"email": ["has already been taken"]})

        logger.info("User signed up", user_id=user.id, email=user.email)
        return user

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """The user for these credentials, or None. Same result for unknown e-mail and bad password."""
        user = await self.get_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            logger.warning("Sign-in failed", email=normalize_email(email))
            return None
        return user

    async def set_admin(self, user: User, admin: bool) -> User:
        user.admin = admin
        await self.db.flush()
        logger.info("Admin flag changed", user_id=user.id, admin=admin)
        return user
