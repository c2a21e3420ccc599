"""User service for registration, authentication and administration."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import NotFoundError, ValidationFailedError
from storefront.core.security import get_password_hash, verify_password
from storefront.models.user import User
from storefront.schemas.user import UserRegister, UserUpdate


class UserService:
    """Service class for user operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> User | None:
        """Get user by email."""
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: UUID) -> User | None:
        """Get user by ID."""
        result = await self.db.execute(select(User).where(User.user_id == user_id))
        return result.scalar_one_or_none()

    async def get_all(self, skip: int = 0, limit: int = 100) -> tuple[list[User], int]:
        count_result = await self.db.execute(select(func.count(User.user_id)))
        total = count_result.scalar_one()

        result = await self.db.execute(
            select(User).order_by(User.created_at.desc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all()), total

    async def create_user(self, user_data: UserRegister) -> User:
        """Create a new customer account.

        Args:
            user_data: User registration data

        Returns:
            Created user

        Raises:
            ValidationFailedError: If email already exists
        """
        existing = await self.get_by_email(user_data.email)
        if existing:
            raise ValidationFailedError("Email already registered")

        user = User(
            email=user_data.email.lower(),
            password_hash=get_password_hash(user_data.password),
            name=user_data.name,
            cpf=user_data.cpf,
            phone=user_data.phone,
            status="active",
            is_admin=False,
        )

        try:
            self.db.add(user)
            await self.db.commit()
            return user
        except IntegrityError:
            await self.db.rollback()
            raise ValidationFailedError("Email already registered")

    async def authenticate(self, email: str, password: str) -> User | None:
        """Authenticate user by email and password.

        Returns:
            User if authentication successful, None otherwise
        """
        user = await self.get_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.password_hash):
            return None
        if user.status != "active":
            return None
        return user

    async def update(self, user_id: UUID, user_data: UserUpdate) -> User:
        user = await self.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")

        for field, value in user_data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(user, field, value)

        await self.db.commit()
        return user
