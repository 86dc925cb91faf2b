"""
Auth Service
Signup, login and demo login. Every path leaves the account with its
role profile in place.
"""

from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.config import settings
from portal.core.exceptions import Forbidden, Unauthorized, ValidationError
from portal.core.security import Role, get_password_hash, verify_password
from portal.models.user import User
from portal.services.profile_service import ProfileService

logger = structlog.get_logger(__name__)

# Roles with a demo account; admin has none
DEMO_NAMES = {
    Role.STUDENT.value: "Demo Student",
    Role.COMPANY.value: "Demo Company",
}


class AuthService:
    """Account creation and credential checks."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.profiles = ProfileService(db)

    async def _get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def _create_user(self, name: str, email: str, password: str, role: str) -> User:
        email = email.strip().lower()
        if await self._get_by_email(email) is not None:
            raise ValidationError("An account with this email already exists")

        user = User(
            email=email,
            name=name.strip(),
            password_hash=get_password_hash(password),
            role=role,
        )
        self.db.add(user)
        await self.db.flush()
        return user

    async def _ensure_profile(self, user: User, company_name: str = None, industry: str = "") -> None:
        if user.role == Role.STUDENT.value:
            await self.profiles.ensure_student_profile(user.id)
        elif user.role == Role.COMPANY.value:
            await self.profiles.ensure_company_profile(user.id, company_name or user.name, industry)

    async def signup_student(self, name: str, email: str, password: str) -> User:
        user = await self._create_user(name, email, password, Role.STUDENT.value)
        await self._ensure_profile(user)
        await self.db.commit()
        logger.info("student_signed_up", user_id=str(user.id))
        return user

    async def signup_company(
        self, name: str, email: str, password: str, company_name: str, industry: str = ""
    ) -> User:
        user = await self._create_user(name, email, password, Role.COMPANY.value)
        await self._ensure_profile(user, company_name, industry or "")
        await self.db.commit()
        logger.info("company_signed_up", user_id=str(user.id), company_name=company_name)
        return user

    async def login(self, email: str, password: str, role: str) -> User:
        """
        Check credentials for the requested role.

        A correct password for an account of another role is rejected the
        same way as a wrong password.
        """
        user = await self._get_by_email(email)
        if user is None or not verify_password(password, user.password_hash) or user.role != role:
            logger.info("login_failed", email=email, role=role)
            raise Unauthorized("Incorrect email or password")

        if not user.is_active:
            raise Forbidden("User account is inactive")

        await self._ensure_profile(user)
        await self.db.commit()
        logger.info("user_logged_in", user_id=str(user.id), role=role)
        return user

    async def demo_login(self, role: str, email: Optional[str] = None) -> User:
        """
        Find-or-create the demo account for a role and flag it as demo.

        Demo users browse everything their role can see but every mutating
        route refuses them.
        """
        if role not in DEMO_NAMES:
            raise Forbidden("Demo login is not available for this role")

        email = (email or f"demo.{role}@example.com").strip().lower()
        user = await self._get_by_email(email)

        if user is not None and user.role != role:
            raise ValidationError("Email is registered with a different role")

        if user is None:
            user = User(
                email=email,
                name=DEMO_NAMES[role],
                password_hash=get_password_hash(settings.DEMO_PASSWORD),
                role=role,
                is_demo=True,
            )
            self.db.add(user)
            await self.db.flush()
            logger.info("demo_user_created", user_id=str(user.id), role=role)
        elif not user.is_demo:
            raise Forbidden("Not a demo account")

        await self._ensure_profile(user)
        await self.db.commit()
        return user
