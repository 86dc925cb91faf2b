"""Authentication endpoints."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.deps import get_current_user, get_db
from portal.core.security import create_access_token
from portal.models.user import User
from portal.schemas.auth import (
    CompanySignupRequest,
    DemoLoginRequest,
    LoginRequest,
    StudentSignupRequest,
    TokenResponse,
    UserResponse,
)
from portal.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter()


def _token_response(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(user),
        token_type="bearer",
        user=UserResponse.model_validate(user),
    )


@router.post("/student/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup_student(request: StudentSignupRequest, db: AsyncSession = Depends(get_db)):
    """Register a student account; the student profile is created immediately."""
    user = await AuthService(db).signup_student(request.name, request.email, request.password)
    return _token_response(user)


@router.post("/company/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup_company(request: CompanySignupRequest, db: AsyncSession = Depends(get_db)):
    """Register a company account together with its company profile."""
    user = await AuthService(db).signup_company(
        request.name,
        request.email,
        request.password,
        request.company_name,
        request.industry or "",
    )
    return _token_response(user)


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, db: AsyncSession = Depends(get_db)):
    """
    Login with email, password and role.

    Admins use the same endpoint with `role: "admin"`.
    """
    user = await AuthService(db).login(request.email, request.password, request.role)
    return _token_response(user)


@router.post("/demo", response_model=TokenResponse)
async def demo_login(request: DemoLoginRequest, db: AsyncSession = Depends(get_db)):
    """
    Login as the demo account of a role.

    Demo tokens can read everything their role can but are refused by
    every mutating endpoint.
    """
    user = await AuthService(db).demo_login(request.role, request.email)
    return _token_response(user)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return current_user
