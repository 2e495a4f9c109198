"""Authentication routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from estates.api.deps import get_current_user
from estates.core.auth import create_access_token
from estates.core.clock import utcnow
from estates.core.password import verify_password
from estates.persistence.database import get_db
from estates.persistence.models.user import User
from estates.persistence.repositories.user_repository import UserRepository

router = APIRouter()


class LoginRequest(BaseModel):
    """Login request."""

    email: str
    password: str


class LoginResponse(BaseModel):
    """Login response."""

    access_token: str
    token_type: str = "bearer"
    role: str
    email: str
    name: str


class UserInfoResponse(BaseModel):
    """Current user info response."""

    id: int
    name: str
    email: str
    role: str
    is_active: bool

    class Config:
        from_attributes = True


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> LoginResponse:
    """Login endpoint for the admin dashboard.

    Args:
        login_data: Login credentials
        db: Database session

    Returns:
        JWT access token
    """
    user_repo = UserRepository(db)

    user = await user_repo.get_by_email(login_data.email)
    if not user or not verify_password(login_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated",
        )

    user.last_login = utcnow()
    await user_repo.commit()

    # sub must be a string for JWT compatibility
    access_token = create_access_token(data={"sub": str(user.id)})

    return LoginResponse(
        access_token=access_token,
        role=user.role,
        email=user.email,
        name=user.name,
    )


@router.get("/me", response_model=UserInfoResponse)
async def get_current_user_info(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserInfoResponse:
    """Get current authenticated user information."""
    return UserInfoResponse.model_validate(current_user)
