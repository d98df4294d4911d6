import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from ..auth import find_user_organization, get_current_user
from ..database import get_db
from ..models import User
from ..security_utils import (
    check_password_strength,
    create_jwt_token,
    hash_password_bcrypt,
    verify_password_bcrypt,
)
from ..shared.validators import validate_email, validate_phone

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


class RegisterRequest(BaseModel):
    email: str
    password: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role: Literal["nurse", "client"] = "nurse"

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)


class LoginRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role: str
    organization_id: Optional[int] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


def build_user_response(db: Session, user: User) -> UserResponse:
    organization = find_user_organization(db, user)
    return UserResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        phone=user.phone,
        role=user.role,
        organization_id=organization.id if organization else None,
    )


@router.post("/register", response_model=TokenResponse)
async def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account and return an access token"""
    strength = check_password_strength(data.password)
    if not strength["is_valid"]:
        raise HTTPException(status_code=400, detail="; ".join(strength["feedback"]))

    if db.query(User).filter(User.email == data.email).first():
        raise HTTPException(status_code=409, detail="An account with this email already exists")

    user = User(
        email=data.email,
        password_hash=hash_password_bcrypt(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        phone=data.phone,
        role=data.role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"👤 Registered user {user.id} ({user.role})")

    return TokenResponse(
        access_token=create_jwt_token({"sub": str(user.id)}),
        user=build_user_response(db, user),
    )


@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, db: Session = Depends(get_db)):
    email = (data.email or "").strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password_bcrypt(data.password, user.password_hash):
        logger.warning(f"⚠️ Failed login attempt for {email}")
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is disabled")

    return TokenResponse(
        access_token=create_jwt_token({"sub": str(user.id)}),
        user=build_user_response(db, user),
    )


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return build_user_response(db, current_user)
