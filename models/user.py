from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator
from sqlalchemy import Column, Integer, DateTime, String, Boolean, Float, CheckConstraint
from sqlalchemy import Enum as SQLEnum

from enums.role import Role
from models.base import Base


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    phone = Column(String, nullable=True)
    password_hash = Column(String, nullable=False)
    role = Column(SQLEnum(Role), nullable=False, default=Role.USER)
    registered_at = Column(DateTime, default=datetime.now)

    # Account verification (OTP)
    account_verified = Column(Boolean, nullable=False, default=False)
    verification_code = Column(String(6), nullable=True)
    verification_code_expires_at = Column(DateTime, nullable=True)

    # Brute-force protection
    login_attempts = Column(Integer, nullable=False, default=0)
    lock_until = Column(DateTime, nullable=True)
    last_login_at = Column(DateTime, nullable=True)

    # Session and password recovery tokens, stored as sha256 hex digests
    refresh_token_hash = Column(String(64), nullable=True)
    reset_password_token_hash = Column(String(64), nullable=True, index=True)
    reset_password_expires_at = Column(DateTime, nullable=True)

    # Loyalty
    reward_points = Column(Float, nullable=False, default=0.0)

    __table_args__ = (
        CheckConstraint('login_attempts >= 0', name='check_login_attempts_positive'),
        CheckConstraint('reward_points >= 0', name='check_reward_points_positive'),
    )

    def is_locked(self) -> bool:
        return self.lock_until is not None and self.lock_until > datetime.now()


class UserDTO(BaseModel):
    id: int | None = None
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    role: Role | None = None
    registered_at: datetime | None = None
    account_verified: bool | None = None
    last_login_at: datetime | None = None
    reward_points: float | None = None


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str
    phone: str | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class VerifyOtpRequest(BaseModel):
    email: EmailStr
    otp: str = Field(min_length=6, max_length=6)


class ResendOtpRequest(BaseModel):
    email: EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenDTO(BaseModel):
    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"
    user: UserDTO


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    new_password: str


class ProfileUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    phone: str | None = None


class PasswordUpdateRequest(BaseModel):
    current_password: str
    new_password: str


class RoleUpdateRequest(BaseModel):
    role: Role
