# schemas/auth.py
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

from odesa.models.user import SubscriptionInfo, User


class RegisterSchema(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    username: Optional[str] = Field(None, max_length=50)
    referralCode: Optional[str] = None


class LoginSchema(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ForgotPasswordSchema(BaseModel):
    email: EmailStr


class ResetPasswordSchema(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)


class UserOut(BaseModel):
    """Public view of an account; secrets never leave the server."""
    id: str
    email: str
    username: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    profileImageUrl: Optional[str] = None
    role: str
    isEmailVerified: bool = False
    credits: float = 0
    subscription: Optional[SubscriptionInfo] = None
    referralCode: Optional[str] = None
    lastLoginAt: Optional[datetime] = None
    createdAt: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(**user.model_dump(exclude={"passwordHash", "resetToken", "resetTokenExpiry"}))


class AuthResponse(BaseModel):
    user: UserOut
    token: str
