# odesa/models/user.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ADMIN)

ACTIVE_SUBSCRIPTION_STATUSES = ("active", "trialing")
# Stripe will not bill these again and refuses to cancel them
TERMINAL_SUBSCRIPTION_STATUSES = ("canceled", "incomplete_expired")


class SubscriptionInfo(BaseModel):
    planId: str
    stripeSubscriptionId: Optional[str] = None
    status: str   # incomplete | active | trialing | past_due | canceled | incomplete_expired
    startDate: datetime
    endDate: Optional[datetime] = None
    canceledAt: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_SUBSCRIPTION_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_SUBSCRIPTION_STATUSES


class User(BaseModel):
    id: str
    email: str
    passwordHash: str
    username: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    profileImageUrl: Optional[str] = None

    # Auth / account
    role: str = ROLE_USER   # "user" | "admin"
    isEmailVerified: bool = False
    resetToken: Optional[str] = None
    resetTokenExpiry: Optional[datetime] = None
    lastLoginAt: Optional[datetime] = None

    # Billing
    credits: float = 0
    stripeCustomerId: Optional[str] = None
    subscription: Optional[SubscriptionInfo] = None

    # Referrals
    referralCode: Optional[str] = None
    referredBy: Optional[str] = None

    createdAt: datetime
    updatedAt: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
