# odesa/routes/auth.py
from fastapi import APIRouter, Depends, status

from odesa.middleware.rbac import get_auth_service, get_current_user
from odesa.models.user import User
from odesa.schemas.auth import (
    AuthResponse,
    ForgotPasswordSchema,
    LoginSchema,
    RegisterSchema,
    ResetPasswordSchema,
    UserOut,
)
from odesa.service.auth_service import AuthService

auth_router = APIRouter(tags=["Auth"])


# ------------------------
# Register / Login
# ------------------------
@auth_router.post("/register", status_code=status.HTTP_201_CREATED, response_model=AuthResponse)
async def register(data: RegisterSchema, auth: AuthService = Depends(get_auth_service)):
    user, token = await auth.register(
        data.email, data.password, username=data.username, referral_code=data.referralCode
    )
    return AuthResponse(user=UserOut.from_user(user), token=token)


@auth_router.post("/login", response_model=AuthResponse)
async def login(data: LoginSchema, auth: AuthService = Depends(get_auth_service)):
    user, token = await auth.login(data.email, data.password)
    return AuthResponse(user=UserOut.from_user(user), token=token)


@auth_router.get("/me", response_model=UserOut)
async def me(current_user: User = Depends(get_current_user)):
    return UserOut.from_user(current_user)


@auth_router.post("/logout")
async def logout():
    # tokens are stateless; the client drops its copy
    return {"message": "Logged out successfully"}


# ------------------------
# Forgot/Reset Password
# ------------------------
@auth_router.post("/forgot-password")
async def forgot_password(data: ForgotPasswordSchema, auth: AuthService = Depends(get_auth_service)):
    message = await auth.request_password_reset(data.email)
    return {"message": message}


@auth_router.post("/reset-password")
async def reset_password(data: ResetPasswordSchema, auth: AuthService = Depends(get_auth_service)):
    await auth.reset_password(data.token, data.password)
    return {"message": "Password has been reset successfully"}
