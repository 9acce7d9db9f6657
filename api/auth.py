from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends

from api.customers import customer_summary, customer_to_response
from api.deps import get_current_user, get_settings
from config import Settings
from models import Customer, User
from models.enums import KycStatus, UserRole, UserStatus
from schemas.auth import ChangePasswordRequest, LoginRequest, RefreshTokenRequest, RegisterRequest
from services.repository import Repository, get_repository
from utils.case import iso
from utils.errors import AuthError, ConflictError
from utils.helpers import api_response, generate_customer_code, new_id
from utils.security import (
    create_tokens,
    decode_refresh_token,
    encrypt,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _user_to_response(u: User) -> dict[str, Any]:
    return {
        "id": u.id,
        "email": u.email,
        "role": u.role,
        "status": u.status,
        "lastLoginAt": iso(u.last_login_at),
        "createdAt": iso(u.created_at),
    }


@router.post("/register", response_model=dict, status_code=201)
async def register(
    body: RegisterRequest,
    repo: Repository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    if await repo.get_user_by_email(body.email):
        raise ConflictError("User with this email already exists", code="USER_EXISTS")
    if await repo.get_customer_by_pan(body.pan_number):
        raise ConflictError("PAN number already registered", code="PAN_EXISTS")

    user = User(
        id=new_id(),
        email=body.email,
        password_hash=hash_password(body.password, settings.bcrypt_rounds),
        role=UserRole.CUSTOMER.value,
        status=UserStatus.ACTIVE.value,
    )
    customer = Customer(
        id=new_id(),
        user_id=user.id,
        customer_code=generate_customer_code(),
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        phone_number=body.phone_number,
        date_of_birth=body.date_of_birth,
        pan_number=body.pan_number,
        aadhaar_number=encrypt(body.aadhaar_number, settings.encryption_key),
        address=body.address.model_dump(),
        kyc_status=KycStatus.PENDING.value,
    )
    repo.add(user)
    repo.add(customer)
    await repo.flush()

    logger.info("New customer registered: %s (%s)", user.email, customer.customer_code)
    return api_response(
        {
            "user": _user_to_response(user),
            "customer": customer_to_response(customer, settings),
            **create_tokens(user.id, user.email, user.role, settings),
        },
        "Registration successful",
    )


@router.post("/login", response_model=dict)
async def login(
    body: LoginRequest,
    repo: Repository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    user = await repo.get_user_by_email(body.email)
    if not user or not verify_password(body.password, user.password_hash):
        logger.warning("Failed login attempt for %s", body.email)
        raise AuthError("Invalid email or password", code="INVALID_CREDENTIALS")
    if user.status != UserStatus.ACTIVE.value:
        raise AuthError("User account is inactive", code="ACCOUNT_INACTIVE")

    user.last_login_at = datetime.now(timezone.utc)
    await repo.flush()

    logger.info("User logged in: %s (%s)", user.email, user.role)
    return api_response(
        {
            "user": _user_to_response(user),
            "customer": customer_summary(user.customer) if user.customer else None,
            **create_tokens(user.id, user.email, user.role, settings),
        },
        "Login successful",
    )


@router.post("/refresh-token", response_model=dict)
async def refresh_token(
    body: RefreshTokenRequest,
    repo: Repository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    payload = decode_refresh_token(body.refresh_token, settings)
    user = await repo.get_user(payload["id"])
    if not user or user.status != UserStatus.ACTIVE.value:
        raise AuthError("Invalid refresh token", code="INVALID_REFRESH_TOKEN")
    return api_response(create_tokens(user.id, user.email, user.role, settings), "Token refreshed")


@router.get("/profile", response_model=dict)
async def get_profile(
    user: User = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    customer = await repo.get_customer_for_user(user.id)
    return api_response({
        "user": _user_to_response(user),
        "customer": customer_to_response(customer, settings) if customer else None,
    })


@router.post("/change-password", response_model=dict)
async def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    if not verify_password(body.old_password, user.password_hash):
        raise AuthError("Current password is incorrect", code="INVALID_OLD_PASSWORD")
    user.password_hash = hash_password(body.new_password, settings.bcrypt_rounds)
    await repo.flush()
    logger.info("Password changed for %s", user.email)
    return api_response(None, "Password changed successfully")


@router.post("/logout", response_model=dict)
async def logout(user: User = Depends(get_current_user)):
    # Tokens are stateless; the client discards them
    logger.info("User logged out: %s", user.email)
    return api_response(None, "Logged out successfully")
