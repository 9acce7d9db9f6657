"""Authentication dependencies shared by the routers."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import Settings
from models import ApiPartner, Customer, User
from models.enums import PartnerStatus, UserRole, UserStatus
from services.repository import Repository, get_repository
from utils.errors import AuthError, ForbiddenError, NotFoundError
from utils.security import decode_access_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

STAFF_ROLES = (UserRole.ADMIN.value, UserRole.LOAN_OFFICER.value)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    repo: Repository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
) -> User:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthError("No authentication token provided", code="NO_TOKEN")
    payload = decode_access_token(credentials.credentials, settings)
    user = await repo.get_user(payload["id"])
    if not user:
        raise AuthError("User not found", code="USER_NOT_FOUND")
    if user.status != UserStatus.ACTIVE.value:
        raise AuthError("User account is inactive", code="ACCOUNT_INACTIVE")
    return user


def require_roles(*roles: str):
    """Dependency factory: the current user must hold one of `roles`."""

    async def role_checker(request: Request, user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            logger.warning(
                "Unauthorized access attempt: user=%s role=%s required=%s path=%s",
                user.email, user.role, ",".join(roles), request.url.path,
            )
            raise ForbiddenError("You do not have permission to access this resource")
        return user

    return role_checker


def is_staff(user: User) -> bool:
    return user.role in STAFF_ROLES


async def get_customer_profile(user: User, repo: Repository) -> Customer:
    customer = await repo.get_customer_for_user(user.id)
    if not customer:
        raise NotFoundError("Customer profile not found")
    return customer


async def get_current_partner(
    request: Request,
    repo: Repository = Depends(get_repository),
) -> ApiPartner:
    api_key = request.headers.get("x-api-key")
    if not api_key:
        raise AuthError("API key is required", code="NO_API_KEY")
    partner = await repo.get_partner_by_api_key(api_key)
    if not partner:
        raise AuthError("Invalid API key", code="INVALID_API_KEY")
    if partner.status != PartnerStatus.ACTIVE.value:
        raise AuthError("Partner account is inactive", code="PARTNER_INACTIVE")

    whitelist = partner.ip_whitelist or []
    client_ip = request.client.host if request.client else ""
    if whitelist and client_ip not in whitelist:
        logger.warning(
            "API access from non-whitelisted IP: partner=%s ip=%s", partner.partner_name, client_ip
        )
        raise ForbiddenError("Access denied from this IP address", code="IP_NOT_WHITELISTED")

    partner.last_activity_at = datetime.now(timezone.utc)
    await repo.flush()
    return partner
