from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from api.deps import STAFF_ROLES, get_current_user, get_settings, is_staff, require_roles
from config import Settings
from models import Customer, User
from models.enums import KycStatus
from schemas.customer import CustomerUpdate, KycSubmit, KycVerify
from services.repository import Repository, get_repository
from utils.case import columns_to_camel, dict_keys_to_camel, iso
from utils.errors import ConflictError, ForbiddenError, NotFoundError
from utils.helpers import api_response, pagination_meta, pagination_params
from utils.security import decrypt, mask_aadhaar, mask_pan

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/customers", tags=["customers"])

MSG_CUSTOMER_NOT_FOUND = "Customer not found"

_CUSTOMER_FIELDS = [
    "id",
    "user_id",
    "customer_code",
    "first_name",
    "last_name",
    "email",
    "phone_number",
    "date_of_birth",
    "annual_income",
    "occupation",
    "kyc_status",
    "kyc_remarks",
    "kyc_verified_at",
    "created_at",
    "updated_at",
]


def customer_summary(c: Customer) -> dict[str, Any]:
    return {
        "id": c.id,
        "customerCode": c.customer_code,
        "fullName": c.full_name,
        "email": c.email,
        "kycStatus": c.kyc_status,
    }


def customer_to_response(c: Customer, settings: Settings) -> dict[str, Any]:
    """Full profile; PAN and Aadhaar are always masked."""
    out = columns_to_camel(c, _CUSTOMER_FIELDS)
    out["fullName"] = c.full_name
    out["panNumber"] = mask_pan(c.pan_number)
    out["aadhaarNumber"] = (
        mask_aadhaar(decrypt(c.aadhaar_number, settings.encryption_key)) if c.aadhaar_number else None
    )
    out["address"] = dict_keys_to_camel(c.address) if c.address else None
    out["kycDocuments"] = dict_keys_to_camel(c.kyc_documents or [])
    return out


async def _load_customer(repo: Repository, customer_id: str) -> Customer:
    customer = await repo.get_customer(customer_id)
    if not customer:
        raise NotFoundError(MSG_CUSTOMER_NOT_FOUND)
    return customer


def ensure_customer_access(user: User, customer: Customer) -> None:
    """Staff may act on any customer; a customer only on their own profile."""
    if not is_staff(user) and customer.user_id != user.id:
        raise ForbiddenError("You can only access your own profile")


@router.get("", response_model=dict)
async def list_customers(
    page: int = 1,
    limit: int = 10,
    kyc_status: Optional[KycStatus] = Query(None, alias="kycStatus"),
    repo: Repository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
    _user: User = Depends(require_roles(*STAFF_ROLES)),
):
    offset, limit, page = pagination_params(page, limit)
    rows, total = await repo.list_customers(offset, limit, kyc_status.value if kyc_status else None)
    return api_response(
        [customer_to_response(c, settings) for c in rows],
        pagination=pagination_meta(total, page, limit),
    )


@router.get("/{customer_id}", response_model=dict)
async def get_customer(
    customer_id: str,
    repo: Repository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
    user: User = Depends(get_current_user),
):
    customer = await _load_customer(repo, customer_id)
    ensure_customer_access(user, customer)
    return api_response(customer_to_response(customer, settings))


@router.put("/{customer_id}", response_model=dict)
async def update_customer(
    customer_id: str,
    body: CustomerUpdate,
    repo: Repository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
    user: User = Depends(get_current_user),
):
    customer = await _load_customer(repo, customer_id)
    ensure_customer_access(user, customer)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(customer, field, value)
    await repo.flush()
    logger.info("Customer %s updated fields: %s", customer.customer_code, ", ".join(sorted(changes)))
    return api_response(customer_to_response(customer, settings), "Profile updated successfully")


@router.post("/{customer_id}/kyc", response_model=dict)
async def submit_kyc(
    customer_id: str,
    body: KycSubmit,
    repo: Repository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
    user: User = Depends(get_current_user),
):
    customer = await _load_customer(repo, customer_id)
    ensure_customer_access(user, customer)
    if customer.kyc_status == KycStatus.VERIFIED.value:
        raise ConflictError("KYC is already verified", code="KYC_ALREADY_VERIFIED")
    submitted_at = iso(datetime.now(timezone.utc))
    customer.kyc_documents = [{**d.model_dump(), "uploaded_at": submitted_at} for d in body.documents]
    customer.kyc_status = KycStatus.SUBMITTED.value
    customer.kyc_remarks = None
    await repo.flush()
    logger.info("KYC submitted for customer %s (%d documents)", customer.customer_code, len(body.documents))
    return api_response(customer_to_response(customer, settings), "KYC documents submitted")


@router.post("/{customer_id}/verify-kyc", response_model=dict)
async def verify_kyc(
    customer_id: str,
    body: KycVerify,
    repo: Repository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
    user: User = Depends(require_roles(*STAFF_ROLES)),
):
    customer = await _load_customer(repo, customer_id)
    customer.kyc_status = body.status
    customer.kyc_remarks = body.remarks
    customer.kyc_verified_at = datetime.now(timezone.utc) if body.status == KycStatus.VERIFIED.value else None
    await repo.flush()
    logger.info("KYC %s for customer %s by %s", body.status, customer.customer_code, user.email)
    return api_response(customer_to_response(customer, settings), f"KYC {body.status.lower()}")
