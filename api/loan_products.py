from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends

from api.deps import require_roles
from models import LoanProduct, User
from models.enums import ProductStatus, UserRole
from schemas.loan_product import LoanProductCreate, LoanProductUpdate
from services.repository import Repository, get_repository
from utils.case import columns_to_camel
from utils.errors import ConflictError, NotFoundError, ValidationFailed
from utils.helpers import api_response, new_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/loan-products", tags=["loan-products"])

MSG_PRODUCT_NOT_FOUND = "Loan product not found"

_PRODUCT_FIELDS = [
    "id",
    "product_name",
    "product_code",
    "description",
    "min_amount",
    "max_amount",
    "min_tenure_months",
    "max_tenure_months",
    "interest_rate",
    "processing_fee_percentage",
    "ltv_ratio",
    "status",
    "created_at",
    "updated_at",
]


def product_to_response(p: LoanProduct) -> dict[str, Any]:
    out = columns_to_camel(p, _PRODUCT_FIELDS)
    out["eligibleMfCategories"] = p.eligible_mf_categories or []
    out["features"] = p.features or []
    return out


async def _load_product(repo: Repository, product_id: str) -> LoanProduct:
    product = await repo.get_product(product_id)
    if not product:
        raise NotFoundError(MSG_PRODUCT_NOT_FOUND)
    return product


@router.get("", response_model=dict)
async def list_products(repo: Repository = Depends(get_repository)):
    products = await repo.list_active_products()
    return api_response([product_to_response(p) for p in products])


@router.get("/{product_id}", response_model=dict)
async def get_product(product_id: str, repo: Repository = Depends(get_repository)):
    return api_response(product_to_response(await _load_product(repo, product_id)))


@router.post("", response_model=dict, status_code=201)
async def create_product(
    body: LoanProductCreate,
    repo: Repository = Depends(get_repository),
    user: User = Depends(require_roles(UserRole.ADMIN.value)),
):
    product_code = body.product_code.strip().upper()
    if await repo.get_product_by_code(product_code):
        raise ConflictError(f"Product code {product_code} already exists", code="DUPLICATE_ENTRY")
    data = body.model_dump(mode="json")
    data["product_code"] = product_code
    product = LoanProduct(id=new_id(), status=ProductStatus.ACTIVE.value, **data)
    repo.add(product)
    await repo.flush()
    logger.info("Loan product %s created by %s", product.product_code, user.email)
    return api_response(product_to_response(product), "Loan product created successfully")


@router.put("/{product_id}", response_model=dict)
async def update_product(
    product_id: str,
    body: LoanProductUpdate,
    repo: Repository = Depends(get_repository),
    user: User = Depends(require_roles(UserRole.ADMIN.value)),
):
    product = await _load_product(repo, product_id)
    changes = body.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    min_amount = changes.get("min_amount", product.min_amount)
    max_amount = changes.get("max_amount", product.max_amount)
    min_tenure = changes.get("min_tenure_months", product.min_tenure_months)
    max_tenure = changes.get("max_tenure_months", product.max_tenure_months)
    if min_amount > max_amount or min_tenure > max_tenure:
        raise ValidationFailed("Minimum bounds cannot exceed maximum bounds")
    for field, value in changes.items():
        setattr(product, field, value)
    await repo.flush()
    logger.info("Loan product %s updated by %s", product.product_code, user.email)
    return api_response(product_to_response(product), "Loan product updated successfully")


@router.delete("/{product_id}", response_model=dict)
async def deactivate_product(
    product_id: str,
    repo: Repository = Depends(get_repository),
    user: User = Depends(require_roles(UserRole.ADMIN.value)),
):
    product = await _load_product(repo, product_id)
    product.status = ProductStatus.INACTIVE.value
    await repo.flush()
    logger.info("Loan product %s deactivated by %s", product.product_code, user.email)
    return api_response(None, "Loan product deactivated successfully")
