from __future__ import annotations

import logging
import tempfile
from datetime import date
from pathlib import Path
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from api.deps import STAFF_ROLES, get_current_user, get_customer_profile, is_staff, require_roles
from api.loan_applications import load_application_for
from models import Collateral, User
from models.enums import CollateralStatus, UserRole
from pdf_ingestion.cas_parser import parse_holdings_from_pdf
from schemas.collateral import CollateralCreate, PledgeRequest, ReleaseRequest
from services.applications import pledge_collaterals, pledged_value, release_collaterals
from services.calculations import calculate_ltv, round_money
from services.repository import Repository, get_repository
from utils.case import columns_to_camel
from utils.errors import ForbiddenError, ValidationFailed
from utils.helpers import api_response, new_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/collaterals", tags=["collaterals"])

_COLLATERAL_FIELDS = [
    "id",
    "customer_id",
    "scheme_name",
    "isin",
    "folio_number",
    "amc_name",
    "category",
    "units",
    "nav",
    "current_value",
    "valuation_date",
    "status",
    "created_at",
    "updated_at",
]


def _collateral_to_response(c: Collateral) -> dict[str, Any]:
    return columns_to_camel(c, _COLLATERAL_FIELDS)


@router.get("", response_model=dict)
async def list_collaterals(
    status: Optional[CollateralStatus] = None,
    user: User = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    customer_id = None
    if not is_staff(user):
        customer_id = (await get_customer_profile(user, repo)).id
    rows = await repo.list_collaterals(customer_id=customer_id, status=status.value if status else None)
    return api_response([_collateral_to_response(c) for c in rows])


@router.get("/valuation", response_model=dict)
async def get_valuation(
    application_id: str = Query(..., alias="applicationId"),
    user: User = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    application = await load_application_for(repo, application_id, user)
    total = await pledged_value(repo, application.id)
    pledges = await repo.active_pledges_for_application(application.id)
    holdings = await repo.get_collaterals([p.collateral_id for p in pledges])
    return api_response({
        "applicationId": application.id,
        "applicationNumber": application.application_number,
        "requestedAmount": application.requested_amount,
        "totalCollateralValue": round_money(total),
        "ltv": calculate_ltv(application.requested_amount, total),
        "maxLtv": application.loan_product.ltv_ratio,
        "collaterals": [_collateral_to_response(c) for c in holdings],
    })


@router.get("/customer/{customer_id}", response_model=dict)
async def list_customer_collaterals(
    customer_id: str,
    user: User = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    if not is_staff(user):
        customer = await get_customer_profile(user, repo)
        if customer.id != customer_id:
            raise ForbiddenError("You can only view your own collateral")
    rows = await repo.list_collaterals(customer_id=customer_id)
    return api_response([_collateral_to_response(c) for c in rows])


@router.post("", response_model=dict, status_code=201)
async def add_collateral(
    body: CollateralCreate,
    user: User = Depends(require_roles(UserRole.CUSTOMER.value)),
    repo: Repository = Depends(get_repository),
):
    customer = await get_customer_profile(user, repo)
    holding = Collateral(
        id=new_id(),
        customer_id=customer.id,
        scheme_name=body.scheme_name,
        isin=body.isin,
        folio_number=body.folio_number,
        amc_name=body.amc_name,
        category=body.category.value,
        units=body.units,
        nav=body.nav,
        current_value=round_money(body.units * body.nav),
        valuation_date=date.today(),
        status=CollateralStatus.AVAILABLE.value,
    )
    repo.add(holding)
    await repo.flush()
    logger.info("Collateral %s added for customer %s", holding.scheme_name, customer.customer_code)
    return api_response(_collateral_to_response(holding), "Collateral added successfully")


@router.post("/pledge", response_model=dict)
async def pledge(
    body: PledgeRequest,
    user: User = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    application = await load_application_for(repo, body.application_id, user)
    pledges = await pledge_collaterals(repo, application, body.collateral_ids)
    data = application.application_data or {}
    return api_response(
        {
            "applicationId": application.id,
            "pledgedCount": len(pledges),
            "totalCollateralValue": data.get("collateral_value", 0.0),
            "ltv": data.get("ltv", 0.0),
        },
        "Collateral pledged successfully",
    )


@router.post("/release", response_model=dict)
async def release(
    body: ReleaseRequest,
    user: User = Depends(require_roles(*STAFF_ROLES)),
    repo: Repository = Depends(get_repository),
):
    released = await release_collaterals(repo, body.collateral_ids)
    logger.info("%d collateral pledges released by %s", released, user.email)
    return api_response({"releasedCount": released}, "Collateral released successfully")


@router.post("/import-holdings", response_model=dict, status_code=201)
async def import_holdings(
    file: UploadFile = File(..., description="Consolidated Account Statement PDF"),
    password: Optional[str] = Form(None, description="PDF password, usually the PAN"),
    user: User = Depends(require_roles(UserRole.CUSTOMER.value)),
    repo: Repository = Depends(get_repository),
):
    """
    Upload a CAS PDF; every scheme with a non-zero closing balance becomes an
    AVAILABLE holding for the caller.
    """
    if not file.filename or not file.filename.lower().endswith(".pdf"):
        raise ValidationFailed("Please upload a PDF file.")
    content = await file.read()
    if not content:
        raise ValidationFailed("File is empty.")
    customer = await get_customer_profile(user, repo)
    with tempfile.NamedTemporaryFile(suffix=".pdf", delete=False) as tmp:
        tmp.write(content)
        tmp_path = tmp.name
    try:
        parsed = parse_holdings_from_pdf(tmp_path, password=password)
    except Exception as e:
        logger.warning("CAS parse failed for %s: %s", customer.customer_code, e)
        raise ValidationFailed("Could not read the statement. Check the file and password.") from e
    finally:
        Path(tmp_path).unlink(missing_ok=True)
    if not parsed:
        raise ValidationFailed("No mutual fund holdings found in the statement", code="NO_HOLDINGS_FOUND")

    holdings = []
    for h in parsed:
        holding = Collateral(
            id=new_id(),
            customer_id=customer.id,
            status=CollateralStatus.AVAILABLE.value,
            **{**h, "valuation_date": h["valuation_date"] or date.today()},
        )
        repo.add(holding)
        holdings.append(holding)
    await repo.flush()
    logger.info("Imported %d holdings from %s for %s", len(holdings), file.filename, customer.customer_code)
    return api_response([_collateral_to_response(c) for c in holdings], f"{len(holdings)} holdings imported")
