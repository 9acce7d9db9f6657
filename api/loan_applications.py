from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends

from api.customers import customer_summary, customer_to_response
from api.deps import STAFF_ROLES, get_current_user, get_customer_profile, get_settings, is_staff, require_roles
from config import Settings
from models import LoanApplication, User
from models.enums import ApplicationStatus, UserRole
from schemas.application import ApplicationCreate, ApproveRequest, RejectRequest, StatusUpdate
from services.applications import change_status, create_application, dashboard_stats
from services.repository import Repository, get_repository
from services.workflow import ALLOWED_TRANSITIONS, parse_status
from utils.case import columns_to_camel, iso
from utils.errors import ForbiddenError, NotFoundError
from utils.helpers import api_response, pagination_meta, pagination_params

router = APIRouter(prefix="/api/loan-applications", tags=["loan-applications"])

MSG_APPLICATION_NOT_FOUND = "Loan application not found"

_APPLICATION_FIELDS = [
    "id",
    "application_number",
    "customer_id",
    "loan_product_id",
    "requested_amount",
    "approved_amount",
    "tenure_months",
    "interest_rate",
    "purpose_of_loan",
    "status",
    "review_notes",
    "rejection_reason",
    "reviewed_at",
    "approved_at",
    "rejected_at",
    "disbursed_at",
    "created_at",
    "updated_at",
]


def application_to_response(a: LoanApplication) -> dict[str, Any]:
    """Serialize an application loaded with its product and customer."""
    data = a.application_data or {}
    out = columns_to_camel(a, _APPLICATION_FIELDS)
    out.update({
        "tenure": a.tenure_months,
        "calculatedEmi": data.get("calculated_emi"),
        "totalInterest": data.get("total_interest"),
        "processingFee": data.get("processing_fee"),
        "monthlyIncome": data.get("monthly_income"),
        "existingEMI": data.get("existing_emi"),
        "collateralValue": data.get("collateral_value", 0.0),
        "ltv": data.get("ltv", 0.0),
        "allowedTransitions": sorted(s.value for s in ALLOWED_TRANSITIONS[parse_status(a.status)]),
        "loanProduct": {
            "id": a.loan_product.id,
            "productName": a.loan_product.product_name,
            "productCode": a.loan_product.product_code,
            "ltvRatio": a.loan_product.ltv_ratio,
        },
        "customer": customer_summary(a.customer),
    })
    return out


async def load_application_for(repo: Repository, application_id: str, user: User) -> LoanApplication:
    """Fetch an application; customers may only reach their own."""
    application = await repo.get_application(application_id)
    if not application:
        raise NotFoundError(MSG_APPLICATION_NOT_FOUND)
    if not is_staff(user):
        customer = await get_customer_profile(user, repo)
        if application.customer_id != customer.id:
            raise ForbiddenError("You can only access your own applications")
    return application


@router.get("/dashboard/stats", response_model=dict)
async def get_dashboard_stats(
    user: User = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    return api_response(await dashboard_stats(repo, user))


@router.get("", response_model=dict)
async def list_applications(
    page: int = 1,
    limit: int = 10,
    status: Optional[str] = None,
    user: User = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    offset, limit, page = pagination_params(page, limit)
    customer_id = None
    if not is_staff(user):
        customer_id = (await get_customer_profile(user, repo)).id
    status_filter = parse_status(status).value if status else None
    rows, total = await repo.list_applications(offset, limit, customer_id=customer_id, status=status_filter)
    return api_response(
        [application_to_response(a) for a in rows],
        pagination=pagination_meta(total, page, limit),
    )


@router.get("/{application_id}", response_model=dict)
async def get_application(
    application_id: str,
    user: User = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    application = await load_application_for(repo, application_id, user)
    pledges = await repo.active_pledges_for_application(application.id)
    holdings = {c.id: c for c in await repo.get_collaterals([p.collateral_id for p in pledges])}
    out = application_to_response(application)
    out["customer"] = customer_to_response(application.customer, settings)
    out["collaterals"] = [
        {
            "collateralId": p.collateral_id,
            "schemeName": holdings[p.collateral_id].scheme_name,
            "folioNumber": holdings[p.collateral_id].folio_number,
            "pledgeValue": p.pledge_value,
            "pledgedAt": iso(p.pledged_at),
        }
        for p in pledges
    ]
    return api_response(out)


@router.post("", response_model=dict, status_code=201)
async def create_loan_application(
    body: ApplicationCreate,
    user: User = Depends(require_roles(UserRole.CUSTOMER.value)),
    repo: Repository = Depends(get_repository),
):
    customer = await get_customer_profile(user, repo)
    application = await create_application(repo, customer, body, created_by_id=user.id)
    return api_response(application_to_response(application), "Loan application created successfully")


@router.patch("/{application_id}/status", response_model=dict)
async def update_application_status(
    application_id: str,
    body: StatusUpdate,
    user: User = Depends(require_roles(*STAFF_ROLES)),
    repo: Repository = Depends(get_repository),
):
    application = await load_application_for(repo, application_id, user)
    await change_status(repo, application, user, body.status, body.review_notes, body.approved_amount)
    return api_response(application_to_response(application), f"Application status updated to {application.status}")


@router.post("/{application_id}/approve", response_model=dict)
async def approve_application(
    application_id: str,
    body: ApproveRequest,
    user: User = Depends(require_roles(*STAFF_ROLES)),
    repo: Repository = Depends(get_repository),
):
    application = await load_application_for(repo, application_id, user)
    await change_status(
        repo, application, user, ApplicationStatus.APPROVED.value, body.review_notes, body.approved_amount
    )
    return api_response(application_to_response(application), "Application approved")


@router.post("/{application_id}/reject", response_model=dict)
async def reject_application(
    application_id: str,
    body: RejectRequest,
    user: User = Depends(require_roles(*STAFF_ROLES)),
    repo: Repository = Depends(get_repository),
):
    application = await load_application_for(repo, application_id, user)
    await change_status(repo, application, user, ApplicationStatus.REJECTED.value, body.reason or body.review_notes)
    return api_response(application_to_response(application), "Application rejected")
