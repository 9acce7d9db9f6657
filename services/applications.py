"""
Loan application lifecycle: creation with EMI pricing, collateral pledges,
status changes and the loan record created on disbursement.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from models import Collateral, Customer, Loan, LoanApplication, LoanCollateral, LoanProduct, User
from models.enums import (
    ApplicationStatus,
    CollateralStatus,
    LoanStatus,
    PledgeStatus,
    ProductStatus,
    UserRole,
)
from schemas.application import ApplicationCreate
from services.calculations import (
    calculate_emi,
    calculate_ltv,
    calculate_processing_fee,
    calculate_total_interest,
    round_money,
)
from services.repository import Repository
from services.workflow import OPEN_STATUSES, apply_transition, ensure_can_change_status, parse_status
from utils.errors import ConflictError, ForbiddenError, NotFoundError, ValidationFailed
from utils.helpers import generate_application_number, generate_loan_number, new_id

logger = logging.getLogger(__name__)


def _validate_against_product(product: LoanProduct, amount: float, tenure: int) -> None:
    problems = []
    if not (product.min_amount <= amount <= product.max_amount):
        problems.append(
            f"requestedAmount must be between {product.min_amount:,.0f} and {product.max_amount:,.0f}"
        )
    if not (product.min_tenure_months <= tenure <= product.max_tenure_months):
        problems.append(
            f"tenure must be between {product.min_tenure_months} and {product.max_tenure_months} months"
        )
    if problems:
        raise ValidationFailed("Loan request outside product limits", details=problems)


def price_application(product: LoanProduct, amount: float, tenure: int) -> dict[str, float]:
    """EMI, total interest and processing fee for a request against a product."""
    try:
        emi = calculate_emi(amount, product.interest_rate, tenure)
        total_interest = calculate_total_interest(amount, product.interest_rate, tenure)
    except ValueError as e:
        raise ValidationFailed(str(e)) from e
    return {
        "calculated_emi": emi,
        "total_interest": total_interest,
        "processing_fee": calculate_processing_fee(amount, product.processing_fee_percentage),
    }


async def create_application(
    repo: Repository,
    customer: Customer,
    body: ApplicationCreate,
    created_by_id: str,
) -> LoanApplication:
    product = await repo.get_product(body.loan_product_id)
    if not product or product.status != ProductStatus.ACTIVE.value:
        raise NotFoundError("Loan product not found")
    _validate_against_product(product, body.requested_amount, body.tenure)

    pricing = price_application(product, body.requested_amount, body.tenure)
    application = LoanApplication(
        id=new_id(),
        application_number=generate_application_number(),
        customer=customer,
        loan_product=product,
        requested_amount=body.requested_amount,
        tenure_months=body.tenure,
        interest_rate=product.interest_rate,
        purpose_of_loan=body.purpose_of_loan,
        status=ApplicationStatus.DRAFT.value,
        application_data={
            "purpose_of_loan": body.purpose_of_loan,
            "monthly_income": body.monthly_income,
            "existing_emi": body.existing_emi,
            **pricing,
            "collateral_value": 0.0,
            "ltv": 0.0,
        },
        created_by_id=created_by_id,
    )
    repo.add(application)
    await repo.flush()

    if body.collateral_ids:
        await pledge_collaterals(repo, application, body.collateral_ids)

    logger.info(
        "Application %s created for customer %s: amount=%s tenure=%s emi=%s",
        application.application_number, customer.customer_code,
        body.requested_amount, body.tenure, pricing["calculated_emi"],
    )
    return application


def _refresh_ltv(application: LoanApplication, collateral_value: float) -> None:
    data = dict(application.application_data or {})
    data["collateral_value"] = round_money(collateral_value)
    data["ltv"] = calculate_ltv(application.requested_amount, collateral_value)
    # JSON columns are not mutation-tracked; assign a new dict
    application.application_data = data


async def pledged_value(repo: Repository, application_id: str) -> float:
    pledges = await repo.active_pledges_for_application(application_id)
    return sum(p.pledge_value for p in pledges)


async def pledge_collaterals(
    repo: Repository,
    application: LoanApplication,
    collateral_ids: list[str],
) -> list[LoanCollateral]:
    """Pledge the customer's available holdings against an open application."""
    if parse_status(application.status) not in OPEN_STATUSES:
        raise ConflictError(
            f"Cannot pledge collateral to an application in {application.status}",
            code="APPLICATION_NOT_OPEN",
        )
    unique_ids = list(dict.fromkeys(collateral_ids))
    holdings = await repo.get_collaterals(unique_ids)
    found = {c.id: c for c in holdings}
    missing = [cid for cid in unique_ids if cid not in found]
    if missing:
        raise NotFoundError("Collateral not found", details=missing)

    foreign = [c.id for c in holdings if c.customer_id != application.customer_id]
    if foreign:
        raise ForbiddenError("Collateral does not belong to this customer", details=foreign)
    unavailable = [c.id for c in holdings if c.status != CollateralStatus.AVAILABLE.value]
    if unavailable:
        raise ConflictError("Collateral already pledged", code="COLLATERAL_UNAVAILABLE", details=unavailable)

    now = datetime.now(timezone.utc)
    pledges: list[LoanCollateral] = []
    for cid in unique_ids:
        holding = found[cid]
        holding.status = CollateralStatus.PLEDGED.value
        pledge = LoanCollateral(
            id=new_id(),
            application_id=application.id,
            collateral_id=holding.id,
            pledge_value=holding.current_value,
            status=PledgeStatus.PLEDGED.value,
            pledged_at=now,
        )
        repo.add(pledge)
        pledges.append(pledge)
    await repo.flush()

    _refresh_ltv(application, await pledged_value(repo, application.id))
    await repo.flush()
    logger.info("Pledged %d holdings to application %s", len(pledges), application.application_number)
    return pledges


def _release(pledges: Sequence[LoanCollateral], holdings: dict[str, Collateral], now: datetime) -> int:
    released = 0
    for pledge in pledges:
        pledge.status = PledgeStatus.RELEASED.value
        pledge.released_at = now
        holding = holdings.get(pledge.collateral_id)
        if holding is not None:
            holding.status = CollateralStatus.AVAILABLE.value
        released += 1
    return released


async def release_application_collateral(repo: Repository, application: LoanApplication) -> int:
    pledges = await repo.active_pledges_for_application(application.id)
    holdings = {c.id: c for c in await repo.get_collaterals([p.collateral_id for p in pledges])}
    released = _release(pledges, holdings, datetime.now(timezone.utc))
    if released:
        await repo.flush()
        _refresh_ltv(application, 0.0)
        logger.info("Released %d holdings from application %s", released, application.application_number)
    return released


async def release_collaterals(repo: Repository, collateral_ids: list[str]) -> int:
    """Release specific holdings from whatever application holds them."""
    unique_ids = list(dict.fromkeys(collateral_ids))
    holdings = {c.id: c for c in await repo.get_collaterals(unique_ids)}
    missing = [cid for cid in unique_ids if cid not in holdings]
    if missing:
        raise NotFoundError("Collateral not found", details=missing)
    pledges = await repo.active_pledges_for_collaterals(unique_ids)
    applications = {}
    for application_id in dict.fromkeys(p.application_id for p in pledges):
        application = await repo.get_application(application_id)
        if application is not None:
            applications[application_id] = application
    # approved and disbursed applications keep their security until closed or rejected
    locked = [
        p.collateral_id
        for p in pledges
        if p.application_id in applications
        and parse_status(applications[p.application_id].status) not in OPEN_STATUSES
    ]
    if locked:
        raise ConflictError(
            "Collateral secures an approved or disbursed application",
            code="COLLATERAL_LOCKED",
            details=locked,
        )
    released = _release(pledges, holdings, datetime.now(timezone.utc))
    await repo.flush()

    for application_id, application in applications.items():
        _refresh_ltv(application, await pledged_value(repo, application_id))
    await repo.flush()
    return released


async def _disburse(repo: Repository, application: LoanApplication, now: datetime) -> Loan:
    if await repo.get_loan_for_application(application.id):
        raise ConflictError("Loan already disbursed for this application", code="ALREADY_DISBURSED")
    principal = application.approved_amount or application.requested_amount
    try:
        emi = calculate_emi(principal, application.interest_rate, application.tenure_months)
        interest = calculate_total_interest(principal, application.interest_rate, application.tenure_months)
    except ValueError as e:
        raise ValidationFailed(str(e)) from e
    loan = Loan(
        id=new_id(),
        loan_number=generate_loan_number(),
        application_id=application.id,
        customer_id=application.customer_id,
        principal_amount=principal,
        interest_rate=application.interest_rate,
        tenure_months=application.tenure_months,
        emi_amount=emi,
        outstanding_principal=principal,
        outstanding_interest=interest,
        status=LoanStatus.ACTIVE.value,
        disbursed_at=now,
    )
    repo.add(loan)
    logger.info("Loan %s disbursed for application %s", loan.loan_number, application.application_number)
    return loan


async def _close_loan(repo: Repository, application: LoanApplication, now: datetime) -> None:
    loan = await repo.get_loan_for_application(application.id)
    if loan is not None and loan.status != LoanStatus.CLOSED.value:
        loan.status = LoanStatus.CLOSED.value
        loan.closed_at = now
        loan.outstanding_principal = 0.0
        loan.outstanding_interest = 0.0


async def change_status(
    repo: Repository,
    application: LoanApplication,
    actor: User,
    status: str,
    review_notes: Optional[str] = None,
    approved_amount: Optional[float] = None,
) -> LoanApplication:
    ensure_can_change_status(actor.role)
    target = parse_status(status)
    now = datetime.now(timezone.utc)
    apply_transition(
        application,
        target,
        actor_id=actor.id,
        review_notes=review_notes,
        approved_amount=approved_amount,
        now=now,
    )
    if target is ApplicationStatus.DISBURSED:
        await _disburse(repo, application, now)
    elif target is ApplicationStatus.CLOSED:
        await _close_loan(repo, application, now)
        await release_application_collateral(repo, application)
    elif target is ApplicationStatus.REJECTED:
        await release_application_collateral(repo, application)
    await repo.flush()
    return application


async def dashboard_stats(repo: Repository, user: User) -> dict[str, Any]:
    if user.role == UserRole.CUSTOMER.value:
        customer = await repo.get_customer_for_user(user.id)
        if not customer:
            raise NotFoundError("Customer profile not found")
        return {
            "totalApplications": await repo.count_applications(customer.id),
            "activeLoans": await repo.count_active_loans(customer.id),
            "totalOutstanding": round_money(await repo.total_outstanding(customer.id)),
            # No bureau integration; fixed placeholder shown on the customer dashboard
            "creditScore": 750,
        }
    return {
        "totalApplications": await repo.count_applications(),
        "activeLoans": await repo.count_active_loans(),
        "totalCustomers": await repo.count_customers(),
        "totalCollateral": round_money(await repo.total_pledged_value()),
        "totalOutstanding": round_money(await repo.total_outstanding()),
    }
