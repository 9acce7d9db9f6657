from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from api.deps import get_current_user, get_customer_profile, is_staff
from models import Loan, User
from services.calculations import generate_emi_schedule
from services.repository import Repository, get_repository
from utils.case import columns_to_camel
from utils.errors import ForbiddenError, NotFoundError
from utils.helpers import api_response

router = APIRouter(prefix="/api/loans", tags=["loans"])

_LOAN_FIELDS = [
    "id",
    "loan_number",
    "application_id",
    "customer_id",
    "principal_amount",
    "interest_rate",
    "tenure_months",
    "emi_amount",
    "outstanding_principal",
    "outstanding_interest",
    "status",
    "disbursed_at",
    "closed_at",
    "created_at",
]


def _loan_to_response(loan: Loan) -> dict[str, Any]:
    return columns_to_camel(loan, _LOAN_FIELDS)


async def _load_loan_for(repo: Repository, loan_id: str, user: User) -> Loan:
    loan = await repo.get_loan(loan_id)
    if not loan:
        raise NotFoundError("Loan not found")
    if not is_staff(user):
        customer = await get_customer_profile(user, repo)
        if loan.customer_id != customer.id:
            raise ForbiddenError("You can only access your own loans")
    return loan


@router.get("", response_model=dict)
async def list_loans(
    user: User = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    customer_id = None
    if not is_staff(user):
        customer_id = (await get_customer_profile(user, repo)).id
    loans = await repo.list_loans(customer_id=customer_id)
    return api_response([_loan_to_response(loan) for loan in loans])


@router.get("/{loan_id}", response_model=dict)
async def get_loan(
    loan_id: str,
    user: User = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    return api_response(_loan_to_response(await _load_loan_for(repo, loan_id, user)))


@router.get("/{loan_id}/emi-schedule", response_model=dict)
async def get_emi_schedule(
    loan_id: str,
    user: User = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    loan = await _load_loan_for(repo, loan_id, user)
    schedule = generate_emi_schedule(
        loan.principal_amount,
        loan.interest_rate,
        loan.tenure_months,
        loan.disbursed_at.date(),
    )
    return api_response({
        "loanId": loan.id,
        "loanNumber": loan.loan_number,
        "emiAmount": loan.emi_amount,
        "schedule": schedule,
    })
