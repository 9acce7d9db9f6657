from typing import Optional

from pydantic import Field

from schemas.base import CamelModel
from services.calculations import MAX_TENURE_MONTHS


class ApplicationCreate(CamelModel):
    loan_product_id: str
    requested_amount: float = Field(..., gt=0)
    tenure: int = Field(..., ge=1, le=MAX_TENURE_MONTHS, description="Tenure in months")
    purpose_of_loan: Optional[str] = None
    monthly_income: Optional[float] = Field(None, ge=0)
    existing_emi: Optional[float] = Field(None, ge=0, alias="existingEMI")
    collateral_ids: list[str] = Field(default_factory=list)


class PartnerApplicationCreate(ApplicationCreate):
    """Partner-originated application for an existing customer, identified by PAN."""
    pan_number: str = Field(..., min_length=10, max_length=10)


class StatusUpdate(CamelModel):
    # Free-form on purpose; the workflow service validates the value and the edge
    status: str
    review_notes: Optional[str] = None
    approved_amount: Optional[float] = Field(None, gt=0)


class ApproveRequest(CamelModel):
    approved_amount: Optional[float] = Field(None, gt=0)
    review_notes: Optional[str] = None


class RejectRequest(CamelModel):
    review_notes: Optional[str] = None
    reason: Optional[str] = None
