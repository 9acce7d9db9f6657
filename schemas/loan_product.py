from typing import Optional

from pydantic import Field, model_validator

from models.enums import MutualFundCategory
from schemas.base import CamelModel
from services.calculations import MAX_TENURE_MONTHS


class LoanProductCreate(CamelModel):
    product_name: str = Field(..., min_length=1, max_length=256)
    product_code: str = Field(..., min_length=1, max_length=64)
    description: Optional[str] = None
    min_amount: float = Field(..., gt=0)
    max_amount: float = Field(..., gt=0)
    min_tenure_months: int = Field(..., ge=1, le=MAX_TENURE_MONTHS)
    max_tenure_months: int = Field(..., ge=1, le=MAX_TENURE_MONTHS)
    interest_rate: float = Field(..., ge=0, le=100, description="Annual nominal rate, percent")
    processing_fee_percentage: Optional[float] = Field(None, ge=0, le=100)
    ltv_ratio: Optional[float] = Field(None, gt=0, le=100)
    eligible_mf_categories: Optional[list[MutualFundCategory]] = None
    features: Optional[list[str]] = None

    @model_validator(mode="after")
    def _ranges(self) -> "LoanProductCreate":
        if self.min_amount > self.max_amount:
            raise ValueError("minAmount cannot exceed maxAmount")
        if self.min_tenure_months > self.max_tenure_months:
            raise ValueError("minTenureMonths cannot exceed maxTenureMonths")
        return self


class LoanProductUpdate(CamelModel):
    product_name: Optional[str] = Field(None, min_length=1, max_length=256)
    description: Optional[str] = None
    min_amount: Optional[float] = Field(None, gt=0)
    max_amount: Optional[float] = Field(None, gt=0)
    min_tenure_months: Optional[int] = Field(None, ge=1, le=MAX_TENURE_MONTHS)
    max_tenure_months: Optional[int] = Field(None, ge=1, le=MAX_TENURE_MONTHS)
    interest_rate: Optional[float] = Field(None, ge=0, le=100)
    processing_fee_percentage: Optional[float] = Field(None, ge=0, le=100)
    ltv_ratio: Optional[float] = Field(None, gt=0, le=100)
    eligible_mf_categories: Optional[list[MutualFundCategory]] = None
    features: Optional[list[str]] = None
    status: Optional[str] = Field(None, pattern=r"^(ACTIVE|INACTIVE)$")
