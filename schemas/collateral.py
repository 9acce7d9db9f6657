from typing import Optional

from pydantic import Field

from models.enums import MutualFundCategory
from schemas.base import CamelModel


class CollateralCreate(CamelModel):
    scheme_name: str = Field(..., min_length=1, max_length=256)
    isin: Optional[str] = Field(None, pattern=r"^IN[A-Z0-9]{10}$")
    folio_number: str = Field(..., min_length=1, max_length=64)
    amc_name: Optional[str] = None
    category: MutualFundCategory = MutualFundCategory.EQUITY
    units: float = Field(..., gt=0)
    nav: float = Field(..., gt=0)


class PledgeRequest(CamelModel):
    application_id: str
    collateral_ids: list[str] = Field(..., min_length=1)


class ReleaseRequest(CamelModel):
    collateral_ids: list[str] = Field(..., min_length=1)
