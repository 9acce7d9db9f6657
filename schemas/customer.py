from typing import Literal, Optional

from pydantic import Field

from schemas.auth import AddressSchema
from schemas.base import CamelModel


class CustomerUpdate(CamelModel):
    phone_number: Optional[str] = Field(None, pattern=r"^[6-9]\d{9}$")
    address: Optional[AddressSchema] = None
    annual_income: Optional[float] = Field(None, ge=0)
    occupation: Optional[str] = Field(None, max_length=128)


class KycDocument(CamelModel):
    document_type: str = Field(..., min_length=1, description="e.g. PAN, AADHAAR, BANK_STATEMENT")
    document_number: Optional[str] = None
    file_url: Optional[str] = None


class KycSubmit(CamelModel):
    documents: list[KycDocument] = Field(..., min_length=1)


class KycVerify(CamelModel):
    status: Literal["VERIFIED", "REJECTED"]
    remarks: Optional[str] = None
