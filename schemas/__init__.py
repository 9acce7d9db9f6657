from schemas.application import (
    ApplicationCreate,
    ApproveRequest,
    PartnerApplicationCreate,
    RejectRequest,
    StatusUpdate,
)
from schemas.auth import (
    AddressSchema,
    ChangePasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
)
from schemas.collateral import CollateralCreate, PledgeRequest, ReleaseRequest
from schemas.customer import CustomerUpdate, KycDocument, KycSubmit, KycVerify
from schemas.loan_product import LoanProductCreate, LoanProductUpdate
from schemas.partner import WebhookRegister

__all__ = [
    "AddressSchema",
    "ApplicationCreate",
    "ApproveRequest",
    "ChangePasswordRequest",
    "CollateralCreate",
    "CustomerUpdate",
    "KycDocument",
    "KycSubmit",
    "KycVerify",
    "LoanProductCreate",
    "LoanProductUpdate",
    "LoginRequest",
    "PartnerApplicationCreate",
    "PledgeRequest",
    "RefreshTokenRequest",
    "RegisterRequest",
    "RejectRequest",
    "ReleaseRequest",
    "StatusUpdate",
    "WebhookRegister",
]
