"""
Partner (DSA / fintech) API, authenticated by the X-API-Key header instead of
a user token. Partners originate applications for existing customers.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from api.deps import get_current_partner
from api.loan_products import product_to_response
from models import ApiPartner
from schemas.application import PartnerApplicationCreate
from schemas.partner import WebhookRegister
from services.applications import create_application
from services.repository import Repository, get_repository
from utils.case import iso
from utils.errors import NotFoundError
from utils.helpers import api_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/partner", tags=["partner"])


@router.get("/loan-products", response_model=dict)
async def partner_loan_products(
    partner: ApiPartner = Depends(get_current_partner),
    repo: Repository = Depends(get_repository),
):
    products = await repo.list_active_products()
    return api_response([product_to_response(p) for p in products])


@router.post("/applications/create", response_model=dict, status_code=201)
async def partner_create_application(
    body: PartnerApplicationCreate,
    partner: ApiPartner = Depends(get_current_partner),
    repo: Repository = Depends(get_repository),
):
    customer = await repo.get_customer_by_pan(body.pan_number)
    if not customer:
        raise NotFoundError("Customer not found for the given PAN")
    application = await create_application(repo, customer, body, created_by_id=partner.id)
    logger.info("Partner %s created application %s", partner.partner_code, application.application_number)
    data = application.application_data or {}
    return api_response(
        {
            "applicationId": application.id,
            "applicationNumber": application.application_number,
            "status": application.status,
            "requestedAmount": application.requested_amount,
            "tenure": application.tenure_months,
            "interestRate": application.interest_rate,
            "calculatedEmi": data.get("calculated_emi"),
        },
        "Loan application created successfully",
    )


@router.get("/applications/{application_number}/status", response_model=dict)
async def partner_application_status(
    application_number: str,
    partner: ApiPartner = Depends(get_current_partner),
    repo: Repository = Depends(get_repository),
):
    application = await repo.get_application_by_number(application_number)
    # Partners only see applications they originated
    if not application or application.created_by_id != partner.id:
        raise NotFoundError("Loan application not found")
    return api_response({
        "applicationNumber": application.application_number,
        "status": application.status,
        "requestedAmount": application.requested_amount,
        "approvedAmount": application.approved_amount,
        "rejectionReason": application.rejection_reason,
        "updatedAt": iso(application.updated_at),
    })


@router.post("/webhooks/register", response_model=dict)
async def register_webhook(
    body: WebhookRegister,
    partner: ApiPartner = Depends(get_current_partner),
    repo: Repository = Depends(get_repository),
):
    partner.webhook_url = body.url
    partner.webhook_events = list(body.events)
    await repo.flush()
    logger.info("Partner %s registered webhook %s", partner.partner_code, body.url)
    return api_response(
        {"webhookUrl": partner.webhook_url, "events": partner.webhook_events},
        "Webhook registered successfully",
    )
