"""
Paystack Routes

POST /paystack/initialize - Start a checkout for an amount and payer email
GET /paystack/verify/{reference} - Look up a transaction
POST /paystack/confirm - Settle a verified payment against a job
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from gigconnect.core.errors import ConfigurationError, NotFoundError, ServiceError
from gigconnect.schemas.schemas import (
    ConfirmPaymentRequest, ConfirmPaymentResponse,
    InitializePaymentRequest, InitializePaymentResponse, VerifyPaymentResponse,
)
from gigconnect.services.payment_relay_service import PaymentRelayService, get_payment_relay_service
from gigconnect.services.paystack_client import PaystackClient, PaystackError, get_paystack_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/paystack", tags=["Paystack"])


@router.post("/initialize", response_model=InitializePaymentResponse)
def initialize_payment(body: InitializePaymentRequest, client: PaystackClient = Depends(get_paystack_client)):
    """Create a Paystack checkout session."""
    if not body.amount or not body.email:
        raise HTTPException(status_code=400, detail="Amount and email are required.")
    try:
        return client.initialize_transaction(body.amount, body.email, body.metadata)
    except PaystackError as e:
        logger.error("Paystack initialize failed: %s", e.message)
        raise HTTPException(status_code=500, detail=e.message or "Failed to initialize payment.")


@router.get("/verify/{reference}", response_model=VerifyPaymentResponse, response_model_by_alias=True)
def verify_payment(reference: str, client: PaystackClient = Depends(get_paystack_client)):
    try:
        return client.verify_transaction(reference)
    except PaystackError as e:
        logger.error("Paystack verify failed for %s: %s", reference, e.message)
        raise HTTPException(status_code=500, detail=e.message or "Failed to verify payment.")


@router.post(
    "/confirm",
    response_model=ConfirmPaymentResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
def confirm_payment(body: ConfirmPaymentRequest, relay: PaymentRelayService = Depends(get_payment_relay_service)):
    """
    Verify the reference and mark the job paid.
    Confirming an already-paid job returns status "already_paid".
    """
    try:
        return relay.confirm_payment(body.reference, body.job_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=e.message)
    except ServiceError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except PaystackError as e:
        logger.error("Paystack confirm failed for %s: %s", body.reference, e.message)
        raise HTTPException(status_code=500, detail=e.message or "Failed to confirm payment.")
