"""Payments API: payout onboarding for owners, rent payments for tenants."""

import json
from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request

from app.api.v1.dependencies import CurrentUser, get_onboarding_service, get_payment_service
from app.application.dtos.payment import PaymentItem, to_money
from app.application.use_cases import OnboardingService, PaymentService
from app.core.config import get_settings
from app.core.limiter import limit_email, limit_onboarding, limit_writes
from app.infrastructure.external.payments.stripe_connect import verify_webhook_signature
from app.schemas.payment import (
    AccountStatusResponse,
    ConfirmPaymentRequest,
    ConnectAccountRequest,
    ConnectAccountResponse,
    CreateIntentRequest,
    CreateIntentResponse,
    OwnerInfo,
    PaymentBreakdown,
    PaymentDetailsResponse,
    PaymentItemSchema,
    PaymentMessageResponse,
    SendVerificationRequest,
    SendVerificationResponse,
    VerifyEmailRequest,
    WebhookAckResponse,
)
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

Onboarding = Annotated[OnboardingService, Depends(get_onboarding_service)]
Payments = Annotated[PaymentService, Depends(get_payment_service)]


@router.post("/connect-account", response_model=ConnectAccountResponse)
@limit_onboarding
async def create_connect_account(
    request: Request,
    body: ConnectAccountRequest,
    user: CurrentUser,
    onboarding: Onboarding,
) -> ConnectAccountResponse:
    """Create or resume the owner's payout account onboarding."""
    result = await onboarding.start_onboarding(user, body.business_type)
    return ConnectAccountResponse(
        account_id=result.account_id,
        already_onboarded=result.already_onboarded,
        onboarding_url=result.onboarding_url,
        message="Account already set up and onboarded" if result.already_onboarded else None,
    )


@router.get("/account-status", response_model=AccountStatusResponse)
async def account_status(user: CurrentUser, onboarding: Onboarding) -> AccountStatusResponse:
    status = await onboarding.account_status(user)
    return AccountStatusResponse(**asdict(status))


@router.post("/send-email-verification", response_model=SendVerificationResponse)
@limit_email
async def send_email_verification(
    request: Request,
    body: SendVerificationRequest,
    user: CurrentUser,
    payments: Payments,
) -> SendVerificationResponse:
    """Email a one-time code the tenant enters before paying (valid 15 minutes)."""
    sent = await payments.send_verification(user, body.application_id, body.email)
    return SendVerificationResponse(
        verification_id=sent.verification_id, expires_in=sent.expires_in
    )


@router.post("/verify-email", response_model=PaymentMessageResponse)
@limit_writes
async def verify_email(
    request: Request,
    body: VerifyEmailRequest,
    user: CurrentUser,
    payments: Payments,
) -> PaymentMessageResponse:
    already = await payments.verify_email(
        user, body.application_id, body.verification_id, body.code
    )
    return PaymentMessageResponse(
        message="Email already verified" if already else "Email verified successfully"
    )


@router.post("/intent", response_model=CreateIntentResponse)
@limit_writes
async def create_payment_intent(
    request: Request,
    body: CreateIntentRequest,
    user: CurrentUser,
    payments: Payments,
) -> CreateIntentResponse:
    """Payment intent for an approved application; items default to rent, deposit and fee."""
    items = (
        [PaymentItem(i.type, to_money(i.amount), i.label, i.required) for i in body.payment_items]
        if body.payment_items
        else None
    )
    result = await payments.create_intent(
        user,
        body.application_id,
        items,
        card_type=body.card_type,
        verification_id=body.verification_id,
        email=body.email,
    )
    split = result.split
    return CreateIntentResponse(
        client_secret=result.client_secret,
        payment_intent_id=result.payment_intent_id,
        email_verified=result.email_verified,
        owner=OwnerInfo(**result.owner),
        breakdown=PaymentBreakdown(
            total=float(split.total),
            platform_fee=float(split.platform_fee),
            management_fee=float(split.management_fee),
            owner_net=float(split.owner_net),
        ),
    )


@router.post("/confirm", response_model=PaymentMessageResponse)
@limit_writes
async def confirm_payment(
    request: Request,
    body: ConfirmPaymentRequest,
    user: CurrentUser,
    payments: Payments,
) -> PaymentMessageResponse:
    await payments.confirm_payment(user, body.application_id, body.payment_intent_id)
    return PaymentMessageResponse(message="Payment completed successfully")


@router.post("/webhook", response_model=WebhookAckResponse)
@limit_writes
async def payment_webhook(request: Request, payments: Payments) -> WebhookAckResponse:
    """Processor callback for payment intent events.

    STRIPE_WEBHOOK_SECRET must be set, and the Stripe-Signature header
    must sign the raw body with it.
    """
    body = await request.body()
    settings = get_settings()
    if not settings.stripe_webhook_secret:
        raise HTTPException(
            status_code=503,
            detail="Payment webhook is not configured (STRIPE_WEBHOOK_SECRET is not set).",
        )
    signature = request.headers.get("Stripe-Signature")
    secret = settings.stripe_webhook_secret.get_secret_value()
    if not verify_webhook_signature(body, signature, secret):
        logger.warning("Rejected payment webhook with a bad signature")
        raise HTTPException(status_code=400, detail="Invalid or missing webhook signature")
    try:
        event = json.loads(body)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Webhook body is not JSON") from exc
    if not isinstance(event, dict):
        raise HTTPException(status_code=400, detail="Webhook body must be a JSON object")
    handled = await payments.handle_event(event)
    return WebhookAckResponse(handled=handled)


@router.get("/{application_id}", response_model=PaymentDetailsResponse)
async def payment_details(
    application_id: str, user: CurrentUser, payments: Payments
) -> PaymentDetailsResponse:
    """What an approved applicant has to pay, with the application and property."""
    details = await payments.payment_details(user, application_id)
    return PaymentDetailsResponse(
        application=details.application,
        items=[
            PaymentItemSchema(
                type=item.type, amount=float(item.amount), label=item.label, required=item.required
            )
            for item in details.items
        ],
        total=float(details.total),
    )
