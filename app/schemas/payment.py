"""Payment API schemas: owner onboarding and tenant rent payments."""

from typing import Any, Literal

from pydantic import BaseModel, EmailStr, Field


class ConnectAccountRequest(BaseModel):
    business_type: Literal["individual", "company", "non_profit", "government_entity"] = "individual"


class ConnectAccountResponse(BaseModel):
    account_id: str
    already_onboarded: bool
    onboarding_url: str | None = None
    message: str | None = None


class AccountStatusResponse(BaseModel):
    has_account: bool
    onboarding_complete: bool = False
    can_receive_transfers: bool = False
    account_id: str | None = None
    charges_enabled: bool = False
    payouts_enabled: bool = False
    details_submitted: bool = False
    requirements: dict[str, Any] = Field(default_factory=dict)


class PaymentItemSchema(BaseModel):
    type: str = Field(..., min_length=1)
    amount: float
    label: str | None = None
    required: bool = True


class PaymentBreakdown(BaseModel):
    total: float
    platform_fee: float
    management_fee: float
    owner_net: float


class OwnerInfo(BaseModel):
    id: str | None = None
    name: str | None = None
    email: str | None = None
    phone: str | None = None


class CreateIntentRequest(BaseModel):
    application_id: str = Field(..., min_length=1)
    payment_items: list[PaymentItemSchema] | None = None
    card_type: str | None = None
    verification_id: str | None = None
    email: EmailStr | None = None


class CreateIntentResponse(BaseModel):
    client_secret: str | None
    payment_intent_id: str
    email_verified: bool
    owner: OwnerInfo
    breakdown: PaymentBreakdown


class ConfirmPaymentRequest(BaseModel):
    application_id: str = Field(..., min_length=1)
    payment_intent_id: str = Field(..., min_length=1)


class PaymentDetailsResponse(BaseModel):
    application: dict[str, Any]
    items: list[PaymentItemSchema]
    total: float


class SendVerificationRequest(BaseModel):
    application_id: str = Field(..., min_length=1)
    email: EmailStr


class SendVerificationResponse(BaseModel):
    verification_id: str
    expires_in: int
    message: str = "Verification code sent to your email"


class VerifyEmailRequest(BaseModel):
    application_id: str = Field(..., min_length=1)
    verification_id: str = Field(..., min_length=1)
    code: str = Field(..., min_length=4, max_length=10)


class PaymentMessageResponse(BaseModel):
    success: bool = True
    message: str


class WebhookAckResponse(BaseModel):
    received: bool = True
    handled: bool
