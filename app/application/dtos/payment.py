"""DTOs for payment-processor onboarding and tenant rent payments."""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any


@dataclass(frozen=True)
class ConnectedAccount:
    """Connected payment account as reported by the processor."""

    id: str
    details_submitted: bool = False
    charges_enabled: bool = False
    payouts_enabled: bool = False
    transfers_capability: str | None = None
    requirements: dict[str, Any] = field(default_factory=dict)

    @property
    def onboarding_complete(self) -> bool:
        return self.details_submitted and self.charges_enabled and self.payouts_enabled

    @property
    def can_receive_transfers(self) -> bool:
        return self.transfers_capability == "active"


@dataclass(frozen=True)
class OnboardingResult:
    """Result of starting (or resuming) onboarding for an owner."""

    account_id: str
    already_onboarded: bool
    onboarding_url: str | None = None


@dataclass(frozen=True)
class AccountStatus:
    """Onboarding status summary for an owner's profile."""

    has_account: bool
    onboarding_complete: bool = False
    can_receive_transfers: bool = False
    account_id: str | None = None
    charges_enabled: bool = False
    payouts_enabled: bool = False
    details_submitted: bool = False
    requirements: dict[str, Any] = field(default_factory=dict)


CENT = Decimal("0.01")


def to_money(value: float | int | str | Decimal) -> Decimal:
    """Amount rounded to cents."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PaymentIntent:
    """Payment intent as reported by the processor."""

    id: str
    status: str
    amount: int
    currency: str
    client_secret: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


@dataclass(frozen=True)
class FeeSplit:
    """How one amount is shared between platform, management company and owner."""

    total: Decimal
    platform_fee: Decimal
    management_fee: Decimal
    owner_net: Decimal
    platform_percentage: Decimal
    management_percentage: Decimal

    @classmethod
    def of(
        cls,
        amount: float | Decimal,
        platform_percentage: float | Decimal,
        management_percentage: float | Decimal = 0,
    ) -> "FeeSplit":
        """Split amount; the owner gets what is left after both fees."""
        total = to_money(amount)
        platform_pct = Decimal(str(platform_percentage))
        management_pct = Decimal(str(management_percentage))
        platform_fee = to_money(total * platform_pct / 100)
        management_fee = to_money(total * management_pct / 100)
        return cls(
            total=total,
            platform_fee=platform_fee,
            management_fee=management_fee,
            owner_net=total - platform_fee - management_fee,
            platform_percentage=platform_pct,
            management_percentage=management_pct,
        )

    @property
    def owner_percentage(self) -> Decimal:
        return 100 - self.platform_percentage - self.management_percentage


@dataclass(frozen=True)
class PaymentItem:
    """One line of a rent payment (first month, deposit, admin fee)."""

    type: str
    amount: Decimal
    label: str | None = None
    required: bool = True


@dataclass(frozen=True)
class PaymentDetails:
    """An approved application with what the tenant has to pay."""

    application: dict[str, Any]
    items: list[PaymentItem]

    @property
    def total(self) -> Decimal:
        return sum((item.amount for item in self.items), Decimal("0.00"))


@dataclass(frozen=True)
class PaymentIntentResult:
    """Client secret for the card form plus the owner and fee breakdown."""

    payment_intent_id: str
    client_secret: str | None
    email_verified: bool
    owner: dict[str, Any]
    split: FeeSplit


@dataclass(frozen=True)
class VerificationSent:
    verification_id: str
    expires_in: int
