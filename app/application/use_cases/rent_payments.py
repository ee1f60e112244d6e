"""Tenant rent payments for approved rental applications.

An approved applicant sees what is due (first month, deposit, admin fee),
may verify their email with a one-time code, and gets a payment intent for
the card form. Creating the intent writes one payment record per item and
the platform / management / owner distribution of each record. A payment
completes when the tenant confirms it or when the processor's webhook
reports it; completing twice is harmless.
"""

from __future__ import annotations

import hmac
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from app.application.dtos.auth import AuthUser
from app.application.dtos.payment import (
    FeeSplit,
    PaymentDetails,
    PaymentIntentResult,
    PaymentItem,
    VerificationSent,
    to_money,
)
from app.application.interfaces.services import IEmailSender, IPaymentProcessor
from app.application.services.data_access import DataAccess
from app.core.constants import (
    LEASE_LENGTH_DAYS,
    MAX_VERIFICATION_ATTEMPTS,
    PLATFORM_RECIPIENT_ID,
    SELECT_APPLICATION_FOR_PAYMENT,
    TABLE_EMAIL_VERIFICATIONS,
    TABLE_PAYMENT_DISTRIBUTIONS,
    TABLE_PAYMENT_RECORDS,
    TABLE_PROFILES,
    TABLE_RENTAL_AGREEMENTS,
    TABLE_RENTAL_APPLICATIONS,
)
from app.domain.enums import ApplicationStatus, ErrorKind, PaymentStatus, RecipientType
from app.domain.exceptions import (
    AuthRequiredException,
    NotFoundException,
    PermissionDeniedException,
    UpstreamFailureException,
    ValidationException,
    VerificationAttemptsExceededException,
)
from app.domain.value_objects import QueryDescriptor, QueryFilter
from app.infrastructure.external.email.templates import payment_verification_email
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import ensure_utc, utc_now, utc_now_iso
from app.shared.utils.generators import generate_cuid, verification_code

logger = get_logger(__name__)

PAYABLE_STATUSES = (ApplicationStatus.APPROVED.value, ApplicationStatus.PAYMENT_PENDING.value)

EVENT_SUCCEEDED = "payment_intent.succeeded"
EVENT_FAILED = "payment_intent.payment_failed"


def _money(value: Decimal) -> float:
    return float(value)


class PaymentService:
    def __init__(
        self,
        data: DataAccess,
        payments: IPaymentProcessor,
        sender: IEmailSender,
        *,
        currency: str = "usd",
        platform_fee_percentage: float = 5.0,
        admin_fee: float = 100.0,
        verification_ttl: int = 900,
    ) -> None:
        self.data = data
        self.payments = payments
        self.sender = sender
        self.currency = currency
        self.platform_fee_percentage = platform_fee_percentage
        self.admin_fee = admin_fee
        self.verification_ttl = verification_ttl

    async def _write(self, table: str, operation: Callable[[], Awaitable[Any]]) -> Any:
        """Run a write that invalidates table; raise its error, if any."""
        result = await self.data.mutate(operation, [table])
        return result.unwrap()

    # Reads always go to the data API

    async def _application(self, application_id: str) -> dict[str, Any]:
        result = await self.data.refetch(
            QueryDescriptor(
                table=TABLE_RENTAL_APPLICATIONS,
                select=SELECT_APPLICATION_FOR_PAYMENT,
                filters=[QueryFilter("id", "eq", application_id)],
                single=True,
            )
        )
        if result.kind == ErrorKind.NOT_FOUND:
            raise NotFoundException("rental_application", application_id)
        return result.unwrap()

    async def _owner(self, owner_id: str) -> dict[str, Any]:
        result = await self.data.refetch(
            QueryDescriptor(
                table=TABLE_PROFILES,
                select="id,full_name,email,phone",
                filters=[QueryFilter("id", "eq", owner_id)],
                single=True,
            )
        )
        if result.kind == ErrorKind.NOT_FOUND:
            raise NotFoundException("property_owner", owner_id)
        return result.unwrap()

    async def _verification(
        self, verification_id: str, application_id: str
    ) -> dict[str, Any] | None:
        result = await self.data.refetch(
            QueryDescriptor(
                table=TABLE_EMAIL_VERIFICATIONS,
                filters=[
                    QueryFilter("id", "eq", verification_id),
                    QueryFilter("application_id", "eq", application_id),
                ],
                single=True,
            )
        )
        if result.kind == ErrorKind.NOT_FOUND:
            return None
        return result.unwrap()

    async def _payable(
        self, user: AuthUser | None, application_id: str
    ) -> tuple[dict[str, Any], dict[str, Any]]:
        """The caller's application and its property, if it may be paid now."""
        if user is None:
            raise AuthRequiredException()
        if not application_id:
            raise ValidationException("Application ID is required", field="application_id")
        application = await self._application(application_id)
        if application.get("user_id") != user.id:
            raise PermissionDeniedException(f"rental_application:{application_id}", "pay")
        status = application.get("status")
        if status not in PAYABLE_STATUSES:
            raise ValidationException(
                f"Application status is '{status}'. "
                "Only approved applications can proceed to payment.",
                field="status",
            )
        prop = application.get("properties")
        if not prop:
            raise NotFoundException("property", str(application.get("property_id")))
        return application, prop

    def payment_items(self, prop: dict[str, Any]) -> list[PaymentItem]:
        """First month's rent, the security deposit (a month's rent if unset) and the admin fee."""
        rent = to_money(prop.get("price") or 0)
        deposit = to_money(prop.get("security_deposit") or rent)
        return [
            PaymentItem("first_month_rent", rent, "First Month Rent"),
            PaymentItem("security_deposit", deposit, "Security Deposit"),
            PaymentItem("admin_fee", to_money(self.admin_fee), "Administrative Fee"),
        ]

    def _fee_percentages(self, prop: dict[str, Any]) -> tuple[Decimal, Decimal]:
        platform = prop.get("platform_fee_percentage")
        if platform is None:
            platform = self.platform_fee_percentage
        management = prop.get("management_fee_percentage") or 0
        platform, management = Decimal(str(platform)), Decimal(str(management))
        if platform < 0 or management < 0 or platform + management > 100:
            raise ValidationException(
                "Fee percentages must be non-negative and add up to at most 100",
                field="platform_fee_percentage",
            )
        return platform, management

    async def payment_details(self, user: AuthUser | None, application_id: str) -> PaymentDetails:
        application, prop = await self._payable(user, application_id)
        return PaymentDetails(application=application, items=self.payment_items(prop))

    # Email verification

    async def send_verification(
        self, user: AuthUser | None, application_id: str, email: str
    ) -> VerificationSent:
        """Email a fresh six-digit code; earlier unverified codes are dropped.

        The stored code is removed again when the email cannot be sent.
        """
        _, prop = await self._payable(user, application_id)
        email = (email or "").strip().lower()
        if not email:
            raise ValidationException("Email is required", field="email")

        unverified = [
            QueryFilter("application_id", "eq", application_id),
            QueryFilter("verified", "eq", False),
        ]
        await self._write(
            TABLE_EMAIL_VERIFICATIONS,
            lambda: self.data.data_api.delete(TABLE_EMAIL_VERIFICATIONS, unverified),
        )

        verification_id = f"email-{generate_cuid()}"
        code = verification_code()
        row = {
            "id": verification_id,
            "application_id": application_id,
            "email": email,
            "code": code,
            "expires_at": (utc_now() + timedelta(seconds=self.verification_ttl)).isoformat(),
            "attempts": 0,
            "verified": False,
            "created_at": utc_now_iso(),
        }
        await self._write(
            TABLE_EMAIL_VERIFICATIONS,
            lambda: self.data.data_api.insert(TABLE_EMAIL_VERIFICATIONS, row),
        )

        message = payment_verification_email(
            email, prop.get("title"), code, self.verification_ttl // 60
        )
        try:
            await self.sender.send(message)
        except UpstreamFailureException:
            await self.data.mutate(
                lambda: self.data.data_api.delete(
                    TABLE_EMAIL_VERIFICATIONS, [QueryFilter("id", "eq", verification_id)]
                ),
                [TABLE_EMAIL_VERIFICATIONS],
            )
            raise
        logger.info("Payment verification code sent for application %s", application_id)
        return VerificationSent(verification_id=verification_id, expires_in=self.verification_ttl)

    async def verify_email(
        self, user: AuthUser | None, application_id: str, verification_id: str, code: str
    ) -> bool:
        """Check code against the stored verification.

        Returns:
            True when the email had already been verified, False when this call verified it.

        Raises:
            NotFoundException: No such verification for the application.
            ValidationException: Expired or wrong code.
            VerificationAttemptsExceededException: Too many wrong codes (429).
        """
        await self._payable(user, application_id)
        if not verification_id or not code:
            raise ValidationException("Verification ID and code are required", field="code")
        verification = await self._verification(verification_id, application_id)
        if verification is None:
            raise NotFoundException("email_verification", verification_id)
        if verification.get("verified"):
            return True

        expires_at = ensure_utc(datetime.fromisoformat(verification["expires_at"]))
        if utc_now() > expires_at:
            raise ValidationException(
                "Verification code has expired. Please request a new one.", field="code"
            )
        attempts = int(verification.get("attempts") or 0)
        if attempts >= MAX_VERIFICATION_ATTEMPTS:
            raise VerificationAttemptsExceededException(verification_id)

        by_id = [QueryFilter("id", "eq", verification_id)]
        await self._write(
            TABLE_EMAIL_VERIFICATIONS,
            lambda: self.data.data_api.update(
                TABLE_EMAIL_VERIFICATIONS, {"attempts": attempts + 1}, by_id
            ),
        )
        if not hmac.compare_digest(str(verification.get("code", "")), code.strip()):
            raise ValidationException("Invalid verification code", field="code")

        verified = {"verified": True, "verified_at": utc_now_iso()}
        await self._write(
            TABLE_EMAIL_VERIFICATIONS,
            lambda: self.data.data_api.update(TABLE_EMAIL_VERIFICATIONS, verified, by_id),
        )
        logger.info("Payment email verified for application %s", application_id)
        return False

    # Payment intent

    @staticmethod
    def _record(
        application_id: str,
        item: PaymentItem,
        split: FeeSplit,
        intent_id: str,
        verification_id: str | None,
        email: str | None,
    ) -> dict[str, Any]:
        now = utc_now_iso()
        return {
            "application_id": application_id,
            "payment_type": item.type,
            "amount": _money(split.total),
            "payment_intent_id": intent_id,
            "due_date": now,
            "status": PaymentStatus.PENDING.value,
            "platform_fee_amount": _money(split.platform_fee),
            "management_fee_amount": _money(split.management_fee),
            "owner_net_amount": _money(split.owner_net),
            "email_verification_id": verification_id,
            "email_verified": verification_id is not None,
            "verified_email": email,
            "created_at": now,
        }

    @staticmethod
    def _distributions(
        record: dict[str, Any], split: FeeSplit, owner_id: str, management_id: str | None
    ) -> list[dict[str, Any]]:
        """Platform and management shares (when non-zero) plus the owner's share."""
        now = utc_now_iso()

        def share(
            recipient: RecipientType, recipient_id: str, amount: Decimal, percentage: Decimal
        ) -> dict[str, Any]:
            return {
                "payment_record_id": record["id"],
                "recipient_type": recipient.value,
                "recipient_id": recipient_id,
                "amount": _money(amount),
                "percentage": _money(percentage),
                "status": PaymentStatus.PENDING.value,
                "created_at": now,
            }

        rows = []
        if split.platform_fee > 0:
            rows.append(
                share(
                    RecipientType.PLATFORM,
                    PLATFORM_RECIPIENT_ID,
                    split.platform_fee,
                    split.platform_percentage,
                )
            )
        if split.management_fee > 0:
            rows.append(
                share(
                    RecipientType.MANAGEMENT,
                    management_id or owner_id,
                    split.management_fee,
                    split.management_percentage,
                )
            )
        rows.append(
            share(RecipientType.OWNER, owner_id, split.owner_net, split.owner_percentage)
        )
        return rows

    async def create_intent(
        self,
        user: AuthUser | None,
        application_id: str,
        items: list[PaymentItem] | None = None,
        card_type: str | None = None,
        verification_id: str | None = None,
        email: str | None = None,
    ) -> PaymentIntentResult:
        """Create the processor payment intent and the pending payment records.

        items defaults to payment_items() for the property. When the
        records cannot be written the intent is cancelled again; missing
        distributions are logged for manual reconciliation.
        """
        application, prop = await self._payable(user, application_id)
        owner = await self._owner(prop.get("owner_id", ""))
        if verification_id:
            verification = await self._verification(verification_id, application_id)
            if verification is None or not verification.get("verified"):
                raise ValidationException(
                    "Email verification required before payment", field="verification_id"
                )
            email = email or verification.get("email")

        items = items or self.payment_items(prop)
        if any(item.amount <= 0 for item in items):
            raise ValidationException("Payment amounts must be positive", field="payment_items")
        platform_pct, management_pct = self._fee_percentages(prop)
        split = FeeSplit.of(sum(item.amount for item in items), platform_pct, management_pct)

        owner_name = owner.get("full_name") or ""
        intent = await self.payments.create_payment_intent(
            int(split.total * 100),
            self.currency,
            {
                "application_id": application_id,
                "property_id": str(prop.get("id")),
                "tenant_id": str(application.get("user_id")),
                "owner_id": str(owner.get("id")),
                "owner_name": owner_name,
                "card_type": card_type or "unknown",
                "email_verified": "true" if verification_id else "false",
                "platform_fee_amount": str(split.platform_fee),
                "owner_net_amount": str(split.owner_net),
            },
            f"Rental Payment - {prop.get('title')} (Owner: {owner_name})",
            receipt_email=email,
        )

        item_splits = [FeeSplit.of(item.amount, platform_pct, management_pct) for item in items]
        records = [
            self._record(application_id, item, item_split, intent.id, verification_id, email)
            for item, item_split in zip(items, item_splits)
        ]
        result = await self.data.mutate(
            lambda: self.data.data_api.insert(TABLE_PAYMENT_RECORDS, records),
            [TABLE_PAYMENT_RECORDS],
        )
        if not result.ok:
            try:
                await self.payments.cancel_payment_intent(intent.id)
            except UpstreamFailureException as exc:
                logger.error("Payment intent %s left open: %s", intent.id, exc.message)
            result.unwrap()

        distributions = [
            row
            for record, item_split in zip(result.value, item_splits)
            for row in self._distributions(
                record, item_split, str(owner.get("id")), prop.get("management_company_id")
            )
        ]
        written = await self.data.mutate(
            lambda: self.data.data_api.insert(TABLE_PAYMENT_DISTRIBUTIONS, distributions),
            [TABLE_PAYMENT_DISTRIBUTIONS],
        )
        if not written.ok:
            logger.error(
                "Distributions for payment intent %s not written; reconcile manually", intent.id
            )

        await self._set_application_status(
            application_id, ApplicationStatus.PAYMENT_PENDING, PaymentStatus.PENDING
        )
        logger.info(
            "Payment intent %s for application %s: total=%s platform=%s owner=%s",
            intent.id,
            application_id,
            split.total,
            split.platform_fee,
            split.owner_net,
        )
        return PaymentIntentResult(
            payment_intent_id=intent.id,
            client_secret=intent.client_secret,
            email_verified=bool(verification_id),
            owner={
                "id": owner.get("id"),
                "name": owner.get("full_name"),
                "email": owner.get("email"),
                "phone": owner.get("phone"),
            },
            split=split,
        )

    # Completion

    async def _set_application_status(
        self, application_id: str, status: ApplicationStatus, payment_status: PaymentStatus
    ) -> None:
        values = {
            "status": status.value,
            "payment_status": payment_status.value,
            "updated_at": utc_now_iso(),
        }
        by_id = [QueryFilter("id", "eq", application_id)]
        await self._write(
            TABLE_RENTAL_APPLICATIONS,
            lambda: self.data.data_api.update(TABLE_RENTAL_APPLICATIONS, values, by_id),
        )

    async def _set_records_status(self, intent_id: str, values: dict[str, Any]) -> None:
        by_intent = [QueryFilter("payment_intent_id", "eq", intent_id)]
        await self._write(
            TABLE_PAYMENT_RECORDS,
            lambda: self.data.data_api.update(TABLE_PAYMENT_RECORDS, values, by_intent),
        )

    async def _create_agreement(self, application_id: str) -> None:
        """One active one-year agreement per paid application."""
        existing = await self.data.refetch(
            QueryDescriptor(
                table=TABLE_RENTAL_AGREEMENTS,
                select="id",
                filters=[QueryFilter("application_id", "eq", application_id)],
            )
        )
        if existing.unwrap():
            return
        application = await self._application(application_id)
        prop = application.get("properties") or {}
        today = utc_now().date()
        row = {
            "application_id": application_id,
            "property_id": application.get("property_id"),
            "tenant_id": application.get("user_id"),
            "owner_id": prop.get("owner_id"),
            "lease_start_date": today.isoformat(),
            "lease_end_date": (today + timedelta(days=LEASE_LENGTH_DAYS)).isoformat(),
            "monthly_rent": prop.get("price"),
            "security_deposit": prop.get("security_deposit") or prop.get("price"),
            "status": "active",
        }
        result = await self.data.mutate(
            lambda: self.data.data_api.insert(TABLE_RENTAL_AGREEMENTS, row),
            [TABLE_RENTAL_AGREEMENTS],
        )
        if not result.ok:
            logger.error("Rental agreement for application %s not created", application_id)

    async def _complete(self, application_id: str, intent_id: str) -> None:
        await self._set_records_status(
            intent_id,
            {
                "status": PaymentStatus.COMPLETED.value,
                "paid_at": utc_now_iso(),
                "transaction_id": intent_id,
            },
        )
        await self._set_application_status(
            application_id, ApplicationStatus.COMPLETED, PaymentStatus.COMPLETED
        )
        await self._create_agreement(application_id)
        logger.info("Payment %s completed for application %s", intent_id, application_id)

    async def confirm_payment(
        self, user: AuthUser | None, application_id: str, payment_intent_id: str
    ) -> None:
        """Complete the payment once the processor reports the intent as succeeded."""
        if user is None:
            raise AuthRequiredException()
        application = await self._application(application_id)
        if application.get("user_id") != user.id:
            raise PermissionDeniedException(f"rental_application:{application_id}", "pay")
        intent = await self.payments.retrieve_payment_intent(payment_intent_id)
        if intent.metadata.get("application_id") != application_id:
            raise ValidationException(
                "Payment intent does not belong to this application", field="payment_intent_id"
            )
        if not intent.succeeded:
            raise ValidationException(
                f"Payment has not succeeded (status {intent.status})", field="payment_intent_id"
            )
        await self._complete(application_id, intent.id)

    async def handle_event(self, event: dict[str, Any]) -> bool:
        """Apply a verified processor event; False when it is not one we act on."""
        event_type = event.get("type")
        intent = (event.get("data") or {}).get("object") or {}
        application_id = (intent.get("metadata") or {}).get("application_id")
        if event_type not in (EVENT_SUCCEEDED, EVENT_FAILED):
            logger.debug("Ignoring payment event %s", event_type)
            return False
        if not application_id or not intent.get("id"):
            logger.warning("Payment event %s has no application id", event.get("id"))
            return False

        if event_type == EVENT_SUCCEEDED:
            await self._complete(application_id, intent["id"])
            return True

        await self._set_records_status(intent["id"], {"status": PaymentStatus.FAILED.value})
        await self._set_application_status(
            application_id, ApplicationStatus.APPROVED, PaymentStatus.NOT_REQUIRED
        )
        logger.info("Payment %s failed for application %s", intent["id"], application_id)
        return True
