"""Payment onboarding for property owners (connected payout accounts)."""

from __future__ import annotations

from typing import Any

from app.application.dtos.auth import AuthUser
from app.application.dtos.payment import AccountStatus, OnboardingResult
from app.application.interfaces.services import IPaymentProcessor
from app.application.services.data_access import DataAccess
from app.core.constants import TABLE_PROFILES
from app.domain.enums import ErrorKind
from app.domain.exceptions import (
    AuthRequiredException,
    UpstreamFailureException,
    ValidationException,
)
from app.domain.value_objects import QueryDescriptor, QueryFilter
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now_iso

logger = get_logger(__name__)

BUSINESS_TYPES = ("individual", "company", "non_profit", "government_entity")


def payout_profile_query(user_id: str) -> QueryDescriptor:
    return QueryDescriptor(
        table=TABLE_PROFILES,
        select="stripe_account_id,stripe_onboarding_completed,can_receive_transfers",
        filters=[QueryFilter("id", "eq", user_id)],
        single=True,
    )


class OnboardingService:
    def __init__(
        self,
        data: DataAccess,
        payments: IPaymentProcessor,
        refresh_url: str,
        return_url: str,
    ) -> None:
        self.data = data
        self.payments = payments
        self.refresh_url = refresh_url
        self.return_url = return_url

    async def _payout_profile(self, user_id: str) -> dict[str, Any]:
        """Payout columns of the profile; {} when the profile row does not exist yet."""
        result = await self.data.refetch(payout_profile_query(user_id))
        if result.kind == ErrorKind.NOT_FOUND:
            return {}
        return result.unwrap()

    async def _update_profile(self, user: AuthUser, values: dict[str, Any]) -> None:
        """Upsert payout columns so a user without a profile row still gets one."""
        row = {"id": user.id, **values, "updated_at": utc_now_iso()}
        if user.email:
            row.setdefault("email", user.email)
        result = await self.data.mutate(
            lambda: self.data.data_api.insert(TABLE_PROFILES, row, upsert=True),
            [TABLE_PROFILES],
        )
        if not result.unwrap():
            raise UpstreamFailureException("data_api", f"profile {user.id} was not written")

    async def start_onboarding(
        self, user: AuthUser | None, business_type: str = "individual"
    ) -> OnboardingResult:
        """Create (or reuse) the owner's connected account and return an onboarding link.

        An owner who already finished onboarding gets already_onboarded=True
        and no link.
        """
        if user is None:
            raise AuthRequiredException()
        if not user.email:
            raise ValidationException("User ID and email are required", field="email")
        if business_type not in BUSINESS_TYPES:
            raise ValidationException(
                f"business_type must be one of {list(BUSINESS_TYPES)}", field="business_type"
            )
        profile = await self._payout_profile(user.id)
        account_id = profile.get("stripe_account_id")
        if account_id and profile.get("stripe_onboarding_completed"):
            return OnboardingResult(account_id=account_id, already_onboarded=True)

        if not account_id:
            account = await self.payments.create_account(user.email, user.id, business_type)
            account_id = account.id
            await self._update_profile(
                user,
                {
                    "stripe_account_id": account_id,
                    "stripe_onboarding_completed": False,
                    "bank_verification_status": "pending",
                    "can_receive_transfers": False,
                },
            )
            logger.info("Connected account %s stored for %s", account_id, user.id)

        url = await self.payments.create_onboarding_link(
            account_id, self.refresh_url, self.return_url
        )
        return OnboardingResult(account_id=account_id, already_onboarded=False, onboarding_url=url)

    async def account_status(self, user: AuthUser | None) -> AccountStatus:
        """Live account status; stored onboarding flags are brought up to date."""
        if user is None:
            raise AuthRequiredException()
        profile = await self._payout_profile(user.id)
        account_id = profile.get("stripe_account_id")
        if not account_id:
            return AccountStatus(has_account=False)

        account = await self.payments.retrieve_account(account_id)
        if (
            bool(profile.get("stripe_onboarding_completed")) != account.onboarding_complete
            or bool(profile.get("can_receive_transfers")) != account.can_receive_transfers
        ):
            await self._update_profile(
                user,
                {
                    "stripe_onboarding_completed": account.onboarding_complete,
                    "can_receive_transfers": account.can_receive_transfers,
                    "bank_verification_status": (
                        "verified" if account.onboarding_complete else "pending"
                    ),
                },
            )
        return AccountStatus(
            has_account=True,
            account_id=account_id,
            onboarding_complete=account.onboarding_complete,
            can_receive_transfers=account.can_receive_transfers,
            charges_enabled=account.charges_enabled,
            payouts_enabled=account.payouts_enabled,
            details_submitted=account.details_submitted,
            requirements=account.requirements,
        )
