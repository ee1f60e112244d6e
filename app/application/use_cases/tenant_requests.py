"""Tenant requests against a listing: rental applications and viewing requests.

Both follow the same lifecycle. A signed-in user creates a request in
status pending, may withdraw it while it is still pending, and the
property owner reviews requests for their listings and sets the status.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from app.application.dtos.auth import AuthUser
from app.application.services.data_access import DataAccess
from app.application.use_cases.properties import NEWEST_FIRST, PropertyService
from app.core.constants import (
    SELECT_PROPERTY_SUMMARY,
    SELECT_WITH_APPLICANT,
    STATUS_PENDING,
    TABLE_RENTAL_APPLICATIONS,
    TABLE_VIEWING_REQUESTS,
)
from app.domain.enums import ApplicationStatus, ViewingStatus
from app.domain.exceptions import (
    AuthRequiredException,
    DuplicateApplicationException,
    NotFoundException,
    PermissionDeniedException,
    ValidationException,
)
from app.domain.value_objects import QueryDescriptor, QueryFilter
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import to_iso_utc, utc_now_iso

logger = get_logger(__name__)


class PropertyRequestService:
    """Shared create/list/withdraw/review operations for one request table."""

    table: str = ""
    resource: str = ""
    statuses: tuple[str, ...] = ()

    def __init__(self, data: DataAccess, properties: PropertyService) -> None:
        self.data = data
        self.properties = properties

    @staticmethod
    def _require_user(user: AuthUser | None) -> AuthUser:
        if user is None:
            raise AuthRequiredException()
        return user

    def mine_query(self, user_id: str) -> QueryDescriptor:
        return QueryDescriptor(
            table=self.table,
            select=SELECT_PROPERTY_SUMMARY,
            filters=[QueryFilter("user_id", "eq", user_id)],
            order_by=NEWEST_FIRST,
        )

    def received_query(self, property_ids: list[str]) -> QueryDescriptor:
        return QueryDescriptor(
            table=self.table,
            select=SELECT_WITH_APPLICANT,
            filters=[QueryFilter("property_id", "in", sorted(property_ids))],
            order_by=NEWEST_FIRST,
        )

    def by_id_query(self, request_id: str) -> QueryDescriptor:
        return QueryDescriptor(
            table=self.table,
            filters=[QueryFilter("id", "eq", request_id)],
            single=True,
        )

    async def _insert(self, row: dict[str, Any]) -> dict[str, Any]:
        now = utc_now_iso()
        row = {**row, "status": STATUS_PENDING, "created_at": now, "updated_at": now}
        result = await self.data.mutate(
            lambda: self.data.data_api.insert(self.table, row),
            [self.table],
        )
        created = result.unwrap()
        logger.info("%s created for property %s", self.resource, row.get("property_id"))
        return created[0] if created else row

    async def list_mine(self, user: AuthUser | None) -> list[dict[str, Any]]:
        """Requests made by the signed-in user, newest first, with a property summary."""
        user = self._require_user(user)
        return (await self.data.fetch(self.mine_query(user.id))).unwrap()

    async def withdraw(self, user: AuthUser | None, request_id: str) -> None:
        """Delete the user's own request while it is still pending.

        Raises:
            NotFoundException: No pending request with that id belongs to the user.
        """
        user = self._require_user(user)
        filters = [
            QueryFilter("id", "eq", request_id),
            QueryFilter("user_id", "eq", user.id),
            QueryFilter("status", "eq", STATUS_PENDING),
        ]
        result = await self.data.mutate(
            lambda: self.data.data_api.delete(self.table, filters),
            [self.table],
        )
        if not result.unwrap():
            raise NotFoundException(self.resource, request_id)

    async def list_received(self, owner: AuthUser | None) -> list[dict[str, Any]]:
        """Requests for every listing the owner has, newest first, with applicant details."""
        owner = self._require_user(owner)
        property_ids = await self.properties.owner_property_ids(owner.id)
        if not property_ids:
            return []
        return (await self.data.fetch(self.received_query(property_ids))).unwrap()

    async def update_status(
        self, owner: AuthUser | None, request_id: str, status: str
    ) -> dict[str, Any]:
        """Owner review: set the status of a request on one of their listings."""
        owner = self._require_user(owner)
        if status not in self.statuses:
            raise ValidationException(
                f"Invalid status {status!r}; expected one of {list(self.statuses)}",
                field="status",
            )
        current = (await self.data.fetch(self.by_id_query(request_id))).unwrap()
        if current.get("property_id") not in await self.properties.owner_property_ids(owner.id):
            raise PermissionDeniedException(f"{self.resource}:{request_id}", "review")
        values = {"status": status, "updated_at": utc_now_iso()}
        result = await self.data.mutate(
            lambda: self.data.data_api.update(
                self.table, values, [QueryFilter("id", "eq", request_id)]
            ),
            [self.table],
        )
        rows = result.unwrap()
        logger.info("%s %s set to %s by %s", self.resource, request_id, status, owner.id)
        return rows[0] if rows else {**current, **values}


class RentalApplicationService(PropertyRequestService):
    """Rental applications (one pending application per user and property)."""

    table = TABLE_RENTAL_APPLICATIONS
    resource = "rental_application"
    statuses = tuple(ApplicationStatus.review_values())

    def pending_query(self, user_id: str, property_id: str) -> QueryDescriptor:
        return QueryDescriptor(
            table=self.table,
            select="id",
            filters=[
                QueryFilter("property_id", "eq", property_id),
                QueryFilter("user_id", "eq", user_id),
                QueryFilter("status", "eq", STATUS_PENDING),
            ],
        )

    async def create(
        self,
        user: AuthUser | None,
        property_id: str,
        message: str | None = None,
        employment_status: str | None = None,
        income: float | str | None = None,
        credit_score: str | None = None,
    ) -> dict[str, Any]:
        """Submit an application.

        Raises:
            AuthRequiredException: No signed-in user.
            ValidationException: Missing property id, non-numeric income.
            DuplicateApplicationException: A pending application already exists.
        """
        user = self._require_user(user)
        if not property_id:
            raise ValidationException("Property id is required", field="property_id")
        try:
            income_value = float(income) if income not in (None, "") else None
        except (TypeError, ValueError) as exc:
            raise ValidationException("Income must be a number", field="income") from exc
        existing = (await self.data.refetch(self.pending_query(user.id, property_id))).unwrap()
        if existing:
            raise DuplicateApplicationException(property_id)
        return await self._insert(
            {
                "property_id": property_id,
                "user_id": user.id,
                "message": message,
                "employment_status": employment_status,
                "income": income_value,
                "credit_score": credit_score,
            }
        )


class ViewingRequestService(PropertyRequestService):
    """Viewing requests (a proposed date to see the property)."""

    table = TABLE_VIEWING_REQUESTS
    resource = "viewing_request"
    statuses = tuple(ViewingStatus.values())

    async def create(
        self,
        user: AuthUser | None,
        property_id: str,
        proposed_date: datetime | str | None,
        message: str | None = None,
    ) -> dict[str, Any]:
        """Ask to view a property on proposed_date."""
        user = self._require_user(user)
        if not property_id:
            raise ValidationException("Property id is required", field="property_id")
        if not proposed_date:
            raise ValidationException("Proposed date is required", field="proposed_date")
        if isinstance(proposed_date, str):
            try:
                proposed_date = datetime.fromisoformat(proposed_date)
            except ValueError as exc:
                raise ValidationException(
                    "Proposed date must be an ISO-8601 date/time", field="proposed_date"
                ) from exc
        return await self._insert(
            {
                "property_id": property_id,
                "user_id": user.id,
                "proposed_date": to_iso_utc(proposed_date),
                "message": message,
            }
        )
