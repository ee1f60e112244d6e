"""Rental application and viewing request API (two routers, same shape)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from app.api.v1.dependencies import (
    CurrentUser,
    get_rental_application_service,
    get_viewing_request_service,
)
from app.application.use_cases import RentalApplicationService, ViewingRequestService
from app.core.limiter import limit_writes
from app.schemas.tenant_request import (
    ApplicationCreateRequest,
    StatusUpdateRequest,
    TenantRequestResponse,
    ViewingRequestCreateRequest,
)

applications_router = APIRouter()
viewings_router = APIRouter()

Applications = Annotated[RentalApplicationService, Depends(get_rental_application_service)]
Viewings = Annotated[ViewingRequestService, Depends(get_viewing_request_service)]


# ---- Rental applications ----


@applications_router.post("", response_model=TenantRequestResponse, status_code=201)
@limit_writes
async def create_application(
    request: Request,
    body: ApplicationCreateRequest,
    user: CurrentUser,
    applications: Applications,
):
    """Submit a rental application (one pending application per property)."""
    return await applications.create(
        user,
        property_id=body.property_id,
        message=body.message,
        employment_status=body.employment_status,
        income=body.income,
        credit_score=body.credit_score,
    )


@applications_router.get("/mine", response_model=list[TenantRequestResponse])
async def my_applications(user: CurrentUser, applications: Applications):
    return await applications.list_mine(user)


@applications_router.get("/received", response_model=list[TenantRequestResponse])
async def received_applications(user: CurrentUser, applications: Applications):
    """Applications for the signed-in owner's listings."""
    return await applications.list_received(user)


@applications_router.delete("/{application_id}", status_code=204)
@limit_writes
async def withdraw_application(
    request: Request,
    application_id: str,
    user: CurrentUser,
    applications: Applications,
) -> Response:
    """Withdraw an own application that is still pending."""
    await applications.withdraw(user, application_id)
    return Response(status_code=204)


@applications_router.patch("/{application_id}/status", response_model=TenantRequestResponse)
@limit_writes
async def set_application_status(
    request: Request,
    application_id: str,
    body: StatusUpdateRequest,
    user: CurrentUser,
    applications: Applications,
):
    """Owner review of an application on one of their listings."""
    return await applications.update_status(user, application_id, body.status)


# ---- Viewing requests ----


@viewings_router.post("", response_model=TenantRequestResponse, status_code=201)
@limit_writes
async def create_viewing_request(
    request: Request,
    body: ViewingRequestCreateRequest,
    user: CurrentUser,
    viewings: Viewings,
):
    return await viewings.create(
        user,
        property_id=body.property_id,
        proposed_date=body.proposed_date,
        message=body.message,
    )


@viewings_router.get("/mine", response_model=list[TenantRequestResponse])
async def my_viewing_requests(user: CurrentUser, viewings: Viewings):
    return await viewings.list_mine(user)


@viewings_router.get("/received", response_model=list[TenantRequestResponse])
async def received_viewing_requests(user: CurrentUser, viewings: Viewings):
    return await viewings.list_received(user)


@viewings_router.delete("/{request_id}", status_code=204)
@limit_writes
async def cancel_viewing_request(
    request: Request,
    request_id: str,
    user: CurrentUser,
    viewings: Viewings,
) -> Response:
    """Cancel an own viewing request that is still pending."""
    await viewings.withdraw(user, request_id)
    return Response(status_code=204)


@viewings_router.patch("/{request_id}/status", response_model=TenantRequestResponse)
@limit_writes
async def set_viewing_status(
    request: Request,
    request_id: str,
    body: StatusUpdateRequest,
    user: CurrentUser,
    viewings: Viewings,
):
    return await viewings.update_status(user, request_id, body.status)
