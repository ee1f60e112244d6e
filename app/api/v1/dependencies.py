"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the signed-in user and the application
services. Application-lifetime infrastructure (HTTP client, query cache,
upstream clients) lives on app.state (see app.core.lifespan); services
are cheap per-request wrappers around it. Routes depend only on these
dependencies, not on infra directly; tests swap them with
app.dependency_overrides.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.application.dtos.auth import AuthUser
from app.application.services.data_access import DataAccess
from app.application.use_cases import (
    ImageUrlService,
    NotificationService,
    OnboardingService,
    PaymentService,
    ProfileService,
    PropertyService,
    RentalApplicationService,
    ViewingRequestService,
)
from app.application.use_cases.profiles import profile_query
from app.core.config import get_settings
from app.domain.enums import UserRole
from app.domain.exceptions import AuthRequiredException, PermissionDeniedException
from app.infrastructure.cache import LoadingIndicator, QueryCache
from app.shared.context import set_current_user

_bearer = HTTPBearer(auto_error=False)


def get_query_cache(request: Request) -> QueryCache:
    return request.app.state.query_cache


def get_loading_indicator(request: Request) -> LoadingIndicator:
    return request.app.state.loading_indicator


def get_data_access(request: Request) -> DataAccess:
    return request.app.state.data_access


async def get_optional_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> AuthUser | None:
    """Signed-in user when a bearer token is sent; None for anonymous requests.

    An invalid or expired token is an error, not anonymous access.
    """
    if credentials is None:
        return None
    user = await request.app.state.auth_client.get_user(credentials.credentials)
    set_current_user(user.id)
    return user


async def get_current_user(
    user: Annotated[AuthUser | None, Depends(get_optional_user)],
) -> AuthUser:
    """Signed-in user; AuthRequiredException (401) otherwise."""
    if user is None:
        raise AuthRequiredException()
    return user


CurrentUser = Annotated[AuthUser, Depends(get_current_user)]


async def get_admin_user(
    user: Annotated[AuthUser, Depends(get_current_user)],
    data: Annotated[DataAccess, Depends(get_data_access)],
) -> AuthUser:
    """Signed-in user whose profile role is admin; PermissionDeniedException (403) otherwise."""
    profile = (await data.fetch(profile_query(user.id))).unwrap()
    if profile.get("role") != UserRole.ADMIN.value:
        raise PermissionDeniedException("cache", "manage")
    return user


AdminUser = Annotated[AuthUser, Depends(get_admin_user)]


def get_property_service(
    request: Request,
    data: Annotated[DataAccess, Depends(get_data_access)],
) -> PropertyService:
    return PropertyService(
        data,
        geocoder=request.app.state.geocoder,
        geocode_interval=get_settings().geocoding_interval_seconds,
    )


def get_image_url_service(
    request: Request,
    data: Annotated[DataAccess, Depends(get_data_access)],
) -> ImageUrlService:
    settings = get_settings()
    return ImageUrlService(
        data,
        request.app.state.storage,
        property_bucket=settings.property_images_bucket,
        profile_bucket=settings.profile_images_bucket,
        expires_in=settings.signed_url_expiry_seconds,
    )


def get_rental_application_service(
    data: Annotated[DataAccess, Depends(get_data_access)],
    properties: Annotated[PropertyService, Depends(get_property_service)],
) -> RentalApplicationService:
    return RentalApplicationService(data, properties)


def get_viewing_request_service(
    data: Annotated[DataAccess, Depends(get_data_access)],
    properties: Annotated[PropertyService, Depends(get_property_service)],
) -> ViewingRequestService:
    return ViewingRequestService(data, properties)


def get_profile_service(
    request: Request,
    data: Annotated[DataAccess, Depends(get_data_access)],
    images: Annotated[ImageUrlService, Depends(get_image_url_service)],
) -> ProfileService:
    settings = get_settings()
    return ProfileService(
        data,
        request.app.state.storage,
        images,
        bucket=settings.profile_images_bucket,
        max_upload_size=settings.max_upload_size,
    )


def get_notification_service(
    request: Request,
    data: Annotated[DataAccess, Depends(get_data_access)],
) -> NotificationService:
    settings = get_settings()
    return NotificationService(
        data,
        request.app.state.email_sender,
        admin_email=settings.admin_email,
        app_url=settings.public_app_url,
    )


def get_onboarding_service(
    request: Request,
    data: Annotated[DataAccess, Depends(get_data_access)],
) -> OnboardingService:
    settings = get_settings()
    return OnboardingService(
        data,
        request.app.state.payments,
        refresh_url=settings.stripe_refresh_url,
        return_url=settings.stripe_return_url,
    )


def get_payment_service(
    request: Request,
    data: Annotated[DataAccess, Depends(get_data_access)],
) -> PaymentService:
    settings = get_settings()
    return PaymentService(
        data,
        request.app.state.payments,
        request.app.state.email_sender,
        currency=settings.payment_currency,
        platform_fee_percentage=settings.platform_fee_percentage,
        admin_fee=settings.payment_admin_fee,
        verification_ttl=settings.email_verification_ttl_seconds,
    )
