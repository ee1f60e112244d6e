"""Managed data API (PostgREST) client and auth client."""

from app.infrastructure.external.data_api.auth_client import AuthClient
from app.infrastructure.external.data_api.postgrest_client import (
    DataApiClient,
    filter_param,
    query_params,
)

__all__ = [
    "AuthClient",
    "DataApiClient",
    "filter_param",
    "query_params",
]
