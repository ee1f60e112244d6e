"""Managed relational data API client (PostgREST over HTTPS).

A QueryDescriptor maps 1:1 onto a GET /rest/v1/<table> request:
filters become `column=op.value` params, order_by becomes `order=`,
limit/offset pass through. Writes use POST/PATCH/DELETE with the same
filter syntax and `Prefer: return=representation` so the written rows
come back. Authenticated by bearer key.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from typing import Any

import httpx

from app.domain.exceptions import NotFoundException, ValidationException
from app.domain.value_objects import QueryDescriptor, QueryFilter
from app.infrastructure.external.http import request
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

SERVICE = "data_api"

Row = dict[str, Any]


def _scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _list_item(value: Any) -> str:
    text = _scalar(value)
    if any(ch in text for ch in ',()" '):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def filter_param(flt: QueryFilter) -> tuple[str, str]:
    """Render one filter as a PostgREST query parameter (column, expression).

    Raises:
        ValidationException: If the value does not fit the operator.
    """
    op = flt.operator
    value = flt.value
    if op == "in":
        if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            raise ValidationException("'in' filter needs a list of values", field=flt.column)
        expr = "in.(" + ",".join(_list_item(v) for v in value) + ")"
    elif op == "contains":
        if isinstance(value, dict):
            expr = "cs." + json.dumps(value, separators=(",", ":"))
        elif isinstance(value, (list, tuple)):
            expr = "cs.{" + ",".join(_list_item(v) for v in value) + "}"
        else:
            raise ValidationException("'contains' filter needs a list or object", field=flt.column)
    elif op == "is":
        if value not in (None, True, False):
            raise ValidationException("'is' filter accepts null, true or false", field=flt.column)
        expr = f"is.{_scalar(value)}"
    else:
        expr = f"{op}.{_scalar(value)}"
    if flt.negate:
        expr = f"not.{expr}"
    return flt.column, expr


def filter_params(filters: Sequence[QueryFilter]) -> list[tuple[str, str]]:
    return [filter_param(f) for f in filters]


def query_params(descriptor: QueryDescriptor) -> list[tuple[str, str]]:
    """Render a descriptor as ordered query params (duplicates allowed)."""
    params: list[tuple[str, str]] = [("select", "".join(descriptor.select.split()) or "*")]
    params.extend(filter_params(descriptor.filters))
    if descriptor.order_by is not None:
        direction = "asc" if descriptor.order_by.ascending else "desc"
        params.append(("order", f"{descriptor.order_by.column}.{direction}"))
    if descriptor.single:
        params.append(("limit", "1"))
    elif descriptor.limit is not None:
        params.append(("limit", str(descriptor.limit)))
    if descriptor.offset is not None:
        params.append(("offset", str(descriptor.offset)))
    return params


class DataApiClient:
    """Async client for table reads and writes against the data API."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ) -> None:
        """Initialize client.

        Args:
            base_url: REST root, e.g. https://<project>.supabase.co/rest/v1.
            api_key: Service key sent as apikey and bearer token.
            http_client: Shared client (lifespan-owned); a private one is created if None.
            timeout: Timeout for the private client.
        """
        self.base_url = base_url.rstrip("/")
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _url(self, table: str) -> str:
        if not table:
            raise ValidationException("Table name is required", field="table")
        return f"{self.base_url}/{table}"

    async def select(self, descriptor: QueryDescriptor) -> list[Row] | Row:
        """Run a read. Returns a list of rows, or one row when descriptor.single.

        Raises:
            NotFoundException: single=True and no row matched.
            UpstreamFailureException: Transport or service error.
        """
        logger.debug("Querying table %s", descriptor.table)
        response = await request(
            self._client,
            SERVICE,
            "GET",
            self._url(descriptor.table),
            params=query_params(descriptor),
            headers=self._headers,
        )
        rows: list[Row] = response.json() or []
        if descriptor.single:
            if not rows:
                raise NotFoundException(descriptor.table, _describe(descriptor.filters))
            return rows[0]
        return rows

    async def insert(
        self, table: str, rows: Row | list[Row], *, upsert: bool = False
    ) -> list[Row]:
        """Insert one or more rows and return them as stored.

        With upsert=True a row whose primary key exists is merged instead.
        """
        payload = rows if isinstance(rows, list) else [rows]
        if not payload:
            raise ValidationException("Nothing to insert", field="rows")
        prefer = "return=representation"
        if upsert:
            prefer += ",resolution=merge-duplicates"
        response = await request(
            self._client,
            SERVICE,
            "POST",
            self._url(table),
            json=payload,
            headers={**self._headers, "Prefer": prefer},
        )
        return response.json() or []

    async def update(
        self, table: str, values: Row, filters: Sequence[QueryFilter]
    ) -> list[Row]:
        """Update rows matching filters and return them.

        Raises:
            ValidationException: No filters (would touch every row) or no values.
        """
        if not filters:
            raise ValidationException("Update requires at least one row filter", field="filters")
        if not values:
            raise ValidationException("Nothing to update", field="values")
        response = await request(
            self._client,
            SERVICE,
            "PATCH",
            self._url(table),
            params=filter_params(filters),
            json=values,
            headers={**self._headers, "Prefer": "return=representation"},
        )
        return response.json() or []

    async def delete(self, table: str, filters: Sequence[QueryFilter]) -> list[Row]:
        """Delete rows matching filters and return the deleted rows.

        Raises:
            ValidationException: No filters.
        """
        if not filters:
            raise ValidationException("Delete requires at least one row filter", field="filters")
        response = await request(
            self._client,
            SERVICE,
            "DELETE",
            self._url(table),
            params=filter_params(filters),
            headers={**self._headers, "Prefer": "return=representation"},
        )
        if not response.content:
            return []
        return response.json() or []

    async def rpc(self, function: str, params: Row | None = None) -> Any:
        """Call a stored procedure and return its JSON result."""
        if not function:
            raise ValidationException("RPC function name is required", field="function")
        response = await request(
            self._client,
            SERVICE,
            "POST",
            self._url(f"rpc/{function}"),
            json=params or {},
            headers=self._headers,
        )
        return response.json() if response.content else None


def _describe(filters: Sequence[QueryFilter]) -> str:
    return ", ".join(f"{f.column} {f.operator} {f.value}" for f in filters) or "*"
