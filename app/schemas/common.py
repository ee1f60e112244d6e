"""Shared API schemas."""

from pydantic import BaseModel, ConfigDict


class RowModel(BaseModel):
    """A row from the data API: known columns are typed, other columns pass through."""

    model_config = ConfigDict(extra="allow")
