"""API request/response schemas (pydantic)."""
