"""Application services: data access (cached reads, invalidating writes)."""

from app.application.services.data_access import DataAccess, MutationRunner

__all__ = ["DataAccess", "MutationRunner"]
