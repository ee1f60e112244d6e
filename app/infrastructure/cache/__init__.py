"""Cache: in-memory query cache, loading indicator and cache key utilities.

Used by the data access layer (DataAccess, MutationRunner). One QueryCache
and one LoadingIndicator are created per application in app.core.lifespan;
key format is in keys.py (DRY).
"""

from app.infrastructure.cache.keys import canonical_json, named_key, query_key
from app.infrastructure.cache.loading_indicator import LoadingIndicator
from app.infrastructure.cache.query_cache import CacheEntry, QueryCache

__all__ = [
    "CacheEntry",
    "LoadingIndicator",
    "QueryCache",
    "canonical_json",
    "named_key",
    "query_key",
]
