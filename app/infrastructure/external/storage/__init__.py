"""Storage: managed object storage (bucket/path, public or signed URLs).

SupabaseStorage implements IStorageService (upload, create_signed_url,
public_url, list, remove).
"""

from app.infrastructure.external.storage.supabase_storage import SupabaseStorage

__all__ = ["SupabaseStorage"]
