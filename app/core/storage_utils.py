import uuid

from app.core.config import get_settings
from app.core.supabase_client import supabase_admin

settings = get_settings()


def _bucket():
    # Client is created lazily so importing routers does not need the service key.
    return supabase_admin().storage.from_(settings.STORAGE_BUCKET)


def upload_to_storage(path: str, file_bytes: bytes) -> str:
    """
    Upload raw bytes to Supabase Storage and return a public URL.

    An existing object at `path` is overwritten ('upsert').

    Args:
        path: Full object path inside the bucket.
              Example: "menu-items/<uuid>/<uuid>.png"
        file_bytes: File content in bytes.
    """
    bucket = _bucket()
    bucket.upload(path, file_bytes, {"upsert": "true"})
    return bucket.get_public_url(path)


def extract_path_from_public_url(url: str) -> str | None:
    """
    Given a public URL, extract the object path relative to the bucket.

    Example:
        https://<proj>.supabase.co/storage/v1/object/public/assets/menu-items/x.png
        -> 'menu-items/x.png'
    """
    marker = f"/storage/v1/object/public/{settings.STORAGE_BUCKET}/"
    idx = url.find(marker)
    if idx == -1:
        return None
    return url[idx + len(marker) :]


def delete_public_url(url: str) -> None:
    """
    Delete a file by its public URL.
    No-op if the URL does not belong to this bucket.
    """
    path = extract_path_from_public_url(url)
    if path:
        _bucket().remove([path])


def generate_filename(ext: str) -> str:
    """Random filename like "<uuid4>.png"."""
    return f"{uuid.uuid4()}.{ext}"
