# app/core/storage_utils.py
from app.core.config import get_settings
from app.core.supabase_client import supabase_admin

settings = get_settings()

BUCKET = settings.STORAGE_BUCKET


def upload_to_storage(path: str, file_bytes: bytes) -> str:
    """
    Upload raw bytes to Supabase Storage and return a public URL.

    If a file already exists at this path, it will be overwritten
    thanks to the 'upsert' option.

    Args:
        path: Full object path inside the bucket.
              Example: "pets/<uuid>/image.png"
        file_bytes: File content in bytes.

    Raises:
        Any exception raised by Supabase client if upload fails.
    """
    bucket = supabase_admin().storage.from_(BUCKET)
    bucket.upload(path, file_bytes, {"upsert": "true"})
    return bucket.get_public_url(path)


def delete_from_storage(path: str) -> None:
    """
    Delete a file from Supabase Storage by its object path.

    Example path (relative to bucket):
        'pets/<uuid>/image.png'
    """
    # Supabase Python client expects a list of paths.
    supabase_admin().storage.from_(BUCKET).remove([path])


def extract_path_from_public_url(url: str) -> str | None:
    """
    Given a public URL, extract the object path relative to the bucket.

    Example:
        https://<proj>.supabase.co/storage/v1/object/public/pets/pets/p/image.png
        -> 'pets/p/image.png'
    """
    marker = f"/storage/v1/object/public/{BUCKET}/"
    idx = url.find(marker)
    if idx == -1:
        return None
    return url[idx + len(marker) :]


def delete_public_url(url: str) -> None:
    """
    Convenience helper: delete a file by its public URL.
    No-op if the URL does not belong to this bucket (e.g. external links).
    """
    path = extract_path_from_public_url(url)
    if path:
        delete_from_storage(path)
