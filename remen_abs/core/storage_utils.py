# remen_abs/core/storage_utils.py
import uuid

from remen_abs.core.supabase_client import supabase_admin

BUCKET = "products"


def _bucket():
    # Client is built on first use so imports never need storage credentials.
    return supabase_admin().storage.from_(BUCKET)


def upload_to_storage(path: str, file_bytes: bytes, content_type: str) -> str:
    """
    Upload raw bytes to Supabase Storage and return the public URL.

    An existing object at `path` is overwritten ('upsert').

    Args:
        path: object path inside the bucket, e.g. "<product_id>/main.jpg"
        file_bytes: file content
        content_type: MIME type stored with the object
    """
    bucket = _bucket()
    bucket.upload(
        path,
        file_bytes,
        {"upsert": "true", "content-type": content_type},
    )
    return bucket.get_public_url(path)


def extract_path_from_public_url(url: str) -> str | None:
    """
    Given a public URL, extract the object path relative to the bucket.

    Example:
        https://<proj>.supabase.co/storage/v1/object/public/products/<id>/main.jpg
        -> '<id>/main.jpg'
    """
    marker = f"/storage/v1/object/public/{BUCKET}/"
    idx = url.find(marker)
    if idx == -1:
        return None
    path = url[idx + len(marker):]
    return path.split("?", 1)[0] or None


def delete_public_urls(urls: list[str]) -> None:
    """
    Delete every object behind the given public URLs in one call.
    URLs that do not belong to this bucket are skipped.
    """
    paths = [p for p in (extract_path_from_public_url(u) for u in urls) if p]
    if paths:
        _bucket().remove(paths)


def generate_object_path(product_id: uuid.UUID, ext: str, name: str | None = None) -> str:
    """
    Object path for a product image: "<product_id>/<name or uuid4>.<ext>".
    """
    stem = name or str(uuid.uuid4())
    return f"{product_id}/{stem}.{ext}"
