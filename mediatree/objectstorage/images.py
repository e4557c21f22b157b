"""
The image store as seen by the rest of mediatree: a flat listing source plus upload, delete and delivery.

Which store is used is decided by the storage_backend setting.
"""

from mediatree.config import StorageBackend, get_settings
from mediatree.models import ImageObject
from mediatree.objectstorage import cloudflare, s3bucket
from mediatree.objectstorage.cloudflare import Variant


def _backend() -> StorageBackend:
    return get_settings().storage_backend


async def fetch_listing() -> list[ImageObject]:
    """The full flat listing of the store. Raises UpstreamFailure if it cannot be fetched; never retries."""
    if _backend() == StorageBackend.s3:
        return await s3bucket.list_s3_images()
    return await cloudflare.list_cloudflare_images()


async def store_image(data: bytes, filename: str, key: str | None, content_type: str | None = None) -> ImageObject:
    """
    Store an image under key. S3 has no generated ids, so there the filename is used if no key is given.
    """
    if _backend() == StorageBackend.s3:
        return await s3bucket.add_s3_object(key or filename, data, content_type=content_type)
    return await cloudflare.upload_cloudflare_image(data, filename, key=key, content_type=content_type)


async def remove_image(key: str) -> None:
    if _backend() == StorageBackend.s3:
        await s3bucket.delete_s3_object(key)
    else:
        await cloudflare.delete_cloudflare_image(key)


async def delivery_url(key: str, variant: Variant = "public") -> str:
    """URL where the image can be fetched by a browser."""
    if _backend() == StorageBackend.s3:
        return await s3bucket.presigned_get(key)
    return cloudflare.variant_url(key, variant)
