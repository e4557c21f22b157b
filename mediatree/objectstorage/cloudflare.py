"""
Interact with Cloudflare Images through the Cloudflare REST API.

Cloudflare Images stores every image under a flat custom id such as 'themes/akurai/logo.webp'; it has no notion of
directories. Images are delivered through variant URLs (https://imagedelivery.net/<account hash>/<id>/<variant>).
"""

import logging
from typing import Any, Literal
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from mediatree.config import get_settings
from mediatree.connections import cf
from mediatree.errors import UpstreamFailure
from mediatree.models import ImageObject

Variant = Literal["thumbnail", "public", "default"]

logger = logging.getLogger(__name__)


def _images_url(version: Literal["v1", "v2"]) -> str:
    settings = get_settings()
    if not settings.cf_account_id:
        raise ValueError("cf_account_id not specified")
    return f"{settings.cf_api_url.rstrip('/')}/accounts/{settings.cf_account_id}/images/{version}"


async def _request(method: str, url: str, failure_message: str, **kwargs) -> dict[str, Any]:
    try:
        res = await cf().request(method, url, **kwargs)
    except httpx.HTTPError as e:
        raise UpstreamFailure(f"{failure_message}: cannot reach Cloudflare ({e})") from e

    try:
        data = res.json()
    except ValueError:
        data = None
    if not isinstance(data, dict):
        if not res.is_error:
            logger.error(f"Cloudflare API returned an unreadable body on {method} {url}: {res.text[:200]!r}")
            raise UpstreamFailure(f"{failure_message}: unexpected response from Cloudflare", status_code=502)
        data = {}

    if res.is_error or data.get("success") is False:
        errors = data.get("errors") or []
        message = None
        if errors and isinstance(errors[0], dict):
            message = errors[0].get("message")
        logger.error(f"Cloudflare API error on {method} {url}: {res.status_code} {errors}")
        raise UpstreamFailure(
            message or failure_message,
            status_code=res.status_code if res.is_error else 502,
            details=errors,
        )
    return data


def parse_image(raw: dict[str, Any]) -> ImageObject:
    """Convert a Cloudflare image record into an ImageObject. Records without id fall back to their filename."""
    key = raw.get("id") or raw.get("filename") or ""
    meta = raw.get("meta")
    size = meta.get("size") if isinstance(meta, dict) else None
    return ImageObject(
        id=str(key),
        uploaded_at=raw.get("uploaded"),
        size_bytes=size if isinstance(size, int) else None,
        require_signed_urls=bool(raw.get("requireSignedURLs", False)),
    )


async def list_cloudflare_images() -> list[ImageObject]:
    """
    Fetch the complete flat listing, following continuation tokens until the last page.
    """
    settings = get_settings()
    url = _images_url("v2")
    params: dict[str, Any] = {"per_page": settings.cf_page_size}

    images: list[ImageObject] = []
    while True:
        data = await _request("GET", url, "Failed to fetch images", params=params)
        result = data.get("result")
        if not isinstance(result, dict):
            raise UpstreamFailure("Failed to fetch images: listing without result", status_code=502)
        for raw in result.get("images") or []:
            try:
                images.append(parse_image(raw))
            except (AttributeError, ValidationError) as e:
                logger.warning(f"Skipping unreadable image record {raw!r}: {e}")
        token = result.get("continuation_token")
        if not token:
            return images
        params = {"per_page": settings.cf_page_size, "continuation_token": token}


async def upload_cloudflare_image(
    data: bytes, filename: str, key: str | None = None, content_type: str | None = None
) -> ImageObject:
    """Upload an image. If key is None, Cloudflare assigns a random id."""
    files = {"file": (filename, data, content_type or "application/octet-stream")}
    form = {"id": key} if key else {}
    res = await _request("POST", _images_url("v1"), "Upload failed", files=files, data=form)
    return parse_image(res.get("result") or {})


async def delete_cloudflare_image(key: str) -> None:
    await _request("DELETE", f"{_images_url('v1')}/{quote(key, safe='/')}", "Delete failed")


def variant_url(key: str, variant: Variant = "public") -> str:
    settings = get_settings()
    if not settings.cf_account_hash:
        raise ValueError("cf_account_hash not specified")
    return f"{settings.cf_delivery_url.rstrip('/')}/{settings.cf_account_hash}/{key}/{variant}"
