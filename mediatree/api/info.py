"""API Endpoints for server information and image delivery."""

import re
from importlib.metadata import version

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, Field

from mediatree.config import get_settings, validate_settings
from mediatree.objectstorage.cloudflare import Variant
from mediatree.objectstorage.images import delivery_url

app_info = APIRouter(tags=["informational"])

IMAGE_EXTENSIONS = re.compile(r"\.(jpg|jpeg|png|gif|webp|svg)$", re.IGNORECASE)


# RESPONSE MODELS
class ConfigResponse(BaseModel):
    """Response for server configuration."""

    authorization: str = Field(..., description="The authorization mode.")
    storage_backend: str = Field(..., description="The object store holding the images.")
    refresh_policy: str = Field(..., description="When the directory tree is rebuilt.")
    warnings: list[str] = Field(..., description="A list of configuration warnings.")
    api_version: str = Field(..., description="The version of the mediatree API.")


@app_info.get("/config")
def get_config() -> ConfigResponse:
    """Get the configuration of this mediatree instance."""
    settings = get_settings()
    return ConfigResponse(
        authorization=settings.auth.value,
        storage_backend=settings.storage_backend.value,
        refresh_policy=settings.refresh_policy.value,
        warnings=[w for w in [validate_settings()] if w],
        api_version=version("mediatree"),
    )


@app_info.get("/images/{key:path}")
async def deliver_image(key: str, variant: Variant = "public"):
    """
    Redirect to the delivery URL of an image, e.g. /images/themes/akurai/logo.webp.

    Only keys with an image extension are served.
    """
    if not IMAGE_EXTENSIONS.search(key):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return RedirectResponse(url=await delivery_url(key, variant), status_code=status.HTTP_307_TEMPORARY_REDIRECT)
