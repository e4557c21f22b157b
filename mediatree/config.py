"""
mediatree Configuration

We read configuration from 2 sources, in order of precedence (higher is more priority)
- Environment variables
- A .env file, either in the current working directory or in a location specified
  by the MEDIATREE_ENV_FILE environment variable
"""

import functools
import os
from enum import Enum
from pathlib import Path
from typing import Annotated

from class_doc import extract_docs_from_cls_obj
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "mediatree_"


class AuthOptions(str, Enum):
    #: everyone (that can reach the server) can browse and change all images
    no_auth = "no_auth"

    #: every /api request needs an X-API-Key header matching the configured api_key
    api_key = "api_key"

    @classmethod
    def validate(cls, value: str):
        if value not in cls.__members__:
            options = ", ".join(AuthOptions.__members__.keys())
            return f"{value} is not a valid authorization option. Choose one of {{{options}}}"


class StorageBackend(str, Enum):
    #: Cloudflare Images, addressed through the Cloudflare REST API
    cloudflare = "cloudflare"

    #: Any S3-compatible bucket (AWS S3, Cloudflare R2, MinIO, ...)
    s3 = "s3"

    @classmethod
    def validate(cls, value: str):
        if value not in cls.__members__:
            options = ", ".join(StorageBackend.__members__.keys())
            return f"{value} is not a valid storage backend. Choose one of {{{options}}}"


class RefreshPolicy(str, Enum):
    #: fetch the listing and rebuild the directory tree on every request
    per_request = "per_request"

    #: keep the directory tree until an upload or delete invalidates it.
    #: The tree is kept per process, so only use this with a single server process
    session = "session"

    @classmethod
    def validate(cls, value: str):
        if value not in cls.__members__:
            options = ", ".join(RefreshPolicy.__members__.keys())
            return f"{value} is not a valid refresh policy. Choose one of {{{options}}}"


# Set the __doc__ attribute of each enum member using extract_docs_from_cls_obj
for _enum in (AuthOptions, StorageBackend, RefreshPolicy):
    for field, doc in extract_docs_from_cls_obj(_enum).items():
        _enum[field].__doc__ = "\n".join(doc)


class Settings(BaseSettings):
    env_file: Annotated[
        Path,
        Field(
            description="Location of a .env file (if used) relative to working directory",
        ),
    ] = Path(".env")
    host: Annotated[
        str,
        Field(
            description="Host this instance is served at",
        ),
    ] = "http://localhost:5000"

    auth: Annotated[AuthOptions, Field(description="Do we require an API key?")] = AuthOptions.api_key

    api_key: Annotated[
        str | None,
        Field(
            description="Pre-shared key that clients must send in the X-API-Key header",
        ),
    ] = None

    storage_backend: Annotated[
        StorageBackend,
        Field(description="Which object store holds the images"),
    ] = StorageBackend.cloudflare

    refresh_policy: Annotated[
        RefreshPolicy,
        Field(description="When the server rebuilds the directory tree from the flat listing"),
    ] = RefreshPolicy.per_request

    cf_api_url: Annotated[
        str,
        Field(description="Base URL of the Cloudflare REST API"),
    ] = "https://api.cloudflare.com/client/v4"
    cf_account_id: Annotated[str | None, Field(description="Cloudflare account id")] = None
    cf_api_token: Annotated[
        str | None,
        Field(description="Cloudflare API token with Images read/write permission"),
    ] = None
    cf_account_hash: Annotated[
        str | None,
        Field(description="Cloudflare Images account hash, used for delivery URLs"),
    ] = None
    cf_delivery_url: Annotated[
        str,
        Field(description="Base URL for Cloudflare Images delivery"),
    ] = "https://imagedelivery.net"
    cf_page_size: Annotated[
        int,
        Field(description="Number of images to request per listing page", ge=10, le=10000),
    ] = 1000

    s3_host: Annotated[str | None, Field(description="Endpoint URL of the S3-compatible store")] = None
    s3_access_key: Annotated[str | None, Field(description="S3 access key")] = None
    s3_secret_key: Annotated[str | None, Field(description="S3 secret key")] = None
    s3_bucket: Annotated[str, Field(description="S3 bucket holding the images")] = "images"

    http_timeout: Annotated[
        float,
        Field(description="Timeout in seconds for calls to the object store"),
    ] = 30.0

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX)


@functools.lru_cache()
def get_settings() -> Settings:
    # load_dotenv does not override real environment variables, so these keep precedence
    temp = Settings()
    load_dotenv(temp.env_file, override=False)
    return Settings()


def validate_settings():
    settings = get_settings()
    if settings.auth == AuthOptions.api_key and not settings.api_key:
        return (
            "Authentication is set to api_key, but no api_key is configured. "
            "All /api requests will be refused until mediatree_api_key is set."
        )
    if settings.auth == AuthOptions.no_auth:
        return "No authentication is set up: everyone who can reach this service can change all images"
    if settings.storage_backend == StorageBackend.cloudflare and not (settings.cf_account_id and settings.cf_api_token):
        return "Storage backend is cloudflare, but cf_account_id or cf_api_token is not configured"
    if settings.storage_backend == StorageBackend.s3 and not s3_configured(settings):
        return "Storage backend is s3, but s3_host, s3_access_key or s3_secret_key is not configured"
    if settings.refresh_policy == RefreshPolicy.session and server_workers() > 1:
        return (
            f"Refresh policy is session, but {server_workers()} server processes are configured. "
            "Each process keeps its own tree, so uploads and deletes are not seen by the others."
        )


def s3_configured(settings: Settings) -> bool:
    return all([settings.s3_host, settings.s3_access_key, settings.s3_secret_key])


def server_workers() -> int:
    """Number of server processes, as given to uvicorn and gunicorn through WEB_CONCURRENCY"""
    try:
        return int(os.environ.get("WEB_CONCURRENCY", "1"))
    except ValueError:
        return 1


if __name__ == "__main__":
    # Echo the settings
    for k, v in get_settings().model_dump().items():
        print(f"{ENV_PREFIX.upper()}{k.upper()}={v}")
