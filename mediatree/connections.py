import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncGenerator

import httpx
from aiobotocore.config import AioConfig
from aiobotocore.session import get_session
from types_aiobotocore_s3.client import S3Client

from mediatree.config import get_settings, s3_configured


class MediaConnections:
    cloudflare: httpx.AsyncClient | None
    s3_client: S3Client | None
    s3_context_stack: AsyncExitStack | None

    def __init__(
        self,
        cloudflare: httpx.AsyncClient | None = None,
        s3_client: S3Client | None = None,
        s3_context_stack: AsyncExitStack | None = None,
    ):
        self.cloudflare = cloudflare
        self.s3_client = s3_client
        self.s3_context_stack = s3_context_stack


CONNECTIONS = MediaConnections()


@asynccontextmanager
async def media_connections() -> AsyncGenerator[None, None]:
    """
    The main context manager to start and stop connections to the object stores.
    Always use this once (and only once):
        - For running the server: in the FastAPI lifespan
        - For tests: in the client fixture
        - For CLI commands: within the CLI command
    """
    try:
        await _start_cloudflare()
        await _start_s3()
        yield
    finally:
        await _close_s3()
        await _close_cloudflare()


def cf() -> httpx.AsyncClient:
    """
    Use this function to access the http client for the Cloudflare API.
    """
    if CONNECTIONS.cloudflare is None:
        raise ConnectionError("Cloudflare client not started")
    return CONNECTIONS.cloudflare


def s3() -> S3Client:
    """
    Use this function to access the s3 client.
    """
    if CONNECTIONS.s3_client is None:
        raise ConnectionError("S3 client not started")
    return CONNECTIONS.s3_client


def s3_enabled() -> bool:
    return s3_configured(get_settings())


async def _start_cloudflare() -> None:
    settings = get_settings()
    logging.debug(f"Using Cloudflare API at {settings.cf_api_url}, token? {'yes' if settings.cf_api_token else 'no'}")
    headers = {}
    if settings.cf_api_token:
        headers["Authorization"] = f"Bearer {settings.cf_api_token}"
    CONNECTIONS.cloudflare = httpx.AsyncClient(headers=headers, timeout=settings.http_timeout)


async def _close_cloudflare() -> None:
    if CONNECTIONS.cloudflare is not None:
        await CONNECTIONS.cloudflare.aclose()
        CONNECTIONS.cloudflare = None


async def _start_s3() -> None:
    if s3_enabled() is False:
        return None

    settings = get_settings()
    logging.debug(f"Connecting with S3 at {settings.s3_host}, bucket {settings.s3_bucket}")

    session = get_session()
    client = session.create_client(
        service_name="s3",
        endpoint_url=settings.s3_host,
        aws_access_key_id=settings.s3_access_key,
        aws_secret_access_key=settings.s3_secret_key,
        config=AioConfig(signature_version="s3v4"),
    )

    CONNECTIONS.s3_context_stack = AsyncExitStack()
    CONNECTIONS.s3_client = await CONNECTIONS.s3_context_stack.enter_async_context(client)


async def _close_s3():
    if CONNECTIONS.s3_context_stack is not None:
        await CONNECTIONS.s3_context_stack.aclose()
        CONNECTIONS.s3_client = None
        CONNECTIONS.s3_context_stack = None
