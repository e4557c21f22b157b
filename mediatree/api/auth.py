"""Helper methods for authentication."""

import logging
import secrets

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

from mediatree.config import AuthOptions, get_settings

api_key_scheme = APIKeyHeader(name="X-API-Key", scheme_name="API Key Header", auto_error=False)


async def authenticated(api_key: str | None = Security(api_key_scheme)) -> None:
    """
    Checks the X-API-Key header against the pre-shared key before any tree or store access happens.
    """
    settings = get_settings()
    if settings.auth == AuthOptions.no_auth:
        return

    if not settings.api_key:
        logging.error("Refusing request: authentication is enabled but no api_key is configured")
        raise HTTPException(status_code=401, detail="Unauthorized")
    if api_key is None or not secrets.compare_digest(api_key.encode("utf-8"), settings.api_key.encode("utf-8")):
        raise HTTPException(status_code=401, detail="Unauthorized")
