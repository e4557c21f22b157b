"""mediatree API: browse a flat image store as a directory tree."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from mediatree.api.images import app_images
from mediatree.api.info import app_info
from mediatree.config import validate_settings
from mediatree.connections import media_connections
from mediatree.errors import UpstreamFailure


@asynccontextmanager
async def lifespan(app: FastAPI):
    if warning := validate_settings():
        logging.warning(warning)
    async with media_connections():
        yield


app = FastAPI(
    title="mediatree",
    description=__doc__ if __doc__ else "",
    openapi_tags=[
        dict(name="images", description="Endpoints to browse directories and to upload and delete images"),
        dict(name="informational", description="Server configuration and image delivery"),
    ],
    lifespan=lifespan,
)
app.include_router(app_info)
app.include_router(app_images)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-API-Key"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.exception_handler(UpstreamFailure)
async def upstream_failure_handler(request: Request, exc: UpstreamFailure):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )


@app.exception_handler(ValueError)
async def value_error_exception_handler(request: Request, exc: ValueError):
    return JSONResponse(
        status_code=400,
        content={"message": str(exc)},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc) -> JSONResponse:
    return JSONResponse(
        status_code=422, content={"message": "There was an issue with the data you sent.", "fields_invalid": exc.errors()}
    )
