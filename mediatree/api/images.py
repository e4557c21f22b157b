"""API endpoints to browse the virtual directory tree and to upload and delete images."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from pydantic import BaseModel, Field

from mediatree.api.auth import authenticated
from mediatree.models import DirectoryListing, DirectoryNode, ImageObject
from mediatree.namespace import is_malformed_key, object_id, resolve
from mediatree.namespace.cache import get_tree_cache
from mediatree.objectstorage.images import fetch_listing, remove_image, store_image

app_images = APIRouter(prefix="/api", tags=["images"], dependencies=[Depends(authenticated)])


# RESPONSE MODELS
class UploadResponse(BaseModel):
    success: bool = Field(description="Whether the image was stored")
    image: ImageObject = Field(description="The stored image, with the id assigned by the store")


class DeleteResponse(BaseModel):
    success: bool = Field(description="Whether the image was deleted")
    deleted: str = Field(description="Id of the deleted image")


async def current_tree() -> DirectoryNode:
    return await get_tree_cache().get_tree(fetch_listing)


@app_images.get("/images")
async def list_directory(
    path: Annotated[str, Query(description="Directory path, e.g. themes/akurai. Empty for the root")] = "",
) -> DirectoryListing:
    """
    List the immediate subdirectories and images of a directory.

    Returns 404 if no image key has this directory as (part of) its prefix.
    """
    listing = resolve(await current_tree(), path)
    if listing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Directory not found")
    return listing


@app_images.get("/organize")
async def full_tree() -> DirectoryNode:
    """
    The complete directory tree, so clients can fetch it once and navigate locally.
    """
    return await current_tree()


@app_images.post("/images", status_code=status.HTTP_201_CREATED)
async def upload_image(
    file: Annotated[UploadFile | None, File(description="The image file")] = None,
    id: Annotated[str | None, Form(description="Full id for the image, e.g. themes/akurai/logo.webp")] = None,
    path: Annotated[
        str | None, Form(description="Directory to upload into (ignored if id is given); the file name is appended")
    ] = None,
) -> UploadResponse:
    """
    Upload an image. Without id or path, the store picks the id.
    """
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided")

    filename = file.filename or "upload"
    if id:
        if is_malformed_key(id):
            raise ValueError(f"Invalid image id {id!r}: segments cannot be empty")
        key: str | None = id
    elif path is not None:
        key = object_id(path, filename)
    else:
        key = None

    data = await file.read()
    image = await store_image(data, filename, key, content_type=file.content_type)
    get_tree_cache().invalidate()
    logging.info(f"Uploaded image {image.id} ({len(data)} bytes)")
    return UploadResponse(success=True, image=image)


@app_images.delete("/images")
async def delete_image(
    id: Annotated[str | None, Query(description="Id of the image to delete")] = None,
) -> DeleteResponse:
    """Delete an image from the store."""
    if not id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No image ID provided")
    await remove_image(id)
    get_tree_cache().invalidate()
    logging.info(f"Deleted image {id}")
    return DeleteResponse(success=True, deleted=id)
