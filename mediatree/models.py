from pydantic import BaseModel, Field, model_validator
from typing_extensions import Self


######################## FLAT LISTING #########################


class ImageObject(BaseModel):
    """A stored image, addressed by its full flat key."""

    id: str = Field(description="Full flat key, e.g. themes/akurai/logo.webp")
    filename: str = Field(default="", description="Final /-delimited segment of the id (derived, never trusted)")
    uploaded_at: str | None = Field(default=None, description="Upload timestamp as reported by the store")
    size_bytes: int | None = Field(default=None, description="File size in bytes, if known")
    require_signed_urls: bool = Field(default=False, description="Whether the store requires signed delivery URLs")

    @model_validator(mode="after")
    def derive_filename(self) -> Self:
        self.filename = self.id.rsplit("/", 1)[-1]
        return self


######################## VIRTUAL DIRECTORY TREE #########################


class DirectoryNode(BaseModel):
    """
    A synthetic directory: the common prefix of one or more flat keys.

    children and objects are keyed by name and id, so siblings and leaves are unique by construction.
    Their order carries no meaning; use the resolver to get them in display order.
    """

    name: str = ""
    path: str = ""
    children: dict[str, "DirectoryNode"] = {}
    objects: dict[str, ImageObject] = {}

    @property
    def directory_count(self) -> int:
        return len(self.children)

    @property
    def object_count(self) -> int:
        return len(self.objects)


class DirectorySummary(BaseModel):
    name: str = Field(description="Directory name (final path segment)")
    path: str = Field(description="Full path of the directory")
    directory_count: int = Field(description="Number of immediate subdirectories")
    object_count: int = Field(description="Number of images directly in this directory")


class DirectoryListing(BaseModel):
    """One level of the tree: the immediate subdirectories and images at a path."""

    path: str = Field(description="Canonical path of the listed directory ('' for the root)")
    directories: list[DirectorySummary] = Field(description="Immediate subdirectories, sorted by name")
    objects: list[ImageObject] = Field(description="Images in this directory, sorted by filename")
