"""
Navigation state for a browsing UI on top of a TreeMirror.

The current path is the only navigation state. The sidebar, breadcrumb and content grid are derived from it on every
call, so they can never disagree with each other. Expansion of sidebar branches follows the current path, with an
overlay of branches the user explicitly opened or closed.
"""

import logging

from pydantic import BaseModel

from mediatree.client.api_client import MediaTreeClient
from mediatree.client.mirror import TreeMirror
from mediatree.errors import UpstreamFailure
from mediatree.models import DirectoryNode, DirectorySummary, ImageObject
from mediatree.namespace import ancestor_chain, canonical_path, is_ancestor_or_self, object_id
from mediatree.namespace.resolver import sorted_directories

logger = logging.getLogger(__name__)

ROOT_LABEL = "ROOT"


class SidebarRow(BaseModel):
    name: str
    path: str
    depth: int
    expanded: bool
    active: bool
    in_path: bool
    has_children: bool
    object_count: int


class Crumb(BaseModel):
    name: str
    path: str
    current: bool


class ContentView(BaseModel):
    path: str
    directories: list[DirectorySummary]
    objects: list[ImageObject]
    not_found: bool = False

    @property
    def empty(self) -> bool:
        return not self.directories and not self.objects


class NavigationState:
    def __init__(self, mirror: TreeMirror, client: MediaTreeClient | None = None):
        self.mirror = mirror
        self.client = client
        self.current_path = ""
        self.overrides: dict[str, bool] = {}
        self.error: str | None = None

    def on_navigate(self, path: str) -> None:
        self.current_path = canonical_path(path)
        # a directory the user navigates into is shown open, even if it was closed by hand before
        for _name, ancestor in ancestor_chain(self.current_path):
            self.overrides.pop(ancestor, None)

    def toggle(self, path: str) -> None:
        path = canonical_path(path)
        self.overrides[path] = not self.is_expanded(path)

    def is_expanded(self, path: str) -> bool:
        path = canonical_path(path)
        if path in self.overrides:
            return self.overrides[path]
        return is_ancestor_or_self(path, self.current_path)

    def sidebar_rows(self) -> list[SidebarRow]:
        """The visible rows of the directory sidebar, root first, in display order."""
        tree = self.mirror.tree
        rows = [
            SidebarRow(
                name=ROOT_LABEL,
                path="",
                depth=0,
                expanded=True,
                active=self.current_path == "",
                in_path=True,
                has_children=bool(tree and tree.children),
                object_count=tree.object_count if tree else 0,
            )
        ]
        if tree is None:
            return rows

        def visit(node: DirectoryNode, depth: int):
            for child in sorted_directories(node):
                expanded = self.is_expanded(child.path)
                rows.append(
                    SidebarRow(
                        name=child.name,
                        path=child.path,
                        depth=depth,
                        expanded=expanded,
                        active=child.path == self.current_path,
                        in_path=is_ancestor_or_self(child.path, self.current_path),
                        has_children=bool(child.children),
                        object_count=child.object_count,
                    )
                )
                if expanded:
                    visit(child, depth + 1)

        visit(tree, 1)
        return rows

    def breadcrumb(self) -> list[Crumb]:
        crumbs = [Crumb(name=ROOT_LABEL, path="", current=self.current_path == "")]
        for name, path in ancestor_chain(self.current_path):
            crumbs.append(Crumb(name=name, path=path, current=path == self.current_path))
        return crumbs

    def content(self) -> ContentView:
        """
        The subdirectories and images at the current path. A path that does not exist shows as an empty directory.
        """
        if self.mirror.tree is None:
            return ContentView(path=self.current_path, directories=[], objects=[])
        listing = self.mirror.resolve(self.current_path)
        if listing is None:
            return ContentView(path=self.current_path, directories=[], objects=[], not_found=True)
        return ContentView(path=listing.path, directories=listing.directories, objects=listing.objects)

    def dismiss_error(self) -> None:
        self.error = None

    async def reload(self) -> bool:
        """Refetch the tree. On failure the error is kept for display and the last good tree stays navigable."""
        try:
            await self.mirror.refresh()
        except UpstreamFailure as e:
            logger.warning(f"Could not refresh directory tree: {e.message}")
            self.error = e.message
            return False
        self.error = None
        return True

    def _require_client(self) -> MediaTreeClient:
        if self.client is None:
            raise RuntimeError("This navigation state has no API client, so it cannot upload or delete")
        return self.client

    async def upload(self, data: bytes, filename: str, content_type: str | None = None) -> ImageObject | None:
        """Upload a file into the current directory, then reload the tree. Returns None if the upload failed."""
        client = self._require_client()
        key = object_id(self.current_path, filename)
        try:
            image = await client.upload(data, filename, id=key, content_type=content_type)
        except UpstreamFailure as e:
            self.error = e.message
            return None
        self.mirror.invalidate()
        await self.reload()
        return image

    async def delete(self, id: str) -> bool:
        client = self._require_client()
        try:
            await client.delete(id)
        except UpstreamFailure as e:
            self.error = e.message
            return False
        self.mirror.invalidate()
        await self.reload()
        return True
