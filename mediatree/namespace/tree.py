"""
Build a virtual directory tree from a flat listing of keys.

The object store has no real directories: 'themes/akurai/logo.webp' is just a key. Every proper prefix of a key's
directory part becomes a DirectoryNode, and the image is attached to the deepest one.
"""

import logging
from typing import Iterable, Iterator

from mediatree.models import DirectoryNode, ImageObject
from mediatree.namespace.paths import join_path, split_path

logger = logging.getLogger(__name__)


def is_malformed_key(key: object) -> bool:
    """A key is unusable if it is not a non-empty string, or if any of its segments is empty (e.g. 'a//b', '/a', 'a/')."""
    if not isinstance(key, str) or not key:
        return True
    return any(segment == "" for segment in key.split("/"))


def build_tree(listing: Iterable[ImageObject], skipped: list[str] | None = None) -> DirectoryNode:
    """
    Build a new tree from the listing and return its root.

    Malformed entries are left out (and logged) instead of failing the whole tree; their ids are appended to skipped
    if a list is given. If two entries share an id, the last one wins.
    """
    root = DirectoryNode(name="", path="")
    for image in listing:
        if is_malformed_key(image.id):
            logger.warning(f"Skipping listing entry with unusable id {image.id!r}")
            if skipped is not None:
                skipped.append(image.id)
            continue
        *directories, _filename = image.id.split("/")
        node = root
        for name in directories:
            child = node.children.get(name)
            if child is None:
                child = DirectoryNode(name=name, path=join_path(node.path, name))
                node.children[name] = child
            node = child
        node.objects[image.id] = image
    return root


def find_node(root: DirectoryNode, path: str | None) -> DirectoryNode | None:
    """Descend from root one segment at a time by exact name; None if any segment has no matching directory."""
    node = root
    for name in split_path(path):
        child = node.children.get(name)
        if child is None:
            return None
        node = child
    return node


def walk(root: DirectoryNode) -> Iterator[DirectoryNode]:
    """Yield every directory node, depth first, parents before children."""
    yield root
    for child in root.children.values():
        yield from walk(child)


def all_objects(root: DirectoryNode) -> Iterator[ImageObject]:
    for node in walk(root):
        yield from node.objects.values()
