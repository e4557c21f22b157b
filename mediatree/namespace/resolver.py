from mediatree.models import DirectoryListing, DirectoryNode, DirectorySummary, ImageObject
from mediatree.namespace.tree import find_node


def name_sort_key(name: str) -> tuple[str, str]:
    # case-insensitive first, then case-sensitive so 'B' and 'b' still have a fixed order
    return name.casefold(), name


def sorted_directories(node: DirectoryNode) -> list[DirectoryNode]:
    return sorted(node.children.values(), key=lambda child: name_sort_key(child.name))


def sorted_objects(node: DirectoryNode) -> list[ImageObject]:
    return sorted(node.objects.values(), key=lambda obj: (name_sort_key(obj.filename), obj.id))


def summarize(node: DirectoryNode) -> DirectorySummary:
    return DirectorySummary(
        name=node.name,
        path=node.path,
        directory_count=node.directory_count,
        object_count=node.object_count,
    )


def listing_for(node: DirectoryNode) -> DirectoryListing:
    """The immediate subdirectories and images of node, in display order. Deeper levels are not included."""
    return DirectoryListing(
        path=node.path,
        directories=[summarize(child) for child in sorted_directories(node)],
        objects=sorted_objects(node),
    )


def resolve(root: DirectoryNode, path: str | None) -> DirectoryListing | None:
    """
    Resolve a path against the tree.

    Returns None if there is no directory at that path. Only directories are traversed, so the full id of an image
    does not resolve. An existing directory without content gives an empty listing, never None.
    """
    node = find_node(root, path)
    if node is None:
        return None
    return listing_for(node)
