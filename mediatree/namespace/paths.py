"""
Path helpers for the virtual namespace.

Paths are /-delimited strings without leading or trailing slash; the root is the empty string.
"""


def split_path(path: str | None) -> list[str]:
    """Split a path into its segments, ignoring empty ones ('a//b', '/a/b' and 'a/b/' all give ['a', 'b'])."""
    if not path:
        return []
    return [segment for segment in path.split("/") if segment]


def canonical_path(path: str | None) -> str:
    return "/".join(split_path(path))


def join_path(parent: str, name: str) -> str:
    return f"{parent}/{name}" if parent else name


def object_id(path: str | None, filename: str) -> str:
    """
    Compute the flat key for a file uploaded into the directory at path.
    """
    if not filename or "/" in filename:
        raise ValueError(f"Invalid filename {filename!r}: must be non-empty and cannot contain '/'")
    return join_path(canonical_path(path), filename)


def ancestor_chain(path: str | None) -> list[tuple[str, str]]:
    """
    Return the (name, path) pairs from the root down to (and including) path, for breadcrumbs.
    The root itself is not part of the chain, so the chain for '' is empty.
    """
    chain: list[tuple[str, str]] = []
    current = ""
    for segment in split_path(path):
        current = join_path(current, segment)
        chain.append((segment, current))
    return chain


def is_ancestor_or_self(candidate: str, path: str) -> bool:
    """
    Is candidate the same directory as path, or one of its ancestors?

    This is an exact prefix test on whole segments: 'ab' is not an ancestor of 'abc/x'.
    """
    if not candidate:
        return True
    return path == candidate or path.startswith(candidate + "/")
