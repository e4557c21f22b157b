"""
The virtual namespace: a directory tree derived from flat object keys.

This package has no knowledge of HTTP or of any object store, so the API server and the client-side mirror
resolve paths with exactly the same code.
"""

from mediatree.namespace.paths import ancestor_chain, canonical_path, is_ancestor_or_self, object_id, split_path
from mediatree.namespace.resolver import listing_for, resolve
from mediatree.namespace.tree import build_tree, find_node, is_malformed_key, walk

__all__ = [
    "ancestor_chain",
    "build_tree",
    "canonical_path",
    "find_node",
    "is_ancestor_or_self",
    "is_malformed_key",
    "listing_for",
    "object_id",
    "resolve",
    "split_path",
    "walk",
]
