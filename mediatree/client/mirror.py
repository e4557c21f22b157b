"""
A client-held copy of the directory tree, for navigating without a round trip per directory.

The mirror resolves with the same namespace code as the server, so both always agree on what a path contains.
"""

from typing import Awaitable, Callable

from mediatree.models import DirectoryListing, DirectoryNode
from mediatree.namespace import ancestor_chain, canonical_path, find_node, is_ancestor_or_self, resolve
from mediatree.namespace.cache import RefreshGate

TreeLoader = Callable[[], Awaitable[DirectoryNode]]


class TreeMirror:
    def __init__(self, load_tree: TreeLoader, tree: DirectoryNode | None = None):
        self._load_tree = load_tree
        self._tree = tree
        self._stale = tree is None
        self._gate = RefreshGate()

    @property
    def tree(self) -> DirectoryNode | None:
        return self._tree

    @property
    def stale(self) -> bool:
        return self._stale

    async def refresh(self) -> DirectoryNode:
        """
        Fetch the full tree and replace the current one.

        Until the new tree arrives, reads are served from the previous tree. If the fetch fails, the error propagates
        and the previous tree stays. A refresh that was superseded by a newer refresh, or that started before an
        invalidation, does not replace anything.
        """
        ticket = self._gate.ticket()
        tree = await self._load_tree()
        if self._gate.accept(ticket):
            self._tree = tree
            self._stale = False
        return self._tree if self._tree is not None else tree

    async def ensure_fresh(self) -> DirectoryNode:
        if self._stale or self._tree is None:
            return await self.refresh()
        return self._tree

    def invalidate(self) -> None:
        """Mark the tree as outdated, e.g. after an upload or delete. The old tree stays readable until refreshed."""
        self._stale = True
        self._gate.invalidate()

    def _require_tree(self) -> DirectoryNode:
        if self._tree is None:
            raise RuntimeError("The directory tree has not been loaded yet, call refresh() first")
        return self._tree

    def resolve(self, path: str | None) -> DirectoryListing | None:
        return resolve(self._require_tree(), path)

    def node(self, path: str | None) -> DirectoryNode | None:
        return find_node(self._require_tree(), path)

    @staticmethod
    def ancestor_chain(path: str | None) -> list[tuple[str, str]]:
        return ancestor_chain(path)

    @staticmethod
    def is_ancestor_or_self(candidate_path: str, path: str) -> bool:
        return is_ancestor_or_self(canonical_path(candidate_path), canonical_path(path))
