"""
When to rebuild the directory tree.

The tree is never patched: it is rebuilt from a fresh flat listing. Under the per_request policy this happens on every
read; under the session policy the last tree is reused until a mutation invalidates it.
"""

import functools
import logging
from typing import Awaitable, Callable

from mediatree.config import RefreshPolicy, get_settings
from mediatree.models import DirectoryNode, ImageObject
from mediatree.namespace.tree import build_tree

ListingFetcher = Callable[[], Awaitable[list[ImageObject]]]


class RefreshGate:
    """
    Hands out a ticket per refresh and decides whether its result may be installed.

    A result is accepted only if no newer result was installed yet, and the refresh started after the last
    invalidation. This way a superseded or pre-mutation refresh can never overwrite a newer tree.
    """

    def __init__(self) -> None:
        self._issued = 0
        self._applied = 0
        self._invalidated = 0

    def ticket(self) -> int:
        self._issued += 1
        return self._issued

    def accept(self, ticket: int) -> bool:
        if ticket <= self._applied or ticket <= self._invalidated:
            return False
        self._applied = ticket
        return True

    def invalidate(self) -> None:
        self._invalidated = self._issued


class TreeCache:
    def __init__(self, policy: RefreshPolicy | None = None) -> None:
        self._policy = policy
        self._tree: DirectoryNode | None = None
        self._stale = True
        self._gate = RefreshGate()

    @property
    def policy(self) -> RefreshPolicy:
        return self._policy or get_settings().refresh_policy

    @property
    def tree(self) -> DirectoryNode | None:
        """The last good tree, if any (possibly stale)."""
        return self._tree

    @property
    def stale(self) -> bool:
        return self._stale

    async def get_tree(self, fetch_listing: ListingFetcher) -> DirectoryNode:
        """
        Return a tree that reflects the store, fetching and building one if the policy requires it.

        Errors from fetch_listing propagate unchanged, and leave the previously cached tree in place.
        """
        if self.policy == RefreshPolicy.session and self._tree is not None and not self._stale:
            return self._tree

        ticket = self._gate.ticket()
        listing = await fetch_listing()
        tree = build_tree(listing)
        if self.policy == RefreshPolicy.session and self._gate.accept(ticket):
            logging.debug(f"Installed directory tree from {len(listing)} listed objects")
            self._tree = tree
            self._stale = False
        return tree

    def invalidate(self) -> None:
        """Mark the cached tree as outdated (after an upload or delete); the next read rebuilds it."""
        self._stale = True
        self._gate.invalidate()


@functools.lru_cache()
def get_tree_cache() -> TreeCache:
    return TreeCache()
