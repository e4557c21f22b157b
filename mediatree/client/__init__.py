from mediatree.client.api_client import MediaTreeClient
from mediatree.client.mirror import TreeMirror
from mediatree.client.navigation import NavigationState

__all__ = ["MediaTreeClient", "NavigationState", "TreeMirror"]
