"""Clients for the remote code-hosting service.

- RemoteStateClient: the abstract operations the reconciler depends on
- GiteaClient: an httpx implementation against Gitea's v1 REST API
"""

from .base import RemoteStateClient
from .gitea_client import GiteaClient

__all__ = [
    "GiteaClient",
    "RemoteStateClient",
]
