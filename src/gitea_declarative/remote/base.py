"""Abstract interface for the remote state the reconciler reads and corrects."""

from __future__ import annotations

from abc import ABC, abstractmethod

from gitea_declarative.models import AccountInfo, GitHubMirror, NativeRepo, RepoSpec


class RemoteStateClient(ABC):
    """The operations the differ and reconciler need from a code-hosting service.

    Every method may raise a `gitea_declarative.errors.RemoteError` subclass. Implementations
    must tolerate concurrent independent calls; the reconciler issues one call per entity
    at a time but runs many entities at once.
    """

    @abstractmethod
    async def get_user(self, username: str) -> AccountInfo:
        """Fetch one user.

        The differ reads users through `list_users` instead; this serves callers that need a
        single account.

        Raises:
            NotFoundError: If no such user exists.
        """

    @abstractmethod
    async def list_users(self) -> dict[str, AccountInfo]:
        """Fetch every user on the instance, keyed by username, in the remote's order."""

    @abstractmethod
    async def create_user(self, username: str, info: AccountInfo, *, password: str) -> None:
        """Create a user who must change `password` at first login.

        The admin flag is not applied here; Gitea only accepts it on edit.
        """

    @abstractmethod
    async def edit_user(
        self,
        username: str,
        *,
        admin: bool | None = None,
        email: str | None = None,
        visibility: str | None = None,
    ) -> None:
        """Edit a user. Fields left as None are not sent."""

    @abstractmethod
    async def delete_user(self, username: str) -> None:
        """Delete a user."""

    @abstractmethod
    async def get_repo(self, owner: str, name: str) -> RepoSpec:
        """Fetch one repository.

        The differ reads repositories through `list_repos` instead; this serves callers that
        need a single repository.

        Raises:
            NotFoundError: If the owner or the repository does not exist.
        """

    @abstractmethod
    async def list_repos(self, owner: str) -> dict[str, RepoSpec]:
        """Fetch every repository owned by `owner`, keyed by name.

        Raises:
            NotFoundError: If the owner does not exist.
        """

    @abstractmethod
    async def create_native_repo(self, owner: str, name: str, description: str, native: NativeRepo) -> None:
        """Create an empty repository for `owner`."""

    @abstractmethod
    async def create_mirror_repo(self, owner: str, name: str, description: str, mirror: GitHubMirror) -> None:
        """Create a pull mirror of a GitHub repository for `owner`."""

    @abstractmethod
    async def edit_repo(
        self,
        owner: str,
        name: str,
        *,
        description: str | None = None,
        default_branch: str | None = None,
        private: bool | None = None,
    ) -> None:
        """Edit a repository. Fields left as None are not sent."""

    @abstractmethod
    async def delete_repo(self, owner: str, name: str) -> None:
        """Delete a repository."""
