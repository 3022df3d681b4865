"""Test doubles for the remote Gitea state and the operator prompt."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from pytest import LogCaptureFixture
from typing_extensions import override

from gitea_declarative.errors import NotFoundError, RemoteError
from gitea_declarative.meta_consts import DEFAULT_USER_VISIBILITY
from gitea_declarative.models import AccountInfo, GitHubMirror, NativeRepo, RepoSpec
from gitea_declarative.reconcile.prompt import is_yes
from gitea_declarative.remote.base import RemoteStateClient


def critical_messages(caplog: LogCaptureFixture) -> list[str]:
    """Return the text of every CRITICAL record captured so far."""
    return [record.getMessage() for record in caplog.records if record.levelname == "CRITICAL"]


def native(default_branch: str = "main", *, private: bool = False, description: str = "") -> RepoSpec:
    """Build a native repo spec."""
    return RepoSpec(description=description, origin=NativeRepo(default_branch=default_branch, private=private))


def mirror(source: str, *, description: str = "") -> RepoSpec:
    """Build a GitHub mirror repo spec."""
    return RepoSpec(description=description, origin=GitHubMirror(source=source))


class FakeRemoteStateClient(RemoteStateClient):
    """In-memory Gitea that behaves like the real API for the operations the reconciler uses.

    Like Gitea, creating a user ignores the admin flag and the website, and editing a user
    ignores the website.
    """

    def __init__(
        self,
        users: dict[str, AccountInfo] | None = None,
        repos: dict[str, dict[str, RepoSpec]] | None = None,
        *,
        failing: Iterable[tuple[str, str]] = (),
        delay: float = 0,
    ) -> None:
        """Initialize the fake.

        Args:
            users: Existing users.
            repos: Existing repos by owner then name. Owners must also be users or listed here.
            failing: (operation, key) pairs that raise a RemoteError, e.g. ("create_repo", "dave/proj").
            delay: Seconds each call sleeps before acting, to force tasks to overlap.
        """
        self.users: dict[str, AccountInfo] = dict(users or {})
        self.repos: dict[str, dict[str, RepoSpec]] = {owner: dict(r) for owner, r in (repos or {}).items()}
        self.failing = set(failing)
        self.delay = delay
        self.calls: list[tuple[str, ...]] = []
        self.created_passwords: dict[str, str] = {}

    async def _enter(self, operation: str, key: str) -> None:
        self.calls.append((operation, key))
        await asyncio.sleep(self.delay)
        if (operation, key) in self.failing:
            raise RemoteError(f"{operation} {key} failed", status_code=500)

    def calls_for(self, operation: str) -> list[str]:
        """Return the keys of every recorded call to `operation`."""
        return [key for op, key in self.calls if op == operation]

    @override
    async def get_user(self, username: str) -> AccountInfo:
        await self._enter("get_user", username)
        if username not in self.users:
            raise NotFoundError(f"user {username} not found", status_code=404)
        return self.users[username]

    @override
    async def list_users(self) -> dict[str, AccountInfo]:
        await self._enter("list_users", "")
        return dict(self.users)

    @override
    async def create_user(self, username: str, info: AccountInfo, *, password: str) -> None:
        await self._enter("create_user", username)
        self.created_passwords[username] = password
        self.users[username] = AccountInfo(
            email=info.email,
            visibility=info.visibility or str(DEFAULT_USER_VISIBILITY),
        )

    @override
    async def edit_user(
        self,
        username: str,
        *,
        admin: bool | None = None,
        email: str | None = None,
        visibility: str | None = None,
    ) -> None:
        await self._enter("edit_user", username)
        self.calls.append(("edit_user_fields", f"{username}:{admin}:{email}:{visibility}"))
        current = self.users[username]
        self.users[username] = current.model_copy(
            update={
                "is_admin": current.is_admin if admin is None else admin,
                "email": current.email if email is None else email,
                "visibility": current.visibility if visibility is None else visibility,
            }
        )

    @override
    async def delete_user(self, username: str) -> None:
        await self._enter("delete_user", username)
        del self.users[username]

    @override
    async def get_repo(self, owner: str, name: str) -> RepoSpec:
        await self._enter("get_repo", f"{owner}/{name}")
        try:
            return self.repos[owner][name]
        except KeyError:
            raise NotFoundError(f"repo {owner}/{name} not found", status_code=404) from None

    @override
    async def list_repos(self, owner: str) -> dict[str, RepoSpec]:
        await self._enter("list_repos", owner)
        if owner not in self.users and owner not in self.repos:
            raise NotFoundError(f"owner {owner} not found", status_code=404)
        return dict(self.repos.get(owner, {}))

    @override
    async def create_native_repo(self, owner: str, name: str, description: str, native: NativeRepo) -> None:
        await self._enter("create_repo", f"{owner}/{name}")
        self.repos.setdefault(owner, {})[name] = RepoSpec(description=description, origin=native)

    @override
    async def create_mirror_repo(self, owner: str, name: str, description: str, mirror: GitHubMirror) -> None:
        await self._enter("create_mirror", f"{owner}/{name}")
        self.repos.setdefault(owner, {})[name] = RepoSpec(description=description, origin=mirror)

    @override
    async def edit_repo(
        self,
        owner: str,
        name: str,
        *,
        description: str | None = None,
        default_branch: str | None = None,
        private: bool | None = None,
    ) -> None:
        await self._enter("edit_repo", f"{owner}/{name}")
        current = self.repos[owner][name]
        origin = current.origin
        if isinstance(origin, NativeRepo):
            origin = NativeRepo(
                default_branch=origin.default_branch if default_branch is None else default_branch,
                private=origin.private if private is None else private,
            )
        self.repos[owner][name] = RepoSpec(
            description=current.description if description is None else description,
            origin=origin,
        )

    @override
    async def delete_repo(self, owner: str, name: str) -> None:
        await self._enter("delete_repo", f"{owner}/{name}")
        del self.repos[owner][name]


class ScriptedPrompt:
    """Answers deletion prompts from a script and checks that prompts never overlap."""

    def __init__(self, answers: dict[str, str] | None = None, *, default: str = "") -> None:
        """Initialize the prompt.

        Args:
            answers: Raw answers keyed by a substring of the prompt, e.g. {"User bob": "y"}.
            default: The raw answer for prompts no key matches.
        """
        self.answers = answers or {}
        self.default = default
        self.messages: list[str] = []
        self._active = 0
        self.max_active = 0

    async def __call__(self, message: str) -> bool:
        self._active += 1
        self.max_active = max(self.max_active, self._active)
        try:
            self.messages.append(message)
            # Give any concurrent prompt a chance to start.
            await asyncio.sleep(0.01)
            answer = next((raw for key, raw in self.answers.items() if key in message), self.default)
            return is_yes(answer)
        finally:
            self._active -= 1
