"""Gitea v1 REST API client built on httpx.

API Documentation: https://gitea.com/api/swagger
"""

from __future__ import annotations

from types import TracebackType
from typing import Any

import httpx
from loguru import logger
from typing_extensions import override

from gitea_declarative.errors import (
    ConflictError,
    NotFoundError,
    RemoteError,
    TransportError,
    UnauthorizedError,
)
from gitea_declarative.meta_consts import DEFAULT_USER_VISIBILITY
from gitea_declarative.models import AccountInfo, GitHubMirror, NativeRepo, RepoSpec
from gitea_declarative.remote.base import RemoteStateClient


def _parse_user(data: dict[str, Any]) -> AccountInfo:
    # Gitea reports "no website" as an empty string.
    return AccountInfo(
        is_admin=bool(data.get("is_admin", False)),
        email=data.get("email") or None,
        website=data.get("website") or None,
        visibility=data.get("visibility") or None,
    )


def _parse_repo(data: dict[str, Any]) -> RepoSpec:
    origin: GitHubMirror | NativeRepo
    if data.get("mirror"):
        origin = GitHubMirror(source=data.get("original_url") or "")
    else:
        origin = NativeRepo(default_branch=data.get("default_branch") or "", private=bool(data.get("private")))
    return RepoSpec(description=data.get("description") or "", origin=origin)


class GiteaClient(RemoteStateClient):
    """Async client for the subset of the Gitea admin API the reconciler needs.

    Use as an async context manager so the underlying connection pool is closed:

        async with GiteaClient(host="https://gitea.example.com", token="...") as client:
            users = await client.list_users()
    """

    def __init__(
        self,
        *,
        host: str,
        token: str,
        github_token: str | None = None,
        timeout_seconds: int = 30,
        page_size: int = 50,
    ) -> None:
        """Initialize the client.

        Args:
            host: The Gitea base URL, e.g. https://gitea.example.com.
            token: An admin user's API token.
            github_token: Token passed to Gitea when migrating mirrors from GitHub, if any.
            timeout_seconds: Per-request timeout.
            page_size: Number of items requested per page when listing.
        """
        self._api_url = f"{host.rstrip('/')}/api/v1"
        self._github_token = github_token
        self._page_size = page_size
        self._client = httpx.AsyncClient(
            base_url=self._api_url,
            headers={"Authorization": f"token {token}", "Accept": "application/json"},
            timeout=timeout_seconds,
        )
        logger.debug(f"GiteaClient initialized for {self._api_url}")

    async def __aenter__(self) -> GiteaClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Issue one request and translate failures into the `RemoteError` taxonomy.

        Raises:
            NotFoundError: On 404.
            UnauthorizedError: On 401 or 403.
            ConflictError: On 409 or 422.
            TransportError: If the request did not complete, or on any other non-2xx status.
        """
        description = f"{method} {path}"
        logger.debug(f"Gitea request: {description}")

        try:
            response = await self._client.request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            raise TransportError(f"{description} failed: {e}") from e

        status = response.status_code
        if response.is_success:
            return response

        message = f"{description} returned {status}: {response.text}"
        error_type: type[RemoteError]
        if status == 404:
            error_type = NotFoundError
        elif status in (401, 403):
            error_type = UnauthorizedError
        elif status in (409, 422):
            error_type = ConflictError
        else:
            error_type = TransportError
        raise error_type(message, status_code=status)

    async def _paginate(self, path: str) -> list[dict[str, Any]]:
        """Fetch every page of a list endpoint.

        Gitea may return fewer items than `limit` on any page (it caps `limit` at its
        MAX_RESPONSE_ITEMS setting), so paging stops once `X-Total-Count` items have been
        collected, or at the first empty page if the header is absent.
        """
        items: list[dict[str, Any]] = []
        page = 1
        while True:
            response = await self._request("GET", path, params={"page": page, "limit": self._page_size})
            batch: list[dict[str, Any]] = response.json()
            if not batch:
                return items
            items.extend(batch)

            total = response.headers.get("X-Total-Count")
            if total is not None and len(items) >= int(total):
                return items
            page += 1

    @override
    async def get_user(self, username: str) -> AccountInfo:
        response = await self._request("GET", f"/users/{username}")
        return _parse_user(response.json())

    @override
    async def list_users(self) -> dict[str, AccountInfo]:
        users = {data["login"]: _parse_user(data) for data in await self._paginate("/admin/users")}
        logger.debug(f"Listed {len(users)} users")
        return users

    @override
    async def create_user(self, username: str, info: AccountInfo, *, password: str) -> None:
        body = {
            "username": username,
            "login_name": username,
            "full_name": username,
            "email": info.email,
            "password": password,
            "must_change_password": True,
            "visibility": info.visibility or str(DEFAULT_USER_VISIBILITY),
            "source_id": 0,
        }
        await self._request("POST", "/admin/users", json=body)

    @override
    async def edit_user(
        self,
        username: str,
        *,
        admin: bool | None = None,
        email: str | None = None,
        visibility: str | None = None,
    ) -> None:
        body: dict[str, Any] = {"login_name": username, "source_id": 0}
        if admin is not None:
            body["admin"] = admin
        if email is not None:
            body["email"] = email
        if visibility is not None:
            body["visibility"] = visibility
        await self._request("PATCH", f"/admin/users/{username}", json=body)

    @override
    async def delete_user(self, username: str) -> None:
        await self._request("DELETE", f"/admin/users/{username}")

    @override
    async def get_repo(self, owner: str, name: str) -> RepoSpec:
        response = await self._request("GET", f"/repos/{owner}/{name}")
        return _parse_repo(response.json())

    @override
    async def list_repos(self, owner: str) -> dict[str, RepoSpec]:
        repos = {data["name"]: _parse_repo(data) for data in await self._paginate(f"/users/{owner}/repos")}
        logger.debug(f"Listed {len(repos)} repos for {owner}")
        return repos

    @override
    async def create_native_repo(self, owner: str, name: str, description: str, native: NativeRepo) -> None:
        body = {
            "name": name,
            "description": description,
            "default_branch": native.default_branch,
            "private": native.private,
        }
        await self._request("POST", f"/admin/users/{owner}/repos", json=body)

    @override
    async def create_mirror_repo(self, owner: str, name: str, description: str, mirror: GitHubMirror) -> None:
        body: dict[str, Any] = {
            "clone_addr": mirror.source,
            "repo_owner": owner,
            "repo_name": name,
            "description": description,
            "mirror": True,
            "service": "github",
        }
        if self._github_token:
            body["auth_token"] = self._github_token
        await self._request("POST", "/repos/migrate", json=body)

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
        body: dict[str, Any] = {}
        if description is not None:
            body["description"] = description
        if default_branch is not None:
            body["default_branch"] = default_branch
        if private is not None:
            body["private"] = private
        await self._request("PATCH", f"/repos/{owner}/{name}", json=body)

    @override
    async def delete_repo(self, owner: str, name: str) -> None:
        await self._request("DELETE", f"/repos/{owner}/{name}")
