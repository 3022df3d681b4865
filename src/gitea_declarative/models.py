"""Pydantic models describing the desired (and observed) Gitea users and repositories."""

from __future__ import annotations

import json
import urllib.parse
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from gitea_declarative.errors import ConfigFileError
from gitea_declarative.meta_consts import USER_VISIBILITY


def _check_uri(value: str) -> str:
    parsed = urllib.parse.urlparse(value)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"{value!r} is not an absolute URI")
    return value


class AccountInfo(BaseModel):
    """The managed properties of a Gitea user account.

    Observed accounts may leave any field unset; desired accounts always carry an email
    (see `DesiredAccount`).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    is_admin: bool = Field(default=False, alias="isAdmin")
    """Whether the user is a site administrator."""

    email: str | None = None
    """The user's primary email address."""

    website: str | None = None
    """The user's website, if any."""

    visibility: str | None = None
    """One of Gitea's user visibilities (`public`, `limited`, `private`). None means Gitea's default."""


class DesiredAccount(AccountInfo):
    """An account as declared in the config file."""

    email: str
    """The user's primary email address. Required for every declared user."""

    @field_validator("website")
    @classmethod
    def validate_website(cls, value: str | None) -> str | None:
        """Require an absolute URI when a website is given."""
        return None if value is None else _check_uri(value)

    @field_validator("visibility")
    @classmethod
    def validate_visibility(cls, value: str | None) -> str | None:
        """Only accept visibilities Gitea knows about."""
        if value is not None and value not in USER_VISIBILITY.__members__:
            raise ValueError(f"Unknown visibility {value!r}, expected one of {list(USER_VISIBILITY.__members__)}")
        return value


class GitHubMirror(BaseModel):
    """A repository that Gitea pull-mirrors from GitHub."""

    model_config = ConfigDict(frozen=True)

    source: str
    """The URI of the upstream GitHub repository."""


class NativeRepo(BaseModel):
    """A repository that lives only on Gitea."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    default_branch: str = Field(alias="defaultBranch")
    """The repository's default branch."""

    private: bool = False
    """Whether the repository is private."""


RepoOrigin = GitHubMirror | NativeRepo


class RepoSpec(BaseModel):
    """A repository's description and origin.

    In the config file the origin is written as exactly one of a `gitHub` URI or a
    `native` object; both are folded into `origin` on validation.
    """

    model_config = ConfigDict(frozen=True)

    description: str
    """The repository description."""

    origin: RepoOrigin
    """Where the repository's content comes from."""

    @model_validator(mode="before")
    @classmethod
    def fold_origin(cls, data: Any) -> Any:  # noqa: ANN401
        """Translate the config file's `gitHub` / `native` keys into `origin`."""
        if not isinstance(data, dict) or "origin" in data:
            return data

        data = dict(data)
        github = data.pop("gitHub", None)
        native = data.pop("native", None)
        unknown = set(data) - {"description"}
        if unknown:
            raise ValueError(f"Unknown repo keys: {sorted(unknown)}")

        if github is not None and native is not None:
            raise ValueError("A repo must specify exactly one of 'gitHub' or 'native', not both")
        if github is None and native is None:
            raise ValueError("A repo must specify exactly one of 'gitHub' or 'native'")

        data["origin"] = {"source": _check_uri(github)} if github is not None else native
        return data

    @property
    def is_mirror(self) -> bool:
        """Return True if the repository is mirrored from GitHub."""
        return isinstance(self.origin, GitHubMirror)


class DesiredConfig(BaseModel):
    """The complete desired state: users, and repos keyed by owner then repo name.

    Dict ordering follows the config file, and every report derived from this model
    iterates in that order.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    users: dict[str, DesiredAccount] = Field(default_factory=dict)
    """Declared users, keyed by username."""

    repos: dict[str, dict[str, RepoSpec]] = Field(default_factory=dict)
    """Declared repositories, keyed by owner and then by repository name."""

    @model_validator(mode="after")
    def validate_names(self) -> DesiredConfig:
        """Reject empty user, owner or repository names."""
        for name in self.users:
            if not name:
                raise ValueError("User names must be non-empty")
        for owner, repos in self.repos.items():
            if not owner:
                raise ValueError("Repo owners must be non-empty")
            for repo_name in repos:
                if not repo_name:
                    raise ValueError(f"Repo names under {owner} must be non-empty")
            if owner not in self.users:
                logger.debug(f"Repos declared for {owner}, who is not a managed user")
        return self


def load_desired_config(path: Path) -> DesiredConfig:
    """Load and validate a desired-state JSON config file.

    Args:
        path: The config file to read.

    Returns:
        The validated desired configuration.

    Raises:
        ConfigFileError: If the file cannot be read, is not JSON, or does not match the schema.
    """
    logger.debug(f"Loading desired configuration from {path}")
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigFileError(f"Failed to read config file {path}: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigFileError(f"Config file {path} is not valid JSON: {e}") from e

    try:
        config = DesiredConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigFileError(f"Config file {path} does not match the schema:\n{e}") from e

    repo_count = sum(len(repos) for repos in config.repos.values())
    logger.info(f"Loaded {len(config.users)} users and {repo_count} repos from {path}")
    return config
