"""Alignment outcomes and field-level updates.

An outcome is produced only for entities that are not aligned, so any mapping of
outcomes is a sparse set of exceptions. Each outcome is exactly one of `Missing`,
`Unexpected` or `Diverged`; match on the class to handle them exhaustively.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Generic, TypeVar

from gitea_declarative.meta_consts import (
    ACCOUNT_FIELD,
    REPO_FIELD,
    UNENFORCEABLE_ACCOUNT_FIELDS,
    UNENFORCEABLE_REPO_FIELDS,
)
from gitea_declarative.models import AccountInfo, RepoOrigin, RepoSpec

T = TypeVar("T")


@dataclass(frozen=True)
class Missing(Generic[T]):
    """The entity is declared but absent from the remote."""

    desired: T

    def __str__(self) -> str:
        return f"Missing (desired: {self.desired!r})"


@dataclass(frozen=True)
class Unexpected:
    """The entity exists on the remote but is not declared."""

    def __str__(self) -> str:
        return "Unexpected"


@dataclass(frozen=True)
class Diverged(Generic[T]):
    """The entity exists on both sides but at least one compared field differs."""

    desired: T
    observed: T

    def __str__(self) -> str:
        return f"Diverged (desired: {self.desired!r}, observed: {self.observed!r})"


AlignmentOutcome = Missing[T] | Unexpected | Diverged[T]

AccountOutcomes = dict[str, AlignmentOutcome[AccountInfo]]
"""Username -> outcome."""

RepoOutcomes = dict[str, dict[str, AlignmentOutcome[RepoSpec]]]
"""Owner -> repo name -> outcome."""


@dataclass(frozen=True)
class AdminUpdate:
    """The user should (or should not) be a site administrator."""

    field_name: ClassVar[ACCOUNT_FIELD] = ACCOUNT_FIELD.admin
    desired: bool
    observed: bool


@dataclass(frozen=True)
class EmailUpdate:
    """The user's primary email address differs."""

    field_name: ClassVar[ACCOUNT_FIELD] = ACCOUNT_FIELD.email
    desired: str | None
    observed: str | None


@dataclass(frozen=True)
class VisibilityUpdate:
    """The user's visibility differs; an unset desired visibility means `public`."""

    field_name: ClassVar[ACCOUNT_FIELD] = ACCOUNT_FIELD.visibility
    desired: str
    observed: str | None


@dataclass(frozen=True)
class WebsiteUpdate:
    """Representable, but Gitea's admin edit endpoint ignores the website."""

    field_name: ClassVar[ACCOUNT_FIELD] = ACCOUNT_FIELD.website
    desired: str | None
    observed: str | None


AccountFieldUpdate = AdminUpdate | EmailUpdate | VisibilityUpdate | WebsiteUpdate


@dataclass(frozen=True)
class OriginUpdate:
    """The repo should switch between being a GitHub mirror and being native."""

    field_name: ClassVar[REPO_FIELD] = REPO_FIELD.origin
    desired: RepoOrigin
    observed: RepoOrigin


@dataclass(frozen=True)
class DescriptionUpdate:
    """The repository description differs."""

    field_name: ClassVar[REPO_FIELD] = REPO_FIELD.description
    desired: str
    observed: str


@dataclass(frozen=True)
class MirrorSourceUpdate:
    """A mirror points at a different upstream. Not editable through the API."""

    field_name: ClassVar[REPO_FIELD] = REPO_FIELD.mirror_source
    desired: str
    observed: str


@dataclass(frozen=True)
class DefaultBranchUpdate:
    """A native repository's default branch differs."""

    field_name: ClassVar[REPO_FIELD] = REPO_FIELD.default_branch
    desired: str
    observed: str


@dataclass(frozen=True)
class PrivateUpdate:
    """A native repository's privacy differs."""

    field_name: ClassVar[REPO_FIELD] = REPO_FIELD.private
    desired: bool
    observed: bool


RepoFieldUpdate = OriginUpdate | DescriptionUpdate | MirrorSourceUpdate | DefaultBranchUpdate | PrivateUpdate


def is_enforceable(update: AccountFieldUpdate | RepoFieldUpdate) -> bool:
    """Return True if the update can be applied through an edit request."""
    return update.field_name not in UNENFORCEABLE_ACCOUNT_FIELDS | UNENFORCEABLE_REPO_FIELDS
