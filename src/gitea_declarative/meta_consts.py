from __future__ import annotations

from enum import IntEnum, auto

from strenum import StrEnum


class ACCOUNT_FIELD(StrEnum):
    """The mutable fields of a Gitea user account, in the order updates are resolved.

    Enforceable field names double as keyword arguments of `RemoteStateClient.edit_user`.
    """

    admin = auto()
    email = auto()
    visibility = auto()
    website = auto()


class REPO_FIELD(StrEnum):
    """The compared fields of a repository, in the order updates are resolved.

    Enforceable field names double as keyword arguments of `RemoteStateClient.edit_repo`.
    """

    origin = auto()
    description = auto()
    mirror_source = auto()
    default_branch = auto()
    private = auto()


UNENFORCEABLE_ACCOUNT_FIELDS = frozenset({ACCOUNT_FIELD.website})
"""Account fields Gitea's admin API accepts but silently ignores (go-gitea/gitea#17126)."""

UNENFORCEABLE_REPO_FIELDS = frozenset({REPO_FIELD.origin, REPO_FIELD.mirror_source})
"""Repo fields that cannot be changed through an edit; the repo would have to be recreated."""


class USER_VISIBILITY(StrEnum):
    """The visibilities Gitea accepts for a user account."""

    public = auto()
    limited = auto()
    private = auto()


DEFAULT_USER_VISIBILITY = USER_VISIBILITY.public
"""The visibility Gitea assigns to a user when none is requested."""


class EXIT_DISPOSITION(IntEnum):
    """Process exit codes. The first four encode which phases observed drift."""

    clean = 0
    repo_drift = 1
    user_drift = 2
    user_and_repo_drift = 3
    usage_error = 4
