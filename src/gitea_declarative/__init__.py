"""Declarative management of Gitea users and repositories.

Compare a JSON description of the desired users and repositories against a live Gitea
instance, report the drift, and optionally correct it.
"""

from __future__ import annotations

from gitea_declarative.alignment import (
    AccountOutcomes,
    AlignmentOutcome,
    Diverged,
    Missing,
    RepoOutcomes,
    Unexpected,
)
from gitea_declarative.config import GiteaDeclarativeSettings
from gitea_declarative.errors import (
    ConfigFileError,
    ConflictError,
    GiteaDeclarativeError,
    NotFoundError,
    RemoteError,
    TransportError,
    UnauthorizedError,
)
from gitea_declarative.meta_consts import EXIT_DISPOSITION
from gitea_declarative.models import (
    AccountInfo,
    DesiredAccount,
    DesiredConfig,
    GitHubMirror,
    NativeRepo,
    RepoSpec,
    load_desired_config,
)

__version__ = "0.1.0"

__all__ = [
    "EXIT_DISPOSITION",
    "AccountInfo",
    "AccountOutcomes",
    "AlignmentOutcome",
    "ConfigFileError",
    "ConflictError",
    "DesiredAccount",
    "DesiredConfig",
    "Diverged",
    "GitHubMirror",
    "GiteaDeclarativeError",
    "GiteaDeclarativeSettings",
    "Missing",
    "NativeRepo",
    "NotFoundError",
    "RemoteError",
    "RepoOutcomes",
    "RepoSpec",
    "TransportError",
    "UnauthorizedError",
    "Unexpected",
    "__version__",
    "load_desired_config",
]
