"""Exceptions raised by gitea-declarative."""

from __future__ import annotations


class GiteaDeclarativeError(Exception):
    """Base class for all errors raised by this package."""


class ConfigFileError(GiteaDeclarativeError):
    """The desired-state config file could not be read or does not match the schema."""


class RemoteError(GiteaDeclarativeError):
    """A call against the remote Gitea instance failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialize the error.

        Args:
            message: Description of the failed call.
            status_code: The HTTP status returned by the remote, if one was received.
        """
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(RemoteError):
    """The requested user or repository does not exist."""


class UnauthorizedError(RemoteError):
    """The API token was rejected or lacks the required (admin) scope."""


class ConflictError(RemoteError):
    """The remote refused the change, e.g. the entity already exists or the payload was rejected."""


class TransportError(RemoteError):
    """The request did not complete, or the remote answered with an unexpected status."""
