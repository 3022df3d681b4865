"""Configuration settings for a reconciliation run."""

from __future__ import annotations

import os

from loguru import logger
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIN_PASSWORD_LENGTH = 8
"""Gitea's default MIN_PASSWORD_LENGTH; generated passwords are never shorter."""


class GiteaDeclarativeSettings(BaseSettings):
    """Settings for reconciling a Gitea instance against a desired-state config file."""

    model_config = SettingsConfigDict(
        env_prefix="GITEA_DECLARATIVE_",
        use_attribute_docstrings=True,
    )

    gitea_host: str | None = None
    """The Gitea base URL, e.g. https://gitea.mydomain.com. Required to run."""

    gitea_admin_api_token: str | None = None
    """An API token belonging to a Gitea site administrator. Required to run."""

    github_api_token: str | None = None
    """A GitHub token with read access to every mirrored repo. \
Falls back to the GITHUB_TOKEN environment variable. Only needed for private GitHub sources."""

    request_timeout: int = 30
    """Timeout in seconds for each request to Gitea."""

    page_size: int = 50
    """Page size used when listing users and repositories."""

    password_length: int = 15
    """Length of the one-time password generated for newly created users."""

    dry_run: bool = False
    """If True, report drift but make no changes and ask no questions."""

    escalate_account_failures: bool = False
    """If True, user remediation failures are returned and reported like repo failures \
instead of only being logged."""

    verbose_logging: bool = False
    """Enable DEBUG logging."""

    @model_validator(mode="after")
    def validate_settings(self) -> GiteaDeclarativeSettings:
        """Normalise the host and fill in the GitHub token from the environment."""
        if self.gitea_host is not None:
            self.gitea_host = self.gitea_host.rstrip("/")

        if self.password_length < MIN_PASSWORD_LENGTH:
            logger.warning(
                f"password_length is {self.password_length}, but must be >= {MIN_PASSWORD_LENGTH}. "
                f"Setting to {MIN_PASSWORD_LENGTH}."
            )
            self.password_length = MIN_PASSWORD_LENGTH

        if self.page_size < 1:
            logger.warning(f"page_size is {self.page_size}, but must be >= 1. Setting to 1.")
            self.page_size = 1

        if self.github_api_token is None:
            self.github_api_token = os.getenv("GITHUB_TOKEN") or None
            if self.github_api_token is not None:
                logger.debug("Loaded GitHub token from GITHUB_TOKEN environment variable")

        return self

    def missing_required(self) -> list[str]:
        """Return the names of required settings that are not set."""
        missing: list[str] = []
        if not self.gitea_host:
            missing.append("gitea_host")
        if not self.gitea_admin_api_token:
            missing.append("gitea_admin_api_token")
        return missing
