"""Tests for GiteaDeclarativeSettings."""

from __future__ import annotations

import pytest

from gitea_declarative.config import MIN_PASSWORD_LENGTH, GiteaDeclarativeSettings


class TestGiteaDeclarativeSettings:
    """Test settings loading and normalisation."""

    def test_defaults(self) -> None:
        """Nothing is required to construct settings."""
        settings = GiteaDeclarativeSettings()

        assert settings.gitea_host is None
        assert settings.dry_run is False
        assert settings.password_length == 15
        assert settings.missing_required() == ["gitea_host", "gitea_admin_api_token"]

    def test_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Settings are read from GITEA_DECLARATIVE_* variables."""
        monkeypatch.setenv("GITEA_DECLARATIVE_GITEA_HOST", "https://gitea.example.com/")
        monkeypatch.setenv("GITEA_DECLARATIVE_GITEA_ADMIN_API_TOKEN", "secret")
        monkeypatch.setenv("GITEA_DECLARATIVE_DRY_RUN", "true")

        settings = GiteaDeclarativeSettings()

        assert settings.gitea_host == "https://gitea.example.com"
        assert settings.gitea_admin_api_token == "secret"
        assert settings.dry_run is True
        assert settings.missing_required() == []

    def test_github_token_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """GITHUB_TOKEN is used when no explicit GitHub token is set."""
        monkeypatch.setenv("GITHUB_TOKEN", "gh-token")

        assert GiteaDeclarativeSettings().github_api_token == "gh-token"

    def test_explicit_github_token_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """An explicit token is not replaced by GITHUB_TOKEN."""
        monkeypatch.setenv("GITHUB_TOKEN", "gh-token")

        assert GiteaDeclarativeSettings(github_api_token="explicit").github_api_token == "explicit"

    def test_password_length_clamped(self) -> None:
        """Short password lengths are raised to Gitea's minimum."""
        assert GiteaDeclarativeSettings(password_length=4).password_length == MIN_PASSWORD_LENGTH

    def test_page_size_clamped(self) -> None:
        """Page size is at least one."""
        assert GiteaDeclarativeSettings(page_size=0).page_size == 1
