r"""Command-line entry point: reconcile a Gitea instance against a desired-state config file.

This tool:
1. Loads the desired users and repos from a JSON config file
2. Compares users against Gitea and fixes drift (asking before any deletion)
3. Compares repos against Gitea and fixes drift (asking before any deletion)
4. Exits with a code describing which phases found drift

Exit codes:
    0 - no drift
    1 - repo drift only
    2 - user drift only
    3 - user and repo drift
    4 - usage or config file error

Environment variables:
    GITEA_DECLARATIVE_GITEA_HOST - Gitea base URL
    GITEA_DECLARATIVE_GITEA_ADMIN_API_TOKEN - admin API token
    GITEA_DECLARATIVE_GITHUB_API_TOKEN - GitHub token for mirrors (or GITHUB_TOKEN)
    GITEA_DECLARATIVE_DRY_RUN - Set to 'true' to only report drift
    GITEA_DECLARATIVE_VERBOSE_LOGGING - Set to 'true' for debug logging

Examples:
    gitea-declarative --config-file gitea.json \\
        --gitea-host https://gitea.example.com --gitea-admin-api-token abc123

    # Report drift without changing anything
    gitea-declarative --config-file gitea.json --dry-run
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from loguru import logger

from gitea_declarative.config import GiteaDeclarativeSettings
from gitea_declarative.errors import ConfigFileError
from gitea_declarative.logging_config import configure_logger
from gitea_declarative.meta_consts import EXIT_DISPOSITION
from gitea_declarative.models import DesiredConfig, load_desired_config
from gitea_declarative.reconcile import ConsolePrompt, run_reconciliation
from gitea_declarative.reconcile.prompt import Confirm
from gitea_declarative.remote import GiteaClient


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="gitea-declarative",
        description="Reconcile Gitea users and repositories against a declarative config file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--config-file",
        type=Path,
        required=True,
        help="A JSON config file specifying the desired Gitea users and repos",
    )

    parser.add_argument(
        "--gitea-host",
        type=str,
        default=None,
        help="The Gitea host, e.g. https://gitea.mydomain.com (default: from env GITEA_DECLARATIVE_GITEA_HOST)",
    )

    parser.add_argument(
        "--gitea-admin-api-token",
        type=str,
        default=None,
        help="A Gitea admin user's API token (default: from env GITEA_DECLARATIVE_GITEA_ADMIN_API_TOKEN)",
    )

    parser.add_argument(
        "--github-api-token",
        type=str,
        default=None,
        help="A GitHub API token with read access to every mirrored repo",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Report drift without changing anything",
    )

    parser.add_argument(
        "--escalate-user-failures",
        action="store_true",
        default=False,
        help="Report failed user remediations in the final summary, like repo failures",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging",
    )

    return parser


def apply_args(settings: GiteaDeclarativeSettings, args: argparse.Namespace) -> None:
    """Override settings with any values given on the command line."""
    if args.gitea_host:
        settings.gitea_host = args.gitea_host.rstrip("/")

    if args.gitea_admin_api_token:
        settings.gitea_admin_api_token = args.gitea_admin_api_token

    if args.github_api_token:
        settings.github_api_token = args.github_api_token

    if args.dry_run:
        settings.dry_run = True

    if args.escalate_user_failures:
        settings.escalate_account_failures = True

    if args.verbose:
        settings.verbose_logging = True


async def reconcile(settings: GiteaDeclarativeSettings, config: DesiredConfig, confirm: Confirm) -> int:
    """Run one reconciliation against Gitea and log a summary.

    Returns:
        The process exit code.
    """
    assert settings.gitea_host is not None
    assert settings.gitea_admin_api_token is not None

    async with GiteaClient(
        host=settings.gitea_host,
        token=settings.gitea_admin_api_token,
        github_token=settings.github_api_token,
        timeout_seconds=settings.request_timeout,
        page_size=settings.page_size,
    ) as client:
        report = await run_reconciliation(
            config,
            client,
            confirm,
            dry_run=settings.dry_run,
            escalate_account_failures=settings.escalate_account_failures,
            password_length=settings.password_length,
        )

    logger.info("=" * 80)
    logger.info("Reconciliation Summary")
    logger.info("=" * 80)
    for line in report.summary().splitlines():
        logger.info(line)

    exit_code = report.disposition.exit_code
    if report.has_residual_failures():
        logger.error("Some drift could not be reconciled; see errors above")
    elif exit_code == EXIT_DISPOSITION.clean:
        logger.success("Gitea matches the desired configuration")

    return int(exit_code)


def main(argv: list[str] | None = None, *, confirm: Confirm | None = None) -> int:
    """Enter the reconciliation tool.

    Args:
        argv: Command-line arguments, excluding the program name. Defaults to `sys.argv[1:]`.
        confirm: Overrides the console prompt used before deletions.

    Returns:
        The process exit code.
    """
    args = build_parser().parse_args(argv)

    settings = GiteaDeclarativeSettings()
    apply_args(settings, args)

    configure_logger("DEBUG" if settings.verbose_logging else "INFO")

    missing = settings.missing_required()
    if missing:
        logger.error(
            f"Missing required settings: {', '.join(missing)}. "
            "Set them on the command line or via GITEA_DECLARATIVE_* environment variables."
        )
        return int(EXIT_DISPOSITION.usage_error)

    try:
        config = load_desired_config(args.config_file)
    except ConfigFileError as e:
        logger.error(str(e))
        return int(EXIT_DISPOSITION.usage_error)

    if settings.dry_run:
        logger.info("[DRY RUN] No changes will be made")

    return asyncio.run(reconcile(settings, config, confirm or ConsolePrompt()))
