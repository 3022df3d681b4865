"""Top-level reconciliation run and its exit disposition."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from loguru import logger

from gitea_declarative.alignment import AccountOutcomes, RepoOutcomes
from gitea_declarative.meta_consts import EXIT_DISPOSITION
from gitea_declarative.models import DesiredConfig
from gitea_declarative.reconcile.differ import diff_accounts, diff_repos
from gitea_declarative.reconcile.prompt import Confirm
from gitea_declarative.reconcile.reconciler import reconcile_accounts, reconcile_repos
from gitea_declarative.remote.base import RemoteStateClient


@dataclass(frozen=True)
class Disposition:
    """Which phases observed drift at the start of the run.

    This says whether drift existed, not whether remediating it succeeded.
    """

    users_had_errors: bool
    repos_had_errors: bool

    @property
    def exit_code(self) -> EXIT_DISPOSITION:
        """Map the two phases onto the process exit code."""
        if self.users_had_errors and self.repos_had_errors:
            return EXIT_DISPOSITION.user_and_repo_drift
        if self.users_had_errors:
            return EXIT_DISPOSITION.user_drift
        if self.repos_had_errors:
            return EXIT_DISPOSITION.repo_drift
        return EXIT_DISPOSITION.clean


def format_account_outcomes(outcomes: AccountOutcomes) -> list[str]:
    """Render one line per user outcome."""
    return [f"{username}: {outcome}" for username, outcome in outcomes.items()]


def format_repo_outcomes(outcomes: RepoOutcomes) -> list[str]:
    """Render one line per repo outcome."""
    return [
        f"{owner}: {name}: {outcome}"
        for owner, repo_outcomes in outcomes.items()
        for name, outcome in repo_outcomes.items()
    ]


def count_repo_outcomes(outcomes: RepoOutcomes) -> int:
    """Return the number of repos across all owners."""
    return sum(len(repo_outcomes) for repo_outcomes in outcomes.values())


@dataclass
class ReconcileReport:
    """Everything a run observed and could not fix."""

    account_outcomes: AccountOutcomes = field(default_factory=dict)
    """User drift found at the start of the run."""

    repo_outcomes: RepoOutcomes = field(default_factory=dict)
    """Repo drift found at the start of the run."""

    account_failures: AccountOutcomes = field(default_factory=dict)
    """User remediations that failed. Only populated when account failures are escalated."""

    repo_failures: RepoOutcomes = field(default_factory=dict)
    """Repo remediations that failed."""

    @property
    def disposition(self) -> Disposition:
        """The drift status of both phases."""
        return Disposition(
            users_had_errors=bool(self.account_outcomes),
            repos_had_errors=bool(self.repo_outcomes),
        )

    def has_residual_failures(self) -> bool:
        """Return True if any surfaced remediation failed."""
        return bool(self.account_failures or self.repo_failures)

    def summary(self) -> str:
        """Return a human-readable summary of the run."""
        repo_drift = count_repo_outcomes(self.repo_outcomes)
        lines = [
            f"Users needing attention: {len(self.account_outcomes)}",
            f"Repos needing attention: {repo_drift}",
        ]
        if self.account_failures:
            lines.append(f"Users still failing after remediation: {len(self.account_failures)}")
            lines.extend(f"  {line}" for line in format_account_outcomes(self.account_failures))
        if self.repo_failures:
            lines.append(f"Repos still failing after remediation: {count_repo_outcomes(self.repo_failures)}")
            lines.extend(f"  {line}" for line in format_repo_outcomes(self.repo_failures))
        return "\n".join(lines)


async def run_reconciliation(
    config: DesiredConfig,
    client: RemoteStateClient,
    confirm: Confirm,
    *,
    dry_run: bool = False,
    escalate_account_failures: bool = False,
    password_length: int = 15,
) -> ReconcileReport:
    """Diff and reconcile users, then repos.

    Users are reconciled to completion before repos are checked, since new repos may
    belong to users created in the first phase. Both phases share one console gate.

    Args:
        config: The desired state.
        client: The remote to read and correct.
        confirm: Asks the operator before anything is deleted.
        dry_run: If True, only report drift.
        escalate_account_failures: If True, failed user remediations are kept in the report.
            Otherwise they are only logged.
        password_length: Length of passwords generated for new users.

    Returns:
        The drift found and the remediations that failed.
    """
    gate = asyncio.Lock()
    report = ReconcileReport()

    logger.info("Checking users...")
    report.account_outcomes = await diff_accounts(config.users, client)
    for line in format_account_outcomes(report.account_outcomes):
        logger.info(line)

    if report.account_outcomes:
        if dry_run:
            logger.info(f"[DRY RUN] Would reconcile {len(report.account_outcomes)} users")
        else:
            account_failures = await reconcile_accounts(
                report.account_outcomes,
                client,
                confirm,
                gate=gate,
                password_length=password_length,
            )
            if account_failures:
                logger.error(f"Failed to reconcile {len(account_failures)} users")
                if escalate_account_failures:
                    report.account_failures = account_failures

    logger.info("Checking repos...")
    report.repo_outcomes = await diff_repos(config.repos, client)
    for line in format_repo_outcomes(report.repo_outcomes):
        logger.info(line)

    if report.repo_outcomes:
        if dry_run:
            logger.info(f"[DRY RUN] Would reconcile {count_repo_outcomes(report.repo_outcomes)} repos")
        else:
            report.repo_failures = await reconcile_repos(report.repo_outcomes, client, confirm, gate=gate)
            for line in format_repo_outcomes(report.repo_failures):
                logger.error(f"Repo remediation failed: {line}")

    return report
