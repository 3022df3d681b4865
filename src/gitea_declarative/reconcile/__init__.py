"""Diffing and reconciliation of desired Gitea state against the live instance."""

from gitea_declarative.reconcile.differ import diff_accounts, diff_repos
from gitea_declarative.reconcile.disposition import (
    Disposition,
    ReconcileReport,
    format_account_outcomes,
    format_repo_outcomes,
    run_reconciliation,
)
from gitea_declarative.reconcile.prompt import Confirm, ConsolePrompt, is_yes
from gitea_declarative.reconcile.reconciler import generate_password, reconcile_accounts, reconcile_repos
from gitea_declarative.reconcile.resolver import resolve_account, resolve_repo

__all__ = [
    "Confirm",
    "ConsolePrompt",
    "Disposition",
    "ReconcileReport",
    "diff_accounts",
    "diff_repos",
    "format_account_outcomes",
    "format_repo_outcomes",
    "generate_password",
    "is_yes",
    "reconcile_accounts",
    "reconcile_repos",
    "resolve_account",
    "resolve_repo",
    "run_reconciliation",
]
