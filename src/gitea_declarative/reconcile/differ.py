"""Comparison of the desired configuration against the live Gitea state."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping

from loguru import logger

from gitea_declarative.alignment import (
    AccountOutcomes,
    AlignmentOutcome,
    Diverged,
    Missing,
    RepoOutcomes,
    Unexpected,
)
from gitea_declarative.errors import NotFoundError
from gitea_declarative.models import AccountInfo, RepoSpec
from gitea_declarative.reconcile.resolver import resolve_account, resolve_repo
from gitea_declarative.remote.base import RemoteStateClient


async def diff_accounts(desired: Mapping[str, AccountInfo], client: RemoteStateClient) -> AccountOutcomes:
    """Classify every user that is not aligned.

    Declared users come first in declaration order, followed by undeclared users in the
    order Gitea lists them.

    Args:
        desired: Declared users keyed by username.
        client: The remote to read current users from.

    Returns:
        A sparse mapping of username to outcome. Aligned users have no entry.
    """
    observed = await client.list_users()
    logger.debug(f"Comparing {len(desired)} declared users against {len(observed)} existing users")

    outcomes: AccountOutcomes = {}
    for username, desired_info in desired.items():
        observed_info = observed.get(username)
        if observed_info is None:
            outcomes[username] = Missing(desired_info)
        elif resolve_account(desired_info, observed_info):
            outcomes[username] = Diverged(desired_info, observed_info)

    for username in observed:
        if username not in desired:
            outcomes[username] = Unexpected()

    logger.info(f"User comparison complete: {len(outcomes)} users need attention")
    return outcomes


async def _observed_repos(client: RemoteStateClient, owner: str) -> dict[str, RepoSpec]:
    try:
        return await client.list_repos(owner)
    except NotFoundError:
        logger.debug(f"Owner {owner} does not exist; all of their repos are missing")
        return {}


def _diff_owner(
    desired: Mapping[str, RepoSpec],
    observed: Mapping[str, RepoSpec],
) -> dict[str, AlignmentOutcome[RepoSpec]]:
    outcomes: dict[str, AlignmentOutcome[RepoSpec]] = {}
    for name, desired_spec in desired.items():
        observed_spec = observed.get(name)
        if observed_spec is None:
            outcomes[name] = Missing(desired_spec)
        elif resolve_repo(desired_spec, observed_spec):
            outcomes[name] = Diverged(desired_spec, observed_spec)

    for name in observed:
        if name not in desired:
            outcomes[name] = Unexpected()
    return outcomes


async def diff_repos(desired: Mapping[str, Mapping[str, RepoSpec]], client: RemoteStateClient) -> RepoOutcomes:
    """Classify every repository of each declared owner that is not aligned.

    Owners are listed concurrently. Only owners with at least one declared repository are
    inspected; an owner that does not exist on Gitea yields `Missing` for all their repos.

    Args:
        desired: Declared repositories keyed by owner, then repository name.
        client: The remote to read current repositories from.

    Returns:
        A sparse nested mapping owner -> repo name -> outcome, ordered as declared.
    """
    owners = list(desired)
    observed_by_owner = await asyncio.gather(*(_observed_repos(client, owner) for owner in owners))

    outcomes: RepoOutcomes = {}
    for owner, observed in zip(owners, observed_by_owner, strict=True):
        owner_outcomes = _diff_owner(desired[owner], observed)
        if owner_outcomes:
            outcomes[owner] = owner_outcomes

    total = sum(len(repo_outcomes) for repo_outcomes in outcomes.values())
    logger.info(f"Repo comparison complete: {total} repos need attention")
    return outcomes
