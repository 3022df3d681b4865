"""Concurrent remediation of alignment outcomes.

Every entity is remediated by its own task. Prompts and every line a task logs are
issued while holding a single `asyncio.Lock` shared by the whole batch, so nothing is
written between a question and its answer. Remote calls run outside the lock.
"""

from __future__ import annotations

import asyncio
import secrets
import string
from collections.abc import Awaitable, Callable, Hashable, Sequence
from functools import partial
from typing import Any, TypeVar

from loguru import logger

from gitea_declarative.alignment import (
    AccountOutcomes,
    AlignmentOutcome,
    Diverged,
    MirrorSourceUpdate,
    Missing,
    OriginUpdate,
    RepoOutcomes,
    Unexpected,
    WebsiteUpdate,
    is_enforceable,
)
from gitea_declarative.errors import RemoteError
from gitea_declarative.models import AccountInfo, GitHubMirror, RepoOrigin, RepoSpec
from gitea_declarative.reconcile.prompt import Confirm
from gitea_declarative.reconcile.resolver import resolve_account, resolve_repo
from gitea_declarative.remote.base import RemoteStateClient

K = TypeVar("K", bound=Hashable)

PASSWORD_ALPHABET = string.ascii_letters + string.digits


def generate_password(length: int) -> str:
    """Generate a random one-time password."""
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def _describe_origin(origin: RepoOrigin) -> str:
    if isinstance(origin, GitHubMirror):
        return f"a mirror of {origin.source}"
    return "a native repo"


async def _log_gated(gate: asyncio.Lock, level: str, message: str) -> None:
    """Log one line while holding the console gate, attributed to the caller."""
    async with gate:
        logger.opt(depth=1).log(level, message)


async def _gather_failures(label: str, keys: Sequence[K], tasks: Sequence[Awaitable[bool]]) -> list[K]:
    """Await every task and return the keys whose remediation did not succeed.

    A task that raises does not cancel its siblings; the error is logged and the key is
    reported as failed.
    """
    results = await asyncio.gather(*tasks, return_exceptions=True)

    failed: list[K] = []
    for key, result in zip(keys, results, strict=True):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.opt(exception=result).error(f"Unexpected error while reconciling {label} {key}: {result}")
            failed.append(key)
        elif not result:
            failed.append(key)
    return failed


async def _create_user(
    username: str,
    desired: AccountInfo,
    client: RemoteStateClient,
    gate: asyncio.Lock,
    password_length: int,
) -> bool:
    password = generate_password(password_length)
    try:
        await client.create_user(username, desired, password=password)
    except RemoteError as e:
        await _log_gated(gate, "ERROR", f"Failed to create user {username}: {e}")
        return False

    # The password cannot be retrieved any other way once this line is gone.
    async with gate:
        logger.critical(f"Created user {username} with password {password}, which you must now change")

    if desired.is_admin:
        try:
            await client.edit_user(username, admin=True)
        except RemoteError as e:
            await _log_gated(gate, "ERROR", f"Created user {username} but failed to make them an admin: {e}")
            return False
    return True


async def _remove_unexpected(
    description: str,
    delete: Callable[[], Awaitable[None]],
    confirm: Confirm,
    gate: asyncio.Lock,
) -> bool:
    async with gate:
        remove = await confirm(f"{description} unexpectedly present. Remove?")
        if not remove:
            logger.critical(f"Refusing to delete {description}, which is unexpectedly present.")
            return True

    try:
        await delete()
    except RemoteError as e:
        await _log_gated(gate, "ERROR", f"Failed to delete {description}: {e}")
        return False
    await _log_gated(gate, "INFO", f"Deleted {description}")
    return True


async def _edit_user(
    username: str,
    desired: AccountInfo,
    observed: AccountInfo,
    client: RemoteStateClient,
    gate: asyncio.Lock,
) -> bool:
    edits: dict[str, Any] = {}
    for update in resolve_account(desired, observed):
        if is_enforceable(update):
            if update.desired is not None:
                edits[str(update.field_name)] = update.desired
        elif isinstance(update, WebsiteUpdate):
            # https://github.com/go-gitea/gitea/issues/17126: the admin edit endpoint ignores the website.
            async with gate:
                logger.critical(
                    f"User {username} has conflicting website, desired {update.desired or '<no website>'}, "
                    f"existing {update.observed or '<no website>'}, "
                    "which a bug in Gitea means can't be reconciled via the API."
                )

    try:
        await client.edit_user(username, **edits)
    except RemoteError as e:
        await _log_gated(gate, "ERROR", f"Failed to edit user {username}: {e}")
        return False

    if edits:
        await _log_gated(gate, "INFO", f"Updated user {username}: {', '.join(sorted(edits))}")
    return True


async def _remediate_account(
    username: str,
    outcome: AlignmentOutcome[AccountInfo],
    client: RemoteStateClient,
    confirm: Confirm,
    gate: asyncio.Lock,
    password_length: int,
) -> bool:
    if isinstance(outcome, Missing):
        return await _create_user(username, outcome.desired, client, gate, password_length)
    if isinstance(outcome, Unexpected):
        return await _remove_unexpected(f"User {username}", partial(client.delete_user, username), confirm, gate)
    if isinstance(outcome, Diverged):
        return await _edit_user(username, outcome.desired, outcome.observed, client, gate)
    raise TypeError(f"Unknown outcome {outcome!r}")


async def reconcile_accounts(
    outcomes: AccountOutcomes,
    client: RemoteStateClient,
    confirm: Confirm,
    *,
    gate: asyncio.Lock | None = None,
    password_length: int = 15,
) -> AccountOutcomes:
    """Remediate user drift.

    Missing users are created with a one-time password that is logged once at CRITICAL.
    Unexpected users are deleted only if the operator confirms. Diverged users are edited;
    the website cannot be edited through Gitea's API, so a website conflict is logged at
    CRITICAL and the remaining fields are still applied.

    Args:
        outcomes: The user outcomes from `diff_accounts`.
        client: The remote to apply changes to.
        confirm: Asks the operator whether to delete an unexpected user.
        gate: Serializes prompts and operator-facing disclosures. A new lock is used if None.
        password_length: Length of generated passwords.

    Returns:
        The outcomes whose remediation failed. Failures are also logged at ERROR.
    """
    if gate is None:
        gate = asyncio.Lock()
    usernames = list(outcomes)
    failed = await _gather_failures(
        "user",
        usernames,
        [
            _remediate_account(username, outcomes[username], client, confirm, gate, password_length)
            for username in usernames
        ],
    )
    return {username: outcomes[username] for username in failed}


async def _create_repo(
    owner: str,
    name: str,
    desired: RepoSpec,
    client: RemoteStateClient,
    gate: asyncio.Lock,
) -> bool:
    origin = desired.origin
    try:
        if isinstance(origin, GitHubMirror):
            await client.create_mirror_repo(owner, name, desired.description, origin)
        else:
            await client.create_native_repo(owner, name, desired.description, origin)
    except RemoteError as e:
        await _log_gated(gate, "ERROR", f"Failed to create repo {owner}/{name}: {e}")
        return False

    await _log_gated(gate, "INFO", f"Created repo {owner}/{name} as {_describe_origin(origin)}")
    return True


async def _edit_repo(
    owner: str,
    name: str,
    desired: RepoSpec,
    observed: RepoSpec,
    client: RemoteStateClient,
    gate: asyncio.Lock,
) -> bool:
    edits: dict[str, Any] = {}
    for update in resolve_repo(desired, observed):
        if is_enforceable(update):
            edits[str(update.field_name)] = update.desired
        elif isinstance(update, OriginUpdate):
            async with gate:
                logger.critical(
                    f"Repo {owner}/{name} is {_describe_origin(update.observed)} but should be "
                    f"{_describe_origin(update.desired)}, which can't be changed via the API. "
                    "Delete and recreate it to reconcile."
                )
        elif isinstance(update, MirrorSourceUpdate):
            async with gate:
                logger.critical(
                    f"Repo {owner}/{name} has conflicting mirror source, desired {update.desired}, "
                    f"existing {update.observed}, which can't be changed via the API."
                )

    if not edits:
        return True

    try:
        await client.edit_repo(owner, name, **edits)
    except RemoteError as e:
        await _log_gated(gate, "ERROR", f"Failed to edit repo {owner}/{name}: {e}")
        return False

    await _log_gated(gate, "INFO", f"Updated repo {owner}/{name}: {', '.join(sorted(edits))}")
    return True


async def _remediate_repo(
    owner: str,
    name: str,
    outcome: AlignmentOutcome[RepoSpec],
    client: RemoteStateClient,
    confirm: Confirm,
    gate: asyncio.Lock,
) -> bool:
    if isinstance(outcome, Missing):
        return await _create_repo(owner, name, outcome.desired, client, gate)
    if isinstance(outcome, Unexpected):
        delete = partial(client.delete_repo, owner, name)
        return await _remove_unexpected(f"Repo {owner}/{name}", delete, confirm, gate)
    if isinstance(outcome, Diverged):
        return await _edit_repo(owner, name, outcome.desired, outcome.observed, client, gate)
    raise TypeError(f"Unknown outcome {outcome!r}")


async def reconcile_repos(
    outcomes: RepoOutcomes,
    client: RemoteStateClient,
    confirm: Confirm,
    *,
    gate: asyncio.Lock | None = None,
) -> RepoOutcomes:
    """Remediate repository drift.

    Missing repos are created, as a pull mirror for GitHub origins or directly for native
    ones. Unexpected repos are deleted only if the operator confirms. Diverged repos are
    edited; origin and mirror-source conflicts cannot be edited and are logged at CRITICAL.

    Args:
        outcomes: The repo outcomes from `diff_repos`.
        client: The remote to apply changes to.
        confirm: Asks the operator whether to delete an unexpected repo.
        gate: Serializes prompts and operator-facing disclosures. A new lock is used if None.

    Returns:
        The outcomes whose remediation failed, in the same owner -> name shape.
    """
    if gate is None:
        gate = asyncio.Lock()
    keys = [(owner, name) for owner, repo_outcomes in outcomes.items() for name in repo_outcomes]
    failed = await _gather_failures(
        "repo",
        keys,
        [_remediate_repo(owner, name, outcomes[owner][name], client, confirm, gate) for owner, name in keys],
    )

    residual: RepoOutcomes = {}
    for owner, name in failed:
        residual.setdefault(owner, {})[name] = outcomes[owner][name]
    return residual
