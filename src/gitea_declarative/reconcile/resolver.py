"""Field-level update resolution for entities present on both sides but differing."""

from __future__ import annotations

from gitea_declarative.alignment import (
    AccountFieldUpdate,
    AdminUpdate,
    DefaultBranchUpdate,
    DescriptionUpdate,
    EmailUpdate,
    MirrorSourceUpdate,
    OriginUpdate,
    PrivateUpdate,
    RepoFieldUpdate,
    VisibilityUpdate,
    WebsiteUpdate,
)
from gitea_declarative.meta_consts import DEFAULT_USER_VISIBILITY
from gitea_declarative.models import AccountInfo, GitHubMirror, NativeRepo, RepoSpec


def resolve_account(desired: AccountInfo, observed: AccountInfo) -> list[AccountFieldUpdate]:
    """Return the updates needed to turn `observed` into `desired`.

    Updates always come out in `ACCOUNT_FIELD` order, whichever fields differ. An unset
    desired visibility stands for Gitea's default (`public`).

    Args:
        desired: The declared account.
        observed: The same account as it exists on Gitea.

    Returns:
        One update per differing field; empty if the accounts are aligned.
    """
    updates: list[AccountFieldUpdate] = []

    if desired.is_admin != observed.is_admin:
        updates.append(AdminUpdate(desired=desired.is_admin, observed=observed.is_admin))

    if desired.email != observed.email:
        updates.append(EmailUpdate(desired=desired.email, observed=observed.email))

    desired_visibility = desired.visibility or str(DEFAULT_USER_VISIBILITY)
    if desired_visibility != observed.visibility:
        updates.append(VisibilityUpdate(desired=desired_visibility, observed=observed.visibility))

    if desired.website != observed.website:
        updates.append(WebsiteUpdate(desired=desired.website, observed=observed.website))

    return updates


def resolve_repo(desired: RepoSpec, observed: RepoSpec) -> list[RepoFieldUpdate]:
    """Return the updates needed to turn `observed` into `desired`.

    Mirrors are compared by description and mirror source only: their branches follow
    the upstream. If one side is a mirror and the other native, a single `OriginUpdate`
    replaces all origin-specific updates.

    Args:
        desired: The declared repository.
        observed: The same repository as it exists on Gitea.

    Returns:
        One update per differing field, in `REPO_FIELD` order; empty if aligned.
    """
    updates: list[RepoFieldUpdate] = []

    desired_origin = desired.origin
    observed_origin = observed.origin
    if type(desired_origin) is not type(observed_origin):
        updates.append(OriginUpdate(desired=desired_origin, observed=observed_origin))

    if desired.description != observed.description:
        updates.append(DescriptionUpdate(desired=desired.description, observed=observed.description))

    if isinstance(desired_origin, GitHubMirror) and isinstance(observed_origin, GitHubMirror):
        if desired_origin.source != observed_origin.source:
            updates.append(MirrorSourceUpdate(desired=desired_origin.source, observed=observed_origin.source))

    if isinstance(desired_origin, NativeRepo) and isinstance(observed_origin, NativeRepo):
        if desired_origin.default_branch != observed_origin.default_branch:
            updates.append(
                DefaultBranchUpdate(desired=desired_origin.default_branch, observed=observed_origin.default_branch)
            )
        if desired_origin.private != observed_origin.private:
            updates.append(PrivateUpdate(desired=desired_origin.private, observed=observed_origin.private))

    return updates
