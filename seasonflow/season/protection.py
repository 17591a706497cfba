"""Optional GitHub branch protection for the long-lived branches.

Strictly best effort: every problem (no token, non-GitHub remote, HTTP
error) is logged as a warning and nothing is raised.  Neither ``init`` nor
``transition`` depends on the outcome.
"""

from __future__ import annotations

import os
import re
from urllib.parse import quote

import requests

from seasonflow.config import protection_cfg
from seasonflow.logging_config import get_logger

logger = get_logger(__name__)

_GITHUB_REMOTE = re.compile(
    r"github\.com[:/](?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$"
)


def parse_github_remote(url: str | None) -> tuple[str, str] | None:
    """Return ``(owner, repo)`` for a github.com remote URL, else None."""
    if not url:
        return None
    match = _GITHUB_REMOTE.search(url.strip())
    if not match:
        return None
    return match.group("owner"), match.group("repo")


def _token() -> str | None:
    for var in protection_cfg.token_env_vars:
        value = os.environ.get(var)
        if value:
            return value
    return None


def protection_payload() -> dict:
    return {
        "required_status_checks": {"strict": True, "contexts": []},
        "enforce_admins": protection_cfg.enforce_admins,
        "required_pull_request_reviews": {
            "required_approving_review_count": protection_cfg.required_approving_review_count,
            "dismiss_stale_reviews": protection_cfg.dismiss_stale_reviews,
        },
        "restrictions": None,
    }


def setup_branch_protection(remote_url: str | None, branch_names: list[str]) -> list[str]:
    """PUT a protection rule for each branch; returns the branches protected."""
    target = parse_github_remote(remote_url)
    if target is None:
        logger.warning("Remote is not a GitHub repository. Branch protection rules not set.")
        return []
    token = _token()
    if token is None:
        logger.warning(
            "No %s set. Branch protection rules not set; configure them manually.",
            " or ".join(protection_cfg.token_env_vars),
        )
        return []

    owner, repo = target
    headers = {
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github+json",
    }
    protected: list[str] = []
    for branch in branch_names:
        url = (
            f"{protection_cfg.api_base}/repos/{owner}/{repo}"
            f"/branches/{quote(branch, safe='')}/protection"
        )
        try:
            resp = requests.put(
                url, json=protection_payload(), headers=headers,
                timeout=protection_cfg.request_timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Could not set protection for %s branch: %s", branch, exc)
            continue
        protected.append(branch)
        logger.info("Branch protection configured for %s", branch)
    return protected
