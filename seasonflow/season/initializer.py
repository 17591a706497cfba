"""One-shot setup of the two-track branch topology and season config.

Safe to re-run: existing branches and tags are left alone (with a
warning); the season keys are rewritten with the values given.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from pydantic import ValidationError

from seasonflow.config import branches, protection_cfg, tags
from seasonflow.errors import PreconditionError
from seasonflow.logging_config import get_logger
from seasonflow.schemas.season import SeasonConfig
from seasonflow.season.protection import setup_branch_protection
from seasonflow.season.push import PushEngine
from seasonflow.season.workflow_docs import WORKFLOW_DOC_PATH, render_workflow_doc
from seasonflow.store import SeasonConfigRepository
from seasonflow.vcs import GitRepository, VcsError

logger = get_logger(__name__)


def resolve_seasons(
    current: int | None = None,
    next_season: int | None = None,
    clock: Callable[[], datetime] = datetime.now,
) -> SeasonConfig:
    """Apply defaults (this year, year + 1) and validate ``next > current``."""
    cur = current if current is not None else clock().year
    nxt = next_season if next_season is not None else cur + 1
    try:
        return SeasonConfig(current=cur, next=nxt)
    except ValidationError as exc:
        raise PreconditionError(
            f"Invalid seasons: next ({nxt}) must be greater than current ({cur})"
        ) from exc


def initialize_seasonal_flow(
    vcs: GitRepository,
    store: SeasonConfigRepository | None = None,
    current: int | None = None,
    next_season: int | None = None,
    *,
    write_docs: bool = True,
    protect: bool = False,
    clock: Callable[[], datetime] = datetime.now,
) -> dict:
    """Create ``main``/``develop``/``season/next``, tag and seed the config.

    Parameters
    ----------
    vcs:
        Repository adapter.  The repository needs at least one commit.
    store:
        Season config store.  Defaults to the repository's git config.
    current, next_season:
        Seasons to track.  Default to this year and the year after.
    write_docs:
        Write and commit ``docs/WORKFLOW.md`` when it is missing.
    protect:
        Attempt GitHub branch protection (best effort).

    Returns
    -------
    dict
        ``season``, ``created_branches``, ``tags_created``, ``docs_written``,
        ``protected`` and ``push_results``.
    """
    store = store or SeasonConfigRepository(vcs)
    season = resolve_seasons(current, next_season, clock)
    logger.info(
        "Initializing Seasonal GitFlow for %d (current) and %d (next)",
        season.current, season.next,
    )

    if not vcs.ref_exists("HEAD"):
        raise PreconditionError("Repository has no commits yet. Make an initial commit first.")

    created: list[str] = []
    if not vcs.branch_exists(branches.main):
        logger.info("Creating %s branch...", branches.main)
        vcs.checkout(branches.main, create=True)
        created.append(branches.main)
    else:
        vcs.checkout(branches.main)
        _pull_main(vcs)

    for branch in (branches.develop, branches.next):
        if vcs.branch_exists(branch):
            logger.warning("Branch '%s' already exists, skipping creation", branch)
            continue
        vcs.create_branch(branch, branches.main)
        created.append(branch)
        logger.info("Created branch '%s' from '%s'", branch, branches.main)

    tags_created: list[str] = []
    start = tags.start_tag(season.current)
    if vcs.create_tag(start, f"Initial release for season {season.current}", branches.main):
        tags_created.append(start)
        logger.info("Created tag %s", start)

    store.write_flow_settings()
    store.save(season)
    logger.info("Git configuration updated for seasonal workflow")

    docs_written = write_docs and _write_workflow_docs(vcs, season)

    protected: list[str] = []
    if protect:
        protected = setup_branch_protection(vcs.remote_url(), list(protection_cfg.protected))

    push_results = []
    if vcs.has_remote():
        logger.info("Pushing branches to %s...", vcs.remote)
        pusher = PushEngine(vcs)
        for branch in branches.canonical:
            push_results.append(pusher.push_branch(branch, allow_force=False, set_upstream=True))
        push_results.append(pusher.push_tags())

    logger.info("Seasonal GitFlow initialization complete")
    logger.info("  %s (current season %d - production)", branches.main, season.current)
    logger.info("  %s (current season %d - development)", branches.develop, season.current)
    logger.info("  %s (next season %d - development)", branches.next, season.next)

    return {
        "season": season,
        "created_branches": created,
        "tags_created": tags_created,
        "docs_written": docs_written,
        "protected": protected,
        "push_results": push_results,
    }


def _pull_main(vcs: GitRepository) -> None:
    if not vcs.has_remote():
        return
    try:
        if vcs.remote_branch_exists(branches.main):
            vcs.pull_ff_only(branches.main)
    except VcsError as exc:
        logger.warning("Could not pull from %s/%s: %s", vcs.remote, branches.main, exc.message)


def _write_workflow_docs(vcs: GitRepository, season: SeasonConfig) -> bool:
    path = vcs.working_dir / WORKFLOW_DOC_PATH
    if path.exists():
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_workflow_doc(season), encoding="utf-8")
    vcs.add(WORKFLOW_DOC_PATH)
    vcs.commit("docs: add seasonal workflow documentation")
    logger.info("Created workflow documentation in %s", WORKFLOW_DOC_PATH)
    return True
