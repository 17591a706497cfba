"""Divergence-aware push engine.

Promotion rewrites ``main`` and ``develop`` locally, so a plain push of
those branches is rejected by construction.  The orchestrator decides per
branch whether a rewrite is expected (``allow_force``); the engine measures
ahead/behind against the remote-tracking ref and chooses between:

* nothing to do            → ``UP_TO_DATE`` (no network write)
* remote branch missing    → create push
* behind and force allowed → ``--force-with-lease`` pinned to the observed remote sha
* otherwise                → normal push (rejected by the remote if diverged)

Failures are never raised: each call returns a :class:`PushResult` carrying
the classified error so the caller can keep going and count failures.
"""

from __future__ import annotations

from seasonflow.logging_config import get_logger
from seasonflow.schemas.transition import PushResult, PushStatus
from seasonflow.season.runner import CommandRunner
from seasonflow.vcs import GitRepository, VcsError

logger = get_logger(__name__)


class PushEngine:

    def __init__(self, vcs: GitRepository, runner: CommandRunner | None = None):
        self.vcs = vcs
        self.runner = runner or CommandRunner()

    @property
    def dry_run(self) -> bool:
        return self.runner.dry_run

    def push_branch(self, name: str, allow_force: bool, set_upstream: bool = False) -> PushResult:
        """Push local branch *name* to the remote.

        Parameters
        ----------
        name:
            Local branch.  A branch that does not exist is ``SKIPPED``.
        allow_force:
            Permit a compare-and-swap force push when the remote has
            commits the local branch lacks.
        set_upstream:
            Configure upstream tracking on a successful push.
        """
        if not self.vcs.branch_exists(name):
            logger.info("Branch '%s' does not exist locally, skipping push", name)
            return PushResult(ref=name, status=PushStatus.SKIPPED, message="no local branch")

        remote = self.vcs.remote
        ahead = behind = 0
        try:
            if not self.vcs.remote_branch_exists(name):
                self.runner.run(
                    f"git push {remote} {name} (create)",
                    self.vcs.push, name, set_upstream=set_upstream,
                )
                return PushResult(
                    ref=name, status=PushStatus.PUSHED, created=True, dry_run=self.dry_run,
                )

            self.runner.run(f"git fetch {remote} {name}", self.vcs.fetch, name)
            tracking = self.vcs.tracking_ref(name)
            if not self.vcs.ref_exists(tracking):
                # Dry run without a prior fetch: nothing to compare against.
                self.runner.run(
                    f"git push {remote} {name}",
                    self.vcs.push, name, set_upstream=set_upstream,
                )
                return PushResult(ref=name, status=PushStatus.PUSHED, dry_run=self.dry_run)

            ahead = self.vcs.rev_list_count(f"{tracking}..{name}")
            behind = self.vcs.rev_list_count(f"{name}..{tracking}")
            logger.debug("%s: ahead=%d behind=%d", name, ahead, behind)

            if ahead == 0 and behind == 0:
                logger.info("Branch '%s' is up to date with %s", name, tracking)
                return PushResult(ref=name, status=PushStatus.UP_TO_DATE)

            if behind > 0 and allow_force:
                expected = self.vcs.rev_parse(tracking)
                self.runner.run(
                    f"git push --force-with-lease=refs/heads/{name}:{expected[:12]} {remote} {name}",
                    self.vcs.push, name, expect=expected, set_upstream=set_upstream,
                )
                return PushResult(
                    ref=name, status=PushStatus.PUSHED, used_force=True,
                    ahead=ahead, behind=behind, dry_run=self.dry_run,
                )

            if behind > 0:
                logger.warning(
                    "Branch '%s' has diverged from %s (%d ahead, %d behind); "
                    "force is not allowed for this branch",
                    name, tracking, ahead, behind,
                )
            self.runner.run(
                f"git push {remote} {name}",
                self.vcs.push, name, set_upstream=set_upstream,
            )
            return PushResult(
                ref=name, status=PushStatus.PUSHED,
                ahead=ahead, behind=behind, dry_run=self.dry_run,
            )
        except VcsError as exc:
            logger.warning(
                "Could not push %s [%s]: %s", name, exc.kind.value, exc.message,
            )
            return PushResult(
                ref=name, status=PushStatus.FAILED,
                ahead=ahead, behind=behind,
                error_kind=exc.kind, message=exc.message,
            )

    def push_tags(self) -> PushResult:
        """Push all tags as one best-effort batch."""
        try:
            self.runner.run(f"git push {self.vcs.remote} --tags", self.vcs.push_tags)
        except VcsError as exc:
            logger.warning("Could not push tags [%s]: %s", exc.kind.value, exc.message)
            return PushResult(
                ref="--tags", status=PushStatus.FAILED,
                error_kind=exc.kind, message=exc.message,
            )
        return PushResult(ref="--tags", status=PushStatus.PUSHED, dry_run=self.dry_run)
