"""Season transition orchestrator.

Promotes ``season/next`` to current, archives the outgoing season and
reinitializes a new next season, as a fixed sequence of phases (see
:mod:`seasonflow.season.phases`).

Failure policy:
- Any error in VALIDATE, BACKUP or FINALIZE..UPDATE_CONFIG aborts the run
  immediately.  Nothing is rolled back; the operator is pointed at the
  backup tag.
- SYNC and PUSH problems are warnings.  Local state is authoritative.
- CLEANUP and report problems are logged and ignored.

The season config is read once at the start and written back once, in
UPDATE_CONFIG.  Nothing is journaled between phases.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable

from seasonflow.config import branches, cleanup_cfg, season_keys, tags
from seasonflow.errors import (
    MutationError,
    PreconditionError,
    SafetyError,
    SeasonflowError,
    TransitionCancelled,
)
from seasonflow.logging_config import get_logger
from seasonflow.schemas.season import SeasonConfig
from seasonflow.schemas.transition import PhaseOutcome, PhaseStatus, TransitionRecord
from seasonflow.season.phases import TransitionPhase, first_phase, is_fatal, next_phase
from seasonflow.season.push import PushEngine
from seasonflow.season.report import report_filename, write_report
from seasonflow.season.runner import CommandRunner
from seasonflow.store import SeasonConfigRepository
from seasonflow.vcs import GitRepository, VcsError

logger = get_logger(__name__)

PhaseResult = tuple[PhaseStatus, str]


@dataclass
class TransitionRun:
    """State of one invocation.  Lives only as long as :meth:`SeasonTransition.run`."""

    season: SeasonConfig
    record: TransitionRecord
    dry_run: bool = False
    force: bool = False
    backup_tag: str | None = None
    backup_created: bool = False
    original_branch: str | None = None
    push_failures: int = 0
    completed: list[TransitionPhase] = field(default_factory=list)


class SeasonTransition:
    """Run a season transition against one repository.

    Parameters
    ----------
    vcs:
        Repository adapter.
    store:
        Season config store.  Defaults to the repository's git config.
    dry_run:
        Describe every mutating call instead of running it.  Existence
        checks still run against the real repository.
    force:
        Proceed with uncommitted changes and skip confirmation prompts.
    confirm_fn:
        Asked yes/no questions; ``None`` means non-interactive (proceed).
    report_dir:
        Where the Markdown report goes.  Defaults to the working tree.
    clock:
        Source of timestamps for the backup tag and report name.
    """

    def __init__(
        self,
        vcs: GitRepository,
        store: SeasonConfigRepository | None = None,
        *,
        dry_run: bool = False,
        force: bool = False,
        confirm_fn: Callable[[str], bool] | None = None,
        report_dir: Path | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.vcs = vcs
        self.store = store or SeasonConfigRepository(vcs)
        self.dry_run = dry_run
        self.force = force
        self.confirm_fn = confirm_fn
        self.report_dir = Path(report_dir) if report_dir else vcs.working_dir
        self.clock = clock
        self.runner = CommandRunner(dry_run=dry_run)
        self.pusher = PushEngine(vcs, self.runner)

        self._handlers: dict[TransitionPhase, Callable[[TransitionRun], PhaseResult]] = {
            TransitionPhase.VALIDATE: self._validate,
            TransitionPhase.BACKUP: self._backup,
            TransitionPhase.SYNC: self._sync,
            TransitionPhase.FINALIZE_CURRENT: self._finalize_current,
            TransitionPhase.ARCHIVE_CURRENT: self._archive_current,
            TransitionPhase.PROMOTE_NEXT: self._promote_next,
            TransitionPhase.REINITIALIZE_NEXT: self._reinitialize_next,
            TransitionPhase.UPDATE_CONFIG: self._update_config,
            TransitionPhase.PUSH: self._push,
            TransitionPhase.CLEANUP: self._cleanup,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self) -> TransitionRecord:
        """Execute every phase in order and return the transition record.

        Raises
        ------
        PreconditionError, SafetyError
            Before anything was changed.
        MutationError
            A ref-changing phase failed; the backup tag (if any) is attached.
        TransitionCancelled
            The operator declined the confirmation.
        """
        run = self.start(self.store.load())
        self._confirm_transition(run)

        phase: TransitionPhase | None = first_phase()
        while phase is not None:
            self.run_phase(run, phase)
            phase = next_phase(phase)

        self._finish(run)
        return run.record

    def start(self, season: SeasonConfig) -> TransitionRun:
        """Create the ephemeral run state for *season*."""
        record = TransitionRecord(
            previous_current=season.current,
            new_current=season.next,
            new_next=season.new_next,
            dry_run=self.dry_run,
            force=self.force,
            started_at=self.clock(),
        )
        logger.info(
            "Season transition: %d (current) -> %d (new current) -> %d (new next)",
            season.current, season.next, season.new_next,
        )
        if self.dry_run:
            logger.warning("DRY RUN MODE - No changes will be made")
        return TransitionRun(season=season, record=record, dry_run=self.dry_run, force=self.force)

    def run_phase(self, run: TransitionRun, phase: TransitionPhase) -> PhaseOutcome:
        """Run one phase, applying its failure policy."""
        logger.info("Step %d/%d: %s...", phase.number, len(TransitionPhase), phase.label)
        try:
            status, detail = self._handlers[phase](run)
        except (SeasonflowError, VcsError) as exc:
            message = exc.message if isinstance(exc, VcsError) else str(exc)
            if not is_fatal(phase):
                logger.warning("%s failed, continuing: %s", phase.label, message)
                return self._record(run, phase, PhaseStatus.WARNED, message)
            self._record(run, phase, PhaseStatus.FAILED, message)
            self._report_failure(run, phase, message)
            if isinstance(exc, VcsError):
                if phase is TransitionPhase.VALIDATE:
                    raise PreconditionError(message) from exc
                raise MutationError(
                    f"{phase.label} failed: {message}", backup_tag=run.backup_tag,
                ) from exc
            raise

        outcome = self._record(run, phase, status, detail)
        run.completed.append(phase)
        if status is PhaseStatus.COMPLETED:
            logger.info("%s: done%s", phase.label, f" ({detail})" if detail else "")
        return outcome

    # ------------------------------------------------------------------
    # Phase handlers
    # ------------------------------------------------------------------

    def _validate(self, run: TransitionRun) -> PhaseResult:
        for branch in branches.canonical:
            if not self.vcs.branch_exists(branch):
                raise PreconditionError(
                    f"Required branch '{branch}' does not exist. Run 'seasonflow init' first."
                )

        notes: list[str] = []
        if not self.vcs.is_clean():
            if not self.force:
                raise SafetyError(
                    "You have uncommitted changes. Commit or stash them before "
                    "transitioning (--force skips this check, not recommended)."
                )
            logger.warning("Proceeding with uncommitted changes due to --force")
            notes.append("uncommitted changes ignored (--force)")

        current = self.vcs.current_branch()
        run.original_branch = current
        run.record.original_branch = current
        if current not in branches.safe_checkouts:
            logger.warning(
                "Currently on %s. Consider switching to %s or %s.",
                f"branch '{current}'" if current else "a detached HEAD",
                branches.main, branches.develop,
            )
            notes.append(f"started from {current or 'detached HEAD'}")
            if not self.force and self.confirm_fn is not None and not self.confirm_fn("Continue anyway?"):
                raise SafetyError(
                    f"Transition aborted: not on {branches.main} or {branches.develop}"
                )

        return (PhaseStatus.WARNED if notes else PhaseStatus.COMPLETED), "; ".join(notes)

    def _backup(self, run: TransitionRun) -> PhaseResult:
        s = run.season
        tag = tags.backup_tag(self.clock().strftime(tags.timestamp_format))
        message = f"Backup before season transition from {s.current} to {s.next}"
        self.runner.run(
            f"git tag -a {tag} -m '{message}'",
            self.vcs.create_tag, tag, message, skip_if_exists=False,
        )
        if not self.dry_run:
            run.backup_tag = tag
            run.backup_created = True
            run.record.backup_tag = tag
            logger.info("Backup created with tag: %s", tag)
        return PhaseStatus.COMPLETED, tag

    def _sync(self, run: TransitionRun) -> PhaseResult:
        remote = self.vcs.remote
        if not self.vcs.has_remote():
            logger.warning("No remote '%s' found. Skipping remote sync.", remote)
            return PhaseStatus.SKIPPED, f"no remote '{remote}'"

        try:
            self.runner.run(f"git fetch {remote}", self.vcs.fetch)
        except VcsError as exc:
            logger.warning("Could not fetch from %s [%s]: %s", remote, exc.kind.value, exc.message)
            return PhaseStatus.WARNED, f"fetch failed ({exc.kind.value})"

        not_updated: list[str] = []
        for branch in branches.canonical:
            try:
                if not self.vcs.remote_branch_exists(branch):
                    logger.info("No '%s' on %s, skipping", branch, remote)
                    continue
                self.runner.run(
                    f"git checkout {branch} && git pull --ff-only {remote} {branch}",
                    self.vcs.pull_ff_only, branch,
                )
            except VcsError as exc:
                logger.warning("Could not update %s from %s: %s", branch, remote, exc.message)
                not_updated.append(branch)

        if not_updated:
            return PhaseStatus.WARNED, "not updated: " + ", ".join(not_updated)
        return PhaseStatus.COMPLETED, ""

    def _finalize_current(self, run: TransitionRun) -> PhaseResult:
        s = run.season
        self.runner.run(f"git checkout {branches.main}", self.vcs.checkout, branches.main)
        message = f"Final merge of {branches.develop} into {branches.main} for season {s.current}"
        self.runner.run(
            f"git merge {branches.develop} --no-ff -m '{message}'",
            self.vcs.merge, branches.develop, True, message,
        )
        final = tags.final_tag(s.current)
        self._tag_once(run, final, f"Final release for season {s.current}", branches.main)
        return PhaseStatus.COMPLETED, final

    def _archive_current(self, run: TransitionRun) -> PhaseResult:
        s = run.season
        archive = branches.archive(s.current)
        run.record.archive_branch = archive
        if self.vcs.branch_exists(archive):
            logger.warning("Archive branch '%s' already exists, skipping creation", archive)
            return PhaseStatus.WARNED, f"{archive} already exists"

        self.runner.run(
            f"git branch {archive} {branches.main}",
            self.vcs.create_branch, archive, branches.main,
        )
        self._tag_once(run, tags.archive_tag(s.current), f"Archived season {s.current}", archive)
        logger.info("Season %d archived to branch: %s", s.current, archive)
        return PhaseStatus.COMPLETED, archive

    def _promote_next(self, run: TransitionRun) -> PhaseResult:
        s = run.season
        self.runner.run(
            f"git checkout {branches.main} && git reset --hard {branches.next}",
            self.vcs.reset_hard, branches.main, branches.next,
        )
        self.runner.run(
            f"git checkout {branches.develop} && git reset --hard {branches.main}",
            self.vcs.reset_hard, branches.develop, branches.main,
        )
        start = tags.start_tag(s.next)
        self._tag_once(run, start, f"Season {s.next} begins", branches.main)
        return PhaseStatus.COMPLETED, f"season {s.next} promoted"

    def _reinitialize_next(self, run: TransitionRun) -> PhaseResult:
        s = run.season
        self.runner.run(
            f"git checkout {branches.next} && git reset --hard {branches.main}",
            self.vcs.reset_hard, branches.next, branches.main,
        )
        # No existence guard here: the adapter itself never moves a tag.
        init = tags.init_tag(s.new_next)
        created = self.runner.run(
            f"git tag -a {init} {branches.next}",
            self.vcs.create_tag, init, f"Initialize season {s.new_next} development", branches.next,
        )
        if created or self.dry_run:
            run.record.tags_created.append(init)
        return PhaseStatus.COMPLETED, f"season {s.new_next} initialized"

    def _update_config(self, run: TransitionRun) -> PhaseResult:
        advanced = run.season.advanced()
        self.runner.run(
            f"git config {season_keys.current_year} {advanced.current} && "
            f"git config {season_keys.next_year} {advanced.next}",
            self.store.save, advanced,
        )
        return PhaseStatus.COMPLETED, f"current={advanced.current}, next={advanced.next}"

    def _push(self, run: TransitionRun) -> PhaseResult:
        try:
            if not self.vcs.has_remote():
                logger.warning("No remote '%s' found. Skipping push to remote.", self.vcs.remote)
                return PhaseStatus.SKIPPED, f"no remote '{self.vcs.remote}'"

            # main/develop/archive were rewritten or created locally on purpose;
            # a diverged season/next is a real conflict and is never forced.
            plan = [
                (branches.main, True),
                (branches.develop, True),
                (branches.next, False),
                (branches.archive(run.season.current), True),
            ]
            for name, allow_force in plan:
                run.record.push_results.append(self.pusher.push_branch(name, allow_force))
            run.record.tag_push = self.pusher.push_tags()

            run.push_failures = run.record.push_failures
            if run.push_failures:
                logger.warning(
                    "%d push failure(s). Local state is authoritative; reconcile %s manually.",
                    run.push_failures, self.vcs.remote,
                )
                return PhaseStatus.WARNED, f"{run.push_failures} push failure(s)"
            return PhaseStatus.COMPLETED, ""
        finally:
            self._restore_checkout(run)

    def _cleanup(self, run: TransitionRun) -> PhaseResult:
        # (integration branch, prefix, excluded sub-prefix, batch size)
        groups = [
            (branches.develop, branches.feature, branches.feature_next, cleanup_cfg.feature_batch),
            (branches.next, branches.feature_next, None, cleanup_cfg.feature_batch),
            (branches.main, branches.release, branches.release_next, cleanup_cfg.release_batch),
            (branches.next, branches.release_next, None, cleanup_cfg.release_batch),
        ]
        checked_out = self.vcs.current_branch()
        deleted: list[str] = []
        for into, prefix, exclude, batch in groups:
            try:
                merged = self.vcs.list_merged_branches(into)
            except VcsError as exc:
                logger.debug("Cannot list branches merged into %s: %s", into, exc.message)
                continue
            candidates = [
                b for b in merged
                if b.startswith(prefix)
                and not (exclude and b.startswith(exclude))
                and b != checked_out
                and b not in deleted
            ][:batch]
            if not candidates:
                continue
            try:
                self.runner.run(
                    f"git branch -d {' '.join(candidates)}",
                    self.vcs.delete_branches, candidates,
                )
                deleted.extend(candidates)
            except VcsError as exc:
                logger.debug("Branch cleanup partially failed: %s", exc.message)
                deleted.extend(b for b in candidates if not self.vcs.branch_exists(b))

        run.record.deleted_branches = deleted
        return PhaseStatus.COMPLETED, f"{len(deleted)} merged branch(es) removed"

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _tag_once(self, run: TransitionRun, name: str, message: str, ref: str) -> bool:
        if self.vcs.tag_exists(name):
            logger.info("Tag '%s' already exists, skipping", name)
            return False
        self.runner.run(f"git tag -a {name} {ref}", self.vcs.create_tag, name, message, ref)
        run.record.tags_created.append(name)
        return True

    def _record(self, run: TransitionRun, phase: TransitionPhase, status: PhaseStatus, detail: str) -> PhaseOutcome:
        outcome = PhaseOutcome(phase=phase.value, status=status, detail=detail)
        run.record.phases.append(outcome)
        return outcome

    def _confirm_transition(self, run: TransitionRun) -> None:
        if self.force or self.dry_run or self.confirm_fn is None:
            return
        s = run.season
        prompt = (
            f"You are about to transition from season {s.current} to season {s.next}.\n"
            f"  - Archive season {s.current} to {branches.archive(s.current)}\n"
            f"  - Promote season {s.next} to {branches.main}/{branches.develop}\n"
            f"  - Initialize next season {s.new_next} on {branches.next}\n"
            "This action cannot be easily undone. Proceed?"
        )
        if not self.confirm_fn(prompt):
            logger.info("Season transition cancelled.")
            raise TransitionCancelled("Season transition cancelled by operator")

    def _restore_checkout(self, run: TransitionRun) -> None:
        original = run.original_branch
        if self.dry_run or original is None or self.vcs.current_branch() == original:
            return
        if not self.vcs.branch_exists(original):
            logger.warning("Original branch '%s' no longer exists; staying on current branch", original)
            return
        try:
            self.runner.run(f"git checkout {original}", self.vcs.checkout, original)
        except VcsError as exc:
            logger.warning("Could not switch back to '%s': %s", original, exc.message)

    def _report_failure(self, run: TransitionRun, phase: TransitionPhase, message: str) -> None:
        logger.error("Transition failed during '%s': %s", phase.label, message)
        if run.backup_created:
            logger.error(
                "Restore using the backup tag created earlier: git checkout %s", run.backup_tag,
            )
            logger.error("List backups with: git tag --list 'backup/*'")

    def _finish(self, run: TransitionRun) -> None:
        """Stamp the record and write the report (failures are ignored)."""
        record = run.record
        record.finished_at = self.clock()
        record.planned_actions = list(self.runner.planned)
        try:
            path = self.runner.run(
                f"write {report_filename(record.finished_at)}",
                write_report, record, self.report_dir,
            )
        except OSError as exc:
            logger.warning("Could not write transition report: %s", exc)
        else:
            if path is not None:
                record.report_path = str(path)
                logger.info("Transition report generated: %s", path)

        logger.info("Season transition %s.", "preview finished" if self.dry_run else "completed successfully")
        if run.backup_created:
            logger.info("Backup created; roll back with: git checkout %s", run.backup_tag)
