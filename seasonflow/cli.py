"""Command line interface: ``seasonflow init`` and ``seasonflow transition``.

Exit codes: 0 on success, help, or a declined confirmation; 1 on any
validation, precondition or mutation failure; 2 on usage errors.  Push
failures during a transition are reported but still exit 0.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from seasonflow import __version__
from seasonflow.config import branches
from seasonflow.errors import MutationError, SeasonflowError, TransitionCancelled
from seasonflow.logging_config import get_logger, set_level, setup_logging
from seasonflow.schemas.transition import TransitionRecord
from seasonflow.season.initializer import initialize_seasonal_flow
from seasonflow.season.transition import SeasonTransition
from seasonflow.vcs import GitRepository, VcsError

logger = get_logger(__name__)

_TRANSITION_EPILOG = """\
process:
  1. validate prerequisites      6. promote next season to main/develop
  2. create backup tag           7. reinitialize season/next
  3. sync with remote            8. update season config
  4. finalize current season     9. push branches and tags
  5. archive current season     10. clean up merged branches, write report

examples:
  seasonflow transition             normal transition
  seasonflow transition --dry-run   preview what would happen
  seasonflow transition --force     transition with uncommitted changes
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="seasonflow",
        description="Seasonal GitFlow: current/next season branch lifecycle.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-C", "--repo", type=Path, default=Path("."),
                        help="Path inside the git repository (default: current directory)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    init = sub.add_parser(
        "init", help="Initialize the seasonal branch topology",
        description="Create main/develop/season/next, initial tags and season config.",
    )
    init.add_argument("current", nargs="?", type=int,
                      help="Current season (default: this year)")
    init.add_argument("next", nargs="?", type=int,
                      help="Next season (default: current + 1)")
    init.add_argument("--no-docs", action="store_true",
                      help="Do not write docs/WORKFLOW.md")
    init.add_argument("--protect", action="store_true",
                      help="Try to set GitHub branch protection (needs GITHUB_TOKEN)")

    transition = sub.add_parser(
        "transition", help="Transition from the current season to the next",
        description="Archive the current season, promote season/next, start a new next season.",
        epilog=_TRANSITION_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    transition.add_argument("--dry-run", action="store_true",
                            help="Show what would be done without making changes")
    transition.add_argument("--force", action="store_true",
                            help="Force transition even with uncommitted changes")
    transition.add_argument("-y", "--yes", action="store_true",
                            help="Do not ask for confirmation")
    transition.add_argument("--report-dir", type=Path, default=None,
                            help="Directory for the transition report (default: repository root)")
    return parser


def ask(prompt: str) -> bool:
    """Interactive yes/no prompt; anything but y/yes is a no."""
    try:
        reply = input(f"{prompt} [y/N]: ")
    except EOFError:
        return False
    return reply.strip().lower() in ("y", "yes")


def print_summary(record: TransitionRecord) -> None:
    prev, cur, nxt = record.previous_current, record.new_current, record.new_next
    title = "Season transition preview" if record.dry_run else "Season transition completed"
    print()
    print(f"{title}:")
    print(f"  ├── Previous season: {prev} (archived in {record.archive_branch or branches.archive(prev)})")
    print(f"  ├── Current season: {cur} (now in {branches.main}/{branches.develop})")
    print(f"  └── Next season: {nxt} (initialized in {branches.next})")
    if record.tags_created:
        print(f"Tags: {', '.join(record.tags_created)}")
    if record.push_failures:
        print(f"WARNING: {record.push_failures} push failure(s); local state is authoritative.")
        for result in record.push_results + ([record.tag_push] if record.tag_push else []):
            if result.failed:
                kind = result.error_kind.value if result.error_kind else "other"
                print(f"  - {result.ref}: {kind}: {result.message}")
    if record.backup_tag:
        print(f"Backup: {record.backup_tag} (rollback: git checkout {record.backup_tag})")
    if record.report_path:
        print(f"Report: {record.report_path}")


def _run_init(vcs: GitRepository, args: argparse.Namespace) -> int:
    initialize_seasonal_flow(
        vcs,
        current=args.current,
        next_season=args.next,
        write_docs=not args.no_docs,
        protect=args.protect,
    )
    return 0


def _run_transition(vcs: GitRepository, args: argparse.Namespace) -> int:
    transition = SeasonTransition(
        vcs,
        dry_run=args.dry_run,
        force=args.force,
        confirm_fn=None if args.yes else ask,
        report_dir=args.report_dir,
    )
    record = transition.run()
    print_summary(record)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging()
    if args.verbose:
        set_level(logging.DEBUG)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        vcs = GitRepository(args.repo)
        if args.command == "init":
            return _run_init(vcs, args)
        return _run_transition(vcs, args)
    except TransitionCancelled:
        return 0
    except MutationError as exc:
        logger.error("%s", exc)
        if exc.backup_tag:
            logger.error("Roll back with: git checkout %s", exc.backup_tag)
        return 1
    except (SeasonflowError, VcsError) as exc:
        logger.error("%s", exc)
        return 1
