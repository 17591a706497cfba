"""Markdown transition report.

The report is documentation for humans; nothing reads it back.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from seasonflow.config import branches, report_cfg, tags
from seasonflow.schemas.transition import PhaseStatus, PushStatus, TransitionRecord
from seasonflow.season.phases import TransitionPhase

_STATUS_MARK = {
    PhaseStatus.COMPLETED: "✅",
    PhaseStatus.WARNED: "⚠️",
    PhaseStatus.SKIPPED: "⏭️",
    PhaseStatus.FAILED: "❌",
}

_PUSH_MARK = {
    PushStatus.PUSHED: "pushed",
    PushStatus.UP_TO_DATE: "up to date",
    PushStatus.SKIPPED: "skipped",
    PushStatus.FAILED: "FAILED",
}


def report_filename(when: datetime) -> str:
    return report_cfg.filename.format(timestamp=when.strftime(tags.timestamp_format))


def render_report(record: TransitionRecord) -> str:
    prev, cur, nxt = record.previous_current, record.new_current, record.new_next
    archive = record.archive_branch or branches.archive(prev)
    when = record.finished_at or record.started_at

    lines = [
        "# Season Transition Report",
        "",
        f"**Date:** {when:%Y-%m-%d %H:%M:%S}",
        f"**Previous Current Season:** {prev}",
        f"**New Current Season:** {cur}",
        f"**New Next Season:** {nxt}",
    ]
    if record.dry_run:
        lines.append("**Mode:** dry run (no changes were made)")
    if record.force:
        lines.append("**Forced:** yes")

    lines += ["", "## Actions Performed", ""]
    for phase in TransitionPhase:
        outcome = record.outcome(phase.value)
        if outcome is None:
            lines.append(f"{phase.number}. ⬜ {phase.label} (not run)")
            continue
        detail = f": {outcome.detail}" if outcome.detail else ""
        lines.append(f"{phase.number}. {_STATUS_MARK[outcome.status]} {phase.label}{detail}")

    lines += [
        "",
        "## Branch Status After Transition",
        "",
        f"- `{branches.main}`: Now contains season {cur}",
        f"- `{branches.develop}`: Now contains season {cur} development",
        f"- `{branches.next}`: Now prepared for season {nxt}",
        f"- `{archive}`: Archive of season {prev}",
        "",
        "## Tags Created",
        "",
    ]
    if record.tags_created:
        lines += [f"- `{name}`" for name in record.tags_created]
    else:
        lines.append("- (none)")

    if record.push_results or record.tag_push is not None:
        lines += ["", "## Remote Push", ""]
        for result in record.push_results + ([record.tag_push] if record.tag_push else []):
            note = " (force-with-lease)" if result.used_force else ""
            if result.failed:
                note = f" ({result.error_kind.value if result.error_kind else 'other'}: {result.message})"
            lines.append(f"- `{result.ref}`: {_PUSH_MARK[result.status]}{note}")
        if record.push_failures:
            lines.append("")
            lines.append(f"**{record.push_failures} push failure(s); reconcile the remote manually.**")

    if record.deleted_branches:
        lines += ["", "## Cleaned Up Branches", ""]
        lines += [f"- `{name}`" for name in record.deleted_branches]

    lines += ["", "## Next Steps", ""]
    for i, step in enumerate(report_cfg.next_steps, 1):
        lines.append(f"{i}. {step.format(current=cur, next=nxt)}")

    lines += [
        "",
        "## Rollback Information",
        "",
        "If rollback is needed, use the backup tag created before transition:",
        "```bash",
        f"git checkout {record.backup_tag or 'backup/pre-transition-[timestamp]'}",
        "```",
        "",
    ]
    return "\n".join(lines)


def write_report(record: TransitionRecord, directory: Path) -> Path:
    """Write the report into *directory* and return its path."""
    when = record.finished_at or record.started_at
    path = Path(directory) / report_filename(when)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_report(record), encoding="utf-8")
    return path
