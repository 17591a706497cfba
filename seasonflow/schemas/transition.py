"""Pydantic schemas for push results and the transition record."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class PushStatus(str, Enum):
    PUSHED = "pushed"
    UP_TO_DATE = "up_to_date"
    SKIPPED = "skipped"
    FAILED = "failed"


class PushErrorKind(str, Enum):
    NON_FAST_FORWARD = "non_fast_forward"
    STALE_COMPARE_AND_SWAP = "stale_compare_and_swap"
    AUTH_FAILURE = "auth_failure"
    PERMISSION_DENIED = "permission_denied"
    OTHER = "other"


class PhaseStatus(str, Enum):
    COMPLETED = "completed"
    WARNED = "warned"
    SKIPPED = "skipped"
    FAILED = "failed"


class PushResult(BaseModel):
    """Outcome of pushing one branch (or the tag batch) to the remote."""

    ref: str
    status: PushStatus
    used_force: bool = False
    created: bool = False
    ahead: int = 0
    behind: int = 0
    error_kind: PushErrorKind | None = None
    message: str | None = None
    dry_run: bool = False

    @property
    def failed(self) -> bool:
        return self.status is PushStatus.FAILED


class PhaseOutcome(BaseModel):
    """Result of one transition phase."""

    phase: str
    status: PhaseStatus
    detail: str = ""


class TransitionRecord(BaseModel):
    """Structured record of one transition run (not persisted as state)."""

    previous_current: int
    new_current: int
    new_next: int
    dry_run: bool = False
    force: bool = False
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: datetime | None = None

    backup_tag: str | None = None
    archive_branch: str | None = None
    original_branch: str | None = None

    phases: list[PhaseOutcome] = Field(default_factory=list)
    tags_created: list[str] = Field(default_factory=list)
    push_results: list[PushResult] = Field(default_factory=list)
    tag_push: PushResult | None = None
    deleted_branches: list[str] = Field(default_factory=list)
    planned_actions: list[str] = Field(default_factory=list)
    report_path: str | None = None

    @property
    def push_failures(self) -> int:
        failures = sum(1 for r in self.push_results if r.failed)
        if self.tag_push is not None and self.tag_push.failed:
            failures += 1
        return failures

    def outcome(self, phase: str) -> PhaseOutcome | None:
        for entry in self.phases:
            if entry.phase == phase:
                return entry
        return None
