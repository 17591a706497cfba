"""Transition phase state machine.

Phases (strictly ordered):
    VALIDATE → BACKUP → SYNC → FINALIZE_CURRENT → ARCHIVE_CURRENT
    → PROMOTE_NEXT → REINITIALIZE_NEXT → UPDATE_CONFIG → PUSH → CLEANUP
"""

from __future__ import annotations

from enum import Enum


class TransitionPhase(str, Enum):
    VALIDATE = "validate"
    BACKUP = "backup"
    SYNC = "sync"
    FINALIZE_CURRENT = "finalize_current"
    ARCHIVE_CURRENT = "archive_current"
    PROMOTE_NEXT = "promote_next"
    REINITIALIZE_NEXT = "reinitialize_next"
    UPDATE_CONFIG = "update_config"
    PUSH = "push"
    CLEANUP = "cleanup"

    @property
    def number(self) -> int:
        return _ORDER.index(self) + 1

    @property
    def label(self) -> str:
        return _LABELS[self]


_ORDER: list[TransitionPhase] = list(TransitionPhase)

_LABELS: dict[TransitionPhase, str] = {
    TransitionPhase.VALIDATE: "Validating prerequisites",
    TransitionPhase.BACKUP: "Creating backup",
    TransitionPhase.SYNC: "Syncing with remote repository",
    TransitionPhase.FINALIZE_CURRENT: "Finalizing current season",
    TransitionPhase.ARCHIVE_CURRENT: "Archiving current season",
    TransitionPhase.PROMOTE_NEXT: "Promoting next season to current",
    TransitionPhase.REINITIALIZE_NEXT: "Initializing new next season",
    TransitionPhase.UPDATE_CONFIG: "Updating season configuration",
    TransitionPhase.PUSH: "Pushing changes to remote",
    TransitionPhase.CLEANUP: "Cleaning up merged branches",
}

# Failures in these phases abort the run.  SYNC is tolerated (no network),
# PUSH is reported, CLEANUP is ignored.
_FATAL: frozenset[TransitionPhase] = frozenset({
    TransitionPhase.VALIDATE,
    TransitionPhase.BACKUP,
    TransitionPhase.FINALIZE_CURRENT,
    TransitionPhase.ARCHIVE_CURRENT,
    TransitionPhase.PROMOTE_NEXT,
    TransitionPhase.REINITIALIZE_NEXT,
    TransitionPhase.UPDATE_CONFIG,
})


def can_transition(from_phase: TransitionPhase, to_phase: TransitionPhase) -> bool:
    """Return True if *to_phase* directly follows *from_phase*."""
    return next_phase(from_phase) is to_phase


def next_phase(phase: TransitionPhase) -> TransitionPhase | None:
    """Return the phase after *phase*; CLEANUP has no successor (returns None)."""
    idx = _ORDER.index(phase)
    return _ORDER[idx + 1] if idx + 1 < len(_ORDER) else None


def first_phase() -> TransitionPhase:
    return _ORDER[0]


def is_fatal(phase: TransitionPhase) -> bool:
    """True if an error in *phase* must abort the transition."""
    return phase in _FATAL
