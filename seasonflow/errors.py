"""Error taxonomy for init and transition runs.

Fatal errors derive from :class:`SeasonflowError`; the CLI turns any of them
into a non-zero exit.  Remote-reconciliation and cleanup problems are not
raised at all: they are logged, counted and reported.
"""

from __future__ import annotations


class SeasonflowError(Exception):
    """Base class for fatal seasonflow errors."""


class PreconditionError(SeasonflowError):
    """Missing branch, missing config, or not a git repository."""


class SafetyError(SeasonflowError):
    """Uncommitted changes (without ``--force``) or an unconfirmed checkout."""


class MutationError(SeasonflowError):
    """A merge, reset, tag or config write failed mid-transition."""

    def __init__(self, message: str, backup_tag: str | None = None):
        super().__init__(message)
        self.backup_tag = backup_tag


class TransitionCancelled(SeasonflowError):
    """The operator declined the transition confirmation."""
