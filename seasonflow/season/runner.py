"""Dry-run aware executor for mutating repository calls."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from seasonflow.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class CommandRunner:
    """Run a mutating call, or describe it when *dry_run* is set.

    Read-only calls (existence checks, ahead/behind counts) are made
    directly against the repository so that a dry run follows the same
    branches of logic as a real one.
    """

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run
        self.planned: list[str] = []

    def run(self, description: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T | None:
        if self.dry_run:
            self.planned.append(description)
            logger.info("[DRY-RUN] Would execute: %s", description)
            return None
        logger.info(description)
        return fn(*args, **kwargs)
