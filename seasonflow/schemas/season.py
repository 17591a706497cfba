"""Pydantic schema for the two tracked seasons."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, model_validator


class SeasonConfig(BaseModel):
    """The ``(current, next)`` pair persisted in the repository's git config.

    Read once at the start of a run and written back once, after the
    promotion phases succeed.
    """

    model_config = ConfigDict(frozen=True)

    current: int
    next: int

    @model_validator(mode="after")
    def validate_order(self) -> "SeasonConfig":
        if self.next <= self.current:
            raise ValueError(
                f"Next season ({self.next}) must be greater than current season ({self.current})"
            )
        return self

    @property
    def new_next(self) -> int:
        """The next season after a transition."""
        return self.next + 1

    def advanced(self) -> "SeasonConfig":
        """Return the config a successful transition writes back."""
        return SeasonConfig(current=self.next, next=self.new_next)
