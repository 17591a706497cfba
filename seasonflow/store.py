"""Season config store: the ``seasonal.*`` keys in the repository's git config.

This is the only durable record of which seasons are live.  ``init``
creates it; a transition advances it exactly once.
"""

from __future__ import annotations

from pydantic import ValidationError

from seasonflow.config import gitflow_settings, season_keys
from seasonflow.errors import PreconditionError
from seasonflow.logging_config import get_logger
from seasonflow.schemas.season import SeasonConfig
from seasonflow.vcs import GitRepository

logger = get_logger(__name__)


class SeasonConfigRepository:
    """Get/set access to the repository-scoped season keys."""

    def __init__(self, vcs: GitRepository):
        self.vcs = vcs

    def get(self, key: str) -> str | None:
        return self.vcs.config_get(key)

    def set(self, key: str, value: str) -> None:
        self.vcs.config_set(key, value)

    def load(self) -> SeasonConfig:
        """Read and validate the season pair.

        Raises :class:`PreconditionError` if either key is missing or the
        stored values break ``next > current``.
        """
        current = self.get(season_keys.current_year)
        nxt = self.get(season_keys.next_year)
        if current is None or nxt is None:
            raise PreconditionError(
                "Seasonal configuration not found. Run 'seasonflow init' first."
            )
        try:
            return SeasonConfig(current=int(current), next=int(nxt))
        except (ValueError, ValidationError) as exc:
            raise PreconditionError(
                f"Invalid seasonal configuration ({season_keys.current_year}={current!r}, "
                f"{season_keys.next_year}={nxt!r}): {exc}"
            ) from exc

    def save(self, season: SeasonConfig) -> None:
        self.set(season_keys.current_year, str(season.current))
        self.set(season_keys.next_year, str(season.next))
        logger.info(
            "Season config set: current=%d, next=%d", season.current, season.next,
        )

    def write_flow_settings(self) -> None:
        """Write the gitflow branch/prefix keys used by the seasonal workflow."""
        for key, value in gitflow_settings().items():
            self.set(key, value)
