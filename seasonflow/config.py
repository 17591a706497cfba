"""Central configuration: every branch name, tag format and key in one place."""

from __future__ import annotations

from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Branches
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class BranchConfig:
    main: str = "main"
    develop: str = "develop"
    next: str = "season/next"
    archive_prefix: str = "season/previous-"

    # Current-track prefixes
    feature: str = "feature/"
    release: str = "release/"
    hotfix: str = "hotfix/"
    bugfix: str = "bugfix/"
    sync: str = "sync/"

    # Next-track prefixes
    feature_next: str = "feature/next/"
    release_next: str = "release/next/"
    bugfix_next: str = "bugfix/next/"

    @property
    def canonical(self) -> tuple[str, str, str]:
        """The three long-lived branches every transition requires."""
        return (self.main, self.develop, self.next)

    @property
    def safe_checkouts(self) -> tuple[str, str]:
        return (self.main, self.develop)

    def archive(self, season: int) -> str:
        return f"{self.archive_prefix}{season}"


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class TagConfig:
    version_prefix: str = "v"
    start: str = "v{season}.0"
    final: str = "v{season}.final"
    init: str = "v{season}.init"
    archive: str = "archive/{season}"
    backup: str = "backup/pre-transition-{timestamp}"
    timestamp_format: str = "%Y%m%d_%H%M%S"

    def start_tag(self, season: int) -> str:
        return self.start.format(season=season)

    def final_tag(self, season: int) -> str:
        return self.final.format(season=season)

    def init_tag(self, season: int) -> str:
        return self.init.format(season=season)

    def archive_tag(self, season: int) -> str:
        return self.archive.format(season=season)

    def backup_tag(self, timestamp: str) -> str:
        return self.backup.format(timestamp=timestamp)


# ---------------------------------------------------------------------------
# Repository-scoped git config keys
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class SeasonKeys:
    current_year: str = "seasonal.current-year"
    next_year: str = "seasonal.next-year"


# ---------------------------------------------------------------------------
# Cleanup of merged work branches (branch prefix, integration branch, batch)
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class CleanupConfig:
    feature_batch: int = 10
    release_batch: int = 5


# ---------------------------------------------------------------------------
# Remote
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class RemoteConfig:
    name: str = "origin"


# ---------------------------------------------------------------------------
# Branch protection (GitHub REST API, optional)
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ProtectionConfig:
    api_base: str = "https://api.github.com"
    token_env_vars: tuple[str, ...] = ("GITHUB_TOKEN", "GH_TOKEN")
    required_approving_review_count: int = 2
    dismiss_stale_reviews: bool = True
    enforce_admins: bool = True
    request_timeout: int = 30  # seconds
    protected: tuple[str, ...] = ("main", "season/next")


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ReportConfig:
    filename: str = "transition-report-{timestamp}.md"
    next_steps: tuple[str, ...] = (
        "Update CI/CD pipelines for new season configuration",
        "Notify team members about the season transition",
        "Update project documentation and README",
        "Begin development for season {current} features",
        "Plan roadmap for season {next}",
    )


branches = BranchConfig()
tags = TagConfig()
season_keys = SeasonKeys()
cleanup_cfg = CleanupConfig()
remote_cfg = RemoteConfig()
protection_cfg = ProtectionConfig()
report_cfg = ReportConfig()


def gitflow_settings() -> dict[str, str]:
    """git-config entries written by ``init`` alongside the season keys."""
    return {
        "gitflow.branch.main": branches.main,
        "gitflow.branch.develop": branches.develop,
        "gitflow.prefix.feature": branches.feature,
        "gitflow.prefix.release": branches.release,
        "gitflow.prefix.hotfix": branches.hotfix,
        "gitflow.prefix.bugfix": branches.bugfix,
        "gitflow.prefix.versiontag": tags.version_prefix,
        "seasonal.branch.season.next": branches.next,
        "seasonal.prefix.feature.next": branches.feature_next,
        "seasonal.prefix.release.next": branches.release_next,
        "seasonal.prefix.bugfix.next": branches.bugfix_next,
    }
