"""Shared test fixtures for seasonflow.

Every fixture builds a real throwaway git repository under ``tmp_path``.
"""

from pathlib import Path

import pytest
from git import Repo

from seasonflow.store import SeasonConfigRepository
from seasonflow.vcs import GitRepository


def configure_identity(repo: Repo) -> None:
    """Commit/tag identity and no signing, independent of the user's config."""
    with repo.config_writer() as cw:
        cw.set_value("user", "name", "Season Tester")
        cw.set_value("user", "email", "tester@example.com")
        cw.set_value("commit", "gpgsign", "false")
        cw.set_value("tag", "gpgsign", "false")


def commit_file(repo: Repo, name: str, content: str | None = None, message: str | None = None) -> str:
    """Write *name*, commit it on the checked-out branch, return the new sha."""
    path = Path(repo.working_tree_dir) / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content if content is not None else f"{name}\n", encoding="utf-8")
    repo.git.add(name)
    repo.git.commit("-m", message or f"add {name}")
    return repo.head.commit.hexsha


def sha(repo: Repo, ref: str) -> str:
    return repo.git.rev_parse(f"{ref}^{{commit}}")


def ref_snapshot(repo: Repo) -> dict[str, str]:
    """Every ref (branches, tags, remote-tracking) and the object it names."""
    out = repo.git.for_each_ref("--format=%(refname) %(objectname)")
    return dict(line.split(" ", 1) for line in out.splitlines() if line)


def make_repo(path: Path, branch: str = "main") -> Repo:
    repo = Repo.init(path)
    configure_identity(repo)
    repo.git.symbolic_ref("HEAD", f"refs/heads/{branch}")
    commit_file(repo, "README.md", "# project\n", "initial commit")
    return repo


@pytest.fixture
def git_repo(tmp_path):
    """Repository with a single commit on ``main``."""
    return make_repo(tmp_path / "work")


@pytest.fixture
def seasonal_repo(git_repo):
    """Initialized two-track repository for seasons 2025 (current) / 2026 (next).

    ``develop`` == ``main``; ``season/next`` is 3 commits ahead of ``main``;
    ``main`` is checked out; no remote.
    """
    repo = git_repo
    repo.git.branch("develop", "main")
    repo.git.checkout("-b", "season/next", "main")
    for i in range(1, 4):
        commit_file(repo, f"next/feature_{i}.txt", message=f"next season work {i}")
    repo.git.checkout("main")
    repo.git.config("seasonal.current-year", "2025")
    repo.git.config("seasonal.next-year", "2026")
    return repo


@pytest.fixture
def vcs(seasonal_repo):
    return GitRepository(seasonal_repo.working_tree_dir)


@pytest.fixture
def store(vcs):
    return SeasonConfigRepository(vcs)


@pytest.fixture
def origin(tmp_path, seasonal_repo):
    """Bare repository registered as ``origin`` with the canonical branches pushed."""
    bare = Repo.init(tmp_path / "origin.git", bare=True)
    seasonal_repo.create_remote("origin", str(tmp_path / "origin.git"))
    seasonal_repo.git.push("origin", "main", "develop", "season/next")
    seasonal_repo.git.fetch("origin")
    return bare


@pytest.fixture
def fixed_clock():
    """Clock that advances one second per call (unique backup tag names)."""
    from datetime import datetime, timedelta

    state = {"now": datetime(2026, 6, 1, 12, 0, 0)}

    def _clock():
        state["now"] += timedelta(seconds=1)
        return state["now"]

    return _clock
