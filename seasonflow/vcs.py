"""Git adapter: every repository operation init and transition need.

All calls go through GitPython's ``repo.git`` command wrapper.  Any
``GitCommandError`` is converted into a :class:`VcsError` whose ``kind`` is
classified once, here, from git's stderr; callers match on the kind instead
of parsing messages.

Return type conventions:
- Predicates (``branch_exists``, ``tag_exists``, ``is_clean`` ...) return bool.
- Mutations return ``None`` (or a bool when they may legitimately no-op) and
  raise :class:`VcsError` on failure.
"""

from __future__ import annotations

from pathlib import Path

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from seasonflow.config import remote_cfg
from seasonflow.errors import PreconditionError
from seasonflow.logging_config import get_logger
from seasonflow.schemas.transition import PushErrorKind

logger = get_logger(__name__)

# (kind, lowercase stderr fragments); first match wins, so the more
# specific rejection reasons come before the generic ones.
_ERROR_PATTERNS: tuple[tuple[PushErrorKind, tuple[str, ...]], ...] = (
    (PushErrorKind.STALE_COMPARE_AND_SWAP, ("stale info",)),
    (PushErrorKind.NON_FAST_FORWARD, (
        "non-fast-forward",
        "fetch first",
        "updates were rejected",
        "tip of your current branch is behind",
    )),
    (PushErrorKind.AUTH_FAILURE, (
        "authentication failed",
        "could not read username",
        "invalid username or password",
        "permission denied (publickey",
        "terminal prompts disabled",
    )),
    (PushErrorKind.PERMISSION_DENIED, (
        "permission denied",
        "permission to",
        "protected branch",
        "pre-receive hook declined",
        "the requested url returned error: 403",
        "not allowed to push",
    )),
)


def classify_git_error(text: str) -> PushErrorKind:
    """Map git's diagnostic text onto a :class:`PushErrorKind`."""
    lowered = text.lower()
    for kind, fragments in _ERROR_PATTERNS:
        if any(fragment in lowered for fragment in fragments):
            return kind
    return PushErrorKind.OTHER


class VcsError(Exception):
    """A git command failed.

    ``kind`` is meaningful for push/fetch failures; everything else is
    ``PushErrorKind.OTHER``.
    """

    def __init__(self, message: str, kind: PushErrorKind = PushErrorKind.OTHER, command: str = ""):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.command = command

    @classmethod
    def from_git(cls, exc: GitCommandError) -> "VcsError":
        stderr = exc.stderr if isinstance(exc.stderr, str) else ""
        message = stderr.strip() or str(exc)
        # GitPython prefixes captured stderr with "stderr: '...'".
        if message.startswith("stderr:"):
            message = message[len("stderr:"):].strip().strip("'").strip()
        command = " ".join(str(part) for part in exc.command) if isinstance(exc.command, (list, tuple)) else str(exc.command)
        return cls(message, kind=classify_git_error(message), command=command)


class GitRepository:
    """Thin wrapper around a GitPython :class:`~git.Repo`."""

    def __init__(self, path: Path | str = ".", remote: str | None = None):
        try:
            self.repo = Repo(str(path), search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as exc:
            raise PreconditionError(
                f"Not in a git repository: {path}. Run seasonflow from inside your repository."
            ) from exc
        self.remote = remote or remote_cfg.name

    @property
    def working_dir(self) -> Path:
        return Path(self.repo.working_tree_dir or self.repo.git_dir)

    def _git(self, command: str, *args: str) -> str:
        """Run ``git <command> <args>`` and return stdout."""
        try:
            return getattr(self.repo.git, command)(*args)
        except GitCommandError as exc:
            raise VcsError.from_git(exc) from exc

    def _succeeds(self, command: str, *args: str) -> bool:
        try:
            getattr(self.repo.git, command)(*args)
            return True
        except GitCommandError:
            return False

    # ------------------------------------------------------------------
    # Refs
    # ------------------------------------------------------------------

    def branch_exists(self, name: str) -> bool:
        return self._succeeds("show_ref", "--verify", "--quiet", f"refs/heads/{name}")

    def tag_exists(self, name: str) -> bool:
        return self._succeeds("show_ref", "--verify", "--quiet", f"refs/tags/{name}")

    def ref_exists(self, ref: str) -> bool:
        return self._succeeds("rev_parse", "--verify", "--quiet", f"{ref}^{{commit}}")

    def rev_parse(self, ref: str) -> str:
        """Commit sha *ref* points at (tags are peeled)."""
        return self._git("rev_parse", "--verify", f"{ref}^{{commit}}").strip()

    def current_branch(self) -> str | None:
        """Checked-out branch name, or ``None`` on a detached HEAD."""
        try:
            return self.repo.git.symbolic_ref("--quiet", "--short", "HEAD").strip() or None
        except GitCommandError:
            return None

    def rev_list_count(self, range_expr: str) -> int:
        return int(self._git("rev_list", "--count", range_expr).strip() or 0)

    def list_branches(self) -> list[str]:
        out = self._git("for_each_ref", "--format=%(refname:short)", "refs/heads/")
        return [line.strip() for line in out.splitlines() if line.strip()]

    def list_tags(self) -> list[str]:
        out = self._git("for_each_ref", "--format=%(refname:short)", "refs/tags/")
        return [line.strip() for line in out.splitlines() if line.strip()]

    def list_merged_branches(self, into: str) -> list[str]:
        out = self._git("branch", "--merged", into, "--format=%(refname:short)")
        return [line.strip() for line in out.splitlines() if line.strip()]

    # ------------------------------------------------------------------
    # Working tree
    # ------------------------------------------------------------------

    def is_clean(self) -> bool:
        """True when neither the index nor tracked files have modifications."""
        return not self.repo.is_dirty(index=True, working_tree=True, untracked_files=False)

    def checkout(self, name: str, create: bool = False, start_point: str | None = None) -> None:
        if create:
            args = ["-b", name] + ([start_point] if start_point else [])
            self._git("checkout", *args)
        else:
            self._git("checkout", name)

    def create_branch(self, name: str, start_point: str) -> None:
        """Create *name* at *start_point* without checking it out."""
        self._git("branch", name, start_point)

    def delete_branches(self, names: list[str]) -> None:
        """Delete fully merged branches (``git branch -d``)."""
        if names:
            self._git("branch", "-d", *names)

    def merge(self, branch: str, no_ff: bool = True, message: str | None = None) -> None:
        args = ["--no-ff"] if no_ff else []
        if message:
            args += ["-m", message]
        try:
            self._git("merge", *args, branch)
        except VcsError:
            # Leave the working tree usable for the operator.
            self._succeeds("merge", "--abort")
            raise

    def reset_hard(self, branch: str, target: str) -> None:
        """Check out *branch* and move it (and the working tree) to *target*."""
        self.checkout(branch)
        self._git("reset", "--hard", target)

    def add(self, *paths: str) -> None:
        self._git("add", *paths)

    def commit(self, message: str) -> None:
        self._git("commit", "-m", message)

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def create_tag(self, name: str, message: str, ref: str | None = None, skip_if_exists: bool = True) -> bool:
        """Create annotated tag *name*; returns False when it already existed.

        Existing tags are never moved.  With ``skip_if_exists=False`` an
        existing tag is an error.
        """
        if skip_if_exists and self.tag_exists(name):
            logger.info("Tag '%s' already exists, leaving it in place", name)
            return False
        args = ["-a", name, "-m", message] + ([ref] if ref else [])
        self._git("tag", *args)
        return True

    # ------------------------------------------------------------------
    # Config
    # ------------------------------------------------------------------

    def config_get(self, key: str) -> str | None:
        try:
            value = self.repo.git.config("--get", key).strip()
        except GitCommandError:
            return None
        return value or None

    def config_set(self, key: str, value: str) -> None:
        self._git("config", key, value)

    # ------------------------------------------------------------------
    # Remote
    # ------------------------------------------------------------------

    def has_remote(self) -> bool:
        return self.remote in [r.name for r in self.repo.remotes]

    def remote_url(self) -> str | None:
        if not self.has_remote():
            return None
        return self.config_get(f"remote.{self.remote}.url")

    def remote_branch_exists(self, name: str) -> bool:
        """Ask the remote (``ls-remote``) whether *name* exists there."""
        out = self._git("ls_remote", "--heads", self.remote, f"refs/heads/{name}")
        return any(line.endswith(f"refs/heads/{name}") for line in out.splitlines())

    def tracking_ref(self, name: str) -> str:
        return f"{self.remote}/{name}"

    def fetch(self, ref: str | None = None) -> None:
        """Fetch everything, or update one remote-tracking ref."""
        if ref is None:
            self._git("fetch", self.remote)
        else:
            self._git("fetch", self.remote, f"+refs/heads/{ref}:refs/remotes/{self.remote}/{ref}")

    def pull_ff_only(self, branch: str) -> None:
        self.checkout(branch)
        self._git("pull", "--ff-only", self.remote, branch)

    def push(self, branch: str, expect: str | None = None, set_upstream: bool = False) -> None:
        """Push *branch*; with *expect*, force only if the remote is still at that sha."""
        args: list[str] = []
        if expect is not None:
            args.append(f"--force-with-lease=refs/heads/{branch}:{expect}")
        if set_upstream:
            args.append("--set-upstream")
        args += [self.remote, f"refs/heads/{branch}:refs/heads/{branch}"]
        self._git("push", *args)

    def push_tags(self) -> None:
        self._git("push", self.remote, "--tags")
