"""Tests for the seasonflow command line."""

from pathlib import Path

import pytest

from seasonflow.cli import ask, build_parser, main

from conftest import ref_snapshot, sha


class TestParser:
    def test_transition_flags(self):
        args = build_parser().parse_args(["transition", "--dry-run", "--force", "-y"])
        assert (args.command, args.dry_run, args.force, args.yes) == ("transition", True, True, True)

    def test_init_positionals(self):
        args = build_parser().parse_args(["init", "2025", "2026", "--no-docs"])
        assert (args.current, args.next, args.no_docs, args.protect) == (2025, 2026, True, False)

    def test_help_exits_zero(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["transition", "--help"])
        assert excinfo.value.code == 0
        assert "--dry-run" in capsys.readouterr().out

    def test_bad_season_is_usage_error(self):
        with pytest.raises(SystemExit) as excinfo:
            main(["init", "twenty"])
        assert excinfo.value.code == 2

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "transition" in capsys.readouterr().out


class TestAsk:
    @pytest.mark.parametrize("reply,expected", [("y", True), ("YES", True), ("n", False), ("", False)])
    def test_replies(self, monkeypatch, reply, expected):
        monkeypatch.setattr("builtins.input", lambda prompt: reply)
        assert ask("Proceed?") is expected

    def test_eof_is_no(self, monkeypatch):
        def eof(prompt):
            raise EOFError

        monkeypatch.setattr("builtins.input", eof)
        assert ask("Proceed?") is False


class TestMain:
    def test_init(self, git_repo):
        root = git_repo.working_tree_dir
        assert main(["-C", root, "init", "2025", "2026"]) == 0
        assert git_repo.git.config("--get", "seasonal.next-year") == "2026"

    def test_transition(self, seasonal_repo, tmp_path, capsys):
        root = seasonal_repo.working_tree_dir
        old_next = sha(seasonal_repo, "season/next")
        code = main(["-C", root, "transition", "--yes", "--report-dir", str(tmp_path / "reports")])
        assert code == 0
        assert sha(seasonal_repo, "main") == old_next
        out = capsys.readouterr().out
        assert "Season transition completed" in out
        assert "Next season: 2027" in out
        assert list((tmp_path / "reports").glob("transition-report-*.md"))

    def test_dry_run(self, seasonal_repo, capsys):
        before = ref_snapshot(seasonal_repo)
        assert main(["-C", seasonal_repo.working_tree_dir, "transition", "--dry-run"]) == 0
        assert ref_snapshot(seasonal_repo) == before
        assert "Season transition preview" in capsys.readouterr().out

    def test_declined_confirmation_exits_zero(self, seasonal_repo, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda prompt: "n")
        before = ref_snapshot(seasonal_repo)
        assert main(["-C", seasonal_repo.working_tree_dir, "transition"]) == 0
        assert ref_snapshot(seasonal_repo) == before

    def test_dirty_tree_exits_one(self, seasonal_repo):
        (Path(seasonal_repo.working_tree_dir) / "README.md").write_text("local edit\n")
        before = ref_snapshot(seasonal_repo)
        assert main(["-C", seasonal_repo.working_tree_dir, "transition", "--yes"]) == 1
        assert ref_snapshot(seasonal_repo) == before

    def test_not_a_repository(self, tmp_path):
        assert main(["-C", str(tmp_path / "nowhere"), "transition", "--yes"]) == 1
