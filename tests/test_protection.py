"""Tests for optional GitHub branch protection (HTTP calls are faked)."""

import pytest
import requests

from seasonflow.season.protection import parse_github_remote, protection_payload, setup_branch_protection


class FakeResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")


@pytest.fixture
def no_token(monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GH_TOKEN", raising=False)


@pytest.fixture
def token(monkeypatch, no_token):
    monkeypatch.setenv("GITHUB_TOKEN", "t0ken")


class TestParseGithubRemote:
    @pytest.mark.parametrize("url", [
        "git@github.com:acme/widgets.git",
        "https://github.com/acme/widgets.git",
        "https://github.com/acme/widgets",
        "ssh://git@github.com/acme/widgets.git",
    ])
    def test_github_urls(self, url):
        assert parse_github_remote(url) == ("acme", "widgets")

    @pytest.mark.parametrize("url", [None, "", "https://gitlab.com/acme/widgets.git", "/srv/git/widgets.git"])
    def test_other_urls(self, url):
        assert parse_github_remote(url) is None


class TestSetupBranchProtection:
    def test_non_github_remote(self, token, monkeypatch):
        monkeypatch.setattr(requests, "put", lambda *a, **k: pytest.fail("no HTTP expected"))
        assert setup_branch_protection("/srv/git/widgets.git", ["main"]) == []

    def test_missing_token(self, no_token, monkeypatch):
        monkeypatch.setattr(requests, "put", lambda *a, **k: pytest.fail("no HTTP expected"))
        assert setup_branch_protection("git@github.com:acme/widgets.git", ["main"]) == []

    def test_puts_each_branch(self, token, monkeypatch):
        calls = []

        def fake_put(url, json=None, headers=None, timeout=None):
            calls.append((url, json, headers))
            return FakeResponse()

        monkeypatch.setattr(requests, "put", fake_put)
        done = setup_branch_protection("git@github.com:acme/widgets.git", ["main", "season/next"])

        assert done == ["main", "season/next"]
        assert calls[0][0] == "https://api.github.com/repos/acme/widgets/branches/main/protection"
        assert calls[1][0] == "https://api.github.com/repos/acme/widgets/branches/season%2Fnext/protection"
        assert calls[0][1] == protection_payload()
        assert calls[0][2]["Authorization"] == "Bearer t0ken"

    def test_http_errors_are_warnings(self, token, monkeypatch):
        responses = iter([FakeResponse(403), FakeResponse(200)])
        monkeypatch.setattr(requests, "put", lambda *a, **k: next(responses))
        done = setup_branch_protection("https://github.com/acme/widgets", ["main", "season/next"])
        assert done == ["season/next"]

    def test_payload_requires_reviews(self):
        payload = protection_payload()
        assert payload["required_pull_request_reviews"]["required_approving_review_count"] == 2
        assert payload["enforce_admins"] is True
