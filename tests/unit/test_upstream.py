"""Unit tests for upstream version polling (no network access)."""

import pytest
import requests

from moodle_image.contexts.drift import upstream
from moodle_image.contexts.drift.upstream import (
    UpstreamVersions,
    fetch_latest_moodle_branch,
    fetch_latest_php_version,
    fetch_upstream_versions,
    latest_moodle_branch,
    normalize_moodle_branch,
    php_minor_version,
)

CONFIG = {
    "php": {"url": "https://php.example/releases?json"},
    "moodle": {"url": "https://github.example/repos/moodle/moodle/branches"},
    "timeouts": {"connect": 5, "max_time": 15},
    "user_agent": "test-agent",
}


class FakeResponse:
    def __init__(self, payload=None, status_code=200, json_error=False):
        self.payload = payload
        self.status_code = status_code
        self.json_error = json_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self.json_error:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload


class FakeHttp:
    """Stands in for the requests module; records calls and serves canned responses by URL."""

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def get(self, url, timeout=None, headers=None):
        self.calls.append({"url": url, "timeout": timeout, "headers": headers})
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.mark.unit
@pytest.mark.parametrize(
    "release, minor",
    [("8.4.13", "8.4"), ("8.4", "8.4"), ("8.3.0", "8.3"), ("8.5.0RC1", "8.5"), ("", ""), ("latest", ""), ("null", "")],
)
def test_php_minor_version(release, minor):
    assert php_minor_version(release) == minor


@pytest.mark.unit
@pytest.mark.parametrize(
    "value, branch",
    [("405", "405"), ("500\n", "500"), ("null", ""), ("abc", ""), ("4.5", ""), ("", "")],
)
def test_normalize_moodle_branch(value, branch):
    assert normalize_moodle_branch(value) == branch


@pytest.mark.unit
def test_latest_moodle_branch_is_numeric():
    names = ["main", "MOODLE_39_STABLE", "MOODLE_405_STABLE", "MOODLE_500_STABLE", "MOODLE_401_STABLE"]
    assert latest_moodle_branch(names) == "500"


@pytest.mark.unit
def test_latest_moodle_branch_without_stable_branches():
    assert latest_moodle_branch(["main", "feature/x"]) == ""


@pytest.mark.unit
def test_fetch_latest_php_version_uses_bounded_timeout():
    http = FakeHttp({CONFIG["php"]["url"]: FakeResponse({"version": "8.4.13"})})

    assert fetch_latest_php_version(CONFIG, session=http) == "8.4"
    assert http.calls[0]["timeout"] == (5.0, 15.0)
    assert http.calls[0]["headers"]["User-Agent"] == "test-agent"


@pytest.mark.unit
def test_fetch_latest_moodle_branch():
    branches = [{"name": "MOODLE_405_STABLE"}, {"name": "MOODLE_500_STABLE"}, {"name": "main"}]
    http = FakeHttp({CONFIG["moodle"]["url"]: FakeResponse(branches)})

    assert fetch_latest_moodle_branch(CONFIG, session=http) == "500"


@pytest.mark.unit
@pytest.mark.parametrize(
    "response",
    [
        requests.ConnectTimeout("connect timed out"),
        requests.ConnectionError("name resolution failed"),
        FakeResponse(status_code=503),
        FakeResponse(json_error=True),
        FakeResponse(["unexpected", "shape"]),
    ],
)
def test_fetch_failures_fall_back_to_empty(response):
    http = FakeHttp({CONFIG["php"]["url"]: response})
    assert fetch_latest_php_version(CONFIG, session=http) == ""


@pytest.mark.unit
def test_moodle_fetch_with_unexpected_payload():
    http = FakeHttp({CONFIG["moodle"]["url"]: FakeResponse({"message": "API rate limit exceeded"})})
    assert fetch_latest_moodle_branch(CONFIG, session=http) == ""


@pytest.mark.unit
def test_fetch_upstream_versions_defaults_to_requests(monkeypatch):
    http = FakeHttp(
        {
            CONFIG["php"]["url"]: FakeResponse({"version": "8.4.13"}),
            CONFIG["moodle"]["url"]: requests.ReadTimeout("read timed out"),
        }
    )
    monkeypatch.setattr(upstream.requests, "get", http.get)

    assert fetch_upstream_versions(CONFIG) == UpstreamVersions(php="8.4", moodle_branch="")
    assert len(http.calls) == 2
