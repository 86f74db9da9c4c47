"""
GitHub tracking issue management.

Keeps a single open issue per drift title: the first run opens it, later runs
replace its body with the latest report.

Usage:
    tracker = GitHubIssueTracker("owner/moodle-image", token=os.getenv("GITHUB_TOKEN"))
    number, created = tracker.open_or_update(title, report.to_markdown(), ["version-drift"])
"""

from typing import List, Optional, Tuple

import requests

from moodle_image.contexts.drift.exceptions import IssueTrackerError
from moodle_image.contexts.drift.logger import _log_debug, log_issue_update

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = (10, 30)


class GitHubIssueTracker:
    """
    Minimal GitHub issues client for the drift tracking issue.

    Attributes:
        repository: "owner/name"
        api_url: GitHub REST API root
        session: requests.Session carrying auth headers
    """

    def __init__(
        self,
        repository: str,
        token: str,
        api_url: str = DEFAULT_API_URL,
        session: Optional[requests.Session] = None,
        timeout: tuple = DEFAULT_TIMEOUT,
    ):
        if not repository or "/" not in repository:
            raise ValueError(f"Repository must be 'owner/name', got: {repository!r}")
        if not token:
            raise ValueError("A GitHub token is required to manage issues")

        self.repository = repository
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )

    @property
    def issues_url(self) -> str:
        return f"{self.api_url}/repos/{self.repository}/issues"

    def _request(self, method: str, url: str, **kwargs):
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise IssueTrackerError(f"{method} {url} failed: {e}") from e

        if response.status_code >= 400:
            raise IssueTrackerError(
                f"{method} {url} failed", status_code=response.status_code, response_text=response.text
            )
        return response.json()

    def find_open_issue(self, title: str) -> Optional[dict]:
        """First open issue (not pull request) whose title matches exactly, or None."""
        page = 1
        while True:
            issues = self._request(
                "GET", self.issues_url, params={"state": "open", "per_page": 100, "page": page}
            )
            for issue in issues:
                if issue.get("title") == title and "pull_request" not in issue:
                    return issue
            if len(issues) < 100:
                return None
            page += 1

    def open_or_update(self, title: str, body: str, labels: List[str] = None) -> Tuple[int, bool]:
        """
        Open the tracking issue, or replace the body of the existing one.

        Returns:
            (issue number, whether a new issue was created)

        Raises:
            IssueTrackerError: If any API call fails
        """
        existing = self.find_open_issue(title)

        if existing is None:
            issue = self._request(
                "POST", self.issues_url, json={"title": title, "body": body, "labels": list(labels or [])}
            )
            created = True
        else:
            _log_debug(f"Found existing issue #{existing['number']}")
            issue = self._request("PATCH", f"{self.issues_url}/{existing['number']}", json={"body": body})
            created = False

        log_issue_update(issue["number"], created)
        return issue["number"], created
