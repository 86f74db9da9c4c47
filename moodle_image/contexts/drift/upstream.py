"""
Upstream version polling.

Both fetchers use a bounded (connect, read) timeout and never raise: on any
network, HTTP or decoding failure they log a warning and return "" so the drift
comparison treats the component as unknown rather than drifted.

Examples:
    >>> config = load_upstream_config()
    >>> fetch_latest_php_version(config)
    '8.4'
    >>> fetch_latest_moodle_branch(config)
    '500'
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

import requests

from moodle_image.contexts.drift.logger import log_fetch_failure, log_fetch_start

MOODLE_STABLE_BRANCH = r'^MOODLE_(\d+)_STABLE$'
PHP_RELEASE = r'^(\d+\.\d+)(\.\d+)?'
MOODLE_BRANCH_NUMBER = r'^\d+$'


@dataclass
class UpstreamVersions:
    """
    Latest upstream versions. An empty string means the fetch failed.

    Attributes:
        php: Latest PHP minor version (e.g., "8.4")
        moodle_branch: Latest Moodle stable branch number (e.g., "500")
    """

    php: str = ""
    moodle_branch: str = ""


def _timeout(config: Dict[str, Any]) -> tuple:
    timeouts = config.get("timeouts", {})
    return (float(timeouts.get("connect", 10)), float(timeouts.get("max_time", 30)))


def fetch_json(url: str, config: Dict[str, Any], component: str, session: Optional[requests.Session] = None):
    """
    GET url and decode JSON, returning None on failure.

    Args:
        url: Endpoint to fetch
        config: Upstream config (timeouts, user_agent)
        component: Name used in log messages
        session: Optional session (defaults to module-level requests)
    """
    http = session or requests
    log_fetch_start(component, url)
    try:
        response = http.get(
            url,
            timeout=_timeout(config),
            headers={"User-Agent": config.get("user_agent", "moodle-image"), "Accept": "application/json"},
        )
        response.raise_for_status()
        return response.json()
    except (requests.RequestException, ValueError) as e:
        log_fetch_failure(component, url, e)
        return None


def php_minor_version(release: str) -> str:
    """
    Reduce a PHP release to its minor version.

    Examples:
        >>> php_minor_version("8.4.13")
        '8.4'
        >>> php_minor_version("8.4.0RC1")
        '8.4'
    """
    match = re.match(PHP_RELEASE, release or "")
    return match.group(1) if match else ""


def normalize_moodle_branch(value: str) -> str:
    """
    A Moodle branch number as given (e.g., "405"), or "" if value is not one.

    Examples:
        >>> normalize_moodle_branch("500")
        '500'
        >>> normalize_moodle_branch("null")
        ''
    """
    value = (value or "").strip()
    return value if re.match(MOODLE_BRANCH_NUMBER, value) else ""


def latest_moodle_branch(branch_names: Iterable[str]) -> str:
    """
    Highest MOODLE_NNN_STABLE branch number, or "" if there is none.

    Compared numerically, so MOODLE_500_STABLE beats MOODLE_405_STABLE and
    MOODLE_39_STABLE sorts below both.
    """
    numbers = []
    for name in branch_names:
        match = re.match(MOODLE_STABLE_BRANCH, name or "")
        if match:
            numbers.append(int(match.group(1)))
    return str(max(numbers)) if numbers else ""


def fetch_latest_php_version(config: Dict[str, Any], session: Optional[requests.Session] = None) -> str:
    """Latest PHP minor version from the php.net releases API, or ""."""
    url = config["php"]["url"]
    data = fetch_json(url, config, "PHP", session)
    if not isinstance(data, dict):
        return ""
    return php_minor_version(str(data.get("version", "")))


def fetch_latest_moodle_branch(config: Dict[str, Any], session: Optional[requests.Session] = None) -> str:
    """Latest Moodle stable branch number from the GitHub branches API, or ""."""
    url = config["moodle"]["url"]
    data = fetch_json(url, config, "Moodle", session)
    if not isinstance(data, list):
        return ""
    return latest_moodle_branch(branch.get("name", "") for branch in data if isinstance(branch, dict))


def fetch_upstream_versions(config: Dict[str, Any], session: Optional[requests.Session] = None) -> UpstreamVersions:
    """Fetch both upstream versions; failed components are left empty."""
    return UpstreamVersions(
        php=fetch_latest_php_version(config, session),
        moodle_branch=fetch_latest_moodle_branch(config, session),
    )
