"""
README badge updates.

Rewrites the version badges (PHP, Moodle, Database) to match the Dockerfile
and, after a drift check, the Upstream status badge. Badge colors and query
options (logo etc.) are preserved; badges that are absent are left absent.
"""

import re
from pathlib import Path
from typing import Dict, Optional

from moodle_image.contexts.drift.detector import DriftReport
from moodle_image.contexts.drift.logger import _log_debug, _log_info
from moodle_image.contexts.inspection.badges import expected_badge_messages, parse_static_badge
from moodle_image.contexts.inspection.patterns import BadgePatterns
from moodle_image.contexts.inspection.versions import ImageVersions

UPSTREAM_LABEL = "Upstream"
UPSTREAM_STATUS = {
    False: ("up to date", "brightgreen"),
    True: ("update available", "orange"),
}


def rewrite_badges(readme_text: str, messages: Dict[str, str], colors: Dict[str, str] = None) -> str:
    """
    Replace the message (and optionally color) of badges by label.

    Args:
        readme_text: README contents
        messages: Badge label -> new message (case-insensitive label match)
        colors: Badge label -> new color

    Returns:
        Updated README contents
    """
    messages = {label.lower(): message for label, message in messages.items()}
    colors = {label.lower(): color for label, color in (colors or {}).items()}

    def replace(match: re.Match) -> str:
        badge = parse_static_badge(match.group(0))
        if badge is None:
            return match.group(0)
        key = badge.label.lower()
        if key not in messages:
            return match.group(0)
        badge.message = messages[key]
        badge.color = colors.get(key, badge.color)
        return badge.to_url()

    return re.sub(BadgePatterns.BADGE_URL, replace, readme_text)


def update_readme_badges(
    readme_text: str, versions: ImageVersions, report: Optional[DriftReport] = None
) -> str:
    """
    Sync README badges with pinned versions and, if given, the drift status.

    Examples:
        >>> update_readme_badges(readme, ImageVersions("8.4", "500", ["PostgreSQL"]))
    """
    messages = expected_badge_messages(versions)
    colors = {}
    if report is not None:
        message, color = UPSTREAM_STATUS[report.has_drift]
        messages[UPSTREAM_LABEL] = message
        colors[UPSTREAM_LABEL] = color
    return rewrite_badges(readme_text, messages, colors)


def update_readme(readme_path: Path, versions: ImageVersions, report: Optional[DriftReport] = None) -> bool:
    """
    Rewrite README badges in place.

    Returns:
        True if the file changed
    """
    original = readme_path.read_text(encoding="utf-8")
    updated = update_readme_badges(original, versions, report)
    if updated == original:
        _log_debug(f"README badges already current: {readme_path}")
        return False

    readme_path.write_text(updated, encoding="utf-8")
    _log_info(f"Updated README badges: {readme_path}")
    return True
