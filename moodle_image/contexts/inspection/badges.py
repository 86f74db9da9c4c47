"""
shields.io badge parsing and rendering.

README badges are static shields.io URLs of the form
https://img.shields.io/badge/<label>-<message>-<color>?<query>. Within the
label and message a literal "-" is written "--", a literal "_" is written
"__", a single "_" means a space, and everything else is percent-encoded.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional
from urllib.parse import quote, unquote

from moodle_image.contexts.inspection.exceptions import ContentCheckError, VersionMismatchError
from moodle_image.contexts.inspection.patterns import BadgePatterns
from moodle_image.contexts.inspection.versions import ImageVersions

BADGE_BASE_URL = "https://img.shields.io/badge/"

# Placeholders used while unescaping, chosen so they cannot collide with URL text
_DASH = "\x00"
_UNDERSCORE = "\x01"


def escape_badge_text(text: str) -> str:
    """Escape label/message text for a badge path segment."""
    escaped = text.replace("-", "--").replace("_", "__")
    return quote(escaped, safe="-_.")


def unescape_badge_text(text: str) -> str:
    """Inverse of escape_badge_text; also accepts "_" for a space."""
    text = text.replace("--", _DASH).replace("__", _UNDERSCORE)
    text = text.replace("_", " ")
    text = text.replace(_DASH, "-").replace(_UNDERSCORE, "_")
    return unquote(text)


@dataclass
class Badge:
    """
    A static shields.io badge.

    Attributes:
        label: Left-hand text (e.g., "PHP")
        message: Right-hand text (e.g., "8.3")
        color: Badge color (named or hex without #)
        query: Original query string including "?" (logo options), kept verbatim
    """

    label: str
    message: str
    color: str
    query: str = ""

    @classmethod
    def from_url(cls, url: str) -> "Badge":
        """
        Parse a badge URL.

        Raises:
            ValueError: If url is not a static badge URL with three fields
        """
        match = re.fullmatch(BadgePatterns.BADGE_URL, url)
        if not match:
            raise ValueError(f"Not a shields.io static badge URL: {url}")

        fields = re.split(BadgePatterns.FIELD_SEPARATOR, match.group("path"))
        if len(fields) != 3:
            raise ValueError(f"Badge URL should have label-message-color fields: {url}")

        label, message, color = fields
        return cls(
            label=unescape_badge_text(label),
            message=unescape_badge_text(message),
            color=color,
            query=match.group("query") or "",
        )

    def to_url(self) -> str:
        return (
            f"{BADGE_BASE_URL}{escape_badge_text(self.label)}-"
            f"{escape_badge_text(self.message)}-{self.color}{self.query}"
        )


def parse_static_badge(url: str) -> Optional[Badge]:
    """
    Badge for a label-message-color static URL, or None.

    Two-field (message-color) and dynamic badges carry no label to match
    against, so they are not treated as version badges.
    """
    try:
        return Badge.from_url(url)
    except ValueError:
        return None


def find_badges(readme_text: str) -> List[Badge]:
    """All label-message-color static badges in the README, in document order."""
    badges = (parse_static_badge(match.group(0)) for match in re.finditer(BadgePatterns.BADGE_URL, readme_text))
    return [badge for badge in badges if badge is not None]


def find_badge(readme_text: str, label: str) -> Optional[Badge]:
    """First badge whose label matches (case-insensitive), or None."""
    for badge in find_badges(readme_text):
        if badge.label.lower() == label.lower():
            return badge
    return None


def expected_badge_messages(versions: ImageVersions) -> Dict[str, str]:
    """Badge label -> message the README should display for these versions."""
    return {
        "PHP": versions.php,
        "Moodle": versions.moodle_release,
        "Database": versions.database_label,
    }


def check_readme_badges(readme_text: str, versions: ImageVersions) -> None:
    """
    Verify README version badges match the tokens pinned in the Dockerfile.

    Raises:
        ContentCheckError: If a version badge is missing from the README
        VersionMismatchError: If a badge displays a different value
    """
    for label, expected in expected_badge_messages(versions).items():
        badge = find_badge(readme_text, label)
        if badge is None:
            raise ContentCheckError(f"README should display a {label} badge", "README.md", expected=label)
        if badge.message != expected:
            raise VersionMismatchError(
                f"{label} version", "Dockerfile", expected, "README badge", badge.message
            )
