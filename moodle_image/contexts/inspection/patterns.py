"""
Artifact Pattern Constants

Centralized regex patterns used to pull version tokens and structure out of
the deployment artifacts. Organized into frozen dataclasses by artifact.
"""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class DockerfilePatterns:
    """
    Version tokens recorded in the image recipe.

    The first match wins, so package names (php8.3-fpm) and the Moodle branch
    comment (stable405) are what the patterns are written against.
    """
    PHP_VERSION: str = r'php(\d+\.\d+)'
    MOODLE_BRANCH: str = r'stable(\d+)'
    DATABASE_EXTENSION: str = r'php\d+\.\d+-(\w+)'
    COPY_INSTRUCTION: str = r'^\s*(COPY|ADD)\s+(.+?)\s*$'


@dataclass(frozen=True)
class SupervisorPatterns:
    """Version tokens recorded in supervisord.conf."""
    PHP_FPM_VERSION: str = r'php-fpm(\d+\.\d+)'
    PHP_CONFIG_PATH_VERSION: str = r'/etc/php/(\d+\.\d+)/'


@dataclass(frozen=True)
class BadgePatterns:
    """
    shields.io static badge URLs in the README.

    Path is <label>-<message>-<color>; a literal dash is written "--" and a
    literal underscore "__".
    """
    BADGE_URL: str = r'https://img\.shields\.io/badge/(?P<path>[^?)\s]+)(?P<query>\?[^)\s]*)?'
    FIELD_SEPARATOR: str = r'(?<!-)-(?!-)'


@dataclass(frozen=True)
class WorkflowPatterns:
    """Shell constructs inside CI workflow run blocks."""
    LINE_CONTINUATION: str = r'\\\n\s*'
    # Leading "- " list marker and "run:" key of a step line
    RUN_PREFIX: str = r'^\s*(?:-\s+)?(?:run:\s*)?'
    # curl in command position (not an argument such as "apt-get install curl")
    CURL_COMMAND: str = r'(?:^|[(|;&`])\s*curl(?=\s|$)'
    # [ a = b ], [ a != b ], [[ a == b ]]
    STRING_COMPARISON: str = r'\[\[?\s+(\S+)\s+(!=|==|=)\s+(\S+)\s+\]\]?'


@dataclass(frozen=True)
class CronPatterns:
    """Cron schedule lines."""
    ENVIRONMENT_ASSIGNMENT: str = r'^[A-Za-z_][A-Za-z0-9_]*\s*='
    SPECIAL_SCHEDULE: str = r'^@(reboot|yearly|annually|monthly|weekly|daily|midnight|hourly)\s+\S'


def find_first(pattern: str, text: str):
    """Return the first capture group of pattern in text, or None."""
    match = re.search(pattern, text)
    return match.group(1) if match else None
