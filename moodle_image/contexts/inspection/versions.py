"""
Version token extraction and consistency checks.

The image recipe is the authoritative record of the PHP runtime version and the
Moodle branch. Every other artifact that repeats a token must repeat it
verbatim (or in one predictable derived form, like the Moodle release shown on
the README badge).

Examples:
    >>> versions = extract_image_versions(dockerfile_text)
    >>> versions.php, versions.moodle_branch, versions.moodle_release
    ('8.3', '405', '4.5')

    >>> check_php_version_consistency(dockerfile_text, supervisor_text)
    '8.3'
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from moodle_image.contexts.inspection.exceptions import (
    UnsupportedVersionError,
    VersionMismatchError,
    VersionNotFoundError,
)
from moodle_image.contexts.inspection.patterns import (
    DockerfilePatterns,
    SupervisorPatterns,
    find_first,
)

DATABASE_LABEL_SEPARATOR = " | "


@dataclass
class ImageVersions:
    """
    Version tokens pinned by the image recipe.

    Attributes:
        php: PHP runtime version (e.g., "8.3")
        moodle_branch: Moodle stable branch number (e.g., "405")
        databases: Database labels supported by installed PHP extensions
    """

    php: str
    moodle_branch: str
    databases: List[str] = field(default_factory=list)

    @property
    def moodle_release(self) -> str:
        """Moodle release as displayed to users ("405" -> "4.5")."""
        return moodle_release_from_branch(self.moodle_branch)

    @property
    def database_label(self) -> str:
        """Database badge text (e.g., "PostgreSQL | MySQL")."""
        return DATABASE_LABEL_SEPARATOR.join(self.databases)


def extract_version(text: str, pattern: str, token: str, source: str) -> str:
    """
    Extract the first capture group of pattern from text.

    Raises:
        VersionNotFoundError: If the pattern does not match
    """
    value = find_first(pattern, text)
    if value is None:
        raise VersionNotFoundError(token, source, pattern)
    return value


def extract_php_version(dockerfile_text: str) -> str:
    """PHP runtime version from the Dockerfile (php8.3 -> "8.3")."""
    return extract_version(
        dockerfile_text, DockerfilePatterns.PHP_VERSION, "PHP version", "Dockerfile"
    )


def extract_moodle_branch(dockerfile_text: str) -> str:
    """Moodle branch number from the Dockerfile (stable405 -> "405")."""
    return extract_version(
        dockerfile_text, DockerfilePatterns.MOODLE_BRANCH, "Moodle version", "Dockerfile"
    )


def extract_databases(dockerfile_text: str, database_labels: Dict[str, str]) -> List[str]:
    """
    Database labels for the PHP database extensions installed by the Dockerfile.

    Labels are returned in the order of database_labels, not in install order,
    so the README badge text is stable.
    """
    installed = set(re.findall(DockerfilePatterns.DATABASE_EXTENSION, dockerfile_text))
    return [label for extension, label in database_labels.items() if extension in installed]


def extract_image_versions(dockerfile_text: str, database_labels: Dict[str, str] = None) -> ImageVersions:
    """Extract every pinned version token from the Dockerfile."""
    return ImageVersions(
        php=extract_php_version(dockerfile_text),
        moodle_branch=extract_moodle_branch(dockerfile_text),
        databases=extract_databases(dockerfile_text, database_labels or {}),
    )


def moodle_release_from_branch(branch: str) -> str:
    """
    Convert a Moodle branch number to its release label.

    Branches before 3.10 are two digits (major, minor); later ones are the
    major followed by a two-digit minor.

    Examples:
        >>> moodle_release_from_branch("405")
        '4.5'
        >>> moodle_release_from_branch("310")
        '3.10'
        >>> moodle_release_from_branch("39")
        '3.9'
    """
    number = int(branch)
    if number < 100:
        return f"{number // 10}.{number % 10}"
    return f"{number // 100}.{number % 100}"


def parse_version(version: str) -> Tuple[int, ...]:
    """Numeric tuple for comparison ("8.10" > "8.9", unlike string comparison)."""
    return tuple(int(part) for part in version.split("."))


def check_php_version_consistency(dockerfile_text: str, supervisor_text: str) -> str:
    """
    Verify the PHP version in the Dockerfile matches supervisord.conf.

    Compares the Dockerfile token (php8.3) against both the php-fpm binary
    (php-fpm8.3) and the PHP config path (/etc/php/8.3/) in supervisord.conf.

    Args:
        dockerfile_text: Raw Dockerfile contents
        supervisor_text: Raw supervisord.conf contents

    Returns:
        The shared PHP version

    Raises:
        VersionNotFoundError: If any of the three tokens cannot be found
        VersionMismatchError: If a supervisord.conf token differs from the Dockerfile
    """
    dockerfile_version = extract_php_version(dockerfile_text)

    fpm_version = extract_version(
        supervisor_text,
        SupervisorPatterns.PHP_FPM_VERSION,
        "PHP-FPM version",
        "supervisord.conf",
    )
    if fpm_version != dockerfile_version:
        raise VersionMismatchError(
            "PHP version", "Dockerfile", dockerfile_version, "php-fpm in supervisord.conf", fpm_version
        )

    config_path_version = extract_version(
        supervisor_text,
        SupervisorPatterns.PHP_CONFIG_PATH_VERSION,
        "PHP config path",
        "supervisord.conf",
    )
    if config_path_version != dockerfile_version:
        raise VersionMismatchError(
            "PHP version",
            "Dockerfile",
            dockerfile_version,
            "PHP config path in supervisord.conf",
            config_path_version,
        )

    return dockerfile_version


def check_php_version_supported(
    php_version: str, supported_versions: Sequence[str], minimum_version: str
) -> None:
    """
    Verify the PHP version is a supported release.

    Raises:
        UnsupportedVersionError: If not listed in supported_versions or below minimum_version
    """
    if php_version not in supported_versions:
        raise UnsupportedVersionError(
            f"PHP version {php_version} should be in supported versions {list(supported_versions)}",
            php_version,
        )
    if parse_version(php_version) < parse_version(minimum_version):
        raise UnsupportedVersionError(
            f"PHP version {php_version} should be {minimum_version} or higher for Moodle compatibility",
            php_version,
        )


def check_moodle_branch_supported(moodle_branch: str, minimum_branch: int) -> None:
    """
    Verify the Moodle branch is at least the minimum supported release.

    Raises:
        UnsupportedVersionError: If the branch number is below minimum_branch
    """
    if int(moodle_branch) < int(minimum_branch):
        raise UnsupportedVersionError(
            f"Moodle version {moodle_release_from_branch(moodle_branch)} should be "
            f"{moodle_release_from_branch(str(minimum_branch))} or higher",
            moodle_branch,
        )
