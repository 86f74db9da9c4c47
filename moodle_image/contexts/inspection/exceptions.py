"""Custom exceptions for the inspection context with artifact references."""

from pathlib import Path
from typing import Optional


class ArtifactCheckError(Exception):
    """
    Base exception for a failed artifact check.

    Attributes:
        message: Error description
        artifact: Path (or display name) of the artifact being checked
    """

    def __init__(self, message: str, artifact: Optional[Path] = None):
        self.message = message
        self.artifact = artifact

        parts = [message]
        if artifact is not None:
            parts.append(f"Artifact: {artifact}")

        super().__init__("\n".join(parts))


class ArtifactMissingError(ArtifactCheckError):
    """Raised when an expected artifact file does not exist."""

    def __init__(self, artifact: Path, description: Optional[str] = None):
        self.description = description
        label = description or "Artifact"
        super().__init__(f"{label} should exist", artifact)


class EmptyArtifactError(ArtifactCheckError):
    """Raised when an artifact exists but has no content."""

    def __init__(self, artifact: Path, description: Optional[str] = None):
        self.description = description
        label = description or "Artifact"
        super().__init__(f"{label} should not be empty", artifact)


class ContentCheckError(ArtifactCheckError):
    """
    Raised when an artifact lacks required content.

    Attributes:
        expected: The substring, prefix or construct that was expected
        snippet: Offending text, if a specific fragment was at fault
    """

    def __init__(
        self,
        message: str,
        artifact: Optional[Path] = None,
        expected: Optional[str] = None,
        snippet: Optional[str] = None,
    ):
        self.expected = expected
        self.snippet = snippet

        parts = [message]
        if expected is not None:
            parts.append(f"Expected: {expected!r}")
        if snippet:
            snippet = snippet[:200] + "..." if len(snippet) > 200 else snippet
            parts.append(f"Found: {snippet}")

        super().__init__("\n".join(parts), artifact)


class VersionNotFoundError(ArtifactCheckError):
    """
    Raised when a version pattern does not match an artifact.

    Attributes:
        token: Name of the version token (e.g., "PHP version")
        source: Name of the artifact searched (e.g., "Dockerfile")
        pattern: Regex that failed to match
    """

    def __init__(self, token: str, source: str, pattern: str):
        self.token = token
        self.source = source
        self.pattern = pattern
        super().__init__(f"{token} not found in {source} (pattern: {pattern})")


class VersionMismatchError(ArtifactCheckError):
    """
    Raised when the same version token differs between two artifacts.

    Attributes:
        expected: Value from the authoritative artifact
        actual: Value from the artifact that disagrees
    """

    def __init__(self, token: str, expected_source: str, expected: str, actual_source: str, actual: str):
        self.token = token
        self.expected_source = expected_source
        self.expected = expected
        self.actual_source = actual_source
        self.actual = actual
        super().__init__(
            f"{token} in {expected_source} ({expected}) does not match {actual_source} ({actual})"
        )


class UnsupportedVersionError(ArtifactCheckError):
    """Raised when a pinned version falls outside the supported range."""

    def __init__(self, message: str, version: str):
        self.version = version
        super().__init__(message)


class UnreadableArtifactError(ArtifactCheckError):
    """Raised when an artifact exists but is not valid UTF-8 text."""

    def __init__(self, artifact: Path, description: Optional[str] = None, reason: Optional[str] = None):
        self.description = description
        self.reason = reason
        label = description or "Artifact"
        message = f"{label} should be UTF-8 text"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, artifact)
