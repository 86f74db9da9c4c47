"""Custom exceptions for the drift context."""

from typing import Optional


class IssueTrackerError(Exception):
    """
    Exception raised when a GitHub issue API call fails.

    Attributes:
        message: Error description
        status_code: HTTP status code, if a response was received
        response_text: Response body, truncated
    """

    def __init__(self, message: str, status_code: Optional[int] = None, response_text: Optional[str] = None):
        self.message = message
        self.status_code = status_code
        self.response_text = response_text

        parts = [message]
        if status_code is not None:
            parts.append(f"HTTP status: {status_code}")
        if response_text:
            snippet = response_text[:200] + "..." if len(response_text) > 200 else response_text
            parts.append(f"Response: {snippet}")

        super().__init__("\n".join(parts))
