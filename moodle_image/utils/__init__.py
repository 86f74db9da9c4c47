"""
Shared utilities for moodle-image.

Common functionality used across contexts:
- Logger setup with provenance
- Check event log (JSON Lines)
- Timestamps
"""

from moodle_image.utils.timestamp import now, now_exact

__all__ = ["now", "now_exact"]
