"""
Drift detection.

Compares versions pinned in the Dockerfile with the latest upstream versions
using exact string equality. An empty upstream value (failed fetch) is never
reported as drift.
"""

from dataclasses import dataclass, field
from typing import List

from moodle_image.contexts.drift.upstream import UpstreamVersions
from moodle_image.contexts.inspection.versions import ImageVersions, moodle_release_from_branch
from moodle_image.utils.timestamp import now_exact


@dataclass
class DriftItem:
    """
    One pinned version compared against upstream.

    Attributes:
        component: "PHP" or "Moodle"
        current: Pinned value
        latest: Upstream value ("" if unknown)
        display_current: Human-readable pinned value (e.g., "4.5" for branch "405")
        display_latest: Human-readable upstream value
    """

    component: str
    current: str
    latest: str
    display_current: str = ""
    display_latest: str = ""

    def __post_init__(self):
        self.display_current = self.display_current or self.current
        self.display_latest = self.display_latest or self.latest

    @property
    def drifted(self) -> bool:
        return bool(self.latest) and self.latest != self.current


@dataclass
class DriftReport:
    """Result of comparing all pinned versions with upstream."""

    items: List[DriftItem]
    checked_at: str = field(default_factory=now_exact)

    @property
    def drifted_items(self) -> List[DriftItem]:
        return [item for item in self.items if item.drifted]

    @property
    def has_drift(self) -> bool:
        return bool(self.drifted_items)

    def to_markdown(self) -> str:
        """Issue body: a status table plus a checklist of files to update."""
        lines = [
            "The scheduled version check found newer upstream releases.",
            "",
            "| Component | Pinned | Latest | Status |",
            "|-----------|--------|--------|--------|",
        ]
        for item in self.items:
            if not item.latest:
                status = "unknown"
            elif item.drifted:
                status = "update available"
            else:
                status = "up to date"
            lines.append(
                f"| {item.component} | {item.display_current} | {item.display_latest or '-'} | {status} |"
            )

        lines.append("")
        if any(item.component == "PHP" for item in self.drifted_items):
            lines.append("- [ ] Bump `php8.X` packages and config paths in `Dockerfile`")
            lines.append("- [ ] Bump `php-fpm8.X` and `/etc/php/8.X/` in `docker/supervisor/supervisord.conf`")
        if any(item.component == "Moodle" for item in self.drifted_items):
            lines.append("- [ ] Bump `MOODLE_NNN_STABLE` / `stableNNN` in `Dockerfile`")
        lines.append("")
        lines.append(f"_Last checked: {self.checked_at}_")
        return "\n".join(lines)


def detect_drift(current: ImageVersions, latest: UpstreamVersions) -> DriftReport:
    """
    Compare pinned versions with upstream.

    Args:
        current: Versions extracted from the Dockerfile
        latest: Versions fetched from upstream

    Returns:
        DriftReport with one item per component
    """
    return DriftReport(
        items=[
            DriftItem("PHP", current.php, latest.php),
            DriftItem(
                "Moodle",
                current.moodle_branch,
                latest.moodle_branch,
                display_current=current.moodle_release,
                display_latest=moodle_release_from_branch(latest.moodle_branch) if latest.moodle_branch else "",
            ),
        ]
    )
