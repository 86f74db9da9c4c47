"""Unit tests for drift detection and README badge updates."""

import pytest

from moodle_image.contexts.drift.detector import DriftItem, detect_drift
from moodle_image.contexts.drift.readme import rewrite_badges, update_readme, update_readme_badges
from moodle_image.contexts.drift.upstream import UpstreamVersions, normalize_moodle_branch, php_minor_version
from moodle_image.contexts.inspection.badges import find_badge
from moodle_image.contexts.inspection.versions import ImageVersions

PINNED = ImageVersions(php="8.3", moodle_branch="405", databases=["PostgreSQL", "MySQL"])

README = """\
# moodle-image

[![PHP](https://img.shields.io/badge/PHP-8.3-777BB4?logo=php&logoColor=white)](https://www.php.net/)
[![Moodle](https://img.shields.io/badge/Moodle-4.5-F98012?logo=moodle)](https://moodle.org/)
[![Database](https://img.shields.io/badge/Database-PostgreSQL%20%7C%20MySQL-336791)](https://docs.moodle.org/)
[![Upstream](https://img.shields.io/badge/Upstream-up%20to%20date-brightgreen)](.github/workflows/check.yml)

Body text mentioning PHP-8.3 stays untouched.
"""


class TestDriftItem:

    @pytest.mark.unit
    def test_equal_versions_do_not_drift(self):
        assert not DriftItem("PHP", "8.3", "8.3").drifted

    @pytest.mark.unit
    def test_different_versions_drift(self):
        assert DriftItem("PHP", "8.3", "8.4").drifted

    @pytest.mark.unit
    def test_empty_upstream_is_not_drift(self):
        assert not DriftItem("PHP", "8.3", "").drifted

    @pytest.mark.unit
    def test_comparison_is_exact_string_equality(self):
        assert DriftItem("PHP", "8.3", "8.3.0").drifted


class TestDetectDrift:

    @pytest.mark.unit
    def test_no_drift(self):
        report = detect_drift(PINNED, UpstreamVersions(php="8.3", moodle_branch="405"))

        assert not report.has_drift
        assert report.drifted_items == []

    @pytest.mark.unit
    def test_moodle_drift_uses_release_display(self):
        report = detect_drift(PINNED, UpstreamVersions(php="8.3", moodle_branch="500"))

        assert report.has_drift
        [item] = report.drifted_items
        assert item.component == "Moodle"
        assert (item.display_current, item.display_latest) == ("4.5", "5.0")

    @pytest.mark.unit
    def test_failed_fetch_reports_no_drift(self):
        report = detect_drift(PINNED, UpstreamVersions())
        assert not report.has_drift

    @pytest.mark.unit
    def test_null_workflow_values_report_no_drift(self):
        latest = UpstreamVersions(php=php_minor_version("null"), moodle_branch=normalize_moodle_branch("null"))
        report = detect_drift(PINNED, latest)

        assert not report.has_drift
        assert [item.latest for item in report.items] == ["", ""]

    @pytest.mark.unit
    def test_markdown_lists_status_and_checklist(self):
        report = detect_drift(PINNED, UpstreamVersions(php="8.4", moodle_branch=""))
        body = report.to_markdown()

        assert "| PHP | 8.3 | 8.4 | update available |" in body
        assert "| Moodle | 4.5 | - | unknown |" in body
        assert "php-fpm8.X" in body
        assert "stableNNN" not in body
        assert report.checked_at in body


class TestReadmeBadges:

    @pytest.mark.unit
    def test_in_sync_readme_is_unchanged(self):
        report = detect_drift(PINNED, UpstreamVersions(php="8.3", moodle_branch="405"))
        assert update_readme_badges(README, PINNED, report) == README

    @pytest.mark.unit
    def test_versions_are_rewritten_preserving_query(self):
        bumped = ImageVersions(php="8.4", moodle_branch="500", databases=["PostgreSQL"])
        updated = update_readme_badges(README, bumped)

        assert "https://img.shields.io/badge/PHP-8.4-777BB4?logo=php&logoColor=white" in updated
        assert find_badge(updated, "Moodle").message == "5.0"
        assert find_badge(updated, "Database").message == "PostgreSQL"
        assert "Body text mentioning PHP-8.3 stays untouched." in updated

    @pytest.mark.unit
    def test_upstream_badge_reflects_drift(self):
        report = detect_drift(PINNED, UpstreamVersions(php="8.4", moodle_branch="405"))
        updated = update_readme_badges(README, PINNED, report)

        badge = find_badge(updated, "Upstream")
        assert badge.message == "update available"
        assert badge.color == "orange"

    @pytest.mark.unit
    def test_upstream_badge_untouched_without_report(self):
        updated = update_readme_badges(README, PINNED)
        assert find_badge(updated, "Upstream").message == "up to date"

    @pytest.mark.unit
    def test_rewrite_badges_ignores_unknown_labels(self):
        assert rewrite_badges(README, {"License": "MIT"}) == README

    @pytest.mark.unit
    def test_update_readme_writes_only_on_change(self, tmp_path):
        readme_path = tmp_path / "README.md"
        readme_path.write_text(README, encoding="utf-8")

        assert update_readme(readme_path, PINNED) is False

        bumped = ImageVersions(php="8.4", moodle_branch="405", databases=["PostgreSQL", "MySQL"])
        assert update_readme(readme_path, bumped) is True
        assert find_badge(readme_path.read_text(encoding="utf-8"), "PHP").message == "8.4"

    @pytest.mark.unit
    def test_two_field_and_dynamic_badges_are_left_alone(self):
        extra = (
            "[![license](https://img.shields.io/badge/license-MIT)](LICENSE)\n"
            "![v](https://img.shields.io/badge/dynamic/json?url=https://example.invalid/v.json&query=$.version)\n"
        )
        bumped = ImageVersions(php="8.4", moodle_branch="405", databases=["PostgreSQL", "MySQL"])

        updated = update_readme_badges(README + extra, bumped)

        assert updated.endswith(extra)
        assert find_badge(updated, "PHP").message == "8.4"
