"""
Artifact inspection orchestration.

Runs every artifact check against a project root and collects the outcomes in
an InspectionReport. Individual checks raise ArtifactCheckError subclasses;
the inspector records each failure and keeps going so one broken file does not
hide problems in the others.

Example:
    >>> report = inspect_artifacts(Path("."))
    >>> if not report.is_valid:
    ...     print(report.summary())
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from moodle_image.contexts.inspection.artifacts import (
    artifact_specs,
    check_recipe_references,
    check_required_content,
    read_artifact,
)
from moodle_image.contexts.inspection.badges import check_readme_badges
from moodle_image.contexts.inspection.config import ARTIFACTS_CONFIG_PATH, load_artifacts_config
from moodle_image.contexts.inspection.exceptions import ArtifactCheckError
from moodle_image.contexts.inspection.logger import log_inspection_result, log_inspection_start
from moodle_image.contexts.inspection.structure import (
    check_cron_schedule,
    check_supervisor_programs,
    check_workflow_comparisons,
    check_workflow_timeouts,
)
from moodle_image.contexts.inspection.versions import (
    ImageVersions,
    check_moodle_branch_supported,
    check_php_version_consistency,
    check_php_version_supported,
    extract_image_versions,
)


@dataclass
class CheckResult:
    """
    Outcome of one artifact check.

    Attributes:
        name: Check identifier (e.g., "php_version_consistency")
        passed: Whether the check passed
        message: Failure message (empty when passed)
        artifact: Artifact the failure points at, if known
    """

    name: str
    passed: bool
    message: str = ""
    artifact: Optional[Path] = None


@dataclass
class InspectionReport:
    """All check results for one project root."""

    project_root: Path
    results: List[CheckResult] = field(default_factory=list)
    versions: Optional[ImageVersions] = None

    @property
    def is_valid(self) -> bool:
        return all(result.passed for result in self.results)

    @property
    def failures(self) -> List[CheckResult]:
        return [result for result in self.results if not result.passed]

    def get(self, name: str) -> Optional[CheckResult]:
        """Result for a named check, or None if it did not run."""
        for result in self.results:
            if result.name == name:
                return result
        return None

    def summary(self) -> str:
        lines = [f"{len(self.results) - len(self.failures)}/{len(self.results)} checks passed"]
        for failure in self.failures:
            lines.append(f"  ✗ {failure.name}: {failure.message}")
        return "\n".join(lines)


def run_check(name: str, check: Callable[[], object]) -> CheckResult:
    """Run one check, converting an ArtifactCheckError into a failed result."""
    try:
        check()
    except ArtifactCheckError as e:
        return CheckResult(name=name, passed=False, message=str(e), artifact=e.artifact)
    return CheckResult(name=name, passed=True)


def inspect_artifacts(project_root: Path, config_path: Path = None, log: bool = True) -> InspectionReport:
    """
    Run every artifact check for a project.

    Checks, in order:
    1. Each configured artifact exists, is non-empty and has its required content
    2. Every Dockerfile COPY/ADD source exists and is non-empty
    3. PHP and Moodle versions are supported
    4. PHP version agrees between Dockerfile and supervisord.conf
    5. Supervisor programs, cron schedule and workflow conventions
    6. README badges match the Dockerfile

    Checks that need an artifact which failed to load are skipped (reported
    by the presence check instead).

    Args:
        project_root: Repository root containing the artifacts
        config_path: Optional path to artifacts.yaml (defaults to ARTIFACTS_CONFIG_PATH)
        log: Emit Tier 1 log lines for the run

    Returns:
        InspectionReport with one CheckResult per check
    """
    project_root = Path(project_root)
    config_path = config_path or ARTIFACTS_CONFIG_PATH
    config = load_artifacts_config(config_path)
    specs = artifact_specs(config)

    if log:
        log_inspection_start(project_root, config_path)

    report = InspectionReport(project_root=project_root)
    contents: Dict[str, str] = {}

    # 1. Presence and required content
    for name, spec in specs.items():
        path = project_root / spec.path

        def check_artifact(spec=spec, path=path, name=name):
            contents[name] = read_artifact(path, spec.description)
            check_required_content(contents[name], spec)

        report.results.append(run_check(f"{name}_content", check_artifact))

    dockerfile = contents.get("dockerfile")
    supervisor = contents.get("supervisor")
    version_policy = config["versions"]

    if dockerfile is not None:
        # 2. Recipe references
        report.results.append(
            run_check("recipe_references", lambda: check_recipe_references(dockerfile, project_root))
        )

        # 3. Supported versions
        def extract_versions():
            report.versions = extract_image_versions(dockerfile, config["databases"])

        report.results.append(run_check("version_extraction", extract_versions))

        if report.versions is not None:
            versions = report.versions
            report.results.append(
                run_check(
                    "php_version_supported",
                    lambda: check_php_version_supported(
                        versions.php, version_policy["supported_php"], version_policy["minimum_php"]
                    ),
                )
            )
            report.results.append(
                run_check(
                    "moodle_version_supported",
                    lambda: check_moodle_branch_supported(
                        versions.moodle_branch, version_policy["minimum_moodle_branch"]
                    ),
                )
            )

    # 4. Cross-artifact consistency
    if dockerfile is not None and supervisor is not None:
        report.results.append(
            run_check(
                "php_version_consistency",
                lambda: check_php_version_consistency(dockerfile, supervisor),
            )
        )

    # 5. Structure
    if supervisor is not None:
        report.results.append(
            run_check(
                "supervisor_programs",
                lambda: check_supervisor_programs(supervisor, config["supervisor"]["required_programs"]),
            )
        )
    if "cron" in contents:
        report.results.append(run_check("cron_schedule", lambda: check_cron_schedule(contents["cron"])))
    if "workflow" in contents:
        workflow = contents["workflow"]
        report.results.append(run_check("workflow_timeouts", lambda: check_workflow_timeouts(workflow)))
        report.results.append(run_check("workflow_comparisons", lambda: check_workflow_comparisons(workflow)))

    # 6. README badges
    if "readme" in contents and report.versions is not None:
        readme = contents["readme"]
        versions = report.versions
        report.results.append(run_check("readme_badges", lambda: check_readme_badges(readme, versions)))

    if log:
        log_inspection_result(report)

    return report
