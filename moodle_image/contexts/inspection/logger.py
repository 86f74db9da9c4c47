"""
Inspection context logger.

Provides logging interface for the inspection context with automatic [inspect] prefix.
All inspection modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from moodle_image.utils.logger import setup_logger as _setup_logger

load_dotenv()

CONTEXT_PREFIX = "[inspect]"


def setup_inspection_logger(log_dir: Path, project_root: Path) -> Path:
    """
    Setup logger for inspection context.

    Args:
        log_dir: Directory for this inspection session
        project_root: Repository whose artifacts are being inspected

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="inspect",
        log_dir=log_dir,
        extra_provenance={"Project root": project_root},
    )


# Wrapper functions with automatic [inspect] prefix


def _log_info(message: str) -> None:
    """Log info message with [inspect] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [inspect] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [inspect] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [inspect] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level inspection-specific logging helpers


def log_inspection_start(project_root: Path, config_path: Path) -> None:
    """Log start of an inspection run."""
    _log_info(f"Inspecting artifacts in {project_root}")
    _log_debug(f"  Config: {config_path}")


def log_check_result(result) -> None:
    """Log a single CheckResult; failures at ERROR, passes at DEBUG."""
    if result.passed:
        _log_debug(f"  ✓ {result.name}")
    else:
        _log_error(f"  ✗ {result.name}: {result.message}")


def log_inspection_result(report) -> None:
    """
    Log the outcome of an inspection run.

    Args:
        report: InspectionReport from inspect_artifacts()
    """
    for result in report.results:
        log_check_result(result)

    if report.is_valid:
        _log_success(f"All {len(report.results)} checks passed.")
    else:
        _log_error(f"{len(report.failures)} of {len(report.results)} checks failed.")
