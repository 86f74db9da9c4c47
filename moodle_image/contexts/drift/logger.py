"""
Drift context logger.

Provides logging interface for the drift context with automatic [drift] prefix.
All drift modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from moodle_image.utils.logger import setup_logger as _setup_logger

load_dotenv()

CONTEXT_PREFIX = "[drift]"


def setup_drift_logger(log_dir: Path, extra_provenance: dict = None) -> Path:
    """Setup logger for drift context. Returns path to log file."""
    return _setup_logger(context_name="drift", log_dir=log_dir, extra_provenance=extra_provenance)


# Wrapper functions with automatic [drift] prefix


def _log_info(message: str) -> None:
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level drift-specific logging helpers


def log_fetch_start(component: str, url: str) -> None:
    _log_debug(f"Fetching latest {component} from {url}")


def log_fetch_failure(component: str, url: str, error: Exception) -> None:
    """Upstream failures degrade to an empty value; record why."""
    _log_warning(f"Could not fetch latest {component} ({error.__class__.__name__}): {error}")
    _log_debug(f"  URL: {url}")


def log_drift_report(report) -> None:
    """
    Log the outcome of a drift comparison.

    Args:
        report: DriftReport from detect_drift()
    """
    for item in report.items:
        if not item.latest:
            _log_warning(f"{item.component}: upstream unknown, pinned {item.current}")
        elif item.drifted:
            _log_warning(f"{item.component}: {item.current} -> {item.latest} available")
        else:
            _log_info(f"{item.component}: {item.current} is current")

    if report.has_drift:
        _log_warning(f"Drift detected in {len(report.drifted_items)} component(s).")
    else:
        _log_success("No drift detected.")


def log_issue_update(issue_number: int, created: bool) -> None:
    action = "Opened" if created else "Updated"
    _log_success(f"{action} tracking issue #{issue_number}")
