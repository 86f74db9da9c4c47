"""Unit tests for Tier 1 logger setup."""

import pytest
from loguru import logger

from moodle_image.utils.logger import LEVEL_COLORS, setup_logger


@pytest.mark.unit
def test_setup_logger_writes_provenance(tmp_path):
    log_dir = tmp_path / "inspect_20251114_123456"

    log_file = setup_logger("inspect", log_dir, {"Project root": "/srv/moodle-image"})
    logger.debug("file only")
    logger.remove()

    assert log_file == log_dir / "inspect.log"
    content = log_file.read_text(encoding="utf-8")
    assert "Working directory:" in content
    assert "Project root: /srv/moodle-image" in content
    assert "file only" in content


@pytest.mark.unit
def test_setup_logger_applies_level_colors(tmp_path):
    setup_logger("drift", tmp_path)
    logger.remove()

    for level_name, color in LEVEL_COLORS.items():
        assert logger.level(level_name).color == color
