"""Upstream endpoint configuration (configs/upstream.yaml)."""

import os
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv
from omegaconf import OmegaConf

load_dotenv()
PROJECT_ROOT = Path(os.getenv("PROJECT_ROOT", Path(__file__).resolve().parents[3]))
UPSTREAM_CONFIG_PATH = Path(
    os.getenv("UPSTREAM_CONFIG_PATH", PROJECT_ROOT / "configs" / "upstream.yaml")
)


def load_upstream_config(config_path: Path = None) -> Dict[str, Any]:
    """
    Load upstream.yaml as a plain dict.

    Args:
        config_path: Optional path to config file (defaults to UPSTREAM_CONFIG_PATH)

    Returns:
        Dict with "php", "moodle", "timeouts", "user_agent" and "github" keys
    """
    if config_path is None:
        config_path = UPSTREAM_CONFIG_PATH

    return OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)
