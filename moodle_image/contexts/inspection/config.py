"""
Inspection configuration loading.

configs/artifacts.yaml lists every deployment artifact with the content it must
carry, plus the version policy (supported PHP versions, minimum Moodle branch)
and the PHP extension -> database label mapping used for the README badge.
"""

import os
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv
from omegaconf import OmegaConf

load_dotenv()
PROJECT_ROOT = Path(os.getenv("PROJECT_ROOT", Path(__file__).resolve().parents[3]))
ARTIFACTS_CONFIG_PATH = Path(
    os.getenv("ARTIFACTS_CONFIG_PATH", PROJECT_ROOT / "configs" / "artifacts.yaml")
)

REQUIRED_SECTIONS = ("artifacts", "versions", "supervisor", "databases")


def load_artifacts_config(config_path: Path = None) -> Dict[str, Any]:
    """
    Load artifacts.yaml as a plain dict.

    Args:
        config_path: Optional path to config file (defaults to ARTIFACTS_CONFIG_PATH)

    Returns:
        Dict with "artifacts", "versions", "supervisor" and "databases" keys

    Raises:
        FileNotFoundError: If the config file does not exist
        ValueError: If a required top-level section is missing
    """
    if config_path is None:
        config_path = ARTIFACTS_CONFIG_PATH
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Artifacts config not found: {config_path}")

    config = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)

    missing = [section for section in REQUIRED_SECTIONS if section not in (config or {})]
    if missing:
        raise ValueError(f"Artifacts config {config_path} missing sections: {missing}")

    return config
