"""Configuration file loading and CLI overrides for runtime tunables.

Values from the YAML config file fill in ``Constants`` unless the CLI already
supplied them; the CLI always has highest precedence.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import yaml

from constants import Constants

logger = logging.getLogger(__name__)

# config key -> (Constants attribute, CLI dest)
_SETTINGS = {
    "repositories": ("REMOTE_REPOSITORIES", "REPOSITORIES"),
    "local_repository": ("LOCAL_REPOSITORY", "LOCAL_REPOSITORY"),
    "provision_id": ("PROVISION_ID", "PROVISION_ID"),
    "runner": ("RUNNER", "RUNNER"),
    "framework": ("FRAMEWORK", "FRAMEWORK"),
    "request_timeout": ("REQUEST_TIMEOUT", None),
}


def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    """Load the ``construct`` section (or the whole document) of a YAML file.

    Missing files and non-mapping documents yield an empty dict.
    """
    if not config_path:
        return {}
    if not os.path.isfile(config_path):
        logger.warning("Config file not found: %s", config_path)
        return {}
    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        logger.error("Failed to load config: %s", exc)
        return {}
    if not isinstance(data, dict):
        return {}
    section = data.get("construct", data)
    return section if isinstance(section, dict) else {}


def apply_config(config: Dict[str, Any], args: Any = None) -> None:
    """Copy config values onto ``Constants``; explicit CLI values win."""
    for key, (attr, dest) in _SETTINGS.items():
        cli_value = getattr(args, dest, None) if dest else None
        value = cli_value if cli_value not in (None, []) else config.get(key)
        if value is None:
            continue
        if attr == "REMOTE_REPOSITORIES" and isinstance(value, str):
            value = [v.strip() for v in value.split(",") if v.strip()]
        if attr == "REQUEST_TIMEOUT":
            try:
                value = int(value)
            except (TypeError, ValueError):
                logger.warning("Ignoring invalid request_timeout: %r", value)
                continue
        setattr(Constants, attr, value)
