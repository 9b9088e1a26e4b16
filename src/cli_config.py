"""CLI configuration overlay for runtime tunables.

Values from the YAML config fill in whatever the command line left unset;
CLI flags always have the highest precedence.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from constants import Constants, _load_yaml_config

logger = logging.getLogger(__name__)

# config section -> key -> args attribute
_CONFIG_KEYS = {
    "logging": {"level": "LOG_LEVEL", "file": "LOG_FILE"},
    "io": {"input": "INPUT", "output": "OUTPUT"},
}


def apply_config_overrides(args) -> Dict[str, Any]:
    """Fill unset args attributes from the YAML config and return the config."""
    config = _load_yaml_config(getattr(args, "CONFIG", None))
    for section, keys in _CONFIG_KEYS.items():
        values = config.get(section) or {}
        if not isinstance(values, dict):
            logger.warning("Ignoring config section %r: not a mapping", section)
            continue
        for key, attr in keys.items():
            if getattr(args, attr, None) is None and values.get(key) is not None:
                setattr(args, attr, str(values[key]))

    level = getattr(args, "LOG_LEVEL", None)
    if level is not None:
        level = level.upper()
        if level not in Constants.LOG_LEVELS:
            logger.warning("Unknown log level %r in config, using %s", level, Constants.DEFAULT_LOG_LEVEL)
            level = None
        args.LOG_LEVEL = level
    return config
