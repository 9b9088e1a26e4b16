"""Constants used in the project."""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

import yaml


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    INVARIANT_VIOLATION = 4


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    TOKEN_NO_KEY = "noKey"
    TOKEN_NO_SIG = "noSig"
    COMMENT_PREFIX = "#"
    FINGERPRINT_PREFIX = "0x"
    FINGERPRINT_SEPARATOR = ", "

    LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    DEFAULT_LOG_LEVEL = "WARNING"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

    ENV_CONFIG = "KEYSMAP_CONFIG"


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the YAML configuration file.

    The path comes from the argument or the KEYSMAP_CONFIG environment
    variable. A missing or unreadable file yields an empty configuration.

    Recognized layout:

        logging:
          level: INFO
          file: canonicalize.log
        io:
          input: keysmap.list
          output: keysmap.canonical.list
    """
    path = path or os.environ.get(Constants.ENV_CONFIG)
    if not path:
        return {}
    if not os.path.isfile(path):
        logging.warning("Config file not found: %s", path)
        return {}
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as e:
        logging.error("Failed to load config %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logging.warning("Ignoring config %s: top-level value is not a mapping", path)
        return {}
    return data
