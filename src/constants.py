"""Constants used in the project."""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    DUPLICATES_FOUND = 1
    FILE_ERROR = 2
    PARSE_ERROR = 3


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    MULTI_KEY_SEPARATOR = ", "
    METADATA_KEY = "__metadata"
    RANGE_PROTOCOL = "npm"
    HARD_LINK = "hard"
    DEFAULT_LOCKFILE = "yarn.lock"
    LOCKFILE_HEADER = (
        "# This file is generated by running \"yarn install\" inside your project.\n"
        "# Manual changes might be lost - proceed with caution!\n"
    )
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "LOCKDEDUPE_LOG_LEVEL"
    ENV_LOG_FILE = "LOCKDEDUPE_LOG_FILE"
    CONFIG_FILES = (".lockdedupe.yml", ".lockdedupe.yaml")
    CONFIG_SECTION = "dedupe"


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load dedupe defaults from a YAML config file.

    An explicit path must exist; otherwise the default locations in the
    current directory are probed. Returns the ``dedupe`` section when present,
    else the top-level mapping, else an empty dict.
    """
    import yaml  # pylint: disable=import-outside-toplevel

    candidates = [path] if path else [os.path.join(os.getcwd(), name) for name in Constants.CONFIG_FILES]
    for candidate in candidates:
        if not path and not os.path.isfile(candidate):
            continue
        with open(candidate, "r", encoding="utf-8") as fh:
            try:
                cfg = yaml.safe_load(fh) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Config file {candidate} is not valid YAML: {e}") from e
        if not isinstance(cfg, dict):
            raise ValueError(f"Config file {candidate} must contain a mapping")
        logger.debug("Loaded config from %s", candidate)
        section = cfg.get(Constants.CONFIG_SECTION)
        if isinstance(section, dict):
            return section
        return cfg
    return {}
