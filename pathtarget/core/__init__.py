"""pathtarget Core - Shared utilities and infrastructure.

Import specific functions from submodules:
    from pathtarget.core.config import ConfigManager
    from pathtarget.core import constants
    from pathtarget.core.logging import get_logger
    from pathtarget.core.path_utils import normalize_path
    from pathtarget.core import validators
"""

from pathtarget.core import (
    config,
    constants,
    logging,
    path_utils,
    validators,
)

__all__ = [
    "config",
    "constants",
    "logging",
    "path_utils",
    "validators",
]
