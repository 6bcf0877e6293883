"""
pathtarget Core: Constants

This module provides project-wide constants, error codes and enums shared
by the matcher, the configuration layer and the command line.
"""
from enum import Enum, IntEnum

# Version information
PATHTARGET_VERSION = "1.0.0"


# Error codes (0-9 range)
class ErrorCode(IntEnum):
    """Standardized error codes for pathtarget operations."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Bad pattern, invalid configuration
    NOT_FOUND = 2  # File or resource doesn't exist
    PERMISSION_DENIED = 3  # Insufficient permissions
    CONFLICT = 4  # Conflicting options
    DEPENDENCY_ERROR = 5  # Missing dependency
    INTERNAL_ERROR = 6  # Bug in pathtarget
    TIMEOUT = 7  # Operation timed out
    RATE_LIMITED = 8  # Too many operations
    DEGRADED = 9  # Running with reduced functionality


# Pattern syntax
NEGATION_MARKER = "!"
PATH_SEPARATOR = "/"

# A matcher with neither inclusion nor advanced patterns accepts every path
# that survives the exclusion test.
ACCEPT_WHEN_UNCONSTRAINED = True


class Limits:
    """Input limits and default values."""

    # Path limits
    MAX_PATH_LENGTH = 4096

    # Pattern limits
    MAX_PATTERNS = 10000
    MAX_ADVANCED_DEPTH = 32

    # Content conditions read at most this much of a file
    MAX_CONTENT_BYTES = 10 * 1024 * 1024  # 10MB


class ConditionOperator(Enum):
    """Comparison operators available to declarative conditions."""

    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LE = "le"
    GT = "gt"
    GE = "ge"
    CONTAINS = "contains"
    STARTSWITH = "startswith"
    ENDSWITH = "endswith"
    MATCHES = "matches"  # Regex search


class LogicalOperator(Enum):
    """Logical operator for combining conditions."""

    AND = "and"  # All conditions must match
    OR = "or"  # Any condition must match
    NOT = "not"  # Negate the conjunction


# Fields computed from the path string alone
PATH_FIELDS = frozenset({"path", "name", "suffix"})

# Fields computed from os.stat(), grouped by value type
NUMERIC_STAT_FIELDS = frozenset({"size", "mtime", "ctime", "atime", "mode", "uid", "gid"})
BOOLEAN_STAT_FIELDS = frozenset({"is_file", "is_dir", "is_symlink"})
STAT_FIELDS = NUMERIC_STAT_FIELDS | BOOLEAN_STAT_FIELDS | {"permissions"}

CONTENT_FIELD = "content"

# Fields holding strings
TEXT_FIELDS = PATH_FIELDS | {"permissions", CONTENT_FIELD}

# Operators that need comparable values
ORDERING_OPERATORS = frozenset(
    {ConditionOperator.LT, ConditionOperator.LE, ConditionOperator.GT, ConditionOperator.GE}
)


# Configuration keys
class ConfigKey:
    """Configuration key constants."""

    # Top-level keys
    ROOT = "pathtarget"
    VERSION = "version"
    TARGETS = "targets"
    LOGGING = "logging"

    # Targets configuration
    TARGET_ROOT = "root"
    TARGET_PATTERNS = "patterns"
    TARGET_ADVANCED = "advanced"

    # Advanced pattern configuration
    ADVANCED_NAME = "name"
    ADVANCED_BASE_PATTERNS = "base_patterns"
    ADVANCED_OPERATOR = "operator"
    ADVANCED_CONDITIONS = "conditions"

    # Condition configuration
    CONDITION_FIELD = "field"
    CONDITION_OPERATOR = "operator"
    CONDITION_VALUE = "value"


# Default configuration values
DEFAULT_CONFIG = {
    ConfigKey.VERSION: "1.0",
    ConfigKey.TARGETS: {
        ConfigKey.TARGET_ROOT: None,
        ConfigKey.TARGET_PATTERNS: [],
        ConfigKey.TARGET_ADVANCED: [],
    },
    ConfigKey.LOGGING: {
        "level": "INFO",
        "file": None,
    },
}
