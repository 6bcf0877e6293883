"""
pathtarget Core: Input Validators.

This module provides input validation for the configuration layer: the
``targets`` section, individual glob patterns, and declarative conditions.
The matcher itself does not validate; callers validate before building one.
"""
import re
from typing import Any, Dict, Pattern

from pathtarget.core.constants import (
    BOOLEAN_STAT_FIELDS,
    ConditionOperator,
    ConfigKey,
    CONTENT_FIELD,
    ErrorCode,
    Limits,
    LogicalOperator,
    NEGATION_MARKER,
    NUMERIC_STAT_FIELDS,
    ORDERING_OPERATORS,
    PATH_FIELDS,
    STAT_FIELDS,
    TEXT_FIELDS,
)


class ValidationError(Exception):
    """Base exception for validation errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize ValidationError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.error_code = error_code


def validate_config(config: Dict[str, Any]) -> bool:
    """Validate pathtarget configuration structure.

    Args:
        config: Configuration dictionary (contents of the ``pathtarget`` key)

    Returns:
        True if valid

    Raises:
        ValidationError: If configuration is invalid
    """
    if not isinstance(config, dict):
        raise ValidationError("Configuration must be a dictionary")

    if ConfigKey.VERSION in config:
        validate_version(config[ConfigKey.VERSION])

    if ConfigKey.TARGETS in config:
        validate_targets_config(config[ConfigKey.TARGETS])

    return True


def validate_targets_config(targets: Dict[str, Any]) -> bool:
    """Validate the ``targets`` section.

    Args:
        targets: Targets configuration dictionary

    Returns:
        True if valid

    Raises:
        ValidationError: If the section is invalid
    """
    if not isinstance(targets, dict):
        raise ValidationError("Targets must be a dictionary")

    root = targets.get(ConfigKey.TARGET_ROOT)
    if root is not None and not isinstance(root, str):
        raise ValidationError(f"Targets root must be a string: {root}")

    # An empty YAML key loads as None
    patterns = targets.get(ConfigKey.TARGET_PATTERNS, [])
    if patterns is not None:
        validate_pattern_list(patterns)

    advanced = targets.get(ConfigKey.TARGET_ADVANCED, [])
    if advanced is None:
        advanced = []
    if not isinstance(advanced, list):
        raise ValidationError("Advanced patterns must be a list")

    for i, entry in enumerate(advanced):
        try:
            validate_advanced_config(entry)
        except ValidationError as e:
            raise ValidationError(f"Invalid advanced pattern at index {i}: {e}")

    return True


def validate_pattern_list(patterns: Any) -> bool:
    """Validate a list of simple glob patterns.

    Raises:
        ValidationError: If the list or any pattern is invalid
    """
    if not isinstance(patterns, list):
        raise ValidationError("Patterns must be a list")

    if len(patterns) > Limits.MAX_PATTERNS:
        raise ValidationError(f"Too many patterns ({len(patterns)} > {Limits.MAX_PATTERNS})")

    for pattern in patterns:
        validate_pattern(pattern)

    return True


def validate_advanced_config(entry: Dict[str, Any], depth: int = 0) -> bool:
    """Validate one advanced pattern entry.

    Nested advanced entries may appear inside ``base_patterns``.

    Args:
        entry: Advanced pattern dictionary
        depth: Current nesting depth

    Returns:
        True if valid

    Raises:
        ValidationError: If the entry is invalid
    """
    if depth > Limits.MAX_ADVANCED_DEPTH:
        raise ValidationError(f"Advanced patterns nested deeper than {Limits.MAX_ADVANCED_DEPTH}")

    if not isinstance(entry, dict):
        raise ValidationError("Advanced pattern must be a dictionary")

    base_patterns = entry.get(ConfigKey.ADVANCED_BASE_PATTERNS, [])
    if not isinstance(base_patterns, list):
        raise ValidationError("Base patterns must be a list")

    for base in base_patterns:
        if isinstance(base, dict):
            validate_advanced_config(base, depth + 1)
        else:
            validate_pattern(base)

    operator = entry.get(ConfigKey.ADVANCED_OPERATOR, LogicalOperator.AND.value)
    try:
        LogicalOperator(operator)
    except ValueError:
        valid = [op.value for op in LogicalOperator]
        raise ValidationError(f"Invalid operator: {operator}. Must be one of {valid}")

    conditions = entry.get(ConfigKey.ADVANCED_CONDITIONS)
    if not isinstance(conditions, list) or not conditions:
        raise ValidationError("Advanced pattern must have a non-empty 'conditions' list")

    for condition in conditions:
        validate_condition_config(condition)

    return True


def validate_condition_config(condition: Dict[str, Any]) -> bool:
    """Validate a declarative condition.

    Args:
        condition: Dictionary with ``field``, ``operator`` and ``value``

    Returns:
        True if valid

    Raises:
        ValidationError: If the condition is invalid
    """
    if not isinstance(condition, dict):
        raise ValidationError("Condition must be a dictionary")

    for key in (ConfigKey.CONDITION_FIELD, ConfigKey.CONDITION_OPERATOR, ConfigKey.CONDITION_VALUE):
        if key not in condition:
            raise ValidationError(f"Condition must have '{key}' field")

    field_name = condition[ConfigKey.CONDITION_FIELD]
    if field_name not in PATH_FIELDS | STAT_FIELDS | {CONTENT_FIELD}:
        raise ValidationError(f"Unknown condition field: {field_name}")

    operator = condition[ConfigKey.CONDITION_OPERATOR]
    try:
        op = ConditionOperator(str(operator).lower())
    except ValueError:
        valid = [op.value for op in ConditionOperator]
        raise ValidationError(f"Invalid condition operator: {operator}. Must be one of {valid}")

    value = condition[ConfigKey.CONDITION_VALUE]

    if op == ConditionOperator.MATCHES:
        validate_regex(str(value))

    if op in ORDERING_OPERATORS:
        if field_name in BOOLEAN_STAT_FIELDS:
            raise ValidationError(f"Operator '{op.value}' cannot order boolean field '{field_name}'")
        if field_name in NUMERIC_STAT_FIELDS and not _is_number(value):
            raise ValidationError(
                f"Operator '{op.value}' on field '{field_name}' needs a number, got {value!r}"
            )
        if field_name in TEXT_FIELDS and not isinstance(value, str):
            raise ValidationError(
                f"Operator '{op.value}' on field '{field_name}' needs a string, got {value!r}"
            )

    if op == ConditionOperator.CONTAINS:
        if field_name not in TEXT_FIELDS:
            raise ValidationError(f"Operator 'contains' needs a text field, got '{field_name}'")
        if not isinstance(value, str):
            raise ValidationError(f"Operator 'contains' needs a string, got {value!r}")

    return True


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_pattern(pattern: str) -> bool:
    """Validate a glob pattern, optionally negated.

    Args:
        pattern: Pattern to validate

    Returns:
        True if valid

    Raises:
        ValidationError: If pattern is invalid
    """
    if not isinstance(pattern, str):
        raise ValidationError(f"Pattern must be string, got {type(pattern)}")

    if not pattern or pattern == NEGATION_MARKER:
        raise ValidationError("Pattern cannot be empty")

    if len(pattern) > Limits.MAX_PATH_LENGTH:
        raise ValidationError(f"Pattern exceeds maximum length ({Limits.MAX_PATH_LENGTH})")

    if "\0" in pattern:
        raise ValidationError("Invalid pattern: contains null bytes")

    if any(ord(c) < 32 and c not in "\t\n\r" for c in pattern):
        raise ValidationError("Invalid pattern: contains control characters")

    return True


def validate_version(version: str) -> bool:
    """Validate version string format.

    Raises:
        ValidationError: If version is invalid
    """
    if not version:
        raise ValidationError("Version cannot be empty")

    if not isinstance(version, str):
        raise ValidationError(f"Version must be string, got {type(version)}")

    # X.Y or X.Y.Z
    if not re.match(r"^\d+\.\d+(\.\d+)?$", version):
        raise ValidationError(f"Invalid version format: {version}. Expected X.Y or X.Y.Z")

    return True


def validate_regex(pattern: str) -> Pattern[str]:
    """Validate and compile a regex pattern.

    Args:
        pattern: Regex pattern string

    Returns:
        Compiled regex pattern

    Raises:
        ValidationError: If pattern is invalid
    """
    if not pattern:
        raise ValidationError("Regex pattern cannot be empty")

    try:
        return re.compile(pattern)
    except re.error as e:
        raise ValidationError(f"Failed to compile regex pattern: {e}")
