#!/usr/bin/env python3
"""Declarative conditions compiled into advanced-pattern predicates.

Configuration files cannot carry Python callables, so advanced patterns are
described there as conditions on a path:
- Path fields (path, name, suffix), read from the string alone
- Stat fields (size, mtime, is_file, permissions, ...)
- File content

Conditions combine with a logical operator (AND, OR, NOT) into one async
predicate. Blocking filesystem access runs in a worker thread.

Example:
    >>> predicate = build_condition_predicate(
    ...     [Condition("content", "contains", "@isTest")], root="/repo"
    ... )
    >>> await predicate("classes/FooTest.cls")
    True
"""

import asyncio
import os
import re
import stat
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Optional, Sequence, Union

from pathtarget.core.constants import (
    CONTENT_FIELD,
    ConditionOperator,
    ConfigKey,
    Limits,
    LogicalOperator,
    PATH_FIELDS,
    STAT_FIELDS,
)
from pathtarget.core.logging import get_logger
from pathtarget.rules.patterns import AdvancedPattern, MatchingFunction, TargetPattern

logger = get_logger("pathtarget.predicates")


@dataclass(frozen=True)
class Condition:
    """A single condition on a path, its attributes or its content."""

    field: str  # Attribute name (path, size, content, ...)
    operator: str  # Comparison operator (eq, ne, lt, le, gt, ge, contains, ...)
    value: Any  # Value to compare against


def get_file_attrs(path: Union[str, Path]) -> Dict[str, Any]:
    """Get file attributes for condition evaluation.

    Args:
        path: File path

    Returns:
        Dictionary of file attributes, empty if the file cannot be stat'ed
    """
    try:
        st = os.stat(path)
    except OSError:
        return {}

    return {
        "size": st.st_size,
        "mtime": st.st_mtime,
        "ctime": st.st_ctime,
        "atime": st.st_atime,
        "mode": st.st_mode,
        "uid": st.st_uid,
        "gid": st.st_gid,
        "is_file": stat.S_ISREG(st.st_mode),
        "is_dir": stat.S_ISDIR(st.st_mode),
        "is_symlink": os.path.islink(path),
        "permissions": stat.filemode(st.st_mode),
    }


def read_file_content(path: Union[str, Path]) -> Optional[str]:
    """Read up to ``Limits.MAX_CONTENT_BYTES`` of a file as text.

    Returns:
        The decoded text, or None if the file cannot be read
    """
    try:
        with open(path, "rb") as f:
            data = f.read(Limits.MAX_CONTENT_BYTES)
    except OSError:
        return None
    return data.decode("utf-8", errors="replace")


def path_attrs(path: str) -> Dict[str, Any]:
    """Attributes derived from the normalized path string."""
    pure = PurePosixPath(path)
    return {"path": path, "name": pure.name, "suffix": pure.suffix}


def evaluate_condition(condition: Condition, attrs: Dict[str, Any]) -> bool:
    """Evaluate single condition.

    Args:
        condition: Condition to evaluate
        attrs: Available field values

    Returns:
        True if condition matches; False if the field is unavailable
    """
    if condition.field not in attrs or attrs[condition.field] is None:
        logger.debug("Condition field unavailable", field=condition.field)
        return False

    actual = attrs[condition.field]
    expected = condition.value
    op = ConditionOperator(condition.operator.lower())

    if op == ConditionOperator.EQ:
        return actual == expected
    elif op == ConditionOperator.NE:
        return actual != expected
    elif op == ConditionOperator.LT:
        return actual < expected
    elif op == ConditionOperator.LE:
        return actual <= expected
    elif op == ConditionOperator.GT:
        return actual > expected
    elif op == ConditionOperator.GE:
        return actual >= expected
    elif op == ConditionOperator.CONTAINS:
        return expected in actual
    elif op == ConditionOperator.STARTSWITH:
        return str(actual).startswith(str(expected))
    elif op == ConditionOperator.ENDSWITH:
        return str(actual).endswith(str(expected))
    elif op == ConditionOperator.MATCHES:
        return bool(re.search(str(expected), str(actual)))

    return False


def combine_results(results: Sequence[bool], operator: LogicalOperator) -> bool:
    """Apply a logical operator to condition results."""
    if operator == LogicalOperator.AND:
        return all(results)
    elif operator == LogicalOperator.OR:
        return any(results)
    elif operator == LogicalOperator.NOT:
        return not all(results)
    return False


def build_condition_predicate(
    conditions: Sequence[Condition],
    operator: Union[LogicalOperator, str] = LogicalOperator.AND,
    root: Optional[Union[str, Path]] = None,
) -> MatchingFunction:
    """Build an async predicate from declarative conditions.

    Stat and content fields are only loaded when some condition needs them.

    Args:
        conditions: Conditions to evaluate
        operator: How condition results combine
        root: Directory relative paths are resolved against (default: cwd)

    Returns:
        Coroutine function taking a normalized path
    """
    if isinstance(operator, str):
        operator = LogicalOperator(operator.lower())

    fields = {c.field for c in conditions}
    needs_stat = bool(fields & STAT_FIELDS)
    needs_content = CONTENT_FIELD in fields
    base = Path(root) if root is not None else None

    def load_attrs(path: str) -> Dict[str, Any]:
        attrs = path_attrs(path)
        location = base / path if base is not None else Path(path)
        if needs_stat:
            attrs.update(get_file_attrs(location))
        if needs_content:
            attrs[CONTENT_FIELD] = read_file_content(location)
        return attrs

    async def predicate(path: str) -> bool:
        if needs_stat or needs_content:
            attrs = await asyncio.to_thread(load_attrs, path)
        else:
            attrs = path_attrs(path)
        return combine_results([evaluate_condition(c, attrs) for c in conditions], operator)

    return predicate


def conditions_from_config(entries: Sequence[Dict[str, Any]]) -> List[Condition]:
    """Create conditions from configuration dictionaries."""
    return [
        Condition(
            field=entry[ConfigKey.CONDITION_FIELD],
            operator=str(entry[ConfigKey.CONDITION_OPERATOR]),
            value=entry[ConfigKey.CONDITION_VALUE],
        )
        for entry in entries
    ]


def advanced_pattern_from_config(
    entry: Dict[str, Any], root: Optional[Union[str, Path]] = None
) -> AdvancedPattern:
    """Create an advanced pattern from a validated configuration entry.

    Dictionaries inside ``base_patterns`` become nested advanced patterns.
    """
    base_patterns: List[TargetPattern] = [
        advanced_pattern_from_config(base, root) if isinstance(base, dict) else base
        for base in entry.get(ConfigKey.ADVANCED_BASE_PATTERNS, [])
    ]
    predicate = build_condition_predicate(
        conditions_from_config(entry[ConfigKey.ADVANCED_CONDITIONS]),
        entry.get(ConfigKey.ADVANCED_OPERATOR, LogicalOperator.AND.value),
        root,
    )
    return AdvancedPattern(
        base_patterns=base_patterns,
        advanced_matcher=predicate,
        name=entry.get(ConfigKey.ADVANCED_NAME, ""),
    )


def build_target_patterns(
    targets: Dict[str, Any], root: Optional[Union[str, Path]] = None
) -> List[TargetPattern]:
    """Build the full pattern list from a validated ``targets`` section.

    Args:
        targets: The ``targets`` configuration section
        root: Overrides the section's ``root`` when given

    Returns:
        Glob strings followed by advanced patterns
    """
    if root is None:
        root = targets.get(ConfigKey.TARGET_ROOT)

    patterns: List[TargetPattern] = list(targets.get(ConfigKey.TARGET_PATTERNS) or [])
    for entry in targets.get(ConfigKey.TARGET_ADVANCED) or []:
        patterns.append(advanced_pattern_from_config(entry, root))

    logger.debug("Built target patterns", count=len(patterns), root=root)
    return patterns
