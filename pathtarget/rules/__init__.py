"""pathtarget Rules System.

This package provides the path-targeting engine:
- Pattern classification and glob compilation
- PathMatcher: the asynchronous decision function
- Declarative conditions for advanced patterns

Target patterns decide which candidate paths are selected for downstream
processing, such as the files a static-analysis run scans.
"""

from .matcher import PathMatcher
from .patterns import (
    AdvancedPattern,
    ClassifiedPatterns,
    GlobPredicate,
    MatchingFunction,
    TargetPattern,
    classify_patterns,
    compile_globs,
)
from .predicates import (
    Condition,
    build_condition_predicate,
    build_target_patterns,
    get_file_attrs,
)

__all__ = [
    # Patterns
    "AdvancedPattern",
    "ClassifiedPatterns",
    "GlobPredicate",
    "MatchingFunction",
    "TargetPattern",
    "classify_patterns",
    "compile_globs",
    # Matcher
    "PathMatcher",
    # Predicates
    "Condition",
    "build_condition_predicate",
    "build_target_patterns",
    "get_file_attrs",
]
