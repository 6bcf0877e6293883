"""pathtarget - select target paths with include, exclude and advanced patterns.

Example:
    >>> from pathtarget import PathMatcher
    >>> matcher = PathMatcher(["**/*.cls", "!**/node_modules/**"])
    >>> await matcher.path_matches_patterns("force-app/classes/Foo.cls")
    True
"""

from pathtarget.core.constants import PATHTARGET_VERSION
from pathtarget.rules import (
    AdvancedPattern,
    ClassifiedPatterns,
    Condition,
    PathMatcher,
    TargetPattern,
    build_condition_predicate,
    build_target_patterns,
    classify_patterns,
    compile_globs,
)

__version__ = PATHTARGET_VERSION

__all__ = [
    "AdvancedPattern",
    "ClassifiedPatterns",
    "Condition",
    "PathMatcher",
    "TargetPattern",
    "build_condition_predicate",
    "build_target_patterns",
    "classify_patterns",
    "compile_globs",
    "__version__",
]
