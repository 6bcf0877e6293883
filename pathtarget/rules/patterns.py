#!/usr/bin/env python3
"""Target pattern types, classification and glob compilation.

A target pattern list mixes three kinds of entry:
- Inclusion globs ("**/*.cls"), OR-combined
- Exclusion globs ("!**/node_modules/**"), OR-combined and then negated
- Advanced patterns, a nested pattern list AND-ed with an async predicate

Example:
    >>> buckets = classify_patterns(["**/*.js", "!**/node_modules/**"])
    >>> buckets.inclusion, buckets.exclusion
    (['**/*.js'], ['**/node_modules/**'])
"""

from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Sequence, Union

from wcmatch import glob

from pathtarget.core.constants import NEGATION_MARKER
from pathtarget.core.path_utils import normalize_path

# Dialect of the compiled globs: ``**`` spans directories, ``{a,b}`` expands,
# ``@(a|b)`` style extglobs are allowed and patterns are always POSIX-style.
GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE | glob.EXTGLOB | glob.FORCEUNIX

MatchingFunction = Callable[[str], Awaitable[bool]]
GlobPredicate = Callable[[str], bool]


@dataclass(frozen=True)
class AdvancedPattern:
    """A nested pattern list combined with an asynchronous predicate.

    A path satisfies the pattern when it satisfies ``base_patterns`` (evaluated
    with the full matcher semantics) and ``advanced_matcher`` resolves to True.
    """

    base_patterns: Sequence["TargetPattern"]
    advanced_matcher: MatchingFunction
    name: str = ""


TargetPattern = Union[str, AdvancedPattern]


@dataclass(frozen=True)
class ClassifiedPatterns:
    """Patterns sorted into inclusion, exclusion and advanced buckets."""

    inclusion: List[str] = field(default_factory=list)
    exclusion: List[str] = field(default_factory=list)
    advanced: List[AdvancedPattern] = field(default_factory=list)

    def is_unconstrained(self) -> bool:
        """True when nothing but exclusions limits the selection."""
        return not self.inclusion and not self.advanced

    def __len__(self) -> int:
        return len(self.inclusion) + len(self.exclusion) + len(self.advanced)


def classify_patterns(patterns: Sequence[TargetPattern]) -> ClassifiedPatterns:
    """Sort patterns into inclusion, exclusion and advanced buckets.

    String patterns are normalized first. A leading negation marker makes the
    pattern an exclusion and is stripped; the bare glob is kept so the whole
    exclusion bucket can be compiled into a single OR test whose result is
    negated, which by De Morgan's law rejects a path matching ANY exclusion.

    Advanced patterns are kept as they are; their base patterns are classified
    when their own matcher is built.

    Args:
        patterns: Mixed list of glob strings and advanced patterns

    Returns:
        The classified buckets, each in input order
    """
    classified = ClassifiedPatterns()

    for pattern in patterns:
        if isinstance(pattern, str):
            normalized = normalize_path(pattern)
            if normalized.startswith(NEGATION_MARKER):
                classified.exclusion.append(normalized[len(NEGATION_MARKER):])
            else:
                classified.inclusion.append(normalized)
        else:
            classified.advanced.append(pattern)

    return classified


def compile_globs(patterns: Sequence[str]) -> GlobPredicate:
    """Compile globs into one synchronous OR test.

    Args:
        patterns: Normalized glob strings

    Returns:
        Callable returning True when a path matches at least one glob. An empty
        pattern set matches nothing.
    """
    if not patterns:
        return lambda path: False

    matcher = glob.compile(list(patterns), flags=GLOB_FLAGS)
    return matcher.match
