#!/usr/bin/env python3
"""Asynchronous path matcher over target patterns.

``PathMatcher`` classifies a pattern list once, compiles its globs once, and
exposes an immutable decision function. A path is selected when:
- it matches no exclusion glob, AND
- either there are no inclusion or advanced patterns, or it matches any
  inclusion glob, or it satisfies any advanced pattern.

Advanced predicates may perform I/O, so every query is a coroutine. Predicates
for all paths of a batch, and for all advanced patterns of one path, are
scheduled together with ``asyncio.gather``.

Example:
    >>> matcher = PathMatcher(["**/*.js", "!**/node_modules/**"])
    >>> await matcher.filter_paths_by_patterns(["src/a.js", "node_modules/b.js"])
    ['src/a.js']
"""

import asyncio
from typing import List, Sequence

from pathtarget.core.constants import ACCEPT_WHEN_UNCONSTRAINED
from pathtarget.core.logging import get_logger
from pathtarget.core.path_utils import normalize_path
from pathtarget.rules.patterns import (
    AdvancedPattern,
    ClassifiedPatterns,
    MatchingFunction,
    TargetPattern,
    classify_patterns,
    compile_globs,
)


class PathMatcher:
    """Selects paths matching a list of target patterns.

    The matcher holds no mutable state after construction and may be shared by
    any number of concurrent queries.
    """

    def __init__(self, patterns: Sequence[TargetPattern]):
        """Build the decision function.

        Args:
            patterns: Glob strings (``!``-prefixed for exclusion) and
                advanced patterns

        Raises:
            Any error the glob compiler raises for malformed patterns.
        """
        self._logger = get_logger("pathtarget.matcher")
        self._patterns = classify_patterns(patterns)
        self._matcher = self._generate_matching_function(self._patterns)

        self._logger.debug(
            "Built matching function",
            inclusion=len(self._patterns.inclusion),
            exclusion=len(self._patterns.exclusion),
            advanced=len(self._patterns.advanced),
        )

    @property
    def patterns(self) -> ClassifiedPatterns:
        """The top-level classified patterns."""
        return self._patterns

    def _generate_matching_function(self, classified: ClassifiedPatterns) -> MatchingFunction:
        inclusion_matcher = compile_globs(classified.inclusion)
        exclusion_matcher = compile_globs(classified.exclusion)
        advanced_matchers = [self._build_advanced_matcher(ap) for ap in classified.advanced]
        unconstrained = classified.is_unconstrained()

        async def matches(path: str) -> bool:
            if exclusion_matcher(path):
                return False
            if unconstrained:
                return ACCEPT_WHEN_UNCONSTRAINED
            if inclusion_matcher(path):
                return True
            if not advanced_matchers:
                return False
            results = await asyncio.gather(*(am(path) for am in advanced_matchers))
            return any(results)

        return matches

    def _build_advanced_matcher(self, pattern: AdvancedPattern) -> MatchingFunction:
        base_matcher = self._generate_matching_function(classify_patterns(pattern.base_patterns))

        async def matches(path: str) -> bool:
            return await base_matcher(path) and bool(await pattern.advanced_matcher(path))

        return matches

    async def filter_paths_by_patterns(self, paths: Sequence[str]) -> List[str]:
        """Select the paths that satisfy this matcher's patterns.

        Args:
            paths: Candidate paths, in any separator style

        Returns:
            The original (un-normalized) strings that matched, in input order

        Raises:
            Whatever an advanced predicate raises; one failure fails the batch.
        """
        paths = list(paths)
        results = await asyncio.gather(*(self._matcher(normalize_path(p)) for p in paths))
        return [path for path, matched in zip(paths, results) if matched]

    async def path_matches_patterns(self, path: str) -> bool:
        """Check whether a single path satisfies this matcher's patterns.

        Args:
            path: Candidate path, in any separator style

        Returns:
            True if the normalized path is selected
        """
        return await self._matcher(normalize_path(path))
