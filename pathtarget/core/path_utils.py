"""
pathtarget Core: Path normalization.

Every pattern and every candidate path is reduced to one canonical separator
before it reaches the glob compiler or the matcher.
"""
import re
from pathlib import PurePath
from typing import Union

from pathtarget.core.constants import PATH_SEPARATOR

_SEPARATOR_RUN = re.compile(r"[/\\]+")


def normalize_path(path: Union[str, PurePath]) -> str:
    """Convert platform path separators to forward slashes.

    Runs of separators collapse to one and a trailing separator is dropped.
    Windows namespace prefixes (``\\\\?\\`` and ``\\\\.\\``) are kept as ``//``.

    Args:
        path: Path or glob pattern to normalize

    Returns:
        Normalized path string

    Example:
        >>> normalize_path("src\\\\lib\\\\foo.js")
        'src/lib/foo.js'
    """
    if isinstance(path, PurePath):
        path = str(path)

    if path in ("\\", "/"):
        return PATH_SEPARATOR

    if len(path) <= 1:
        return path

    prefix = ""
    if len(path) > 4 and path[3] == "\\" and path[:2] == "\\\\" and path[2] in ("?", "."):
        path = path[2:]
        prefix = "//"

    segments = _SEPARATOR_RUN.split(path)
    if segments[-1] == "":
        segments.pop()

    return prefix + PATH_SEPARATOR.join(segments)

