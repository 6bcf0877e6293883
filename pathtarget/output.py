#!/usr/bin/env python3
"""Rendering of selected paths using Jinja2.

Without a template, selected paths are written one per line. A template is
rendered once per path with ``path`` and ``index`` in its context.

Example:
    >>> render_paths(["a.js", "b.js"], "{{ index }}: {{ path }}")
    '0: a.js\\n1: b.js'
"""

from typing import Any, Dict, Optional, Sequence

import jinja2


class OutputError(Exception):
    """Raised when a path template cannot be compiled or rendered."""

    pass


def _get_environment() -> jinja2.Environment:
    return jinja2.Environment(undefined=jinja2.StrictUndefined, autoescape=False)


def render_paths(
    paths: Sequence[str],
    template: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
) -> str:
    """Render selected paths.

    Args:
        paths: Selected paths, in output order
        template: Optional Jinja2 template applied to each path
        context: Extra variables available to the template

    Returns:
        Rendered lines joined by newlines

    Raises:
        OutputError: If the template is invalid or references unknown names
    """
    if template is None:
        return "\n".join(paths)

    try:
        compiled = _get_environment().from_string(template)
        base_context = dict(context or {})
        return "\n".join(
            compiled.render({**base_context, "path": path, "index": index})
            for index, path in enumerate(paths)
        )
    except jinja2.TemplateError as e:
        raise OutputError(f"Template error: {e}")
