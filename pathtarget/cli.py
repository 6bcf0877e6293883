#!/usr/bin/env python3
"""Command-line interface for pathtarget.

This module provides the CLI for selecting target paths:
- Argument parsing and validation
- Configuration file loading
- Candidate paths from arguments or stdin
- Plain or templated output

Example:
    >>> from pathtarget.cli import parse_arguments
    >>> args = parse_arguments(['-p', '**/*.cls', '-p', '!**/node_modules/**', 'src/Foo.cls'])
"""

import argparse
import asyncio
import sys
import traceback
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

from pathtarget.core.config import ConfigError, ConfigManager, ConfigSource
from pathtarget.core.constants import PATHTARGET_VERSION, ConfigKey, ErrorCode
from pathtarget.core.logging import Logger, set_global_logger
from pathtarget.core.validators import ValidationError, validate_pattern
from pathtarget.output import OutputError, render_paths
from pathtarget.rules.matcher import PathMatcher
from pathtarget.rules.predicates import build_target_patterns

VERSION = PATHTARGET_VERSION
DESCRIPTION = "pathtarget - select target paths with include, exclude and advanced patterns"

EXIT_SELECTED = 0
EXIT_ERROR = 1
EXIT_NOTHING_SELECTED = 2
EXIT_INTERRUPTED = 130


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        super().__init__(message)
        self.error_code = error_code


def parse_arguments(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Argument list to parse (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace

    Raises:
        SystemExit: On invalid arguments or --help/--version
        CLIError: If arguments are inconsistent
    """
    parser = argparse.ArgumentParser(
        prog="pathtarget",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Select Apex classes outside node_modules
  find . -type f | pathtarget -p '**/*.cls' -p '!**/node_modules/**'

  # Use patterns from a configuration file
  pathtarget --config targets.yaml src/Foo.cls src/Bar.cls

  # Render each selected path through a Jinja2 template
  pathtarget -p '**/*.js' --template '{{ index }} {{ path }}' a.js b.js
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {VERSION}",
    )

    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        type=str,
        help="Configuration file path (YAML format)",
    )

    parser.add_argument(
        "-p",
        "--pattern",
        metavar="GLOB",
        dest="patterns",
        action="append",
        default=[],
        help="Target pattern; prefix with '!' to exclude (repeatable)",
    )

    parser.add_argument(
        "-r",
        "--root",
        metavar="DIR",
        type=str,
        help="Directory that advanced conditions resolve paths against",
    )

    parser.add_argument(
        "paths",
        metavar="PATH",
        nargs="*",
        help="Candidate paths (read from stdin when omitted)",
    )

    output_group = parser.add_argument_group("output options")

    output_group.add_argument(
        "--template",
        metavar="JINJA",
        type=str,
        help="Jinja2 template rendered for each selected path ({{ path }}, {{ index }})",
    )

    output_group.add_argument(
        "--explain",
        action="store_true",
        help="Print the classified patterns instead of filtering",
    )

    debug_group = parser.add_argument_group("debugging options")

    debug_group.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    debug_group.add_argument(
        "--log-file",
        metavar="FILE",
        type=str,
        help="Also write logs to this file",
    )

    parsed = parser.parse_args(args)

    _validate_arguments(parsed)

    return parsed


def _validate_arguments(args: argparse.Namespace) -> None:
    """
    Validate parsed arguments.

    Args:
        args: Parsed arguments namespace

    Raises:
        CLIError: If validation fails
    """
    if args.config:
        config_path = Path(args.config)

        if not config_path.exists():
            raise CLIError(f"Configuration file does not exist: {args.config}", ErrorCode.NOT_FOUND)

        if not config_path.is_file():
            raise CLIError(f"Configuration path is not a file: {args.config}")

    if args.root:
        root_path = Path(args.root)

        if not root_path.is_dir():
            raise CLIError(f"Root is not a directory: {args.root}", ErrorCode.NOT_FOUND)

    for pattern in args.patterns:
        try:
            validate_pattern(pattern)
        except ValidationError as e:
            raise CLIError(f"Invalid pattern {pattern!r}: {e}", e.error_code)


def build_config_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Build the CLI configuration layer from command-line arguments.

    Args:
        args: Parsed arguments namespace

    Returns:
        Configuration dictionary for ConfigManager
    """
    section: Dict[str, Any] = {}

    if args.root:
        section[ConfigKey.TARGETS] = {ConfigKey.TARGET_ROOT: args.root}

    if args.debug:
        section[ConfigKey.LOGGING] = {"level": "DEBUG"}

    if args.log_file:
        section.setdefault(ConfigKey.LOGGING, {})["file"] = args.log_file

    return {ConfigKey.ROOT: section}


def load_configuration(args: argparse.Namespace) -> ConfigManager:
    """
    Load file, environment and argument configuration.

    Raises:
        CLIError: If the configuration cannot be loaded
    """
    try:
        config = ConfigManager(args.config)
        config.load_dict(build_config_from_args(args), ConfigSource.CLI_ARGS)
    except ConfigError as e:
        raise CLIError(str(e), e.error_code)
    return config


def collect_patterns(args: argparse.Namespace, section: Dict[str, Any]) -> List[Any]:
    """
    Combine configured target patterns with ``--pattern`` arguments.

    Args:
        args: Parsed arguments namespace
        section: Merged ``pathtarget`` configuration section

    Returns:
        Pattern list for PathMatcher
    """
    targets = dict(section.get(ConfigKey.TARGETS) or {})
    targets[ConfigKey.TARGET_PATTERNS] = list(targets.get(ConfigKey.TARGET_PATTERNS) or []) + list(
        args.patterns
    )
    return build_target_patterns(targets)


def setup_logging(args: argparse.Namespace, config: ConfigManager) -> Logger:
    """
    Setup logging based on arguments and configuration.

    Args:
        args: Parsed arguments namespace
        config: Loaded configuration

    Returns:
        Configured logger instance
    """
    log_level = "DEBUG" if args.debug else config.get("pathtarget.logging.level", "INFO")
    log_file = args.log_file or config.get("pathtarget.logging.file")

    logger = Logger("pathtarget", level=log_level)
    if log_file:
        logger.add_handler(logger.create_file_handler(log_file))

    set_global_logger(logger)
    return logger


def read_candidate_paths(args: argparse.Namespace, stream: TextIO) -> List[str]:
    """
    Get candidate paths from arguments, or one per line from ``stream``.

    Blank lines are skipped; surrounding whitespace is kept as part of a path
    except for the line terminator.
    """
    if args.paths:
        return list(args.paths)
    return [line.rstrip("\r\n") for line in stream if line.strip()]


def explain_patterns(matcher: PathMatcher) -> str:
    """Describe how a matcher classified its patterns."""
    buckets = matcher.patterns
    lines = [f"inclusion ({len(buckets.inclusion)}):"]
    lines.extend(f"  {p}" for p in buckets.inclusion)
    lines.append(f"exclusion ({len(buckets.exclusion)}):")
    lines.extend(f"  !{p}" for p in buckets.exclusion)
    lines.append(f"advanced ({len(buckets.advanced)}):")
    lines.extend(f"  {ap.name or '<unnamed>'}: {list(ap.base_patterns)}" for ap in buckets.advanced)
    return "\n".join(lines)


async def run(
    args: argparse.Namespace,
    config: ConfigManager,
    logger: Logger,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    """
    Build the matcher and write the selected paths.

    Returns:
        Process exit code
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    section = config.get_section()
    matcher = PathMatcher(collect_patterns(args, section))

    if args.explain:
        print(explain_patterns(matcher), file=stdout)
        return EXIT_SELECTED

    candidates = read_candidate_paths(args, stdin)
    if not candidates:
        logger.warning("No candidate paths given")

    selected = await matcher.filter_paths_by_patterns(candidates)
    logger.debug("Filtered candidate paths", candidates=len(candidates), selected=len(selected))

    if selected:
        print(render_paths(selected, args.template), file=stdout)
        return EXIT_SELECTED

    return EXIT_NOTHING_SELECTED


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Handles argument parsing, configuration and logging setup, then runs the
    matcher over the candidate paths.
    """
    try:
        args = parse_arguments(argv)
        config = load_configuration(args)
        logger = setup_logging(args, config)

        with logger.add_context(config=args.config or "defaults"):
            return asyncio.run(run(args, config, logger))

    except (CLIError, OutputError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        traceback.print_exc()
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
