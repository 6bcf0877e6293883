#!/usr/bin/env python3
"""Tests for the command-line interface.

This module tests:
- Argument parsing and validation
- Configuration layering
- Candidate paths from arguments and stdin
- Exit codes of main()
"""

import io
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
import yaml

from pathtarget.cli import (
    EXIT_ERROR,
    EXIT_INTERRUPTED,
    EXIT_NOTHING_SELECTED,
    EXIT_SELECTED,
    CLIError,
    build_config_from_args,
    collect_patterns,
    explain_patterns,
    load_configuration,
    main,
    parse_arguments,
    read_candidate_paths,
    run,
    setup_logging,
)
from pathtarget.core.config import ConfigManager, ConfigSource
from pathtarget.core.constants import ErrorCode
from pathtarget.core.logging import LogLevel
from pathtarget.rules.matcher import PathMatcher
from pathtarget.rules.patterns import AdvancedPattern


class TestParseArguments:
    """Test argument parsing."""

    def test_patterns_and_paths(self):
        """Parses repeated patterns and positional paths."""
        args = parse_arguments(["-p", "**/*.cls", "--pattern", "!**/node_modules/**", "a.cls", "b.js"])

        assert args.patterns == ["**/*.cls", "!**/node_modules/**"]
        assert args.paths == ["a.cls", "b.js"]
        assert not args.debug
        assert not args.explain
        assert args.template is None

    def test_defaults(self):
        """Parses an empty command line."""
        args = parse_arguments([])

        assert args.patterns == []
        assert args.paths == []
        assert args.config is None
        assert args.root is None

    def test_version(self, capsys):
        """Prints the version and exits."""
        with pytest.raises(SystemExit) as exc_info:
            parse_arguments(["--version"])

        assert exc_info.value.code == 0
        assert "pathtarget" in capsys.readouterr().out

    def test_missing_config_file(self, temp_dir: Path):
        """Rejects a config file that does not exist."""
        with pytest.raises(CLIError) as exc_info:
            parse_arguments(["-c", str(temp_dir / "missing.yaml")])

        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    def test_config_is_directory(self, temp_dir: Path):
        """Rejects a directory passed as config."""
        with pytest.raises(CLIError, match="not a file"):
            parse_arguments(["-c", str(temp_dir)])

    def test_root_not_directory(self, temp_dir: Path):
        """Rejects a root that is not a directory."""
        with pytest.raises(CLIError, match="Root is not a directory"):
            parse_arguments(["-r", str(temp_dir / "missing")])

    def test_invalid_pattern(self):
        """Rejects a bare negation marker."""
        with pytest.raises(CLIError, match="Invalid pattern"):
            parse_arguments(["-p", "!"])


class TestConfiguration:
    """Test configuration layering from arguments."""

    def test_build_config_from_args(self, temp_dir: Path):
        """Builds the CLI layer from root, debug and log file."""
        log_file = str(temp_dir / "out.log")
        args = parse_arguments(["-r", str(temp_dir), "-d", "--log-file", log_file])

        layer = build_config_from_args(args)

        assert layer == {
            "pathtarget": {
                "targets": {"root": str(temp_dir)},
                "logging": {"level": "DEBUG", "file": log_file},
            }
        }

    def test_build_config_from_args_empty(self):
        """Builds an empty layer when no options are given."""
        assert build_config_from_args(parse_arguments([])) == {"pathtarget": {}}

    def test_load_configuration(self, config_file: Path, temp_dir: Path):
        """CLI options override the config file."""
        args = parse_arguments(["-c", str(config_file), "-r", str(temp_dir)])

        section = load_configuration(args).get_section()

        assert section["targets"]["root"] == str(temp_dir)
        assert section["targets"]["patterns"] == ["**/*.cls", "!**/node_modules/**"]

    def test_load_configuration_invalid(self, temp_dir: Path):
        """Invalid config files become CLI errors."""
        path = temp_dir / "bad.yaml"
        path.write_text(yaml.dump({"pathtarget": {"targets": {"patterns": "**/*.cls"}}}))
        args = parse_arguments(["-c", str(path)])

        with pytest.raises(CLIError, match="Invalid configuration"):
            load_configuration(args)

    def test_collect_patterns(self, sample_config):
        """Appends --pattern arguments to configured patterns."""
        args = parse_arguments(["-p", "docs/**"])

        patterns = collect_patterns(args, sample_config["pathtarget"])

        assert patterns[:3] == ["**/*.cls", "!**/node_modules/**", "docs/**"]
        assert isinstance(patterns[3], AdvancedPattern)
        assert sample_config["pathtarget"]["targets"]["patterns"] == ["**/*.cls", "!**/node_modules/**"]

    def test_collect_patterns_without_targets(self):
        """Works with an empty configuration section."""
        args = parse_arguments(["-p", "a/**"])

        assert collect_patterns(args, {}) == ["a/**"]

    def test_setup_logging_levels(self):
        """--debug beats the configured level."""
        config = ConfigManager()
        config.load_dict({"pathtarget": {"logging": {"level": "WARNING"}}}, ConfigSource.USER_CONFIG)

        args = parse_arguments([])
        assert setup_logging(args, config).logger.level == LogLevel.WARNING

        args = parse_arguments(["-d"])
        assert setup_logging(args, config).logger.level == LogLevel.DEBUG

    def test_setup_logging_file(self, temp_dir: Path):
        """Writes logs to the requested file."""
        log_file = temp_dir / "pathtarget.log"
        args = parse_arguments(["--log-file", str(log_file)])

        logger = setup_logging(args, load_configuration(args))
        logger.warning("hello")
        for handler in logger.logger.handlers:
            handler.flush()

        assert "hello" in log_file.read_text()
        for handler in list(logger.logger.handlers):
            handler.close()
            logger.logger.removeHandler(handler)

    def test_setup_logging_file_from_config(self, temp_dir: Path):
        """Falls back to the configured log file."""
        log_file = temp_dir / "configured.log"
        config = ConfigManager()
        config.load_dict({"pathtarget": {"logging": {"file": str(log_file)}}}, ConfigSource.USER_CONFIG)

        logger = setup_logging(parse_arguments([]), config)
        logger.warning("configured")
        for handler in list(logger.logger.handlers):
            handler.close()
            logger.logger.removeHandler(handler)

        assert "configured" in log_file.read_text()


class TestCandidatePaths:
    """Test reading candidate paths."""

    def test_from_arguments(self):
        """Positional paths win over stdin."""
        args = parse_arguments(["a.cls"])

        assert read_candidate_paths(args, io.StringIO("b.cls\n")) == ["a.cls"]

    def test_from_stream(self):
        """Reads one path per line and skips blank lines."""
        args = parse_arguments([])
        stream = io.StringIO("a.cls\r\n\n   \nsrc/my file.js\n")

        assert read_candidate_paths(args, stream) == ["a.cls", "src/my file.js"]


class TestRun:
    """Test the async run() entry point."""

    @pytest.mark.asyncio
    async def test_filters_stdin(self):
        """Selects matching paths read from stdin."""
        args = parse_arguments(["-p", "**/*.cls", "-p", "!**/node_modules/**"])
        config = load_configuration(args)
        logger = setup_logging(args, config)
        stdout = io.StringIO()

        code = await run(
            args,
            config,
            logger,
            stdin=io.StringIO("src/Foo.cls\nnode_modules/x/Bar.cls\nREADME.md\nlib\\Baz.cls\n"),
            stdout=stdout,
        )

        assert code == EXIT_SELECTED
        assert stdout.getvalue() == "src/Foo.cls\nlib\\Baz.cls\n"

    @pytest.mark.asyncio
    async def test_nothing_selected(self):
        """Returns a distinct code when nothing matches."""
        args = parse_arguments(["-p", "**/*.cls", "a.js"])
        config = load_configuration(args)
        stdout = io.StringIO()

        code = await run(args, config, setup_logging(args, config), stdout=stdout)

        assert code == EXIT_NOTHING_SELECTED
        assert stdout.getvalue() == ""

    @pytest.mark.asyncio
    async def test_template(self):
        """Renders each selected path through the template."""
        args = parse_arguments(["-p", "*.js", "--template", "{{ index }}={{ path }}", "a.js", "b.cls", "c.js"])
        config = load_configuration(args)
        stdout = io.StringIO()

        await run(args, config, setup_logging(args, config), stdout=stdout)

        assert stdout.getvalue() == "0=a.js\n1=c.js\n"


class TestExplain:
    """Test --explain output."""

    def test_explain_patterns(self):
        """Lists every bucket."""

        async def never(path):
            return False

        matcher = PathMatcher(["a/**", "!b/**", AdvancedPattern(["*.cls"], never, name="tests")])

        output = explain_patterns(matcher).splitlines()

        assert output == [
            "inclusion (1):",
            "  a/**",
            "exclusion (1):",
            "  !b/**",
            "advanced (1):",
            "  tests: ['*.cls']",
        ]

    def test_explain_unnamed(self):
        """Unnamed advanced patterns get a placeholder."""

        async def never(path):
            return False

        matcher = PathMatcher([AdvancedPattern(["x"], never)])

        assert "<unnamed>" in explain_patterns(matcher)


class TestMain:
    """Test main() exit codes and output."""

    def test_selected(self, capsys):
        """Prints selected paths and exits 0."""
        code = main(["-p", "**/*.cls", "force-app/Foo.cls", "b.js"])

        assert code == EXIT_SELECTED
        assert capsys.readouterr().out == "force-app/Foo.cls\n"

    def test_nothing_selected(self, capsys):
        """Exits 2 when nothing is selected."""
        assert main(["-p", "**/*.cls", "b.js"]) == EXIT_NOTHING_SELECTED
        assert capsys.readouterr().out == ""

    def test_no_patterns_selects_everything(self, capsys):
        """Without patterns every candidate is selected."""
        assert main(["a", "b/c"]) == EXIT_SELECTED
        assert capsys.readouterr().out == "a\nb/c\n"

    def test_reads_stdin(self, capsys, monkeypatch):
        """Reads candidates from stdin when no paths are given."""
        monkeypatch.setattr("sys.stdin", io.StringIO("a.js\nb.cls\n"))

        assert main(["-p", "!*.js"]) == EXIT_SELECTED
        assert capsys.readouterr().out == "b.cls\n"

    def test_config_file(self, capsys, config_file: Path):
        """Uses patterns and advanced patterns from the config file."""
        code = main(
            [
                "-c",
                str(config_file),
                "force-app/classes/Foo.cls",
                "node_modules/x/Foo.cls",
                "src/app.test.js",
                "src/app.js",
            ]
        )

        assert code == EXIT_SELECTED
        assert capsys.readouterr().out == "force-app/classes/Foo.cls\nsrc/app.test.js\n"

    def test_root_for_content_conditions(self, capsys, temp_dir: Path, source_dir: Path):
        """--root resolves content conditions against a directory."""
        config_path = temp_dir / "apex.yaml"
        config_path.write_text(
            yaml.dump(
                {
                    "pathtarget": {
                        "targets": {
                            "advanced": [
                                {
                                    "name": "apex-tests",
                                    "base_patterns": ["**/*.cls"],
                                    "conditions": [
                                        {"field": "content", "operator": "contains", "value": "@isTest"}
                                    ],
                                }
                            ]
                        }
                    }
                }
            )
        )

        code = main(
            [
                "-c",
                str(config_path),
                "-r",
                str(source_dir),
                "force-app/classes/Foo.cls",
                "force-app/classes/FooTest.cls",
            ]
        )

        assert code == EXIT_SELECTED
        assert capsys.readouterr().out == "force-app/classes/FooTest.cls\n"

    def test_explain(self, capsys):
        """--explain prints buckets instead of filtering."""
        assert main(["--explain", "-p", "a/**", "-p", "!b/**"]) == EXIT_SELECTED

        out = capsys.readouterr().out
        assert "inclusion (1):" in out
        assert "  !b/**" in out

    def test_cli_error(self, capsys, temp_dir: Path):
        """Reports CLI errors and exits 1."""
        assert main(["-c", str(temp_dir / "missing.yaml")]) == EXIT_ERROR
        assert "Error:" in capsys.readouterr().err

    def test_template_error(self, capsys):
        """Reports template errors and exits 1."""
        assert main(["--template", "{{ nope }}", "a.js"]) == EXIT_ERROR
        assert "Template error" in capsys.readouterr().err

    def test_keyboard_interrupt(self, capsys):
        """Exits 130 when interrupted."""
        with patch("pathtarget.cli.parse_arguments", side_effect=KeyboardInterrupt):
            assert main([]) == EXIT_INTERRUPTED

        assert "Interrupted" in capsys.readouterr().err

    def test_unexpected_error(self, capsys):
        """Reports unexpected exceptions with a traceback and exits 1."""
        with patch("pathtarget.cli.run", AsyncMock(side_effect=TypeError("boom"))):
            assert main(["a.js"]) == EXIT_ERROR

        err = capsys.readouterr().err
        assert "Unexpected error: boom" in err
        assert "Traceback" in err

    def test_condition_value_type_error(self, capsys, temp_dir: Path):
        """Rejects conditions whose value cannot be compared with the field."""
        config_path = temp_dir / "bad.yaml"
        config_path.write_text(
            yaml.dump(
                {
                    "pathtarget": {
                        "targets": {
                            "advanced": [
                                {
                                    "base_patterns": ["**/*.cls"],
                                    "conditions": [{"field": "size", "operator": "gt", "value": "big"}],
                                }
                            ]
                        }
                    }
                }
            )
        )

        assert main(["-c", str(config_path), "a.cls"]) == EXIT_ERROR
        assert "needs a number" in capsys.readouterr().err

    def test_patterns_from_environment(self, capsys, monkeypatch):
        """A single pattern in the environment is one inclusion pattern."""
        monkeypatch.setenv("PATHTARGET_TARGETS_PATTERNS", "**/*.js")

        assert main(["--explain"]) == EXIT_SELECTED

        out = capsys.readouterr().out
        assert "inclusion (1):" in out
        assert "  **/*.js" in out

    def test_environment_patterns_filter(self, capsys, monkeypatch):
        """Environment patterns combine with --pattern arguments."""
        monkeypatch.setenv("PATHTARGET_TARGETS_PATTERNS", "**/*.js")

        assert main(["-p", "!**/dist/**", "src/a.js", "dist/b.js", "c.cls"]) == EXIT_SELECTED
        assert capsys.readouterr().out == "src/a.js\n"

    def test_debug_output_names_config(self, capsys, config_file: Path):
        """Debug messages carry the configuration file in use."""
        assert main(["-d", "-c", str(config_file), "force-app/classes/Foo.cls"]) == EXIT_SELECTED

        assert f"config={config_file}" in capsys.readouterr().err

    def test_no_candidates_warns(self, capsys, monkeypatch):
        """Warns when stdin holds no candidate paths."""
        monkeypatch.setattr("sys.stdin", io.StringIO(""))

        assert main(["-p", "*.js"]) == EXIT_NOTHING_SELECTED
        assert "No candidate paths given" in capsys.readouterr().err
