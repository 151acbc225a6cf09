"""CliApp — Typer アプリケーション定義。

compile: フラグメントソースをコンパイルし、設定ドキュメントまたは
アーティファクト一式を stdout に出力する。失敗は stderr に出力する。
options: スキーマに宣言されたオプションを一覧表示する。
"""

from __future__ import annotations

import importlib.metadata
import json
import logging
import sys
import tomllib
from pathlib import Path
from typing import Annotated, assert_never

import typer
from pydantic import ValidationError

from sambacompose.config import resolve_config
from sambacompose.core import compile_configuration
from sambacompose.models.config import OutputFormat, SambaComposeConfig
from sambacompose.models.exit_code import ExitCode
from sambacompose.models.option import MigrationStatus, format_path
from sambacompose.models.result import CompileFailure, CompileSuccess
from sambacompose.models.value import to_python
from sambacompose.schema import build_samba_schema
from sambacompose.sources import SourceError, load_fragment_sources

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

_TRUE_WORDS = frozenset({"true", "yes", "on", "1"})
_FALSE_WORDS = frozenset({"false", "no", "off", "0"})

app = typer.Typer(
    name="sambacompose",
    help="Compose Samba configuration from conditional fragments.",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    """--version 指定時にバージョン番号を出力して終了する。"""
    if value:
        print(importlib.metadata.version("sambacompose"))
        raise typer.Exit()


def main() -> None:
    """CLI エントリポイント。pyproject.toml の [project.scripts] から呼び出される。"""
    app()


@app.callback()
def _root_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log diagnostics to stderr."),
    ] = False,
) -> None:
    """Compose Samba configuration from conditional fragments."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=_LOG_FORMAT, stream=sys.stderr)


def parse_flag_assignments(assignments: list[str]) -> dict[str, bool]:
    """--flag NAME=VALUE の並びをフラグ辞書に変換する。

    VALUE 省略時（--flag NAME）は true。同名の指定は後勝ち。

    Raises:
        ValueError: VALUE が真偽値として解釈できない場合。
    """
    flags: dict[str, bool] = {}
    for assignment in assignments:
        name, sep, raw = assignment.partition("=")
        name = name.strip()
        if not name:
            raise ValueError(f"Invalid flag '{assignment}': missing flag name")
        word = raw.strip().lower() if sep else "true"
        if word in _TRUE_WORDS:
            flags[name] = True
        elif word in _FALSE_WORDS:
            flags[name] = False
        else:
            raise ValueError(
                f"Invalid flag '{assignment}': value must be one of true/false"
            )
    return flags


def _resolve_config_or_exit(cli_overrides: dict[str, object]) -> SambaComposeConfig:
    try:
        return resolve_config(cli_overrides=cli_overrides)
    except (
        ValidationError,
        tomllib.TOMLDecodeError,
        UnicodeDecodeError,
        TypeError,
    ) as e:
        print(
            f"Error: Invalid configuration: {e}\n"
            "Check .sambacompose/config.toml for syntax errors or invalid values.",
            file=sys.stderr,
        )
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None
    except PermissionError as e:
        print(
            f"Error: Cannot read configuration file: {e}\n"
            "Check file permissions for .sambacompose/config.toml.",
            file=sys.stderr,
        )
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None


@app.command("compile")
def compile_command(
    sources: Annotated[
        list[Path] | None,
        typer.Argument(help="Fragment files or directories, in declaration order."),
    ] = None,
    flag: Annotated[
        list[str] | None,
        typer.Option("--flag", help="Feature flag as NAME=true|false (repeatable)."),
    ] = None,
    output_format: Annotated[
        OutputFormat | None,
        typer.Option("--format", help="Output format: ini or json."),
    ] = None,
) -> None:
    """Compile fragments into smb.conf and service unit descriptions."""
    try:
        cli_flags = parse_flag_assignments(flag or [])
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None

    config = _resolve_config_or_exit(
        {"output_format": output_format, "flags": cli_flags or None}
    )

    paths = list(sources) if sources else [Path(s) for s in config.sources]
    if not paths:
        print(
            "Error: No fragment sources given.\n"
            "Pass fragment files as arguments, or set 'sources' in "
            ".sambacompose/config.toml.",
            file=sys.stderr,
        )
        raise typer.Exit(code=ExitCode.INPUT_ERROR)

    try:
        fragments = load_fragment_sources(paths)
    except SourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None
    except OSError as e:
        print(
            f"Error: Cannot read fragment source: {e}\n"
            "Check that the path exists and is readable.",
            file=sys.stderr,
        )
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None

    outcome = compile_configuration(fragments, build_samba_schema(), config.flags)
    if isinstance(outcome, CompileFailure):
        for failure in outcome.failures:
            print(f"Error [{failure.kind}]: {failure.message}", file=sys.stderr)
        raise typer.Exit(code=ExitCode.COMPILATION_FAILED)

    for notice in outcome.renames:
        print(
            f"Warning: {notice.source}: '{format_path(notice.old_path)}' has been "
            f"renamed to '{format_path(notice.new_path)}'",
            file=sys.stderr,
        )
    print(format_outcome(outcome, config.output_format), end="")


def format_outcome(outcome: CompileSuccess, output_format: OutputFormat) -> str:
    """コンパイル結果を指定形式の文字列に変換する。"""
    if output_format == OutputFormat.INI:
        return outcome.artifacts.document.render()
    if output_format == OutputFormat.JSON:
        payload = {
            "config": outcome.config.as_tree(),
            "artifacts": outcome.artifacts.model_dump(mode="json"),
            "renames": [n.model_dump(mode="json") for n in outcome.renames],
            "overrides": [n.model_dump(mode="json") for n in outcome.overrides],
        }
        return json.dumps(payload, indent=2) + "\n"
    assert_never(output_format)


_LIST_PATH_WIDTH = 44
_LIST_TYPE_WIDTH = 14


@app.command()
def options(
    show_all: Annotated[
        bool,
        typer.Option("--all", help="Include renamed and removed options."),
    ] = False,
) -> None:
    """List the options declared by the schema."""
    header = f"{'OPTION':<{_LIST_PATH_WIDTH}}{'TYPE':<{_LIST_TYPE_WIDTH}}DEFAULT"
    print(header)
    print("-" * len(header))
    for option in build_samba_schema():
        match option.status:
            case MigrationStatus.ACTIVE:
                assert option.type is not None and option.default is not None
                print(
                    f"{option.dotted:<{_LIST_PATH_WIDTH}}"
                    f"{option.type.value:<{_LIST_TYPE_WIDTH}}"
                    f"{json.dumps(to_python(option.default))}"
                )
            case MigrationStatus.RENAMED if show_all:
                assert option.renamed_to is not None
                print(
                    f"{option.dotted:<{_LIST_PATH_WIDTH}}"
                    f"{'renamed':<{_LIST_TYPE_WIDTH}}"
                    f"-> {format_path(option.renamed_to)}"
                )
            case MigrationStatus.REMOVED if show_all:
                print(f"{option.dotted:<{_LIST_PATH_WIDTH}}removed")
