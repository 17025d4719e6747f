# Kavach — Task Verification Gate
# Copyright (C) 2026 Kavach Project Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""Kavach CLI — Typer entry point.

Commands:
- kavach lint <path...>     — line rules, syntax balance, DACE size (--fix, --format)
- kavach quality <path...>  — size/function/import metrics and DACE score
- kavach verify             — Aegis pipeline with kanban action summary
- kavach aegis              — Aegis gate; --hook for PostToolUse hook mode
- kavach config             — show (or save) the effective configuration
"""

from __future__ import annotations

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from kavach import __version__
from kavach.config import CONFIG_FILE, load_config, save_config
from kavach.context import RunContext
from kavach.hook.protocol import run_hook
from kavach.models.lint import LintResult
from kavach.models.quality import QualityMetrics
from kavach.reporter.console_out import console, print_error, print_report
from kavach.reporter.json_out import lint_results_to_json, quality_results_to_json
from kavach.reporter.toon_out import (
    ToonSection,
    render_lint_results,
    render_quality_results,
    render_sections,
    render_verification,
    render_verify_action,
    render_verify_header,
)
from kavach.scanner.coordinator import collect_files
from kavach.scanner.languages import analyzable_extensions, lintable_extensions
from kavach.scanner.lint_analyzer import analyze_file
from kavach.scanner.quality_scorer import analyze_quality

app = typer.Typer(
    name="kavach",
    help=(
        "Kavach: task verification gate — lint, quality metrics and the "
        "two-stage Aegis check. Run 'kavach <command> --help' for flags."
    ),
    add_completion=False,
)

logger = logging.getLogger("kavach")


class OutputFormat(str, Enum):
    TOON = "toon"
    JSON = "json"


class _Options:
    """Global options captured by the app callback."""

    def __init__(self, config_path: Optional[Path]) -> None:
        self.config_path = config_path


def _setup_logging(debug: bool, quiet: bool) -> None:
    # Logs always go to stderr; stdout carries reports and hook decisions
    if quiet:
        level = logging.ERROR
    elif debug:
        level = logging.DEBUG
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _open_context(ctx: typer.Context) -> RunContext:
    options: Optional[_Options] = ctx.obj
    return RunContext.open(config_path=options.config_path if options else None)


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Log tool invocations and decisions"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to a kavach YAML config"),
) -> None:
    _setup_logging(debug, quiet)
    ctx.obj = _Options(config)


@app.command()
def lint(
    ctx: typer.Context,
    paths: Optional[list[str]] = typer.Argument(None, help="Files or directories to lint"),
    fix: bool = typer.Option(False, "--fix", help="Strip trailing whitespace in place"),
    output_format: OutputFormat = typer.Option(OutputFormat.TOON, "--format", help="Output format"),
) -> None:
    """Lint files for whitespace, line length, indentation, syntax balance and size.

    Directories are walked recursively; only files with issues are listed
    for them. Always exits 0.
    """
    if not paths:
        console.print(ctx.get_help(), markup=False)
        return

    run = _open_context(ctx)
    try:
        files, missing = collect_files(paths, lintable_extensions())
        for path in missing:
            print_error(f"{path}: no such file or directory")

        results: list[LintResult] = []
        for file_path, from_directory in files:
            result = analyze_file(file_path, fix=fix, config=run.config)
            if from_directory and not result.issues:
                continue
            results.append(result)
    finally:
        run.close()

    if output_format is OutputFormat.JSON:
        typer.echo(lint_results_to_json(results), nl=False)
    else:
        print_report(render_lint_results(results))


@app.command()
def quality(
    ctx: typer.Context,
    paths: Optional[list[str]] = typer.Argument(None, help="Files or directories to analyze"),
    output_format: OutputFormat = typer.Option(OutputFormat.TOON, "--format", help="Output format"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show per-file metrics"),
) -> None:
    """Analyze size, function and import counts, DACE score and complexity."""
    if not paths:
        console.print(ctx.get_help(), markup=False)
        return

    files, missing = collect_files(paths, analyzable_extensions())
    for path in missing:
        print_error(f"{path}: no such file or directory")

    results: list[QualityMetrics] = [analyze_quality(file_path) for file_path, _ in files]

    if output_format is OutputFormat.JSON:
        typer.echo(quality_results_to_json(results), nl=False)
    else:
        print_report(render_quality_results(results, verbose=verbose))


@app.command()
def verify(
    ctx: typer.Context,
    task: Optional[str] = typer.Option(None, "--task", help="Task ID being verified"),
) -> None:
    """Run the full Aegis pipeline before a task moves to DONE.

    A failed verification is a reported result, not a process error: the
    command exits 0 either way.
    """
    run = _open_context(ctx)
    try:
        print_report(render_verify_header(run.project, run.today, task))
        result = run.build_verifier().verify()
        print_report(render_verification(result, run.project, run.today))
        print_report(render_verify_action(result))
    finally:
        run.close()


@app.command()
def aegis(
    ctx: typer.Context,
    hook: bool = typer.Option(False, "--hook", help="Hook mode: JSON payload on stdin, decision on stdout"),
    task: Optional[str] = typer.Option(None, "--task", help="Task ID being verified"),
) -> None:
    """Aegis two-stage verification gate (TESTING then VERIFIED).

    In hook mode the approve/block decision is the only thing written to
    stdout; the report goes to stderr.
    """
    run = _open_context(ctx)
    try:
        if hook:
            code = run_hook(run, sys.stdin, sys.stdout, sys.stderr)
            if code:
                raise typer.Exit(code=code)
            return

        if task:
            logger.info("Verifying task %s", task)
        result = run.build_verifier().verify()
        print_report(render_verification(result, run.project, run.today))
    finally:
        run.close()


@app.command(name="config")
def show_config(
    ctx: typer.Context,
    save: bool = typer.Option(False, "--save", help="Write the effective configuration to disk"),
) -> None:
    """Show the effective configuration (optionally saving it)."""
    options: Optional[_Options] = ctx.obj
    config_path = options.config_path if options else None
    config = load_config(config_path)

    section = ToonSection("CONFIG")
    for key, value in config.model_dump(mode="json").items():
        section.add(key, "" if value is None else value)
    print_report(render_sections([section]))

    if save:
        written = save_config(config, config_path or CONFIG_FILE)
        console.print(f"[green]Saved configuration to {escape(str(written))}[/green]")


@app.command()
def version() -> None:
    """Show the Kavach version."""
    console.print(f"Kavach v{__version__}")


if __name__ == "__main__":
    app()
