from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from smart_scheduler.core.config.settings import SchedulerSettings, SettingsError, load_settings
from smart_scheduler.core.errors import (
    InvalidInputError,
    RequestLoadError,
    SchedulerError,
)
from smart_scheduler.core.io.load_request import load_request
from smart_scheduler.core.lint.lint_request import lint_request
from smart_scheduler.core.model import FeasibilityReport, ScheduleResult, ScheduleTask
from smart_scheduler.core.schedule.feasibility import simulate
from smart_scheduler.core.schedule.graph import build_graph
from smart_scheduler.core.schedule.service import calculate_schedule
from smart_scheduler.core.timestamps import parse_timestamp, utc_now
from smart_scheduler.core.validate.parse_request import parse_request

app = typer.Typer(add_completion=False, no_args_is_help=True)

EXIT_LOAD = 1
EXIT_INVALID = 2
EXIT_INFEASIBLE = 3


@app.callback()
def _callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Task dependency scheduler CLI."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
        )


@app.command("schedule")
def schedule_cmd(
    path: str = typer.Argument(..., help="Path to a schedule request (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json|table"),
    config: Optional[str] = typer.Option(None, "--config", help="Optional YAML settings file"),
) -> None:
    """Compute a dependency-respecting execution order."""
    _check_format(format, ("text", "json", "table"), "E_SCHEDULE_UNKNOWN_FORMAT")
    as_json = format == "json"

    settings = _settings_or_exit(config, "schedule", as_json)
    tasks = _tasks_or_exit(path, settings, "schedule", as_json)

    try:
        result = calculate_schedule(tasks, settings=settings)
    except SchedulerError as e:
        _fail("schedule", [e], EXIT_INVALID, as_json)

    if as_json:
        _emit_json("schedule", True, [], 0, result=result.to_dict())

    if format == "table":
        _print_table(result, tasks)
        return

    typer.echo(f"OK: {result.message}")
    for i, title in enumerate(result.recommended_order, start=1):
        typer.echo(f"{i}. {title}")


@app.command("check")
def check_cmd(
    path: str = typer.Argument(..., help="Path to a schedule request (.yaml/.yml/.json)"),
    order: Optional[str] = typer.Option(
        None,
        "--order",
        help="Comma-separated task titles to check; defaults to the computed order",
    ),
    now: Optional[str] = typer.Option(None, "--now", help="Simulation start (ISO-8601, default: now)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    config: Optional[str] = typer.Option(None, "--config", help="Optional YAML settings file"),
) -> None:
    """Check whether an order meets every due date on a single worker."""
    _check_format(format, ("text", "json"), "E_CHECK_UNKNOWN_FORMAT")
    as_json = format == "json"

    start = _now_or_exit(now, "check", as_json)
    settings = _settings_or_exit(config, "check", as_json)
    tasks = _tasks_or_exit(path, settings, "check", as_json)

    try:
        if order is None:
            titles = calculate_schedule(tasks, settings=settings).recommended_order
        else:
            # Same request checks as `schedule`, including the duplicate-title policy.
            build_graph(tasks, duplicate_titles=settings.duplicate_titles)
            titles = [t.strip() for t in order.split(",") if t.strip()]
        report = simulate(tasks, titles, start)
    except SchedulerError as e:
        _fail("check", [e], EXIT_INVALID, as_json)

    exit_code = 0 if report.feasible else EXIT_INFEASIBLE
    if as_json:
        _emit_json(
            "check",
            True,
            [],
            exit_code,
            result=_report_to_dict(report, titles, start),
        )

    for step in report.steps:
        due = step.due_date.isoformat() if step.due_date else "-"
        typer.echo(f"{step.title}: {step.start.isoformat()} -> {step.finish.isoformat()} (due {due})")
    if report.feasible:
        typer.echo(f"FEASIBLE: {len(report.steps)} tasks meet their due dates")
        return
    typer.echo(f"INFEASIBLE: {report.late_task} finishes after its due date")
    raise typer.Exit(code=exit_code)


@app.command("lint")
def lint_cmd(
    path: str = typer.Argument(..., help="Path to a schedule request (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    now: Optional[str] = typer.Option(
        None, "--now", help="Reference time for L_DUE_DATE_IN_PAST (ISO-8601)"
    ),
) -> None:
    """Lint a schedule request (rules beyond shape validation)."""
    _check_format(format, ("text", "json"), "E_LINT_UNKNOWN_FORMAT")
    as_json = format == "json"

    reference = _now_or_exit(now, "lint", as_json) if now else None

    try:
        request = load_request(path)
    except RequestLoadError as e:
        _fail("lint", [e], EXIT_LOAD, as_json)

    lint_errors = lint_request(request, now=reference)
    _, parse_errors = parse_request(request)
    errors: list[SchedulerError] = [*lint_errors, *parse_errors]

    if as_json:
        if errors:
            _emit_json("lint", False, errors, EXIT_INVALID)
        _emit_json("lint", True, [], 0)

    if errors:
        _print_errors(errors)
        raise typer.Exit(code=EXIT_INVALID)
    typer.echo("OK: lint passed")


def _check_format(format: str, allowed: tuple[str, ...], code: str) -> None:
    if format not in allowed:
        err = InvalidInputError(
            code=code,
            message=f"unknown format: {format} (choose one of: {', '.join(allowed)})",
            file=None,
            path="format",
        )
        _print_errors([err])
        raise typer.Exit(code=EXIT_INVALID)


def _settings_or_exit(config: Optional[str], command: str, as_json: bool) -> SchedulerSettings:
    try:
        return load_settings(config)
    except FileNotFoundError as e:
        _fail(
            command,
            [
                RequestLoadError(
                    code="E_CONFIG_FILE_NOT_FOUND",
                    message=f"config file not found: {e.filename}",
                    file=None,
                    path="config",
                )
            ],
            EXIT_LOAD,
            as_json,
        )
    except SettingsError as e:
        _fail(
            command,
            [
                InvalidInputError(
                    code="E_CONFIG_FILE_INVALID",
                    message=str(e),
                    file=None,
                    path="config",
                )
            ],
            EXIT_INVALID,
            as_json,
        )


def _tasks_or_exit(
    path: str, settings: SchedulerSettings, command: str, as_json: bool
) -> list[ScheduleTask]:
    try:
        request = load_request(path)
    except RequestLoadError as e:
        _fail(command, [e], EXIT_LOAD, as_json)

    tasks, errors = parse_request(request, settings=settings)
    if errors or tasks is None:
        _fail(command, list(errors), EXIT_INVALID, as_json)
    return tasks


def _now_or_exit(now: Optional[str], command: str, as_json: bool) -> datetime:
    if now is None:
        return utc_now()
    try:
        return parse_timestamp(now)
    except ValueError as e:
        _fail(
            command,
            [InvalidInputError(code="E_INVALID_TIMESTAMP", message=str(e), path="now")],
            EXIT_INVALID,
            as_json,
        )


def _emit_json(
    command: str,
    ok: bool,
    errors: list[SchedulerError],
    exit_code: int,
    *,
    result: Optional[dict[str, Any]] = None,
) -> NoReturn:
    payload = {
        "tool": "smart-scheduler",
        "command": command,
        "ok": ok,
        "error_count": len(errors),
        "errors": [e.to_dict() for e in errors],
        "result": result,
    }
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))
    raise typer.Exit(code=exit_code)


def _fail(command: str, errors: list[SchedulerError], exit_code: int, as_json: bool) -> NoReturn:
    if as_json:
        _emit_json(command, False, errors, exit_code)
    _print_errors(errors)
    raise typer.Exit(code=exit_code)


def _report_to_dict(report: FeasibilityReport, order: list[str], now: datetime) -> dict[str, Any]:
    return {
        "feasible": report.feasible,
        "order": list(order),
        "now": now.isoformat(),
        "late_task": report.late_task,
        "steps": [
            {
                "title": s.title,
                "start": s.start.isoformat(),
                "finish": s.finish.isoformat(),
                "due_date": s.due_date.isoformat() if s.due_date else None,
            }
            for s in report.steps
        ],
    }


def _print_table(result: ScheduleResult, tasks: list[ScheduleTask]) -> None:
    by_title = {t.title: t for t in tasks}
    table = Table(title=result.message)
    table.add_column("#", justify="right")
    table.add_column("Task")
    table.add_column("Hours", justify="right")
    table.add_column("Due")
    table.add_column("Depends on")
    for i, title in enumerate(result.recommended_order, start=1):
        task = by_title[title]
        table.add_row(
            str(i),
            title,
            str(task.estimated_hours),
            task.due_date.isoformat() if task.due_date else "-",
            ", ".join(d for d in task.dependencies if d.strip()) or "-",
        )
    Console().print(table)


def _print_errors(errors: list[SchedulerError]) -> None:
    errors_sorted = sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))
    for e in errors_sorted:
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="smart-scheduler")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
