"""semcov attribute command - which functions each test executes."""

from __future__ import annotations

import json
import shlex
from pathlib import Path

import click

from semcov.cli.common import existing_file, load_rules, load_settings, read_definitions
from semcov.core.errors import SemcovError
from semcov.dumpcases.parser import parse
from semcov.runtime.correlate import compute_line_ranges
from semcov.runtime.mangling import build_name_mapping
from semcov.testing.attribution import (
    TestCommand,
    attribute,
    functions_to_tests,
    run_sequentially,
)


def _parse_test(value: str) -> TestCommand:
    name, sep, command = value.partition("=")
    if not sep or not name.strip() or not command.strip():
        raise click.BadParameter(f"expected NAME=COMMAND, got {value!r}", param_hint="--test")
    return TestCommand(name.strip(), tuple(shlex.split(command)))


@click.command()
@click.option("--dump", "dump_path", required=True, type=existing_file, help="Case-tree dump")
@click.option(
    "--definitions",
    "definitions_path",
    required=True,
    type=existing_file,
    help="Generated Scheme source with (define ...) forms",
)
@click.option(
    "--trace-path",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Where each test run writes its profiler output",
)
@click.option("--test", "tests", multiple=True, required=True, help="NAME=COMMAND (repeatable)")
@click.option("--rules", "rules_path", type=existing_file, help="Crash rule table (YAML)")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Config file")
@click.option("--timeout", "timeout_sec", type=click.FloatRange(min=0, min_open=True))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def attribute_command(
    ctx: click.Context,
    dump_path: Path,
    definitions_path: Path,
    trace_path: Path,
    tests: tuple[str, ...],
    rules_path: Path | None,
    config_path: Path | None,
    timeout_sec: float | None,
    as_json: bool,
) -> None:
    """Run tests one at a time and report the functions each one executed."""
    config = load_settings(ctx, config_path)
    commands = [_parse_test(t) for t in tests]

    parsed = parse(dump_path.read_text(encoding="utf-8"), rules=load_rules(rules_path))
    definitions, last_line = read_definitions(definitions_path)
    line_ranges = compute_line_ranges(definitions, last_line=last_line)
    mapping = build_name_mapping(parsed.functions, (name for name, _ in definitions))

    try:
        runs = run_sequentially(
            commands, trace_path, timeout_sec or config.testing.timeout_sec
        )
    except SemcovError as e:
        raise click.ClickException(str(e)) from e

    attributions = attribute(runs, parsed.functions, line_ranges, mapping)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "tests": [a.to_dict() for a in attributions],
                    "functions": functions_to_tests(attributions),
                },
                indent=2,
            )
        )
        return

    for run, attribution in zip(runs, attributions, strict=True):
        status = "passed" if run.passed else f"failed ({run.returncode})"
        click.echo(f"{run.name}: {status}, {len(attribution.executed_functions)} functions")
        for name in attribution.executed_functions:
            click.echo(f"  {name}")
