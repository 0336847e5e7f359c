"""semcov analyze command - semantic coverage for one dump."""

from __future__ import annotations

import json
from pathlib import Path

import click

from semcov.analysis.aggregate import build_summary, build_text_summary
from semcov.analysis.hints import minimal_test_suite
from semcov.analysis.pipeline import AnalysisResult, run_analysis
from semcov.cli.common import (
    existing_file,
    load_rules,
    load_settings,
    read_definitions,
    read_signatures,
)


def _echo_text(result: AnalysisResult, show_hints: bool) -> None:
    click.echo(build_text_summary(result.project))

    analysis = result.analysis
    click.echo(
        f"Functions: {analysis.total_functions} analyzed, "
        f"{len(analysis.excluded_functions)} excluded, "
        f"{len(analysis.functions_with_bugs)} with missing arms"
    )

    if result.project.high_impact_targets:
        click.echo("")
        click.echo("High-impact targets:")
        for cov in result.project.high_impact_targets:
            percent = cov.coverage_percent
            shown = f"{percent:.1f}%" if percent is not None else "n/a"
            click.echo(f"  {cov.func_name}: {cov.uncovered} uncovered ({shown})")
            if show_hints:
                report = result.report_for(cov.func_name)
                if report is None:
                    continue
                for hint in minimal_test_suite(report.hints):
                    args = " ".join(v.example_value for v in hint.values)
                    click.echo(f"    [{hint.priority.value}] {hint.description}: {args}")
                    if hint.code_template is None:
                        continue
                    for line in hint.code_template.splitlines():
                        click.echo(f"      {line}")

    for warning in result.warnings:
        if warning.kind != "unmatched_function":
            click.echo(f"warning: {warning.full_name}: {warning.message}", err=True)
    for failure in result.failures:
        click.echo(
            f"warning: could not parse {failure.name or '?'} (line {failure.line}): "
            f"{failure.reason}",
            err=True,
        )


@click.command()
@click.option("--dump", "dump_path", required=True, type=existing_file, help="Case-tree dump")
@click.option("--trace", "trace_path", type=existing_file, help="Profiler output")
@click.option(
    "--definitions",
    "definitions_path",
    type=existing_file,
    help="Generated Scheme source with (define ...) forms",
)
@click.option(
    "--signatures",
    "signature_paths",
    multiple=True,
    type=existing_file,
    help="Source file with type signatures (repeatable)",
)
@click.option("--rules", "rules_path", type=existing_file, help="Crash rule table (YAML)")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Config file")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--full", is_flag=True, help="Include per-function details in JSON output")
@click.option("--top", type=click.IntRange(min=0), help="Number of high-impact targets")
@click.option("--hints", "show_hints", is_flag=True, help="Show the minimal test suite per target")
@click.pass_context
def analyze_command(
    ctx: click.Context,
    dump_path: Path,
    trace_path: Path | None,
    definitions_path: Path | None,
    signature_paths: tuple[Path, ...],
    rules_path: Path | None,
    config_path: Path | None,
    as_json: bool,
    full: bool,
    top: int | None,
    show_hints: bool,
) -> None:
    """Compute semantic coverage of a case-tree dump against a profiler trace."""
    config = load_settings(ctx, config_path)
    if top is not None:
        config = config.model_copy(
            update={"report": config.report.model_copy(update={"high_impact_top": top})}
        )

    definitions, last_line = read_definitions(definitions_path)
    result = run_analysis(
        config,
        dump_path.read_text(encoding="utf-8"),
        trace_text=trace_path.read_text(encoding="utf-8") if trace_path else "",
        definitions=definitions,
        signatures=read_signatures(signature_paths),
        rules=load_rules(rules_path),
        last_line=last_line,
    )

    if as_json:
        payload = result.to_dict() if full else build_summary(result.project)
        click.echo(json.dumps(payload, indent=2))
        return

    _echo_text(result, show_hints)
