"""Input loading shared by CLI commands."""

from __future__ import annotations

from pathlib import Path

import click

from semcov.config.loader import load_config
from semcov.config.models import SemcovConfig
from semcov.core.errors import SemcovError
from semcov.core.logging import configure_logging, set_run_id
from semcov.dumpcases.rules import DEFAULT_RULE_SET, RuleSet, load_rule_set
from semcov.runtime.trace import parse_definitions
from semcov.statespace.types import SignatureSet, parse_signatures

existing_file = click.Path(exists=True, dir_okay=False, path_type=Path)


def load_settings(ctx: click.Context, config_path: Path | None) -> SemcovConfig:
    """Load configuration and switch logging to it."""
    try:
        config = load_config(config_path)
    except SemcovError as e:
        raise click.ClickException(str(e)) from e

    logging_config = config.logging
    if ctx.obj and ctx.obj.get("verbose"):
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    configure_logging(config=logging_config)
    set_run_id()
    return config


def load_rules(path: Path | None) -> RuleSet:
    if path is None:
        return DEFAULT_RULE_SET
    try:
        return load_rule_set(path)
    except SemcovError as e:
        raise click.ClickException(str(e)) from e


def read_definitions(path: Path | None) -> tuple[list[tuple[str, int]], int | None]:
    """(identifier, line) pairs and the last line of a generated Scheme source."""
    if path is None:
        return [], None
    text = path.read_text(encoding="utf-8")
    return parse_definitions(text), len(text.splitlines())


def read_signatures(paths: tuple[Path, ...]) -> SignatureSet | None:
    if not paths:
        return None
    merged = SignatureSet()
    for path in paths:
        parsed = parse_signatures(path.read_text(encoding="utf-8"))
        merged.signatures.update(parsed.signatures)
        merged.data_types.extend(parsed.data_types)
    return merged
