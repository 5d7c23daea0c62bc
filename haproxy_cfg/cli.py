"""CLI entry point for haproxy-cfg."""
from __future__ import annotations

from pathlib import Path
import json
import logging

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import DB_PATH, FILE_ENCODING, FILE_ERRORS, HAPROXY_CONFIG, LOG_LEVEL, ParserOptions
from .db import SchemaVersionError, init_db
from .drift import compare_config, summarise_drift
from .errors import StrictModeError
from .exporter import ExportError, generate_config, render_config_text
from .importer import DEFAULT_CONFIG_NAME, ConfigPermissionError, import_config
from .parser import ConfigParser
from .sections import Section
from .state import SectionKind

CONFIG_PATH = click.Path(exists=True, dir_okay=False, path_type=Path)
DB_OPTION = click.option("--db", "db_path", type=click.Path(dir_okay=False, path_type=Path))
NAME_OPTION = click.option("--name", default=DEFAULT_CONFIG_NAME, show_default=True, help="Stored snapshot name.")


def _echo_json(payload: dict) -> None:
    click.echo(json.dumps(payload))


def _load(path: Path, **overrides) -> ConfigParser:
    parser = ConfigParser(ParserOptions.from_env(**overrides))
    try:
        parser.load(path)
    except OSError as exc:
        raise click.ClickException(f"Unable to read {path}: {exc}")
    except StrictModeError as exc:
        raise click.ClickException(str(exc))
    return parser


def _open_db(db_path: Path | None) -> None:
    try:
        init_db(db_path or DB_PATH)
    except SchemaVersionError as exc:
        raise click.ClickException(str(exc))


def _section_label(section: Section) -> str:
    return f"{section.kind.value} {section.name}".strip()


@click.group()
@click.version_option(__version__)
@click.option("--log-level", default=LOG_LEVEL, show_default=True, help="Python logging level.")
def main(log_level: str) -> None:
    """Parse, inspect and rewrite HAProxy configuration files."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")


@main.command("format")
@click.argument("path", type=CONFIG_PATH)
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), help="Write here instead of stdout.")
@click.option("--hash", "use_hash", is_flag=True, help="Recompute the _md5hash marker.")
def format_cmd(path: Path, output: Path | None, use_hash: bool) -> None:
    """Parse PATH and write it back in canonical form."""
    parser = _load(path)
    parser.options.use_md5_hash = parser.options.use_md5_hash or use_hash
    if output is None:
        click.echo(parser.string().encode(FILE_ENCODING, FILE_ERRORS), nl=False)
        return
    parser.save(output)
    _echo_json({"status": "ok", "output": str(output), "sections": len(parser.sections())})


@main.command()
@click.argument("path", type=CONFIG_PATH)
def parse(path: Path) -> None:
    """Print a JSON summary of the sections in PATH."""
    parser = _load(path)
    _echo_json(
        {
            "status": "ok",
            "path": str(path),
            "sections": [
                {
                    "kind": section.kind.value,
                    "name": section.name,
                    "from": section.from_defaults or None,
                    "directives": sum(len(p.data) for p in section.registry),
                }
                for section in parser.sections()
            ],
            "diagnostics": len(parser.diagnostics),
        }
    )


@main.command()
@click.argument("path", type=CONFIG_PATH)
@click.option("--strict", is_flag=True, help="Exit with status 1 when any line was rejected.")
def check(path: Path, strict: bool) -> None:
    """Report lines that no parser accepted."""
    options = ParserOptions.from_env()
    strict = strict or options.strict
    options.strict = False
    parser = ConfigParser(options)
    try:
        diagnostics = parser.load(path)
    except OSError as exc:
        raise click.ClickException(f"Unable to read {path}: {exc}")
    _echo_json(
        {
            "status": "ok" if not diagnostics else "warning",
            "path": str(path),
            "diagnostics": [
                {
                    "line_number": item.line_number,
                    "line": item.line,
                    "parser": item.parser,
                    "message": item.message,
                    "dropped": item.dropped,
                }
                for item in diagnostics
            ],
        }
    )
    if strict and diagnostics:
        raise SystemExit(1)


@main.command()
@click.argument("path", type=CONFIG_PATH)
@click.option("--kind", type=click.Choice([kind.value for kind in SectionKind if kind.is_named or kind in (SectionKind.GLOBAL, SectionKind.DEFAULTS)]))
def show(path: Path, kind: str | None) -> None:
    """Render the directives of PATH as a table."""
    parser = _load(path)
    table = Table(title=str(path), show_lines=False)
    table.add_column("Section", style="bold cyan")
    table.add_column("Directive", style="bold")
    table.add_column("Value", overflow="fold")
    table.add_column("Comment", style="dim")
    for section in parser.sections():
        if kind and section.kind.value != kind:
            continue
        label = _section_label(section)
        for directive in section.registry:
            for result in directive.result():
                table.add_row(label, directive.name or "(unprocessed)", result.data, result.comment)
                label = ""
    Console().print(table)


@main.command(name="import")
@click.argument("path", required=False, type=click.Path(dir_okay=True, path_type=Path))
@NAME_OPTION
@DB_OPTION
def import_cmd(path: Path | None, name: str, db_path: Path | None) -> None:
    """Store a parsed configuration in the snapshot database."""
    _open_db(db_path)
    try:
        summary = import_config(path or HAPROXY_CONFIG, name=name, db_path=db_path)
    except (ConfigPermissionError, FileNotFoundError) as exc:
        raise click.ClickException(str(exc))
    _echo_json(
        {
            "status": "ok",
            "source": str(summary.source_path),
            "sections": summary.section_labels,
            "section_count": summary.section_count,
            "version": summary.version,
            "diagnostics": len(summary.diagnostics),
        }
    )


@main.command()
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path))
@NAME_OPTION
@DB_OPTION
def export(output: Path | None, name: str, db_path: Path | None) -> None:
    """Write the stored configuration to a file or stdout."""
    _open_db(db_path)
    if output is None:
        text = render_config_text(db_path=db_path, name=name)
        if not text:
            raise click.ClickException(f"No stored configuration named {name!r}; run an import first")
        click.echo(text, nl=False)
        return
    try:
        generate_config(output, db_path=db_path, name=name)
    except ExportError as exc:
        raise click.ClickException(str(exc))
    _echo_json({"status": "ok", "output": str(output)})


@main.command()
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--diff/--no-diff", default=False, help="Include a unified diff when drift is detected.")
@NAME_OPTION
@DB_OPTION
def status(path: Path, diff: bool, name: str, db_path: Path | None) -> None:
    """Compare PATH with the stored configuration."""
    _open_db(db_path)
    report = compare_config(path, db_path=db_path, name=name)
    if report.error:
        raise click.ClickException(report.error)
    payload = {
        "status": "ok",
        "target": str(report.target_path),
        "in_sync": report.in_sync,
        "generated_hash": report.generated_hash,
        "target_hash": report.target_hash,
        "summary": summarise_drift(report),
    }
    if diff and report.diff:
        payload["diff"] = report.diff
    _echo_json(payload)
    if report.in_sync is False:
        raise SystemExit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
