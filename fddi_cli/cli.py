"""CLI interface for the record store."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import NoReturn, Optional

import typer

from fddi_core.codec import decode, encode
from fddi_core.errors import FDDIError
from fddi_core.outline_import import DEFAULT_PROJECT_NAME, load_outline_csv
from fddi_core.progress import is_late, outline, rollup
from fddi_core.schemas import BaseSchema, Feature, iter_records, resolve_record_type
from fddi_core.search import search_records
from fddi_cli.config import FDDIConfig, load_config, resolved_database_path
from store.repository import RecordStore

app = typer.Typer(help="FDDI record store CLI")

logger = logging.getLogger(__name__)


def _fail(message: str) -> NoReturn:
    typer.secho(f"❌ {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(1)


def _load(config_path: str) -> FDDIConfig:
    try:
        config = load_config(config_path)
    except FileNotFoundError as e:
        _fail(f"Config file not found: {e}")
    except ValueError as e:
        _fail(f"Invalid config: {e}")
    root = logging.getLogger()
    if root.level > logging.DEBUG:
        root.setLevel(config.log_level)
    return config


def _record_type(name: str) -> type[BaseSchema]:
    try:
        return resolve_record_type(name)
    except ValueError as e:
        _fail(str(e))


def _open_store(config: FDDIConfig, config_path: str) -> RecordStore:
    store = RecordStore(resolved_database_path(config, config_path))
    try:
        for name in config.tables:
            store.register_table(resolve_record_type(name))
    except FDDIError:
        store.close()
        raise
    return store


def _read_record(json_path: str, record_type: type[BaseSchema]) -> BaseSchema:
    path = Path(json_path)
    if not path.exists():
        _fail(f"File not found: {json_path}")
    try:
        data = path.read_bytes()
    except OSError as e:
        _fail(f"Cannot read {json_path}: {e}")
    return decode(data, record_type)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Encode, validate and store FDD planning records."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def init(
    config_path: str = typer.Argument(..., help="Path to store YAML config"),
) -> None:
    """Create the database file and register the configured tables."""
    config = _load(config_path)
    try:
        with _open_store(config, config_path) as store:
            tables = store.registered_tables
    except FDDIError as e:
        _fail(f"Cannot initialise store: {e}")

    typer.secho("✅ Store ready", fg=typer.colors.GREEN)
    typer.echo(f"   Database: {resolved_database_path(config, config_path)}")
    typer.echo(f"   Tables:   {', '.join(tables)}")


@app.command("import")
def import_records(
    config_path: str = typer.Argument(..., help="Path to store YAML config"),
    json_paths: list[str] = typer.Argument(..., help="JSON files to persist"),
    record_type: str = typer.Option("program", "--type", "-t", help="Record type of the files"),
) -> None:
    """Decode JSON files and persist each one as a row."""
    config = _load(config_path)
    schema = _record_type(record_type)
    try:
        with _open_store(config, config_path) as store:
            for json_path in json_paths:
                record = _read_record(json_path, schema)
                row_id = store.persist(record)
                logger.info("Imported %s as %s row %s", json_path, schema.table_name, row_id)
                typer.echo(f"   {json_path} -> {schema.table_name} #{row_id}")
    except FDDIError as e:
        _fail(f"Import failed: {e}")

    typer.secho(f"✅ Imported {len(json_paths)} record(s)", fg=typer.colors.GREEN)


@app.command()
def export(
    config_path: str = typer.Argument(..., help="Path to store YAML config"),
    record_type: str = typer.Option("program", "--type", "-t", help="Record type to export"),
) -> None:
    """Print every stored record of a type as JSON."""
    config = _load(config_path)
    schema = _record_type(record_type)
    try:
        with _open_store(config, config_path) as store:
            records = store.fetch_all(schema)
        payloads = [encode(record, indent=config.indent) for record in records]
    except FDDIError as e:
        _fail(f"Export failed: {e}")

    if not payloads:
        typer.secho(f"No {schema.table_name} stored.", fg=typer.colors.YELLOW, err=True)
        return
    for payload in payloads:
        typer.echo(payload)


@app.command()
def validate(
    json_path: str = typer.Argument(..., help="JSON file to check"),
    record_type: str = typer.Option("program", "--type", "-t", help="Record type of the file"),
) -> None:
    """Check that a JSON file decodes into a complete record tree."""
    schema = _record_type(record_type)
    try:
        record = _read_record(json_path, schema)
    except FDDIError as e:
        _fail(f"Invalid {schema.__name__}: {e}")

    counts: dict[str, int] = {}
    for _, node in iter_records(record):
        kind = type(node).__name__
        counts[kind] = counts.get(kind, 0) + 1

    typer.secho(f"✅ Valid {schema.__name__}", fg=typer.colors.GREEN)
    for kind, count in sorted(counts.items()):
        typer.echo(f"   {kind}: {count}")


@app.command()
def progress(
    json_path: str = typer.Argument(..., help="JSON file to summarise"),
    record_type: str = typer.Option("program", "--type", "-t", help="Record type of the file"),
    today: Optional[str] = typer.Option(None, help="Reference date (YYYY-MM-DD) for lateness"),
) -> None:
    """Recompute completion for a record tree and print it as an outline."""
    schema = _record_type(record_type)
    try:
        reference = date.fromisoformat(today) if today else date.today()
    except ValueError:
        _fail(f"Invalid date: {today}")

    try:
        record = _read_record(json_path, schema)
    except FDDIError as e:
        _fail(f"Invalid {schema.__name__}: {e}")

    completion = rollup(record)
    typer.secho(f"\n📈 Completion: {completion}%\n", fg=typer.colors.BLUE)
    for depth, node in outline(record):
        node_progress = getattr(node, "progress", None)
        percent = node_progress.completion if node_progress is not None else 0
        label = getattr(node, "name", None) or "(unnamed)"
        late_marker = " ⚠️  late" if is_late(node, reference) else ""
        typer.echo(f"{'  ' * depth}{type(node).__name__} {label}: {percent}%{late_marker}")


@app.command("import-csv")
def import_csv(
    config_path: str = typer.Argument(..., help="Path to store YAML config"),
    csv_path: str = typer.Argument(..., help="MS Project outline exported as CSV"),
    name: str = typer.Option(DEFAULT_PROJECT_NAME, "--name", "-n", help="Name of the new project"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the project instead of storing it"),
) -> None:
    """Convert the "Develop" outline of an MS Project CSV export into a project."""
    config = _load(config_path)
    if not Path(csv_path).is_file():
        _fail(f"File not found: {csv_path}")
    try:
        project = load_outline_csv(csv_path, name)
    except OSError as e:
        _fail(f"Cannot read {csv_path}: {e}")
    except ValueError as e:
        _fail(f"Invalid project name: {e}")
    except FDDIError as e:
        _fail(f"Invalid outline: {e}")

    if dry_run:
        typer.echo(encode(project, indent=config.indent))
        return

    try:
        with _open_store(config, config_path) as store:
            row_id = store.persist(project)
    except FDDIError as e:
        _fail(f"Import failed: {e}")

    features = sum(1 for _, node in iter_records(project) if isinstance(node, Feature))
    logger.info("Imported outline %s as Projects row %s", csv_path, row_id)
    typer.secho(f"✅ Imported {project.name} as Projects #{row_id}", fg=typer.colors.GREEN)
    typer.echo(f"   Features: {features}")


@app.command()
def search(
    json_path: str = typer.Argument(..., help="JSON file to search"),
    query: str = typer.Argument(..., help="Text to look for in record names"),
    record_type: str = typer.Option("program", "--type", "-t", help="Record type of the file"),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", min=1, help="Maximum number of matches"),
) -> None:
    """List records whose name matches a query, best matches first."""
    schema = _record_type(record_type)
    try:
        record = _read_record(json_path, schema)
    except FDDIError as e:
        _fail(f"Invalid {schema.__name__}: {e}")

    matches = search_records(record, query, limit=limit)
    if not matches:
        typer.secho(f"No records match {query!r}.", fg=typer.colors.YELLOW, err=True)
        return
    for match in matches:
        typer.echo(f"{match.score:.2f}  {type(match.record).__name__} {match.name}  ({match.path})")


if __name__ == "__main__":
    app()
