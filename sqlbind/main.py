from __future__ import annotations

import importlib
import sys
from typing import List, Optional

import typer

from sqlbind.config import get_settings
from sqlbind.dialects import available_dialects, get_dialect
from sqlbind.errors import SqlBindError
from sqlbind.reporter import print_schema
from sqlbind.schema.registry import SchemaRegistry
from sqlbind.utils.logging import configure_logging

app = typer.Typer(help="sqlbind CLI: inspect record schemas and the DDL generated for them.")


def load_record_type(target: str) -> type:
    """
    Import ``module.path:ClassName`` and return the class.

    Raises
    ------
    typer.BadParameter
        If the target is malformed, the module cannot be imported or the
        attribute is missing.
    """
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise typer.BadParameter(f"Expected MODULE:CLASS, got '{target}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise typer.BadParameter(f"Cannot import '{module_name}': {exc}") from exc
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise typer.BadParameter(f"'{module_name}' has no attribute '{attr}'") from exc


def _dialect_option(value: Optional[str]) -> str:
    name = value or get_settings().dialect
    if name.lower() not in available_dialects() + ["postgresql"]:
        raise typer.BadParameter(
            f"Unknown dialect '{name}'. Available: {', '.join(available_dialects())}"
        )
    return name


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    target = (
        settings.database
        if settings.dialect == "sqlite"
        else f"{settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )
    typer.echo(
        f"dialect={settings.dialect} DB={target} | env={settings.app_env} "
        f"log_level={settings.log_level} log_json={settings.log_json}"
    )
    typer.echo("Available dialects: " + ", ".join(available_dialects()))


@app.command()
def ddl(
    targets: List[str] = typer.Argument(
        ...,
        help="Record classes as MODULE:CLASS, referenced types before the types referencing them.",
    ),
    dialect: Optional[str] = typer.Option(
        None,
        "--dialect",
        "-d",
        callback=_dialect_option,
        help="Engine to generate for (sqlite, mysql, postgres). Defaults to SQLBIND_DIALECT.",
    ),
    exist_ok: bool = typer.Option(False, "--if-not-exists", help="Emit CREATE TABLE IF NOT EXISTS."),
) -> None:
    """
    Print the CREATE TABLE statement for each record type.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json, force=False)
    engine = get_dialect(dialect)
    registry = SchemaRegistry(engine)

    for target in targets:
        record_type = load_record_type(target)
        try:
            schema = registry.get_or_build(record_type)
            schema.validate()
        except SqlBindError as exc:
            typer.secho(f"{target}: {exc}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)
        typer.echo(engine.create_table(schema, exist_ok=exist_ok).sql + ";")


@app.command()
def describe(
    target: str = typer.Argument(..., help="Record class as MODULE:CLASS."),
    dialect: Optional[str] = typer.Option(
        None,
        "--dialect",
        "-d",
        callback=_dialect_option,
        help="Engine whose column types to show. Defaults to SQLBIND_DIALECT.",
    ),
) -> None:
    """
    Render the schema derived for a record type as a table.
    """
    record_type = load_record_type(target)
    registry = SchemaRegistry(get_dialect(dialect))
    try:
        schema = registry.get_or_build(record_type)
    except SqlBindError as exc:
        typer.secho(f"{target}: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    print_schema(schema)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
