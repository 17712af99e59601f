from __future__ import annotations

from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from sqlbind.schema.models import ColumnDescriptor, Schema


def _roles(column: ColumnDescriptor) -> str:
    roles: List[str] = []
    if column.primary:
        roles.append("primary")
    if column.autoincrement:
        roles.append("autoinc")
    if column.unique:
        roles.append("unique")
    if column.foreign:
        roles.append(f"-> {column.foreign_table}.{column.foreign_column}")
    if column.created:
        roles.append("created")
    if column.updated:
        roles.append("updated")
    if column.json:
        roles.append("json")
    return ", ".join(roles)


def schema_table(schema: Schema) -> Table:
    """
    Build a rich table describing one schema, one row per column.
    """
    title = f"{schema.record_type.__name__} -> {schema.table or '[red]<no table>[/red]'}"
    caption = f"refresh order: {schema.refresh_order_by}" if schema.refresh_order_by else None
    table = Table(title=title, box=box.ROUNDED, caption=caption)

    table.add_column("Column", style="cyan", no_wrap=True)
    table.add_column("Field", style="magenta")
    table.add_column("Kind", style="blue")
    table.add_column("SQL type", style="green")
    table.add_column("Roles", style="yellow")
    table.add_column("Default", justify="right")

    for column in schema.columns:
        table.add_row(
            column.name,
            ".".join(column.path),
            column.kind.value,
            column.sql_type,
            _roles(column),
            column.default if column.default is not None else "",
        )
    return table


def print_schema(schema: Schema, console: Optional[Console] = None) -> None:
    """Render a schema to the terminal."""
    console = console or Console()
    if not schema.columns:
        console.print(f"[yellow]{schema.record_type.__name__} has no tagged fields.[/yellow]")
        return
    console.print(schema_table(schema))
