"""
Output Manager
---------------
Centralizes data output for the CLI:
 - Table rendering (Rich)
 - JSON, CSV and TSV exports
 - Column selection from schema definitions

Data goes to stdout; notifications and logs go to stderr.
"""

import csv
import io
import json
import sys
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table

from cloudhost.core.notifier import success, warning

console = Console()

FORMATS = ("table", "json", "csv", "tsv")


def is_machine_readable(fmt: str) -> bool:
    return fmt in ("json", "csv", "tsv")


def _columns(data: List[Dict], schema=None):
    if schema and hasattr(schema, "display_headers"):
        return list(schema.display_headers.keys()), list(schema.display_headers.values())
    keys = list(data[0].keys()) if data else []
    return keys, keys


def _write(text: str, output: Optional[str]):
    if output:
        with open(output, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        success(f"File saved to {output}")
    else:
        sys.stdout.write(text)


def _delimited(data: List[Dict], field_keys: List[str], headers: List[str], delimiter: str) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\n")
    writer.writerow(headers)
    for row in data:
        writer.writerow([row.get(k, "") for k in field_keys])
    return buffer.getvalue()


def export_data(data: List[Dict], schema=None, fmt: str = "table", output: str = None, title: str = None):
    """Exports data in table, JSON, CSV or TSV formats using schema-driven columns."""
    field_keys, columns = _columns(data, schema)

    if fmt == "json":
        _write(json.dumps(data, indent=2, ensure_ascii=False) + "\n", output)
        return

    if fmt in ("csv", "tsv"):
        _write(_delimited(data, field_keys, columns, "," if fmt == "csv" else "\t"), output)
        return

    if not data:
        warning("No data to display.")
        return

    table = Table(
        title=title,
        show_header=True,
        header_style="bold cyan",
        row_styles=["none", "dim"],
    )
    for col_name in columns:
        table.add_column(col_name, overflow="fold", no_wrap=False)
    for row in data:
        table.add_row(*(str(row.get(k, "")) for k in field_keys))
    console.print(table)


def render_properties(properties: Dict[str, Any], fmt: str = "table", output: str = None):
    """Render a single resource as Property | Value rows."""
    rows = [{"property": k, "value": v} for k, v in properties.items()]
    headers = {"property": "Property", "value": "Value"}

    if fmt == "json":
        _write(json.dumps(properties, indent=2, ensure_ascii=False, default=str) + "\n", output)
        return
    if fmt in ("csv", "tsv"):
        _write(_delimited(rows, list(headers), list(headers.values()), "," if fmt == "csv" else "\t"), output)
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Property", style="cyan", no_wrap=True)
    table.add_column("Value", overflow="fold")
    for row in rows:
        table.add_row(str(row["property"]), str(row["value"]))
    console.print(table)
