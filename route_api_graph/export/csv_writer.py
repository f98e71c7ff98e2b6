"""CSV and JSON writers for analysis results."""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence, Tuple, Union

from route_api_graph.core.context import AnalysisContext
from route_api_graph.core.schema import ComponentApiRow, RouteApiRow

logger = logging.getLogger(__name__)

# UTF-8 with BOM so spreadsheet tools detect the encoding
CSV_ENCODING = "utf-8-sig"

ROUTE_COLUMNS: List[Tuple[str, str]] = [
    ("route_path", "Route Path"),
    ("route_name", "Route Name"),
    ("depth", "Route Level"),
    ("parent_route", "Parent Route"),
    ("component_path", "Component"),
    ("api_function", "API Function"),
    ("http_method", "Method"),
    ("url", "URL"),
    ("description", "Description"),
    ("is_from_child", "From Child Component"),
    ("child_source_path", "Child Component Path"),
    ("child_components", "Child Components"),
    ("child_paths", "Child Paths"),
    ("source_file", "Route File"),
    ("has_api_calls", "Has API Calls"),
]

COMPONENT_COLUMNS: List[Tuple[str, str]] = [
    ("file_path", "File Path"),
    ("component_type", "Component Type"),
    ("parent_component", "Parent Component"),
    ("api_function", "API Function"),
    ("http_method", "Method"),
    ("url", "URL"),
    ("description", "Description"),
    ("component_imports", "Imported Components"),
    ("has_api_calls", "Has API Calls"),
]


def _format(value: Any) -> Any:
    if isinstance(value, bool):
        return "yes" if value else "no"
    return value


def _write(path: Union[Path, str], columns: Sequence[Tuple[str, str]], rows: Iterable[Dict[str, Any]]) -> int:
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with output_path.open("w", encoding=CSV_ENCODING, newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=[header for _, header in columns])
        writer.writeheader()
        for row in rows:
            writer.writerow({header: _format(row.get(key, "")) for key, header in columns})
            count += 1
    logger.info("Wrote %s rows to %s", count, output_path)
    return count


def write_route_rows(path: Union[Path, str], rows: Iterable[RouteApiRow]) -> int:
    return _write(path, ROUTE_COLUMNS, (row.to_dict() for row in rows))


def write_component_rows(path: Union[Path, str], rows: Iterable[ComponentApiRow]) -> int:
    return _write(path, COMPONENT_COLUMNS, (row.to_dict() for row in rows))


def write_route_log(path: Union[Path, str], context: AnalysisContext) -> Path:
    """Dump the route table and inferred parent relations as JSON."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "src_root": context.src_root,
        "routes": context.routes.to_dict(),
        "component_routes": dict(context.routes.component_routes),
        "parent_relations": dict(context.parent_relations),
        "stats": dict(context.stats),
    }
    output_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Wrote route log to %s", output_path)
    return output_path
