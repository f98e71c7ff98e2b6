"""Writers for analysis results."""

from .csv_writer import write_component_rows, write_route_log, write_route_rows

__all__ = ["write_component_rows", "write_route_log", "write_route_rows"]
