"""Route graph, component graph and result flattening."""

from .component_graph import ComponentGraph, ComponentIndex
from .flattener import collect_api_calls, flatten_components, flatten_routes
from .route_graph import (
    ComponentReferenceNormalizer,
    RouteGraphBuilder,
    build_full_path,
    infer_parent_relations,
    route_depth,
)

__all__ = [
    "ComponentGraph",
    "ComponentIndex",
    "collect_api_calls",
    "flatten_components",
    "flatten_routes",
    "ComponentReferenceNormalizer",
    "RouteGraphBuilder",
    "build_full_path",
    "infer_parent_relations",
    "route_depth",
]
