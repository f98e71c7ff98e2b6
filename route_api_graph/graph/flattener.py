"""Flatten the route and component graphs into one row per API call."""

from __future__ import annotations

import logging
import posixpath
from dataclasses import replace
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

from route_api_graph.core.context import AnalysisContext
from route_api_graph.core.schema import ApiCall, ComponentApiRow, RouteApiRow, RouteNode
from route_api_graph.graph.component_graph import ComponentGraph, ComponentIndex
from route_api_graph.parsers.url_resolver import normalize_url

logger = logging.getLogger(__name__)

DEFAULT_MAX_COMPONENT_DEPTH = 3


def collect_api_calls(
    index: ComponentIndex,
    component_path: str,
    max_depth: int = DEFAULT_MAX_COMPONENT_DEPTH,
) -> List[ApiCall]:
    """API calls of a component and of the child components it pulls in.

    Calls found below the component are tagged with the component's direct
    child they came through. A component already on the current import path
    is not entered again.
    """
    calls: List[ApiCall] = []
    # (component, depth, direct child of the starting component, components on the path)
    stack: List[Tuple[str, int, str, FrozenSet[str]]] = [(component_path, 0, "", frozenset([component_path]))]
    while stack:
        path, depth, child_source, trail = stack.pop()
        info = index.get(path)
        for call in info.api_calls:
            calls.append(replace(call, depth=depth, from_child=depth > 0, child_source=child_source))

        if depth >= max_depth:
            continue
        for child in reversed(info.children):
            if child in trail:
                continue
            stack.append((child, depth + 1, child_source or child, trail | {child}))

    return _dedupe(calls)


def _dedupe(calls: List[ApiCall]) -> List[ApiCall]:
    seen = set()
    unique = []
    for call in calls:
        if call.dedupe_key in seen:
            continue
        seen.add(call.dedupe_key)
        unique.append(call)
    return unique


def _component_name(path: str) -> str:
    return posixpath.splitext(posixpath.basename(path))[0]


class UrlNormalizer:
    """Applies :func:`normalize_url` with the context's caches."""

    def __init__(self, context: AnalysisContext, fallbacks: Optional[Mapping[str, str]] = None):
        self.context = context
        self.fallbacks = dict(fallbacks or {})
        self._cache: Dict[str, str] = {}

    def __call__(self, url: str) -> str:
        if url not in self._cache:
            self._cache[url] = normalize_url(url, self.context.constants, self.context.endpoints, self.fallbacks)
        return self._cache[url]


def flatten_routes(
    context: AnalysisContext,
    index: ComponentIndex,
    max_depth: int = DEFAULT_MAX_COMPONENT_DEPTH,
    fallbacks: Optional[Mapping[str, str]] = None,
) -> List[RouteApiRow]:
    """One row per (route, API call); routes without calls get a single empty row."""
    normalize = UrlNormalizer(context, fallbacks)
    rows: List[RouteApiRow] = []

    for route in context.routes:
        if not route.component_path:
            continue

        calls = collect_api_calls(index, route.component_path, max_depth)
        parent = context.parent_of(route.name)
        if not calls:
            rows.append(_route_row(route, parent))
            continue

        child_paths = _unique(call.child_source for call in calls if call.from_child)
        child_names = ", ".join(_component_name(path) for path in child_paths)
        for call in calls:
            endpoint = call.endpoint
            rows.append(
                _route_row(
                    route,
                    parent,
                    api_function=endpoint.function_name,
                    http_method=endpoint.method or "",
                    url=normalize(endpoint.url),
                    description=endpoint.description,
                    has_api_calls=True,
                    child_components=child_names,
                    child_paths=", ".join(child_paths),
                    is_from_child=call.from_child,
                    child_source_path=call.child_source,
                )
            )

    logger.info("Flattened %s routes into %s rows", len(context.routes), len(rows))
    return rows


def _route_row(route: RouteNode, parent: str, **values) -> RouteApiRow:
    return RouteApiRow(
        route_name=route.name,
        route_path=route.path,
        parent_route=parent,
        depth=route.depth,
        component_path=route.component_path,
        source_file=route.source_file,
        **values,
    )


def _unique(items) -> List[str]:
    ordered: List[str] = []
    for item in items:
        if item and item not in ordered:
            ordered.append(item)
    return ordered


def flatten_components(
    context: AnalysisContext,
    graph: ComponentGraph,
    fallbacks: Optional[Mapping[str, str]] = None,
) -> List[ComponentApiRow]:
    """One row per (component, own API call) in level order."""
    normalize = UrlNormalizer(context, fallbacks)
    rows: List[ComponentApiRow] = []

    for node in graph.level_order():
        parent = sorted(node.parents)[0] if node.parents else ""
        imports = ", ".join(node.imports)
        if not node.api_calls:
            rows.append(
                ComponentApiRow(
                    file_path=node.path,
                    component_type=node.label,
                    parent_component=parent,
                    component_imports=imports,
                )
            )
            continue

        for call in _dedupe(node.api_calls):
            endpoint = call.endpoint
            rows.append(
                ComponentApiRow(
                    file_path=node.path,
                    component_type=node.label,
                    parent_component=parent,
                    api_function=endpoint.function_name,
                    http_method=endpoint.method or "",
                    url=normalize(endpoint.url),
                    description=endpoint.description,
                    component_imports=imports,
                    has_api_calls=True,
                )
            )

    logger.info("Flattened %s components into %s rows", len(graph), len(rows))
    return rows
