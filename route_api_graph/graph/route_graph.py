"""
Route graph construction.

Turns the raw declarations of every router file into the route table and
infers one parent per route from explicit nesting, path prefixes and
navigation calls inside route components.
"""

from __future__ import annotations

import logging
import posixpath
import re
from collections import OrderedDict
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from route_api_graph.core.context import AnalysisContext, RouteTable
from route_api_graph.core.filesystem import LocalFileSystem
from route_api_graph.core.paths import PathResolver
from route_api_graph.core.schema import NavigationKind, RouteNode
from route_api_graph.parsers.component_parser import extract_navigation_targets
from route_api_graph.parsers.route_parser import (
    RawRouteDeclaration,
    extract_import_bindings,
    extract_route_declarations,
    is_identifier,
)

logger = logging.getLogger(__name__)

DEFAULT_LOADERS = ("_import",)
DEFAULT_VIEW_MAPPINGS = {"/modules": "/views/modules"}
COMPONENT_EXTENSION = ".vue"

_INTERPOLATION = re.compile(r"\$\{[^}]*\}")
_DYNAMIC_IMPORT = re.compile(r"\b(?:import|require)\s*\(\s*\[?\s*(['\"`])(.*?)\1")


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

def build_full_path(parent_path: str, child_path: str) -> str:
    if child_path.startswith("/"):
        return child_path
    if parent_path == "/":
        return "/" + child_path
    return parent_path + "/" + child_path


def route_depth(path: str) -> int:
    if path == "/":
        return 1
    return max(1, len([part for part in path.split("/") if part]))


# ---------------------------------------------------------------------------
# Component references
# ---------------------------------------------------------------------------

class ComponentReferenceNormalizer:
    """Maps a route's raw ``component`` text to a root relative file path."""

    def __init__(
        self,
        resolver: PathResolver,
        loaders: Sequence[str] = DEFAULT_LOADERS,
        view_mappings: Optional[Mapping[str, str]] = None,
    ):
        self.resolver = resolver
        self.view_mappings = dict(DEFAULT_VIEW_MAPPINGS if view_mappings is None else view_mappings)
        names = "|".join(re.escape(loader) for loader in loaders) or "_import"
        self._loader_call = re.compile(r"\b(?:" + names + r")\s*\(\s*(['\"`])(.*?)\1")

    def normalize(
        self,
        reference: str,
        route_file: str = "",
        bindings: Optional[Mapping[str, str]] = None,
    ) -> str:
        reference = (reference or "").strip()
        if is_identifier(reference):
            reference = (bindings or {}).get(reference, "")
        if not reference:
            return ""

        loader = self._loader_call.search(reference)
        if loader:
            return self._from_loader(_INTERPOLATION.sub("", loader.group(2)))

        dynamic = _DYNAMIC_IMPORT.search(reference)
        if dynamic:
            return self._from_import(_INTERPOLATION.sub("", dynamic.group(2)), route_file)

        logger.debug("Unrecognized component reference %r in %s", reference, route_file)
        return ""

    def _from_loader(self, path: str) -> str:
        for prefix, target in self.view_mappings.items():
            if path.startswith(prefix):
                path = target + path[len(prefix):]
                break
        else:
            views = self.resolver.views_prefix
            if not path.startswith(views):
                path = views + ("" if path.startswith("/") else "/") + path
        return self.resolver.with_extension(path, COMPONENT_EXTENSION)

    def _from_import(self, reference: str, route_file: str) -> str:
        base = self.resolver.base_path(reference, route_file)
        if posixpath.splitext(base)[1]:
            return base
        return self.resolver.with_extension(base, COMPONENT_EXTENSION)


# ---------------------------------------------------------------------------
# Route table
# ---------------------------------------------------------------------------

class RouteGraphBuilder:
    """Fills the context's route table from router files in a fixed order."""

    def __init__(
        self,
        context: AnalysisContext,
        resolver: PathResolver,
        fs: LocalFileSystem,
        normalizer: Optional[ComponentReferenceNormalizer] = None,
    ):
        self.context = context
        self.resolver = resolver
        self.fs = fs
        self.normalizer = normalizer or ComponentReferenceNormalizer(resolver)

    def build(self, route_files: Iterable[str]) -> RouteTable:
        logger.info("Building route table...")
        for relative_path in route_files:
            content = self.fs.read_text(self.resolver.absolute(relative_path))
            if content is None:
                logger.debug("Route file not found: %s", relative_path)
                continue
            self.add_file(relative_path, content)

        logger.info("Route table built: %s routes", len(self.context.routes))
        return self.context.routes

    def add_file(self, relative_path: str, content: str) -> int:
        logger.info("Parsing route file %s", relative_path)
        try:
            declarations = extract_route_declarations(content)
            bindings = extract_import_bindings(content)
        except Exception as exc:
            logger.warning("Failed to parse route file %s: %s", relative_path, exc)
            return 0

        before = len(self.context.routes)
        for declaration in declarations:
            self._add(declaration, relative_path, bindings)
        return len(self.context.routes) - before

    def _add(self, root: RawRouteDeclaration, source_file: str, bindings: Dict[str, str]) -> None:
        # (declaration, parent path, parent depth, nearest named ancestor)
        stack = [(root, None, 0, None)]
        while stack:
            declaration, parent_path, parent_depth, named_parent = stack.pop()
            if parent_path is None:
                path = declaration.path
                depth = route_depth(path)
            else:
                path = build_full_path(parent_path, declaration.path)
                depth = parent_depth + 1

            if declaration.name:
                route = RouteNode(
                    name=declaration.name,
                    path=path,
                    component_path=self.normalizer.normalize(declaration.component, source_file, bindings),
                    component_ref=declaration.component,
                    source_file=source_file,
                    depth=depth,
                    parent=named_parent,
                    array_name=declaration.array_name,
                )
                self.context.routes.add(route)
                logger.debug("Route %s (%s) -> %s", route.name, route.path, route.component_path or "-")

            next_parent = declaration.name or named_parent
            for child in reversed(declaration.children):
                stack.append((child, path, depth, next_parent))


# ---------------------------------------------------------------------------
# Parent inference
# ---------------------------------------------------------------------------

def infer_parent_relations(
    routes: RouteTable,
    resolver: Optional[PathResolver] = None,
    fs: Optional[LocalFileSystem] = None,
) -> "OrderedDict[str, str]":
    """One parent per route; earlier strategies are never overwritten.

    1. explicit nesting in the route declaration,
    2. the longest path prefix that is itself a route,
    3. ``$router.push``/``$router.replace`` targets found in a route's
       component (requires ``resolver`` and ``fs``).
    """
    relations: "OrderedDict[str, str]" = OrderedDict()

    for route in routes:
        if route.parent:
            relations[route.name] = route.parent
            logger.debug("Declared parent: %s -> %s", route.parent, route.name)

    for route in routes:
        if route.name in relations:
            continue
        parent = _path_prefix_parent(routes, route)
        if parent:
            relations[route.name] = parent
            logger.debug("Path parent: %s -> %s", parent, route.name)

    if resolver is not None and fs is not None:
        for route in routes:
            if not route.component_path:
                continue
            for child in _navigation_children(routes, route, resolver, fs):
                if child != route.name and child not in relations:
                    relations[child] = route.name
                    logger.debug("Navigation parent: %s -> %s", route.name, child)

    logger.info("Parent inference complete: %s relations", len(relations))
    return relations


def _path_prefix_parent(routes: RouteTable, route: RouteNode) -> Optional[str]:
    parts = [part for part in route.path.split("/") if part]
    for length in range(len(parts) - 1, 0, -1):
        candidate = routes.find_by_path("/" + "/".join(parts[:length]), exclude=route.name)
        if candidate:
            return candidate
    return None


def _navigation_children(
    routes: RouteTable,
    route: RouteNode,
    resolver: PathResolver,
    fs: LocalFileSystem,
) -> List[str]:
    content = fs.read_text(resolver.absolute(route.component_path))
    if content is None:
        return []

    children: List[str] = []
    for kind, target in extract_navigation_targets(content):
        if kind is NavigationKind.NAME:
            name = target if target in routes else None
        else:
            name = routes.find_by_path(target)
        if name and name not in children:
            children.append(name)
    return children
