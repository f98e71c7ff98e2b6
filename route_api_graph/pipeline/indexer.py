"""Analysis pipeline orchestrator."""

from __future__ import annotations

import logging
import os
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from route_api_graph.core.context import AnalysisContext
from route_api_graph.core.filesystem import LocalFileSystem
from route_api_graph.core.paths import PathResolver, find_src_root, normalize_path
from route_api_graph.core.schema import ComponentApiRow, RouteApiRow
from route_api_graph.graph.component_graph import ComponentGraph, ComponentIndex
from route_api_graph.graph.flattener import flatten_components, flatten_routes
from route_api_graph.graph.route_graph import (
    ComponentReferenceNormalizer,
    RouteGraphBuilder,
    infer_parent_relations,
)
from route_api_graph.parsers.api_parser import ApiModuleParser, load_api_modules
from route_api_graph.parsers.component_parser import ComponentParser
from route_api_graph.parsers.symbols import SymbolTableBuilder, load_constant_cache
from route_api_graph.parsers.url_resolver import UrlExpressionResolver
from route_api_graph.pipeline.config import AnalyzerConfig, load_analyzer_config

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Rows and statistics of one run."""

    context: AnalysisContext
    route_rows: List[RouteApiRow] = field(default_factory=list)
    component_rows: List[ComponentApiRow] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)


@dataclass
class RouteApiAnalyzer:
    """Runs the analysis phases in order over one source tree.

    Phases: URL constant preload, API preload, route table, parent
    inference, then either route flattening or the component graph. Each
    cache is frozen as soon as its phase completes.
    """

    source_dir: str
    config: Optional[AnalyzerConfig] = None
    fs: Optional[LocalFileSystem] = None
    progress: bool = False
    context: AnalysisContext = field(init=False)
    resolver: PathResolver = field(init=False)
    url_resolver: UrlExpressionResolver = field(init=False)
    _completed: Set[str] = field(init=False, default_factory=set)
    _index: Optional[ComponentIndex] = field(init=False, default=None)

    def __post_init__(self) -> None:
        if self.config is None:
            self.config = load_analyzer_config()
        if self.fs is None:
            self.fs = LocalFileSystem(encoding=self.config.analysis.encoding)

        paths = self.config.paths
        src_root = find_src_root(self.source_dir, self.fs)
        self.resolver = PathResolver(src_root, self.fs, alias=paths.alias, views_root=paths.views_root)
        self.context = AnalysisContext(src_root=src_root)
        self.url_resolver = UrlExpressionResolver(self.context.constants, self.config.url_constants)

    @property
    def project_name(self) -> str:
        root = Path(self.context.src_root)
        name = root.parent.name if root.name == "src" else root.name
        return name or "project"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def analyze_routes(self) -> AnalysisResult:
        logger.info("Starting route analysis for %s", self.context.src_root)
        self.load_constants()
        self.load_api()
        self.build_routes()
        self.infer_parents()

        rows = flatten_routes(
            self.context,
            self.component_index,
            max_depth=self.config.analysis.max_component_depth,
            fallbacks=self.config.url_constants,
        )
        self.context.stats["rows"] = len(rows)
        self.context.stats["routes_with_api"] = len({row.route_name for row in rows if row.has_api_calls})
        self.context.stats["routes_without_api"] = len({row.route_name for row in rows if not row.has_api_calls})
        logger.info("Route analysis complete")
        return AnalysisResult(context=self.context, route_rows=rows, stats=dict(self.context.stats))

    def analyze_components(self) -> AnalysisResult:
        logger.info("Starting component analysis for %s", self.context.src_root)
        self.load_constants()
        self.load_api()

        graph = ComponentGraph(self.component_index).build(
            views_root=self.component_scan_root(), progress=self.progress
        )
        rows = flatten_components(self.context, graph, fallbacks=self.config.url_constants)
        self.context.stats["components"] = len(graph)
        self.context.stats["root_components"] = len(graph.roots())
        self.context.stats["components_with_api"] = sum(1 for node in graph.nodes.values() if node.api_calls)
        self.context.stats["rows"] = len(rows)
        logger.info("Component analysis complete")
        return AnalysisResult(context=self.context, component_rows=rows, stats=dict(self.context.stats))

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def load_constants(self) -> None:
        if self._start("constants"):
            return
        files = load_constant_cache(
            self.config.paths.base_url_search_paths,
            self.resolver,
            self.fs,
            self.context.constants,
            max_depth=self.config.analysis.max_symbol_depth,
        )
        self.context.constants.freeze()
        self.context.stats["base_url_files"] = files
        self.context.stats["url_constants"] = len(self.context.constants) // 2
        logger.info("Loaded %s URL constants", self.context.stats["url_constants"])

    def load_api(self) -> None:
        if self._start("api"):
            return
        analysis = self.config.analysis
        parser = ApiModuleParser(
            self.url_resolver,
            request_functions=analysis.request_functions,
            description_max_length=analysis.description_max_length,
            comment_lookbehind=analysis.comment_lookbehind,
            symbol_builder=SymbolTableBuilder(max_depth=analysis.max_symbol_depth),
        )
        modules = load_api_modules(
            self.config.paths.api_directories,
            self.resolver,
            self.fs,
            self.context.endpoints,
            parser,
            file_markers=self.config.paths.api_file_markers,
            progress=self.progress,
        )
        self.context.endpoints.freeze()
        self.context.stats["api_modules"] = modules
        self.context.stats["api_functions"] = len(self.context.endpoints)
        self.context.stats["unresolved_urls"] = sum(1 for endpoint in self.context.endpoints if not endpoint.resolved)

    def build_routes(self) -> None:
        if self._start("routes"):
            return
        normalizer = ComponentReferenceNormalizer(
            self.resolver,
            loaders=self.config.analysis.route_loaders,
            view_mappings=self.config.paths.view_mappings,
        )
        RouteGraphBuilder(self.context, self.resolver, self.fs, normalizer).build(
            self.config.paths.route_search_paths
        )
        self.context.routes.freeze()
        self.context.stats["routes"] = len(self.context.routes)

    def infer_parents(self) -> None:
        if self._start("parents"):
            return
        self.context.parent_relations = infer_parent_relations(self.context.routes, self.resolver, self.fs)
        self.context.stats["parent_relations"] = len(self.context.parent_relations)

    def component_scan_root(self) -> str:
        """Root relative directory whose components are analyzed.

        The configured views root, narrowed to ``source_dir`` when that lies
        inside it.
        """
        views = self.resolver.absolute(self.resolver.views_prefix)
        requested = normalize_path(os.path.abspath(self.source_dir)).rstrip("/")
        if requested == views or requested.startswith(views + "/"):
            return self.resolver.relative(requested)
        return self.resolver.views_prefix

    @property
    def component_index(self) -> ComponentIndex:
        if self._index is None:
            parser = ComponentParser(
                self.resolver,
                self.context.endpoints,
                import_markers=self.config.paths.api_import_markers,
                skip_markers=self.config.analysis.child_skip_markers,
            )
            self._index = ComponentIndex(parser, self.resolver, self.fs)
        return self._index

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _start(self, phase: str) -> bool:
        """Mark ``phase`` as started; returns True if it already ran."""
        if phase in self._completed:
            return True
        self._completed.add(phase)
        return False


def summarize(stats: Dict[str, int]) -> List[str]:
    """Human readable run summary lines."""
    labels = [
        ("routes", "Routes"),
        ("parent_relations", "Parent relations"),
        ("components", "Components"),
        ("api_functions", "API functions"),
        ("unresolved_urls", "Unresolved URLs"),
        ("url_constants", "URL constants"),
        ("routes_with_api", "Routes with API calls"),
        ("routes_without_api", "Routes without API calls"),
        ("components_with_api", "Components with API calls"),
        ("rows", "Rows"),
    ]
    return [f"  {label}: {stats[key]}" for key, label in labels if key in stats]


def route_overview(
    context: AnalysisContext,
    rows: Iterable[RouteApiRow],
    max_relations: int = 5,
    max_urls: int = 10,
) -> List[str]:
    """Route level distribution, sample parent relations and the most called URLs."""
    lines: List[str] = []
    levels = Counter(route.depth for route in context.routes)
    if levels:
        lines.append("  Route levels:")
        lines.extend(f"    Level {depth}: {count}" for depth, count in sorted(levels.items()))

    if context.parent_relations:
        lines.append("  Parent relations:")
        for child, parent in list(context.parent_relations.items())[:max_relations]:
            lines.append(f"    {parent} -> {child}")

    urls = Counter(row.url for row in rows if row.has_api_calls and row.url)
    if urls:
        lines.append(f"  Most called URLs (top {max_urls}):")
        lines.extend(f"    {url}: {count}" for url, count in urls.most_common(max_urls))
    return lines
