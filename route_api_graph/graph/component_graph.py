"""
Component import graph.

Every component file under the views root becomes a :class:`ComponentNode`;
edges follow child component imports. Depth is the longest import chain
from a root (a component nobody imports).
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Dict, Iterator, List, Optional

from tqdm import tqdm

from route_api_graph.core.filesystem import LocalFileSystem
from route_api_graph.core.paths import PathResolver
from route_api_graph.core.schema import ComponentNode
from route_api_graph.parsers.component_parser import ComponentInfo, ComponentParser

logger = logging.getLogger(__name__)

COMPONENT_EXTENSIONS = (".vue",)


class ComponentIndex:
    """Parses each component file once and hands out the cached result."""

    def __init__(self, parser: ComponentParser, resolver: PathResolver, fs: LocalFileSystem):
        self.parser = parser
        self.resolver = resolver
        self.fs = fs
        self._cache: Dict[str, ComponentInfo] = {}

    def get(self, path: str) -> ComponentInfo:
        info = self._cache.get(path)
        if info is None:
            info = self._parse(path)
            self._cache[path] = info
        return info

    def _parse(self, path: str) -> ComponentInfo:
        content = self.fs.read_text(self.resolver.absolute(path))
        if content is None:
            logger.debug("Component file missing: %s", path)
            return ComponentInfo(path=path, exists=False)
        try:
            return self.parser.parse(content, path)
        except Exception as exc:
            logger.warning("Failed to parse component %s: %s", path, exc)
            return ComponentInfo(path=path)

    def __contains__(self, path: object) -> bool:
        return path in self._cache

    def __len__(self) -> int:
        return len(self._cache)


def component_label(depth: int) -> str:
    return "root" if depth == 0 else f"level-{depth + 1}"


class ComponentGraph:
    """Component nodes keyed by root relative path."""

    def __init__(self, index: ComponentIndex):
        self.index = index
        self.nodes: "OrderedDict[str, ComponentNode]" = OrderedDict()

    def build(self, views_root: Optional[str] = None, progress: bool = False) -> "ComponentGraph":
        resolver = self.index.resolver
        directory = resolver.absolute(views_root or resolver.views_prefix)
        files = self.index.fs.scan(directory, COMPONENT_EXTENSIONS)
        logger.info("Found %s component files in %s", len(files), resolver.relative(directory))

        for file_path in tqdm(files, desc="Parsing components", unit="file", disable=not progress):
            path = resolver.relative(file_path)
            info = self.index.get(path)
            self.nodes[path] = ComponentNode(
                path=path,
                api_calls=list(info.api_calls),
                imports=list(info.child_names),
            )

        self._link()
        self._assign_depths()
        logger.info("Component graph built: %s components, %s roots", len(self.nodes), len(self.roots()))
        return self

    def _link(self) -> None:
        for node in self.nodes.values():
            for child in self.index.get(node.path).children:
                if child == node.path or child not in self.nodes:
                    continue
                node.children.add(child)
                self.nodes[child].parents.add(node.path)

    def _assign_depths(self) -> None:
        depths: Dict[str, int] = {}
        for path in self.nodes:
            self._depth(path, depths)
        for path, node in self.nodes.items():
            node.depth = depths[path]
            node.label = component_label(node.depth)

    def _depth(self, start: str, depths: Dict[str, int]) -> int:
        """Longest chain from a root, computed without recursion.

        A parent that is already on the current walk counts as depth 0.
        """
        if start in depths:
            return depths[start]

        stack = [start]
        on_walk = {start}
        while stack:
            path = stack[-1]
            parents = sorted(self.nodes[path].parents)
            pending = [p for p in parents if p not in depths and p not in on_walk]
            if pending:
                stack.append(pending[0])
                on_walk.add(pending[0])
                continue

            if parents:
                depths[path] = max(0 if p in on_walk else depths[p] for p in parents) + 1
            else:
                depths[path] = 0
            stack.pop()
            on_walk.discard(path)
        return depths[start]

    def roots(self) -> List[ComponentNode]:
        return [node for node in self.nodes.values() if node.is_root]

    def level_order(self) -> List[ComponentNode]:
        return sorted(self.nodes.values(), key=lambda node: (node.depth, node.path))

    def __iter__(self) -> Iterator[ComponentNode]:
        return iter(self.level_order())

    def __len__(self) -> int:
        return len(self.nodes)
