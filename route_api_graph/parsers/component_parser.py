"""
UI component parser.

Extracts from a ``.vue`` (or script) component the API functions it imports,
the child components it imports and the routes it navigates to.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from route_api_graph.core.context import EndpointCache
from route_api_graph.core.paths import PathResolver
from route_api_graph.core.schema import ApiCall, NavigationKind
from route_api_graph.parsers.literals import find_closing, parse_object_literal, strip_comments, unquote

logger = logging.getLogger(__name__)

DEFAULT_IMPORT_MARKERS = ("/api/", "@/api", "/api.js", "@/views/modules/")
DEFAULT_SKIP_MARKERS = (
    "/api/",
    "/utils/",
    "/mixins/",
    "node_modules",
    "@/assets/",
    "@/styles/",
)
SCRIPT_EXTENSIONS = (".js", ".ts")

_NAMED_IMPORT = re.compile(r"\bimport\s*\{\s*([^}]+?)\s*\}\s*from\s*['\"`]([^'\"`]+)['\"`]")
_NAMESPACE_IMPORT = re.compile(r"\bimport\s*\*\s*as\s+(\w+)\s+from\s*['\"`]([^'\"`]+)['\"`]")
_DEFAULT_IMPORT = re.compile(r"\bimport\s+(\w+)\s+from\s*['\"`]([^'\"`]+)['\"`]")
_DYNAMIC_IMPORT = re.compile(r"\bimport\s*\(\s*['\"`]([^'\"`$]+)['\"`]\s*\)")
_NAVIGATION = re.compile(r"\$router\s*\.\s*(?:push|replace)\s*\(\s*")
_SPECIFIER = re.compile(r"^(\w+)(?:\s+as\s+(\w+))?$")


@dataclass
class ComponentInfo:
    """What one component file imports and calls."""
    path: str
    exists: bool = True
    api_calls: List[ApiCall] = field(default_factory=list)
    api_imports: List[str] = field(default_factory=list)
    children: List[str] = field(default_factory=list)
    child_names: List[str] = field(default_factory=list)
    navigation: List[Tuple[NavigationKind, str]] = field(default_factory=list)

    @property
    def has_api_calls(self) -> bool:
        return bool(self.api_calls)


def is_api_import(import_path: str, markers: Sequence[str] = DEFAULT_IMPORT_MARKERS) -> bool:
    return any(marker in import_path for marker in markers)


def is_component_import(import_path: str, skip_markers: Sequence[str] = DEFAULT_SKIP_MARKERS) -> bool:
    if any(marker in import_path for marker in skip_markers):
        return False
    if any(ext in import_path for ext in SCRIPT_EXTENSIONS) and "/views/" not in import_path:
        return False
    return True


def extract_navigation_targets(content: str) -> List[Tuple[NavigationKind, str]]:
    """``$router.push('/x')``, ``$router.replace({ name: 'x' })`` and the like."""
    text = strip_comments(content)
    targets: List[Tuple[NavigationKind, str]] = []
    for match in _NAVIGATION.finditer(text):
        start = match.end()
        if start >= len(text):
            continue

        if text[start] == "{":
            close = find_closing(text, start)
            if close == -1:
                continue
            fields = parse_object_literal(text[start + 1:close])
            name = unquote(fields.get("name", ""))
            if name:
                targets.append((NavigationKind.NAME, name))
                continue
            path = unquote(fields.get("path", ""))
        else:
            quote = text[start]
            end = text.find(quote, start + 1) if quote in "'\"`" else -1
            path = text[start + 1:end] if end != -1 else None

        if path and "${" not in path:
            targets.append((NavigationKind.PATH, path.split("?")[0]))
    return targets


class ComponentParser:
    """Parses component files against the endpoint cache."""

    def __init__(
        self,
        resolver: PathResolver,
        endpoints: EndpointCache,
        import_markers: Sequence[str] = DEFAULT_IMPORT_MARKERS,
        skip_markers: Sequence[str] = DEFAULT_SKIP_MARKERS,
    ):
        self.resolver = resolver
        self.endpoints = endpoints
        self.import_markers = tuple(import_markers)
        self.skip_markers = tuple(skip_markers)

    def parse(self, content: str, path: str) -> ComponentInfo:
        text = strip_comments(content)
        info = ComponentInfo(path=path)
        self._named_api_imports(text, info)
        self._namespace_api_imports(text, info)
        self._child_components(text, info)
        info.navigation = extract_navigation_targets(text)
        return info

    # ------------------------------------------------------------------
    # API imports
    # ------------------------------------------------------------------

    def _named_api_imports(self, text: str, info: ComponentInfo) -> None:
        for match in _NAMED_IMPORT.finditer(text):
            specifiers, import_path = match.groups()
            if not is_api_import(import_path, self.import_markers):
                logger.debug("Skipping non-API import %s in %s", import_path, info.path)
                continue

            candidates = self.resolver.module_candidates(import_path, info.path)
            for specifier in specifiers.split(","):
                parsed = _SPECIFIER.match(specifier.strip())
                if not parsed:
                    continue
                function_name = parsed.group(1)
                self._add_call(info, function_name, import_path, candidates)
                info.api_imports.append(parsed.group(2) or function_name)

    def _namespace_api_imports(self, text: str, info: ComponentInfo) -> None:
        for match in _NAMESPACE_IMPORT.finditer(text):
            namespace, import_path = match.groups()
            if not is_api_import(import_path, self.import_markers):
                continue

            candidates = self.resolver.module_candidates(import_path, info.path)
            usage = re.compile(r"\b" + re.escape(namespace) + r"\s*\.\s*(\w+)\s*\(")
            seen = set()
            for call in usage.finditer(text):
                function_name = call.group(1)
                if function_name in seen:
                    continue
                seen.add(function_name)
                if self._add_call(info, function_name, import_path, candidates):
                    info.api_imports.append(f"{namespace}.{function_name}")

    def _add_call(self, info: ComponentInfo, function_name: str, import_path: str, candidates: List[str]) -> bool:
        endpoint = self.endpoints.find(function_name, candidates)
        if endpoint is None:
            logger.debug("No endpoint %s in %s", function_name, ", ".join(candidates))
            return False
        info.api_calls.append(ApiCall(endpoint=endpoint, import_path=import_path, source_component=info.path))
        return True

    # ------------------------------------------------------------------
    # Child components
    # ------------------------------------------------------------------

    def _child_components(self, text: str, info: ComponentInfo) -> None:
        references = [(m.group(1), m.group(2)) for m in _DEFAULT_IMPORT.finditer(text)]
        for m in _DYNAMIC_IMPORT.finditer(text):
            references.append((_component_name(m.group(1)), m.group(1)))

        for name, import_path in references:
            if not is_component_import(import_path, self.skip_markers):
                continue
            child = self.resolve_component(import_path, info.path)
            if child is None:
                logger.debug("Child component not found: %s (from %s)", import_path, info.path)
                continue
            if child != info.path and child not in info.children:
                info.children.append(child)
                info.child_names.append(name)

    def resolve_component(self, import_path: str, importer: str) -> Optional[str]:
        return self.resolver.resolve_module(import_path, importer, extensions=(".vue",))


def _component_name(import_path: str) -> str:
    name = import_path.rstrip("/").rsplit("/", 1)[-1]
    if name.endswith(".vue"):
        name = name[:-len(".vue")]
    return name


def parse_component(
    content: str,
    path: str,
    resolver: PathResolver,
    endpoints: EndpointCache,
    **options,
) -> ComponentInfo:
    return ComponentParser(resolver, endpoints, **options).parse(content, path)
