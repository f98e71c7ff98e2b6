"""Process-wide caches and the context object passed to every builder."""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from route_api_graph.core.schema import ApiEndpoint, ApiModule, RouteNode

logger = logging.getLogger(__name__)


class FrozenCacheError(RuntimeError):
    """Raised when a cache is written after its build phase finished."""


class _PhaseCache:
    """Single writer during its build phase, read-only afterwards."""

    name = "cache"

    def __init__(self) -> None:
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def _check_writable(self) -> None:
        if self._frozen:
            raise FrozenCacheError(f"{self.name} is read-only after its build phase")


class UrlConstantCache(_PhaseCache):
    """URL constants loaded from base-URL files.

    Functions are stored as ``{name()}`` and ``name()``, plain constants as
    ``{name}`` and ``name`` so both placeholders and raw expressions match.
    """

    name = "url constant cache"

    def __init__(self) -> None:
        super().__init__()
        self._values: "OrderedDict[str, str]" = OrderedDict()

    def register_function(self, name: str, value: str) -> None:
        self._check_writable()
        self._values[f"{{{name}()}}"] = value
        self._values[f"{name}()"] = value

    def register_constant(self, name: str, value: str) -> None:
        self._check_writable()
        self._values[f"{{{name}}}"] = value
        self._values[name] = value

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def items(self) -> Iterable[Tuple[str, str]]:
        return self._values.items()

    def keys_longest_first(self) -> List[str]:
        return sorted(self._values, key=lambda key: (-len(key), key))

    def substitute_first(self, expression: str) -> Optional[str]:
        """Replace the first cached key found inside ``expression``."""
        for key in self.keys_longest_first():
            if key in expression:
                return expression.replace(key, self._values[key])
        return None

    def substitute_all(self, text: str) -> str:
        for key in self.keys_longest_first():
            if key in text:
                text = text.replace(key, self._values[key])
        return text

    def to_dict(self) -> Dict[str, str]:
        return dict(self._values)


class EndpointCache(_PhaseCache):
    """API endpoints keyed by ``(function name, module path)``."""

    name = "endpoint cache"

    def __init__(self) -> None:
        super().__init__()
        self._endpoints: Dict[Tuple[str, str], ApiEndpoint] = {}
        self.modules: "OrderedDict[str, ApiModule]" = OrderedDict()

    def add_module(self, module: ApiModule) -> None:
        self._check_writable()
        self.modules[module.path] = module
        for endpoint in module.endpoints.values():
            self._endpoints[endpoint.key] = endpoint

    def get(self, function_name: str, module_path: str) -> Optional[ApiEndpoint]:
        return self._endpoints.get((function_name, module_path))

    def find(self, function_name: str, candidates: Iterable[str]) -> Optional[ApiEndpoint]:
        for module_path in candidates:
            endpoint = self._endpoints.get((function_name, module_path))
            if endpoint is not None:
                return endpoint
        return None

    def find_constant(self, name: str) -> Optional[str]:
        """A string constant declared in any parsed API module."""
        for module in self.modules.values():
            if name in module.constants:
                return module.constants[name]
        return None

    def __len__(self) -> int:
        return len(self._endpoints)

    def __iter__(self) -> Iterator[ApiEndpoint]:
        return iter(self._endpoints.values())


class RouteTable(_PhaseCache):
    """Routes keyed by unique name; the last declaration wins."""

    name = "route table"

    def __init__(self) -> None:
        super().__init__()
        self._routes: "OrderedDict[str, RouteNode]" = OrderedDict()
        self.component_routes: Dict[str, str] = {}

    def add(self, route: RouteNode) -> None:
        self._check_writable()
        if route.name in self._routes:
            logger.debug("Route %s redeclared in %s", route.name, route.source_file)
        self._routes[route.name] = route
        if route.component_path:
            self.component_routes[route.component_path] = route.name

    def get(self, name: str) -> Optional[RouteNode]:
        return self._routes.get(name)

    def find_by_path(self, path: str, exclude: Optional[str] = None) -> Optional[str]:
        for name, route in self._routes.items():
            if route.path == path and name != exclude:
                return name
        return None

    def __contains__(self, name: object) -> bool:
        return name in self._routes

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[RouteNode]:
        return iter(list(self._routes.values()))

    def names(self) -> List[str]:
        return list(self._routes)

    def to_dict(self) -> Dict[str, Dict[str, object]]:
        return {name: route.to_dict() for name, route in self._routes.items()}


@dataclass
class AnalysisContext:
    """State shared by the analysis phases of one run."""

    src_root: str
    constants: UrlConstantCache = field(default_factory=UrlConstantCache)
    endpoints: EndpointCache = field(default_factory=EndpointCache)
    routes: RouteTable = field(default_factory=RouteTable)
    parent_relations: "OrderedDict[str, str]" = field(default_factory=OrderedDict)
    stats: Dict[str, int] = field(default_factory=dict)

    def parent_of(self, route_name: str) -> str:
        if route_name in self.parent_relations:
            return self.parent_relations[route_name]
        route = self.routes.get(route_name)
        return (route.parent or "") if route else ""
