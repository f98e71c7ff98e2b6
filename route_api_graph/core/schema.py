"""
Core schema definitions for the route/API graph.

This module defines the nodes, edges and result rows shared by the parsers,
graph builders and exporters.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple


PLACEHOLDER_PATTERN = re.compile(r"\{[^{}/]+\}")


class NavigationKind(Enum):
    """How an in-component navigation call names its target"""
    PATH = "path"
    NAME = "name"


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving an expression to a literal string"""
    value: str
    original: str = ""
    resolved: bool = True

    @property
    def has_placeholder(self) -> bool:
        return bool(PLACEHOLDER_PATTERN.search(self.value))

    def __str__(self) -> str:
        return self.value


def resolved(value: str, original: str = "") -> Resolution:
    """Build a resolution; values still holding a ``{symbol}`` placeholder stay unresolved."""
    return Resolution(
        value=value,
        original=original or value,
        resolved=not PLACEHOLDER_PATTERN.search(value),
    )


def unresolved(original: str, value: Optional[str] = None) -> Resolution:
    return Resolution(
        value=original if value is None else value,
        original=original,
        resolved=False,
    )


@dataclass
class RouteNode:
    """A named, path addressable navigation target"""
    name: str
    path: str
    component_path: str = ""
    component_ref: str = ""
    source_file: str = ""
    depth: int = 1
    parent: Optional[str] = None
    array_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class ApiEndpoint:
    """A backend callable function exported by an API module"""
    function_name: str
    module_path: str
    url: str
    description: str = ""
    method: Optional[str] = None
    resolved: bool = True

    @property
    def key(self) -> Tuple[str, str]:
        return (self.function_name, self.module_path)


@dataclass
class ApiModule:
    """Parsed API module: its string constants and endpoints"""
    path: str
    constants: Dict[str, str] = field(default_factory=dict)
    endpoints: Dict[str, ApiEndpoint] = field(default_factory=dict)


@dataclass(frozen=True)
class ApiCall:
    """An endpoint as imported by a component"""
    endpoint: ApiEndpoint
    import_path: str
    source_component: str
    depth: int = 0
    from_child: bool = False
    child_source: str = ""

    @property
    def function_name(self) -> str:
        return self.endpoint.function_name

    @property
    def dedupe_key(self) -> Tuple[str, str, str]:
        return (self.endpoint.function_name, self.endpoint.module_path, self.child_source)


@dataclass
class ComponentNode:
    """A single UI component file in the import graph"""
    path: str
    api_calls: List[ApiCall] = field(default_factory=list)
    imports: List[str] = field(default_factory=list)
    children: Set[str] = field(default_factory=set)
    parents: Set[str] = field(default_factory=set)
    depth: int = 0
    label: str = "root"

    @property
    def is_root(self) -> bool:
        return not self.parents


@dataclass
class RouteApiRow:
    """One flattened (route, API call) pair"""
    route_name: str
    route_path: str
    parent_route: str
    depth: int
    component_path: str
    api_function: str = ""
    http_method: str = ""
    url: str = ""
    description: str = ""
    source_file: str = ""
    has_api_calls: bool = False
    child_components: str = ""
    child_paths: str = ""
    is_from_child: bool = False
    child_source_path: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class ComponentApiRow:
    """One flattened (component, API call) pair"""
    file_path: str
    component_type: str
    parent_component: str
    api_function: str = ""
    http_method: str = ""
    url: str = ""
    description: str = ""
    component_imports: str = ""
    has_api_calls: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
