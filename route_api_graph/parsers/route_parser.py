"""
Route declaration extractor.

Reads router source files and returns the declared route tree without
interpreting it: paths stay relative, component references stay raw text.
:mod:`route_api_graph.graph.route_graph` turns the declarations into
:class:`RouteNode` objects.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Tuple

from route_api_graph.parsers.literals import (
    find_closing,
    parse_object_literal,
    split_top_level,
    strip_comments,
    take_expression,
    unquote,
)

logger = logging.getLogger(__name__)

_ARRAY_DEFINITION = re.compile(
    r"(?:\b(?:const|let|var)\s+(\w+)\s*=|\b(routes)\s*:"
    r"|\bexport\s+(default)|\bmodule\.(exports)\s*=|\b(\w+)\s*\()\s*\["
)
_NAMED_GROUPS = 2
_LOOSE_OPENING = re.compile(r"[\[{]")
_NAVIGATION_CALL = re.compile(r"\b(?:push|replace)\s*\(\s*$")
_ROUTE_KEYS = ("component", "components", "children", "name", "redirect")
_OBJECT_DEFINITION = re.compile(r"\b(?:const|let|var)\s+(\w+)\s*=\s*\{")
_DEFAULT_IMPORT = re.compile(r"\bimport\s+(\w+)\s+from\s*['\"`]([^'\"`]+)['\"`]")
_BINDING = re.compile(r"\b(?:const|let|var)\s+(\w+)\s*=\s*")
_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")
_LOADER_EXPRESSION = re.compile(
    r"^(?:async\s+)?(?:\(\s*\w*\s*\)|\w+)?\s*(?:=>)?\s*(?:\w*import\w*|require)\s*\(",
    re.IGNORECASE,
)


@dataclass
class RawRouteDeclaration:
    """A route object as written in source, before path joining."""
    path: str
    name: str = ""
    component: str = ""
    children: List["RawRouteDeclaration"] = field(default_factory=list)
    array_name: Optional[str] = None

    def walk(self):
        """Yield this declaration and all nested children, depth first."""
        stack = [self]
        while stack:
            declaration = stack.pop()
            yield declaration
            stack.extend(reversed(declaration.children))


@dataclass
class _Definition:
    name: str
    start: int
    end: int
    body: str
    named: bool = True


class _RouteSource:
    """Array and object definitions of one route file."""

    def __init__(self, text: str):
        self.text = text
        self.arrays: Dict[str, _Definition] = {}
        self.array_order: List[_Definition] = []
        self.objects: Dict[str, _Definition] = {}
        self._collect()

    def _collect(self) -> None:
        for match in _ARRAY_DEFINITION.finditer(self.text):
            index = next(i for i, group in enumerate(match.groups(), 1) if group)
            name = match.group(index)
            opening = match.end() - 1
            closing = find_closing(self.text, opening)
            if closing == -1:
                logger.debug("Unbalanced route array %s", name)
                continue
            # export default [...], module.exports = [...] and fn([...]) cannot be referenced
            named = index <= _NAMED_GROUPS
            definition = _Definition(name, match.start(), closing, self.text[opening + 1:closing], named)
            self.array_order.append(definition)
            if named:
                self.arrays.setdefault(name, definition)

        for match in _OBJECT_DEFINITION.finditer(self.text):
            opening = match.end() - 1
            closing = find_closing(self.text, opening)
            if closing == -1:
                continue
            body = self.text[opening + 1:closing]
            if "path" not in parse_object_literal(body):
                continue
            self.objects.setdefault(
                match.group(1), _Definition(match.group(1), match.start(), closing, body)
            )

    def referenced_names(self) -> FrozenSet[str]:
        """Array and object names used inside another definition."""
        known = set(self.arrays) | set(self.objects)
        referenced = set()
        for definition in list(self.array_order) + list(self.objects.values()):
            for token in re.findall(r"[A-Za-z_$][\w$]*", _without_strings(definition.body)):
                if token in known and token != definition.name:
                    referenced.add(token)
        return frozenset(referenced)


def _without_strings(text: str) -> str:
    return re.sub(r"'[^'\n]*'|\"[^\"\n]*\"|`[^`]*`", "''", text)


def extract_route_declarations(content: str) -> List[RawRouteDeclaration]:
    """Top-level route declarations of a router file, in source order.

    Arrays (``const X = [``, ``routes: [``, ``export default [``,
    ``module.exports = [``, ``router.addRoutes([``) and standalone route
    objects (``const X = { path: ... }``) are roots unless another definition
    in the same file references them by name. Route literals outside all of
    those, such as ``router.addRoute({ path: '/x', ... })``, are picked up
    last.
    """
    source = _RouteSource(strip_comments(content))
    referenced = source.referenced_names()

    roots: List[Tuple[int, List[RawRouteDeclaration]]] = []
    spans: List[Tuple[int, int]] = []

    for definition in source.array_order:
        if (definition.named and definition.name in referenced) or _inside(definition.start, spans):
            continue
        spans.append((definition.start, definition.end))
        array_name = definition.name if definition.named else None
        trail = frozenset([definition.name]) if definition.named else frozenset()
        roots.append((definition.start, _from_array(source, definition.body, array_name, trail)))

    for definition in source.objects.values():
        if definition.name in referenced or _inside(definition.start, spans):
            continue
        declaration = _from_object(source, definition.body, None, frozenset([definition.name]))
        if declaration is not None:
            roots.append((definition.start, [declaration]))

    covered = [(d.start, d.end) for d in source.array_order]
    covered.extend((d.start, d.end) for d in source.objects.values())
    roots.extend(_loose_literals(source, covered))

    roots.sort(key=lambda item: item[0])
    return [declaration for _, declarations in roots for declaration in declarations]


def _inside(position: int, spans: List[Tuple[int, int]]) -> bool:
    return any(start < position < end for start, end in spans)


def _loose_literals(
    source: _RouteSource,
    covered: List[Tuple[int, int]],
) -> List[Tuple[int, List[RawRouteDeclaration]]]:
    found: List[Tuple[int, List[RawRouteDeclaration]]] = []
    spans = list(covered)
    for match in _LOOSE_OPENING.finditer(source.text):
        opening = match.start()
        if _inside(opening, spans):
            continue
        closing = find_closing(source.text, opening)
        if closing == -1:
            continue
        body = source.text[opening + 1:closing]
        if match.group() == "[":
            declarations = _from_array(source, body, None, frozenset())
        else:
            declarations = _loose_object(source, body, opening)
        if declarations:
            spans.append((opening, closing))
            found.append((opening, declarations))
    return found


def _loose_object(source: _RouteSource, body: str, opening: int) -> List[RawRouteDeclaration]:
    fields = parse_object_literal(body)
    if not any(key in fields for key in _ROUTE_KEYS):
        return []
    # router.push({ path, name }) is navigation, not a declaration
    if _NAVIGATION_CALL.search(source.text[max(0, opening - 40):opening]):
        return []
    declaration = _from_object(source, body, None, frozenset())
    return [declaration] if declaration is not None else []


def _from_array(
    source: _RouteSource,
    body: str,
    array_name: Optional[str],
    trail: FrozenSet[str],
) -> List[RawRouteDeclaration]:
    declarations: List[RawRouteDeclaration] = []
    for element in split_top_level(body):
        if element.startswith("..."):
            element = element[3:].strip()

        if element.startswith("{") and element.endswith("}"):
            declaration = _from_object(source, element[1:-1], array_name, trail)
            if declaration is not None:
                declarations.append(declaration)
        elif element in trail:
            logger.debug("Skipping recursive route reference %s", element)
        elif element in source.arrays:
            nested = source.arrays[element]
            declarations.extend(_from_array(source, nested.body, nested.name, trail | {element}))
        elif element in source.objects:
            declaration = _from_object(source, source.objects[element].body, array_name, trail | {element})
            if declaration is not None:
                declarations.append(declaration)
    return declarations


def _from_object(
    source: _RouteSource,
    body: str,
    array_name: Optional[str],
    trail: FrozenSet[str],
) -> Optional[RawRouteDeclaration]:
    fields = parse_object_literal(body)
    path = unquote(fields.get("path", ""))
    if path is None:
        return None

    component = fields.get("component", "")
    if not component and fields.get("components", "").startswith("{"):
        component = parse_object_literal(fields["components"][1:-1]).get("default", "")

    declaration = RawRouteDeclaration(
        path=path,
        name=unquote(fields.get("name", "")) or "",
        component=component,
        array_name=array_name,
    )

    children = fields.get("children", "")
    if children.startswith("["):
        declaration.children = _from_array(source, children[1:-1], array_name, trail)
    elif children in source.arrays and children not in trail:
        nested = source.arrays[children]
        declaration.children = _from_array(source, nested.body, nested.name, trail | {children})
    return declaration


def extract_import_bindings(content: str) -> Dict[str, str]:
    """Identifiers a route file binds to components, mapped to a loader expression.

    ``import Home from '@/views/home'`` becomes ``import('@/views/home')``;
    ``const Home = () => import('...')`` and loader calls such as
    ``const Home = _import('/home')`` keep their right-hand side.
    """
    text = strip_comments(content)
    bindings: Dict[str, str] = {}
    for match in _DEFAULT_IMPORT.finditer(text):
        bindings[match.group(1)] = f"import('{match.group(2)}')"

    for match in _BINDING.finditer(text):
        expression = take_expression(text, match.end())
        if expression.startswith("[") or expression.startswith("{"):
            continue
        if _LOADER_EXPRESSION.match(expression):
            bindings[match.group(1)] = expression
    return bindings


def is_identifier(text: str) -> bool:
    return bool(_IDENTIFIER.match(text))
