"""
Symbol table extraction for JavaScript source units.

Collects zero-argument function constants (``const BASE_URL = () => {
return '/api' }``) and plain string constants, then reduces each function's
return expression to a literal where possible. Used for base-URL files and
for the local scope of API modules.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Set, Tuple

from route_api_graph.core.context import UrlConstantCache
from route_api_graph.core.schema import Resolution, resolved, unresolved
from route_api_graph.parsers.literals import (
    find_closing,
    find_top_level,
    split_top_level,
    strip_comments,
    take_expression,
    unquote,
)

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from route_api_graph.core.filesystem import LocalFileSystem
    from route_api_graph.core.paths import PathResolver

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10

_ARROW_BLOCK = re.compile(r"(?:export\s+)?(?:const|let|var)\s+(\w+)\s*=\s*\(\s*\)\s*=>\s*\{")
_ARROW_EXPRESSION = re.compile(r"(?:export\s+)?(?:const|let|var)\s+(\w+)\s*=\s*\(\s*\)\s*=>\s*(?=[^\s{])")
_FUNCTION_DECLARATION = re.compile(r"(?:export\s+)?function\s+(\w+)\s*\(\s*\)\s*\{")
_STRING_CONSTANT = re.compile(r"(?:export\s+)?(?:const|let|var)\s+(\w+)\s*=\s*(['\"`])([^'\"`\n]*)\2")
_RETURN = re.compile(r"\breturn\s+")
_CALL = re.compile(r"^(\w+)\s*\(\s*\)$")


def _conditional_operator(expression: str) -> int:
    """Index of the top-level ``?`` of a conditional, skipping ``?.`` and ``??``."""
    index = find_top_level(expression, "?")
    while index != -1:
        following = expression[index + 1:index + 3]
        if following.startswith("?"):
            index = find_top_level(expression, "?", index + 2)
        elif following.startswith(".") and not following[1:].isdigit():
            index = find_top_level(expression, "?", index + 1)
        else:
            return index
    return -1


def _ternary_branches(expression: str) -> Optional[Tuple[str, str]]:
    """Both branches of ``cond ? 'a' : 'b'`` when each is a string literal."""
    question = _conditional_operator(expression)
    if question == -1:
        return None
    colon = find_top_level(expression, ":", question + 1)
    if colon == -1:
        return None
    first = unquote(expression[question + 1:colon])
    second = unquote(expression[colon + 1:])
    if first is None or second is None:
        return None
    return first, second


class SymbolTable:
    """Named constants of one source unit mapped to their resolutions."""

    def __init__(self) -> None:
        self.functions: Dict[str, Resolution] = {}
        self.constants: Dict[str, Resolution] = {}

    def get(self, name: str) -> Optional[Resolution]:
        if name.endswith("()"):
            return self.functions.get(name[:-2].strip())
        if name in self.constants:
            return self.constants[name]
        return self.functions.get(name)

    def as_mapping(self) -> Dict[str, str]:
        """Flat lookup used by the URL resolver: ``NAME`` and ``fn()`` keys."""
        mapping = {name: value.value for name, value in self.constants.items()}
        mapping.update({f"{name}()": value.value for name, value in self.functions.items()})
        return mapping

    def __len__(self) -> int:
        return len(self.functions) + len(self.constants)


class SymbolTableBuilder:
    """Builds a :class:`SymbolTable` from source text."""

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.max_depth = max_depth

    def build(self, content: str) -> SymbolTable:
        text = strip_comments(content)
        returns = self._collect_return_expressions(text)
        literals = self._collect_string_constants(text)

        table = SymbolTable()
        for name, value in literals.items():
            table.constants[name] = resolved(value, value)

        for name in returns:
            table.functions[name] = self._resolve(name, returns, literals, depth=0, trail=set())
        return table

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def _collect_return_expressions(self, text: str) -> Dict[str, str]:
        returns: Dict[str, str] = {}

        for pattern in (_ARROW_BLOCK, _FUNCTION_DECLARATION):
            for match in pattern.finditer(text):
                close = find_closing(text, match.end() - 1)
                if close == -1:
                    continue
                body = text[match.end():close]
                ret = _RETURN.search(body)
                if ret is None:
                    continue
                returns.setdefault(match.group(1), take_expression(body, ret.end()))

        for match in _ARROW_EXPRESSION.finditer(text):
            returns.setdefault(match.group(1), take_expression(text, match.end()))

        return returns

    def _collect_string_constants(self, text: str) -> Dict[str, str]:
        literals: Dict[str, str] = {}
        for match in _STRING_CONSTANT.finditer(text):
            name, quote, value = match.groups()
            if quote == "`" and "${" in value:
                continue
            literals.setdefault(name, value)
        return literals

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve_expression(
        self,
        expression: str,
        returns: Dict[str, str],
        literals: Dict[str, str],
    ) -> Resolution:
        return self._reduce(expression, returns, literals, depth=0, trail=set())

    def _resolve(
        self,
        name: str,
        returns: Dict[str, str],
        literals: Dict[str, str],
        depth: int,
        trail: Set[str],
    ) -> Resolution:
        expression = returns[name]
        if name in trail or depth > self.max_depth:
            logger.debug("Stopped resolving %s at depth %s", name, depth)
            return unresolved(expression)
        return self._reduce(expression, returns, literals, depth, trail | {name})

    def _reduce(
        self,
        expression: str,
        returns: Dict[str, str],
        literals: Dict[str, str],
        depth: int,
        trail: Set[str],
    ) -> Resolution:
        expression = expression.strip().rstrip(";").strip()

        ternary = _ternary_branches(expression)
        if ternary is not None:
            return resolved(ternary[0] or ternary[1], expression)

        call = _CALL.match(expression)
        if call:
            target = call.group(1)
            if target in returns:
                result = self._resolve(target, returns, literals, depth + 1, trail)
                if result.resolved:
                    return resolved(result.value, expression)
                return unresolved(expression)
            if target in literals:
                return resolved(literals[target], expression)
            return unresolved(expression)

        literal = unquote(expression)
        if literal is not None and "${" not in literal:
            return resolved(literal, expression)

        if expression in literals:
            return resolved(literals[expression], expression)

        operands = split_top_level(expression, "+")
        if len(operands) > 1:
            parts: List[str] = []
            for operand in operands:
                if operand in literals:
                    parts.append(literals[operand])
                    continue
                part = self._reduce(operand, returns, literals, depth + 1, trail)
                if not part.resolved:
                    return unresolved(expression)
                parts.append(part.value)
            return resolved("".join(parts), expression)

        return unresolved(expression)


def build_symbol_table(content: str, max_depth: int = DEFAULT_MAX_DEPTH) -> SymbolTable:
    return SymbolTableBuilder(max_depth=max_depth).build(content)


def load_constant_cache(
    search_paths: Iterable[str],
    resolver: "PathResolver",
    fs: "LocalFileSystem",
    cache: UrlConstantCache,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> int:
    """Register constants from every existing base-URL file; returns files parsed."""
    builder = SymbolTableBuilder(max_depth=max_depth)
    parsed = 0
    for relative_path in search_paths:
        absolute_path = resolver.absolute(relative_path)
        content = fs.read_text(absolute_path)
        if content is None:
            logger.debug("Base URL file not found: %s", absolute_path)
            continue

        logger.info("Loading URL constants from %s", resolver.relative(absolute_path))
        try:
            table = builder.build(content)
        except Exception as exc:
            logger.warning("Failed to parse base URL file %s: %s", absolute_path, exc)
            continue

        for name, value in table.functions.items():
            cache.register_function(name, value.value)
        for name, value in table.constants.items():
            cache.register_constant(name, value.value)
        parsed += 1
    return parsed
