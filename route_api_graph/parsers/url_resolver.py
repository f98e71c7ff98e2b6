"""Best-effort reduction of endpoint expressions to literal URLs."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Dict, Mapping, Optional

from route_api_graph.core.context import UrlConstantCache
from route_api_graph.core.schema import Resolution, resolved, unresolved
from route_api_graph.parsers.literals import split_top_level, unquote

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from route_api_graph.core.context import EndpointCache

logger = logging.getLogger(__name__)

_INTERPOLATION = re.compile(r"\$\{([^}]+)\}")
_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$.]*$")
_UPPER_CONSTANT = re.compile(r"\{([A-Z_][A-Z0-9_]*)\}|\b([A-Z_][A-Z0-9_]*)\b")
_JOIN = re.compile(r"\s*\+\s*")
_WHITESPACE = re.compile(r"\s+")


def find_constant_declaration(name: str, source: str) -> Optional[str]:
    """Value of ``const|let|var NAME = 'literal'`` in ``source``."""
    if not source or not _IDENTIFIER.match(name):
        return None
    pattern = re.compile(
        r"(?:const|let|var)\s+" + re.escape(name) + r"\s*=\s*['\"`]([^'\"`]+)['\"`]"
    )
    match = pattern.search(source)
    return match.group(1) if match else None


class UrlExpressionResolver:
    """Resolves literal, template, concatenation and symbol expressions.

    Lookup order for a symbol: local symbols, in-file constant declaration,
    configured fallback table, exact URL constant cache key. Unresolvable
    symbols become ``{name}`` placeholders inside templates and
    concatenations.
    """

    def __init__(
        self,
        constants: Optional[UrlConstantCache] = None,
        fallbacks: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.constants = constants if constants is not None else UrlConstantCache()
        self.fallbacks: Dict[str, str] = dict(fallbacks or {})

    def resolve(
        self,
        expression: str,
        symbols: Optional[Mapping[str, str]] = None,
        source: str = "",
    ) -> Resolution:
        original = expression if expression is not None else ""
        try:
            return self._resolve(original.strip(), symbols or {}, source or "")
        except Exception as exc:
            logger.debug("URL expression %r left unresolved: %s", original, exc)
            return unresolved(original)

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def _resolve(self, expression: str, symbols: Mapping[str, str], source: str) -> Resolution:
        if not expression:
            return unresolved(expression)

        literal = unquote(expression)
        if literal is not None:
            if expression.startswith("`"):
                return resolved(self._substitute_template(literal, symbols, source), expression)
            return resolved(literal, expression)

        operands = split_top_level(expression, "+")
        if len(operands) > 1:
            parts = [self._resolve_operand(operand, symbols, source) for operand in operands]
            return resolved("".join(parts), expression)

        return self._resolve_symbol(expression, symbols, source)

    def _resolve_operand(self, operand: str, symbols: Mapping[str, str], source: str) -> str:
        literal = unquote(operand)
        if literal is not None:
            if operand.startswith("`"):
                return self._substitute_template(literal, symbols, source)
            return literal

        value = self.lookup(operand, symbols, source)
        if value is not None:
            return value
        return "{" + operand + "}"

    def _resolve_symbol(self, name: str, symbols: Mapping[str, str], source: str) -> Resolution:
        value = self.lookup(name, symbols, source)
        if value is not None:
            return resolved(value, name)

        substituted = self.constants.substitute_first(name)
        if substituted is not None:
            return resolved(substituted, name)

        return unresolved(name)

    def _substitute_template(self, body: str, symbols: Mapping[str, str], source: str) -> str:
        def replace(match: "re.Match[str]") -> str:
            name = match.group(1).strip()
            value = self.lookup(name, symbols, source)
            return value if value is not None else "{" + name + "}"

        return _INTERPOLATION.sub(replace, body)

    def lookup(self, name: str, symbols: Mapping[str, str], source: str = "") -> Optional[str]:
        name = name.strip()
        if name in symbols:
            return symbols[name]

        declared = find_constant_declaration(name, source)
        if declared is not None:
            return declared

        if name in self.fallbacks:
            return self.fallbacks[name]

        return self.constants.get(name)


def normalize_url(
    url: str,
    constants: Optional[UrlConstantCache] = None,
    endpoints: Optional["EndpointCache"] = None,
    fallbacks: Optional[Mapping[str, str]] = None,
) -> str:
    """Final clean-up of a resolved URL before it is written out."""
    if not url:
        return ""

    text = constants.substitute_all(url) if constants is not None else url

    def replace(match: "re.Match[str]") -> str:
        name = match.group(1) or match.group(2)
        value = None
        if endpoints is not None:
            value = endpoints.find_constant(name)
        if value is None and fallbacks:
            value = fallbacks.get(name)
        return value if value is not None else match.group(0)

    text = _UPPER_CONSTANT.sub(replace, text)
    text = _JOIN.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()
