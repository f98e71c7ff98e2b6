"""
API module parser.

Finds exported endpoint functions that hand a request descriptor to a
request helper::

    /** Fetch the list */
    export function getList(params) {
      return request({ url: BASE + '/list', method: 'get', params })
    }

    export const getItem = (id) => request({ url: `/item/${id}` })

and turns each into an :class:`ApiEndpoint` keyed by function name and
module path.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence, Tuple

from tqdm import tqdm

from route_api_graph.core.schema import ApiEndpoint, ApiModule
from route_api_graph.parsers.literals import (
    find_closing,
    parse_object_literal,
    strip_comments,
    unquote,
)
from route_api_graph.parsers.symbols import SymbolTableBuilder
from route_api_graph.parsers.url_resolver import UrlExpressionResolver

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from route_api_graph.core.context import EndpointCache
    from route_api_graph.core.filesystem import LocalFileSystem
    from route_api_graph.core.paths import PathResolver

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_FUNCTIONS = ("request",)
DEFAULT_DESCRIPTION_MAX_LENGTH = 200
DEFAULT_COMMENT_LOOKBEHIND = 300
DEFAULT_FILE_MARKERS = ("/api/", "/api.js")

_CONSTANT = re.compile(r"(?:const|let|var)\s+(\w+)\s*=\s*['\"`]([^'\"`]+)['\"`]")
_EXPORT_FUNCTION = re.compile(r"\bexport\s+(?:async\s+)?function\s+(\w+)\s*\(")
_EXPORT_ARROW = re.compile(
    r"\bexport\s+(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?(?:\([^)]*\)|[A-Za-z_$][\w$]*)\s*=>"
)
_BLOCK_COMMENT_TAIL = re.compile(r"/\*[\s\S]*?\*/\s*$")
_COMMENT_MARKERS = re.compile(r"/\*\*?|\*/|//")
_LEADING_STAR = re.compile(r"^\s*\*+")
_LEADING_TAG = re.compile(r"^[@\\]\w+\s*")


def is_api_file(relative_path: str, markers: Iterable[str] = DEFAULT_FILE_MARKERS) -> bool:
    return any(marker in relative_path for marker in markers)


def extract_description(
    content: str,
    position: int,
    lookbehind: int = DEFAULT_COMMENT_LOOKBEHIND,
    max_length: int = DEFAULT_DESCRIPTION_MAX_LENGTH,
) -> str:
    """Text of the comment that directly precedes ``position``, cleaned up.

    Returns an empty string when no comment ends right before the position.
    """
    window = content[max(0, position - lookbehind):position]
    comment = _trailing_block_comment(window) or _trailing_line_comments(window)
    if not comment:
        return ""

    lines = []
    for raw_line in _COMMENT_MARKERS.sub("", comment).splitlines():
        line = _LEADING_STAR.sub("", raw_line).strip()
        line = _LEADING_TAG.sub("", line).strip()
        if line:
            lines.append(line)
    return ", ".join(lines)[:max_length]


def _trailing_block_comment(window: str) -> Optional[str]:
    start = window.rfind("/*")
    if start == -1:
        return None
    match = _BLOCK_COMMENT_TAIL.match(window, start)
    return match.group(0) if match else None


def _trailing_line_comments(window: str) -> Optional[str]:
    lines = window.rstrip().splitlines()
    collected: List[str] = []
    for line in reversed(lines):
        if not line.strip().startswith("//"):
            break
        collected.append(line)
    if not collected:
        return None
    return "\n".join(reversed(collected))


class ApiModuleParser:
    """Parses one API module into endpoints.

    Local string constants and zero-argument helper functions of the module
    feed the URL resolver before the global constant cache is consulted.
    """

    def __init__(
        self,
        url_resolver: UrlExpressionResolver,
        request_functions: Sequence[str] = DEFAULT_REQUEST_FUNCTIONS,
        description_max_length: int = DEFAULT_DESCRIPTION_MAX_LENGTH,
        comment_lookbehind: int = DEFAULT_COMMENT_LOOKBEHIND,
        symbol_builder: Optional[SymbolTableBuilder] = None,
    ):
        self.url_resolver = url_resolver
        self.description_max_length = description_max_length
        self.comment_lookbehind = comment_lookbehind
        self.symbol_builder = symbol_builder or SymbolTableBuilder()
        names = "|".join(re.escape(name) for name in request_functions) or "request"
        self._request_call = re.compile(r"\b(?:" + names + r")\s*\(\s*\{")

    def parse(self, content: str, module_path: str) -> ApiModule:
        text = strip_comments(content)
        module = ApiModule(path=module_path, constants=self._collect_constants(text))

        symbols: Dict[str, str] = dict(module.constants)
        symbols.update(self.symbol_builder.build(content).as_mapping())

        for name, start, end in self._declarations(text):
            endpoint = self._parse_declaration(name, start, text[start:end], content, module, symbols)
            if endpoint is not None:
                module.endpoints[name] = endpoint

        logger.debug("Parsed %s endpoints from %s", len(module.endpoints), module_path)
        return module

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _collect_constants(text: str) -> Dict[str, str]:
        constants: Dict[str, str] = {}
        for match in _CONSTANT.finditer(text):
            name, value = match.groups()
            if "${" in value:
                continue
            constants[name] = value
        return constants

    @staticmethod
    def _declarations(text: str) -> List[Tuple[str, int, int]]:
        """``(name, start, end)`` spans of exported functions, each ending at the next one."""
        starts = sorted(
            [(match.start(), match.group(1)) for match in _EXPORT_FUNCTION.finditer(text)]
            + [(match.start(), match.group(1)) for match in _EXPORT_ARROW.finditer(text)]
        )
        spans = []
        for index, (start, name) in enumerate(starts):
            end = starts[index + 1][0] if index + 1 < len(starts) else len(text)
            spans.append((name, start, end))
        return spans

    def _parse_declaration(
        self,
        name: str,
        start: int,
        body: str,
        content: str,
        module: ApiModule,
        symbols: Dict[str, str],
    ) -> Optional[ApiEndpoint]:
        call = self._request_call.search(body)
        if call is None:
            return None

        close = find_closing(body, call.end() - 1)
        if close == -1:
            logger.debug("Unbalanced request object in %s of %s", name, module.path)
            return None

        fields = parse_object_literal(body[call.end():close])
        url_expression = fields.get("url")
        if not url_expression:
            logger.debug("No url field in %s of %s", name, module.path)
            return None

        resolution = self.url_resolver.resolve(url_expression, symbols, content)
        method = unquote(fields.get("method", "") or "")
        description = extract_description(
            content, start, self.comment_lookbehind, self.description_max_length
        )
        return ApiEndpoint(
            function_name=name,
            module_path=module.path,
            url=resolution.value,
            description=description or name,
            method=method.upper() if method else None,
            resolved=resolution.resolved,
        )


def parse_api_module(
    content: str,
    module_path: str,
    url_resolver: Optional[UrlExpressionResolver] = None,
    **options,
) -> ApiModule:
    parser = ApiModuleParser(url_resolver or UrlExpressionResolver(), **options)
    return parser.parse(content, module_path)


def load_api_modules(
    directories: Iterable[str],
    resolver: "PathResolver",
    fs: "LocalFileSystem",
    endpoints: "EndpointCache",
    parser: ApiModuleParser,
    file_markers: Iterable[str] = DEFAULT_FILE_MARKERS,
    progress: bool = False,
) -> int:
    """Parse every API module under ``directories`` into ``endpoints``; returns modules parsed."""
    markers = tuple(file_markers)
    parsed = 0
    for directory in directories:
        absolute_dir = resolver.absolute(directory)
        if not fs.is_dir(absolute_dir):
            logger.info("Skipping missing API directory %s", directory)
            continue

        files = [
            path for path in fs.scan(absolute_dir, (".js",))
            if is_api_file(resolver.relative(path), markers)
        ]
        logger.info("Found %s API files in %s", len(files), directory)

        for file_path in tqdm(files, desc=f"Parsing API files in {directory}", unit="file", disable=not progress):
            relative_path = resolver.relative(file_path)
            if relative_path in endpoints.modules:
                continue

            content = fs.read_text(file_path)
            if content is None:
                continue

            try:
                module = parser.parse(content, relative_path)
            except Exception as exc:
                logger.warning("Failed to parse API file %s: %s", relative_path, exc)
                continue

            endpoints.add_module(module)
            parsed += 1
            for function_name in module.endpoints:
                logger.debug("Cached API function %s -> %s", function_name, relative_path)

    logger.info("API preload complete: %s functions cached", len(endpoints))
    return parsed
