"""
Lightweight scanner for JavaScript object and array literals.

Only what the route and API extractors need: blanking comments, matching
brackets, splitting on top-level separators and reading ``key: value``
pairs. Quotes and template literals are respected; everything else is
treated as opaque text.
"""

from __future__ import annotations

from typing import Dict, List, Optional

QUOTES = "'\"`"
OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = {")", "]", "}"}


def _skip_string(text: str, index: int) -> int:
    """Index just past the string literal starting at ``index``."""
    quote = text[index]
    index += 1
    length = len(text)
    while index < length:
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == quote:
            return index + 1
        if quote != "`" and char == "\n":
            # Unterminated single-line string
            return index
        index += 1
    return length


def strip_comments(text: str) -> str:
    """Replace ``//`` and ``/* */`` comments with spaces, keeping offsets and newlines."""
    result = list(text)
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char in QUOTES:
            index = _skip_string(text, index)
            continue
        if char == "/" and index + 1 < length:
            nxt = text[index + 1]
            if nxt == "/":
                end = text.find("\n", index)
                end = length if end == -1 else end
                for pos in range(index, end):
                    result[pos] = " "
                index = end
                continue
            if nxt == "*":
                end = text.find("*/", index + 2)
                end = length if end == -1 else end + 2
                for pos in range(index, end):
                    if result[pos] != "\n":
                        result[pos] = " "
                index = end
                continue
        index += 1
    return "".join(result)


def find_closing(text: str, open_index: int) -> int:
    """Index of the bracket closing the one at ``open_index``, or -1."""
    stack: List[str] = []
    index = open_index
    length = len(text)
    while index < length:
        char = text[index]
        if char in QUOTES:
            index = _skip_string(text, index)
            continue
        if char in OPENERS:
            stack.append(OPENERS[char])
        elif char in CLOSERS:
            if not stack or stack[-1] != char:
                return -1
            stack.pop()
            if not stack:
                return index
        index += 1
    return -1


def split_top_level(text: str, separator: str = ",") -> List[str]:
    """Split on ``separator`` occurrences outside brackets and strings."""
    parts: List[str] = []
    depth = 0
    start = 0
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char in QUOTES:
            index = _skip_string(text, index)
            continue
        if char in OPENERS:
            depth += 1
        elif char in CLOSERS:
            depth = max(0, depth - 1)
        elif char == separator and depth == 0:
            parts.append(text[start:index].strip())
            start = index + 1
        index += 1
    tail = text[start:].strip()
    if tail:
        parts.append(tail)
    return [part for part in parts if part]


def find_top_level(text: str, target: str, start: int = 0) -> int:
    """First ``target`` character outside brackets and strings, or -1."""
    depth = 0
    index = start
    length = len(text)
    while index < length:
        char = text[index]
        if char in QUOTES:
            index = _skip_string(text, index)
            continue
        if char == target and depth == 0:
            return index
        if char in OPENERS:
            depth += 1
        elif char in CLOSERS:
            if depth == 0:
                return -1
            depth -= 1
        index += 1
    return -1


def take_expression(text: str, start: int) -> str:
    """Expression starting at ``start`` up to the next top-level ``,``, ``;`` or closing bracket."""
    length = len(text)
    while start < length and text[start].isspace():
        start += 1
    depth = 0
    index = start
    while index < length:
        char = text[index]
        if char in QUOTES:
            index = _skip_string(text, index)
            continue
        if char in OPENERS:
            depth += 1
        elif char in CLOSERS:
            if depth == 0:
                break
            depth -= 1
        elif char in ",;\n" and depth == 0:
            if char != "\n" or not _continues(text, index):
                break
        index += 1
    return text[start:index].strip()


def _continues(text: str, newline_index: int) -> bool:
    """Whether an expression broken at a newline goes on (``+`` on either side)."""
    before = text[:newline_index].rstrip()
    after = text[newline_index + 1:].lstrip()
    return before.endswith("+") or after.startswith("+")


def parse_object_literal(body: str) -> Dict[str, str]:
    """Read ``key: value`` pairs from the text between an object's braces.

    Shorthand properties map to themselves; spreads and method shorthands
    are ignored. Values are returned as raw, stripped source text.
    """
    entries: Dict[str, str] = {}
    for part in split_top_level(body):
        if part.startswith("..."):
            continue
        colon = find_top_level(part, ":")
        if colon == -1:
            if part.replace("_", "").replace("$", "").isalnum():
                entries[part] = part
            continue
        key = unquote(part[:colon].strip())
        if key is None:
            key = part[:colon].strip()
        entries[key] = part[colon + 1:].strip()
    return entries


def unquote(text: str) -> Optional[str]:
    """Content of a single string literal, or ``None`` if ``text`` is not one."""
    text = text.strip()
    if len(text) >= 2 and text[0] in QUOTES and text[-1] == text[0]:
        if _skip_string(text, 0) == len(text):
            return text[1:-1]
    return None


def is_literal(text: str) -> bool:
    return unquote(text) is not None
