"""Cross-platform path normalization and module reference resolution."""

from __future__ import annotations

import logging
import os
import posixpath
import re
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from route_api_graph.core.filesystem import LocalFileSystem

logger = logging.getLogger(__name__)

_REPEATED_SEPARATORS = re.compile(r"/+")


def normalize_path(input_path: str) -> str:
    """Use forward slashes only and collapse repeated separators."""
    normalized = str(input_path).replace("\\", "/")
    return _REPEATED_SEPARATORS.sub("/", normalized)


def find_src_root(start: str, fs: Optional["LocalFileSystem"] = None) -> str:
    """Walk upward from ``start`` until an ancestor holds a ``src`` directory."""
    is_dir = fs.is_dir if fs is not None else os.path.isdir
    current = normalize_path(os.path.abspath(start))
    if current.endswith("/src"):
        return current

    parts = current.split("/")
    for index in range(len(parts), 0, -1):
        candidate = "/".join(parts[:index]) + "/src"
        if is_dir(candidate):
            return candidate

    return normalize_path(current + "/src")


class PathResolver:
    """Maps module references found in source text to root relative files.

    Root relative paths always start with ``/`` and use forward slashes,
    e.g. ``/views/home/index.vue`` or ``/api/user.js``.
    """

    def __init__(
        self,
        src_root: str,
        fs: "LocalFileSystem",
        alias: str = "@/",
        views_root: str = "views",
    ) -> None:
        self.src_root = normalize_path(src_root).rstrip("/")
        self.fs = fs
        self.alias = alias
        self.views_root = views_root.strip("/")

    # ------------------------------------------------------------------
    # Root relative <-> absolute
    # ------------------------------------------------------------------

    def absolute(self, relative_path: str) -> str:
        return normalize_path(self.src_root + "/" + relative_path.lstrip("/"))

    def relative(self, absolute_path: str) -> str:
        normalized = normalize_path(absolute_path)
        prefix = self.src_root + "/"
        if normalized.startswith(prefix):
            return "/" + normalized[len(prefix):]
        return normalized

    def exists(self, relative_path: str) -> bool:
        return self.fs.is_file(self.absolute(relative_path))

    @property
    def views_prefix(self) -> str:
        return "/" + self.views_root

    # ------------------------------------------------------------------
    # Reference classification
    # ------------------------------------------------------------------

    def is_alias(self, reference: str) -> bool:
        return bool(self.alias) and reference.startswith(self.alias)

    @staticmethod
    def is_relative(reference: str) -> bool:
        return reference.startswith("./") or reference.startswith("../")

    def base_path(self, reference: str, importer: str = "") -> str:
        """Root relative location a reference points at, before extensions."""
        reference = normalize_path(reference.strip())
        if self.is_alias(reference):
            base = "/" + reference[len(self.alias):]
        elif self.is_relative(reference):
            importer_dir = posixpath.dirname(normalize_path(importer)) or "/"
            base = posixpath.normpath(posixpath.join(importer_dir, reference))
        elif reference.startswith("/"):
            base = reference
        else:
            base = self.views_prefix + "/" + reference
        return normalize_path("/" + base.lstrip("/"))

    # ------------------------------------------------------------------
    # Candidate generation
    # ------------------------------------------------------------------

    def module_candidates(
        self,
        reference: str,
        importer: str = "",
        extensions: Sequence[str] = (".js",),
    ) -> List[str]:
        """Candidate files for ``reference`` in priority order."""
        base = self.base_path(reference, importer)
        if posixpath.splitext(base)[1] in extensions:
            return [base]

        candidates: List[str] = []
        for ext in extensions:
            if self.is_alias(reference):
                candidates.extend([f"{base}/index{ext}", f"{base}{ext}"])
            elif self.is_relative(reference):
                candidates.extend([f"{base}{ext}", f"{base}/index{ext}"])
                if base.endswith("/index"):
                    candidates.append(f"{base[:-len('/index')]}{ext}")
            else:
                candidates.extend([f"{base}{ext}", f"{base}/index{ext}"])
        return _unique(candidates)

    def resolve_module(
        self,
        reference: str,
        importer: str = "",
        extensions: Sequence[str] = (".js",),
    ) -> Optional[str]:
        """First existing candidate, or ``None`` when nothing matches."""
        for candidate in self.module_candidates(reference, importer, extensions):
            if self.exists(candidate):
                return candidate
        logger.debug("Unresolved module reference %s from %s", reference, importer or "<root>")
        return None

    def with_extension(self, base: str, extension: str) -> str:
        """Append ``extension``, preferring an ``index`` file when one exists."""
        if base.endswith(extension):
            return base
        index_path = f"{base.rstrip('/')}/index{extension}"
        if self.exists(index_path):
            return index_path
        return f"{base}{extension}"


def _unique(items: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for item in items:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return ordered
