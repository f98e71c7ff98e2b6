"""Read-only file system access used by the analyzers."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

from route_api_graph.core.paths import normalize_path

logger = logging.getLogger(__name__)

SKIPPED_DIRECTORIES = {"node_modules"}


class LocalFileSystem:
    """Thin wrapper over the local disk; every path is a normalized string."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def read_text(self, path: str) -> Optional[str]:
        try:
            return Path(path).read_text(encoding=self.encoding)
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Unable to read %s: %s", path, exc)
            return None

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_file(self, path: str) -> bool:
        return os.path.isfile(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def scan(self, directory: str, extensions: Iterable[str] = ()) -> List[str]:
        """Recursively list files under ``directory`` with one of ``extensions``."""
        wanted = tuple(extensions)
        if not self.is_dir(directory):
            return []

        files: List[str] = []
        for root, dirs, names in os.walk(directory):
            dirs[:] = sorted(
                d for d in dirs if not d.startswith(".") and d not in SKIPPED_DIRECTORIES
            )
            for name in names:
                if wanted and not name.endswith(wanted):
                    continue
                files.append(normalize_path(os.path.join(root, name)))
        return sorted(files)
