"""Shared fixtures: small single page application trees built in tmp_path."""

from pathlib import Path

import pytest

from route_api_graph.core.filesystem import LocalFileSystem
from route_api_graph.core.paths import PathResolver

from tests.helpers import SAMPLE_FILES, write_tree


@pytest.fixture
def sample_project(tmp_path) -> Path:
    """Project root holding a ``src`` tree with routes, API modules and views."""
    project = tmp_path / "shop"
    write_tree(project, SAMPLE_FILES)
    return project


@pytest.fixture
def src_root(tmp_path) -> Path:
    root = tmp_path / "app" / "src"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def fs() -> LocalFileSystem:
    return LocalFileSystem()


@pytest.fixture
def resolver(src_root, fs) -> PathResolver:
    return PathResolver(str(src_root), fs)
