"""Configuration helpers for the analysis pipeline."""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).with_name("default_config.yaml")
PROJECT_CONFIG_NAMES = ("route-api-graph.yaml", "route-api-graph.yml", "route-api-graph.json")
REQUIRED_LISTS = (
    "paths.base_url.search_paths",
    "paths.routes.search_paths",
    "paths.api.directories",
)
PROJECT_NAME_PLACEHOLDER = "${projectName}"


class ConfigurationError(Exception):
    """Raised when no usable configuration can be assembled."""


@dataclass
class PathsConfig:
    """Where base URL files, router files, API modules and views live."""

    base_url_search_paths: List[str] = field(default_factory=list)
    route_search_paths: List[str] = field(default_factory=list)
    api_directories: List[str] = field(default_factory=list)
    api_file_markers: List[str] = field(default_factory=list)
    api_import_markers: List[str] = field(default_factory=list)
    views_root: str = "views"
    alias: str = "@/"
    view_mappings: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PathsConfig":
        base_url = data.get("base_url") or {}
        routes = data.get("routes") or {}
        api = data.get("api") or {}
        views = data.get("views") or {}
        return cls(
            base_url_search_paths=list(base_url.get("search_paths") or []),
            route_search_paths=list(routes.get("search_paths") or []),
            api_directories=list(api.get("directories") or []),
            api_file_markers=list(api.get("file_markers") or []),
            api_import_markers=list(api.get("import_markers") or []),
            views_root=views.get("root", "views"),
            alias=views.get("alias", "@/"),
            view_mappings=dict(views.get("mappings") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_url": {"search_paths": list(self.base_url_search_paths)},
            "routes": {"search_paths": list(self.route_search_paths)},
            "api": {
                "directories": list(self.api_directories),
                "file_markers": list(self.api_file_markers),
                "import_markers": list(self.api_import_markers),
            },
            "views": {
                "root": self.views_root,
                "alias": self.alias,
                "mappings": dict(self.view_mappings),
            },
        }


@dataclass
class AnalysisConfig:
    """Limits and source patterns used by the parsers."""

    max_component_depth: int = 3
    max_symbol_depth: int = 10
    description_max_length: int = 200
    comment_lookbehind: int = 300
    encoding: str = "utf-8"
    request_functions: List[str] = field(default_factory=lambda: ["request"])
    route_loaders: List[str] = field(default_factory=lambda: ["_import"])
    child_skip_markers: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisConfig":
        defaults = cls()
        return cls(
            max_component_depth=int(data.get("max_component_depth", defaults.max_component_depth)),
            max_symbol_depth=int(data.get("max_symbol_depth", defaults.max_symbol_depth)),
            description_max_length=int(data.get("description_max_length", defaults.description_max_length)),
            comment_lookbehind=int(data.get("comment_lookbehind", defaults.comment_lookbehind)),
            encoding=data.get("encoding") or defaults.encoding,
            request_functions=list(data.get("request_functions") or defaults.request_functions),
            route_loaders=list(data.get("route_loaders") or defaults.route_loaders),
            child_skip_markers=list(data.get("child_skip_markers") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_component_depth": self.max_component_depth,
            "max_symbol_depth": self.max_symbol_depth,
            "description_max_length": self.description_max_length,
            "comment_lookbehind": self.comment_lookbehind,
            "encoding": self.encoding,
            "request_functions": list(self.request_functions),
            "route_loaders": list(self.route_loaders),
            "child_skip_markers": list(self.child_skip_markers),
        }


@dataclass
class OutputConfig:
    """Output file name templates."""

    routes_filename: str = "${projectName}_route_api_analysis.csv"
    components_filename: str = "${projectName}_component_api_analysis.csv"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutputConfig":
        defaults = cls()
        routes = data.get("routes") or {}
        components = data.get("components") or {}
        return cls(
            routes_filename=routes.get("filename") or defaults.routes_filename,
            components_filename=components.get("filename") or defaults.components_filename,
        )

    def filename(self, kind: str, project_name: str) -> str:
        """Output file name for ``kind`` (``routes`` or ``components``)."""
        template = self.routes_filename if kind == "routes" else self.components_filename
        return template.replace(PROJECT_NAME_PLACEHOLDER, project_name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "routes": {"filename": self.routes_filename},
            "components": {"filename": self.components_filename},
        }


@dataclass
class AnalyzerConfig:
    """Top-level configuration of an analysis run."""

    paths: PathsConfig
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    url_constants: Dict[str, str] = field(default_factory=dict)
    source: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[Path] = None) -> "AnalyzerConfig":
        url_constants = (data.get("url_constants") or {}).get("mappings") or {}
        return cls(
            paths=PathsConfig.from_dict(data.get("paths") or {}),
            analysis=AnalysisConfig.from_dict(data.get("analysis") or {}),
            output=OutputConfig.from_dict(data.get("output") or {}),
            url_constants={str(key): str(value) for key, value in url_constants.items()},
            source=source,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the configuration to a basic dictionary (useful for debugging)."""
        return {
            "paths": self.paths.to_dict(),
            "url_constants": {"mappings": dict(self.url_constants)},
            "analysis": self.analysis.to_dict(),
            "output": self.output.to_dict(),
        }


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def read_config_file(path: Union[Path, str]) -> Dict[str, Any]:
    """Load a JSON or YAML mapping from ``path``."""
    config_path = Path(path)
    raw_text = config_path.read_text(encoding="utf-8")
    suffix = config_path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(raw_text) or {}
    elif suffix == ".json":
        data = json.loads(raw_text or "{}")
    else:
        raise ValueError(f"Unsupported configuration format '{suffix}'. Use .yaml, .yml, or .json.")

    if not isinstance(data, dict):
        raise ValueError("Configuration file must contain a JSON/YAML object at the top level.")
    return data


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``; lists are replaced."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def get_nested(data: Dict[str, Any], dotted_key: str) -> Any:
    current: Any = data
    for key in dotted_key.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def validate_config(data: Dict[str, Any]) -> None:
    for dotted_key in REQUIRED_LISTS:
        value = get_nested(data, dotted_key)
        if not isinstance(value, list) or not value:
            raise ConfigurationError(f"'{dotted_key}' must be a non-empty list")

    mappings = get_nested(data, "url_constants.mappings")
    if mappings is not None and not isinstance(mappings, dict):
        raise ConfigurationError("'url_constants.mappings' must be a mapping")

    view_mappings = get_nested(data, "paths.views.mappings")
    if view_mappings is not None and not isinstance(view_mappings, dict):
        raise ConfigurationError("'paths.views.mappings' must be a mapping")


def load_default_config() -> Dict[str, Any]:
    try:
        return read_config_file(DEFAULT_CONFIG_PATH)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot load default configuration {DEFAULT_CONFIG_PATH}: {exc}") from exc


def find_project_config(directory: Union[Path, str, None] = None) -> Optional[Path]:
    base = Path(directory) if directory is not None else Path.cwd()
    for name in PROJECT_CONFIG_NAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def load_analyzer_config(
    path: Union[Path, str, None] = None,
    search_dir: Union[Path, str, None] = None,
) -> AnalyzerConfig:
    """Assemble the effective configuration.

    Precedence: explicit ``path`` > project file in ``search_dir`` (the
    working directory by default) > packaged defaults. User values are deep
    merged over the defaults and the result is validated.
    """
    defaults = load_default_config()
    user_data: Dict[str, Any] = {}
    source: Optional[Path] = None

    if path is not None:
        source = Path(path)
        if not source.is_file():
            raise ConfigurationError(f"Configuration file not found: {source}")
        try:
            user_data = read_config_file(source)
        except (OSError, ValueError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"Invalid configuration file {source}: {exc}") from exc
        logger.info("Loaded configuration from %s", source)
    else:
        project_config = find_project_config(search_dir)
        if project_config is not None:
            try:
                user_data = read_config_file(project_config)
                source = project_config
                logger.info("Loaded project configuration from %s", project_config)
            except (OSError, ValueError, yaml.YAMLError) as exc:
                logger.warning("Ignoring unreadable project configuration %s: %s", project_config, exc)

    merged = deep_merge(defaults, user_data)
    validate_config(merged)
    if source is None:
        logger.debug("Using default configuration %s", DEFAULT_CONFIG_PATH)
    return AnalyzerConfig.from_dict(merged, source=source or DEFAULT_CONFIG_PATH)


EXAMPLE_CONFIG: Dict[str, Any] = {
    "url_constants": {
        "mappings": {
            "BASE_URL": "/api/v1",
            "CUSTOM_API_URL": "/your/custom/api/v1",
        }
    },
    "paths": {
        "base_url": {"search_paths": ["api/baseUrl.js", "api/your-custom-baseUrl.js"]},
    },
    "output": {
        "routes": {"filename": "${projectName}_route_api_analysis.csv"},
        "components": {"filename": "${projectName}_component_api_analysis.csv"},
    },
}


def write_example_config(target: Union[Path, str]) -> Path:
    """Write a starter project configuration holding the commonly edited keys."""
    target_path = Path(target)
    if target_path.suffix.lower() == ".json":
        text = json.dumps(EXAMPLE_CONFIG, indent=2)
    else:
        text = yaml.safe_dump(EXAMPLE_CONFIG, sort_keys=False, allow_unicode=True)
    target_path.parent.mkdir(parents=True, exist_ok=True)
    target_path.write_text(text, encoding="utf-8")
    return target_path
