"""Pipeline package exposing configuration helpers and analysis orchestration."""

from .config import (
    AnalysisConfig,
    AnalyzerConfig,
    ConfigurationError,
    OutputConfig,
    PathsConfig,
    load_analyzer_config,
)
from .indexer import AnalysisResult, RouteApiAnalyzer

__all__ = [
    "AnalysisConfig",
    "AnalyzerConfig",
    "ConfigurationError",
    "OutputConfig",
    "PathsConfig",
    "load_analyzer_config",
    "AnalysisResult",
    "RouteApiAnalyzer",
]
