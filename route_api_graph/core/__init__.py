"""Data model, path resolution and shared caches"""

from .schema import (
    ApiCall,
    ApiEndpoint,
    ApiModule,
    ComponentApiRow,
    ComponentNode,
    NavigationKind,
    Resolution,
    RouteApiRow,
    RouteNode,
    resolved,
    unresolved,
)
from .context import AnalysisContext, EndpointCache, FrozenCacheError, RouteTable, UrlConstantCache
from .filesystem import LocalFileSystem
from .paths import PathResolver, find_src_root, normalize_path

__all__ = [
    'ApiCall', 'ApiEndpoint', 'ApiModule', 'ComponentApiRow', 'ComponentNode',
    'NavigationKind', 'Resolution', 'RouteApiRow', 'RouteNode', 'resolved', 'unresolved',
    'AnalysisContext', 'EndpointCache', 'FrozenCacheError', 'RouteTable', 'UrlConstantCache',
    'LocalFileSystem', 'PathResolver', 'find_src_root', 'normalize_path',
]
