"""Pattern based extractors for router files, API modules and components."""

from .api_parser import ApiModuleParser, load_api_modules, parse_api_module
from .component_parser import ComponentInfo, ComponentParser, extract_navigation_targets, parse_component
from .route_parser import RawRouteDeclaration, extract_import_bindings, extract_route_declarations
from .symbols import SymbolTable, SymbolTableBuilder, build_symbol_table, load_constant_cache
from .url_resolver import UrlExpressionResolver, normalize_url

__all__ = [
    "ApiModuleParser",
    "load_api_modules",
    "parse_api_module",
    "ComponentInfo",
    "ComponentParser",
    "extract_navigation_targets",
    "parse_component",
    "RawRouteDeclaration",
    "extract_import_bindings",
    "extract_route_declarations",
    "SymbolTable",
    "SymbolTableBuilder",
    "build_symbol_table",
    "load_constant_cache",
    "UrlExpressionResolver",
    "normalize_url",
]
