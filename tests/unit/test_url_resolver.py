"""URL expression resolution and final normalization"""

from route_api_graph.core.context import EndpointCache, UrlConstantCache
from route_api_graph.core.schema import ApiModule
from route_api_graph.parsers.url_resolver import UrlExpressionResolver, normalize_url


def _cache(**constants):
    cache = UrlConstantCache()
    for name, value in constants.items():
        if name.endswith("_fn"):
            cache.register_function(name[:-3], value)
        else:
            cache.register_constant(name, value)
    return cache


def test_quoted_literal():
    result = UrlExpressionResolver().resolve("'/api/list'")
    assert result.value == "/api/list"
    assert result.resolved


def test_template_with_local_symbol():
    result = UrlExpressionResolver().resolve("`${X}/list`", {"X": "/users"})
    assert result.value == "/users/list"
    assert result.resolved


def test_template_with_unknown_symbol_keeps_placeholder():
    result = UrlExpressionResolver().resolve("`${Y}/list`")
    assert result.value == "{Y}/list"
    assert not result.resolved


def test_concatenation_with_local_symbol():
    result = UrlExpressionResolver().resolve("A_URL + '/detail'", {"A_URL": "/api/a"})
    assert result.value == "/api/a/detail"


def test_in_file_declaration_is_used():
    source = "const MODULE_URL = '/module'\nexport function f() {}"
    result = UrlExpressionResolver().resolve("MODULE_URL + '/x'", {}, source)
    assert result.value == "/module/x"


def test_fallback_table_and_constant_cache():
    resolver = UrlExpressionResolver(_cache(BASE_URL_fn="/base"), fallbacks={"PATH": "/xssw/v3"})

    assert resolver.resolve("PATH + '/a'").value == "/xssw/v3/a"
    assert resolver.resolve("BASE_URL() + '/b'").value == "/base/b"
    assert resolver.resolve("`${BASE_URL()}/c`").value == "/base/c"


def test_local_symbols_win_over_fallbacks():
    resolver = UrlExpressionResolver(fallbacks={"PATH": "/fallback"})
    assert resolver.resolve("PATH", {"PATH": "/local"}).value == "/local"


def test_bare_call_uses_constant_cache():
    resolver = UrlExpressionResolver(_cache(BASE_fn="/base"))
    assert resolver.resolve("BASE()").value == "/base"


def test_unknown_bare_symbol_is_unchanged():
    result = UrlExpressionResolver().resolve("somethingDynamic")
    assert result.value == "somethingDynamic"
    assert not result.resolved


def test_empty_expression_is_unresolved():
    assert not UrlExpressionResolver().resolve("").resolved


def test_normalize_url_substitutes_remaining_constants():
    endpoints = EndpointCache()
    endpoints.add_module(ApiModule(path="/api/a.js", constants={"MODULE_URL": "/mod"}))
    cache = _cache(BASE_URL_fn="/base")

    assert normalize_url("{BASE_URL()}/x", cache, endpoints) == "/base/x"
    assert normalize_url("MODULE_URL + /y", cache, endpoints) == "/mod/y"
    assert normalize_url("{MODULE_URL}/z", cache, endpoints) == "/mod/z"
    assert normalize_url("{UNKNOWN}/z", cache, endpoints) == "{UNKNOWN}/z"
    assert normalize_url("", cache, endpoints) == ""
