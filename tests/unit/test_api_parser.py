"""API module parsing and preload"""

from route_api_graph.core.context import EndpointCache, UrlConstantCache
from route_api_graph.core.filesystem import LocalFileSystem
from route_api_graph.core.paths import PathResolver
from route_api_graph.parsers.api_parser import (
    ApiModuleParser,
    extract_description,
    is_api_file,
    load_api_modules,
    parse_api_module,
)
from route_api_graph.parsers.url_resolver import UrlExpressionResolver

from tests.helpers import USER_API_JS, write_tree


def _constants():
    cache = UrlConstantCache()
    cache.register_function("API_URL", "/prod-api")
    return cache


def test_parses_function_and_arrow_endpoints():
    module = parse_api_module(USER_API_JS, "/api/user.js", UrlExpressionResolver(_constants()))

    assert set(module.endpoints) == {"getUserList", "getUser"}
    assert module.constants == {"PREFIX": "/user"}

    listing = module.endpoints["getUserList"]
    assert listing.url == "/prod-api/user/list"
    assert listing.method == "GET"
    assert listing.description == "Fetch user list"
    assert listing.resolved
    assert listing.key == ("getUserList", "/api/user.js")

    detail = module.endpoints["getUser"]
    assert detail.url == "/user/detail"
    assert detail.method == "POST"
    assert detail.description == "Fetch one user"


def test_description_defaults_to_function_name():
    source = "export function ping() {\n  return request({ url: '/ping' })\n}\n"
    endpoint = parse_api_module(source, "/api/ping.js").endpoints["ping"]

    assert endpoint.description == "ping"
    assert endpoint.method is None


def test_functions_without_request_are_ignored():
    source = """
export function helper(a) { return a + 1 }
export function real() { return request({ url: '/real', method: 'delete' }) }
"""
    module = parse_api_module(source, "/api/mixed.js")
    assert list(module.endpoints) == ["real"]
    assert module.endpoints["real"].method == "DELETE"


def test_unresolved_url_keeps_placeholder():
    source = "export function listOrders() {\n  return request({ url: ORDER_BASE + '/orders' })\n}\n"
    endpoint = parse_api_module(source, "/api/order.js").endpoints["listOrders"]

    assert endpoint.url == "{ORDER_BASE}/orders"
    assert not endpoint.resolved


def test_custom_request_function_names():
    source = "export const save = (data) => http({ url: '/save', method: 'put', data })\n"
    parser = ApiModuleParser(UrlExpressionResolver(), request_functions=["http"])
    module = parser.parse(source, "/api/save.js")
    assert module.endpoints["save"].url == "/save"


def test_extract_description_cleans_tags_and_joins_lines():
    source = "/**\n * Create order\n * @param data payload\n */\nexport function create() {}"
    position = source.index("export")
    assert extract_description(source, position) == "Create order, data payload"
    assert extract_description(source, position, max_length=6) == "Create"


def test_extract_description_line_comments():
    source = "// first line\n// second line\nexport function f() {}"
    assert extract_description(source, source.index("export")) == "first line, second line"


def test_extract_description_requires_adjacent_comment():
    source = "/* unrelated */\nconst x = 1\nexport function f() {}"
    assert extract_description(source, source.index("export")) == ""


def test_is_api_file():
    assert is_api_file("/api/user.js")
    assert is_api_file("/views/modules/kqdk/api.js")
    assert not is_api_file("/views/modules/kqdk/helpers.js")


def test_load_api_modules_scans_directories(tmp_path):
    src = tmp_path / "src"
    write_tree(src, {
        "api/user.js": USER_API_JS,
        "api/misc.js": "export function x() { return request({ url: '/x' }) }",
        "views/modules/kqdk/api.js": "export function sign() { return request({ url: '/sign' }) }",
        "views/modules/kqdk/util.js": "export function no() { return request({ url: '/no' }) }",
    })
    fs = LocalFileSystem()
    resolver = PathResolver(str(src), fs)
    endpoints = EndpointCache()
    parser = ApiModuleParser(UrlExpressionResolver(_constants()))

    parsed = load_api_modules(["api", "views/modules", "missing"], resolver, fs, endpoints, parser)

    assert parsed == 3
    assert endpoints.get("getUserList", "/api/user.js").url == "/prod-api/user/list"
    assert endpoints.get("sign", "/views/modules/kqdk/api.js").url == "/sign"
    assert endpoints.get("no", "/views/modules/kqdk/util.js") is None
    assert endpoints.find("getUser", ["/api/user/index.js", "/api/user.js"]).url == "/user/detail"
