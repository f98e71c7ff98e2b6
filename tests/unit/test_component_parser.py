"""Component import, API call and navigation extraction"""

from route_api_graph.core.context import EndpointCache
from route_api_graph.core.schema import ApiEndpoint, ApiModule, NavigationKind
from route_api_graph.parsers.component_parser import (
    ComponentParser,
    extract_navigation_targets,
    is_api_import,
    is_component_import,
)

from tests.helpers import HOME_VUE, USER_CARD_VUE, USER_DETAIL_VUE, USER_INDEX_VUE, write_tree


def _endpoints():
    cache = EndpointCache()
    cache.add_module(ApiModule(
        path="/api/user.js",
        endpoints={
            "getUserList": ApiEndpoint("getUserList", "/api/user.js", "/user/list", method="GET"),
            "getUser": ApiEndpoint("getUser", "/api/user.js", "/user/detail", method="POST"),
        },
    ))
    return cache


def test_named_import_with_alias(resolver):
    info = ComponentParser(resolver, _endpoints()).parse(USER_CARD_VUE, "/views/home/components/UserCard.vue")

    assert [call.function_name for call in info.api_calls] == ["getUser"]
    assert info.api_imports == ["fetchUser"]
    assert info.api_calls[0].import_path == "@/api/user"
    assert info.api_calls[0].source_component == "/views/home/components/UserCard.vue"
    assert info.has_api_calls


def test_relative_api_import(resolver):
    info = ComponentParser(resolver, _endpoints()).parse(USER_INDEX_VUE, "/views/user/index.vue")

    assert [call.function_name for call in info.api_calls] == ["getUserList"]
    assert info.navigation == [(NavigationKind.PATH, "/user/detail")]


def test_namespace_import_collects_used_functions(resolver):
    info = ComponentParser(resolver, _endpoints()).parse(USER_DETAIL_VUE, "/views/user/detail.vue")

    assert [call.function_name for call in info.api_calls] == ["getUser"]
    assert info.api_imports == ["userApi.getUser"]


def test_unknown_functions_are_not_calls(resolver):
    source = "<script>\nimport { notThere } from '@/api/user'\nimport { format } from '@/utils/date'\n</script>"
    info = ComponentParser(resolver, _endpoints()).parse(source, "/views/x.vue")

    assert info.api_calls == []
    assert not info.has_api_calls


def test_child_components_resolve_to_existing_files(src_root, resolver):
    write_tree(src_root, {
        "views/home/components/UserCard.vue": USER_CARD_VUE,
        "views/home/Lazy.vue": "",
    })
    source = HOME_VUE.replace(
        "components: { UserCard },",
        "components: { UserCard, Lazy: () => import('./Lazy.vue') },",
    ) + "<script>\nimport helper from '@/utils/helper'\nimport Gone from './Gone.vue'\n</script>"

    info = ComponentParser(resolver, _endpoints()).parse(source, "/views/home/index.vue")

    assert info.children == ["/views/home/components/UserCard.vue", "/views/home/Lazy.vue"]
    assert info.child_names == ["UserCard", "Lazy"]
    assert info.navigation == [(NavigationKind.NAME, "orders")]


def test_navigation_targets():
    source = """
      this.$router.push('/a?tab=1')
      this.$router.replace({ path: '/b' })
      this.$router.push(`/c/${id}`)
      this.$router.push({ name: 'd', query: { id } })
    """
    assert extract_navigation_targets(source) == [
        (NavigationKind.PATH, "/a"),
        (NavigationKind.PATH, "/b"),
        (NavigationKind.NAME, "d"),
    ]


def test_import_classification():
    assert is_api_import("@/api/user")
    assert is_api_import("../../api/order")
    assert not is_api_import("@/utils/request")

    assert is_component_import("./components/Card.vue")
    assert is_component_import("@/views/common/table.js")
    assert not is_component_import("@/utils/format.js")
    assert not is_component_import("element-ui/lib/index.js")
    assert not is_component_import("@/assets/logo.png")
