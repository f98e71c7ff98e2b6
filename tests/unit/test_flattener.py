"""Flattening routes and components into API call rows"""

from route_api_graph.core.context import AnalysisContext
from route_api_graph.core.schema import ApiEndpoint, ApiModule, RouteNode
from route_api_graph.graph.component_graph import ComponentGraph, ComponentIndex
from route_api_graph.graph.flattener import collect_api_calls, flatten_components, flatten_routes
from route_api_graph.parsers.component_parser import ComponentParser

from tests.helpers import write_tree

PAGE_VUE = """\
<script>
import { fnA } from '@/api/a'
import * as api from '@/api/a'
import Child from './Child.vue'
export default { created() { api.fnA() } }
</script>
"""

CHILD_VUE = """\
<script>
import { fnB } from '@/api/a'
import Grand from './Grand.vue'
</script>
"""

GRAND_VUE = """\
<script>
import { fnA } from '@/api/a'
import Child from './Child.vue'
</script>
"""


def _context(src_root):
    context = AnalysisContext(src_root=str(src_root))
    context.constants.register_constant("BASE", "/base")
    context.endpoints.add_module(ApiModule(
        path="/api/a.js",
        endpoints={
            "fnA": ApiEndpoint("fnA", "/api/a.js", "{BASE}/a", description="Load A", method="GET"),
            "fnB": ApiEndpoint("fnB", "/api/a.js", "/b", description="fnB"),
        },
    ))
    return context


def _setup(src_root, resolver, fs):
    write_tree(src_root, {
        "views/page.vue": PAGE_VUE,
        "views/Child.vue": CHILD_VUE,
        "views/Grand.vue": GRAND_VUE,
    })
    context = _context(src_root)
    index = ComponentIndex(ComponentParser(resolver, context.endpoints), resolver, fs)
    return context, index


def test_collect_api_calls_walks_children_and_stops_on_cycles(src_root, resolver, fs):
    _, index = _setup(src_root, resolver, fs)

    calls = collect_api_calls(index, "/views/page.vue")

    assert [(c.function_name, c.depth, c.from_child, c.child_source) for c in calls] == [
        ("fnA", 0, False, ""),
        ("fnB", 1, True, "/views/Child.vue"),
        ("fnA", 2, True, "/views/Child.vue"),
    ]


def test_collect_api_calls_respects_max_depth(src_root, resolver, fs):
    _, index = _setup(src_root, resolver, fs)

    assert len(collect_api_calls(index, "/views/page.vue", max_depth=1)) == 2
    assert len(collect_api_calls(index, "/views/page.vue", max_depth=0)) == 1


def test_flatten_routes(src_root, resolver, fs):
    context, index = _setup(src_root, resolver, fs)
    context.routes.add(RouteNode(name="page", path="/page", component_path="/views/page.vue"))
    context.routes.add(RouteNode(name="gone", path="/gone", component_path="/views/gone.vue", parent="page"))
    context.routes.add(RouteNode(name="bare", path="/bare"))

    rows = flatten_routes(context, index)

    assert [(row.route_name, row.api_function) for row in rows] == [
        ("page", "fnA"),
        ("page", "fnB"),
        ("page", "fnA"),
        ("gone", ""),
    ]

    own = rows[0]
    assert own.url == "/base/a"
    assert own.http_method == "GET"
    assert own.description == "Load A"
    assert own.has_api_calls
    assert not own.is_from_child
    assert own.child_components == "Child"
    assert own.child_paths == "/views/Child.vue"

    inherited = rows[1]
    assert inherited.is_from_child
    assert inherited.child_source_path == "/views/Child.vue"
    assert inherited.http_method == ""

    empty = rows[-1]
    assert not empty.has_api_calls
    assert empty.parent_route == "page"
    assert empty.url == ""


def test_flatten_components_in_level_order(src_root, resolver, fs):
    write_tree(src_root, {
        "views/page.vue": "<script>\nimport { fnA } from '@/api/a'\nimport Card from './Card.vue'\n</script>",
        "views/Card.vue": "<script>\nimport { fnB } from '@/api/a'\n</script>",
        "views/Empty.vue": "<template><p /></template>",
    })
    context = _context(src_root)
    index = ComponentIndex(ComponentParser(resolver, context.endpoints), resolver, fs)
    graph = ComponentGraph(index).build()

    rows = flatten_components(context, graph)

    assert [(row.file_path, row.component_type, row.api_function) for row in rows] == [
        ("/views/Empty.vue", "root", ""),
        ("/views/page.vue", "root", "fnA"),
        ("/views/Card.vue", "level-2", "fnB"),
    ]
    assert rows[1].url == "/base/a"
    assert rows[1].component_imports == "Card"
    assert rows[2].parent_component == "/views/page.vue"
    assert not rows[0].has_api_calls
