"""Route declaration and import binding extraction"""

from route_api_graph.parsers.route_parser import (
    extract_import_bindings,
    extract_route_declarations,
    is_identifier,
)

from tests.helpers import ROUTER_JS


def _names(declarations):
    return [d.name for root in declarations for d in root.walk()]


def test_router_file_declarations_follow_spreads():
    declarations = extract_route_declarations(ROUTER_JS)

    assert _names(declarations) == ["home", "user", "userDetail", "ghost", "", "orders"]
    home = declarations[0]
    assert home.path == "/home"
    assert home.component == "_import('/home/index')"
    assert home.array_name == "homeRoutes"
    assert declarations[-1].array_name == "routes"


def test_children_keep_relative_paths():
    user = extract_route_declarations(ROUTER_JS)[1]

    assert user.component.startswith("() => import(")
    assert [child.path for child in user.children] == ["detail"]
    assert user.children[0].component == "_import('/user/detail')"


def test_parse_is_repeatable():
    first = extract_route_declarations(ROUTER_JS)
    second = extract_route_declarations(ROUTER_JS)
    assert _names(first) == _names(second)


def test_standalone_object_with_named_views_and_child_array():
    source = """
const adminRoute = {
  path: '/admin',
  name: 'admin',
  components: { default: AdminLayout, side: SideBar },
  children: adminChildren
}
const adminChildren = [
  { path: 'users', name: 'adminUsers', component: _import('/admin/users') }
]
"""
    declarations = extract_route_declarations(source)

    assert len(declarations) == 1
    admin = declarations[0]
    assert admin.component == "AdminLayout"
    assert admin.array_name is None
    assert [child.name for child in admin.children] == ["adminUsers"]
    assert admin.children[0].array_name == "adminChildren"


def test_self_reference_does_not_loop():
    source = "const routes = [\n  { path: '/a', name: 'a' },\n  ...routes\n]\n"
    assert _names(extract_route_declarations(source)) == ["a"]


def test_dynamic_paths_and_commented_routes_are_skipped():
    source = """
const routes = [
  { path: dynamicPath, name: 'dynamic' },
  // { path: '/old', name: 'old' },
  { path: '/kept', name: 'kept' }
]
"""
    assert _names(extract_route_declarations(source)) == ["kept"]


def test_import_bindings():
    source = """
import Vue from 'vue'
import Home from '@/views/home/index.vue'
const About = () => import('@/views/about.vue')
const Legacy = resolve => require(['@/views/legacy.vue'], resolve)
const Lazy = _import('/lazy/index')
const title = 'not a component'
const routes = [{ path: '/', component: Home }]
"""
    bindings = extract_import_bindings(source)

    assert bindings["Home"] == "import('@/views/home/index.vue')"
    assert bindings["About"] == "() => import('@/views/about.vue')"
    assert bindings["Legacy"] == "resolve => require(['@/views/legacy.vue'], resolve)"
    assert bindings["Lazy"] == "_import('/lazy/index')"
    assert "title" not in bindings
    assert "routes" not in bindings


def test_is_identifier():
    assert is_identifier("HomeView")
    assert is_identifier("$view")
    assert not is_identifier("_import('/a')")
    assert not is_identifier("")


def test_export_default_array():
    source = """
import Layout from '@/layout'
export default [
  { path: '/login', name: 'login', component: _import('/login/index') },
  { path: '/dashboard', name: 'dashboard', component: Layout }
]
"""
    declarations = extract_route_declarations(source)

    assert _names(declarations) == ["login", "dashboard"]
    assert declarations[0].array_name is None
    assert declarations[1].component == "Layout"


def test_module_exports_array_with_named_views():
    source = """
module.exports = [
  {
    path: '/report',
    name: 'report',
    components: { default: ReportView },
    children: [{ path: 'daily', name: 'daily', component: DailyView }]
  }
]
"""
    declarations = extract_route_declarations(source)

    assert _names(declarations) == ["report", "daily"]
    assert declarations[0].component == "ReportView"


def test_add_routes_call_with_inline_array():
    source = """
import router from './index'
router.addRoutes([
  { path: '/settings', name: 'settings', component: () => import('@/views/settings.vue') },
  { path: '/legacy', name: 'legacy', component: resolve => require(['@/views/legacy.vue'], resolve) }
])
"""
    declarations = extract_route_declarations(source)

    assert _names(declarations) == ["settings", "legacy"]
    assert declarations[1].component == "resolve => require(['@/views/legacy.vue'], resolve)"


def test_add_route_object_outside_any_definition():
    source = """
router.addRoute({ path: '/x', name: 'x' })
router.addRoute('x', { path: 'y', name: 'y', component: YView })
router.beforeEach((to, from, next) => {
  if (!token) {
    router.push({ path: '/login', name: 'login' })
  }
  next()
})
"""
    declarations = extract_route_declarations(source)

    assert _names(declarations) == ["x", "y"]
    assert [d.path for d in declarations] == ["/x", "y"]


def test_loose_literals_do_not_duplicate_known_routes():
    declarations = extract_route_declarations(ROUTER_JS + "\nrouter.addRoute({ path: '/extra', name: 'extra' })\n")

    assert _names(declarations) == ["home", "user", "userDetail", "ghost", "", "orders", "extra"]
