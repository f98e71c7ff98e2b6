"""Literal scanner used by the route and API extractors"""

from route_api_graph.parsers.literals import (
    find_closing,
    parse_object_literal,
    split_top_level,
    strip_comments,
    take_expression,
    unquote,
)


def test_strip_comments_keeps_offsets_and_strings():
    source = "const a = '//not a comment' // trailing\n/* block\n */ const b = 1"
    stripped = strip_comments(source)

    assert len(stripped) == len(source)
    assert "'//not a comment'" in stripped
    assert "trailing" not in stripped
    assert "block" not in stripped
    assert stripped.count("\n") == source.count("\n")


def test_find_closing_skips_brackets_in_strings():
    text = "{ a: '}', b: [1, 2], c: { d: `}` } }"
    assert find_closing(text, 0) == len(text) - 1
    assert find_closing("{ [ }", 0) == -1


def test_split_top_level_respects_nesting():
    parts = split_top_level("a, { b: 1, c: 2 }, 'x,y', fn(1, 2),")
    assert parts == ["a", "{ b: 1, c: 2 }", "'x,y'", "fn(1, 2)"]


def test_take_expression_follows_concatenation_over_lines():
    text = "url: BASE +\n  '/list',\n  method: 'get'"
    assert take_expression(text, len("url:")) == "BASE +\n  '/list'"


def test_take_expression_stops_at_semicolon_and_closer():
    assert take_expression("return '/api';\n", len("return ")) == "'/api'"
    assert take_expression("  fn(a, b) }", 0) == "fn(a, b)"


def test_parse_object_literal():
    body = """
      path: '/home',
      name: "home",
      component: _import('/home/index'),
      meta: { title: 'Home' },
      params,
      ...base,
      created() { return 1 }
    """
    fields = parse_object_literal(body)

    assert fields["path"] == "'/home'"
    assert fields["name"] == '"home"'
    assert fields["component"] == "_import('/home/index')"
    assert fields["meta"] == "{ title: 'Home' }"
    assert fields["params"] == "params"
    assert "base" not in fields
    assert "...base" not in fields


def test_unquote():
    assert unquote("'/api'") == "/api"
    assert unquote("`${A}/x`") == "${A}/x"
    assert unquote("'/a' + '/b'") is None
    assert unquote("BASE") is None
