import pytest

from csaftools.util.jsonpath import ExpressionError, compile_expression

DOC = {
    "document": {"tracking": {"id": "ABC-1", "version": "2"}},
    "items": [
        {"name": "first", "n": 1},
        {"name": "second", "n": 2},
        {"name": "third", "n": 3},
    ],
    "list": [10, 20, 30, 40],
}


def test_simple_member_path():
    assert compile_expression("$.document.tracking.id")(DOC) == "ABC-1"


def test_root_returns_document():
    assert compile_expression("$")(DOC) is DOC


def test_bracket_member_access():
    assert compile_expression("$['document']['tracking']['version']")(DOC) == "2"


def test_missing_key_raises():
    with pytest.raises(ExpressionError):
        compile_expression("$.document.nope")(DOC)


def test_key_on_non_object_raises():
    with pytest.raises(ExpressionError):
        compile_expression("$.document.tracking.id.deeper")(DOC)


def test_index_and_negative_index():
    assert compile_expression("$.list[0]")(DOC) == DOC["list"][0]
    assert compile_expression("$.list[-1]")(DOC) == DOC["list"][-1]


def test_index_out_of_range_raises():
    with pytest.raises(ExpressionError):
        compile_expression("$.list[4]")(DOC)


def test_wildcard_returns_all_items():
    assert compile_expression("$.list[*]")(DOC) == DOC["list"]
    assert compile_expression("$.items.*.name")(DOC) == [
        item["name"] for item in DOC["items"]
    ]


def test_slice():
    assert compile_expression("$.list[1:3]")(DOC) == DOC["list"][1:3]
    assert compile_expression("$.list[::2]")(DOC) == DOC["list"][::2]


def test_union():
    assert compile_expression("$.document.tracking['id','version']")(DOC) == [
        "ABC-1",
        "2",
    ]


def test_recursive_descent_collects_in_document_order():
    doc = {"a": {"id": "x"}, "b": [{"id": "y", "c": {"id": "z"}}]}
    assert compile_expression("$..id")(doc) == ["x", "y", "z"]


def test_filter_comparison():
    names = compile_expression("$.items[?(@.n > 1)].name")(DOC)
    assert names == ["second", "third"]


def test_filter_equality_and_logic():
    expr = compile_expression("$.items[?(@.name == 'first' || @.n >= 3)].n")
    assert expr(DOC) == [1, 3]
    expr = compile_expression("$.items[?(!(@.n == 2) && @.n < 3)].name")
    assert expr(DOC) == ["first"]


def test_filter_existence_and_regex():
    doc = {"xs": [{"a": "abc"}, {"b": 1}, {"a": "zzz"}]}
    assert compile_expression("$.xs[?(@.a)]")(doc) == [{"a": "abc"}, {"a": "zzz"}]
    assert compile_expression("$.xs[?(@.a =~ '^ab')]")(doc) == [{"a": "abc"}]


def test_plural_path_with_missing_members_is_empty():
    assert compile_expression("$.items[*].missing")(DOC) == []


def test_quoted_key_with_escape():
    doc = {"it's": 5}
    assert compile_expression("$['it\\'s']")(doc) == 5


@pytest.mark.parametrize(
    "expr",
    ["a.b", "$.", "$[", "$[1:2:0]", "$.a extra", "$['open", "$[?(@.a ==)]", ""],
)
def test_malformed_expressions_raise(expr):
    with pytest.raises(ExpressionError):
        compile_expression(expr)


def test_expression_error_is_value_error():
    with pytest.raises(ValueError):
        compile_expression("nope")