"""Tests for value descriptors."""

import pytest

from flexdown.errors import FlexdownSyntaxError, FlexdownUsageError
from flexdown.values import UNDEFINED, Global, Reference, Scalar, Tool, parse_value, to_text


class TestScalar:
    @pytest.mark.parametrize(
        "token,expected",
        [
            ("'hi'", "hi"),
            ('"hi there"', "hi there"),
            ("''", ""),
            ("42", 42),
            ("-1.5", -1.5),
            ("+3", 3),
            ("true", True),
            ("false", False),
            ("null", None),
        ],
    )
    def test_parse(self, token, expected):
        scalar = Scalar.parse(token, "t", 1)
        assert scalar.value == expected
        assert type(scalar.value) is type(expected)

    def test_undefined(self):
        assert Scalar.parse("undefined", "t", 1).value is UNDEFINED

    def test_check(self):
        assert Scalar.check("'x'")
        assert not Scalar.check("abc")
        assert not Scalar.check("'unterminated")

    def test_kind(self):
        assert Scalar.parse("1", "t", 1).kind == "scalar"

    def test_rejects_bool_line(self):
        with pytest.raises(FlexdownUsageError):
            Scalar.parse("1", "t", True)


class TestReference:
    def test_key_and_path(self):
        reference = Reference.parse("users[0].name", "t", 2)
        assert reference.key == "users"
        assert reference.path == "[0].name"
        assert reference.line == 2

    def test_bare_key(self):
        reference = Reference.parse("$item", "t", 1)
        assert reference.key == "$item"
        assert reference.path is None

    def test_invalid(self):
        with pytest.raises(FlexdownSyntaxError):
            Reference.parse("users[x]", "t", 1)


class TestGlobal:
    def test_parse(self):
        value = Global.parse("#app.title", "t", 1)
        assert value.key == "app"
        assert value.path == ".title"
        assert value.kind == "global"

    def test_check(self):
        assert Global.check("#users[1].age")
        assert not Global.check("users")


class TestTool:
    def test_args(self):
        tool = Tool.parse("@join(items, ', ')", "t", 3)
        assert tool.key == "join"
        assert tool.args == (
            Reference(key="items", name="t", line=3),
            Scalar(value=", ", name="t", line=3),
        )
        assert tool.path is None

    def test_result_path(self):
        tool = Tool.parse("@user(1).name", "t", 1)
        assert tool.path == ".name"
        assert tool.args[0].value == 1

    def test_nested_tools(self):
        tool = Tool.parse("@upper(@trim(name))", "t", 1)
        inner = tool.args[0]
        assert isinstance(inner, Tool)
        assert inner.key == "trim"
        assert inner.args[0].key == "name"

    def test_no_args(self):
        assert Tool.parse("@now()", "t", 1).args == ()

    def test_keyword_and_global_args(self):
        tool = Tool.parse("@f(true, null, #site.name)", "t", 1)
        assert tool.args[0].value is True
        assert tool.args[1].value is None
        assert isinstance(tool.args[2], Global)

    def test_quoted_parentheses(self):
        tool = Tool.parse("@wrap(')', '(')", "t", 1)
        assert [arg.value for arg in tool.args] == [")", "("]

    def test_malformed(self):
        with pytest.raises(FlexdownSyntaxError):
            Tool.parse("@f(a,", "t", 1)
        with pytest.raises(FlexdownSyntaxError):
            Tool.parse("f(a)", "t", 1)

    def test_check(self):
        assert Tool.check("@f(a)")
        assert not Tool.check("@f(a")
        assert Tool.check_head("@f")
        assert not Tool.check_head("@f(")


class TestParseValue:
    def test_dispatch(self):
        assert isinstance(parse_value(" 'x' ", "t", 1), Scalar)
        assert isinstance(parse_value("#x", "t", 1), Global)
        assert isinstance(parse_value("x.y", "t", 1), Reference)
        assert isinstance(parse_value("@x()", "t", 1), Tool)

    def test_invalid(self):
        with pytest.raises(FlexdownSyntaxError) as e:
            parse_value("user name", "page.fx", 7)
        assert e.value.line == 7
        assert str(e.value) == "Invalid value in 'page.fx' at line number 7"

    def test_wrong_types(self):
        with pytest.raises(FlexdownUsageError):
            parse_value(5, "t", 1)


def test_undefined_sentinel():
    assert not UNDEFINED
    assert str(UNDEFINED) == "undefined"


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, "null"),
        (UNDEFINED, "undefined"),
        (True, "true"),
        (False, "false"),
        (2.0, "2"),
        (2.5, "2.5"),
        ([1, "a", None], "1,a,"),
        ("text", "text"),
        ({"name": "Ann", "tags": ["a"]}, '{"name": "Ann", "tags": ["a"]}'),
        ({"a": None, "b": UNDEFINED}, '{"a": null, "b": "undefined"}'),
        ([{"id": 1}, {"id": 2}], '{"id": 1},{"id": 2}'),
    ],
)
def test_to_text(value, expected):
    assert to_text(value) == expected
