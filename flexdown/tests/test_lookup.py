"""Tests for lookups, scopes and path traversal."""

from types import SimpleNamespace

from flexdown.lookup import NOT_FOUND, Found, ScopeStack, lookup, resolve_path
from flexdown.values import UNDEFINED


def test_lookup_distinguishes_missing_from_none():
    assert lookup({"a": None}, "a") == Found(None)
    assert lookup({}, "a") is NOT_FOUND
    assert lookup(["a"], "a") is NOT_FOUND


class TestScopeStack:
    def test_innermost_first(self):
        scopes = ScopeStack()
        scopes.push({"x": 1, "y": 2})
        scopes.push({"x": 10})
        assert scopes.lookup("x") == Found(10)
        assert scopes.lookup("y") == Found(2)
        assert scopes.lookup("z") is NOT_FOUND

    def test_pop(self):
        scopes = ScopeStack()
        scopes.push({"x": 1})
        assert scopes.pop() == {"x": 1}
        assert len(scopes) == 0


class TestResolvePath:
    def test_mapping_and_index(self):
        data = {"users": [{"name": "Ann"}, {"name": "Bo"}]}
        assert resolve_path(data, "users[1].name") == "Bo"
        assert resolve_path(data["users"], "[0].name") == "Ann"

    def test_no_path(self):
        assert resolve_path(5, None) == 5
        assert resolve_path(5, "") == 5

    def test_missing_key_is_undefined(self):
        assert resolve_path({"a": 1}, ".b") is UNDEFINED
        assert resolve_path([1], "[5]") is UNDEFINED

    def test_object_attributes(self):
        user = SimpleNamespace(name="Ann", _secret="x")
        assert resolve_path(user, ".name") == "Ann"
        assert resolve_path(user, "._secret") is UNDEFINED

    def test_stops_at_none(self):
        notices = []
        result = resolve_path({"a": None}, ".a.b.c", lambda segment, parent: notices.append((segment, parent)))
        assert result is None
        assert notices == [("b", None)]

    def test_stops_at_undefined(self):
        notices = []
        result = resolve_path({}, ".a.b", lambda segment, parent: notices.append(segment))
        assert result is UNDEFINED
        assert notices == ["b"]

    def test_string_keys_for_index_on_mappings(self):
        assert resolve_path({"0": "zero"}, "[0]") == "zero"
