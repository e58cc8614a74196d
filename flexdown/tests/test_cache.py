"""Tests for the template cache."""

from flexdown.builder import ComponentParser
from flexdown.cache import Parsed, TemplateCache, Unparsed


def parse(template):
    parser = ComponentParser("t", template)
    return parser.layout, parser.nodes


class TestTemplateCache:
    def setup_method(self):
        self.cache = TemplateCache()

    def test_miss(self):
        assert self.cache.get("/views/a.fx") is None

    def test_remember_template(self):
        self.cache.remember_template("/views/a.fx", "hello")
        entry = self.cache.get("/views/a.fx")
        assert isinstance(entry, Unparsed)
        assert entry.template == "hello"

    def test_remember_does_not_downgrade(self):
        self.cache.set("/views/a.fx", Parsed(template="x", layout="x"))
        self.cache.remember_template("/views/a.fx", "y")
        assert isinstance(self.cache.get("/views/a.fx"), Parsed)

    def test_upgrade(self):
        self.cache.remember_template("/views/a.fx", "Hi $print(name)")
        parsed = self.cache.upgrade("/views/a.fx", parse)
        assert isinstance(parsed, Parsed)
        assert parsed.template == "Hi $print(name)"
        assert len(parsed.nodes) == 1
        assert self.cache.get("/views/a.fx") is parsed

    def test_upgrade_keeps_parsed_entry(self):
        entry = Parsed(template="x", layout="x")
        self.cache.set("/views/a.fx", entry)
        calls = []
        assert self.cache.upgrade("/views/a.fx", lambda text: calls.append(text)) is entry
        assert calls == []

    def test_clear(self):
        self.cache.remember_template("/views/a.fx", "x")
        self.cache.clear()
        assert len(self.cache) == 0
        assert "/views/a.fx" not in self.cache
