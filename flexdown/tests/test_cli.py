"""Tests for the flexdown command line."""

import json

from typer.testing import CliRunner

from flexdown import __version__, clear_cache
from flexdown.cli import app
from flexdown.tools import Tools

runner = CliRunner()


class TestRenderCommand:
    def setup_method(self):
        clear_cache()
        self._original_registry = Tools._registry.copy()

    def teardown_method(self):
        clear_cache()
        Tools._registry = self._original_registry

    def test_render(self, tmp_path):
        (tmp_path / "home.fx").write_text("<p>Hi $print(user.name)</p>")
        result = runner.invoke(
            app, ["render", "home", "--views", str(tmp_path), "-l", json.dumps({"user": {"name": "Ann"}})]
        )
        assert result.exit_code == 0
        assert "<p>Hi Ann</p>" in result.stdout

    def test_render_with_globals_and_tools(self, tmp_path):
        (tmp_path / "home.fx").write_text("$print(@shout(#site))")
        (tmp_path / "shout.py").write_text(
            "def shout(text):\n    return text.upper() + '!'\n"
        )
        result = runner.invoke(
            app,
            ["render", "home", "--views", str(tmp_path), "-g", '{"site": "flex"}', "-t", str(tmp_path / "shout.py"), "--no-cache"],
        )
        assert result.exit_code == 0
        assert "FLEX!" in result.stdout
        assert not Tools.is_registered("shout")

    def test_missing_tool_file(self, tmp_path):
        (tmp_path / "home.fx").write_text("x")
        result = runner.invoke(app, ["render", "home", "--views", str(tmp_path), "-t", str(tmp_path / "ghost.py")])
        assert result.exit_code != 0

    def test_bad_json(self, tmp_path):
        (tmp_path / "home.fx").write_text("x")
        result = runner.invoke(app, ["render", "home", "--views", str(tmp_path), "-l", "{nope"])
        assert result.exit_code != 0

    def test_locals_must_be_object(self, tmp_path):
        (tmp_path / "home.fx").write_text("x")
        result = runner.invoke(app, ["render", "home", "--views", str(tmp_path), "-l", "[1, 2]"])
        assert result.exit_code != 0

    def test_missing_component(self, tmp_path):
        result = runner.invoke(app, ["render", "nope", "--views", str(tmp_path)])
        assert result.exit_code == 1

    def test_syntax_error(self, tmp_path):
        (tmp_path / "home.fx").write_text("$if(a) x")
        result = runner.invoke(app, ["render", "home", "--views", str(tmp_path)])
        assert result.exit_code == 1


class TestCheckCommand:
    def test_ok(self, tmp_path):
        path = tmp_path / "home.fx"
        path.write_text("$print(a) $if(b) c $endif")
        result = runner.invoke(app, ["check", str(path)])
        assert result.exit_code == 0
        assert "Syntax OK (2 top-level statements)" in result.stdout

    def test_error(self, tmp_path):
        path = tmp_path / "home.fx"
        path.write_text("$foreach(x, xs) y")
        result = runner.invoke(app, ["check", str(path)])
        assert result.exit_code == 1
        assert "Parsing error" in result.stdout

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["check", str(tmp_path / "nope.fx")])
        assert result.exit_code == 1


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_tools_command():
    result = runner.invoke(app, ["tools"])
    assert result.exit_code == 0
    assert "@upper" in result.stdout
    assert "@date" in result.stdout


def test_tools_command_with_file(tmp_path):
    path = tmp_path / "extra.py"
    path.write_text("def sparkle(text):\n    return text\n")
    result = runner.invoke(app, ["tools", "-t", str(path)])
    assert result.exit_code == 0
    assert "@sparkle" in result.stdout
    assert "@upper" in result.stdout
