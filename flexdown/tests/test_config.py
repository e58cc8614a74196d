"""Tests for engine configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from flexdown.config import FlexdownConfig, get_config, set_config


class TestFromEnv:
    def teardown_method(self):
        set_config(None)

    def test_defaults(self, monkeypatch):
        for key in ("FLEXDOWN_VIEWS", "FLEXDOWN_CACHE", "FLEXDOWN_ENV"):
            monkeypatch.delenv(key, raising=False)
        config = FlexdownConfig.from_env()
        assert config.views == Path("views")
        assert config.cache is True
        assert config.env == "dev"

    def test_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FLEXDOWN_VIEWS", str(tmp_path))
        monkeypatch.setenv("FLEXDOWN_CACHE", "false")
        monkeypatch.setenv("FLEXDOWN_ENV", "pro")
        config = FlexdownConfig.from_env()
        assert config.views == tmp_path
        assert config.cache is False
        assert config.env == "pro"

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("FLEXDOWN_CACHE", "false")
        assert FlexdownConfig.from_env(cache=True).cache is True

    def test_invalid_env(self, monkeypatch):
        monkeypatch.setenv("FLEXDOWN_ENV", "staging")
        with pytest.raises(ValidationError):
            FlexdownConfig.from_env()

    def test_process_default(self, tmp_path):
        set_config(None)
        assert get_config() is get_config()

        custom = FlexdownConfig(views=tmp_path)
        set_config(custom)
        assert get_config() is custom


class TestPaths:
    def test_absolute_views(self, tmp_path):
        config = FlexdownConfig(views=tmp_path)
        assert config.resolve_component_path("pages.home") == tmp_path / "pages" / "home.fx"

    def test_relative_views(self, tmp_path):
        config = FlexdownConfig(root=tmp_path, views=Path("templates"))
        assert config.views_dir() == tmp_path / "templates"
        assert config.resolve_component_path("card") == tmp_path / "templates" / "card.fx"


def test_config_tools_override_registered():
    def upper(text):
        return "custom"

    tools = FlexdownConfig(tools={"upper": upper}).all_tools()
    assert tools["upper"] is upper
    assert "lower" in tools
