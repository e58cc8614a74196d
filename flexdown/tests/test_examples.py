"""Render the example views shipped in examples/views."""

from pathlib import Path

from flexdown import FlexdownConfig, clear_cache, render
from flexdown.builder import ComponentParser

VIEWS = Path(__file__).resolve().parents[2] / "examples" / "views"

SITE = {"site": {"name": "my blog"}}


def setup_function():
    clear_cache()


def test_all_examples_parse():
    files = sorted(VIEWS.rglob("*.fx"))
    assert files

    for file in files:
        ComponentParser(file.name, file.read_text(encoding="utf-8"))


def test_home_with_posts():
    config = FlexdownConfig(views=VIEWS, globals=SITE)
    posts = [
        {"title": "Hello flexdown", "views": 2100, "draft": False},
        {"title": "A rather long title for a post", "views": 950, "draft": True},
    ]

    assert render("pages.home", {"posts": posts}, config=config) == "\n".join(
        [
            "<html>",
            "<head><title>my blog</title></head>",
            "<body>",
            "<h1>My Blog</h1>",
            "<ul>",
            '<li id="post-00">',
            "Hello flexdown",
            "<small>2.1k views</small>",
            "</li>",
            '<li id="post-01">',
            "A rather long title...",
            "<small>950 views</small>",
            "<em>draft</em>",
            "</li>",
            "</ul>",
            "<footer>Built with flexdown</footer>",
            "</body>",
            "</html>",
        ]
    )


def test_home_without_posts():
    config = FlexdownConfig(views=VIEWS, globals=SITE, cache=False)
    result = render("pages.home", {"posts": []}, config=config)
    assert "<p>No posts yet</p>" in result
    assert "<ul>" not in result
