import pytest

from content_types import content_type, CONTENT_TYPES


@pytest.mark.parametrize("name, expected", [
    ("app.js", "application/javascript"),
    ("data.json", "application/json"),
    ("font.woff", "font/woff"),
    ("favicon.ico", "image/x-icon"),
    ("logo.png", "image/png"),
    ("logo.svg", "image/svg+xml"),
    ("site.css", "text/css"),
    ("/srv/www/index.html", "text/html"),
])
def test_known_extensions(name, expected):
    assert content_type(name) == expected


def test_table_is_fixed():
    assert len(CONTENT_TYPES) == 8


@pytest.mark.parametrize("name", ["notes.txt", "README", "page.HTML", ".html", "archive.tar.gz"])
def test_unknown_extension_returns_default(name):
    assert content_type(name) is None
    assert content_type(name, "application/octet-stream") == "application/octet-stream"
