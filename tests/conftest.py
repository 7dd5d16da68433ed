"""Shared fixtures: a static tree with a videos/ directory and a catalog writer."""

import json

import pytest


@pytest.fixture
def static_dir(tmp_path):
    root = tmp_path / "static"
    (root / "videos").mkdir(parents=True)
    return root


@pytest.fixture
def add_video(static_dir):
    def _add(name, content=b"\x00\x00\x00\x18ftypmp42"):
        p = static_dir / "videos" / name
        p.write_bytes(content)
        return p
    return _add


@pytest.fixture
def catalog_path(tmp_path):
    return tmp_path / "data" / "videos.json"


@pytest.fixture
def write_catalog(catalog_path):
    catalog_path.parent.mkdir(parents=True, exist_ok=True)

    def _write(entries):
        text = entries if isinstance(entries, str) else json.dumps(entries)
        catalog_path.write_text(text, encoding="utf-8")
        return catalog_path
    return _write


@pytest.fixture
def templates_dir(tmp_path):
    root = tmp_path / "templates"
    root.mkdir()
    (root / "index.html").write_text(
        "<h1>{{ title }}</h1>"
        "{% for video in videos %}<li data-file=\"{{ video.file_name }}\">{{ video.title }}</li>{% endfor %}",
        encoding="utf-8",
    )
    return root
