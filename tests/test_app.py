"""Tests for the web app: page rendering, liveness, static files, lifespan."""

import asyncio
import logging

import pytest
from fastapi.testclient import TestClient
from jinja2 import TemplateError

from vidshelf.app import create_app
from vidshelf.config import Settings
from vidshelf.holder import CatalogHolder
from vidshelf.models import VideoRecord
from vidshelf.reloader import CatalogReloader
from vidshelf.watcher import EventSource


@pytest.fixture
def settings(tmp_path, static_dir, templates_dir):
    return Settings(
        videos_path=tmp_path / "videos.json",
        static_dir=static_dir,
        templates_dir=templates_dir,
        title="Test Shelf",
    )


@pytest.fixture
def holder():
    return CatalogHolder((
        VideoRecord(title="First", description="d1", file_name="a.mp4"),
        VideoRecord(title="Second", description="d2", file_name="b.mp4"),
    ))


class TestIndex:
    def test_renders_current_catalog(self, settings, holder):
        client = TestClient(create_app(settings, holder))
        res = client.get("/")
        assert res.status_code == 200
        assert "<h1>Test Shelf</h1>" in res.text
        assert res.text.index("First") < res.text.index("Second")
        assert 'data-file="a.mp4"' in res.text

    def test_reflects_published_catalog(self, settings, holder):
        client = TestClient(create_app(settings, holder))
        holder.store((VideoRecord(title="Replaced", description="d", file_name="c.mp4"),))
        res = client.get("/")
        assert "Replaced" in res.text
        assert "First" not in res.text

    def test_escapes_catalog_text(self, settings):
        holder = CatalogHolder((VideoRecord(title="<script>x</script>", description="d", file_name="a.mp4"),))
        res = TestClient(create_app(settings, holder)).get("/")
        assert "<script>x</script>" not in res.text
        assert "&lt;script&gt;" in res.text

    def test_wrong_holder_content_is_500(self, settings, caplog):
        class BrokenHolder:
            def load(self):
                return [{"title": "not a catalog"}]

        client = TestClient(create_app(settings, BrokenHolder()))
        with caplog.at_level(logging.ERROR, logger="vidshelf.app"):
            res = client.get("/")
        assert res.status_code == 500
        assert res.text == "Internal Server Error"
        assert "instead of a catalog" in caplog.text

    def test_render_failure_is_500(self, settings, holder, templates_dir, caplog):
        (templates_dir / "index.html").write_text("{% for v in videos %}{{ v.title.missing() }}{% endfor %}")
        client = TestClient(create_app(settings, holder))
        with caplog.at_level(logging.ERROR, logger="vidshelf.app"):
            res = client.get("/")
        assert res.status_code == 500
        assert "First" not in res.text
        assert "template execution error" in caplog.text


def test_healthz(settings, holder):
    res = TestClient(create_app(settings, holder)).get("/healthz")
    assert res.status_code == 200
    assert res.text == "ok"


def test_static_files(settings, holder, static_dir):
    (static_dir / "app.css").write_text("body {}")
    client = TestClient(create_app(settings, holder))
    assert client.get("/static/app.css").text == "body {}"
    assert client.get("/static/missing.css").status_code == 404


def test_missing_template_fails_creation(settings, holder, templates_dir):
    (templates_dir / "index.html").unlink()
    with pytest.raises(TemplateError):
        create_app(settings, holder)


def test_broken_template_fails_creation(settings, holder, templates_dir):
    (templates_dir / "index.html").write_text("{% for v in videos %}")
    with pytest.raises(TemplateError):
        create_app(settings, holder)


class RecordingSource(EventSource):
    def __init__(self):
        self.closed = False

    def subscribe(self, directory):
        return iter(())

    def close(self):
        self.closed = True


def test_lifespan_starts_and_stops_reloader(settings, holder):
    source = RecordingSource()
    reloader = CatalogReloader(settings.videos_path, settings.static_dir, holder, source, delay=0.01)
    app = create_app(settings, holder, reloader)

    with TestClient(app) as client:
        assert reloader.ready.is_set()
        assert client.get("/healthz").status_code == 200
    assert source.closed


class ThreadCheckingReloader(CatalogReloader):
    """Records whether start/stop ran on the event loop thread."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = []

    @staticmethod
    def _on_loop():
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return False
        return True

    def start(self, ready_timeout=5.0):
        self.calls.append(("start", self._on_loop()))
        super().start(ready_timeout)

    def stop(self, join_timeout=1.0):
        self.calls.append(("stop", self._on_loop()))
        super().stop(join_timeout)


def test_lifespan_keeps_reloader_off_the_event_loop(settings, holder):
    reloader = ThreadCheckingReloader(
        settings.videos_path, settings.static_dir, holder, RecordingSource(), delay=0.01
    )
    with TestClient(create_app(settings, holder, reloader)):
        pass
    assert reloader.calls == [("start", False), ("stop", False)]
