"""
Global fixtures live here

This tells pytest how to prepare a Runtime (and an app) for tests.
"""
import pytest
from pathlib import Path
from fastapi.testclient import TestClient

from helperkit.core.runtime import build_runtime, Runtime
from helperkit.web.api import create_app
from helperkit.web.routing import Dispatcher

APP_KEY = "base64-not-required-any-string-will-do"


@pytest.fixture
def document_root(tmp_path: Path, monkeypatch) -> Path:
    """
    A document root with a .env, a config.yaml and a views directory.
    """
    monkeypatch.delenv("APP_KEY", raising=False)
    monkeypatch.delenv("HELPERKIT_DOCUMENT_ROOT", raising=False)
    root = tmp_path / "app"
    root.mkdir()
    (root / ".env").write_text(
        f"# test env\nAPP_ENV=testing\nAPP_KEY={APP_KEY}\nDB_URL=postgres://u:p@h/db?x=1\n",
        encoding="utf-8",
    )
    (root / "config.yaml").write_text(
        "app_name: Test App\n"
        "base_url: https://example.test\n"
        "database:\n"
        "  host: db.local\n"
        "  port: 5432\n"
        "mailers:\n"
        "  - name: smtp\n"
        "  - name: ses\n",
        encoding="utf-8",
    )
    views = root / "views"
    views.mkdir()
    (views / "home.html").write_text(
        "<h1>Hello {{ name }}</h1><p>{{ greeting }}</p>{{ csrf_field(request) }}",
        encoding="utf-8",
    )
    return root


@pytest.fixture
def test_runtime(document_root: Path) -> Runtime:
    """
    Creates a temporary Runtime for testing
    """
    rt = build_runtime(document_root=document_root, verbose=False)
    # return the runtime to the test
    yield rt


@pytest.fixture
def dispatcher() -> Dispatcher:
    return Dispatcher()


@pytest.fixture
def client(test_runtime: Runtime, dispatcher: Dispatcher) -> TestClient:
    app = create_app(test_runtime, dispatcher)
    with TestClient(app) as c:
        yield c
