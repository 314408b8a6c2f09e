"""
Pytest configuration and fixtures
"""
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from starlette.requests import Request

# Add backend directory to path so `main` is importable
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from realm.core.config import Settings


def write_static_tree(
    root: Path,
    version: str = "v1",
    deps: Optional[Dict[str, List[str]]] = None,
    latest_text: Optional[str] = None,
    create_files: bool = True,
) -> Path:
    """Lay out latest.txt, deps/<version>/deps.json and the listed files"""
    deps = {"main": ["main.js"]} if deps is None else deps
    root.mkdir(parents=True, exist_ok=True)
    (root / "latest.txt").write_text(version if latest_text is None else latest_text)
    version_dir = root / "deps" / version
    version_dir.mkdir(parents=True, exist_ok=True)
    (version_dir / "deps.json").write_text(json.dumps(deps))
    if create_files:
        for files in deps.values():
            for name in files:
                target = version_dir / name
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(f"/* {name} */")
    return root


@pytest.fixture
def build_static_tree(tmp_path):
    """Factory writing a static tree below tmp_path"""
    def _build(name: str = "static", **kwargs) -> Path:
        return write_static_tree(tmp_path / name, **kwargs)
    return _build


@pytest.fixture
def static_tree(tmp_path):
    """Static root with version v1 and a single `main` bundle"""
    return write_static_tree(tmp_path / "static")


@pytest.fixture
def settings(static_tree):
    return Settings(
        static_dir=str(static_tree),
        log_file_enabled=False,
        log_format="text",
        site_title_prefix="Realm | ",
    )


@pytest.fixture
def make_request():
    """Build a bare Starlette request from query string and headers"""
    def _make(query: str = "", headers: Optional[Dict[str, str]] = None, method: str = "GET",
              body: bytes = b"") -> Request:
        raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
        scope = {
            "type": "http",
            "method": method,
            "path": "/",
            "query_string": query.encode(),
            "headers": raw_headers,
        }
        sent = {"done": False}

        async def receive():
            if sent["done"]:
                return {"type": "http.disconnect"}
            sent["done"] = True
            return {"type": "http.request", "body": body, "more_body": False}

        return Request(scope, receive)
    return _make


@pytest.fixture
def app(settings):
    from main import create_app
    return create_app(settings)


@pytest.fixture
def client(app):
    """Test client with the lifespan (asset resolution) running"""
    from fastapi.testclient import TestClient
    with TestClient(app) as test_client:
        yield test_client
