"""
End-to-end tests through the FastAPI application
"""
import json

import pytest
from fastapi.testclient import TestClient

from realm.core.assets import DependencyNotFound, DependencyParseError
from realm.core.config import Settings
from realm.core.errors import INTERNAL_ERROR_MESSAGE
from realm.core.mode import LAYOUT_MEDIA_TYPE


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_detailed_health_reports_asset_version(client):
    body = client.get("/health/detailed").json()

    assert body["components"]["assets"] == {"status": "healthy", "version": "v1", "bundles": ["main"]}


def test_index_is_html_with_versioned_scripts(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert '<script src="/static/deps/v1/main.js"></script>' in response.text
    assert "<title>Realm | Realm</title>" in response.text
    assert response.headers["x-request-id"]


def test_index_in_api_mode(client):
    response = client.get("/?realm_mode=api")

    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"title": "Realm", "asset_version": "v1"}


def test_page_in_layout_mode_via_accept(client):
    response = client.get("/pages/home", headers={"Accept": LAYOUT_MEDIA_TYPE})

    assert response.json() == {"id": "home", "config": {"title": "Realm", "asset_version": "v1"}}


def test_page_in_api_mode_via_accept(client):
    response = client.get("/pages/greeting?name=Ada&excited", headers={"Accept": "application/json"})

    assert response.status_code == 200
    assert response.json() == {"message": "Hello, Ada!"}


def test_page_layout_uses_raw_config(client):
    response = client.get("/pages/greeting?name=Ada&realm_mode=layout")

    assert response.json() == {"id": "greeting", "config": {"name": "Ada", "excited": False}}


def test_page_accepts_json_body(client):
    response = client.post("/pages/greeting?realm_mode=api", json={"name": "Grace", "excited": "yes"})

    assert response.json() == {"message": "Hello, Grace!"}


def test_unknown_page_is_404_json(client):
    response = client.get("/pages/nowhere?realm_mode=api")

    assert response.status_code == 404
    assert response.json() == {"detail": "No page registered as 'nowhere'", "type": "page_not_found"}


def test_unknown_page_is_404_html(client):
    response = client.get("/pages/nowhere")

    assert response.status_code == 404
    assert response.headers["content-type"].startswith("text/html")
    assert "404 Not Found" in response.text
    assert "No page registered as &#39;nowhere&#39;" in response.text


def test_missing_input_is_400(client):
    response = client.get("/pages/greeting?realm_mode=api")

    assert response.status_code == 400
    assert response.json() == {
        "detail": "Missing required parameter 'name'",
        "type": "input_error",
        "field": "name",
    }


def test_form_error_is_structured(client):
    response = client.get("/pages/greeting", params={"name": "x" * 50, "realm_mode": "layout"})

    assert response.status_code == 422
    assert response.json() == {
        "errors": {"name": "Name must be at most 40 characters"},
        "type": "form_error",
    }


def test_form_error_html(client):
    response = client.get("/pages/greeting", params={"name": "x" * 50})

    assert response.status_code == 422
    assert "Name must be at most 40 characters" in response.text


def test_assets_endpoint(client):
    assert client.get("/api/assets").json() == {
        "latest_version": "v1",
        "dependencies": {"main": ["main.js"]},
    }


def test_reload_switches_version(client, build_static_tree):
    build_static_tree(version="v2", deps={"main": ["main.v2.js"]})

    response = client.post("/api/assets/reload")

    assert response.status_code == 200
    assert response.json()["latest_version"] == "v2"
    assert '/static/deps/v2/main.v2.js' in client.get("/").text


def test_failed_reload_is_opaque_and_keeps_version(client, static_tree):
    (static_tree / "deps" / "v1" / "deps.json").write_text("{broken")

    response = client.post("/api/assets/reload", headers={"Accept": "application/json"})

    assert response.status_code == 500
    assert response.json()["detail"] == INTERNAL_ERROR_MESSAGE
    assert "broken" not in response.text
    assert client.get("/api/assets").json()["latest_version"] == "v1"


def test_undecodable_manifest_reload_keeps_version(client, static_tree):
    (static_tree / "deps" / "v1" / "deps.json").write_bytes(b'{"main": ["\xff.js"]}')

    response = client.post("/api/assets/reload", headers={"Accept": "application/json"})

    assert response.status_code == 500
    assert response.json()["detail"] == INTERNAL_ERROR_MESSAGE
    assert client.get("/api/assets").json()["latest_version"] == "v1"


def test_static_files_are_served(client):
    response = client.get("/static/deps/v1/main.js")

    assert response.status_code == 200
    assert "main.js" in response.text


def test_metrics_count_renders(client):
    client.get("/pages/home?realm_mode=layout")

    body = client.get("/metrics").text

    assert "realm_page_renders_total" in body
    assert 'realm_asset_version_info{version="v1"}' in body


@pytest.mark.parametrize("breakage,error", [
    ("no_latest", DependencyNotFound),
    ("bad_json", DependencyParseError),
])
def test_startup_fails_without_assets(build_static_tree, breakage, error):
    from main import create_app

    root = build_static_tree()
    if breakage == "no_latest":
        (root / "latest.txt").unlink()
    else:
        (root / "deps" / "v1" / "deps.json").write_text("not json")

    app = create_app(Settings(static_dir=str(root)))

    with pytest.raises(error):
        with TestClient(app):
            pass


def test_end_to_end_modes(build_static_tree):
    """One page, three representations, same widget data"""
    from main import create_app

    from realm.api.routes import pages
    from realm.core.page import Page

    class Home(Page):
        def realm_id(self):
            return "home"

        def realm_config(self):
            return {"title": "Hi"}

    root = build_static_tree(deps={"main": ["main.js"]})
    app = create_app(Settings(static_dir=str(root)))
    pages.PAGES["e2e"] = lambda config, realm: Home()
    try:
        with TestClient(app) as client:
            api = client.get("/pages/e2e?realm_mode=api")
            layout = client.get("/pages/e2e?realm_mode=layout")
            html = client.get("/pages/e2e")
    finally:
        del pages.PAGES["e2e"]

    assert api.content == b'{"title":"Hi"}'
    assert layout.content == b'{"id":"home","config":{"title":"Hi"}}'
    embedded = html.text.split('<script id="realm-spec" type="application/json">')[1].split("</script>")[0]
    assert json.loads(embedded) == {"id": "home", "config": {"title": "Hi"}}
    assert '<script src="/static/deps/v1/main.js"></script>' in html.text
