"""
Tests for render mode detection
"""
import pytest

from realm.core.mode import LAYOUT_MEDIA_TYPE, RenderMode, detect_mode


def test_render_mode_has_three_values():
    assert {mode.value for mode in RenderMode} == {"api", "html", "layout"}


@pytest.mark.parametrize("query,expected", [
    ("realm_mode=api", RenderMode.API),
    ("realm_mode=json", RenderMode.API),
    ("realm_mode=LAYOUT", RenderMode.Layout),
    ("realm_mode=html", RenderMode.HTML),
])
def test_query_parameter(make_request, query, expected):
    assert detect_mode(make_request(query=query)) is expected


@pytest.mark.parametrize("value,expected", [
    ("api", RenderMode.API),
    ("layout", RenderMode.Layout),
    (" Layout ", RenderMode.Layout),
])
def test_mode_header(make_request, value, expected):
    assert detect_mode(make_request(headers={"X-Realm-Mode": value})) is expected


@pytest.mark.parametrize("accept,expected", [
    ("application/json", RenderMode.API),
    ("application/json; charset=utf-8", RenderMode.API),
    (LAYOUT_MEDIA_TYPE, RenderMode.Layout),
    (f"application/json, {LAYOUT_MEDIA_TYPE};q=0.9", RenderMode.Layout),
    ("text/html,application/xhtml+xml,application/json;q=0.9,*/*;q=0.8", RenderMode.HTML),
    ("*/*", RenderMode.HTML),
])
def test_accept_header(make_request, accept, expected):
    assert detect_mode(make_request(headers={"Accept": accept})) is expected


def test_query_parameter_wins_over_headers(make_request):
    request = make_request(
        query="realm_mode=layout",
        headers={"X-Realm-Mode": "api", "Accept": "application/json"},
    )

    assert detect_mode(request) is RenderMode.Layout


def test_mode_header_wins_over_accept(make_request):
    request = make_request(headers={"X-Realm-Mode": "html", "Accept": "application/json"})

    assert detect_mode(request) is RenderMode.HTML


@pytest.mark.parametrize("query,headers", [
    ("", {}),
    ("realm_mode=", {}),
    ("realm_mode=xml", {}),
    ("", {"X-Realm-Mode": "teapot"}),
    ("", {"Accept": "image/png"}),
    ("realm_mode=pdf", {"X-Realm-Mode": "?", "Accept": "text/plain"}),
])
def test_unknown_signals_default_to_html(make_request, query, headers):
    assert detect_mode(make_request(query=query, headers=headers)) is RenderMode.HTML


def test_unknown_query_value_falls_through_to_header(make_request):
    request = make_request(query="realm_mode=bogus", headers={"X-Realm-Mode": "api"})

    assert detect_mode(request) is RenderMode.API
