"""Tests for the projects endpoints."""

import datetime

import pytest
from fastapi import WebSocketDisconnect

import config
from routers.projects import PREVIEW_LENGTH, preview_text, sort_key, to_project


def test_preview_text_truncates_long_descriptions() -> None:
    long = "word " * 60
    preview = preview_text(long)
    assert preview.endswith("...")
    assert len(preview) <= PREVIEW_LENGTH + 3
    assert preview_text("short") == "short"


def test_missing_date_defaults_to_today() -> None:
    project = to_project({"id": "x", "title": "X"})
    assert project.date == datetime.date.today().isoformat()
    assert project.demoLink is None


def test_list_projects_sorted_by_date(client) -> None:
    projects = client.get("/projects/").json()
    assert [p["id"] for p in projects] == ["site", "cli"]
    assert projects[0]["demoLink"] == "https://example.com"
    assert projects[1]["isTruncated"] is True
    assert projects[0]["isTruncated"] is False


def test_search_projects(client) -> None:
    assert [p["id"] for p in client.get("/projects/", params={"q": "command LINE"}).json()] == ["cli"]


def test_list_projects_read_failure(client, fake_db) -> None:
    fake_db.fail_reads = True
    assert client.get("/projects/").status_code == 500


def test_live_project_search(client, monkeypatch) -> None:
    monkeypatch.setattr(config.settings, "search_debounce_seconds", 0.01)
    with client.websocket_connect("/projects/search") as websocket:
        websocket.send_text("portfolio")
        message = websocket.receive_json()
    assert [p["id"] for p in message["results"]] == ["site"]


def test_projects_sorted_by_parsed_date(client, fake_db) -> None:
    """Formatted and ISO dates compare as dates, not strings."""
    fake_db.data["projects"]["cli"]["date"] = "Jan 5, 2023"
    fake_db.data["projects"]["tool"] = {"title": "Tool", "description": "x", "date": "Mar 5, 2025"}
    assert [p["id"] for p in client.get("/projects/").json()] == ["tool", "site", "cli"]


def test_sort_key_puts_unparsable_dates_last() -> None:
    dated = to_project({"id": "a", "title": "A", "date": "Mar 5, 2025"})
    undated = to_project({"id": "b", "title": "B", "date": "someday"})
    assert sort_key(dated) == datetime.datetime(2025, 3, 5, tzinfo=datetime.timezone.utc)
    assert sorted([undated, dated], key=sort_key, reverse=True) == [dated, undated]


def test_live_project_search_without_database(client) -> None:
    from main import app

    app.state.db = None
    with client.websocket_connect("/projects/search") as websocket:
        with pytest.raises(WebSocketDisconnect) as exc_info:
            websocket.receive_text()
    assert exc_info.value.code == 1011


def test_live_project_search_read_failure(client, fake_db) -> None:
    fake_db.fail_reads = True
    with client.websocket_connect("/projects/search") as websocket:
        with pytest.raises(WebSocketDisconnect) as exc_info:
            websocket.receive_text()
    assert exc_info.value.code == 1011
