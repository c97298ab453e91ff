"""Tests for the search filter and debouncer."""

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import WebSocketDisconnect

import config
from services.search import Debouncer, live_search, matches_query


def test_matches_query_is_case_insensitive_substring() -> None:
    assert matches_query(["Hello World", "about Python"], "  PYTHON ")
    assert not matches_query(["Hello World"], "rust")


def test_empty_query_matches_everything() -> None:
    assert matches_query(["anything"], "")
    assert matches_query([None], None)


def test_missing_parts_are_ignored() -> None:
    assert matches_query([None, "Read me", None], "read")


def test_debouncer_only_fires_latest_value() -> None:
    callback = MagicMock()

    async def scenario():
        debouncer = Debouncer(callback, delay=0.01)
        for value in ["r", "ru", "rus", "rust"]:
            debouncer.push(value)
            await asyncio.sleep(0)
        assert debouncer.pending
        await asyncio.sleep(0.05)
        assert not debouncer.pending

    asyncio.run(scenario())
    callback.assert_called_once_with("rust")


def test_debouncer_cancel_drops_pending_call() -> None:
    callback = MagicMock()

    async def scenario():
        debouncer = Debouncer(callback, delay=0.01)
        debouncer.push("query")
        debouncer.cancel()
        await asyncio.sleep(0.03)

    asyncio.run(scenario())
    callback.assert_not_called()


def test_debouncer_survives_callback_errors() -> None:
    seen = []

    def callback(value):
        seen.append(value)
        raise ValueError("boom")

    async def scenario():
        debouncer = Debouncer(callback, delay=0.001)
        debouncer.push("a")
        await asyncio.sleep(0.02)
        debouncer.push("b")
        await asyncio.sleep(0.02)

    asyncio.run(scenario())
    assert seen == ["a", "b"]


class FailingSocket:
    """Sends always fail; receives one query, then the client goes away."""

    def __init__(self, queries):
        self.queries = list(queries)
        self.send_json = AsyncMock(side_effect=RuntimeError("socket closed"))

    async def receive_text(self) -> str:
        if self.queries:
            return self.queries.pop(0)
        await asyncio.sleep(0.05)
        raise WebSocketDisconnect()


def test_live_search_logs_failed_sends(monkeypatch, caplog) -> None:
    monkeypatch.setattr(config.settings, "search_debounce_seconds", 0.001)
    websocket = FailingSocket(["rust"])

    with caplog.at_level(logging.ERROR, logger="uvicorn.error"):
        with pytest.raises(WebSocketDisconnect):
            asyncio.run(live_search(websocket, ["rust cli", "site"], lambda items, q: [i for i in items if q in i]))

    websocket.send_json.assert_awaited_once_with({"query": "rust", "results": ["rust cli"]})
    assert "Error sending search results: socket closed" in caplog.text


def test_debouncer_delay_defaults_to_settings(monkeypatch) -> None:
    monkeypatch.setattr(config.settings, "search_debounce_seconds", 0.2)
    assert Debouncer(MagicMock()).delay == 0.2
