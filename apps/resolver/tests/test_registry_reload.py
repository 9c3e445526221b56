"""Tests for atomic reload, change listeners and file watching."""

from __future__ import annotations

import asyncio
import json
import logging

import pytest
from watchdog.events import FileModifiedEvent

from ixp_core.errors import ConfigurationError
from ixp_resolver.registry import IntentRegistry


def _rewrite(path, payload) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_reload_picks_up_corrected_file(intents_file, make_intent):
    registry = IntentRegistry(intents_file)
    _rewrite(intents_file, {"intents": [make_intent("get_news", component="NewsList")]})

    registry.reload()

    assert [i.name for i in registry.get_all()] == ["get_news"]
    assert registry.get("get_news").to_json() == make_intent(
        "get_news", component="NewsList"
    )


def test_failed_reload_keeps_previous_definitions(intents_file, make_intent):
    registry = IntentRegistry(intents_file)
    before = registry.get_all()
    _rewrite(
        intents_file,
        {"intents": [make_intent("fresh"), make_intent("broken", version="")]},
    )

    with pytest.raises(ConfigurationError, match="'broken'"):
        registry.reload()

    assert registry.get_all() == before
    assert registry.get("fresh") is None


def test_reload_without_path_is_a_noop(make_intent):
    registry = IntentRegistry([make_intent()])
    registry.reload()
    assert len(registry) == 1


def test_listeners_fire_on_changes_and_can_unsubscribe(make_intent):
    registry = IntentRegistry([make_intent()])
    calls = []
    unsubscribe = registry.on_change(lambda: calls.append(len(registry)))

    registry.add(make_intent("get_forecast"))
    registry.remove("missing")
    registry.remove("get_forecast")
    unsubscribe()
    registry.add(make_intent("get_news"))

    assert calls == [2, 1]


def test_listener_errors_are_logged_not_raised(make_intent, caplog):
    registry = IntentRegistry()
    seen = []

    def broken() -> None:
        raise RuntimeError("boom")

    registry.on_change(broken)
    registry.on_change(lambda: seen.append(True))
    with caplog.at_level(logging.ERROR):
        registry.add(make_intent())

    assert seen == [True]
    assert "Error in intent registry listener" in caplog.text


def test_enable_watching_without_path_warns(make_intent, caplog):
    registry = IntentRegistry([make_intent()])
    with caplog.at_level(logging.WARNING):
        registry.enable_file_watching()
    assert not registry.watching
    assert "no intent configuration path" in caplog.text


@pytest.mark.timeout(10)
def test_watch_event_triggers_reload(intents_file, make_intent):
    registry = IntentRegistry(intents_file)
    registry.enable_file_watching()
    try:
        assert registry.watching
        registry.enable_file_watching()  # second call is ignored
        _rewrite(intents_file, {"intents": [make_intent("get_news")]})

        # Deliver the event straight to the handler rather than waiting on the OS.
        registry._watcher.handler.dispatch(FileModifiedEvent(str(intents_file)))

        assert [i.name for i in registry.get_all()] == ["get_news"]
    finally:
        registry.close()
    assert not registry.watching


@pytest.mark.timeout(10)
def test_events_for_other_files_are_ignored(intents_file, tmp_path):
    registry = IntentRegistry(intents_file)
    calls = []
    registry.on_change(lambda: calls.append(True))
    registry.enable_file_watching()
    try:
        other = tmp_path / "other.json"
        registry._watcher.handler.dispatch(FileModifiedEvent(str(other)))
        assert calls == []
    finally:
        registry.close()


@pytest.mark.timeout(10)
def test_failed_watch_reload_is_logged_and_swallowed(intents_file, caplog):
    registry = IntentRegistry(intents_file)
    registry.enable_file_watching()
    try:
        intents_file.write_text("{broken", encoding="utf-8")
        with caplog.at_level(logging.ERROR):
            registry._watcher.handler.dispatch(FileModifiedEvent(str(intents_file)))
        assert len(registry) == 2
        assert "keeping the previous set" in caplog.text
    finally:
        registry.close()


@pytest.mark.timeout(10)
async def test_watch_reload_is_marshalled_onto_running_loop(intents_file, make_intent):
    registry = IntentRegistry(intents_file)
    reloaded = asyncio.Event()
    registry.on_change(reloaded.set)
    registry.enable_file_watching()
    try:
        _rewrite(intents_file, {"intents": [make_intent("get_news")]})
        registry._watcher.handler.dispatch(FileModifiedEvent(str(intents_file)))

        # Scheduled with call_soon_threadsafe, so nothing has happened yet.
        assert "get_news" not in registry
        await asyncio.wait_for(reloaded.wait(), timeout=5)
        assert "get_news" in registry
    finally:
        registry.close()


def test_undecodable_file_is_a_configuration_error(intents_file):
    registry = IntentRegistry(intents_file)
    intents_file.write_bytes(b'{"intents": \xff\xfe}')

    with pytest.raises(ConfigurationError, match="Malformed intent configuration"):
        registry.reload()
    assert len(registry) == 2


@pytest.mark.timeout(10)
def test_binary_file_during_watch_reload_is_swallowed(intents_file, caplog):
    registry = IntentRegistry(intents_file)
    registry.enable_file_watching()
    try:
        intents_file.write_bytes(b"\xff\xfe")
        with caplog.at_level(logging.ERROR):
            registry._watcher.handler.dispatch(FileModifiedEvent(str(intents_file)))
        assert len(registry) == 2
        assert "keeping the previous set" in caplog.text
    finally:
        registry.close()
