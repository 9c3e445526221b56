"""Shared fixtures for resolver tests."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest

if TYPE_CHECKING:
    from pathlib import Path


WEATHER_PROPS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "location": {"type": "string"},
        "units": {"type": "string", "enum": ["metric", "imperial"]},
        "temperature": {"type": "number"},
        "theme": {"type": "string"},
    },
    "required": ["location"],
}

WEATHER_PARAMS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "location": {"type": "string", "minLength": 2},
        "units": {"type": "string", "enum": ["metric", "imperial"]},
    },
    "required": ["location"],
}


@pytest.fixture
def make_component():
    """Factory fixture for raw component definitions."""

    def _make(name: str = "WeatherCard", **overrides: Any) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": name,
            "framework": "react",
            "remoteUrl": f"https://cdn.example.com/{name.lower()}.js",
            "exportName": name,
            "propsSchema": WEATHER_PROPS_SCHEMA,
            "version": "1.0.0",
            "allowedOrigins": ["https://app.example.com"],
            "performance": {"bundleSizeGzipped": "12KB", "timeToInteractive": "400ms"},
        }
        data.update(overrides)
        return data

    return _make


@pytest.fixture
def make_intent():
    """Factory fixture for raw intent definitions."""

    def _make(
        name: str = "get_weather", component: str = "WeatherCard", **overrides: Any
    ) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": name,
            "description": "Show the current weather for a location",
            "parameters": WEATHER_PARAMS_SCHEMA,
            "component": component,
            "version": "1.0.0",
        }
        data.update(overrides)
        return data

    return _make


@pytest.fixture
def write_json(tmp_path: Path):
    """Write a JSON document under tmp_path and return its path."""

    def _write(name: str, payload: Any) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def intents_file(write_json, make_intent) -> Path:
    return write_json(
        "intents.json",
        {"intents": [make_intent(), make_intent("get_forecast", crawlable=True)]},
    )


@pytest.fixture
def components_file(write_json, make_component) -> Path:
    return write_json("components.json", {"components": {"WeatherCard": make_component()}})
