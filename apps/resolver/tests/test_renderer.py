"""Tests for ComponentRenderer."""

from __future__ import annotations

import pytest

from ixp_core.errors import ComponentNotFoundError, PropsValidationError
from ixp_resolver.registry import ComponentRegistry
from ixp_resolver.renderer import ComponentRenderer, RenderOptions


@pytest.fixture
def components(make_component):
    return ComponentRegistry([make_component(bundleSize="45KB")])


@pytest.fixture
def renderer(components):
    renderer = ComponentRenderer(components)
    yield renderer
    renderer.close()


def test_render_returns_placeholder(renderer):
    result = renderer.render(
        {
            "component": "WeatherCard",
            "props": {"location": "Oslo"},
            "context": {"intentId": "get_weather", "theme": "dark"},
        }
    )

    assert 'data-component="WeatherCard"' in result.html
    assert 'data-framework="react"' in result.html
    assert result.bundle_url == "https://cdn.example.com/weathercard.js"
    assert result.props == {"location": "Oslo"}
    assert result.context.intent_id == "get_weather"
    assert result.context.theme == "dark"
    assert result.context.component_id.startswith("ixp-WeatherCard-")
    assert result.context.component_id in result.html
    assert result.performance.bundle_size == "45KB"
    assert result.errors == []


def test_markup_is_escaped(make_component):
    registry = ComponentRegistry([make_component('Card"><script>')])
    result = ComponentRenderer(registry).render(
        RenderOptions(component='Card"><script>', props={"location": "Oslo"})
    )
    assert "<script>" not in result.html
    assert "&quot;&gt;&lt;script&gt;" in result.html


def test_cached_result_gets_fresh_component_id(renderer):
    options = {"component": "WeatherCard", "props": {"location": "Oslo"}}
    first = renderer.render(options)
    second = renderer.render(options)

    assert renderer.cache_stats().size == 1
    assert second.props == first.props
    assert second.context.component_id != first.context.component_id
    assert second.context.component_id in second.html


def test_cache_key_includes_props_and_intent(renderer):
    renderer.render({"component": "WeatherCard", "props": {"location": "Oslo"}})
    renderer.render({"component": "WeatherCard", "props": {"location": "Rome"}})
    renderer.render(
        {
            "component": "WeatherCard",
            "props": {"location": "Rome"},
            "context": {"intentId": "get_weather"},
        }
    )
    assert renderer.cache_stats().size == 3


def test_ssr_falls_back_and_is_not_cached(renderer):
    result = renderer.render(
        {"component": "WeatherCard", "props": {"location": "Oslo"}, "ssr": True}
    )
    assert 'data-component="WeatherCard"' in result.html
    assert len(result.errors) == 1
    assert "Server-side rendering is not available" in result.errors[0]
    assert renderer.cache_stats().size == 0


def test_unknown_component(renderer):
    with pytest.raises(ComponentNotFoundError):
        renderer.render({"component": "Missing"})


def test_invalid_props(renderer):
    with pytest.raises(PropsValidationError) as exc_info:
        renderer.render({"component": "WeatherCard", "props": {"units": "kelvin"}})
    assert exc_info.value.paths == ["location", "units"]


def test_registry_changes_clear_the_cache(renderer, components, make_component):
    renderer.render({"component": "WeatherCard", "props": {"location": "Oslo"}})
    components.add(make_component("NewsList"))
    assert renderer.cache_stats().size == 0


def test_close_unsubscribes(components, make_component):
    renderer = ComponentRenderer(components)
    renderer.close()
    renderer.render({"component": "WeatherCard", "props": {"location": "Oslo"}})
    components.add(make_component("NewsList"))
    assert renderer.cache_stats().size == 1


def test_mutating_a_result_does_not_leak_into_the_cache(renderer):
    options = {"component": "WeatherCard", "props": {"location": "Oslo"}}
    first = renderer.render(options)
    first.props["location"] = "Paris"
    second = renderer.render(options)
    second.props["theme"] = "dark"

    assert renderer.render(options).props == {"location": "Oslo"}


def test_cache_evicts_least_recently_used(components):
    renderer = ComponentRenderer(components, max_entries=2)
    for city in ("Oslo", "Rome"):
        renderer.render({"component": "WeatherCard", "props": {"location": city}})
    renderer.render({"component": "WeatherCard", "props": {"location": "Oslo"}})
    renderer.render({"component": "WeatherCard", "props": {"location": "Lima"}})

    keys = renderer.cache_stats().keys
    assert len(keys) == 2
    assert any("Oslo" in key for key in keys)
    assert any("Lima" in key for key in keys)
    renderer.close()
