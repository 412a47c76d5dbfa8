"""Surface registry routing tests."""

import json

import pytest
from returns.result import Failure, Success

from a2ui.errors import MalformedMessage, SurfaceTornDown, UnknownSurface
from a2ui.protocol import DeleteSurface, parse_messages
from a2ui.runtime import (
    ActionDispatcher,
    DataModelUpdated,
    SurfaceCreated,
    SurfaceRegistry,
    SurfaceState,
)


@pytest.mark.unit
def test_begin_creates_surface(send, registry):
    """Test beginRendering registers a surface."""
    events = send({"beginRendering": {"surfaceId": "a", "root": "root"}})
    assert events == [SurfaceCreated("a", "root")]
    assert "a" in registry
    assert len(registry) == 1
    assert registry.require("a").state is SurfaceState.ACTIVE


@pytest.mark.unit
def test_duplicate_begin_rejected(send, registry):
    """Test a second beginRendering for a live id."""
    send({"beginRendering": {"surfaceId": "a", "root": "root"}})
    with pytest.raises(UnknownSurface):
        send({"beginRendering": {"surfaceId": "a", "root": "other"}})
    assert registry.require("a").root == "root"


@pytest.mark.unit
def test_unknown_surface_rejected(send, registry):
    """Test messages for surfaces that were never begun."""
    with pytest.raises(UnknownSurface):
        send({"dataModelUpdate": {"surfaceId": "nope", "contents": []}})
    with pytest.raises(UnknownSurface):
        registry.render("nope")
    assert registry.get("nope") is None


@pytest.mark.unit
def test_surfaces_are_isolated(send, registry):
    """Test each surface has its own data model."""
    send(
        {"beginRendering": {"surfaceId": "a", "root": "r"}},
        {"beginRendering": {"surfaceId": "b", "root": "r"}},
        {"dataModelUpdate": {"surfaceId": "a", "contents": [{"key": "x", "valueNumber": 1}]}},
    )
    assert registry.require("a").store.get("/x") == 1
    assert registry.require("b").store.get("/x") is None
    assert sorted(registry.surface_ids()) == ["a", "b"]


@pytest.mark.unit
def test_delete_surface_removes(send, registry):
    """Test deleteSurface tears down and forgets the surface."""
    send({"beginRendering": {"surfaceId": "a", "root": "r"}})
    surface = registry.require("a")
    send({"deleteSurface": {"surfaceId": "a"}})
    assert "a" not in registry
    assert surface.state is SurfaceState.TORN_DOWN

    # The id can be begun again
    send({"beginRendering": {"surfaceId": "a", "root": "r2"}})
    assert registry.require("a").root == "r2"


@pytest.mark.unit
def test_messages_after_delete(send, registry):
    """Test a deleted id is unknown to the registry and its old surface is terminal."""
    send({"beginRendering": {"surfaceId": "a", "root": "r"}})
    surface = registry.require("a")
    send({"deleteSurface": {"surfaceId": "a"}})

    with pytest.raises(UnknownSurface):
        send({"surfaceUpdate": {"surfaceId": "a", "components": [
            {"id": "r", "component": {"Text": {"text": {"literalString": "late"}}}}]}})
    with pytest.raises(UnknownSurface):
        send({"deleteSurface": {"surfaceId": "a"}})
    with pytest.raises(SurfaceTornDown):
        surface.apply(DeleteSurface(surface_id="a"))
    assert "a" not in registry


@pytest.mark.unit
def test_teardown(send, registry):
    """Test explicit teardown."""
    send({"beginRendering": {"surfaceId": "a", "root": "r"}})
    surface = registry.require("a")
    assert registry.teardown("a") is True
    assert registry.teardown("a") is False
    with pytest.raises(SurfaceTornDown):
        surface.render()


@pytest.mark.unit
def test_shutdown(send, registry):
    """Test shutdown tears down every surface."""
    send(
        {"beginRendering": {"surfaceId": "a", "root": "r"}},
        {"beginRendering": {"surfaceId": "b", "root": "r"}},
    )
    surfaces = [registry.require("a"), registry.require("b")]
    registry.shutdown()
    assert len(registry) == 0
    assert all(s.state is SurfaceState.TORN_DOWN for s in surfaces)


@pytest.mark.unit
def test_process_json_array(registry, counter_messages):
    """Test a JSON array payload is applied in order."""
    events = registry.process_json(json.dumps(counter_messages))
    assert isinstance(events[-1], DataModelUpdated)
    assert registry.render("main").find("label").properties["text"] == "5"


@pytest.mark.unit
def test_process_json_malformed_applies_nothing(registry, counter_messages):
    """Test a payload with one bad document is rejected whole."""
    payload = "\n".join([json.dumps(counter_messages[0]), '{"surfaceUpdate": {"surfaceId": "main", "components": [{"id": "x", "component": {"Blink": {}}}]}}'])
    with pytest.raises(MalformedMessage):
        registry.process_json(payload)
    assert len(registry) == 0


@pytest.mark.unit
def test_process_many_collects_results(registry, counter_messages):
    """Test one bad message never stops the stream."""
    messages = parse_messages(json.dumps(counter_messages[:2]))
    messages.insert(1, DeleteSurface(surface_id="ghost"))
    messages.extend(parse_messages(json.dumps(counter_messages[2])))

    results = registry.process_many(messages)
    assert [isinstance(r, Success) for r in results] == [True, False, True, True]
    assert isinstance(results[1], Failure)
    assert isinstance(results[1].failure(), UnknownSurface)
    assert registry.render("main").ok


@pytest.mark.unit
def test_container_provides_singletons(di_container, sent_actions, counter_messages):
    """Test the DI container wires the registry to the action sink."""
    registry = di_container.get(SurfaceRegistry)
    assert registry is di_container.get(SurfaceRegistry)
    assert registry.dispatcher is di_container.get(ActionDispatcher)

    registry.process_json(json.dumps(counter_messages))
    registry.require("main").press("inc")
    assert [a.name for a in sent_actions] == ["increment"]
