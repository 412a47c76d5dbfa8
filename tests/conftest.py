"""Pytest configuration and fixtures."""

import os
import pytest

from a2ui.core import create_container, get_settings, safe_json_dumps, Settings
from a2ui.protocol import MessageParser
from a2ui.runtime import ActionDispatcher, DataModelStore, Surface, SurfaceRegistry


# ============================================================================
# Pytest Hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with environment variables."""
    os.environ['A2UI_LOG_LEVEL'] = 'DEBUG'
    os.environ['A2UI_JSON_LOGS'] = 'false'
    os.environ['A2UI_REPAIR_JSON'] = 'false'
    os.environ['A2UI_EMIT_VALUE_CHANGE_ACTIONS'] = 'false'


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def settings():
    """Test settings."""
    return get_settings()


@pytest.fixture
def sent_actions():
    """Actions received by the controller sink."""
    return []


@pytest.fixture
def dispatcher(sent_actions):
    """Dispatcher recording into sent_actions."""
    return ActionDispatcher(sink=sent_actions.append, settings=Settings())


@pytest.fixture
def di_container(sent_actions):
    """Dependency injection container for testing."""
    return create_container(settings=Settings(), action_sink=sent_actions.append)


@pytest.fixture
def registry(dispatcher):
    """Empty surface registry."""
    return SurfaceRegistry(dispatcher=dispatcher, parser=MessageParser(Settings()), settings=Settings())


@pytest.fixture
def store():
    """Empty data model."""
    return DataModelStore()


@pytest.fixture
def parser():
    """Message parser with default limits."""
    return MessageParser(Settings())


@pytest.fixture
def send(registry):
    """Send wire-format message dicts through the registry."""

    def _send(*messages):
        return registry.process_json("\n".join(safe_json_dumps(m) for m in messages))

    return _send


@pytest.fixture
def surface(dispatcher, parser):
    """Active surface 'main' rooted at 'root'."""
    surface = Surface("main", dispatcher)
    surface.apply(parser.parse_document({"beginRendering": {"surfaceId": "main", "root": "root"}}))
    return surface


# ============================================================================
# Data Fixtures
# ============================================================================

@pytest.fixture
def counter_messages():
    """Counter app: text bound to /count and an increment button."""
    return [
        {"beginRendering": {"surfaceId": "main", "root": "root"}},
        {
            "surfaceUpdate": {
                "surfaceId": "main",
                "components": [
                    {
                        "id": "root",
                        "component": {"Column": {"children": {"explicitList": ["label", "inc"]}}},
                    },
                    {"id": "label", "component": {"Text": {"text": {"path": "/count"}}}},
                    {
                        "id": "inc",
                        "component": {
                            "Button": {
                                "child": "inc_text",
                                "primary": True,
                                "action": {
                                    "name": "increment",
                                    "context": [{"key": "current", "value": {"path": "/count"}}],
                                },
                            }
                        },
                    },
                    {"id": "inc_text", "component": {"Text": {"text": {"literalString": "+1"}}}},
                ],
            }
        },
        {
            "dataModelUpdate": {
                "surfaceId": "main",
                "contents": [{"key": "count", "valueNumber": 5}],
            }
        },
    ]


@pytest.fixture
def people_messages():
    """List templated over /people with relative name bindings."""
    return [
        {"beginRendering": {"surfaceId": "people", "root": "list"}},
        {
            "surfaceUpdate": {
                "surfaceId": "people",
                "components": [
                    {
                        "id": "list",
                        "component": {
                            "List": {
                                "children": {
                                    "template": {"componentId": "person", "dataBinding": "/people"}
                                }
                            }
                        },
                    },
                    {"id": "person", "component": {"Text": {"text": {"path": "name"}}}},
                ],
            }
        },
        {
            "dataModelUpdate": {
                "surfaceId": "people",
                "path": "/",
                "contents": [
                    {
                        "key": "people",
                        "valueArray": [
                            {"valueMap": [{"key": "name", "valueString": "Alice"}]},
                            {"valueMap": [{"key": "name", "valueString": "Bob"}]},
                        ],
                    }
                ],
            }
        },
    ]
