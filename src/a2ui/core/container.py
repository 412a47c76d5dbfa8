"""Dependency Injection Container."""

from injector import Injector, Module, provider, singleton

from .config import Settings, get_settings
from ..protocol.parser import MessageParser
from ..runtime.actions import ActionDispatcher, ActionSink
from ..runtime.registry import SurfaceRegistry


class RuntimeModule(Module):
    """Runtime dependencies."""

    def __init__(self, settings: Settings | None = None, action_sink: ActionSink | None = None) -> None:
        self.settings = settings
        self.action_sink = action_sink

    @singleton
    @provider
    def provide_settings(self) -> Settings:
        """Provide settings (explicit, or cached from environment)."""
        return self.settings or get_settings()

    @singleton
    @provider
    def provide_dispatcher(self, settings: Settings) -> ActionDispatcher:
        """Provide action dispatcher wired to the controller sink."""
        return ActionDispatcher(sink=self.action_sink, settings=settings)

    @singleton
    @provider
    def provide_parser(self, settings: Settings) -> MessageParser:
        """Provide message parser."""
        return MessageParser(settings)

    @singleton
    @provider
    def provide_registry(
        self, dispatcher: ActionDispatcher, parser: MessageParser, settings: Settings
    ) -> SurfaceRegistry:
        """Provide the process-scoped surface registry."""
        return SurfaceRegistry(dispatcher=dispatcher, parser=parser, settings=settings)


def create_container(settings: Settings | None = None, action_sink: ActionSink | None = None) -> Injector:
    """Create configured injector."""
    return Injector([RuntimeModule(settings, action_sink)])
