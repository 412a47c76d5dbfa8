"""
Surface Registry
Routes inbound protocol messages to their surfaces.

The registry is an explicit object (provided by the DI container), not a
module global. Its map lock is never held while a surface applies a message,
so different surfaces proceed in parallel.
"""

import threading
from typing import Iterable

from returns.result import Failure, Result, Success

from ..core import get_logger, get_settings, Settings
from ..errors import A2uiError, UnknownSurface
from ..protocol.messages import BeginRendering, DeleteSurface, InboundMessage
from ..protocol.parser import MessageParser
from .actions import ActionDispatcher
from .events import ProcessorEvent
from .render import RenderSnapshot
from .surface import Surface

logger = get_logger(__name__)


class SurfaceRegistry:
    """Process-scoped mapping from surface id to Surface."""

    def __init__(
        self,
        dispatcher: ActionDispatcher | None = None,
        parser: MessageParser | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.dispatcher = dispatcher or ActionDispatcher(settings=self.settings)
        self.parser = parser or MessageParser(self.settings)
        self._surfaces: dict[str, Surface] = {}
        self._lock = threading.Lock()

    def process(self, message: InboundMessage) -> list[ProcessorEvent]:
        """
        Route one typed message.

        Raises:
            UnknownSurface: beginRendering for an existing id, or any other
                message for an id that was never begun
            A2uiError: Whatever the surface raises while applying it
        """
        if isinstance(message, BeginRendering):
            self._reject_existing(message.surface_id)
            surface = Surface(message.surface_id, self.dispatcher)
            events = surface.apply(message)
            with self._lock:
                # Another thread may have begun the same id meanwhile
                self._reject_existing(message.surface_id, locked=True)
                self._surfaces[message.surface_id] = surface
            return events

        surface = self.require(message.surface_id)
        events = surface.apply(message)

        if isinstance(message, DeleteSurface):
            with self._lock:
                if self._surfaces.get(message.surface_id) is surface:
                    del self._surfaces[message.surface_id]
        return events

    def _reject_existing(self, surface_id: str, locked: bool = False) -> None:
        exists = surface_id in self._surfaces if locked else surface_id in self
        if exists:
            raise UnknownSurface(f"Surface {surface_id!r} already exists", surface_id=surface_id)

    def process_json(self, content: str | bytes) -> list[ProcessorEvent]:
        """
        Parse a payload (object, array or JSON Lines) and apply its messages in order.

        The payload is parsed in full before anything is applied. Messages
        applied before a failing one stay applied.

        Raises:
            MalformedMessage: Payload does not parse
            A2uiError: A message fails to apply
        """
        events: list[ProcessorEvent] = []
        for message in self.parser.parse(content):
            events.extend(self.process(message))
        return events

    def process_many(
        self, messages: Iterable[InboundMessage]
    ) -> list[Result[list[ProcessorEvent], A2uiError]]:
        """Apply every message, collecting each outcome instead of stopping at the first error."""
        results: list[Result[list[ProcessorEvent], A2uiError]] = []
        for message in messages:
            try:
                results.append(Success(self.process(message)))
            except A2uiError as e:
                logger.warning(
                    "message_rejected",
                    surface_id=message.surface_id,
                    message=type(message).__name__,
                    kind=e.kind,
                    error=e.message,
                )
                results.append(Failure(e))
        return results

    def get(self, surface_id: str) -> Surface | None:
        with self._lock:
            return self._surfaces.get(surface_id)

    def require(self, surface_id: str) -> Surface:
        """
        Get a surface that must exist.

        Raises:
            UnknownSurface: No surface with that id
        """
        surface = self.get(surface_id)
        if surface is None:
            raise UnknownSurface(f"Unknown surface {surface_id!r}", surface_id=surface_id)
        return surface

    def render(self, surface_id: str) -> RenderSnapshot:
        return self.require(surface_id).render()

    def teardown(self, surface_id: str) -> bool:
        """Tear down and forget a surface. Returns False if it did not exist."""
        with self._lock:
            surface = self._surfaces.pop(surface_id, None)
        if surface is None:
            return False
        surface.teardown()
        return True

    def shutdown(self) -> None:
        """Tear down every surface."""
        with self._lock:
            surfaces = list(self._surfaces.values())
            self._surfaces.clear()
        for surface in surfaces:
            surface.teardown()
        logger.info("registry_shutdown", surfaces=len(surfaces))

    def surface_ids(self) -> list[str]:
        with self._lock:
            return list(self._surfaces)

    def __len__(self) -> int:
        with self._lock:
            return len(self._surfaces)

    def __contains__(self, surface_id: object) -> bool:
        with self._lock:
            return surface_id in self._surfaces
