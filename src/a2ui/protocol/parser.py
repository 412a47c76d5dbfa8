"""Message Parser - JSON to typed protocol messages with validation."""

from typing import Any

from pydantic import ValidationError as PydanticValidationError
from returns.result import Failure, Result, Success

from ..core import get_logger, get_settings, Settings
from ..core.json import JSONParseError, split_documents
from ..core.validate import ValidationError, ValidationResult, validate_json_depth, validate_json_size
from ..errors import MalformedMessage
from .components import component_from_wire
from .messages import MESSAGE_TYPES, InboundMessage, SurfaceUpdate

logger = get_logger(__name__)


class MessageParser:
    """Parses producer output into inbound protocol messages."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def parse(self, content: str | bytes) -> list[InboundMessage]:
        """
        Parse a payload holding one message, a JSON array of messages, or JSON Lines.

        The payload is all-or-nothing: any malformed document rejects it.

        Raises:
            MalformedMessage: On oversize payloads, bad JSON or schema violations
        """
        try:
            validate_json_size(content, self.settings.max_message_size, "message payload")
        except ValidationError as e:
            logger.error("payload_too_large", error=str(e))
            raise MalformedMessage(str(e)) from e

        try:
            text = content.decode("utf-8") if isinstance(content, bytes) else content
        except UnicodeDecodeError as e:
            logger.error("payload_not_utf8", error=str(e))
            raise MalformedMessage(f"Payload is not valid UTF-8: {e}") from e

        try:
            documents = split_documents(text, repair=self.settings.repair_json)
        except JSONParseError as e:
            logger.error("json_parse_failed", error=str(e))
            raise MalformedMessage(f"Invalid JSON: {e}") from e

        return [self.parse_document(doc) for doc in documents]

    def parse_document(self, doc: Any) -> InboundMessage:
        """
        Parse one decoded message envelope ``{"<messageType>": {...}}``.

        Raises:
            MalformedMessage: If the envelope or body violates the schema
        """
        if not isinstance(doc, dict):
            raise MalformedMessage(f"Message must be an object, got {type(doc).__name__}")

        try:
            validate_json_depth(doc, self.settings.max_json_depth)
        except ValidationError as e:
            raise MalformedMessage(str(e)) from e

        if len(doc) != 1:
            raise MalformedMessage(
                f"Message must carry exactly one of {', '.join(MESSAGE_TYPES)} (found: {', '.join(doc) or 'none'})"
            )

        (message_type, body), = doc.items()
        model = MESSAGE_TYPES.get(message_type)
        if model is None:
            logger.warning("unknown_message_type", message_type=message_type)
            raise MalformedMessage(f"Unknown message type {message_type!r}")
        if not isinstance(body, dict):
            raise MalformedMessage(f"{message_type} body must be an object")

        surface_id = body.get("surfaceId") if isinstance(body.get("surfaceId"), str) else None

        try:
            if model is SurfaceUpdate:
                return self._parse_surface_update(body, surface_id)
            return model.model_validate(body)
        except PydanticValidationError as e:
            logger.error("schema_violation", message_type=message_type, errors=e.error_count())
            raise MalformedMessage(
                f"Invalid {message_type}: {e}", surface_id=surface_id
            ) from e

    def _parse_surface_update(self, body: dict[str, Any], surface_id: str | None) -> SurfaceUpdate:
        raw_components = body.get("components", [])
        if not isinstance(raw_components, list):
            raise MalformedMessage("surfaceUpdate components must be a list", surface_id=surface_id)

        components = []
        for entry in raw_components:
            component_id = entry.get("id") if isinstance(entry, dict) else None
            try:
                components.append(component_from_wire(entry))
            except PydanticValidationError as e:
                raise MalformedMessage(
                    f"Invalid component {component_id!r}: {e}",
                    surface_id=surface_id,
                    component_id=component_id,
                ) from e
            except ValueError as e:
                raise MalformedMessage(
                    str(e), surface_id=surface_id, component_id=component_id
                ) from e

        return SurfaceUpdate(surface_id=body.get("surfaceId"), components=components)


def parse_messages(content: str | bytes) -> list[InboundMessage]:
    """
    Convenience function to parse a protocol payload

    Args:
        content: JSON, JSON array or JSON Lines payload

    Returns:
        Typed inbound messages, in order
    """
    parser = MessageParser()
    return parser.parse(content)


def validate_message(doc: Any) -> Result[InboundMessage, ValidationResult]:
    """
    Validate one decoded message (Result pattern version).

    Returns:
        Success with the typed message, or Failure describing the violation
    """
    try:
        return Success(MessageParser().parse_document(doc))
    except MalformedMessage as e:
        return Failure(ValidationResult(e.message, field=e.component_id, value=doc))
