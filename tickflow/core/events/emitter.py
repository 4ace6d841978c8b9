"""Shared helpers for components that report through an EventManager."""

from typing import Optional

from .event_manager import EventManager
from .events import DebugMessage, EngineEvent, LogMessage


class EventEmitter:
    """Mixin giving a component ``_emit_log``/``_emit_debug``.

    Components work without an event manager; in that case nothing is
    published.
    """

    event_manager: Optional[EventManager] = None
    source_name: str = "Engine"

    def _publish(self, event: EngineEvent) -> None:
        if self.event_manager is not None:
            self.event_manager.publish(event)

    def _emit_log(self, message: str, category: str = "SYSTEM", level: str = "INFO") -> None:
        """Emit a log message event."""
        self._publish(
            LogMessage(
                source=self.source_name,
                message=message,
                category=category,
                level=level,
            )
        )

    def _emit_debug(self, message: str, context: Optional[dict] = None) -> None:
        """Emit a debug message event."""
        self._publish(DebugMessage(source=self.source_name, message=message, context=context))
