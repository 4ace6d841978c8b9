"""Entry points for writing behavior logic outside a FluentScript.

Scripts normally use the factories on FluentScript, which share the script's
clock and event manager. These module-level versions take them explicitly
and fall back to the system clock with no event reporting.
"""

from typing import Optional

from .behaviors.fluent_timing import FluentTiming
from .behaviors.tick_manipulation import TickManipulationAction
from .config import DEFAULT_TIMING, TimingConfig
from .core.engine.actions import chain
from .core.engine.situation import when
from .core.engine.timing import Clock
from .core.events.event_manager import EventManager

__all__ = ["when", "chain", "timing", "tick_manipulation"]


def timing(
    config: Optional[TimingConfig] = None,
    clock: Optional[Clock] = None,
    event_manager: Optional[EventManager] = None,
) -> FluentTiming:
    return FluentTiming(config or DEFAULT_TIMING, clock=clock, event_manager=event_manager)


def tick_manipulation(
    clock: Optional[Clock] = None,
    event_manager: Optional[EventManager] = None,
) -> TickManipulationAction:
    return TickManipulationAction(clock=clock, event_manager=event_manager)
