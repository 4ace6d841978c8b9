"""
Log management system for engine messages and debugging.

This module provides centralized logging with categorization, filtering,
and bounded storage. Engine components publish LogMessage and DebugMessage
events; the LogManager collects them from the EventManager.
"""
import os
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Optional

from ..core.events.event_manager import EventManager
from ..core.events.events import DebugMessage, EventType, LogSaveRequested
from ..core.events.events import LogMessage as LogEvent


class LogCategory(Enum):
    """Categories for log messages."""
    SYSTEM = auto()     # System messages (initialization, configuration, etc.)
    ACTION = auto()     # Action execution and faults
    TIMING = auto()     # Sleeps, waits and companion loops
    GATE = auto()       # Condition gates and result continuations
    CYCLE = auto()      # Tick manipulation cycles
    SCRIPT = auto()     # Script loop lifecycle
    DEBUG = auto()      # Debug messages
    WARNING = auto()    # Warning messages
    ERROR = auto()      # Error messages


class LogLevel(Enum):
    """Log levels for filtering."""
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass
class LogMessage:
    """A single log message with metadata."""
    text: str
    category: LogCategory
    level: LogLevel = LogLevel.INFO
    timestamp: datetime = field(default_factory=datetime.now)

    def format(self, include_timestamp: bool = False, include_category: bool = True) -> str:
        """Format the message for display."""
        parts = []

        if include_timestamp:
            time_str = self.timestamp.strftime("%H:%M:%S")
            parts.append(f"[{time_str}]")

        if include_category:
            # Short category tags for display
            category_tags = {
                LogCategory.SYSTEM: "SYS",
                LogCategory.ACTION: "ACT",
                LogCategory.TIMING: "TIM",
                LogCategory.GATE: "GAT",
                LogCategory.CYCLE: "CYC",
                LogCategory.SCRIPT: "SCR",
                LogCategory.DEBUG: "DBG",
                LogCategory.WARNING: "WRN",
                LogCategory.ERROR: "ERR",
            }
            tag = category_tags.get(self.category, "???")
            parts.append(f"[{tag}]")

        parts.append(self.text)
        return " ".join(parts)


class LogManager:
    """Collects engine log events with categorization and filtering."""

    def __init__(
        self,
        event_manager: EventManager,
        max_messages: int = 1000,
        default_level: LogLevel = LogLevel.INFO,
        log_dir: str = "logs",
    ):
        """Initialize the log manager.

        Args:
            event_manager: Event manager to collect log events from
            max_messages: Maximum number of messages to store in the buffer
            default_level: Default log level for filtering
            log_dir: Directory that ``save_log_to_file`` writes into
        """
        self.messages: deque[LogMessage] = deque(maxlen=max_messages)
        self.log_level = default_level
        self.enabled_categories = set(LogCategory)  # All categories enabled by default
        self.event_manager = event_manager
        self.log_dir = log_dir
        self.last_saved_path: Optional[str] = None

        self._setup_event_subscriptions()

    def _setup_event_subscriptions(self) -> None:
        """Set up event subscriptions for centralized logging."""
        self.event_manager.subscribe(EventType.LOG_MESSAGE, self._handle_log_message_event)
        self.event_manager.subscribe(EventType.DEBUG_MESSAGE, self._handle_debug_message_event)
        self.event_manager.subscribe(EventType.LOG_SAVE_REQUESTED, self._handle_log_save_request)

    def _handle_log_message_event(self, event) -> None:
        """Handle log message events from the event system."""
        if isinstance(event, LogEvent):
            # Map event category string to LogCategory enum
            try:
                category = LogCategory[event.category.upper()]
            except (KeyError, AttributeError):
                category = LogCategory.SYSTEM

            try:
                level = LogLevel[event.level.upper()]
            except (KeyError, AttributeError):
                level = LogLevel.INFO

            self.log(f"[{event.source}] {event.message}", category, level)

    def _handle_debug_message_event(self, event) -> None:
        """Handle debug message events from the event system."""
        if isinstance(event, DebugMessage):
            self.log(f"[{event.source}] {event.message}", LogCategory.DEBUG, LogLevel.DEBUG)

    def _handle_log_save_request(self, event) -> None:
        """Handle log save request events from the event system."""
        if isinstance(event, LogSaveRequested):
            # save_log_to_file logs its own outcome
            self.save_log_to_file()

    def log(
        self,
        text: str,
        category: LogCategory = LogCategory.SYSTEM,
        level: LogLevel = LogLevel.INFO,
    ) -> None:
        """Add a message to the log.

        Args:
            text: The message text
            category: The category of the message
            level: Severity used for filtering
        """
        # Always store messages in the buffer; filters apply on read
        self.messages.append(LogMessage(text=text, category=category, level=level))

    # Convenience methods for common categories
    def system(self, text: str) -> None:
        """Log a system message."""
        self.log(text, LogCategory.SYSTEM)

    def script(self, text: str) -> None:
        """Log a script lifecycle message."""
        self.log(text, LogCategory.SCRIPT)

    def debug(self, text: str) -> None:
        """Log a debug message."""
        self.log(text, LogCategory.DEBUG, LogLevel.DEBUG)

    def warning(self, text: str) -> None:
        """Log a warning message."""
        self.log(text, LogCategory.WARNING, LogLevel.WARNING)

    def error(self, text: str) -> None:
        """Log an error message."""
        self.log(text, LogCategory.ERROR, LogLevel.ERROR)

    def get_messages(self, count: Optional[int] = None,
                     categories: Optional[set[LogCategory]] = None) -> list[LogMessage]:
        """Get recent messages, optionally filtered by category.

        Args:
            count: Maximum number of messages to return (None for all)
            categories: Set of categories to include (None for all enabled)

        Returns:
            List of recent messages
        """
        if categories:
            # Use specific categories requested
            filtered = [msg for msg in self.messages
                        if msg.category in categories and msg.category in self.enabled_categories]
        else:
            # Use current enabled categories and log level
            filtered = [
                msg for msg in self.messages
                if msg.category in self.enabled_categories
                and msg.level.value >= self.log_level.value
            ]

        # Return the most recent messages
        if count is not None and count < len(filtered):
            return filtered[-count:]
        return filtered

    def clear(self) -> None:
        """Clear all messages from the log."""
        self.messages.clear()

    def enable_category(self, category: LogCategory) -> None:
        """Enable a log category."""
        self.enabled_categories.add(category)

    def disable_category(self, category: LogCategory) -> None:
        """Disable a log category."""
        self.enabled_categories.discard(category)

    def set_log_level(self, level: LogLevel) -> None:
        """Set the minimum log level."""
        self.log_level = level

    def is_debug_enabled(self) -> bool:
        """Check if debug messages are currently enabled."""
        return (LogCategory.DEBUG in self.enabled_categories and
                self.log_level == LogLevel.DEBUG)

    def toggle_debug(self) -> None:
        """Toggle debug message visibility."""
        if self.is_debug_enabled():
            self.disable_category(LogCategory.DEBUG)
            self.set_log_level(LogLevel.INFO)
        else:
            self.enable_category(LogCategory.DEBUG)
            self.set_log_level(LogLevel.DEBUG)

    def save_log_to_file(self) -> bool:
        """Save all messages to a timestamped log file.

        Returns:
            True if save was successful, False otherwise
        """
        try:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filepath = os.path.join(self.log_dir, f"log_{timestamp}.log")
            os.makedirs(self.log_dir, exist_ok=True)

            # Save all messages with full timestamps and category info
            with open(filepath, 'w', encoding='utf-8') as f:
                f.write("tickflow - Engine Log\n")
                f.write(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
                f.write("=" * 60 + "\n\n")

                if not self.messages:
                    f.write("No messages to save.\n")
                else:
                    # Save ALL messages from buffer, ignoring current filters
                    for msg in self.messages:
                        timestamp_str = msg.timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
                        f.write(f"[{timestamp_str}] [{msg.category.name}] [{msg.level.name}] {msg.text}\n")

            self.system(f"Engine log saved to {filepath}")
            self.last_saved_path = filepath
            return True

        except OSError as e:
            # Log the error but don't crash
            self.error(f"Failed to save log file: {e}")
            return False
