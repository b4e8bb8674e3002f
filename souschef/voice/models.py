"""Voice interface data models.

Defines commands, session state, errors and timers for the cooking-mode
voice pipeline:
    Transcript → VoiceCommand → cooking action
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class CommandType(str, Enum):
    """Voice command types for hands-free cooking."""

    # Navigation
    NEXT_STEP = "next_step"
    PREVIOUS_STEP = "previous_step"
    READ_STEP = "read_step"
    CURRENT_STEP = "current_step"

    # Kitchen actions
    READ_INGREDIENTS = "read_ingredients"
    SET_TIMER = "set_timer"
    SUBSTITUTE = "substitute"

    # Meta
    HELP = "help"
    UNKNOWN = "unknown"


class VoiceState(str, Enum):
    """Listening state surfaced to the cooking screen."""

    IDLE = "idle"
    LISTENING = "listening"
    PROCESSING = "processing"
    SPEAKING = "speaking"
    ERROR = "error"


class ErrorKind(str, Enum):
    """Classified speech recognition failures."""

    PERMISSION_DENIED = "permission_denied"
    NETWORK_ERROR = "network_error"
    NOT_AVAILABLE = "not_available"
    TIMEOUT = "timeout"
    RECOGNITION_ERROR = "recognition_error"
    UNKNOWN = "unknown"


class AppState(str, Enum):
    """Host application lifecycle states."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    BACKGROUND = "background"


# Example phrases per command, used for help display
COMMAND_EXAMPLES: dict[CommandType, list[str]] = {
    CommandType.NEXT_STEP: ["next", "continue", "next step", "go next"],
    CommandType.PREVIOUS_STEP: ["back", "previous", "go back", "last step"],
    CommandType.READ_STEP: ["read this", "repeat", "read step", "what does it say"],
    CommandType.READ_INGREDIENTS: ["what ingredients", "list ingredients", "ingredients", "what do I need"],
    CommandType.SET_TIMER: ["set timer 5 minutes", "timer 10 min", "start timer for 3 minutes"],
    CommandType.CURRENT_STEP: ["where am I", "what step", "current step", "which step"],
    CommandType.SUBSTITUTE: ["substitute for eggs", "replace butter", "what can I use instead of"],
    CommandType.HELP: ["help", "what can I say", "commands"],
    CommandType.UNKNOWN: [],
}


@dataclass(frozen=True)
class VoiceCommand:
    """A parsed voice command. One instance per recognised utterance."""

    command: CommandType
    parameters: Mapping[str, Any] = field(default_factory=dict)
    raw_transcript: str = ""
    confidence: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    @property
    def minutes(self) -> int | None:
        return self.parameters.get("minutes")

    @property
    def ingredient(self) -> str | None:
        return self.parameters.get("ingredient")

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": self.command.value,
            "parameters": dict(self.parameters),
            "raw_transcript": self.raw_transcript,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class VoiceError:
    """A recognizer failure converted at the adapter boundary."""

    kind: ErrorKind
    message: str
    code: str = ""

    @property
    def recoverable(self) -> bool:
        """Whether the wake word loop may silently restart after this error."""
        return self.kind in (ErrorKind.TIMEOUT, ErrorKind.RECOGNITION_ERROR)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message, "code": self.code}


@dataclass
class VoiceSession:
    """Mutable voice state owned by one cooking-mode screen."""

    state: VoiceState = VoiceState.IDLE
    transcript: str = ""
    last_command: VoiceCommand | None = None
    error: str | None = None
    wake_word_mode: bool = False
    wake_word_listening: bool = False
    is_speaking: bool = False

    @property
    def is_listening(self) -> bool:
        return self.state == VoiceState.LISTENING

    @property
    def is_processing(self) -> bool:
        return self.state == VoiceState.PROCESSING

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "transcript": self.transcript,
            "last_command": self.last_command.to_dict() if self.last_command else None,
            "error": self.error,
            "wake_word_mode": self.wake_word_mode,
            "wake_word_listening": self.wake_word_listening,
            "is_speaking": self.is_speaking,
        }


@dataclass
class CookingTimer:
    """A countdown timer. Remaining seconds only decrease while running."""

    id: str
    name: str
    total_seconds: int
    remaining_seconds: int
    is_running: bool = True
    created_at: datetime = field(default_factory=datetime.now)
    end_time: datetime | None = None

    @property
    def is_complete(self) -> bool:
        return self.remaining_seconds <= 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "total_seconds": self.total_seconds,
            "remaining_seconds": self.remaining_seconds,
            "is_running": self.is_running,
            "created_at": self.created_at.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CookingTimer:
        total = int(data["total_seconds"])
        remaining = max(0, min(total, int(data.get("remaining_seconds", total))))
        end_time = data.get("end_time")
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            total_seconds=total,
            remaining_seconds=remaining,
            is_running=bool(data.get("is_running", False)) and remaining > 0,
            created_at=datetime.fromisoformat(data["created_at"]) if data.get("created_at") else datetime.now(),
            end_time=datetime.fromisoformat(end_time) if end_time else None,
        )


@dataclass
class Ingredient:
    """Minimal ingredient shape needed to read a list aloud."""

    name: str
    amount: str | float = ""
    unit: str = ""
    optional: bool = False


@dataclass
class CommandResult:
    """Outcome of dispatching one voice command on the cooking screen."""

    success: bool
    message: str
    command: CommandType = CommandType.UNKNOWN
    data: dict[str, Any] = field(default_factory=dict)
    spoken: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "command": self.command.value,
            "data": self.data,
            "spoken": self.spoken,
            "error": self.error,
        }
