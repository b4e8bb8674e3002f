"""Speech recognition interfaces.

SpeechEngine is the narrow surface of a native speech-to-text module.
SpeechRecognitionAdapter is what the rest of the app talks to: it never
raises, and reports everything to one RecognitionListener.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol

from souschef.voice.models import ErrorKind, VoiceError


class EngineCallbacks(Protocol):
    """Events a SpeechEngine reports back to its adapter."""

    def on_speech_start(self) -> None: ...

    def on_speech_end(self) -> None: ...

    def on_partial_results(self, results: list[str]) -> None: ...

    def on_results(self, results: list[str]) -> None: ...

    def on_error(self, code: str, message: str) -> None: ...


class SpeechEngine(Protocol):
    """A native speech-to-text module. Any method may raise."""

    def is_available(self) -> bool: ...

    def set_callbacks(self, callbacks: EngineCallbacks | None) -> None: ...

    def start(self, locale: str) -> None: ...

    def stop(self) -> None: ...

    def cancel(self) -> None: ...

    def is_recognizing(self) -> bool: ...

    def destroy(self) -> None: ...


class RecognitionListener(Protocol):
    """Receives adapter events. Implemented by the voice session controller."""

    def on_speech_start(self) -> None: ...

    def on_speech_end(self) -> None: ...

    def on_partial_results(self, results: list[str]) -> None: ...

    def on_results(self, results: list[str]) -> None: ...

    def on_error(self, error: VoiceError) -> None: ...

    def on_wake_word(self, command: str) -> None: ...


class SpeechRecognitionAdapter(ABC):
    """Uniform start/stop/cancel interface over a speech engine."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Adapter identifier (e.g. 'native', 'inert')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether recognition can actually run on this device."""

    @abstractmethod
    def set_listener(self, listener: RecognitionListener | None) -> None:
        """Register (or clear) the receiver of recognition events."""

    @abstractmethod
    def start(self, locale: str | None = None) -> bool:
        """Begin capturing. False if unavailable, already running or failed."""

    @abstractmethod
    def stop(self) -> None:
        """Stop capturing and deliver final results. Safe when idle."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop capturing and drop results. Safe when idle."""

    @abstractmethod
    def is_recognizing(self) -> bool:
        """Whether audio is currently being captured."""

    @property
    def wake_word_active(self) -> bool:
        """Whether the continuous wake word loop is armed."""
        return False

    def start_wake_word_listening(self, locale: str | None = None) -> bool:
        """Arm the continuous wake word loop. Override if supported."""
        return False

    def stop_wake_word_listening(self) -> None:
        """Disarm the wake word loop. Override if supported."""

    def destroy(self) -> None:
        """Release the engine and drop the listener."""
        self.set_listener(None)


def map_engine_error(code: str | int | None, message: str | None = None) -> VoiceError:
    """Classify a native engine error code.

    Codes follow the Android SpeechRecognizer numbering, with iOS-style
    string codes matched by keyword.
    """
    code = "" if code is None else str(code)
    lowered = code.lower()

    if "permission" in lowered or code == "9":
        kind = ErrorKind.PERMISSION_DENIED
    elif "network" in lowered or code == "2":
        kind = ErrorKind.NETWORK_ERROR
    elif "not_available" in lowered or code == "1":
        kind = ErrorKind.NOT_AVAILABLE
    elif code in ("6", "7") or "timeout" in lowered:
        kind = ErrorKind.TIMEOUT
    elif code in ("5", "11") or "no_match" in lowered:
        kind = ErrorKind.RECOGNITION_ERROR
    else:
        kind = ErrorKind.UNKNOWN

    return VoiceError(kind=kind, message=message or "Unknown error", code=code)


ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.PERMISSION_DENIED: "Microphone permission is required for voice control.",
    ErrorKind.NETWORK_ERROR: "Voice recognition needs a network connection.",
    ErrorKind.NOT_AVAILABLE: "Voice recognition not available",
    ErrorKind.TIMEOUT: "I didn't hear anything. Tap the mic to try again.",
    ErrorKind.RECOGNITION_ERROR: "Sorry, I didn't catch that.",
    ErrorKind.UNKNOWN: "Something went wrong with voice recognition.",
}
