"""
Speech recognition adapters and the continuous wake word loop.

NativeRecognizer wraps a SpeechEngine; InertRecognizer stands in when no
engine is linked or the device cannot recognise speech. ``create_recognizer``
picks one with an explicit availability probe.

Wake word loop:
    While armed, every speech-end (and every timeout / no-match error)
    schedules one restart after ``restart_delay_seconds``. A new restart
    request replaces the pending one. Results heard in the loop are only
    surfaced when they contain the wake phrase. ``start()`` during the loop
    turns the running capture into the active one; when that capture times
    out the listener sees a speech-end and the loop resumes.
"""

from __future__ import annotations

import logging
from enum import Enum

from souschef.config_models import RecognitionConfig
from souschef.scheduling import Handle, LoopScheduler, Scheduler
from souschef.voice.models import VoiceError
from souschef.voice.parser.wake_word import WakeWordDetector, get_wake_word_detector
from souschef.voice.recognition.base import (
    RecognitionListener,
    SpeechEngine,
    SpeechRecognitionAdapter,
    map_engine_error,
)

logger = logging.getLogger(__name__)


class CaptureMode(str, Enum):
    ACTIVE = "active"
    WAKE_WORD = "wake_word"


class NativeRecognizer(SpeechRecognitionAdapter):
    """Adapter over a linked native speech engine."""

    def __init__(
        self,
        engine: SpeechEngine,
        scheduler: Scheduler | None = None,
        detector: WakeWordDetector | None = None,
        config: RecognitionConfig | None = None,
    ):
        self._engine = engine
        self._scheduler = scheduler or LoopScheduler()
        self._detector = detector or get_wake_word_detector()
        self._config = config or RecognitionConfig()
        self._locale = self._config.language
        self._listener: RecognitionListener | None = None
        self._mode = CaptureMode.ACTIVE
        self._wake_word_active = False
        self._restart_handle: Handle | None = None
        self._engine.set_callbacks(self)

    @property
    def name(self) -> str:
        return "native"

    @property
    def mode(self) -> CaptureMode:
        return self._mode

    @property
    def wake_word_active(self) -> bool:
        return self._wake_word_active

    @property
    def restart_pending(self) -> bool:
        return self._restart_handle is not None

    def is_available(self) -> bool:
        try:
            return bool(self._engine.is_available())
        except Exception as e:
            logger.warning("Speech engine availability probe failed: %s", e, exc_info=True)
            return False

    def set_listener(self, listener: RecognitionListener | None) -> None:
        self._listener = listener

    # ------------------------------------------------------------------
    # Capture control
    # ------------------------------------------------------------------

    def start(self, locale: str | None = None) -> bool:
        """Open an active capture. A running wake loop capture is taken over."""
        self._cancel_pending_restart()
        if self._in_wake_loop and self.is_recognizing():
            logger.debug("Wake loop capture switched to active")
            self._mode = CaptureMode.ACTIVE
            return True

        self._mode = CaptureMode.ACTIVE
        started = self._start_engine(locale)
        if not started and self._wake_word_active:
            self._schedule_restart(self._config.restart_retry_delay_seconds)
        return started

    def stop(self) -> None:
        try:
            self._engine.stop()
        except Exception as e:
            logger.warning("Error stopping voice recognition: %s", e, exc_info=True)

    def cancel(self) -> None:
        try:
            self._engine.cancel()
        except Exception as e:
            logger.warning("Error canceling voice recognition: %s", e, exc_info=True)

    def is_recognizing(self) -> bool:
        try:
            return bool(self._engine.is_recognizing())
        except Exception:
            return False

    def _start_engine(self, locale: str | None = None) -> bool:
        if locale:
            self._locale = locale
        if self.is_recognizing():
            logger.debug("Recognizer already running; start ignored")
            return False
        try:
            self._engine.start(self._locale)
            return True
        except Exception as e:
            logger.warning("Error starting voice recognition: %s", e, exc_info=True)
            return False

    # ------------------------------------------------------------------
    # Wake word loop
    # ------------------------------------------------------------------

    def start_wake_word_listening(self, locale: str | None = None) -> bool:
        self._wake_word_active = True
        self._cancel_pending_restart()

        # An active capture in progress re-arms the loop when it ends
        if self.is_recognizing():
            return True

        self._mode = CaptureMode.WAKE_WORD
        started = self._start_engine(locale)
        if not started:
            self._wake_word_active = False
        return started

    def stop_wake_word_listening(self) -> None:
        was_listening = self._wake_word_active and self._mode == CaptureMode.WAKE_WORD
        self._wake_word_active = False
        self._cancel_pending_restart()
        if was_listening:
            self.stop()
        self._mode = CaptureMode.ACTIVE

    def _schedule_restart(self, delay: float | None = None) -> None:
        if not self._wake_word_active:
            return
        self._cancel_pending_restart()
        if delay is None:
            delay = self._config.restart_delay_seconds
        self._restart_handle = self._scheduler.call_later(delay, self._restart)

    def _cancel_pending_restart(self) -> None:
        if self._restart_handle is not None:
            self._restart_handle.cancel()
            self._restart_handle = None

    def _restart(self) -> None:
        self._restart_handle = None
        if not self._wake_word_active or self.is_recognizing():
            return
        self._mode = CaptureMode.WAKE_WORD
        if not self._start_engine():
            logger.info("Wake word restart failed; retrying")
            self._schedule_restart(self._config.restart_retry_delay_seconds)

    def destroy(self) -> None:
        self.stop_wake_word_listening()
        self._listener = None
        try:
            self._engine.set_callbacks(None)
            self._engine.destroy()
        except Exception as e:
            logger.warning("Error destroying speech engine: %s", e, exc_info=True)

    # ------------------------------------------------------------------
    # Engine callbacks
    # ------------------------------------------------------------------

    @property
    def _in_wake_loop(self) -> bool:
        return self._wake_word_active and self._mode == CaptureMode.WAKE_WORD

    def on_speech_start(self) -> None:
        if not self._in_wake_loop and self._listener:
            self._listener.on_speech_start()

    def on_speech_end(self) -> None:
        if not self._in_wake_loop and self._listener:
            self._listener.on_speech_end()
        if self._wake_word_active:
            self._schedule_restart()

    def on_partial_results(self, results: list[str]) -> None:
        if self._in_wake_loop:
            return
        if self._listener:
            self._listener.on_partial_results(list(results or []))

    def on_results(self, results: list[str]) -> None:
        results = list(results or [])
        if self._in_wake_loop:
            transcript = results[0] if results else ""
            if self._detector.matches(transcript):
                command = self._detector.extract_command(transcript)
                logger.info("Wake word detected", extra={"has_command": bool(command)})
                if self._listener:
                    self._listener.on_wake_word(command)
            return
        if self._listener:
            self._listener.on_results(results)

    def on_error(self, code: str, message: str) -> None:
        error = map_engine_error(code, message)

        if self._wake_word_active and error.recoverable:
            logger.debug("Recoverable %s in wake word loop; restarting", error.kind.value)
            # An active capture ended without a command
            if not self._in_wake_loop and self._listener:
                self._listener.on_speech_end()
            self._schedule_restart()
            return

        if self._wake_word_active:
            logger.warning("Wake word loop stopped: %s (%s)", error.message, error.kind.value)
            self._wake_word_active = False
            self._cancel_pending_restart()
            self._mode = CaptureMode.ACTIVE

        self._emit_error(error)

    def _emit_error(self, error: VoiceError) -> None:
        if self._listener:
            self._listener.on_error(error)


class InertRecognizer(SpeechRecognitionAdapter):
    """No-op adapter for hosts without a usable speech engine."""

    @property
    def name(self) -> str:
        return "inert"

    def is_available(self) -> bool:
        return False

    def set_listener(self, listener: RecognitionListener | None) -> None:
        pass

    def start(self, locale: str | None = None) -> bool:
        logger.debug("Voice recognition not available; start ignored")
        return False

    def stop(self) -> None:
        pass

    def cancel(self) -> None:
        pass

    def is_recognizing(self) -> bool:
        return False


def create_recognizer(
    engine: SpeechEngine | None = None,
    scheduler: Scheduler | None = None,
    detector: WakeWordDetector | None = None,
    config: RecognitionConfig | None = None,
) -> SpeechRecognitionAdapter:
    """Probe the engine and return the matching adapter."""
    if engine is None:
        logger.info("No speech engine linked; voice recognition disabled")
        return InertRecognizer()

    try:
        available = bool(engine.is_available())
    except Exception as e:
        logger.warning("Speech engine probe failed: %s", e, exc_info=True)
        available = False

    if not available:
        logger.warning("Voice recognition not available on this device")
        return InertRecognizer()

    return NativeRecognizer(engine, scheduler=scheduler, detector=detector, config=config)
