"""
Voice session controller for one cooking-mode screen.

Owns the VoiceSession state and drives it from recognizer events and user
actions:

    idle -> listening -> processing -> speaking -> idle
    idle/listening -> error -> idle   (clear_error)

Hands-free mode runs the recognizer's wake word loop in the background
without surfacing ``listening``; a detected wake word greets the user and
then runs the trailing command or opens an active capture for it.

Every utterance is quota checked against the voice feature before it is
dispatched, and counted only after a valid command was handled.

Usage:
    controller = VoiceSessionController(recognizer, speaker, gate, tier_provider=lambda: "free")
    await controller.toggle_listening()
    ...
    controller.close()
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Coroutine

from souschef.config_models import VoiceConfig
from souschef.subscription.gate import FeatureGate
from souschef.subscription.models import Feature, FeatureCheckResult, SubscriptionTier
from souschef.voice.models import (
    AppState,
    CommandResult,
    CookingTimer,
    ErrorKind,
    VoiceCommand,
    VoiceError,
    VoiceSession,
    VoiceState,
)
from souschef.voice.formatting import format_timer_done_speech
from souschef.voice.parser.command_parser import is_valid_command, parse
from souschef.voice.preferences import VoicePreferences
from souschef.voice.recognition.base import ERROR_MESSAGES, SpeechRecognitionAdapter
from souschef.voice.speech import Haptics, Speaker, buzz

logger = logging.getLogger(__name__)

CommandHandler = Callable[[VoiceCommand], "CommandResult | None | Awaitable[CommandResult | None]"]
StateListener = Callable[[VoiceState, VoiceState], Any]
WakeWordCallback = Callable[[str], Any]


class VoiceSessionController:
    """State machine tying recognizer, speech, quota gate and commands together."""

    def __init__(
        self,
        recognizer: SpeechRecognitionAdapter,
        speaker: Speaker | None = None,
        gate: FeatureGate | None = None,
        tier_provider: Callable[[], SubscriptionTier | str] = lambda: SubscriptionTier.FREE,
        preferences: VoicePreferences | None = None,
        haptics: Haptics | None = None,
        config: VoiceConfig | None = None,
        on_command: CommandHandler | None = None,
        on_state_change: StateListener | None = None,
    ):
        self.config = config or VoiceConfig()
        self.recognizer = recognizer
        self.speaker = speaker or Speaker(config=self.config.tts, wake_config=self.config.wake_word)
        self.gate = gate or FeatureGate()
        self.tier_provider = tier_provider
        self.preferences = preferences
        self.haptics = haptics
        self.on_command = on_command
        self.on_state_change = on_state_change

        self.session = VoiceSession()
        self.access_denied: FeatureCheckResult | None = None
        self._wake_callback: WakeWordCallback | None = None
        self._app_state = AppState.ACTIVE
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

        if preferences is not None:
            self.session.wake_word_mode = preferences.wake_word_mode

        self.recognizer.set_listener(self)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> VoiceState:
        return self.session.state

    @property
    def error(self) -> str | None:
        return self.session.error

    @property
    def is_available(self) -> bool:
        return self.recognizer.is_available()

    def _transition(self, new_state: VoiceState) -> None:
        old_state = self.session.state
        if old_state == new_state:
            return
        self.session.state = new_state
        logger.debug("Voice state %s -> %s", old_state.value, new_state.value)
        if self.on_state_change is None:
            return
        try:
            self.on_state_change(old_state, new_state)
        except Exception as e:
            logger.warning("State change listener failed: %s", e, exc_info=True)

    def _set_error(self, message: str) -> None:
        logger.warning("Voice error: %s", message)
        self.session.error = message
        self.session.is_speaking = False
        self._transition(VoiceState.ERROR)

    def clear_error(self) -> None:
        self.session.error = None
        if self.session.state == VoiceState.ERROR:
            self._transition(VoiceState.IDLE)

    # ------------------------------------------------------------------
    # Quota
    # ------------------------------------------------------------------

    def check_voice_access(self) -> FeatureCheckResult:
        """Check today's voice quota for the current tier. Never counts a use."""
        result = self.gate.check(self.tier_provider(), Feature.VOICE)
        self.access_denied = None if result.allowed else result
        return result

    def record_voice_usage(self) -> None:
        self.gate.record(Feature.VOICE)

    # ------------------------------------------------------------------
    # Active listening
    # ------------------------------------------------------------------

    async def start_listening(self) -> bool:
        """Quota check, then open one active capture."""
        if not self.recognizer.is_available():
            self._set_error(ERROR_MESSAGES[ErrorKind.NOT_AVAILABLE])
            return False

        access = self.check_voice_access()
        if not access.allowed:
            return False

        buzz(self.haptics, self.config.haptics.listen_start_ms)
        return self._begin_capture()

    async def stop_listening(self) -> None:
        self.recognizer.stop()
        if self.session.state == VoiceState.LISTENING:
            self._transition(VoiceState.IDLE)

    async def toggle_listening(self) -> bool:
        """Start listening when idle, stop when listening. True if now listening."""
        if self.session.is_listening:
            await self.stop_listening()
            return False
        return await self.start_listening()

    def _begin_capture(self) -> bool:
        self.session.transcript = ""
        self.session.error = None
        self._transition(VoiceState.LISTENING)
        if not self.recognizer.start(self.config.recognition.language):
            self._set_error("Failed to start voice recognition")
            return False
        return True

    # ------------------------------------------------------------------
    # Hands-free wake word mode
    # ------------------------------------------------------------------

    async def enable_wake_word_mode(self, callback: WakeWordCallback | None = None) -> bool:
        """Arm the background wake word loop and announce it."""
        if not self.recognizer.is_available():
            self._set_error(ERROR_MESSAGES[ErrorKind.NOT_AVAILABLE])
            return False

        access = self.check_voice_access()
        if not access.allowed:
            return False

        self._wake_callback = callback
        self.session.wake_word_mode = True

        started = self.recognizer.start_wake_word_listening(self.config.recognition.language)
        if not started:
            self.session.wake_word_mode = False
            self._wake_callback = None
            self._set_error("Failed to start wake word listening")
            return False

        self.session.wake_word_listening = True
        self._save_wake_word_mode(True)
        logger.info("Wake word mode enabled")
        await self._speak(self.speaker.speak_activation())
        return True

    async def disable_wake_word_mode(self) -> None:
        self._wake_callback = None
        was_enabled = self.session.wake_word_mode
        self.session.wake_word_mode = False
        self._stop_wake_loop()
        if was_enabled:
            self._save_wake_word_mode(False)
            logger.info("Wake word mode disabled")

    async def toggle_wake_word_mode(self, callback: WakeWordCallback | None = None) -> bool:
        if self.session.wake_word_mode:
            await self.disable_wake_word_mode()
            return False
        return await self.enable_wake_word_mode(callback)

    def _stop_wake_loop(self) -> None:
        self.session.wake_word_listening = False
        self.recognizer.stop_wake_word_listening()

    def _save_wake_word_mode(self, enabled: bool) -> None:
        if self.preferences is None:
            return
        result = self.preferences.set_wake_word_mode(enabled)
        if not result["success"]:
            logger.warning("Could not save wake word mode: %s", result["error"])

    # ------------------------------------------------------------------
    # App lifecycle
    # ------------------------------------------------------------------

    def handle_app_state(self, next_state: AppState | str) -> None:
        """Silence everything in the background; re-arm hands-free on return."""
        next_state = AppState(next_state)
        previous = self._app_state
        self._app_state = next_state

        if previous == AppState.ACTIVE and next_state != AppState.ACTIVE:
            logger.info("App backgrounded; stopping voice")
            self._stop_wake_loop()
            self.recognizer.stop()
            self.speaker.stop()
            self.session.is_speaking = False
            if self.session.state in (VoiceState.LISTENING, VoiceState.PROCESSING, VoiceState.SPEAKING):
                self._transition(VoiceState.IDLE)

        elif previous != AppState.ACTIVE and next_state == AppState.ACTIVE:
            if self.session.wake_word_mode:
                started = self.recognizer.start_wake_word_listening(self.config.recognition.language)
                self.session.wake_word_listening = started
                logger.info("App foregrounded; wake word loop %s", "re-armed" if started else "failed")

    # ------------------------------------------------------------------
    # Speech output
    # ------------------------------------------------------------------

    async def speak_text(self, text: str, interrupt: bool = True) -> None:
        if interrupt:
            await self._speak(self.speaker.speak_with_interrupt(text))
        else:
            await self._speak(self.speaker.speak(text))

    async def speak_confirmation(self, action: str) -> str | None:
        return await self._speak(self.speaker.speak_confirmation(action))

    def announce_timer_done(self, timer: CookingTimer) -> None:
        """Timer completion hook: speak the finished timer's name."""
        self._spawn(self.speak_text(format_timer_done_speech(timer.name)))

    async def _speak(self, speech: Awaitable[Any]) -> Any:
        if self.session.state in (VoiceState.IDLE, VoiceState.PROCESSING):
            self._transition(VoiceState.SPEAKING)
        self.session.is_speaking = True
        try:
            return await speech
        finally:
            self.session.is_speaking = False
            if self.session.state == VoiceState.SPEAKING:
                self._transition(VoiceState.IDLE)

    # ------------------------------------------------------------------
    # Recognition listener
    # ------------------------------------------------------------------

    def on_speech_start(self) -> None:
        self.session.transcript = ""
        self._transition(VoiceState.LISTENING)

    def on_speech_end(self) -> None:
        if self.session.state == VoiceState.LISTENING:
            self._transition(VoiceState.IDLE)

    def on_partial_results(self, results: list[str]) -> None:
        self.session.transcript = results[0] if results else ""

    def on_results(self, results: list[str]) -> None:
        text = results[0] if results else ""
        self.session.transcript = text
        if not text.strip():
            if self.session.state == VoiceState.LISTENING:
                self._transition(VoiceState.IDLE)
            return
        self._transition(VoiceState.PROCESSING)
        self._spawn(self._handle_transcript(text))

    def on_error(self, error: VoiceError) -> None:
        self.session.wake_word_listening = self.recognizer.wake_word_active
        self._set_error(ERROR_MESSAGES.get(error.kind, error.message))

    def on_wake_word(self, command: str) -> None:
        self.session.wake_word_listening = False
        buzz(self.haptics, self.config.haptics.wake_word_ms)
        self._spawn(self._handle_wake_word(command))

    # ------------------------------------------------------------------
    # Command handling
    # ------------------------------------------------------------------

    async def _handle_wake_word(self, command: str) -> None:
        await self._speak(self.speaker.speak_greeting())

        if command.strip():
            self._transition(VoiceState.PROCESSING)
            await self._handle_transcript(command)
        else:
            self._begin_capture()

        self.session.wake_word_listening = self.recognizer.wake_word_active
        if self._wake_callback is not None:
            try:
                self._wake_callback(command)
            except Exception as e:
                logger.warning("Wake word callback failed: %s", e, exc_info=True)

    async def _handle_transcript(self, text: str) -> CommandResult | None:
        command = parse(text)

        access = self.check_voice_access()
        if not access.allowed:
            logger.info("Voice command dropped: daily voice quota used")
            if self.session.state == VoiceState.PROCESSING:
                self._transition(VoiceState.IDLE)
            return None

        self.session.last_command = command
        result = None
        if self.on_command is not None:
            result = self.on_command(command)
            if inspect.isawaitable(result):
                result = await result

        handled = result is None or result.success
        if handled and is_valid_command(command, self.config.commands.min_confidence):
            self.record_voice_usage()

        if self.session.state == VoiceState.PROCESSING:
            self._transition(VoiceState.IDLE)
        return result

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            logger.warning("No running event loop; voice event dropped")
            return
        task = loop.create_task(self._guarded(coro))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _guarded(self, coro: Coroutine[Any, Any, Any]) -> None:
        try:
            await coro
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception(f"Voice command handling failed: {e}")
            self._set_error("Something went wrong. Try again?")

    async def settle(self) -> None:
        """Wait until every in-flight event handler has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Stop listening and speaking and release the recognizer."""
        if self._closed:
            return
        self._closed = True
        self._wake_callback = None
        for task in list(self._tasks):
            task.cancel()
        self._stop_wake_loop()
        self.recognizer.cancel()
        self.speaker.stop()
        self.recognizer.destroy()
        self.session.is_speaking = False
        self._transition(VoiceState.IDLE)
