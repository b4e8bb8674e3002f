"""
Spoken and haptic feedback for cooking mode.

The Speaker adds presets on top of a SpeechSynthesizer: named styles,
greetings, confirmations, interrupting speech and preferred voice
selection. Synthesizer failures are logged and treated as "done speaking".

Usage:
    from souschef.voice.speech import Speaker, ConsoleSynthesizer

    speaker = Speaker(ConsoleSynthesizer())
    await speaker.speak_greeting()
    await speaker.speak_with_interrupt("Step 2 of 6. Whisk the eggs.")
"""

from __future__ import annotations

import asyncio
import logging
import random
import sys
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol, TextIO

from souschef.config_models import TTSConfig, WakeWordConfig

logger = logging.getLogger(__name__)


@dataclass
class VoiceInfo:
    """A TTS voice offered by the platform."""

    identifier: str
    name: str = ""
    language: str = ""
    quality: str = "Default"


@dataclass
class SpeechOptions:
    language: str = "en-US"
    pitch: float = 1.0
    rate: float = 0.9
    voice: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "language": self.language,
            "pitch": self.pitch,
            "rate": self.rate,
            "voice": self.voice,
        }


class SpeechSynthesizer(Protocol):
    """A native text-to-speech module. Any method may raise."""

    async def speak(self, text: str, options: SpeechOptions) -> None: ...

    def stop(self) -> None: ...

    def is_speaking(self) -> bool: ...

    def available_voices(self) -> list[VoiceInfo]: ...


class Haptics(Protocol):
    def vibrate(self, pattern_ms: list[int]) -> None: ...


class NoHaptics:
    """Haptics for hosts without a vibration motor."""

    def vibrate(self, pattern_ms: list[int]) -> None:
        pass


class SilentSynthesizer:
    """Synthesizer that records what it would have said."""

    def __init__(self, voices: list[VoiceInfo] | None = None):
        self.spoken: list[str] = []
        self.options: list[SpeechOptions] = []
        self.stop_count = 0
        self._voices = voices or []

    async def speak(self, text: str, options: SpeechOptions) -> None:
        self.spoken.append(text)
        self.options.append(options)

    def stop(self) -> None:
        self.stop_count += 1

    def is_speaking(self) -> bool:
        return False

    def available_voices(self) -> list[VoiceInfo]:
        return list(self._voices)


class ConsoleSynthesizer(SilentSynthesizer):
    """Synthesizer that prints speech to a text stream."""

    def __init__(self, stream: TextIO | None = None, prefix: str = "SousChef: "):
        super().__init__()
        self._stream = stream or sys.stdout
        self._prefix = prefix

    async def speak(self, text: str, options: SpeechOptions) -> None:
        await super().speak(text, options)
        print(f"{self._prefix}{text}", file=self._stream, flush=True)


def select_preferred_voice(
    voices: list[VoiceInfo],
    preferred_ids: list[str],
) -> VoiceInfo | None:
    """Pick a voice: preferred ids in order, then enhanced English, then any English."""
    for preferred in preferred_ids:
        lowered = preferred.lower()
        for voice in voices:
            if preferred in voice.identifier or (voice.name and lowered in voice.name.lower()):
                return voice

    english = [v for v in voices if v.language.lower().startswith("en")]
    for voice in english:
        if voice.quality.lower() == "enhanced":
            return voice
    return english[0] if english else None


class Speaker:
    """Speech output presets over a SpeechSynthesizer."""

    def __init__(
        self,
        synthesizer: SpeechSynthesizer | None = None,
        config: TTSConfig | None = None,
        wake_config: WakeWordConfig | None = None,
        platform: str = "ios",
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.synthesizer = synthesizer or SilentSynthesizer()
        self.config = config or TTSConfig()
        self.wake_config = wake_config or WakeWordConfig()
        self.platform = platform
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._voice: VoiceInfo | None = None
        self._voice_selected = False

    @property
    def selected_voice(self) -> VoiceInfo | None:
        return self._voice

    def select_voice(self) -> VoiceInfo | None:
        """Choose the best available voice once; later calls reuse it."""
        if self._voice_selected:
            return self._voice
        self._voice_selected = True
        try:
            voices = self.synthesizer.available_voices()
        except Exception as e:
            logger.warning("Could not list TTS voices: %s", e, exc_info=True)
            return None

        preferred = self.config.preferred_voices.get(self.platform, [])
        self._voice = select_preferred_voice(voices, preferred)
        if self._voice:
            logger.info("Selected TTS voice: %s", self._voice.name or self._voice.identifier)
        return self._voice

    def options_for(self, style: str | None = None) -> SpeechOptions:
        options = SpeechOptions(
            language=self.config.language,
            pitch=self.config.pitch,
            rate=self.config.rate,
        )
        if style:
            preset = self.config.styles.get(style)
            if preset is None:
                raise ValueError(f"Unknown speech style: {style}. Available: {list(self.config.styles)}")
            options.pitch = preset.pitch
            options.rate = preset.rate
        voice = self.select_voice()
        if voice:
            options.voice = voice.identifier
        return options

    async def speak(self, text: str, style: str | None = None) -> None:
        """Speak ``text`` and return once playback ends, stops or fails."""
        if not text:
            return
        options = self.options_for(style)
        try:
            await self.synthesizer.speak(text, options)
        except Exception as e:
            logger.warning("TTS error: %s", e, exc_info=True)

    async def speak_with_style(self, text: str, style: str = "friendly") -> None:
        await self.speak(text, style)

    async def speak_with_interrupt(self, text: str, style: str | None = None) -> None:
        """Cut off any current speech, then speak ``text``."""
        if self.is_speaking():
            self.stop()
            await self._sleep(self.config.interrupt_delay_seconds)
        await self.speak(text, style)

    async def speak_greeting(self) -> str:
        greeting = self._pick(self.wake_config.greetings)
        await self.speak_with_style(greeting, "friendly")
        return greeting

    async def speak_activation(self) -> str:
        phrase = self._pick(self.wake_config.activation_phrases)
        await self.speak_with_style(phrase, "friendly")
        return phrase

    async def speak_confirmation(self, action: str) -> str | None:
        """Short acknowledgement for ``action``; None when it has none."""
        phrases = self.config.confirmations.get(action, ["Done!"])
        phrases = [p for p in phrases if p]
        if not phrases:
            return None
        phrase = self._pick(phrases)
        await self.speak_with_style(phrase, "friendly")
        return phrase

    def stop(self) -> None:
        try:
            self.synthesizer.stop()
        except Exception as e:
            logger.warning("Error stopping TTS: %s", e, exc_info=True)

    def is_speaking(self) -> bool:
        try:
            return bool(self.synthesizer.is_speaking())
        except Exception:
            return False

    def _pick(self, phrases: list[str]) -> str:
        return self._rng.choice(phrases) if phrases else ""


def buzz(haptics: Haptics | None, pattern: list[int]) -> None:
    """Vibrate, ignoring hosts where haptics fail."""
    if haptics is None:
        return
    try:
        haptics.vibrate(pattern)
    except Exception as e:
        logger.debug("Haptics unavailable: %s", e)
