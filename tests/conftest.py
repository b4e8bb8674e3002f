"""Shared test fixtures for SousChef tests.

This module provides common fixtures used across all test modules:
- Database isolation with temporary sqlite files
- A virtual clock for timers and wake word restarts
- Fake speech engine, synthesizer and haptics
- A fully wired voice session controller

Usage:
    def test_something(kv_store, scheduler):
        # kv_store writes to a temp file; scheduler only moves on advance()
        ...
"""

import random
from collections.abc import Generator
from datetime import date
from pathlib import Path

import pytest

from souschef.config_models import SubscriptionConfig, VoiceConfig
from souschef.scheduling import ManualScheduler
from souschef.storage import KeyValueStore
from souschef.subscription.gate import FeatureGate
from souschef.subscription.policy import TierPolicy
from souschef.subscription.usage import UsageStore
from souschef.voice.parser.wake_word import WakeWordDetector
from souschef.voice.preferences import VoicePreferences
from souschef.voice.recognition.adapter import NativeRecognizer
from souschef.voice.session import VoiceSessionController
from souschef.voice.speech import SilentSynthesizer, Speaker


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent
ARGS_DIR = PROJECT_ROOT / "args"


# ─────────────────────────────────────────────────────────────────────────────
# Fakes
# ─────────────────────────────────────────────────────────────────────────────


class FakeSpeechEngine:
    """Scriptable SpeechEngine: tests push events with the emit_* helpers."""

    def __init__(self, available: bool = True):
        self.available = available
        self.fail_start = False
        self.recognizing = False
        self.callbacks = None
        self.started_locales: list[str] = []
        self.stop_calls = 0
        self.cancel_calls = 0
        self.destroyed = False

    # SpeechEngine protocol

    def is_available(self) -> bool:
        return self.available

    def set_callbacks(self, callbacks) -> None:
        self.callbacks = callbacks

    def start(self, locale: str) -> None:
        if self.fail_start:
            raise RuntimeError("native start failed")
        self.recognizing = True
        self.started_locales.append(locale)

    def stop(self) -> None:
        self.stop_calls += 1
        self.recognizing = False

    def cancel(self) -> None:
        self.cancel_calls += 1
        self.recognizing = False

    def is_recognizing(self) -> bool:
        return self.recognizing

    def destroy(self) -> None:
        self.destroyed = True

    # Event helpers

    @property
    def start_count(self) -> int:
        return len(self.started_locales)

    def emit_start(self) -> None:
        self.callbacks.on_speech_start()

    def emit_partial(self, text: str) -> None:
        self.callbacks.on_partial_results([text])

    def emit_results(self, text: str) -> None:
        self.callbacks.on_results([text])

    def emit_end(self) -> None:
        self.recognizing = False
        self.callbacks.on_speech_end()

    def emit_error(self, code: str, message: str = "engine error") -> None:
        self.recognizing = False
        self.callbacks.on_error(code, message)

    def utter(self, text: str) -> None:
        """One complete utterance: start, partial, final, end."""
        self.emit_start()
        self.emit_partial(text)
        self.emit_results(text)
        self.emit_end()


class TimedSynthesizer(SilentSynthesizer):
    """Synthesizer whose playback moves the virtual clock forward."""

    def __init__(self, scheduler: ManualScheduler, seconds: float = 1.0):
        super().__init__()
        self.scheduler = scheduler
        self.seconds = seconds

    async def speak(self, text, options) -> None:
        await super().speak(text, options)
        self.scheduler.advance(self.seconds)


class FakeHaptics:
    def __init__(self):
        self.patterns: list[list[int]] = []

    def vibrate(self, pattern_ms: list[int]) -> None:
        self.patterns.append(list(pattern_ms))


class RecordingListener:
    """RecognitionListener that records every event it receives."""

    def __init__(self):
        self.events: list[tuple] = []

    def on_speech_start(self):
        self.events.append(("start",))

    def on_speech_end(self):
        self.events.append(("end",))

    def on_partial_results(self, results):
        self.events.append(("partial", results))

    def on_results(self, results):
        self.events.append(("results", results))

    def on_error(self, error):
        self.events.append(("error", error))

    def on_wake_word(self, command):
        self.events.append(("wake", command))

    def names(self) -> list[str]:
        return [e[0] for e in self.events]


class FakeClock:
    """Mutable 'today' for usage rollover tests."""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today


async def _no_sleep(_seconds: float) -> None:
    return None


# ─────────────────────────────────────────────────────────────────────────────
# Database Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def temp_db(tmp_path: Path) -> Generator[Path, None, None]:
    """Path to a temporary sqlite file, removed with tmp_path."""
    yield tmp_path / "souschef-test.db"


@pytest.fixture
def kv_store(temp_db: Path) -> KeyValueStore:
    return KeyValueStore(temp_db)


# ─────────────────────────────────────────────────────────────────────────────
# Subscription Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(date(2026, 3, 14))


@pytest.fixture
def usage_store(kv_store: KeyValueStore, clock: FakeClock) -> UsageStore:
    return UsageStore(kv_store, today_fn=clock)


@pytest.fixture
def policy() -> TierPolicy:
    return TierPolicy(SubscriptionConfig())


@pytest.fixture
def gate(policy: TierPolicy, usage_store: UsageStore) -> FeatureGate:
    return FeatureGate(policy, usage_store)


# ─────────────────────────────────────────────────────────────────────────────
# Voice Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def voice_config() -> VoiceConfig:
    return VoiceConfig()


@pytest.fixture
def engine() -> FakeSpeechEngine:
    return FakeSpeechEngine()


@pytest.fixture
def haptics() -> FakeHaptics:
    return FakeHaptics()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def recognizer(engine, scheduler, voice_config) -> NativeRecognizer:
    return NativeRecognizer(
        engine,
        scheduler=scheduler,
        detector=WakeWordDetector.from_config(voice_config.wake_word),
        config=voice_config.recognition,
    )


@pytest.fixture
def synthesizer() -> SilentSynthesizer:
    return SilentSynthesizer()


@pytest.fixture
def speaker(synthesizer, voice_config) -> Speaker:
    return Speaker(
        synthesizer,
        config=voice_config.tts,
        wake_config=voice_config.wake_word,
        rng=random.Random(7),
        sleep=_no_sleep,
    )


@pytest.fixture
def preferences(kv_store) -> VoicePreferences:
    return VoicePreferences(kv_store)


@pytest.fixture
def tier():
    """Mutable tier holder; tests reassign tier["value"] to upgrade mid-session."""
    return {"value": "free"}


@pytest.fixture
def controller(recognizer, speaker, gate, tier, preferences, haptics, voice_config):
    controller = VoiceSessionController(
        recognizer,
        speaker=speaker,
        gate=gate,
        tier_provider=lambda: tier["value"],
        preferences=preferences,
        haptics=haptics,
        config=voice_config,
    )
    yield controller
    controller.close()
