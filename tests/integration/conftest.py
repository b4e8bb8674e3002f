"""
Integration test fixtures for SousChef.

Provides a cooking session wired the way the ``listen`` command wires it:
- Text speech engine feeding a real recognizer and voice session
- Cooking command router with timers on the virtual clock
- Feature gate over a temporary sqlite store
"""

import random

import pytest

from souschef.config_models import load_subscription_config, load_voice_config
from souschef.subscription.gate import FeatureGate
from souschef.subscription.policy import TierPolicy
from souschef.subscription.usage import UsageStore
from souschef.voice.models import Ingredient
from souschef.voice.parser.command_router import CookingCommandRouter
from souschef.voice.parser.wake_word import WakeWordDetector
from souschef.voice.preferences import VoicePreferences
from souschef.voice.recognition import TextInputEngine, create_recognizer
from souschef.voice.session import VoiceSessionController
from souschef.voice.speech import SilentSynthesizer, Speaker
from souschef.voice.timers import TimerManager
from tests.conftest import ARGS_DIR, FakeHaptics


# ─────────────────────────────────────────────────────────────────────────────
# Recipe
# ─────────────────────────────────────────────────────────────────────────────

PANCAKE_STEPS = [
    "Whisk the flour, sugar and baking powder.",
    "Beat in the milk and egg until smooth.",
    "Rest the batter.",
    "Cook ladlefuls on a hot griddle until golden.",
]

PANCAKE_INGREDIENTS = [
    Ingredient("flour", 1.5, "cups"),
    Ingredient("milk", 1, "cup"),
    Ingredient("egg", 1),
    Ingredient("maple syrup", optional=True),
]


async def _no_sleep(_seconds):
    return None


class CookingHarness:
    """One cooking screen: controller, router, timers and the text engine."""

    def __init__(self, kv_store, scheduler, clock, tier="free"):
        voice_config = load_voice_config(ARGS_DIR)
        subscription_config = load_subscription_config(ARGS_DIR)

        self.tier = tier
        self.scheduler = scheduler
        self.engine = TextInputEngine()
        self.synthesizer = SilentSynthesizer()
        self.haptics = FakeHaptics()
        self.steps_seen = []
        self.substitutions = []
        self.gate = FeatureGate(
            TierPolicy(subscription_config),
            UsageStore(kv_store, key=subscription_config.usage_key, today_fn=clock),
        )
        self.preferences = VoicePreferences(kv_store)

        recognizer = create_recognizer(
            self.engine,
            scheduler,
            WakeWordDetector.from_config(voice_config.wake_word),
            voice_config.recognition,
        )
        self.controller = VoiceSessionController(
            recognizer,
            speaker=Speaker(
                self.synthesizer,
                voice_config.tts,
                voice_config.wake_word,
                rng=random.Random(11),
                sleep=_no_sleep,
            ),
            gate=self.gate,
            tier_provider=lambda: self.tier,
            preferences=self.preferences,
            haptics=self.haptics,
            config=voice_config,
        )
        self.timers = TimerManager(
            scheduler=scheduler,
            haptics=self.haptics,
            on_complete=self.controller.announce_timer_done,
            haptics_config=voice_config.haptics,
        )
        self.router = CookingCommandRouter.for_controller(
            self.controller,
            PANCAKE_STEPS,
            PANCAKE_INGREDIENTS,
            timers=self.timers,
            on_step_change=self.steps_seen.append,
            on_substitute=self.substitutions.append,
        )

    @property
    def spoken(self):
        return self.synthesizer.spoken

    async def say(self, text):
        """Tap the mic if needed, then speak ``text``. False if the mic stayed closed."""
        if not self.engine.is_recognizing() and not self.controller.session.wake_word_mode:
            if not await self.controller.start_listening():
                return False
        fed = self.engine.feed(text)
        await self.controller.settle()
        return fed

    async def say_hands_free(self, text):
        """Speak into the wake word loop, letting it restart first if needed."""
        if not self.engine.is_recognizing():
            self.scheduler.advance(1.0)
        fed = self.engine.feed(text)
        await self.controller.settle()
        return fed

    def close(self):
        self.timers.close()
        self.controller.close()


@pytest.fixture
def cooking(kv_store, scheduler, clock):
    harness = CookingHarness(kv_store, scheduler, clock)
    yield harness
    harness.close()
