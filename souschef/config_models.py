from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from souschef import ARGS_DIR

logger = logging.getLogger(__name__)

UNLIMITED = "unlimited"

# A daily quota: a non-negative count, or the literal "unlimited"
LimitValue = Union[Literal["unlimited"], int]


# =============================================================================
# VoiceConfig (args/voice.yaml)
# =============================================================================

class RecognitionConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    language: str = Field(default="en-US")
    restart_delay_seconds: float = Field(default=0.5, ge=0)
    restart_retry_delay_seconds: float = Field(default=2.0, ge=0)


class WakeWordConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    phrase: str = Field(default="SousChef")
    patterns: list[str] = Field(default_factory=lambda: [
        r"\b(?:(?:hey|okay|ok)\s+)?sous[\s-]*chef\b",
        r"\b(?:(?:hey|okay|ok)\s+)?sue[\s-]*chef\b",
        r"\b(?:(?:hey|okay|ok)\s+)?sous[\s-]*chief\b",
        r"\b(?:(?:hey|okay|ok)\s+)?su[\s-]*chef\b",
    ])
    greetings: list[str] = Field(default_factory=lambda: [
        "I'm listening!",
        "Yes, chef?",
        "How can I help?",
        "Ready!",
        "What do you need?",
    ])
    activation_phrases: list[str] = Field(default_factory=lambda: [
        "Hands-free mode activated. Say 'SousChef' followed by your command.",
        "Hands-free mode is on. Just say 'SousChef' when you need me.",
        "I'm standing by. Say 'SousChef' and tell me what to do.",
    ])


class SpeechStyleConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    pitch: float = Field(default=1.0, gt=0)
    rate: float = Field(default=0.9, gt=0)


def _default_styles() -> dict[str, SpeechStyleConfig]:
    return {
        "friendly": SpeechStyleConfig(pitch=1.05, rate=0.95),
        "professional": SpeechStyleConfig(pitch=1.0, rate=0.9),
        "excited": SpeechStyleConfig(pitch=1.15, rate=1.05),
        "calm": SpeechStyleConfig(pitch=0.95, rate=0.85),
    }


class TTSConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    language: str = Field(default="en-US")
    pitch: float = Field(default=1.0, gt=0)
    rate: float = Field(default=0.9, gt=0)
    interrupt_delay_seconds: float = Field(default=0.1, ge=0)
    styles: dict[str, SpeechStyleConfig] = Field(default_factory=_default_styles)
    preferred_voices: dict[str, list[str]] = Field(default_factory=lambda: {
        "ios": [
            "com.apple.voice.premium.en-US.Ava",
            "com.apple.voice.premium.en-US.Zoe",
            "com.apple.voice.premium.en-US.Samantha",
            "com.apple.voice.enhanced.en-US.Ava",
            "com.apple.voice.enhanced.en-US.Samantha",
            "com.apple.ttsbundle.Samantha-compact",
            "com.apple.voice.compact.en-US.Samantha",
        ],
        "android": [
            "en-us-x-tpf-local",
            "en-us-x-tpc-local",
            "en-us-x-sfg-local",
            "en-US-language",
        ],
    })
    confirmations: dict[str, list[str]] = Field(default_factory=lambda: {
        "next": ["Moving on!", "Next step!", "Got it!"],
        "back": ["Going back!", "Previous step!", "Sure!"],
        "timer": ["Timer set!", "Starting timer!", "You got it!"],
        # Reading speaks the content itself
        "read": [],
    })


class HapticsConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    listen_start_ms: list[int] = Field(default_factory=lambda: [50])
    wake_word_ms: list[int] = Field(default_factory=lambda: [100])
    timer_done_ms: list[int] = Field(default_factory=lambda: [0, 500, 200, 500, 200, 500])


class CommandsConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    min_confidence: int = Field(default=50, ge=0, le=100)


class VoiceConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    recognition: RecognitionConfig = Field(default_factory=RecognitionConfig)
    wake_word: WakeWordConfig = Field(default_factory=WakeWordConfig)
    tts: TTSConfig = Field(default_factory=TTSConfig)
    haptics: HapticsConfig = Field(default_factory=HapticsConfig)
    commands: CommandsConfig = Field(default_factory=CommandsConfig)


# =============================================================================
# SubscriptionConfig (args/subscription.yaml)
# =============================================================================

class TierLimitsConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    ai_substitution: LimitValue = Field(default=0)
    portion_analysis: LimitValue = Field(default=0)
    voice_commands: LimitValue = Field(default=0)
    meal_plan_generation: LimitValue = Field(default=0)

    @field_validator(
        "ai_substitution", "portion_analysis", "voice_commands", "meal_plan_generation",
    )
    @classmethod
    def _non_negative(cls, value: LimitValue) -> LimitValue:
        if value != UNLIMITED and value < 0:
            raise ValueError("daily limit must be >= 0 or 'unlimited'")
        return value


def _default_tiers() -> dict[str, TierLimitsConfig]:
    # Free is generous enough to try the cooking loop; pro lifts every cap
    return {
        "free": TierLimitsConfig(
            ai_substitution=3,
            portion_analysis=0,
            voice_commands=3,
            meal_plan_generation=0,
        ),
        "premium": TierLimitsConfig(
            ai_substitution=15,
            portion_analysis=10,
            voice_commands=15,
            meal_plan_generation=0,
        ),
        "pro": TierLimitsConfig(
            ai_substitution=UNLIMITED,
            portion_analysis=UNLIMITED,
            voice_commands=UNLIMITED,
            meal_plan_generation=UNLIMITED,
        ),
    }


class SubscriptionConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    usage_key: str = Field(default="souschef_daily_usage")
    tiers: dict[str, TierLimitsConfig] = Field(default_factory=_default_tiers)


# =============================================================================
# Loader
# =============================================================================

_CONFIG_MAP: dict[str, type[BaseModel]] = {
    "voice": VoiceConfig,
    "subscription": SubscriptionConfig,
}


def load_and_validate(
    config_name: str,
    model_class: type[BaseModel] | None = None,
    args_dir: Path | None = None,
) -> BaseModel:
    if model_class is None:
        model_class = _CONFIG_MAP.get(config_name)
        if model_class is None:
            raise ValueError(f"Unknown config: {config_name}. Available: {list(_CONFIG_MAP.keys())}")

    yaml_path = (args_dir or ARGS_DIR) / f"{config_name}.yaml"

    try:
        if yaml_path.exists():
            with open(yaml_path) as f:
                raw = yaml.safe_load(f) or {}
        else:
            raw = {}

        return model_class.model_validate(raw)
    except Exception as e:
        logger.warning(f"Config validation failed for {config_name}: {e}, using defaults")
        return model_class()


def load_voice_config(args_dir: Path | None = None) -> VoiceConfig:
    return load_and_validate("voice", VoiceConfig, args_dir)  # type: ignore[return-value]


def load_subscription_config(args_dir: Path | None = None) -> SubscriptionConfig:
    return load_and_validate("subscription", SubscriptionConfig, args_dir)  # type: ignore[return-value]


__all__ = [
    "CommandsConfig",
    "HapticsConfig",
    "LimitValue",
    "RecognitionConfig",
    "SubscriptionConfig",
    "TTSConfig",
    "TierLimitsConfig",
    "UNLIMITED",
    "VoiceConfig",
    "WakeWordConfig",
    "load_and_validate",
    "load_subscription_config",
    "load_voice_config",
]
