"""Subscription data models: tiers, gated features, usage and gate results."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Literal, Union

from souschef.config_models import UNLIMITED

Limit = Union[int, Literal["unlimited"]]


class SubscriptionTier(str, Enum):
    """Subscription levels, lowest first."""

    FREE = "free"
    PREMIUM = "premium"
    PRO = "pro"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: SubscriptionTier | str) -> SubscriptionTier:
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"Unknown subscription tier: {value!r}. Valid: {[t.value for t in cls]}"
            ) from None


TIER_ORDER: list[SubscriptionTier] = [
    SubscriptionTier.FREE,
    SubscriptionTier.PREMIUM,
    SubscriptionTier.PRO,
]


class Feature(str, Enum):
    """AI-assisted features gated by daily quota."""

    AI_SUBSTITUTION = "ai_substitution"
    PORTION_ANALYSIS = "portion_analysis"
    VOICE = "voice_commands"
    MEAL_PLAN_GENERATION = "meal_plan_generation"

    @property
    def metered(self) -> bool:
        """Whether uses are counted per day (meal plans are gated, not counted)."""
        return self in METERED_FEATURES

    @classmethod
    def parse(cls, value: Feature | str) -> Feature:
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"Unknown feature: {value!r}. Valid: {[f.value for f in cls]}"
            ) from None


# Feature → DailyUsage counter attribute
METERED_FEATURES: dict[Feature, str] = {
    Feature.AI_SUBSTITUTION: "ai_substitutions",
    Feature.PORTION_ANALYSIS: "portion_analysis",
    Feature.VOICE: "voice_commands",
}


class DenialReason(str, Enum):
    LIMIT_REACHED = "limit_reached"
    FEATURE_LOCKED = "feature_locked"


@dataclass
class DailyUsage:
    """Per-feature counters for one local calendar day."""

    date: str
    ai_substitutions: int = 0
    portion_analysis: int = 0
    voice_commands: int = 0

    @classmethod
    def fresh(cls, day: date) -> DailyUsage:
        return cls(date=day.isoformat())

    def count_for(self, feature: Feature) -> int:
        attr = METERED_FEATURES.get(feature)
        return getattr(self, attr) if attr else 0

    def increment(self, feature: Feature) -> None:
        attr = METERED_FEATURES[feature]
        setattr(self, attr, getattr(self, attr) + 1)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "ai_substitutions": self.ai_substitutions,
            "portion_analysis": self.portion_analysis,
            "voice_commands": self.voice_commands,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DailyUsage:
        return cls(
            date=str(data["date"]),
            ai_substitutions=int(data.get("ai_substitutions", 0)),
            portion_analysis=int(data.get("portion_analysis", 0)),
            voice_commands=int(data.get("voice_commands", 0)),
        )


@dataclass
class FeatureCheckResult:
    """Allow/deny decision for one feature at one tier."""

    allowed: bool
    current_usage: int = 0
    limit: Limit = UNLIMITED
    reason: DenialReason | None = None
    upgrade_required: SubscriptionTier | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowed": self.allowed,
            "reason": self.reason.value if self.reason else None,
            "current_usage": self.current_usage,
            "limit": self.limit,
            "upgrade_required": self.upgrade_required.value if self.upgrade_required else None,
        }
