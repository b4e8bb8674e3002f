"""
Tier policy: daily limits per (tier, feature).

A limit is a non-negative count or "unlimited". A limit of 0 means the
feature is locked for that tier.

Usage:
    from souschef.subscription.policy import TierPolicy

    policy = TierPolicy()
    policy.limit_for("free", "voice_commands")     # 3
    policy.upgrade_for("free", "voice_commands")   # SubscriptionTier.PREMIUM
"""

from __future__ import annotations

from souschef.config_models import UNLIMITED, SubscriptionConfig, load_subscription_config
from souschef.subscription.models import (
    TIER_ORDER,
    Feature,
    Limit,
    SubscriptionTier,
)


def _exceeds(candidate: Limit, current: Limit) -> bool:
    """True if ``candidate`` grants strictly more than ``current``."""
    if current == UNLIMITED:
        return False
    if candidate == UNLIMITED:
        return True
    return candidate > current


class TierPolicy:
    """Pure lookup over the configured tier limits table."""

    def __init__(self, config: SubscriptionConfig | None = None):
        config = config or SubscriptionConfig()
        self._limits: dict[SubscriptionTier, dict[Feature, Limit]] = {}
        for tier in TIER_ORDER:
            tier_config = config.tiers.get(tier.value)
            self._limits[tier] = {
                feature: getattr(tier_config, feature.value) if tier_config else 0
                for feature in Feature
            }

    @classmethod
    def from_config_file(cls) -> TierPolicy:
        return cls(load_subscription_config())

    def limit_for(self, tier: SubscriptionTier | str, feature: Feature | str) -> Limit:
        return self._limits[SubscriptionTier.parse(tier)][Feature.parse(feature)]

    def is_unlimited(self, tier: SubscriptionTier | str, feature: Feature | str) -> bool:
        return self.limit_for(tier, feature) == UNLIMITED

    def is_locked(self, tier: SubscriptionTier | str, feature: Feature | str) -> bool:
        return self.limit_for(tier, feature) == 0

    def upgrade_for(
        self,
        tier: SubscriptionTier | str,
        feature: Feature | str,
    ) -> SubscriptionTier | None:
        """The lowest tier above ``tier`` granting more of ``feature``, if any."""
        tier = SubscriptionTier.parse(tier)
        feature = Feature.parse(feature)
        current = self.limit_for(tier, feature)
        for candidate in TIER_ORDER[TIER_ORDER.index(tier) + 1:]:
            if _exceeds(self.limit_for(candidate, feature), current):
                return candidate
        return None

    def table(self) -> dict[str, dict[str, Limit]]:
        return {
            tier.value: {feature.value: limit for feature, limit in limits.items()}
            for tier, limits in self._limits.items()
        }


# Default policy built from the built-in limits
_default_policy: TierPolicy | None = None


def limit_for(tier: SubscriptionTier | str, feature: Feature | str) -> Limit:
    """Look up a limit in the default tier table."""
    global _default_policy
    if _default_policy is None:
        _default_policy = TierPolicy()
    return _default_policy.limit_for(tier, feature)
