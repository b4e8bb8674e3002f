"""
Feature gate: combines the tier policy with today's usage.

``check()`` never counts a use. Callers record only after the gated action
actually succeeded, so a user who backs out after a check keeps their quota.

Usage:
    from souschef.subscription.gate import FeatureGate

    gate = FeatureGate()
    result = gate.check("free", "voice_commands")
    if result.allowed:
        run_voice_command()
        gate.record("voice_commands")
"""

from __future__ import annotations

import logging

from souschef.config_models import UNLIMITED
from souschef.subscription.models import (
    DailyUsage,
    DenialReason,
    Feature,
    FeatureCheckResult,
    Limit,
    SubscriptionTier,
)
from souschef.subscription.policy import TierPolicy
from souschef.subscription.usage import UsageStore

logger = logging.getLogger(__name__)


class FeatureGate:
    """Allow/deny decisions for quota-limited features."""

    def __init__(self, policy: TierPolicy | None = None, usage: UsageStore | None = None):
        self.policy = policy or TierPolicy()
        self.usage = usage or UsageStore()

    def check(self, tier: SubscriptionTier | str, feature: Feature | str) -> FeatureCheckResult:
        """Decide whether ``feature`` may be used right now at ``tier``.

        The tier's limit is looked up on every call, so an upgrade mid-session
        takes effect on the next check.
        """
        tier = SubscriptionTier.parse(tier)
        feature = Feature.parse(feature)
        limit = self.policy.limit_for(tier, feature)
        current = self.usage.today().count_for(feature)

        if limit == UNLIMITED:
            return FeatureCheckResult(allowed=True, current_usage=current, limit=UNLIMITED)

        if current < limit:
            return FeatureCheckResult(allowed=True, current_usage=current, limit=limit)

        reason = DenialReason.FEATURE_LOCKED if limit == 0 else DenialReason.LIMIT_REACHED
        upgrade = self.policy.upgrade_for(tier, feature)
        logger.info(
            "Feature denied",
            extra={
                "tier": tier.value,
                "feature": feature.value,
                "reason": reason.value,
                "current_usage": current,
                "limit": limit,
            },
        )
        return FeatureCheckResult(
            allowed=False,
            current_usage=current,
            limit=limit,
            reason=reason,
            upgrade_required=upgrade,
        )

    def record(self, feature: Feature | str) -> DailyUsage:
        """Count one completed use of ``feature``."""
        return self.usage.increment(feature)

    def remaining(self, tier: SubscriptionTier | str, feature: Feature | str) -> Limit:
        """Uses left today, or "unlimited"."""
        limit = self.policy.limit_for(tier, feature)
        if limit == UNLIMITED:
            return UNLIMITED
        return max(0, limit - self.usage.today().count_for(Feature.parse(feature)))

    def usage_summary(self, tier: SubscriptionTier | str) -> dict[str, dict[str, Limit]]:
        """Per-feature used/limit/remaining for display."""
        usage = self.usage.today()
        summary: dict[str, dict[str, Limit]] = {}
        for feature in Feature:
            limit = self.policy.limit_for(tier, feature)
            used = usage.count_for(feature)
            summary[feature.value] = {
                "used": used,
                "limit": limit,
                "remaining": UNLIMITED if limit == UNLIMITED else max(0, limit - used),
            }
        return summary


def format_limit(limit: Limit) -> str:
    """Display form of a limit ("Unlimited" or the number)."""
    if limit == UNLIMITED:
        return "Unlimited"
    return str(limit)
