"""Subscription-gated usage metering.

Components:
    models.py: Tiers, features, DailyUsage, FeatureCheckResult
    policy.py: TierPolicy (tier × feature → daily limit)
    usage.py: UsageStore (today's counters with date rollover)
    gate.py: FeatureGate (check / record / remaining)
"""

from souschef.subscription.gate import FeatureGate, format_limit
from souschef.subscription.models import (
    DailyUsage,
    DenialReason,
    Feature,
    FeatureCheckResult,
    SubscriptionTier,
)
from souschef.subscription.policy import TierPolicy, limit_for
from souschef.subscription.usage import UsageStore

__all__ = [
    "DailyUsage",
    "DenialReason",
    "Feature",
    "FeatureCheckResult",
    "FeatureGate",
    "SubscriptionTier",
    "TierPolicy",
    "UsageStore",
    "format_limit",
    "limit_for",
]
