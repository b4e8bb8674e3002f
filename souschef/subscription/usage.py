"""
Daily usage counters for metered features.

The whole day's record is read, modified and rewritten on every increment.
One rollover check guards every read, so no caller sees yesterday's counts.

Usage:
    from souschef.subscription.usage import UsageStore

    store = UsageStore()
    usage = store.today()
    store.increment(Feature.VOICE)
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from souschef.storage import KeyValueStore
from souschef.subscription.models import DailyUsage, Feature

logger = logging.getLogger(__name__)

USAGE_KEY = "souschef_daily_usage"


class UsageStore:
    """Persists today's per-feature counters and resets them on a new day."""

    def __init__(
        self,
        store: KeyValueStore | None = None,
        key: str = USAGE_KEY,
        today_fn: Callable[[], date] = date.today,
    ):
        self._store = store or KeyValueStore()
        self._key = key
        self._today_fn = today_fn

    def today(self) -> DailyUsage:
        """Today's counters, resetting them if the stored day is stale."""
        today = self._today_fn().isoformat()
        data = self._store.get_json(self._key)

        if isinstance(data, dict) and data.get("date") == today:
            try:
                return DailyUsage.from_dict(data)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Resetting malformed usage record: %s", e)

        usage = DailyUsage(date=today)
        self._store.set_json(self._key, usage.to_dict())
        if data is not None:
            logger.info("Daily usage counters reset for %s", today)
        return usage

    def increment(self, feature: Feature | str) -> DailyUsage:
        """Count one use of a metered feature and persist the record."""
        feature = Feature.parse(feature)
        usage = self.today()
        if not feature.metered:
            logger.debug("Feature %s is not metered; nothing recorded", feature.value)
            return usage

        usage.increment(feature)
        self._store.set_json(self._key, usage.to_dict())
        return usage

    def reset(self) -> DailyUsage:
        """Zero today's counters."""
        usage = DailyUsage(date=self._today_fn().isoformat())
        self._store.set_json(self._key, usage.to_dict())
        return usage
