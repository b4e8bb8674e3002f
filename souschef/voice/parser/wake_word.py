"""Wake word detection for hands-free cooking.

Speech-to-text engines regularly mangle the invented "SousChef" phrase
("sue chef", "sous chief"), so several phonetic variants are matched
instead of one exact string.
"""

from __future__ import annotations

import re
from typing import Iterable

from souschef.config_models import WakeWordConfig

# Separators left behind once the wake phrase is cut out ("SousChef, next")
_EDGE_PUNCTUATION = " \t\n,.;:!?-"


class WakeWordDetector:
    """Matches wake phrase variants and splits off the trailing command."""

    def __init__(self, patterns: Iterable[str] | None = None):
        if patterns is None:
            patterns = WakeWordConfig().patterns
        self._patterns = [re.compile(p, re.IGNORECASE) for p in patterns]
        if not self._patterns:
            raise ValueError("At least one wake word pattern is required")

    @classmethod
    def from_config(cls, config: WakeWordConfig) -> WakeWordDetector:
        return cls(config.patterns)

    @property
    def patterns(self) -> list[re.Pattern]:
        return list(self._patterns)

    def matches(self, transcript: str) -> bool:
        """True if any wake phrase variant appears in the transcript."""
        if not transcript:
            return False
        return any(p.search(transcript) for p in self._patterns)

    def extract_command(self, transcript: str) -> str:
        """Remove every wake phrase occurrence and return what is left.

        Returns an empty string when only the wake word was spoken.
        """
        command = transcript or ""
        for pattern in self._patterns:
            command = pattern.sub(" ", command)
        command = re.sub(r"\s+", " ", command)
        return command.strip(_EDGE_PUNCTUATION)


# Module-level default detector
_detector: WakeWordDetector | None = None


def get_wake_word_detector() -> WakeWordDetector:
    """Get or create the default WakeWordDetector instance."""
    global _detector
    if _detector is None:
        _detector = WakeWordDetector()
    return _detector
