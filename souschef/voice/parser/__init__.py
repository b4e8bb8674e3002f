"""Voice command parsing: wake word detection, command parsing, routing."""

from souschef.voice.parser.command_parser import is_valid_command, parse
from souschef.voice.parser.command_router import CookingCommandRouter
from souschef.voice.parser.entity_extractor import extract_ingredient, extract_minutes
from souschef.voice.parser.wake_word import WakeWordDetector, get_wake_word_detector

__all__ = [
    "CookingCommandRouter",
    "WakeWordDetector",
    "extract_ingredient",
    "extract_minutes",
    "get_wake_word_detector",
    "is_valid_command",
    "parse",
]
