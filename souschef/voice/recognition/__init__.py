"""Speech recognition adapters."""

from souschef.voice.recognition.adapter import (
    CaptureMode,
    InertRecognizer,
    NativeRecognizer,
    create_recognizer,
)
from souschef.voice.recognition.base import (
    ERROR_MESSAGES,
    EngineCallbacks,
    RecognitionListener,
    SpeechEngine,
    SpeechRecognitionAdapter,
    map_engine_error,
)
from souschef.voice.recognition.text_engine import TextInputEngine

__all__ = [
    "CaptureMode",
    "ERROR_MESSAGES",
    "EngineCallbacks",
    "InertRecognizer",
    "NativeRecognizer",
    "RecognitionListener",
    "SpeechEngine",
    "SpeechRecognitionAdapter",
    "TextInputEngine",
    "create_recognizer",
    "map_engine_error",
]
