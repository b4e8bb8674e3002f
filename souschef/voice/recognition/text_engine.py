"""Typed-text speech engine.

Stands in for a microphone on hosts without one (the ``souschef listen``
command, tests). Each fed line is delivered as one complete utterance.
"""

from __future__ import annotations

import logging

from souschef.voice.recognition.base import EngineCallbacks

logger = logging.getLogger(__name__)


class TextInputEngine:
    """SpeechEngine that "hears" whatever text it is fed."""

    def __init__(self, available: bool = True):
        self._available = available
        self._callbacks: EngineCallbacks | None = None
        self._recognizing = False
        self.locale: str | None = None
        self.start_count = 0

    def is_available(self) -> bool:
        return self._available

    def set_callbacks(self, callbacks: EngineCallbacks | None) -> None:
        self._callbacks = callbacks

    def start(self, locale: str) -> None:
        if not self._available:
            raise RuntimeError("Text input engine is disabled")
        self.locale = locale
        self._recognizing = True
        self.start_count += 1

    def stop(self) -> None:
        self._finish()

    def cancel(self) -> None:
        self._finish()

    def is_recognizing(self) -> bool:
        return self._recognizing

    def destroy(self) -> None:
        self._recognizing = False
        self._callbacks = None

    def feed(self, text: str) -> bool:
        """Deliver ``text`` as one utterance. False if not capturing."""
        if not self._recognizing or self._callbacks is None:
            logger.debug("Text ignored; engine not capturing")
            return False

        callbacks = self._callbacks
        callbacks.on_speech_start()
        if text.strip():
            callbacks.on_partial_results([text])
            callbacks.on_results([text])
            self._recognizing = False
            callbacks.on_speech_end()
        else:
            self._recognizing = False
            callbacks.on_error("7", "No speech input")
        return True

    def _finish(self) -> None:
        if not self._recognizing:
            return
        self._recognizing = False
        if self._callbacks:
            self._callbacks.on_speech_end()
