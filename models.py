"""Core data models for the app."""

from __future__ import annotations

import locale
from dataclasses import dataclass, field
from enum import Enum

MIN_FONT_SIZE = 12.0
MAX_FONT_SIZE = 60.0


class PermissionState(str, Enum):
    UNKNOWN = "UNKNOWN"
    GRANTED = "GRANTED"
    DENIED = "DENIED"


class SessionStatus(str, Enum):
    IDLE = "IDLE"
    LISTENING = "LISTENING"
    ERROR = "ERROR"


class RecognitionKind(str, Enum):
    READY = "ready"
    BEGINNING_OF_SPEECH = "beginning_of_speech"
    RMS_CHANGED = "rms_changed"
    BUFFER_RECEIVED = "buffer_received"
    END_OF_SPEECH = "end_of_speech"
    PARTIAL_RESULTS = "partial_results"
    RESULTS = "results"
    ERROR = "error"
    EVENT = "event"


TERMINAL_KINDS = (RecognitionKind.RESULTS, RecognitionKind.ERROR)


def default_language() -> str:
    """Return the process default locale, e.g. ``en_US``."""
    lang, _ = locale.getlocale()
    if not lang or lang in ("C", "POSIX"):
        return "en_US"
    return lang


@dataclass
class AudioFrame:
    pcm16_bytes: bytes
    sample_rate: int = 16000
    channels: int = 1
    timestamp_ms: int = 0


@dataclass
class RecognitionConfig:
    language_model: str = "free_form"
    language: str = field(default_factory=default_language)


@dataclass
class RecognitionEvent:
    kind: RecognitionKind
    candidates: list[str] = field(default_factory=list)
    code: str = ""
    message: str = ""
    rms_db: float = 0.0
    session_id: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.kind in TERMINAL_KINDS


@dataclass
class DisplayState:
    text: str = ""
    font_size: float = MIN_FONT_SIZE

    def set_font_size(self, size: float) -> float:
        self.font_size = min(MAX_FONT_SIZE, max(MIN_FONT_SIZE, float(size)))
        return self.font_size
