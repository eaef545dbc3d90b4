"""Static user-facing strings.

Each entry is resolved through Qt's translation layer when a
``QCoreApplication`` is available, so a host-installed translator can
localize them. Without Qt the English source text is returned.
"""

from __future__ import annotations

try:
    from PySide6.QtCore import QCoreApplication
except Exception:  # pragma: no cover
    QCoreApplication = None  # type: ignore

LISTENING = "listening"
ERROR_RECOGNIZING = "error_recognizing"
PERMISSION_DENIED = "permission_denied"
BUTTON_TEXT_LISTENING = "button_text_listening"
START_BUTTON_TEXT = "start_button_text"

_CONTEXT = "HoldToTalk"

STRINGS = {
    LISTENING: "Listening...",
    ERROR_RECOGNIZING: "Error recognizing speech",
    PERMISSION_DENIED: "Permission denied to record audio",
    BUTTON_TEXT_LISTENING: "Listening...",
    START_BUTTON_TEXT: "Hold to Speak",
}


def get_string(name: str) -> str:
    source = STRINGS[name]
    if QCoreApplication is None or QCoreApplication.instance() is None:
        return source
    return QCoreApplication.translate(_CONTEXT, source)
