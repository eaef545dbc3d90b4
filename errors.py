"""Shared error codes and user-facing messages."""

from __future__ import annotations

PERMISSION_DENIED = "PERMISSION_DENIED"
RECOGNITION_ERROR = "RECOGNITION_ERROR"
EMPTY_RESULT = "EMPTY_RESULT"

# Speech service failure codes. Logged only; the UI reports all of them
# as RECOGNITION_ERROR.
NETWORK_ERROR = "NETWORK_ERROR"
AUTH_FAILED = "AUTH_FAILED"
ASR_PROTOCOL_ERROR = "ASR_PROTOCOL_ERROR"
AUDIO_ERROR = "AUDIO_ERROR"

ERROR_MESSAGES = {
    PERMISSION_DENIED: "Microphone access is required.",
    RECOGNITION_ERROR: "Speech could not be recognized.",
    EMPTY_RESULT: "No speech detected.",
    NETWORK_ERROR: "Network failed.",
    AUTH_FAILED: "API key is invalid.",
    ASR_PROTOCOL_ERROR: "ASR response format is invalid.",
    AUDIO_ERROR: "Audio capture failed.",
}
