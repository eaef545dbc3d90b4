"""Microphone permission gate based on sounddevice.

Desktop platforms have no synchronous permission query, so the gate keeps
the last probe result. The probe opens and closes a short input stream on
the default device; on macOS that is what raises the system prompt.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from errors import ERROR_MESSAGES, PERMISSION_DENIED
from interfaces import PermissionCallback
from models import PermissionState

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore

logger = logging.getLogger(__name__)


class MicrophonePermissionGate:
    def __init__(self, sample_rate: int = 16000, channels: int = 1) -> None:
        self._sample_rate = sample_rate
        self._channels = channels
        self._state = PermissionState.UNKNOWN
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    def check_permission(self) -> PermissionState:
        return self._state

    def request_permission(self, on_result: PermissionCallback) -> None:
        """Probe the microphone on a worker thread and report the outcome.

        ``on_result`` runs on the worker thread. A request made while a
        probe is in flight is ignored.
        """
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                logger.debug("Permission probe already in flight")
                return
            self._thread = threading.Thread(target=self._run_probe, args=(on_result,), daemon=True)
            self._thread.start()

    def _run_probe(self, on_result: PermissionCallback) -> None:
        state = self.probe()
        self._state = state
        on_result(state)

    def probe(self) -> PermissionState:
        if sd is None:
            logger.warning("sounddevice is not installed, microphone unavailable")
            return PermissionState.DENIED
        try:
            sd.check_input_settings(
                samplerate=self._sample_rate,
                channels=self._channels,
                dtype="int16",
            )
            stream = sd.InputStream(
                samplerate=self._sample_rate,
                channels=self._channels,
                dtype="int16",
            )
            stream.start()
            stream.stop()
            stream.close()
        except Exception as exc:
            logger.warning("%s: %s %s", PERMISSION_DENIED, ERROR_MESSAGES[PERMISSION_DENIED], exc)
            return PermissionState.DENIED
        logger.info("Microphone access granted")
        return PermissionState.GRANTED
