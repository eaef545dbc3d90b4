"""Global hold-to-talk hotkey based on pynput."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

try:
    from pynput import keyboard
except Exception:  # pragma: no cover
    keyboard = None  # type: ignore

logger = logging.getLogger(__name__)


def key_name(key: object) -> str:
    """Name a pynput key the way the config stores it.

    Special keys render as ``Key.alt_r``; character keys as the bare
    lower-case character.
    """
    char = getattr(key, "char", None)
    if char:
        return str(char).lower()
    return str(key)


class GlobalHotkeyAdapter:
    """Reports one press and one release per physical hold of the hotkey.

    Callbacks run on the pynput listener thread.
    """

    def __init__(self, hotkey_name: str = "Key.alt_r") -> None:
        name = hotkey_name.strip()
        self._hotkey_name = name.lower() if len(name) == 1 else name
        self._listener: Optional[object] = None
        self._pressed = False
        self._lock = threading.Lock()

    @property
    def hotkey_name(self) -> str:
        return self._hotkey_name

    def start(self, on_press: Callable[[], None], on_release: Callable[[], None]) -> None:
        if keyboard is None:
            raise RuntimeError("pynput is not installed")

        def _on_press(key: object) -> None:
            if key_name(key) != self._hotkey_name:
                return
            with self._lock:
                # Key auto-repeat delivers repeated presses while held.
                if self._pressed:
                    return
                self._pressed = True
            on_press()

        def _on_release(key: object) -> None:
            if key_name(key) != self._hotkey_name:
                return
            with self._lock:
                if not self._pressed:
                    return
                self._pressed = False
            on_release()

        self._listener = keyboard.Listener(on_press=_on_press, on_release=_on_release)
        self._listener.start()
        logger.info("Hotkey %s active", self._hotkey_name)

    def stop(self) -> None:
        listener = self._listener
        self._listener = None
        if listener is not None:
            listener.stop()
