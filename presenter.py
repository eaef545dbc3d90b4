"""Toolkit-free presentation logic for the hold-to-talk window."""

from __future__ import annotations

import logging
from typing import Optional

from interfaces import DisplayView, PermissionCallback, PermissionGate
from models import MAX_FONT_SIZE, MIN_FONT_SIZE, DisplayState, PermissionState
from recognition_controller import RecognitionController
from strings import BUTTON_TEXT_LISTENING, PERMISSION_DENIED, START_BUTTON_TEXT, get_string

logger = logging.getLogger(__name__)

SLIDER_MIN = 0
SLIDER_MAX = 100
FONT_STEP = 10  # slider positions per keyboard step


def font_size_for_progress(progress: float) -> float:
    """Map a slider position in [0, 100] linearly onto [12, 60]."""
    clamped = min(SLIDER_MAX, max(SLIDER_MIN, progress))
    return MIN_FONT_SIZE + (clamped / SLIDER_MAX) * (MAX_FONT_SIZE - MIN_FONT_SIZE)


class PushToTalkPresenter:
    def __init__(
        self,
        view: DisplayView,
        permission_gate: PermissionGate,
        initial_progress: int = 0,
        permission_dispatch: Optional[PermissionCallback] = None,
    ) -> None:
        self._view = view
        self._gate = permission_gate
        # Permission results arrive on the probe thread; the app routes them
        # back to the UI thread through this callable.
        self._permission_dispatch = permission_dispatch or self.on_permission_result
        self._controller: RecognitionController | None = None
        self.display = DisplayState()
        self._progress = initial_progress
        self._gesture_active = False

    def bind(self, controller: RecognitionController) -> None:
        self._controller = controller

    @property
    def progress(self) -> int:
        return self._progress

    @property
    def gesture_active(self) -> bool:
        return self._gesture_active

    def attach(self) -> None:
        """Push the initial state into the view."""
        self._view.set_button_text(get_string(START_BUTTON_TEXT))
        self._view.set_slider_position(self._progress)
        self.on_slider_changed(self._progress)

    # ------------------------------------------------------------------
    # Font size
    # ------------------------------------------------------------------

    def on_slider_changed(self, progress: int) -> None:
        self._progress = min(SLIDER_MAX, max(SLIDER_MIN, int(progress)))
        size = self.display.set_font_size(font_size_for_progress(self._progress))
        self._view.set_font_size(size)

    def step_font(self, steps: int) -> None:
        progress = min(SLIDER_MAX, max(SLIDER_MIN, self._progress + steps * FONT_STEP))
        self._view.set_slider_position(progress)
        self.on_slider_changed(progress)

    # ------------------------------------------------------------------
    # Hold control
    # ------------------------------------------------------------------

    def on_press(self) -> None:
        if self._gesture_active or self._controller is None:
            return
        if self._gate.check_permission() != PermissionState.GRANTED:
            logger.info("Microphone permission not granted, requesting")
            self.request_permission()
            return
        self._gesture_active = True
        self._controller.start()
        self._view.set_button_text(get_string(BUTTON_TEXT_LISTENING))

    def on_release(self) -> None:
        if not self._gesture_active or self._controller is None:
            return
        self._gesture_active = False
        self._controller.stop()
        self._view.set_button_text(get_string(START_BUTTON_TEXT))

    def request_permission(self) -> None:
        self._gate.request_permission(self._permission_dispatch)

    def on_permission_result(self, state: PermissionState) -> None:
        if state == PermissionState.GRANTED:
            self._view.set_button_enabled(True)
            return
        self._view.set_button_enabled(False)
        self._view.show_notice(get_string(PERMISSION_DENIED))

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def set_text(self, text: str) -> None:
        self.display.text = text
        self._view.set_text(text)

    def clear_text(self) -> None:
        self.set_text("")
