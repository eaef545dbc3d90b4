"""Application entrypoint."""

from __future__ import annotations

import logging
import os
import sys

from config import JsonConfigStore
from hotkey import GlobalHotkeyAdapter
from models import PermissionState, RecognitionEvent, SessionStatus
from permission import MicrophonePermissionGate
from presenter import PushToTalkPresenter
from recognition_controller import RecognitionController
from speech_service import dashscope_service_factory

try:
    from PySide6.QtCore import QObject, Signal
    from PySide6.QtWidgets import QApplication, QInputDialog, QMessageBox

    from window import MainWindow
except Exception as exc:  # pragma: no cover
    raise SystemExit(f"PySide6 is required to run the desktop app: {exc}")

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class UIBridge(QObject):
    """Queues callbacks from worker threads onto the Qt main thread."""

    event_signal = Signal(object)  # RecognitionEvent
    permission_signal = Signal(object)  # PermissionState
    press_signal = Signal()
    release_signal = Signal()


class App:
    def __init__(self) -> None:
        self.app = QApplication(sys.argv)
        self.config_store = JsonConfigStore()
        self.window = MainWindow()
        self.ui = UIBridge()
        self.gate = MicrophonePermissionGate()

        self.presenter = PushToTalkPresenter(
            view=self.window,
            permission_gate=self.gate,
            permission_dispatch=self.ui.permission_signal.emit,
        )
        self.controller = RecognitionController(
            service_factory=self._service_factory(),
            permission_gate=self.gate,
            on_text=self.presenter.set_text,
            language=self.config_store.get_language(),
            on_status_change=self._on_status_change,
            dispatch=self.ui.event_signal.emit,
        )
        self.presenter.bind(self.controller)
        self.hotkey = GlobalHotkeyAdapter(hotkey_name=self.config_store.get_hotkey())

        self.ui.event_signal.connect(self._on_event_ui)
        self.ui.permission_signal.connect(self.presenter.on_permission_result)
        self.ui.press_signal.connect(self.presenter.on_press)
        self.ui.release_signal.connect(self.presenter.on_release)
        self._connect_window()
        self.presenter.attach()

    def _service_factory(self):  # noqa: ANN202
        return dashscope_service_factory(
            api_key=self.config_store.get_api_key(),
            model=self.config_store.get_model(),
        )

    def _connect_window(self) -> None:
        w = self.window
        w.hold_pressed.connect(self.presenter.on_press)
        w.hold_released.connect(self.presenter.on_release)
        w.progress_changed.connect(self.presenter.on_slider_changed)
        w.font_step_requested.connect(self.presenter.step_font)
        w.clear_requested.connect(self.presenter.clear_text)
        w.permission_requested.connect(self.presenter.request_permission)
        w.api_key_requested.connect(self._set_api_key)
        w.hotkey_requested.connect(self._set_hotkey)
        w.quit_requested.connect(self.quit)

    def _set_api_key(self) -> None:
        value, ok = QInputDialog.getText(self.window, "API Key", "DashScope API Key")
        if not ok:
            return
        self.config_store.set_api_key(value)
        # Next press builds a service with the new key
        self.controller.replace_service_factory(self._service_factory())
        QMessageBox.information(self.window, "Saved", "API Key saved and applied.")

    def _set_hotkey(self) -> None:
        value, ok = QInputDialog.getText(
            self.window, "Hotkey", "Use pynput key format, e.g. Key.alt_r"
        )
        if not ok or not value:
            return
        self.config_store.set_hotkey(value)
        QMessageBox.information(self.window, "Saved", "Hotkey saved. Restart app to apply.")

    # ------------------------------------------------------------------
    # UI thread handlers
    # ------------------------------------------------------------------

    def _on_event_ui(self, event: RecognitionEvent) -> None:
        self.controller.handle_event(event)

    def _on_status_change(self, from_status: SessionStatus, to_status: SessionStatus) -> None:
        logger.debug("Session %s -> %s", from_status.value, to_status.value)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> int:
        self.window.show()
        if self.gate.check_permission() != PermissionState.GRANTED:
            self.presenter.request_permission()
        try:
            # Hotkey callbacks come from the pynput thread
            self.hotkey.start(
                on_press=self.ui.press_signal.emit,
                on_release=self.ui.release_signal.emit,
            )
        except Exception as exc:
            logger.warning("Global hotkey disabled: %s", exc)
            self.window.show_notice(f"Hotkey disabled: {exc}")
        return self.app.exec()

    def quit(self) -> None:
        self.hotkey.stop()
        self.controller.teardown()
        self.app.quit()


def configure_logging() -> None:
    level = os.getenv("HOLD_TO_TALK_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
    for name in ("dashscope", "urllib3", "websocket"):
        logging.getLogger(name).setLevel(logging.WARNING)


def main() -> int:
    configure_logging()
    app = App()
    return app.run()


if __name__ == "__main__":
    raise SystemExit(main())
