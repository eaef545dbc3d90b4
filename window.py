"""Main window: recognized text, font size slider and hold-to-talk button."""

from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QAction, QFont, QKeySequence
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QScrollArea,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from presenter import SLIDER_MAX, SLIDER_MIN

NOTICE_TIMEOUT_MS = 3000


class MainWindow(QMainWindow):
    """Qt implementation of the ``DisplayView`` protocol.

    User input is re-emitted as signals; the window holds no recognition
    state of its own.
    """

    hold_pressed = Signal()
    hold_released = Signal()
    progress_changed = Signal(int)
    font_step_requested = Signal(int)
    clear_requested = Signal()
    api_key_requested = Signal()
    hotkey_requested = Signal()
    permission_requested = Signal()
    quit_requested = Signal()

    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("Hold to Talk")
        self.resize(640, 480)

        self._text = QLabel("")
        self._text.setWordWrap(True)
        self._text.setAlignment(Qt.AlignTop | Qt.AlignLeft)
        self._text.setTextInteractionFlags(Qt.TextSelectableByMouse)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(self._text)

        self._slider = QSlider(Qt.Horizontal)
        self._slider.setRange(SLIDER_MIN, SLIDER_MAX)
        self._slider.valueChanged.connect(self.progress_changed.emit)

        self._button = QPushButton("")
        self._button.setMinimumHeight(56)
        self._button.pressed.connect(self.hold_pressed.emit)
        self._button.released.connect(self.hold_released.emit)

        slider_row = QHBoxLayout()
        slider_row.addWidget(QLabel("A"))
        slider_row.addWidget(self._slider, 1)
        slider_row.addWidget(QLabel("A+"))

        layout = QVBoxLayout()
        layout.addWidget(scroll, 1)
        layout.addLayout(slider_row)
        layout.addWidget(self._button)

        central = QWidget()
        central.setLayout(layout)
        self.setCentralWidget(central)

        self._setup_menu()

    def _setup_menu(self) -> None:
        view_menu = self.menuBar().addMenu("View")
        self._add_action(view_menu, "Clear", self.clear_requested.emit, "Ctrl+L")
        self._add_action(view_menu, "Larger Text", lambda: self.font_step_requested.emit(1), "Ctrl+=")
        self._add_action(view_menu, "Smaller Text", lambda: self.font_step_requested.emit(-1), "Ctrl+-")
        self._add_action(view_menu, "Toggle Full Screen", self.toggle_fullscreen, "F11")

        settings_menu = self.menuBar().addMenu("Settings")
        self._add_action(settings_menu, "Set API Key", self.api_key_requested.emit)
        self._add_action(settings_menu, "Set Hotkey", self.hotkey_requested.emit)
        self._add_action(settings_menu, "Request Microphone Access", self.permission_requested.emit)
        settings_menu.addSeparator()
        self._add_action(settings_menu, "Quit", self.quit_requested.emit, QKeySequence.StandardKey.Quit)

    def _add_action(self, menu, label: str, slot, shortcut=None) -> QAction:  # noqa: ANN001
        action = QAction(label, menu)
        if shortcut is not None:
            action.setShortcut(QKeySequence(shortcut))
        action.triggered.connect(slot)
        menu.addAction(action)
        return action

    # ------------------------------------------------------------------
    # DisplayView
    # ------------------------------------------------------------------

    def set_text(self, text: str) -> None:
        self._text.setText(text)

    def set_font_size(self, size: float) -> None:
        font = QFont(self._text.font())
        font.setPointSizeF(size)
        self._text.setFont(font)

    def set_slider_position(self, progress: int) -> None:
        if self._slider.value() != progress:
            self._slider.setValue(progress)

    def set_button_text(self, text: str) -> None:
        self._button.setText(text)

    def set_button_enabled(self, enabled: bool) -> None:
        self._button.setEnabled(enabled)

    def show_notice(self, text: str) -> None:
        self.statusBar().showMessage(text, NOTICE_TIMEOUT_MS)

    # ------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------

    def toggle_fullscreen(self) -> None:
        if self.isFullScreen():
            self.showNormal()
        else:
            self.showFullScreen()

    def mouseDoubleClickEvent(self, event) -> None:  # noqa: ANN001, N802
        self.toggle_fullscreen()
        super().mouseDoubleClickEvent(event)

    def keyPressEvent(self, event) -> None:  # noqa: ANN001, N802
        if event.key() == Qt.Key_Space and not event.isAutoRepeat() and self._button.isEnabled():
            self.hold_pressed.emit()
            return
        super().keyPressEvent(event)

    def keyReleaseEvent(self, event) -> None:  # noqa: ANN001, N802
        if event.key() == Qt.Key_Space and not event.isAutoRepeat():
            self.hold_released.emit()
            return
        super().keyReleaseEvent(event)

    def closeEvent(self, event) -> None:  # noqa: ANN001, N802
        self.quit_requested.emit()
        super().closeEvent(event)
