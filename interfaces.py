"""Protocol interfaces shared by the controller, presenter and adapters."""

from __future__ import annotations

from queue import Queue
from typing import Callable, Protocol

from models import AudioFrame, PermissionState, RecognitionConfig, RecognitionEvent

RecognitionListener = Callable[[RecognitionEvent], None]
PermissionCallback = Callable[[PermissionState], None]


class Recorder(Protocol):
    def start(self, audio_queue: Queue[AudioFrame | None]) -> None: ...

    def stop(self) -> None: ...


class SpeechService(Protocol):
    def set_listener(self, listener: RecognitionListener) -> None: ...

    def start_listening(self, config: RecognitionConfig) -> None: ...

    def stop_listening(self) -> None: ...

    def destroy(self) -> None: ...


SpeechServiceFactory = Callable[[], SpeechService]


class PermissionGate(Protocol):
    def check_permission(self) -> PermissionState: ...

    def request_permission(self, on_result: PermissionCallback) -> None: ...


class DisplayView(Protocol):
    def set_text(self, text: str) -> None: ...

    def set_font_size(self, size: float) -> None: ...

    def set_slider_position(self, progress: int) -> None: ...

    def set_button_text(self, text: str) -> None: ...

    def set_button_enabled(self, enabled: bool) -> None: ...

    def show_notice(self, text: str) -> None: ...


class ConfigStore(Protocol):
    def get_api_key(self) -> str: ...

    def set_api_key(self, key: str) -> None: ...

    def get_hotkey(self) -> str: ...

    def set_hotkey(self, hotkey: str) -> None: ...

    def get_language(self) -> str: ...

    def get_model(self) -> str: ...
