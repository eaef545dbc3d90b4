"""State-machine based recognition session orchestration.

All methods, including ``handle_event``, are expected to run on the UI
thread. Speech service events reach ``handle_event`` through ``dispatch``,
which the app binds to a Qt signal so they are queued onto the UI thread.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from errors import EMPTY_RESULT, ERROR_MESSAGES, RECOGNITION_ERROR
from interfaces import PermissionGate, SpeechService, SpeechServiceFactory
from models import PermissionState, RecognitionConfig, RecognitionEvent, RecognitionKind, SessionStatus
from strings import ERROR_RECOGNIZING, LISTENING, get_string

logger = logging.getLogger(__name__)

StatusCallback = Callable[[SessionStatus, SessionStatus], None]
TextCallback = Callable[[str], None]
EventDispatch = Callable[[RecognitionEvent], None]


class RecognitionController:
    def __init__(
        self,
        service_factory: SpeechServiceFactory,
        permission_gate: PermissionGate,
        on_text: TextCallback,
        language: str = "",
        on_status_change: Optional[StatusCallback] = None,
        dispatch: Optional[EventDispatch] = None,
    ) -> None:
        self._service_factory = service_factory
        self._gate = permission_gate
        self._on_text = on_text
        self._on_status_change = on_status_change
        self._dispatch = dispatch or self.handle_event
        self._config = RecognitionConfig(language_model="free_form")
        if language:
            self._config.language = language
        self._service: Optional[SpeechService] = None
        self._status = SessionStatus.IDLE
        self._session_id = 0

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def config(self) -> RecognitionConfig:
        return self._config

    def start(self) -> None:
        if self._gate.check_permission() != PermissionState.GRANTED:
            logger.debug("Ignoring start: microphone permission not granted")
            return
        service = self._ensure_service()
        self._transition(SessionStatus.LISTENING)
        service.start_listening(self._config)

    def stop(self) -> None:
        if self._service is None:
            return
        # A terminal event may still arrive after this and is applied.
        self._service.stop_listening()
        self._transition(SessionStatus.IDLE)

    def teardown(self) -> None:
        service = self._service
        self._service = None
        self._session_id = 0
        if service is not None:
            service.destroy()
        self._transition(SessionStatus.IDLE)

    def replace_service_factory(self, factory: SpeechServiceFactory) -> None:
        """Swap the factory; the next ``start`` builds a fresh service."""
        self.teardown()
        self._service_factory = factory

    def handle_event(self, event: RecognitionEvent) -> None:
        kind = event.kind
        if kind == RecognitionKind.READY:
            self._session_id = event.session_id
            self._on_text(get_string(LISTENING))
            return
        if kind == RecognitionKind.RESULTS:
            self._on_results(event)
            return
        if kind == RecognitionKind.ERROR:
            self._on_error(event)
            return
        if kind == RecognitionKind.RMS_CHANGED:
            logger.debug("Input level %.1f dB", event.rms_db)

    def _on_results(self, event: RecognitionEvent) -> None:
        if event.candidates:
            self._on_text(event.candidates[0])
        else:
            logger.info("%s: %s", EMPTY_RESULT, ERROR_MESSAGES[EMPTY_RESULT])
        self._settle(event, SessionStatus.IDLE)

    def _on_error(self, event: RecognitionEvent) -> None:
        code = event.code or RECOGNITION_ERROR
        logger.warning("%s: %s %s", code, ERROR_MESSAGES.get(code, ERROR_MESSAGES[RECOGNITION_ERROR]), event.message)
        self._settle(event, SessionStatus.ERROR)
        self._on_text(get_string(ERROR_RECOGNIZING))
        self._settle(event, SessionStatus.IDLE)

    def _settle(self, event: RecognitionEvent, to_status: SessionStatus) -> None:
        # A late terminal event from an earlier session leaves the newer
        # session's status alone.
        if event.session_id < self._session_id:
            return
        self._transition(to_status)

    def _ensure_service(self) -> SpeechService:
        if self._service is None:
            self._service = self._service_factory()
            self._service.set_listener(self._dispatch)
        return self._service

    def _transition(self, to_status: SessionStatus) -> None:
        from_status = self._status
        if from_status == to_status:
            return
        self._status = to_status
        if self._on_status_change:
            self._on_status_change(from_status, to_status)
