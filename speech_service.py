"""Speech service backed by microphone capture and DashScope qwen3-asr-flash.

The service mirrors a platform recognizer: ``start_listening`` opens the
microphone and reports ``ready``; ``stop_listening`` closes it, after which
the captured PCM is packaged as WAV and streamed to the model. Listener
events are delivered from the capture and worker threads, so callers that
own UI state must marshal them onto their own thread.

Each ``start_listening`` begins a new session id. A session that is still
capturing when the next one starts is superseded and its events are dropped.
A session that was already stopped keeps recognizing and still delivers its
terminal event, tagged with its own id. ``destroy`` cancels every session.
"""

from __future__ import annotations

import base64
import io
import logging
import os
import threading
import wave
from dataclasses import dataclass, field
from queue import Empty, Queue
from typing import Callable, Optional

from config import DEFAULT_MODEL
from errors import ASR_PROTOCOL_ERROR, AUDIO_ERROR, AUTH_FAILED, NETWORK_ERROR
from interfaces import RecognitionListener, Recorder
from models import TERMINAL_KINDS, AudioFrame, RecognitionConfig, RecognitionEvent, RecognitionKind
from recorder import LevelCallback, SoundDeviceRecorder

try:
    import dashscope
except Exception:  # pragma: no cover
    dashscope = None  # type: ignore

logger = logging.getLogger(__name__)

RecorderFactory = Callable[[LevelCallback], Recorder]


def _pcm_to_wav_base64(
    pcm: bytes,
    sample_rate: int = 16000,
    channels: int = 1,
    sample_width: int = 2,
) -> str:
    """Convert raw PCM bytes to a base64-encoded WAV string."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm)
    return base64.b64encode(buf.getvalue()).decode("ascii")


def _language_code(language: str) -> str:
    """``en_US`` / ``en-US`` -> ``en``."""
    return language.replace("-", "_").split("_", 1)[0].lower()


def _default_recorder(on_level: LevelCallback) -> Recorder:
    return SoundDeviceRecorder(on_level=on_level)


@dataclass
class _Session:
    session_id: int
    config: RecognitionConfig
    audio_queue: Queue[AudioFrame | None]
    cancelled: threading.Event = field(default_factory=threading.Event)
    ready: threading.Event = field(default_factory=threading.Event)
    capturing: bool = True
    recorder: Optional[Recorder] = None
    thread: Optional[threading.Thread] = None


class DashscopeSpeechService:
    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        recorder_factory: RecorderFactory = _default_recorder,
        request_timeout_s: float = 10.0,
        queue_maxsize: int = 600,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._recorder_factory = recorder_factory
        self._request_timeout_s = request_timeout_s
        self._queue_maxsize = queue_maxsize
        self._lock = threading.Lock()
        self._listener: Optional[RecognitionListener] = None
        self._session: Optional[_Session] = None
        self._finishing: dict[int, _Session] = {}
        self._session_id = 0
        self._destroyed = False

    @property
    def session_id(self) -> int:
        return self._session_id

    @property
    def active(self) -> bool:
        return self._session is not None

    @property
    def finishing(self) -> list[int]:
        """Ids of stopped sessions still waiting for their terminal event."""
        with self._lock:
            return sorted(self._finishing)

    def set_listener(self, listener: RecognitionListener) -> None:
        self._listener = listener

    def start_listening(self, config: RecognitionConfig) -> None:
        superseded = None
        with self._lock:
            if self._destroyed:
                raise RuntimeError("speech service has been destroyed")
            previous = self._session
            if previous is not None:
                if previous.capturing:
                    superseded = previous
                else:
                    self._finishing[previous.session_id] = previous
            self._session_id += 1
            session = _Session(
                session_id=self._session_id,
                config=config,
                audio_queue=Queue(maxsize=self._queue_maxsize),
            )
            self._session = session

        # Recorders are never stopped while holding the lock: the capture
        # callback emits level events, which take it.
        if superseded is not None:
            logger.info("Superseding session %d", superseded.session_id)
            self._cancel(superseded)
        elif previous is not None:
            logger.debug("Session %d still recognizing", previous.session_id)

        session.recorder = self._recorder_factory(lambda db: self._emit_level(session, db))
        try:
            session.recorder.start(session.audio_queue)
        except Exception as exc:
            logger.error("Failed to open microphone: %s", exc)
            self._emit(session, RecognitionKind.ERROR, code=AUDIO_ERROR, message=str(exc))
            return

        logger.info(
            "Session %d listening (model=%s, language=%s)",
            session.session_id, config.language_model, config.language,
        )
        self._emit(session, RecognitionKind.READY)
        session.ready.set()
        session.thread = threading.Thread(target=self._worker, args=(session,), daemon=True)
        session.thread.start()

    def stop_listening(self) -> None:
        with self._lock:
            session = self._session
            if session is None or session.recorder is None:
                return
            session.capturing = False
        logger.debug("Stopping capture for session %d", session.session_id)
        session.recorder.stop()

    def destroy(self) -> None:
        """Cancel every session and drop the listener. Does not block."""
        with self._lock:
            if self._destroyed:
                return
            self._destroyed = True
            sessions = list(self._finishing.values())
            if self._session is not None:
                sessions.append(self._session)
            self._session = None
            self._finishing.clear()
            self._listener = None
        for session in sessions:
            self._cancel(session)
        logger.debug("Speech service destroyed")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _cancel(self, session: _Session) -> None:
        session.cancelled.set()
        if session.recorder is None:
            return
        try:
            session.recorder.stop()
        except Exception as exc:
            logger.warning("Stopping capture for session %d failed: %s", session.session_id, exc)

    def _emit(self, session: _Session, kind: RecognitionKind, **fields: object) -> None:
        with self._lock:
            if self._destroyed or session.cancelled.is_set():
                return
            listener = self._listener
            if kind in TERMINAL_KINDS:
                self._finishing.pop(session.session_id, None)
                if self._session is session:
                    self._session = None
        if listener is None:
            return
        listener(RecognitionEvent(kind=kind, session_id=session.session_id, **fields))

    def _emit_level(self, session: _Session, db: float) -> None:
        # Level events only follow ``ready``.
        if session.ready.is_set():
            self._emit(session, RecognitionKind.RMS_CHANGED, rms_db=db)

    def _worker(self, session: _Session) -> None:
        """Consume audio frames until the end-of-audio marker, then recognise."""
        pcm = bytearray()
        sample_rate = 16000
        channels = 1

        while not session.cancelled.is_set():
            try:
                frame = session.audio_queue.get(timeout=0.2)
            except Empty:
                continue
            if frame is None:
                break
            if not pcm:
                self._emit(session, RecognitionKind.BEGINNING_OF_SPEECH)
            pcm.extend(frame.pcm16_bytes)
            sample_rate = frame.sample_rate
            channels = frame.channels

        if session.cancelled.is_set():
            return
        self._emit(session, RecognitionKind.END_OF_SPEECH)

        if not pcm:
            self._emit(session, RecognitionKind.RESULTS, candidates=[])
            return

        wav_b64 = _pcm_to_wav_base64(bytes(pcm), sample_rate, channels)
        self._recognize_stream(session, wav_b64)

    def _recognize_stream(self, session: _Session, wav_base64: str) -> None:  # noqa: C901
        """Send audio to dashscope and report partial and final results."""
        if dashscope is None:
            self._emit(
                session, RecognitionKind.ERROR,
                code=ASR_PROTOCOL_ERROR, message="dashscope is not installed",
            )
            return

        api_key = self._api_key or os.getenv("DASHSCOPE_API_KEY", "")
        if not api_key:
            self._emit(session, RecognitionKind.ERROR, code=AUTH_FAILED, message="No API key configured")
            return

        asr_options: dict[str, object] = {"enable_itn": False}
        language = _language_code(session.config.language)
        if language:
            asr_options["language"] = language

        try:
            response = dashscope.MultiModalConversation.call(
                api_key=api_key,
                model=self._model,
                messages=[
                    {"role": "system", "content": [{"text": ""}]},
                    {"role": "user", "content": [{"audio": wav_base64}]},
                ],
                result_format="message",
                asr_options=asr_options,
                stream=True,
                timeout=self._request_timeout_s,
            )
        except Exception as exc:
            self._emit_failure(session, exc)
            return

        latest_text = ""
        try:
            for chunk in response:
                if session.cancelled.is_set():
                    return
                text = self._extract_text(chunk)
                if text:
                    latest_text = text
                    self._emit(session, RecognitionKind.PARTIAL_RESULTS, candidates=[text])
        except Exception as exc:
            self._emit_failure(session, exc)
            return

        candidates = [latest_text] if latest_text.strip() else []
        logger.info("Session %d finished with %d candidate(s)", session.session_id, len(candidates))
        self._emit(session, RecognitionKind.RESULTS, candidates=candidates)

    def _extract_text(self, chunk: object) -> str:
        """Pull text from a dashscope streaming chunk dict."""
        if isinstance(chunk, dict):
            output = chunk.get("output", {})
            choices = output.get("choices", [])
            if not choices:
                return ""
            message = choices[0].get("message", {})
            content = message.get("content", [])
            if not content:
                return ""
            value = content[0]
            if isinstance(value, dict):
                return str(value.get("text", ""))
        return ""

    def _emit_failure(self, session: _Session, exc: Exception) -> None:
        code = self._classify(exc)
        logger.warning("Session %d failed (%s): %s", session.session_id, code, exc)
        self._emit(session, RecognitionKind.ERROR, code=code, message=str(exc))

    @staticmethod
    def _classify(exc: Exception) -> str:
        """Map an SDK/network exception to an error code."""
        low = str(exc).lower()
        if "401" in low or "auth" in low or "api key" in low:
            return AUTH_FAILED
        if "timeout" in low or "network" in low or "connection" in low:
            return NETWORK_ERROR
        return ASR_PROTOCOL_ERROR


def dashscope_service_factory(api_key: str, model: str = DEFAULT_MODEL) -> Callable[[], DashscopeSpeechService]:
    """Return a ``createSession`` callable bound to the given credentials."""

    def create_session() -> DashscopeSpeechService:
        return DashscopeSpeechService(api_key=api_key, model=model)

    return create_session
