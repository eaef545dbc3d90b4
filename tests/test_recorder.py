"""Tests for SoundDeviceRecorder."""

from __future__ import annotations

from queue import Queue
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from models import AudioFrame
from recorder import SILENCE_DB, SoundDeviceRecorder, rms_db


# ---------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------

def _silence(n_samples: int = 1600) -> np.ndarray:
    return np.zeros((n_samples, 1), dtype=np.int16)


def _full_scale(n_samples: int = 1600) -> np.ndarray:
    return np.full((n_samples, 1), 32767, dtype=np.int16)


# ---------------------------------------------------------------
# rms_db
# ---------------------------------------------------------------

def test_rms_db_of_silence_is_floor() -> None:
    assert rms_db(_silence().tobytes()) == SILENCE_DB
    assert rms_db(b"") == SILENCE_DB


def test_rms_db_of_full_scale_is_near_zero() -> None:
    assert rms_db(_full_scale().tobytes()) == pytest.approx(0.0, abs=0.01)


def test_rms_db_is_louder_for_larger_amplitude() -> None:
    quiet = np.full((1600, 1), 100, dtype=np.int16).tobytes()
    loud = np.full((1600, 1), 10000, dtype=np.int16).tobytes()
    assert rms_db(loud) > rms_db(quiet)


# ---------------------------------------------------------------
# Basic start / stop
# ---------------------------------------------------------------

@patch("recorder.sd")
def test_start_creates_stream_and_stop_emits_sentinel(mock_sd: MagicMock) -> None:
    mock_stream = MagicMock()
    mock_sd.InputStream.return_value = mock_stream

    recorder = SoundDeviceRecorder()
    q: Queue[AudioFrame | None] = Queue()
    recorder.start(q)

    mock_sd.InputStream.assert_called_once()
    assert mock_sd.InputStream.call_args.kwargs["blocksize"] == 1600
    mock_stream.start.assert_called_once()
    assert recorder.running is True

    recorder.stop()
    mock_stream.stop.assert_called_once()
    mock_stream.close.assert_called_once()
    assert recorder.running is False
    assert q.get_nowait() is None


@patch("recorder.sd")
def test_start_is_idempotent(mock_sd: MagicMock) -> None:
    mock_sd.InputStream.return_value = MagicMock()

    recorder = SoundDeviceRecorder()
    q: Queue[AudioFrame | None] = Queue()
    recorder.start(q)
    recorder.start(q)

    assert mock_sd.InputStream.call_count == 1
    recorder.stop()


@patch("recorder.sd")
def test_stop_is_idempotent_and_emits_one_sentinel(mock_sd: MagicMock) -> None:
    mock_sd.InputStream.return_value = MagicMock()

    recorder = SoundDeviceRecorder()
    q: Queue[AudioFrame | None] = Queue()
    recorder.start(q)
    recorder.stop()
    recorder.stop()

    assert q.get_nowait() is None
    assert q.empty()


def test_stop_without_start_is_noop() -> None:
    recorder = SoundDeviceRecorder()
    recorder.stop()
    assert recorder.running is False


# ---------------------------------------------------------------
# Audio callback
# ---------------------------------------------------------------

@patch("recorder.sd")
def test_callback_pushes_audio_frames_and_reports_level(mock_sd: MagicMock) -> None:
    mock_sd.InputStream.return_value = MagicMock()
    levels: list[float] = []

    recorder = SoundDeviceRecorder(sample_rate=16000, channels=1, chunk_ms=100, on_level=levels.append)
    q: Queue[AudioFrame | None] = Queue(maxsize=50)
    recorder.start(q)

    recorder._on_audio(_full_scale(), frames=1600, time_info=None, status=None)

    frame = q.get_nowait()
    assert isinstance(frame, AudioFrame)
    assert frame.sample_rate == 16000
    assert frame.channels == 1
    assert len(frame.pcm16_bytes) == 1600 * 2
    assert len(levels) == 1
    assert levels[0] == pytest.approx(0.0, abs=0.01)

    recorder.stop()


@patch("recorder.sd")
def test_queue_full_increments_dropped_chunks(mock_sd: MagicMock) -> None:
    mock_sd.InputStream.return_value = MagicMock()
    levels: list[float] = []

    recorder = SoundDeviceRecorder(on_level=levels.append)
    q: Queue[AudioFrame | None] = Queue(maxsize=1)
    recorder.start(q)

    recorder._on_audio(_silence(), frames=1600, time_info=None, status=None)
    assert recorder.dropped_chunks == 0

    recorder._on_audio(_silence(), frames=1600, time_info=None, status=None)
    assert recorder.dropped_chunks == 1
    assert len(levels) == 1

    q.get_nowait()
    recorder.stop()


@patch("recorder.sd")
def test_callback_after_stop_is_noop(mock_sd: MagicMock) -> None:
    mock_sd.InputStream.return_value = MagicMock()

    recorder = SoundDeviceRecorder()
    q: Queue[AudioFrame | None] = Queue()
    recorder.start(q)
    recorder.stop()
    q.get_nowait()

    recorder._on_audio(_silence(), frames=1600, time_info=None, status=None)
    assert q.empty()


def test_start_raises_without_sounddevice(monkeypatch) -> None:  # noqa: ANN001
    import recorder as rec_mod
    monkeypatch.setattr(rec_mod, "sd", None)

    recorder = SoundDeviceRecorder()
    q: Queue[AudioFrame | None] = Queue()
    with pytest.raises(RuntimeError, match="sounddevice is not installed"):
        recorder.start(q)
