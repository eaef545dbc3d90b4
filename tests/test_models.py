from __future__ import annotations

import pytest

import models
from models import DisplayState, RecognitionEvent, RecognitionKind, default_language
from strings import STRINGS, get_string


def test_display_state_clamps_font_size() -> None:
    state = DisplayState()

    assert state.set_font_size(5) == 12
    assert state.set_font_size(100) == 60
    assert state.set_font_size(30.5) == pytest.approx(30.5)


def test_terminal_event_kinds() -> None:
    assert RecognitionEvent(kind=RecognitionKind.RESULTS).is_terminal
    assert RecognitionEvent(kind=RecognitionKind.ERROR).is_terminal
    assert not RecognitionEvent(kind=RecognitionKind.READY).is_terminal
    assert not RecognitionEvent(kind=RecognitionKind.PARTIAL_RESULTS).is_terminal


@pytest.mark.parametrize("raw, expected", [((None, None), "en_US"), (("C", "UTF-8"), "en_US"), (("de_DE", "UTF-8"), "de_DE")])
def test_default_language(monkeypatch, raw, expected) -> None:  # noqa: ANN001
    monkeypatch.setattr(models.locale, "getlocale", lambda: raw)
    assert default_language() == expected


def test_strings_resolve_to_source_text_without_app() -> None:
    for name, text in STRINGS.items():
        assert get_string(name) == text
