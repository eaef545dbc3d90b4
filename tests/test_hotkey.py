"""Tests for GlobalHotkeyAdapter."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from hotkey import GlobalHotkeyAdapter, key_name


class _SpecialKey:
    def __init__(self, name: str) -> None:
        self._name = name

    def __str__(self) -> str:
        return self._name


class _CharKey:
    def __init__(self, char: str) -> None:
        self.char = char


def test_key_name_for_special_and_char_keys() -> None:
    assert key_name(_SpecialKey("Key.alt_r")) == "Key.alt_r"
    assert key_name(_CharKey("F")) == "f"


def test_single_character_hotkey_is_lowercased() -> None:
    assert GlobalHotkeyAdapter(" Q ").hotkey_name == "q"
    assert GlobalHotkeyAdapter("Key.f8").hotkey_name == "Key.f8"


@patch("hotkey.keyboard")
def test_press_and_release_reported_once_per_hold(mock_keyboard: MagicMock) -> None:
    adapter = GlobalHotkeyAdapter("Key.alt_r")
    presses: list[str] = []
    releases: list[str] = []

    adapter.start(on_press=lambda: presses.append("p"), on_release=lambda: releases.append("r"))
    kwargs = mock_keyboard.Listener.call_args.kwargs
    on_press, on_release = kwargs["on_press"], kwargs["on_release"]

    hotkey = _SpecialKey("Key.alt_r")
    on_press(hotkey)
    on_press(hotkey)  # auto-repeat
    on_press(_SpecialKey("Key.shift"))
    on_release(hotkey)
    on_release(hotkey)

    assert presses == ["p"]
    assert releases == ["r"]
    mock_keyboard.Listener.return_value.start.assert_called_once()


@patch("hotkey.keyboard")
def test_stop_is_idempotent(mock_keyboard: MagicMock) -> None:
    adapter = GlobalHotkeyAdapter()
    adapter.start(on_press=lambda: None, on_release=lambda: None)

    adapter.stop()
    adapter.stop()

    mock_keyboard.Listener.return_value.stop.assert_called_once()


@patch("hotkey.keyboard", None)
def test_start_raises_without_pynput() -> None:
    adapter = GlobalHotkeyAdapter()
    with pytest.raises(RuntimeError, match="pynput is not installed"):
        adapter.start(on_press=lambda: None, on_release=lambda: None)
