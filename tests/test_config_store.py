from __future__ import annotations

from pathlib import Path

from config import DEFAULT_HOTKEY, DEFAULT_MODEL, JsonConfigStore


def test_config_read_write(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    store = JsonConfigStore(path=path)

    assert store.get_api_key() == ""
    assert store.get_hotkey() == DEFAULT_HOTKEY

    store.set_api_key("abc")
    store.set_hotkey("Key.f8")

    reloaded = JsonConfigStore(path=path)
    assert reloaded.get_api_key() == "abc"
    assert reloaded.get_hotkey() == "Key.f8"


def test_config_defaults_for_language_and_model(tmp_path: Path) -> None:
    store = JsonConfigStore(path=tmp_path / "config.json")

    assert store.get_language() == ""
    assert store.get_model() == DEFAULT_MODEL


def test_config_reads_hand_edited_values(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text('{"language": "de_DE", "model": "custom-asr"}', encoding="utf-8")

    store = JsonConfigStore(path=path)
    store.set_api_key("k")

    assert store.get_language() == "de_DE"
    assert store.get_model() == "custom-asr"
    assert store.get_api_key() == "k"


def test_config_invalid_json_fallback(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{invalid", encoding="utf-8")

    store = JsonConfigStore(path=path)
    assert store.get_api_key() == ""
    assert store.get_hotkey() == DEFAULT_HOTKEY


def test_config_non_object_json_fallback(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    store = JsonConfigStore(path=path)
    assert store.get_model() == DEFAULT_MODEL
