"""Simple JSON-based config store."""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_HOTKEY = "Key.alt_r"
DEFAULT_MODEL = "qwen3-asr-flash"


class JsonConfigStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path.home() / ".config" / "hold_to_talk" / "config.json"
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def get_api_key(self) -> str:
        return str(self._read_all().get("api_key", ""))

    def set_api_key(self, key: str) -> None:
        self._update(api_key=key)

    def get_hotkey(self) -> str:
        return str(self._read_all().get("hotkey", DEFAULT_HOTKEY))

    def set_hotkey(self, hotkey: str) -> None:
        self._update(hotkey=hotkey)

    def get_language(self) -> str:
        """Locale override; empty means the system default locale."""
        return str(self._read_all().get("language", ""))

    def get_model(self) -> str:
        return str(self._read_all().get("model", DEFAULT_MODEL))

    def _update(self, **values: str) -> None:
        data = self._read_all()
        data.update(values)
        self._write_all(data)

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Ignoring unreadable config %s: %s", self._path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self._path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
