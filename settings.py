# settings.py
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

SETTINGS_FILE = Path("settings.json")

# IP del ESP32 en modo punto de acceso
DEFAULT_DEVICE_URL = "http://192.168.4.1"

# límites del spin box de intervalo de la ventana
MIN_POLL_INTERVAL_MS = 5000
MAX_POLL_INTERVAL_MS = 3600 * 1000


def default_settings() -> Dict[str, Any]:
    return {
        "device_url": DEFAULT_DEVICE_URL,
        "poll_interval_ms": 60000,
        "request_timeout_s": 5.0,
        "dark_mode": False,
    }


def env_overrides() -> Dict[str, Any]:
    """Valores del entorno (.env incluido); mandan sobre el fichero y no se guardan."""
    overrides: Dict[str, Any] = {}
    url = os.getenv("TERRARIO_URL")
    if url:
        overrides["device_url"] = url
    return overrides


class SettingsManager:
    def __init__(self, path: Path = SETTINGS_FILE) -> None:
        self.path = path
        self._data: Dict[str, Any] = {}
        self._overrides: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        self._data = default_settings()
        self._overrides = env_overrides()
        if not self.path.exists():
            return
        try:
            stored = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("%s corrupto, se usan valores por defecto", self.path)
            return
        if isinstance(stored, dict):
            self._data.update(stored)

    def save(self) -> None:
        self.path.write_text(json.dumps(self._data, indent=4), encoding="utf-8")

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._overrides:
            return self._overrides[key]
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def poll_interval_ms(self) -> int:
        try:
            value = int(self.get("poll_interval_ms", 60000))
        except (TypeError, ValueError):
            value = default_settings()["poll_interval_ms"]
        return max(MIN_POLL_INTERVAL_MS, min(MAX_POLL_INTERVAL_MS, value))
