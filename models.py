# models.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, List, Optional
import math


NO_DATE = "0000-00-00"  # fecha que envía el ESP32 si nunca sincronizó NTP


class PayloadError(ValueError):
    """JSON recibido del controlador con forma inesperada."""


def _to_float(value: Any) -> Optional[float]:
    # el firmware envía NaN/null (o Infinity) cuando el DHT falla
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _require(data: dict, key: str) -> Any:
    if key not in data:
        raise PayloadError(f"campo '{key}' ausente en la respuesta")
    return data[key]


def _require_float(data: dict, key: str) -> float:
    value = _to_float(_require(data, key))
    if value is None:
        raise PayloadError(f"campo '{key}' no es numérico")
    return value


@dataclass
class DeviceState:
    temperature: Optional[float]
    humidity: Optional[float]
    target: float
    lamp_on: bool

    @classmethod
    def from_json(cls, data: Any) -> "DeviceState":
        if not isinstance(data, dict):
            raise PayloadError("se esperaba un objeto JSON en /api/state")
        lamp = _require(data, "lampada")
        return cls(
            temperature=_to_float(data.get("temp")),
            humidity=_to_float(data.get("umid")),
            target=_require_float(data, "alvo"),
            # firmwares antiguos envían 1/0 en vez de true/false
            lamp_on=lamp is True or lamp == 1,
        )


@dataclass
class Reading:
    date: Optional[str]
    time: str  # "HH:MM"
    temperature: float
    humidity: float

    @property
    def minute_of_day(self) -> int:
        hours, minutes = self.time.split(":")[:2]
        return int(hours) * 60 + int(minutes)

    @classmethod
    def from_json(cls, data: Any) -> "Reading":
        if not isinstance(data, dict):
            raise PayloadError("cada lectura debe ser un objeto JSON")
        date = data.get("data")
        if not date or date == NO_DATE:
            date = None
        return cls(
            date=date,
            time=str(_require(data, "hora")),
            temperature=_require_float(data, "temp"),
            humidity=_require_float(data, "umid"),
        )


def readings_from_json(data: Any) -> List[Reading]:
    if not isinstance(data, list):
        raise PayloadError("se esperaba una lista JSON en /api/today")
    return [Reading.from_json(item) for item in data]


@dataclass
class NetStatus:
    sta_connected: bool
    sta_configured: bool
    time_valid: bool
    datetime: Optional[str]
    ssid: Optional[str]

    @classmethod
    def from_json(cls, data: Any) -> "NetStatus":
        if not isinstance(data, dict):
            raise PayloadError("se esperaba un objeto JSON en /api/netstatus")
        return cls(
            sta_connected=bool(data.get("sta_connected")),
            sta_configured=bool(data.get("sta_configured")),
            time_valid=bool(data.get("time_valid")),
            datetime=data.get("datetime") or None,
            ssid=data.get("ssid") or None,
        )
