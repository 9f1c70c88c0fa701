# presentation.py
"""
Traducción de los modelos del controlador a texto y coordenadas de gráfica.

Sin dependencias de Qt, para poder probarlo sin pantalla.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple
import statistics as stats

from models import NetStatus, Reading

Point = Tuple[float, float]

# Espacio de coordenadas de la gráfica (viewBox 0 0 100 70)
CHART_WIDTH = 100.0
CHART_HEIGHT = 70.0
MIN_SPAN = 1.0
MINUTES_PER_DAY = 1439


def format_temperature(value: Optional[float]) -> str:
    return "-- °C" if value is None else f"{value:.1f} °C"


def format_humidity(value: Optional[float]) -> str:
    return "-- %" if value is None else f"{value:.1f} %"


def format_setpoint(value: float) -> str:
    return f"{value:.1f} °C"


def lamp_label(on: bool) -> str:
    return "Encendida" if on else "Apagada"


def connection_label(status: NetStatus) -> str:
    if status.sta_connected:
        return "Conectado"
    if status.sta_configured:
        return "Intentando conectar"
    return "Desconectado"


def clock_label(status: NetStatus) -> str:
    if status.time_valid and status.datetime:
        return status.datetime
    return "Offline"


def ssid_label(status: NetStatus) -> str:
    return status.ssid or "No configurado"


def table_rows(readings: Sequence[Reading]) -> List[Tuple[str, str, str, str]]:
    return [
        (
            r.date or "-",
            r.time,
            f"{r.temperature:.1f}",
            f"{r.humidity:.1f}",
        )
        for r in readings
    ]


def stats_text(values: Sequence[float]) -> str:
    if not values:
        return "μ: —   min: —   max: —"
    return (
        f"μ: {stats.fmean(values):.1f}   "
        f"min: {min(values):.1f}   max: {max(values):.1f}"
    )


# ===================== GRÁFICA =====================
@dataclass
class ChartSeries:
    temperature: List[Point] = field(default_factory=list)
    humidity: List[Point] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.temperature)


def _value_range(values: Sequence[float]) -> Tuple[float, float]:
    lo, hi = float("inf"), float("-inf")
    for v in values:
        lo = min(lo, v)
        hi = max(hi, v)
    # serie casi plana: se abre el rango para no dividir por ~0
    if hi - lo < MIN_SPAN:
        hi += MIN_SPAN / 2
        lo -= MIN_SPAN / 2
    return lo, hi


def _normalize(value: float, lo: float, hi: float) -> float:
    return (value - lo) / (hi - lo)


def _build_series(
    readings: Sequence[Reading],
    x_of: Callable[[int, Reading], float],
    y_base: float,
    y_height: float,
) -> ChartSeries:
    if not readings:
        return ChartSeries()

    t_lo, t_hi = _value_range([r.temperature for r in readings])
    h_lo, h_hi = _value_range([r.humidity for r in readings])

    series = ChartSeries()
    for idx, r in enumerate(readings):
        x = x_of(idx, r)
        y_t = y_base - _normalize(r.temperature, t_lo, t_hi) * y_height
        y_h = y_base - _normalize(r.humidity, h_lo, h_hi) * y_height
        series.temperature.append((round(x, 2), round(y_t, 2)))
        series.humidity.append((round(x, 2), round(y_h, 2)))
    return series


def chart_series(readings: Sequence[Reading]) -> ChartSeries:
    """
    Puntos equiespaciados por índice: x en [7, 97], y en [5, 65]
    (y crece hacia abajo, como en SVG).
    """
    n = len(readings)

    def x_of(idx: int, _r: Reading) -> float:
        return 7 + (0 if n == 1 else idx / (n - 1) * 90)

    return _build_series(readings, x_of, y_base=65, y_height=60)


def chart_series_by_clock(readings: Sequence[Reading]) -> ChartSeries:
    """
    Variante del firmware antiguo: x según la hora de la lectura.

    La ventana no la usa (siempre dibuja chart_series); queda para quien
    importe el módulo con un controlador de firmware antiguo.
    """

    def x_of(_idx: int, r: Reading) -> float:
        return 5 + r.minute_of_day / MINUTES_PER_DAY * 90

    return _build_series(readings, x_of, y_base=55, y_height=50)
