import pytest

from models import NetStatus, Reading
from presentation import (
    chart_series,
    chart_series_by_clock,
    clock_label,
    connection_label,
    format_humidity,
    format_setpoint,
    format_temperature,
    lamp_label,
    ssid_label,
    stats_text,
    table_rows,
)


def _reading(time, temp, hum, date=None):
    return Reading(date=date, time=time, temperature=temp, humidity=hum)


def _net(**kwargs):
    base = dict(sta_connected=False, sta_configured=False, time_valid=False, datetime=None, ssid=None)
    base.update(kwargs)
    return NetStatus(**base)


def test_value_formatting():
    assert format_temperature(24.36) == "24.4 °C"
    assert format_temperature(None) == "-- °C"
    assert format_humidity(60) == "60.0 %"
    assert format_humidity(None) == "-- %"
    assert format_setpoint(26) == "26.0 °C"
    assert lamp_label(True) == "Encendida"
    assert lamp_label(False) == "Apagada"


def test_connection_label_states():
    assert connection_label(_net(sta_connected=True, sta_configured=True)) == "Conectado"
    assert connection_label(_net(sta_configured=True)) == "Intentando conectar"
    assert connection_label(_net()) == "Desconectado"


def test_clock_needs_valid_time_and_value():
    assert clock_label(_net(time_valid=True, datetime="2024-05-01 10:00")) == "2024-05-01 10:00"
    assert clock_label(_net(time_valid=False, datetime="1970-01-01 00:00")) == "Offline"
    assert clock_label(_net(time_valid=True)) == "Offline"


def test_ssid_label():
    assert ssid_label(_net(ssid="casa")) == "casa"
    assert ssid_label(_net()) == "No configurado"


def test_table_rows_show_dash_for_unknown_date():
    rows = table_rows([_reading("08:00", 25.04, 70.0), _reading("08:10", 25.5, 69.96, "2024-05-01")])
    assert rows == [
        ("-", "08:00", "25.0", "70.0"),
        ("2024-05-01", "08:10", "25.5", "70.0"),
    ]


def test_stats_text():
    assert stats_text([]) == "μ: —   min: —   max: —"
    assert stats_text([20.0, 22.0, 24.0]) == "μ: 22.0   min: 20.0   max: 24.0"


def test_chart_empty():
    series = chart_series([])
    assert not series
    assert series.temperature == [] and series.humidity == []


def test_chart_spreads_points_by_index():
    readings = [_reading("08:00", 20.0, 50.0), _reading("09:00", 25.0, 70.0), _reading("10:00", 30.0, 60.0)]
    series = chart_series(readings)
    assert series.temperature == [(7, 65), (52, 35), (97, 5)]
    assert series.humidity == [(7, 65), (52, 5), (97, 35)]


def test_chart_single_reading_sits_on_left_edge():
    series = chart_series([_reading("08:00", 25.0, 60.0)])
    # rango plano: se abre ±0.5, el punto queda en el centro vertical
    assert series.temperature == [(7, 35)]
    assert series.humidity == [(7, 35)]


def test_chart_flat_range_is_widened():
    readings = [_reading("08:00", 25.0, 60.0), _reading("08:10", 25.4, 60.0)]
    series = chart_series(readings)
    # min=24.5, max=25.9 tras abrir el rango
    assert series.temperature[0] == (7, pytest.approx(43.57, abs=0.01))
    assert series.temperature[1] == (97, pytest.approx(26.43, abs=0.01))


def test_chart_by_clock_uses_time_of_day():
    readings = [_reading("00:00", 20.0, 40.0), _reading("23:59", 30.0, 80.0)]
    series = chart_series_by_clock(readings)
    assert series.temperature == [(5, 55), (95, 5)]
    assert series.humidity == [(5, 55), (95, 5)]
