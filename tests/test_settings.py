import json

import pytest

from settings import DEFAULT_DEVICE_URL, SettingsManager


def test_defaults_when_file_missing(tmp_path, monkeypatch):
    monkeypatch.delenv("TERRARIO_URL", raising=False)
    settings = SettingsManager(tmp_path / "settings.json")
    assert settings.get("device_url") == DEFAULT_DEVICE_URL
    assert settings.get("poll_interval_ms") == 60000
    assert settings.get("dark_mode") is False


def test_env_overrides_default_url(tmp_path, monkeypatch):
    monkeypatch.setenv("TERRARIO_URL", "http://10.0.0.7")
    settings = SettingsManager(tmp_path / "settings.json")
    assert settings.get("device_url") == "http://10.0.0.7"


def test_stored_values_win_and_survive_save(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"device_url": "http://terrario.local", "dark_mode": True}), encoding="utf-8")

    settings = SettingsManager(path)
    assert settings.get("device_url") == "http://terrario.local"
    assert settings.get("poll_interval_ms") == 60000

    settings.set("poll_interval_ms", 30000)
    settings.save()
    assert SettingsManager(path).get("poll_interval_ms") == 30000


def test_corrupt_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{no es json", encoding="utf-8")
    settings = SettingsManager(path)
    assert settings.get("request_timeout_s") == 5.0


def test_env_url_wins_over_saved_file(tmp_path, monkeypatch):
    path = tmp_path / "settings.json"
    monkeypatch.delenv("TERRARIO_URL", raising=False)
    SettingsManager(path).save()

    monkeypatch.setenv("TERRARIO_URL", "http://10.0.0.9")
    settings = SettingsManager(path)
    assert settings.get("device_url") == "http://10.0.0.9"

    # el valor del entorno no se escribe en el fichero
    settings.save()
    assert json.loads(path.read_text(encoding="utf-8"))["device_url"] == DEFAULT_DEVICE_URL


@pytest.mark.parametrize(
    "stored, expected",
    [(1000, 5000), (30000, 30000), (10**9, 3600 * 1000), ("rápido", 60000)],
)
def test_poll_interval_is_clamped_to_window_range(tmp_path, stored, expected):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"poll_interval_ms": stored}), encoding="utf-8")
    assert SettingsManager(path).poll_interval_ms() == expected
