from __future__ import annotations

import pytest
import requests

from device_client import DeviceError, DeviceResponseError, DeviceUnreachable, TerrarioClient


class FakeResponse:
    def __init__(self, payload=None, status_code=200, invalid_json=False):
        self._payload = payload
        self.status_code = status_code
        self._invalid_json = invalid_json

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse()
        self.error = error
        self.calls = []
        self.closed = False

    def request(self, method, url, data=None, timeout=None):
        self.calls.append({"method": method, "url": url, "data": data, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


def _client(session):
    return TerrarioClient("http://terrario.local/", timeout=2.5, session=session)


def test_get_state_hits_endpoint_with_timeout():
    session = FakeSession(FakeResponse({"temp": 24.0, "umid": 65.5, "alvo": 26.0, "lampada": 1}))
    state = _client(session).get_state()

    assert state.lamp_on is True
    assert state.target == 26.0
    assert session.calls == [
        {"method": "GET", "url": "http://terrario.local/api/state", "data": None, "timeout": 2.5}
    ]


def test_get_today_returns_readings():
    session = FakeSession(
        FakeResponse(
            [
                {"data": "0000-00-00", "hora": "07:00", "temp": 23.1, "umid": 80.0},
                {"data": "2024-05-01", "hora": "07:10", "temp": 23.4, "umid": 79.0},
            ]
        )
    )
    readings = _client(session).get_today()

    assert [r.time for r in readings] == ["07:00", "07:10"]
    assert readings[0].date is None
    assert session.calls[0]["url"].endswith("/api/today")


def test_get_net_status():
    session = FakeSession(
        FakeResponse({"sta_connected": True, "sta_configured": True, "time_valid": True,
                      "datetime": "2024-05-01 10:00:00", "ssid": "casa"})
    )
    status = _client(session).get_net_status()
    assert status.sta_connected and status.ssid == "casa"
    assert session.calls[0]["url"] == "http://terrario.local/api/netstatus"


def test_set_setpoint_posts_form_field():
    session = FakeSession()
    _client(session).set_setpoint(26.5)

    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "http://terrario.local/api/setpoint"
    assert call["data"] == {"valor": "26.5"}


def test_set_wifi_uses_firmware_field_names():
    session = FakeSession()
    _client(session).set_wifi("casa", "segredo")
    assert session.calls[0]["data"] == {"ssid": "casa", "senha": "segredo"}
    assert session.calls[0]["url"].endswith("/api/wifi")


def test_ntp_sync_is_a_get():
    session = FakeSession()
    _client(session).request_ntp_sync()
    assert session.calls[0]["method"] == "GET"
    assert session.calls[0]["url"].endswith("/api/ntpsync")


def test_transport_error_becomes_unreachable():
    session = FakeSession(error=requests.exceptions.ConnectTimeout("timed out"))
    with pytest.raises(DeviceUnreachable):
        _client(session).get_state()


def test_http_error_status_is_reported():
    session = FakeSession(FakeResponse(status_code=500))
    with pytest.raises(DeviceResponseError, match="HTTP 500"):
        _client(session).set_setpoint(25.0)


def test_invalid_json_is_reported():
    session = FakeSession(FakeResponse(invalid_json=True))
    with pytest.raises(DeviceResponseError):
        _client(session).get_today()


def test_malformed_payload_is_a_device_error():
    session = FakeSession(FakeResponse({"temp": 20.0}))
    with pytest.raises(DeviceError, match="/api/state"):
        _client(session).get_state()


def test_close_releases_session():
    session = FakeSession()
    _client(session).close()
    assert session.closed
