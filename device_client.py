# device_client.py
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

import requests

from models import DeviceState, NetStatus, PayloadError, Reading, readings_from_json

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 5.0


class DeviceError(Exception):
    """Fallo al hablar con el controlador del terrario."""


class DeviceUnreachable(DeviceError):
    """No hubo respuesta HTTP (red caída, timeout, DNS...)."""


class DeviceResponseError(DeviceError):
    """El controlador respondió, pero con error o JSON inválido."""


class TerrarioClient:
    """
    Cliente de la API HTTP del ESP32 del terrario:

        GET  /api/state      -> estado actual (temp, umid, alvo, lampada)
        GET  /api/today      -> lecturas del día
        GET  /api/netstatus  -> estado Wi-Fi / NTP
        POST /api/setpoint   -> valor
        POST /api/wifi       -> ssid, senha
        GET  /api/ntpsync    -> fuerza sincronización de hora
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_S,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def close(self) -> None:
        self.session.close()

    # ===================== HTTP =====================
    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _request(
        self,
        method: str,
        path: str,
        data: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        url = self._url(path)
        logger.debug("%s %s", method, url)
        try:
            resp = self.session.request(method, url, data=data, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise DeviceUnreachable(f"{method} {path}: {e}") from e

        if not resp.ok:
            raise DeviceResponseError(
                f"{method} {path}: HTTP {resp.status_code}"
            )
        return resp

    def _get_json(self, path: str) -> Any:
        resp = self._request("GET", path)
        try:
            return resp.json()
        except ValueError as e:
            raise DeviceResponseError(f"GET {path}: respuesta no es JSON") from e

    # ===================== LECTURAS =====================
    def get_state(self) -> DeviceState:
        data = self._get_json("/api/state")
        try:
            return DeviceState.from_json(data)
        except PayloadError as e:
            raise DeviceResponseError(f"/api/state: {e}") from e

    def get_today(self) -> List[Reading]:
        data = self._get_json("/api/today")
        try:
            return readings_from_json(data)
        except PayloadError as e:
            raise DeviceResponseError(f"/api/today: {e}") from e

    def get_net_status(self) -> NetStatus:
        data = self._get_json("/api/netstatus")
        try:
            return NetStatus.from_json(data)
        except PayloadError as e:
            raise DeviceResponseError(f"/api/netstatus: {e}") from e

    # ===================== CONFIGURACIÓN =====================
    def set_setpoint(self, value: float) -> None:
        self._request("POST", "/api/setpoint", data={"valor": f"{value:.1f}"})
        logger.info("Setpoint enviado: %.1f °C", value)

    def set_wifi(self, ssid: str, password: str) -> None:
        # el firmware espera el campo "senha", no "password"
        self._request("POST", "/api/wifi", data={"ssid": ssid, "senha": password})
        logger.info("Configuración Wi-Fi enviada (ssid=%s)", ssid)

    def request_ntp_sync(self) -> None:
        self._request("GET", "/api/ntpsync")
        logger.info("Sincronización NTP solicitada")
