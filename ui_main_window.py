# ui_main_window.py
from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import List

from PySide6.QtWidgets import (
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QFormLayout,
    QGroupBox,
    QPushButton,
    QFileDialog,
    QMessageBox,
    QLabel,
    QLineEdit,
    QCheckBox,
    QStatusBar,
    QSpinBox,
    QDoubleSpinBox,
    QFrame,
    QSizePolicy,
    QTableWidget,
    QTableWidgetItem,
    QHeaderView,
    QAbstractItemView,
)
from PySide6.QtCore import QTimer, Qt

from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.figure import Figure

from database import Database
from device_client import DeviceError, TerrarioClient
from export import export_to_excel
from models import Reading
from presentation import (
    CHART_HEIGHT,
    CHART_WIDTH,
    chart_series,
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
from settings import MAX_POLL_INTERVAL_MS, MIN_POLL_INTERVAL_MS, SettingsManager

logger = logging.getLogger(__name__)

TEMP_COLOR = "#ff9500"
HUM_COLOR = "#007aff"


class MainWindow(QMainWindow):
    def __init__(
        self,
        client: TerrarioClient,
        db: Database,
        settings: SettingsManager,
        parent=None,
    ) -> None:
        super().__init__(parent)
        self.client = client
        self.db = db
        self.settings = settings

        self.setWindowTitle(f"Terrario - {client.base_url}")

        self.readings: List[Reading] = []

        # Timer de sondeo; cada ciclo es síncrono, así que nunca se solapan
        self.timer = QTimer(self)
        self.timer.setInterval(self.settings.poll_interval_ms())
        self.timer.timeout.connect(self.refresh_all)

        # ===================== LAYOUT PRINCIPAL =====================
        central = QWidget(self)
        self.setCentralWidget(central)
        main_layout = QVBoxLayout(central)
        main_layout.setContentsMargins(6, 6, 6, 6)
        main_layout.setSpacing(8)

        # --------- BARRA SUPERIOR: ACCIONES RÁPIDAS ----------
        top_layout = QHBoxLayout()
        top_layout.setSpacing(10)

        self.btn_refresh = QPushButton("🔄 Actualizar ahora")
        self.btn_sync = QPushButton("🕒 Sincronizar hora")
        self.btn_export = QPushButton("📤 Exportar histórico")
        self.dark_mode_check = QCheckBox("🌙 Modo oscuro")

        self.btn_refresh.clicked.connect(self.refresh_all)
        self.btn_sync.clicked.connect(self.request_ntp_sync)
        self.btn_export.clicked.connect(self.export_excel)
        self.dark_mode_check.stateChanged.connect(self.toggle_dark_mode)

        for btn in (self.btn_refresh, self.btn_sync, self.btn_export):
            btn.setCursor(Qt.PointingHandCursor)
            btn.setMinimumHeight(30)

        lbl_interval = QLabel("Intervalo (s):")
        self.spin_interval = QSpinBox()
        self.spin_interval.setRange(
            MIN_POLL_INTERVAL_MS // 1000, MAX_POLL_INTERVAL_MS // 1000
        )
        self.spin_interval.setSingleStep(5)
        self.spin_interval.setValue(self.timer.interval() // 1000)
        self.spin_interval.setMinimumWidth(80)
        self.spin_interval.setAlignment(Qt.AlignRight)
        self.spin_interval.valueChanged.connect(self._change_interval)

        top_layout.addWidget(self.btn_refresh)
        top_layout.addWidget(self.btn_sync)
        top_layout.addSpacing(20)
        top_layout.addWidget(lbl_interval)
        top_layout.addWidget(self.spin_interval)
        top_layout.addStretch()
        top_layout.addWidget(self.btn_export)
        top_layout.addWidget(self.dark_mode_check)
        main_layout.addLayout(top_layout)

        # --------- PANEL DE INDICADORES ----------
        indicators_frame = QFrame()
        indicators_frame.setFrameShape(QFrame.StyledPanel)
        indicators_frame.setObjectName("indicatorsFrame")
        indicators_layout = QHBoxLayout(indicators_frame)
        indicators_layout.setContentsMargins(10, 6, 10, 6)
        indicators_layout.setSpacing(20)

        self.lbl_temp, self.lbl_temp_stats = self._add_indicator(
            indicators_layout, "Temperatura", "-- °C", with_stats=True
        )
        self.lbl_hum, self.lbl_hum_stats = self._add_indicator(
            indicators_layout, "Humedad", "-- %", with_stats=True
        )
        self.lbl_setpoint, _ = self._add_indicator(
            indicators_layout, "Setpoint", "-- °C"
        )
        self.lbl_lamp, _ = self._add_indicator(indicators_layout, "Lámpara", "—")

        main_layout.addWidget(indicators_frame)

        # --------- FORMULARIOS: SETPOINT / WI-FI / RED ----------
        forms_layout = QHBoxLayout()
        forms_layout.setSpacing(10)

        setpoint_box = QGroupBox("Temperatura objetivo")
        setpoint_form = QFormLayout(setpoint_box)
        self.spin_setpoint = QDoubleSpinBox()
        self.spin_setpoint.setRange(0.0, 50.0)
        self.spin_setpoint.setDecimals(1)
        self.spin_setpoint.setSingleStep(0.5)
        self.spin_setpoint.setSuffix(" °C")
        self.btn_setpoint = QPushButton("Aplicar")
        self.btn_setpoint.clicked.connect(self.submit_setpoint)
        setpoint_form.addRow("Valor:", self.spin_setpoint)
        setpoint_form.addRow(self.btn_setpoint)

        wifi_box = QGroupBox("Wi-Fi del controlador")
        wifi_form = QFormLayout(wifi_box)
        self.edit_ssid = QLineEdit()
        self.edit_password = QLineEdit()
        self.edit_password.setEchoMode(QLineEdit.Password)
        self.btn_wifi = QPushButton("Enviar")
        self.btn_wifi.clicked.connect(self.submit_wifi)
        wifi_form.addRow("SSID:", self.edit_ssid)
        wifi_form.addRow("Contraseña:", self.edit_password)
        wifi_form.addRow(self.btn_wifi)

        net_box = QGroupBox("Red")
        net_form = QFormLayout(net_box)
        self.lbl_net_status = QLabel("—")
        self.lbl_net_time = QLabel("—")
        self.lbl_net_ssid = QLabel("—")
        net_form.addRow("Estado:", self.lbl_net_status)
        net_form.addRow("Hora:", self.lbl_net_time)
        net_form.addRow("SSID:", self.lbl_net_ssid)

        for btn in (self.btn_setpoint, self.btn_wifi):
            btn.setCursor(Qt.PointingHandCursor)

        forms_layout.addWidget(setpoint_box)
        forms_layout.addWidget(wifi_box)
        forms_layout.addWidget(net_box)
        main_layout.addLayout(forms_layout)

        # --------- TABLA + GRÁFICA ----------
        data_layout = QHBoxLayout()

        self.table = QTableWidget(0, 4)
        self.table.setHorizontalHeaderLabels(["Fecha", "Hora", "Temp (°C)", "Hum (%)"])
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.table.verticalHeader().setVisible(False)
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.table.setMinimumWidth(320)

        self.figure = Figure(figsize=(7, 4))
        self.canvas = FigureCanvas(self.figure)
        self.canvas.setSizePolicy(
            QSizePolicy.Expanding,
            QSizePolicy.Expanding,
        )
        self.ax = self.figure.add_subplot(1, 1, 1)
        self._clear_chart()

        data_layout.addWidget(self.table, 1)
        data_layout.addWidget(self.canvas, 2)
        main_layout.addLayout(data_layout)

        # --------- LABEL INFERIOR ----------
        self.info_label = QLabel(f"Controlador: {client.base_url}")
        self.info_label.setStyleSheet("color: gray;")
        main_layout.addWidget(self.info_label)

        # --------- STATUS BAR ----------
        status = QStatusBar()
        self.setStatusBar(status)

        # Tema inicial
        if self.settings.get("dark_mode", False):
            self.dark_mode_check.setChecked(True)
            self._apply_dark_palette()
        else:
            self._apply_light_palette()

        # Primer sondeo cuando la ventana ya esté pintada
        QTimer.singleShot(0, self.refresh_all)
        self.timer.start()

    def _add_indicator(
        self, layout: QHBoxLayout, title: str, initial: str, with_stats: bool = False
    ):
        box = QVBoxLayout()
        title_label = QLabel(title)
        title_label.setAlignment(Qt.AlignCenter)
        title_label.setStyleSheet("font-size: 14px; font-weight: 600;")

        value_label = QLabel(initial)
        value_label.setAlignment(Qt.AlignCenter)
        value_label.setObjectName("indicatorValue")

        box.addWidget(title_label)
        box.addWidget(value_label)

        stats_label = None
        if with_stats:
            stats_label = QLabel(stats_text([]))
            stats_label.setAlignment(Qt.AlignCenter)
            box.addWidget(stats_label)

        layout.addLayout(box)
        return value_label, stats_label

    # ===================== SONDEO =====================
    def refresh_all(self) -> None:
        # cada consulta falla por separado, como en el panel web
        ok_state = self._fetch_state()
        ok_today = self._fetch_today()
        ok_net = self._fetch_net_status()
        if ok_state and ok_today and ok_net:
            self.statusBar().showMessage("Datos actualizados.", 2000)

    def _poll_failed(self, what: str, error: DeviceError) -> None:
        logger.warning("No se pudo obtener %s: %s", what, error)
        self.statusBar().showMessage(f"Error al obtener {what}: {error}", 5000)

    def _change_interval(self, value: int) -> None:
        interval_ms = value * 1000
        self.timer.setInterval(interval_ms)
        self.settings.set("poll_interval_ms", interval_ms)
        self.statusBar().showMessage(f"Intervalo de actualización: {value} s", 2000)

    def _fetch_state(self) -> bool:
        try:
            state = self.client.get_state()
        except DeviceError as e:
            self._poll_failed("el estado", e)
            return False

        self.lbl_temp.setText(format_temperature(state.temperature))
        self.lbl_hum.setText(format_humidity(state.humidity))
        self.lbl_setpoint.setText(format_setpoint(state.target))
        self.lbl_lamp.setText(lamp_label(state.lamp_on))
        # no pisar lo que el usuario está escribiendo
        if not self.spin_setpoint.hasFocus():
            self.spin_setpoint.setValue(state.target)
        return True

    def _fetch_today(self) -> bool:
        try:
            readings = self.client.get_today()
        except DeviceError as e:
            self._poll_failed("las lecturas de hoy", e)
            return False

        self.readings = readings
        self._update_table()
        self._update_stats()
        self._update_chart()

        try:
            inserted = self.db.insert_readings(readings)
        except sqlite3.Error:
            logger.exception("No se pudo guardar el histórico")
            self.statusBar().showMessage("Error al guardar el histórico local.", 5000)
        else:
            logger.debug("%d lecturas nuevas en el histórico", inserted)
        return True

    def _fetch_net_status(self) -> bool:
        try:
            status = self.client.get_net_status()
        except DeviceError as e:
            self._poll_failed("el estado de red", e)
            return False

        self.lbl_net_status.setText(connection_label(status))
        self.lbl_net_time.setText(clock_label(status))
        self.lbl_net_ssid.setText(ssid_label(status))
        if status.ssid and not self.edit_ssid.hasFocus():
            self.edit_ssid.setText(status.ssid)
        return True

    # ===================== TABLA + STATS =====================
    def _update_table(self) -> None:
        rows = table_rows(self.readings)
        self.table.setRowCount(len(rows))
        for row_idx, row in enumerate(rows):
            for col_idx, text in enumerate(row):
                item = QTableWidgetItem(text)
                item.setTextAlignment(Qt.AlignCenter)
                self.table.setItem(row_idx, col_idx, item)
        if rows:
            self.table.scrollToBottom()

    def _update_stats(self) -> None:
        self.lbl_temp_stats.setText(stats_text([r.temperature for r in self.readings]))
        self.lbl_hum_stats.setText(stats_text([r.humidity for r in self.readings]))

    # ===================== GRÁFICA =====================
    def _clear_chart(self) -> None:
        self.ax.clear()
        # mismo sistema de coordenadas que el SVG del panel web (y hacia abajo)
        self.ax.set_xlim(0, CHART_WIDTH)
        self.ax.set_ylim(CHART_HEIGHT, 0)
        self.ax.set_yticks([])
        self.ax.set_xticks([])
        self.ax.grid(True, alpha=0.3)

    def _update_chart(self) -> None:
        self._clear_chart()
        series = chart_series(self.readings)
        if series:
            xs, ys = zip(*series.temperature)
            self.ax.plot(xs, ys, color=TEMP_COLOR, marker="o", markersize=3, label="Temperatura")
            xs, ys = zip(*series.humidity)
            self.ax.plot(xs, ys, color=HUM_COLOR, marker="o", markersize=3, label="Humedad")

            first, last = self.readings[0], self.readings[-1]
            self.ax.set_xticks([series.temperature[0][0], series.temperature[-1][0]])
            self.ax.set_xticklabels([first.time, last.time])
            self.ax.legend(loc="upper right", fontsize="small")
        self.canvas.draw()

    # ===================== ACCIONES DEL USUARIO =====================
    def submit_setpoint(self) -> None:
        value = self.spin_setpoint.value()
        try:
            self.client.set_setpoint(value)
        except DeviceError as e:
            logger.exception("Fallo al enviar el setpoint")
            QMessageBox.critical(self, "Error", f"Fallo al actualizar el setpoint:\n{e}")
            return

        self.spin_setpoint.clearFocus()
        self._fetch_state()
        QMessageBox.information(self, "Setpoint", "Setpoint actualizado.")

    def submit_wifi(self) -> None:
        ssid = self.edit_ssid.text().strip()
        password = self.edit_password.text()
        if not ssid:
            QMessageBox.warning(self, "Wi-Fi", "Introduce el SSID de la red.")
            return

        try:
            self.client.set_wifi(ssid, password)
        except DeviceError as e:
            logger.exception("Fallo al enviar la configuración Wi-Fi")
            QMessageBox.critical(
                self, "Error", f"Fallo al enviar la configuración de Wi-Fi:\n{e}"
            )
            return

        self.edit_password.clear()
        self._fetch_net_status()
        QMessageBox.information(
            self,
            "Wi-Fi",
            "Configuración de Wi-Fi enviada. El ESP32 intentará conectar.",
        )

    def request_ntp_sync(self) -> None:
        try:
            self.client.request_ntp_sync()
        except DeviceError as e:
            logger.exception("Fallo al solicitar la sincronización NTP")
            QMessageBox.critical(
                self, "Error", f"Fallo al solicitar la sincronización:\n{e}"
            )
            return

        self._fetch_net_status()
        QMessageBox.information(self, "Hora", "Solicitud de sincronización enviada.")

    # ===================== EXPORTAR A EXCEL =====================
    def export_excel(self) -> None:
        output_str, _ = QFileDialog.getSaveFileName(
            self,
            "Exportar histórico a Excel",
            "terrario.xlsx",
            "Excel (*.xlsx)",
        )
        if not output_str:
            return

        try:
            count = export_to_excel(self.db, Path(output_str))
        except (OSError, ValueError) as e:
            logger.exception("Fallo al exportar a %s", output_str)
            QMessageBox.critical(
                self, "Error", f"No se pudo exportar a Excel:\n{e}"
            )
            return

        QMessageBox.information(
            self,
            "Exportación",
            f"{count} lecturas exportadas a:\n{output_str}",
        )

    def closeEvent(self, event) -> None:
        self.timer.stop()
        super().closeEvent(event)

    # ===================== MODO OSCURO / CLARO =====================
    def toggle_dark_mode(self, state: int) -> None:
        enabled = Qt.CheckState(state) == Qt.Checked
        self.settings.set("dark_mode", enabled)
        if enabled:
            self._apply_dark_palette()
        else:
            self._apply_light_palette()

    def _apply_dark_palette(self) -> None:
        dark_style = """
        QMainWindow {
            background-color: #1b1f1b;
            color: #f0f0f0;
        }
        QWidget {
            background-color: #262b26;
            color: #f0f0f0;
        }
        QSpinBox, QDoubleSpinBox, QLineEdit {
            background-color: #353b35;
            color: #ffffff;
            border: 1px solid #5a625a;
            border-radius: 4px;
            padding: 2px 6px;
            min-width: 80px;
        }
        QPushButton {
            background-color: #353b35;
            color: #ffffff;
            border: 1px solid #5a625a;
            border-radius: 4px;
            padding: 4px 10px;
        }
        QPushButton:hover {
            background-color: #46724a;
        }
        QGroupBox {
            border: 1px solid #4a524a;
            border-radius: 6px;
            margin-top: 10px;
            padding-top: 6px;
        }
        QHeaderView::section {
            background-color: #353b35;
            color: #f0f0f0;
        }
        #indicatorsFrame {
            background-color: #353b35;
            border-radius: 6px;
        }
        #indicatorValue {
            font-size: 22px;
            font-weight: 700;
            color: #8fd694;
        }
        """
        self.setStyleSheet(dark_style)

    def _apply_light_palette(self) -> None:
        light_style = """
        QMainWindow {
            background-color: #e6ebe3;
            color: #000000;
        }
        QWidget {
            background-color: #ffffff;
            color: #000000;
        }
        QSpinBox, QDoubleSpinBox, QLineEdit {
            background-color: #ffffff;
            color: #000000;
            border: 1px solid #8a9a88;
            border-radius: 4px;
            padding: 2px 6px;
            min-width: 80px;
        }
        QPushButton {
            background-color: #ffffff;
            color: #000000;
            border: 1px solid #a8b5a5;
            border-radius: 4px;
            padding: 4px 10px;
        }
        QPushButton:hover {
            background-color: #e4f2e1;
        }
        QGroupBox {
            border: 1px solid #c8d2c5;
            border-radius: 6px;
            margin-top: 10px;
            padding-top: 6px;
        }
        #indicatorsFrame {
            background-color: #f4f8f2;
            border-radius: 6px;
        }
        #indicatorValue {
            font-size: 22px;
            font-weight: 700;
            color: #2e7d32;
        }
        """
        self.setStyleSheet(light_style)
