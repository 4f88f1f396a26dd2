"""
Main window: fatigue readout, start/stop, limits, credential and tray menu.
"""

from __future__ import annotations

import logging
from PySide6.QtCore import QTimer, QUrl
from PySide6.QtGui import QAction, QCloseEvent, QDesktopServices
from PySide6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMenu,
    QStyle,
    QSystemTrayIcon,
    QVBoxLayout,
    QWidget,
)

from packages.shared.config import AppConfig, parse_limit_input
from packages.shared.store import ConfigStore
from packages.core.alerts.channel import PAVLOK_API_KEY_HELP_URL, PavlokAlertChannel, next_stimulus_mode
from packages.core.monitor.fatigue_monitor import FatigueSessionMonitor
from packages.core.monitor.idle_detector import create_idle_detector

from .theme import Theme
from .components import Card, FatigueBar, PrimaryButton, SecondaryButton, StatusPill

log = logging.getLogger(__name__)

MAX_LOG_LINES = 200


class MainWindow(QMainWindow):
    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("Fatigue Monitor")
        self.resize(380, 560)

        self.theme = Theme("dark")

        self.store = ConfigStore()
        self.cfg: AppConfig = self.store.load()

        self.monitor = FatigueSessionMonitor(
            config=self.cfg.to_monitor_config(),
            detector=create_idle_detector(),
            channel=PavlokAlertChannel(),
        )
        self.monitor.set_api_token(self.cfg.api_token)
        self.monitor.set_stimulus_mode(self.cfg.stimulus_mode)
        self.monitor.on_event(self._on_monitor_event)
        self.monitor.on_error(self._on_monitor_error)

        self._build_ui()
        self._build_tray()
        self.setStyleSheet(self.theme.get_stylesheet())
        self._load_to_ui()

        self._refresh_timer = QTimer(self)
        self._refresh_timer.timeout.connect(self._refresh_status)
        self._refresh_timer.start(500)

    def _build_ui(self) -> None:
        root = QWidget()
        self.setCentralWidget(root)
        layout = QVBoxLayout(root)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(14)

        header = QHBoxLayout()
        title = QLabel("Fatigue Monitor")
        title.setObjectName("TitleLabel")
        header.addWidget(title)
        header.addStretch()
        self.status_pill = StatusPill("STOPPED", active=False)
        header.addWidget(self.status_pill)
        layout.addLayout(header)

        # Fatigue readout
        readout = Card()
        self.fatigue_number = QLabel("0")
        self.fatigue_number.setObjectName("FatigueNumber")
        readout.layout.addWidget(self.fatigue_number)
        self.fatigue_bar = FatigueBar()
        readout.layout.addWidget(self.fatigue_bar)
        self.warning_label = QLabel("API key invalid: alert not sent")
        self.warning_label.setObjectName("WarningLabel")
        self.warning_label.setVisible(False)
        readout.layout.addWidget(self.warning_label)

        controls = QHBoxLayout()
        self.btn_toggle = PrimaryButton("Start")
        self.btn_toggle.setCheckable(True)
        self.btn_toggle.clicked.connect(self._toggle_monitoring)
        controls.addWidget(self.btn_toggle)
        self.btn_mode = SecondaryButton()
        self.btn_mode.clicked.connect(self._cycle_mode)
        controls.addWidget(self.btn_mode)
        self.btn_reset = SecondaryButton("Reset")
        self.btn_reset.clicked.connect(self._reset_fatigue)
        controls.addWidget(self.btn_reset)
        readout.layout.addLayout(controls)
        layout.addWidget(readout)

        # Limits and credential
        settings = Card()
        limits = QHBoxLayout()
        work_label = QLabel("Work (min)")
        work_label.setObjectName("BodyLabel")
        limits.addWidget(work_label)
        self.work_input = QLineEdit()
        self.work_input.setMaximumWidth(56)
        self.work_input.textEdited.connect(lambda _t: self._on_limit_edited(commit=False))
        self.work_input.editingFinished.connect(lambda: self._on_limit_edited(commit=True))
        limits.addWidget(self.work_input)
        break_label = QLabel("Break (min)")
        break_label.setObjectName("BodyLabel")
        limits.addWidget(break_label)
        self.break_input = QLineEdit()
        self.break_input.setMaximumWidth(56)
        self.break_input.textEdited.connect(lambda _t: self._on_limit_edited(commit=False))
        self.break_input.editingFinished.connect(lambda: self._on_limit_edited(commit=True))
        limits.addWidget(self.break_input)
        limits.addStretch()
        settings.layout.addLayout(limits)

        self.api_input = QLineEdit()
        self.api_input.setPlaceholderText("Pavlok API token")
        self.api_input.setEchoMode(QLineEdit.EchoMode.Password)
        self.api_input.textEdited.connect(self._on_token_edited)
        self.api_input.editingFinished.connect(self._save_token)
        settings.layout.addWidget(self.api_input)

        hint = QLabel("Limits are 1-99 minutes. Rest for the break limit to clear fatigue.")
        hint.setObjectName("HintLabel")
        hint.setWordWrap(True)
        settings.layout.addWidget(hint)
        layout.addWidget(settings)

        self.events = QListWidget()
        layout.addWidget(self.events, 1)

    def _build_tray(self) -> None:
        self.tray = QSystemTrayIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_MessageBoxWarning), self)
        menu = QMenu(self)

        api_key_action = QAction("Get API key", self)
        api_key_action.triggered.connect(self._open_api_key_help)
        menu.addAction(api_key_action)

        reset_action = QAction("Reset fatigue", self)
        reset_action.triggered.connect(self._reset_fatigue)
        menu.addAction(reset_action)

        show_action = QAction("Show", self)
        show_action.triggered.connect(self.showNormal)
        menu.addAction(show_action)

        quit_action = QAction("Quit", self)
        quit_action.triggered.connect(QApplication.quit)
        menu.addAction(quit_action)

        self.tray.setContextMenu(menu)
        self.tray.setToolTip("Fatigue Monitor")
        if QSystemTrayIcon.isSystemTrayAvailable():
            self.tray.show()

    def _load_to_ui(self) -> None:
        self.work_input.setText(str(self.cfg.work_limit_minutes))
        self.break_input.setText(str(self.cfg.break_limit_minutes))
        self.api_input.setText(self.cfg.api_token)
        self.btn_mode.setText(self.cfg.stimulus_mode.capitalize())
        self._refresh_status()

    def _refresh_status(self) -> None:
        running = self.monitor.is_running()
        self.status_pill.setText("RUNNING" if running else "STOPPED")
        self.status_pill.set_active(running)
        self.btn_toggle.setChecked(running)
        self.btn_toggle.setText("Stop" if running else "Start")

        percent = self.monitor.fatigue_percent()
        self.fatigue_number.setText(f"{round(percent)}")
        self.fatigue_bar.set_percent(percent)

        warn = self.monitor.api_warning()
        self.warning_label.setVisible(warn)
        tooltip = "API key invalid: alert not sent" if warn else ("Stop" if running else "Start")
        self.btn_toggle.setToolTip(tooltip)

    def _append_event(self, line: str) -> None:
        self.events.insertItem(0, QListWidgetItem(line))
        while self.events.count() > MAX_LOG_LINES:
            self.events.takeItem(self.events.count() - 1)

    def _toggle_monitoring(self) -> None:
        was_running = self.monitor.is_running()
        running = self.monitor.toggle()
        if running:
            self._append_event("Monitoring started.")
        elif was_running:
            self._append_event("Monitoring stopped.")
        self._refresh_status()

    def _open_api_key_help(self) -> None:
        if not QDesktopServices.openUrl(QUrl(PAVLOK_API_KEY_HELP_URL)):
            self._append_event(f"Open {PAVLOK_API_KEY_HELP_URL} to create an API key.")

    def _cycle_mode(self) -> None:
        mode = next_stimulus_mode(self.cfg.stimulus_mode)
        self.monitor.set_stimulus_mode(mode)
        self.cfg = self.store.set("stimulus_mode", mode)
        self.btn_mode.setText(mode.capitalize())

    def _reset_fatigue(self) -> None:
        self.monitor.reset_fatigue()
        self._append_event("Fatigue reset.")
        self._refresh_status()

    def _on_limit_edited(self, commit: bool) -> None:
        work = parse_limit_input(self.work_input.text(), force_clamp=commit)
        brk = parse_limit_input(self.break_input.text(), force_clamp=commit)
        if commit:
            self.work_input.setText(str(work))
            self.break_input.setText(str(brk))
            self.store.set("work_limit_minutes", work)
            self.cfg = self.store.set("break_limit_minutes", brk)
            self.monitor.update_config(self.cfg.to_monitor_config())
        else:
            live = self.cfg.to_monitor_config()
            live.update(work_limit_minutes=work, break_limit_minutes=brk)
            self.monitor.update_config(live)
        self._refresh_status()

    def _on_token_edited(self, text: str) -> None:
        self.monitor.set_api_token(text)
        self._refresh_status()

    def _save_token(self) -> None:
        token = self.api_input.text()
        if token == self.cfg.api_token:
            return
        self.cfg = self.store.set("api_token", token)
        self.monitor.set_api_token(token)
        self._refresh_status()

    def _on_monitor_event(self, evt: dict) -> None:
        def handle() -> None:
            t = evt.get("type")
            if t == "MINUTE_CLOSED":
                self._append_event(
                    f"{evt['at']} minute: {evt['active_seconds']}s active, fatigue {evt['fatigue']} ({evt['percent']:.0f}%)"
                )
            elif t == "ALERT_SENT":
                self._append_event(f"{evt['at']} alert sent ({evt['mode']})")
            elif t == "ALERT_SKIPPED":
                self._append_event(f"{evt['at']} alert skipped: no API token")
            elif t == "ALERT_FAILED":
                self._append_event(f"{evt['at']} alert failed: {evt['reason']}")
            self._refresh_status()

        QTimer.singleShot(0, handle)

    def _on_monitor_error(self, msg: str) -> None:
        def handle() -> None:
            self._append_event(f"ERROR: {msg}")
            log.error("Monitor error: %s", msg)
        QTimer.singleShot(0, handle)

    def closeEvent(self, event: QCloseEvent) -> None:
        self.monitor.stop()
        self.tray.hide()
        super().closeEvent(event)
