"""
Small reusable widgets for the monitor window.
"""

from __future__ import annotations

from PySide6.QtWidgets import QFrame, QLabel, QProgressBar, QPushButton, QVBoxLayout


class Card(QFrame):
    """Rounded container."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("Card")
        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(16, 16, 16, 16)
        self.layout.setSpacing(10)


class PrimaryButton(QPushButton):
    def __init__(self, text: str = "", parent=None):
        super().__init__(text, parent)
        self.setObjectName("PrimaryButton")


class SecondaryButton(QPushButton):
    def __init__(self, text: str = "", parent=None):
        super().__init__(text, parent)
        self.setObjectName("SecondaryButton")


class StatusPill(QLabel):
    """Status indicator pill ("RUNNING" / "STOPPED")."""

    def __init__(self, text: str = "", active: bool = False, parent=None):
        super().__init__(text, parent)
        self.set_active(active)

    def set_active(self, active: bool) -> None:
        self.setObjectName("StatusPillActive" if active else "StatusPill")
        # Object-name selectors only re-apply after a repolish
        self.style().unpolish(self)
        self.style().polish(self)


class FatigueBar(QProgressBar):
    """Fatigue level, clamped to 0-100 for display."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("FatigueBar")
        self.setRange(0, 100)
        self.setTextVisible(False)

    def set_percent(self, percent: float) -> None:
        self.setValue(int(max(0.0, min(100.0, percent))))
