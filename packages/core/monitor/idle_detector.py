"""
Idle-time detectors.

Windows reads the system input timer through GetLastInputInfo. Other
platforms get a detector that reports itself unavailable; the monitor will
not start on it.
"""

from __future__ import annotations

import ctypes
import logging
import sys

from .detector import IdleDetector

log = logging.getLogger(__name__)


class _LastInputInfo(ctypes.Structure):
    _fields_ = [("cbSize", ctypes.c_uint), ("dwTime", ctypes.c_uint)]


class WinIdleDetector(IdleDetector):
    """Idle time from GetLastInputInfo / GetTickCount (milliseconds since boot)."""

    def __init__(self) -> None:
        self._user32 = ctypes.windll.user32  # type: ignore[attr-defined]
        self._kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]

    def idle_seconds(self) -> float:
        info = _LastInputInfo()
        info.cbSize = ctypes.sizeof(_LastInputInfo)
        if not self._user32.GetLastInputInfo(ctypes.byref(info)):
            return 0.0
        # Both counters are 32-bit and wrap after ~49.7 days
        ticks = self._kernel32.GetTickCount() & 0xFFFFFFFF
        idle_ms = (ticks - info.dwTime) & 0xFFFFFFFF
        return idle_ms / 1000.0

    def is_available(self) -> bool:
        return True


class UnsupportedIdleDetector(IdleDetector):
    """Placeholder for platforms without an idle timer."""

    def __init__(self, platform: str = sys.platform) -> None:
        self.platform = platform

    def idle_seconds(self) -> float:
        raise RuntimeError(f"No idle timer on {self.platform}")

    def is_available(self) -> bool:
        return False


def create_idle_detector() -> IdleDetector:
    if sys.platform == "win32":
        return WinIdleDetector()
    log.warning("No idle timer on %s, monitoring is unavailable", sys.platform)
    return UnsupportedIdleDetector()
