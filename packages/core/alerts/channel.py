from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Optional, Protocol

import requests

log = logging.getLogger(__name__)

PAVLOK_STIMULUS_URL = "https://api.pavlok.com/api/v5/stimulus/send"
PAVLOK_API_KEY_HELP_URL = "https://pavlok.readme.io/reference/intro/authentication"

STIMULUS_MODES = ("beep", "vibro", "zap")

AlertStatus = Literal["SENT", "ERROR", "FAILED"]

_AUTH_REJECTED_CODES = (401, 403)


@dataclass(frozen=True)
class AlertResult:
    """
    Outcome of one delivery attempt.

    SENT: acknowledged by the service. ERROR: the service answered with a
    non-success HTTP status (see status_code). FAILED: the request never got
    an answer (DNS, connection, timeout).
    """
    status: AlertStatus
    status_code: Optional[int] = None
    detail: str = ""

    @property
    def is_auth_rejected(self) -> bool:
        return self.status == "ERROR" and self.status_code in _AUTH_REJECTED_CODES

    def __str__(self) -> str:
        if self.status == "SENT":
            return "Sent"
        if self.status == "ERROR":
            return f"Error: {self.status_code}"
        return f"Failed: {self.detail}"


class AlertChannel(Protocol):
    def send(self, token: str, stimulus_kind: str) -> AlertResult:
        ...


def next_stimulus_mode(mode: str) -> str:
    try:
        idx = STIMULUS_MODES.index(mode)
    except ValueError:
        return STIMULUS_MODES[0]
    return STIMULUS_MODES[(idx + 1) % len(STIMULUS_MODES)]


def normalize_token(token: str) -> str:
    """Accept both a bare token and a pasted 'Bearer <token>' header value."""
    parts = token.strip().split()
    if len(parts) >= 2 and parts[0].lower() == "bearer":
        return parts[1]
    return token.strip()


def api_stimulus_type(stimulus_kind: str) -> str:
    if stimulus_kind in ("vibro", "vibration", "vibe"):
        return "vibe"
    if stimulus_kind == "zap":
        return "zap"
    return "beep"


def build_stimulus_payload(stimulus_kind: str, value: int = 100, reason: str = "Fatigue limit") -> dict:
    return {
        "stimulus": {
            "stimulusType": api_stimulus_type(stimulus_kind),
            "stimulusValue": value,
        },
        "reason": reason,
    }


class PavlokAlertChannel:
    """Delivers stimuli through the Pavlok cloud API."""

    def __init__(self, url: str = PAVLOK_STIMULUS_URL, timeout_seconds: float = 10.0) -> None:
        self.url = url
        self.timeout_seconds = timeout_seconds

    def send(self, token: str, stimulus_kind: str) -> AlertResult:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {normalize_token(token)}",
        }
        try:
            r = requests.post(
                self.url,
                json=build_stimulus_payload(stimulus_kind),
                headers=headers,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            log.warning("Stimulus request failed: %s", e)
            return AlertResult(status="FAILED", detail=str(e))

        if r.ok:
            return AlertResult(status="SENT", status_code=r.status_code)
        return AlertResult(status="ERROR", status_code=r.status_code, detail=r.reason or "")
