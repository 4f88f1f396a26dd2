from __future__ import annotations

from abc import ABC, abstractmethod


class IdleDetector(ABC):
    """Interface for reading how long the user has been idle."""

    @abstractmethod
    def idle_seconds(self) -> float:
        """Seconds since the last keyboard/mouse input. May raise on OS errors."""
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this detector reads a real input timer."""
        ...
