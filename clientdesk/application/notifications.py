"""
User-facing notifications ("toasts").

Every mutation outcome produces exactly one toast. Sinks are fire-and-forget:
they never raise back into the coordinator.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from typing import List

logger = logging.getLogger(__name__)

LEVEL_INFO = "info"
LEVEL_SUCCESS = "success"
LEVEL_ERROR = "error"


@dataclass(frozen=True)
class Toast:
    level: str
    message: str

    def to_dict(self) -> dict:
        return asdict(self)


class Notifier(ABC):
    @abstractmethod
    def notify(self, toast: Toast) -> None:
        ...

    def success(self, message: str) -> None:
        self.notify(Toast(LEVEL_SUCCESS, message))

    def error(self, message: str) -> None:
        self.notify(Toast(LEVEL_ERROR, message))


class LoggingNotifier(Notifier):
    """Default sink: toasts go to the application log."""

    def notify(self, toast: Toast) -> None:
        if toast.level == LEVEL_ERROR:
            logger.warning("toast[%s] %s", toast.level, toast.message)
        else:
            logger.info("toast[%s] %s", toast.level, toast.message)


class CollectingNotifier(LoggingNotifier):
    """Logs and keeps toasts in memory (per HTTP request, or for inspection in tests)."""

    def __init__(self):
        self.toasts: List[Toast] = []

    def notify(self, toast: Toast) -> None:
        super().notify(toast)
        self.toasts.append(toast)

    @property
    def last(self) -> Toast | None:
        return self.toasts[-1] if self.toasts else None
