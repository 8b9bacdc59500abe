"""Build notifications: desktop popups through plyer, or log-only."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from plyer import notification

from ..orchestrator.logging import get_logger
from ..orchestrator.utils import notify_setting


# Windows balloon tips reject longer messages
MAX_MESSAGE = 256


@dataclass(frozen=True)
class Notification:
    title: str
    message: str
    subtitle: Optional[str] = None
    error: bool = False


class LogNotifier:
    def __init__(self):
        self.logger = get_logger("stylepipe.notify")

    def notify(self, note: Notification) -> None:
        heading = f"{note.title} ({note.subtitle})" if note.subtitle else note.title
        level = logging.ERROR if note.error else logging.INFO
        self.logger.log(level, "%s: %s", heading, note.message)


class DesktopNotifier(LogNotifier):
    def __init__(self, app_name: str = "stylepipe", timeout: int = 5):
        super().__init__()
        self.app_name = app_name
        self.timeout = timeout

    def notify(self, note: Notification) -> None:
        super().notify(note)
        title = f"{note.title}: {note.subtitle}" if note.subtitle else note.title
        try:
            notification.notify(
                title=title,
                message=note.message[:MAX_MESSAGE],
                app_name=self.app_name,
                timeout=self.timeout,
            )
        except Exception as e:  # noqa: BLE001
            self.logger.warning("Desktop notification failed: %s", e)


def build_notifier(params: dict) -> LogNotifier:
    if notify_setting(params, "enabled"):
        return DesktopNotifier(app_name=notify_setting(params, "title"))
    return LogNotifier()
