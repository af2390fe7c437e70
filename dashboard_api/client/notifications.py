import logging

logger = logging.getLogger(__name__)


class Notifier:
    """Receives user-facing messages (toasts in the dashboard)."""

    def notify(self, title: str, description: str = "", variant: str = "default"):
        raise NotImplementedError


class LoggingNotifier(Notifier):
    def notify(self, title: str, description: str = "", variant: str = "default"):
        level = logging.ERROR if variant == "destructive" else logging.INFO
        logger.log(level, f"{title}: {description}" if description else title)


class RecordingNotifier(Notifier):
    """Keeps every message; handy for headless callers and tests"""

    def __init__(self):
        self.messages: list[dict] = []

    def notify(self, title: str, description: str = "", variant: str = "default"):
        self.messages.append({"title": title, "description": description, "variant": variant})
