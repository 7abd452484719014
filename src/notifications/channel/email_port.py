"""Email channel port."""

from abc import ABC, abstractmethod


class EmailPort(ABC):
    @abstractmethod
    def send(self, to: str, subject: str, body: str, html_body: str | None = None) -> dict:
        """Send one message.

        Returns a dict with ``message_id``, ``status`` (``"sent"`` or
        ``"failed"``) and, on failure, ``error``.
        """
        ...
