"""Fake email adapter — keeps receipts in memory for assertions."""

from uuid import uuid4

from notifications.channel.email_port import EmailPort


class FakeEmailAdapter(EmailPort):
    """Records outgoing mail instead of sending it.

    ``configure`` can make it report a failed delivery, or raise outright the
    way a provider client does when the network is down.
    """

    def __init__(self):
        self.outbox: list[dict] = []
        self.should_succeed = True
        self.raise_on_send = False
        self.failure_reason = "Email delivery failed"

    def configure(self, should_succeed: bool = True, raise_on_send: bool = False, failure_reason: str = "Email delivery failed"):
        self.should_succeed = should_succeed
        self.raise_on_send = raise_on_send
        self.failure_reason = failure_reason

    def send(self, to: str, subject: str, body: str, html_body: str | None = None) -> dict:
        if self.raise_on_send:
            raise ConnectionError(self.failure_reason)
        if not self.should_succeed:
            return {"message_id": None, "status": "failed", "error": self.failure_reason}

        message_id = f"email-{uuid4().hex[:12]}"
        self.outbox.append(
            {
                "message_id": message_id,
                "to": to,
                "subject": subject,
                "body": body,
                "html_body": html_body,
            }
        )
        return {"message_id": message_id, "status": "sent"}

    def sent_to(self, recipient: str) -> list[dict]:
        return [message for message in self.outbox if message["to"] == recipient]
