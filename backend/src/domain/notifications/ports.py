"""Notification port - outbound messages from the workflow.

Gateways are fire-and-forget from the engine's point of view: a gateway
raises TransientNotifyError on failure and the caller decides whether to
log or surface it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class NotificationMessage:
    """A rendered message ready for a mail relay."""
    recipients: List[str]
    subject: str
    html: str
    text: str
    template: str = "generic"

    def validate(self) -> None:
        if not self.recipients:
            raise ValueError("At least one recipient is required")
        if not self.subject:
            raise ValueError("Subject is required")

    def to_payload(self) -> Dict[str, Any]:
        """JSON-serializable form used when queueing the message."""
        return {
            "recipients": list(self.recipients),
            "subject": self.subject,
            "html": self.html,
            "text": self.text,
            "template": self.template,
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "NotificationMessage":
        return cls(
            recipients=list(payload["recipients"]),
            subject=payload["subject"],
            html=payload.get("html", ""),
            text=payload.get("text", ""),
            template=payload.get("template", "generic"),
        )


class NotificationPort(ABC):
    """Outbound notification gateway."""

    @abstractmethod
    def send(self, message: NotificationMessage) -> None:
        """Deliver or enqueue a message.

        Raises:
            TransientNotifyError: If the message could not be handed off
        """
        pass


@dataclass
class RecordingNotifier(NotificationPort):
    """Keeps messages in memory instead of sending them.

    Used for local development without a mail relay and in tests.
    """
    sent: List[NotificationMessage] = field(default_factory=list)

    def send(self, message: NotificationMessage) -> None:
        message.validate()
        self.sent.append(message)

    def templates(self) -> List[str]:
        return [message.template for message in self.sent]
