from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from typing import List

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    to: str
    subject: str
    body: str


def welcome(name: str, email: str) -> Notification:
    return Notification(
        to=email,
        subject="Welcome to Postboard",
        body=f"Hi {name}, your account has been created.",
    )


class AbstractNotifier(abc.ABC):
    """Outbound messages to account holders."""

    @abc.abstractmethod
    def send(self, notification: Notification) -> None:
        raise NotImplementedError


class LogNotifier(AbstractNotifier):
    # no mail transport is wired in
    def send(self, notification: Notification) -> None:
        logger.info("Notify %s: %s", notification.to, notification.subject)
        logger.debug("Notification body for %s: %s", notification.to, notification.body)


class FakeNotifier(AbstractNotifier):
    def __init__(self) -> None:
        self.outbox: List[Notification] = []

    def send(self, notification: Notification) -> None:
        self.outbox.append(notification)

    def sent_to(self, email: str) -> List[Notification]:
        return [n for n in self.outbox if n.to == email]
