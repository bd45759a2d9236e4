from __future__ import annotations

import logging
import uuid
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Type, Union

from asgi_correlation_id import correlation_id

from postboard.domain import commands, events
from postboard.service_layer import unit_of_work

logger = logging.getLogger(__name__)

Message = Union[commands.Command, events.Event]


class MessageBus:
    """
    Dispatches a command to its single handler, then every event raised along
    the way to its subscribers, breadth first.

    A failing command handler aborts ``handle`` and the events it emitted are
    dropped. A failing event handler is logged and the remaining subscribers
    still run.
    """

    def __init__(
        self,
        uow: unit_of_work.AbstractUnitOfWork,
        event_handlers: Dict[Type[events.Event], List[Callable]],
        command_handlers: Dict[Type[commands.Command], Callable],
    ) -> None:
        self.uow = uow
        self.event_handlers = event_handlers
        self.command_handlers = command_handlers

    def handle(self, message: Message) -> List[Any]:
        trace = correlation_id.get() or uuid.uuid4().hex
        pending: Deque[Message] = deque([message])
        results: List[Any] = []

        while pending:
            current = pending.popleft()
            if isinstance(current, commands.Command):
                results.append(self._run_command(current, pending, trace))
            elif isinstance(current, events.Event):
                self._publish(current, pending, trace)
            else:
                raise TypeError(f"{current!r} is neither a command nor an event")

        return results

    def _run_command(self, command: commands.Command, pending: Deque[Message], trace: str) -> Any:
        handler = self.command_handlers.get(type(command))
        if handler is None:
            raise LookupError(f"No handler for command type {type(command).__name__}")

        logger.debug("[%s] command %s", trace, type(command).__name__)
        try:
            result = handler(command)
        finally:
            raised = self.uow.collect_new_events()
        pending.extend(raised)
        return result

    def _publish(self, event: events.Event, pending: Deque[Message], trace: str) -> None:
        for subscriber in self.event_handlers.get(type(event), []):
            logger.debug("[%s] event %s -> %s", trace, type(event).__name__, subscriber)
            try:
                subscriber(event)
            except Exception:
                logger.exception("[%s] subscriber failed on %s", trace, event)
                continue
            pending.extend(self.uow.collect_new_events())
