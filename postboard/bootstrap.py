from __future__ import annotations

from functools import lru_cache, partial
from typing import Callable, Dict, List, Type

from postboard.adapters import avatars
from postboard.adapters.notifications import LogNotifier, AbstractNotifier
from postboard.config import config
from postboard.domain import commands, events
from postboard.service_layer import handlers, unit_of_work
from postboard.service_layer.messagebus import MessageBus
from postboard.service_layer.unit_of_work import SqlAlchemyUnitOfWork
from postboard import security


def bootstrap(
    uow: unit_of_work.AbstractUnitOfWork | None = None,
    notifier: AbstractNotifier | None = None,
    hash_password: Callable[[str], str] = security.get_password_hash,
    avatar_for: Callable[[str], str] = avatars.gravatar_url,
    retries: int | None = None,
) -> MessageBus:
    uow = uow or SqlAlchemyUnitOfWork()
    notifier = notifier or LogNotifier()
    retries = retries if retries is not None else config.CONFLICT_RETRIES

    command_handlers: Dict[Type[commands.Command], Callable] = {
        commands.RegisterUser: partial(
            handlers.register_user, uow=uow, hash_password=hash_password, avatar_for=avatar_for
        ),
        commands.CreatePost: partial(handlers.create_post, uow=uow),
        commands.DeletePost: partial(handlers.delete_post, uow=uow, retries=retries),
        commands.AddComment: partial(handlers.add_comment, uow=uow, retries=retries),
        commands.RemoveComment: partial(handlers.remove_comment, uow=uow, retries=retries),
        commands.LikePost: partial(handlers.like_post, uow=uow, retries=retries),
        commands.UnlikePost: partial(handlers.unlike_post, uow=uow, retries=retries),
    }

    event_handlers: Dict[Type[events.Event], List[Callable]] = {
        events.UserRegistered: [partial(handlers.handle_user_registered, notifier=notifier)],
    }
    for post_event in events.PostEvent.__subclasses__():
        event_handlers[post_event] = [handlers.log_post_activity]

    return MessageBus(uow=uow, event_handlers=event_handlers, command_handlers=command_handlers)


@lru_cache()
def get_message_bus() -> MessageBus:
    """Process-wide bus wired to the SQLAlchemy unit of work."""
    return bootstrap()
