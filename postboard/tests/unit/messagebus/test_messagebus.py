import pytest

from postboard.domain import commands, events, exceptions
from postboard.service_layer.messagebus import MessageBus
from postboard.service_layer.unit_of_work import FakeUnitOfWork
from postboard.tests.fakes import FakeUserRepository, FakePostRepository

pytestmark = pytest.mark.no_db


class Agg:
    def __init__(self, *pending):
        self.events = list(pending)

    def __hash__(self):
        return id(self)


def make_uow():
    return FakeUnitOfWork(FakeUserRepository(), FakePostRepository())


def test_messagebus_returns_command_results():
    uow = make_uow()
    bus = MessageBus(
        uow=uow,
        event_handlers={},
        command_handlers={commands.LikePost: lambda cmd: ("liked", cmd.post_id)},
    )

    assert bus.handle(commands.LikePost(user_id=1, post_id=7)) == [("liked", 7)]


def test_messagebus_handles_events_even_if_handlers_fail():
    calls = []

    def bad_handler(evt):
        raise RuntimeError("boom")

    def good_handler(evt):
        calls.append(evt)

    bus = MessageBus(
        uow=make_uow(),
        event_handlers={events.PostLiked: [bad_handler, good_handler]},
        command_handlers={},
    )

    bus.handle(events.PostLiked(post_id=1, user_id=2))

    assert calls == [events.PostLiked(post_id=1, user_id=2)]


def test_messagebus_processes_events_emitted_from_command():
    seen_events = []
    uow = make_uow()

    def emit_event(cmd):
        uow.posts.seen.add(Agg(events.PostLiked(post_id=cmd.post_id, user_id=cmd.user_id)))

    bus = MessageBus(
        uow=uow,
        event_handlers={events.PostLiked: [seen_events.append]},
        command_handlers={commands.LikePost: emit_event},
    )

    bus.handle(commands.LikePost(user_id=2, post_id=1))

    assert seen_events == [events.PostLiked(post_id=1, user_id=2)]


def test_command_errors_propagate_and_drop_pending_events():
    seen_events = []
    uow = make_uow()

    def failing(cmd):
        uow.posts.seen.add(Agg(events.PostLiked(post_id=cmd.post_id, user_id=cmd.user_id)))
        raise exceptions.AlreadyLiked("Post already liked")

    bus = MessageBus(
        uow=uow,
        event_handlers={events.PostLiked: [seen_events.append]},
        command_handlers={commands.LikePost: failing},
    )

    with pytest.raises(exceptions.AlreadyLiked):
        bus.handle(commands.LikePost(user_id=2, post_id=1))

    assert seen_events == []
    assert uow.collect_new_events() == []


def test_messagebus_requires_command_handler():
    bus = MessageBus(uow=make_uow(), event_handlers={}, command_handlers={})

    with pytest.raises(LookupError):
        bus.handle(commands.UnlikePost(user_id=1, post_id=1))


def test_messagebus_rejects_unknown_messages():
    bus = MessageBus(uow=make_uow(), event_handlers={}, command_handlers={})

    with pytest.raises(TypeError):
        bus.handle("not a message")
