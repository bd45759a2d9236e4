import pytest

from postboard import bootstrap
from postboard.adapters.notifications import FakeNotifier
from postboard.domain import commands, events
from postboard.service_layer.unit_of_work import FakeUnitOfWork
from postboard.tests.fakes import FakePostRepository, FakeUserRepository


@pytest.mark.no_db
def test_bootstrap_wires_handlers_with_overrides():
    notifier = FakeNotifier()
    uow = FakeUnitOfWork(FakeUserRepository(), FakePostRepository())

    bus = bootstrap.bootstrap(
        uow=uow,
        notifier=notifier,
        hash_password=lambda p: "hashed",
        avatar_for=lambda e: "https://avatars/" + e,
    )

    [user_id] = bus.handle(commands.RegisterUser(name="User", email="user@example.com", password="pw"))
    assert notifier.outbox[0].to == "user@example.com"
    assert uow.users.get(user_id).user.avatar == "https://avatars/user@example.com"

    [post] = bus.handle(commands.CreatePost(user_id=user_id, text="hello"))
    [liked] = bus.handle(commands.LikePost(user_id=user_id, post_id=post.id))
    assert {like.user_id for like in liked.likes} == {user_id}


@pytest.mark.no_db
def test_bootstrap_uses_configured_retries(monkeypatch):
    monkeypatch.setattr(bootstrap.config, "CONFLICT_RETRIES", 5)
    uow = FakeUnitOfWork(FakeUserRepository(), FakePostRepository())

    bus = bootstrap.bootstrap(uow=uow, notifier=FakeNotifier())

    assert bus.command_handlers[commands.AddComment].keywords["retries"] == 5
    assert "retries" not in bus.command_handlers[commands.CreatePost].keywords


@pytest.mark.no_db
def test_every_post_event_has_a_subscriber():
    bus = bootstrap.bootstrap(uow=FakeUnitOfWork(FakeUserRepository(), FakePostRepository()))

    for event_type in (events.PostCreated, events.CommentRemoved, events.PostUnliked):
        assert bus.event_handlers[event_type]
