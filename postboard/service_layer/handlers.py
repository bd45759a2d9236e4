from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from postboard.adapters import notifications
from postboard.domain import commands, events, exceptions, model
from postboard.service_layer import unit_of_work

logger = logging.getLogger(__name__)


# --- Command handlers ---


def register_user(
    cmd: commands.RegisterUser,
    uow: unit_of_work.AbstractUnitOfWork,
    hash_password: Callable[[str], str],
    avatar_for: Callable[[str], str],
) -> int:
    email = cmd.email.strip().lower()
    with uow:
        if uow.users.get_by_email(email):
            raise exceptions.DuplicateIdentity("User already exists")

        user = model.UserAggregate(
            user=model.User(id=None, name=cmd.name, email=email, avatar=avatar_for(email)),
            password_hash=hash_password(cmd.password),
        )
        uow.users.add(user)
        user.events.append(
            events.UserRegistered(user_id=user.user.id, email=email, name=cmd.name)
        )
        uow.commit()
    return user.user.id


def create_post(cmd: commands.CreatePost, uow: unit_of_work.AbstractUnitOfWork) -> model.PostAggregate:
    model.validate_text(cmd.text, "Text is required")
    with uow:
        author = _get_author(uow, cmd.user_id)
        post = model.PostAggregate.create(author, cmd.text, created_at=_now())
        uow.posts.add(post)
        post.events.append(events.PostCreated(post_id=post.id, user_id=post.user_id))
        uow.commit()
    return post


def delete_post(
    cmd: commands.DeletePost, uow: unit_of_work.AbstractUnitOfWork, retries: int = 1
) -> model.PostAggregate:
    def apply(post: model.PostAggregate, actor: model.UserAggregate) -> None:
        post.ensure_author(actor.user.id)
        uow.posts.delete(post)
        post.events.append(events.PostDeleted(post_id=post.id, user_id=actor.user.id))

    return _update_post(uow, cmd, retries, apply)


def add_comment(
    cmd: commands.AddComment, uow: unit_of_work.AbstractUnitOfWork, retries: int = 1
) -> model.PostAggregate:
    model.validate_text(cmd.text, "Text is required")

    def apply(post: model.PostAggregate, actor: model.UserAggregate) -> None:
        post.add_comment(actor, cmd.text, created_at=_now())
        uow.posts.save(post)

    return _update_post(uow, cmd, retries, apply)


def remove_comment(
    cmd: commands.RemoveComment, uow: unit_of_work.AbstractUnitOfWork, retries: int = 1
) -> model.PostAggregate:
    def apply(post: model.PostAggregate, actor: model.UserAggregate) -> None:
        post.remove_comment(cmd.comment_id, user_id=actor.user.id)
        uow.posts.save(post)

    return _update_post(uow, cmd, retries, apply)


def like_post(
    cmd: commands.LikePost, uow: unit_of_work.AbstractUnitOfWork, retries: int = 1
) -> model.PostAggregate:
    def apply(post: model.PostAggregate, actor: model.UserAggregate) -> None:
        post.like(actor.user.id)
        uow.posts.save(post)

    return _update_post(uow, cmd, retries, apply)


def unlike_post(
    cmd: commands.UnlikePost, uow: unit_of_work.AbstractUnitOfWork, retries: int = 1
) -> model.PostAggregate:
    def apply(post: model.PostAggregate, actor: model.UserAggregate) -> None:
        post.unlike(actor.user.id)
        uow.posts.save(post)

    return _update_post(uow, cmd, retries, apply)


# --- Event handlers ---


def handle_user_registered(event: events.UserRegistered, notifier=None):
    logger.info("User registered: %s", event)
    if notifier:
        notifier.send(notifications.welcome(event.name, event.email))


def log_post_activity(event: events.PostEvent):
    logger.info("%s post_id=%s user_id=%s", type(event).__name__, event.post_id, event.user_id)


# --- Helpers ---


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _get_author(uow: unit_of_work.AbstractUnitOfWork, user_id: int) -> model.UserAggregate:
    author = uow.users.get(user_id)
    if not author:
        raise exceptions.Unauthorized("User not found")
    return author


def _update_post(
    uow: unit_of_work.AbstractUnitOfWork,
    cmd: commands.PostCommand,
    retries: int,
    apply: Callable[[model.PostAggregate, model.UserAggregate], None],
) -> model.PostAggregate:
    """
    Read-modify-write cycle on a single post on behalf of ``cmd.user_id``.

    The caller must still have an account. The store rejects the write with
    ``Conflict`` when someone else saved the post in between; the whole cycle
    is then replayed against fresh state, ``retries`` times at most.
    """
    operation = type(cmd).__name__
    attempts = max(retries, 1)
    for attempt in range(1, attempts + 1):
        post = None
        try:
            with uow:
                actor = _get_author(uow, cmd.user_id)
                post = uow.posts.get(cmd.post_id)
                if not post:
                    raise exceptions.PostNotFound(f"Post {cmd.post_id} not found")
                apply(post, actor)
                uow.commit()
            logger.info("%s on post %s by user %s", operation, cmd.post_id, cmd.user_id)
            return post
        except exceptions.Conflict:
            if post is not None:
                post.events.clear()
            if attempt == attempts:
                logger.error(
                    "Giving up %s on post %s after %s conflicting attempts",
                    operation, cmd.post_id, attempts,
                )
                raise
            logger.warning(
                "Conflict during %s on post %s (attempt %s/%s), retrying",
                operation, cmd.post_id, attempt, attempts,
            )
