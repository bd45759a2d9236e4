from __future__ import annotations

from typing import List

from postboard.domain import exceptions, model
from postboard.service_layer import unit_of_work


def list_posts(uow: unit_of_work.AbstractUnitOfWork) -> List[model.PostAggregate]:
    # Every authenticated caller sees every post
    with uow:
        return uow.posts.list_all()


def get_post(post_id: int, uow: unit_of_work.AbstractUnitOfWork) -> model.PostAggregate:
    with uow:
        post = uow.posts.get(post_id)
    if not post:
        raise exceptions.PostNotFound(f"Post {post_id} not found")
    return post
