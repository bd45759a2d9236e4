from __future__ import annotations

from postboard.domain import exceptions
from postboard.service_layer import unit_of_work


def get_profile(user_id: int, uow: unit_of_work.AbstractUnitOfWork) -> dict:
    with uow:
        user = uow.users.get(user_id)
    if not user:
        raise exceptions.Unauthorized("User not found")

    return {
        "id": user.user.id,
        "name": user.user.name,
        "email": user.user.email,
        "avatar": user.user.avatar,
        "created_at": user.created_at,
    }
