from dataclasses import dataclass, fields


class Command:
    """Something a caller asks the system to do. Handled by exactly one handler."""

    @classmethod
    def from_dict(cls, data: dict):
        # unknown keys are dropped rather than rejected
        known = {f.name for f in fields(cls) if f.init}
        return cls(**{key: value for key, value in data.items() if key in known})


@dataclass(frozen=True)
class RegisterUser(Command):
    name: str
    email: str
    password: str


@dataclass(frozen=True)
class CreatePost(Command):
    user_id: int
    text: str


@dataclass(frozen=True)
class PostCommand(Command):
    """Acts on an existing post on behalf of the authenticated user."""

    user_id: int
    post_id: int


@dataclass(frozen=True)
class DeletePost(PostCommand):
    pass


@dataclass(frozen=True)
class AddComment(PostCommand):
    text: str


@dataclass(frozen=True)
class RemoveComment(PostCommand):
    comment_id: int


@dataclass(frozen=True)
class LikePost(PostCommand):
    pass


@dataclass(frozen=True)
class UnlikePost(PostCommand):
    pass
