from dataclasses import dataclass, fields
from typing import Optional


class Event:
    """Something that already happened. Any number of subscribers may react."""

    @classmethod
    def from_dict(cls, data: dict):
        known = {f.name for f in fields(cls) if f.init}
        return cls(**{key: value for key, value in data.items() if key in known})


@dataclass(frozen=True)
class UserRegistered(Event):
    user_id: int
    email: str
    name: str


@dataclass(frozen=True)
class PostEvent(Event):
    # post_id is None only when raised before the post was first stored
    post_id: Optional[int]
    user_id: int


@dataclass(frozen=True)
class PostCreated(PostEvent):
    pass


@dataclass(frozen=True)
class PostDeleted(PostEvent):
    pass


@dataclass(frozen=True)
class CommentAdded(PostEvent):
    pass


@dataclass(frozen=True)
class CommentRemoved(PostEvent):
    comment_id: int


@dataclass(frozen=True)
class PostLiked(PostEvent):
    pass


@dataclass(frozen=True)
class PostUnliked(PostEvent):
    pass
