from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Set

from postboard.domain import events, exceptions


# --- Entities ---


@dataclass(eq=True, frozen=True)
class User:
    id: int | None
    name: str
    email: str
    avatar: Optional[str] = None


@dataclass(eq=True, frozen=True)
class Comment:
    id: int | None
    post_id: int | None
    user_id: int
    name: str
    avatar: Optional[str]
    text: str
    created_at: datetime


@dataclass(eq=True, frozen=True)
class Like:
    post_id: int | None
    user_id: int


# --- Aggregates ---


@dataclass(eq=False)
class UserAggregate:
    user: User
    password_hash: Optional[str] = None
    created_at: Optional[datetime] = None
    events: List[events.Event] = field(default_factory=list)

    def __hash__(self) -> int:
        return id(self)


@dataclass(eq=False)
class PostAggregate:
    """
    A post with its embedded comments (newest first) and like set.

    ``name`` and ``avatar`` are copied from the author when the post is created
    and are never refreshed afterwards. ``version`` is bumped by the repository
    on every successful save.
    """

    id: int | None
    user_id: int
    name: str
    avatar: Optional[str]
    text: str
    created_at: datetime
    version: int = 0
    comments: List[Comment] = field(default_factory=list)
    likes: Set[Like] = field(default_factory=set)
    events: List[events.Event] = field(default_factory=list)

    def __hash__(self) -> int:
        return id(self)

    @classmethod
    def create(cls, author: UserAggregate, text: str, created_at: datetime) -> "PostAggregate":
        validate_text(text, "Post text cannot be empty")
        return cls(
            id=None,
            user_id=author.user.id,
            name=author.user.name,
            avatar=author.user.avatar,
            text=text,
            created_at=created_at,
        )

    def ensure_author(self, user_id: int) -> None:
        if self.user_id != user_id:
            raise exceptions.Forbidden("User not authorized")

    def add_comment(self, author: UserAggregate, text: str, created_at: datetime) -> Comment:
        validate_text(text, "Comment text cannot be empty")
        comment = Comment(
            id=None,
            post_id=self.id,
            user_id=author.user.id,
            name=author.user.name,
            avatar=author.user.avatar,
            text=text,
            created_at=created_at,
        )
        self.comments.insert(0, comment)
        self.events.append(events.CommentAdded(post_id=self.id, user_id=comment.user_id))
        return comment

    def get_comment(self, comment_id: int) -> Comment:
        for comment in self.comments:
            if comment.id == comment_id:
                return comment
        raise exceptions.CommentNotFound(f"Comment {comment_id} not found")

    def remove_comment(self, comment_id: int, user_id: int) -> Comment:
        comment = self.get_comment(comment_id)
        if comment.user_id != user_id:
            raise exceptions.Forbidden("User not authorized")
        self.comments = [c for c in self.comments if c.id != comment_id]
        self.events.append(
            events.CommentRemoved(post_id=self.id, comment_id=comment_id, user_id=user_id)
        )
        return comment

    def liked_by(self, user_id: int) -> bool:
        return any(like.user_id == user_id for like in self.likes)

    def like(self, user_id: int) -> Like:
        if self.liked_by(user_id):
            raise exceptions.AlreadyLiked("Post already liked")
        like = Like(post_id=self.id, user_id=user_id)
        self.likes.add(like)
        self.events.append(events.PostLiked(post_id=self.id, user_id=user_id))
        return like

    def unlike(self, user_id: int) -> None:
        if not self.liked_by(user_id):
            raise exceptions.NotLiked("Post has not yet been liked")
        self.likes = {like for like in self.likes if like.user_id != user_id}
        self.events.append(events.PostUnliked(post_id=self.id, user_id=user_id))


def validate_text(text: str, message: str) -> None:
    if not text or not text.strip():
        raise exceptions.ValidationError(message)
