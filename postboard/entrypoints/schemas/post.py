from typing import Optional
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, field_validator


def _ensure_utc(value):
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value))

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


# Posts
class PostI(BaseModel):
    text: str


# Comments
class CommentI(BaseModel):
    text: str


class Comment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    avatar: Optional[str] = None
    text: str
    created_at: datetime

    @field_validator("created_at", mode="before")
    @classmethod
    def ensure_timezone_aware_utc(cls, value):
        return _ensure_utc(value)


# Likes
class Like(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int


class Post(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    avatar: Optional[str] = None
    text: str
    created_at: datetime
    version: int
    comments: list[Comment]
    likes: list[Like]

    @field_validator("created_at", mode="before")
    @classmethod
    def ensure_timezone_aware_utc(cls, value):
        return _ensure_utc(value)

    @field_validator("likes", mode="before")
    @classmethod
    def stable_like_order(cls, value):
        # Likes are a set on the aggregate; give clients a deterministic list
        return sorted(
            value, key=lambda like: like["user_id"] if isinstance(like, dict) else like.user_id
        )


class PostRemoved(BaseModel):
    detail: str
