from __future__ import annotations

import abc
from typing import Iterable, List, Optional, Set, TypeVar

from postboard.domain.model import PostAggregate, UserAggregate

A = TypeVar("A")


class TrackingRepository(abc.ABC):
    """
    Remembers every aggregate it hands out or persists, so the unit of work
    can collect the events they raised.
    """

    def __init__(self) -> None:
        self.seen: Set = set()

    def _track(self, aggregate: Optional[A]) -> Optional[A]:
        if aggregate is not None:
            self.seen.add(aggregate)
        return aggregate

    def _track_all(self, aggregates: Iterable[A]) -> List[A]:
        tracked = list(aggregates)
        self.seen.update(tracked)
        return tracked


class AbstractUserRepository(TrackingRepository):
    """Credential store. Emails are matched case-insensitively."""

    def add(self, user: UserAggregate) -> None:
        self._add(user)
        self._track(user)

    def get(self, user_id: int) -> Optional[UserAggregate]:
        return self._track(self._get(user_id))

    def get_by_email(self, email: str) -> Optional[UserAggregate]:
        return self._track(self._get_by_email(email.strip().lower()))

    @abc.abstractmethod
    def _add(self, user: UserAggregate) -> None: ...

    @abc.abstractmethod
    def _get(self, user_id: int) -> Optional[UserAggregate]: ...

    @abc.abstractmethod
    def _get_by_email(self, email: str) -> Optional[UserAggregate]: ...


class AbstractPostRepository(TrackingRepository):
    """
    Post store. ``save`` and ``delete`` are conditional on ``post.version``:
    they raise ``Conflict`` when the stored version moved on, and
    ``PostNotFound`` when the post no longer exists.
    """

    def add(self, post: PostAggregate) -> None:
        self._add(post)
        self._track(post)

    def get(self, post_id: int) -> Optional[PostAggregate]:
        return self._track(self._get(post_id))

    def save(self, post: PostAggregate) -> None:
        """Persist the full post state, comments and likes included."""
        self._save(post)
        self._track(post)

    def delete(self, post: PostAggregate) -> None:
        self._delete(post)
        self._track(post)

    def list_all(self) -> List[PostAggregate]:
        """All posts, newest first."""
        return self._track_all(self._list_all())

    @abc.abstractmethod
    def _add(self, post: PostAggregate) -> None: ...

    @abc.abstractmethod
    def _get(self, post_id: int) -> Optional[PostAggregate]: ...

    @abc.abstractmethod
    def _save(self, post: PostAggregate) -> None: ...

    @abc.abstractmethod
    def _delete(self, post: PostAggregate) -> None: ...

    @abc.abstractmethod
    def _list_all(self) -> List[PostAggregate]: ...
