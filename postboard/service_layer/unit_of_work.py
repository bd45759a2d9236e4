from __future__ import annotations

import abc
from typing import Iterator, List, Set

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from postboard.db import metadata, SessionLocal
from postboard.domain import events
from postboard.service_layer import repository
from postboard.adapters import repository as sql_repo


class AbstractUnitOfWork(abc.ABC):
    """
    One transaction over the user and post stores.

    Leaving the block without ``commit`` discards every write made inside it,
    including the case where the block raised.
    """

    users: repository.AbstractUserRepository
    posts: repository.AbstractPostRepository

    def __enter__(self) -> "AbstractUnitOfWork":
        return self

    def __exit__(self, *args) -> None:
        self.rollback()

    def commit(self) -> None:
        self._commit()

    def collect_new_events(self) -> List[events.Event]:
        collected: List[events.Event] = []
        for aggregate in self._seen_aggregates():
            collected.extend(aggregate.events)
            aggregate.events.clear()
        return collected

    def _seen_aggregates(self) -> Iterator:
        for name in ("users", "posts"):
            store = getattr(self, name, None)
            if store is not None:
                yield from store.seen

    @abc.abstractmethod
    def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    # engines whose tables have already been created in this process
    _prepared_engines: Set[Engine] = set()

    def __init__(self, session_factory: sessionmaker | None = None) -> None:
        self.session_factory = session_factory or SessionLocal
        self.session: Session | None = None

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self.session_factory()
        self._prepare(self.session.get_bind())
        self.users = sql_repo.SqlAlchemyUserRepository(self.session)
        self.posts = sql_repo.SqlAlchemyPostRepository(self.session)
        return super().__enter__()

    def __exit__(self, *args) -> None:
        try:
            super().__exit__(*args)
        finally:
            self.session.close()
            self.session = None

    def _commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        if self.session is not None:
            self.session.rollback()

    @classmethod
    def _prepare(cls, engine: Engine) -> None:
        if engine in cls._prepared_engines:
            return
        metadata.create_all(bind=engine)
        cls._prepared_engines.add(engine)


class FakeUnitOfWork(AbstractUnitOfWork):
    def __init__(
        self,
        users_repo: repository.AbstractUserRepository,
        posts_repo: repository.AbstractPostRepository,
    ) -> None:
        self.users = users_repo
        self.posts = posts_repo
        self.committed = False
        self.commits = 0

    def _commit(self) -> None:
        self.committed = True
        self.commits += 1

    def rollback(self) -> None:
        pass
