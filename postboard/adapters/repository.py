from __future__ import annotations

import dataclasses
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from postboard.db import comment_table, likes_table, post_table, user_table
from postboard.domain import exceptions, model
from postboard.service_layer import repository as abs_repo


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is written in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SqlAlchemyUserRepository(abs_repo.AbstractUserRepository):
    def __init__(self, session: Session) -> None:
        super().__init__()
        self.session = session

    def _add(self, user: model.UserAggregate) -> None:
        values = {
            "name": user.user.name,
            "email": user.user.email.strip().lower(),
            "password": user.password_hash,
            "avatar": user.user.avatar,
        }
        stmt = user_table.insert().values(values).returning(user_table.c.id)
        try:
            new_id = self.session.execute(stmt).scalar_one()
        except IntegrityError as e:
            # a concurrent registration won the unique email
            raise exceptions.DuplicateIdentity("User already exists") from e
        user.user = dataclasses.replace(user.user, id=new_id, email=values["email"])

    def _get(self, user_id: int) -> Optional[model.UserAggregate]:
        stmt = select(user_table).where(user_table.c.id == user_id)
        row = self.session.execute(stmt).mappings().first()
        if not row:
            return None
        return self._row_to_agg(row)

    def _get_by_email(self, email: str) -> Optional[model.UserAggregate]:
        stmt = select(user_table).where(user_table.c.email == email)
        row = self.session.execute(stmt).mappings().first()
        if not row:
            return None
        return self._row_to_agg(row)

    def _row_to_agg(self, row) -> model.UserAggregate:
        user_entity = model.User(
            id=row["id"], name=row["name"], email=row["email"], avatar=row.get("avatar")
        )
        created_at = row.get("created_at")
        return model.UserAggregate(
            user=user_entity,
            password_hash=row.get("password"),
            created_at=_as_utc(created_at) if created_at else None,
        )


class SqlAlchemyPostRepository(abs_repo.AbstractPostRepository):
    def __init__(self, session: Session) -> None:
        super().__init__()
        self.session = session

    def _add(self, post: model.PostAggregate) -> None:
        values = {
            "user_id": post.user_id,
            "name": post.name,
            "avatar": post.avatar,
            "text": post.text,
            "version": 1,
            "created_at": post.created_at,
        }
        stmt = post_table.insert().values(values).returning(post_table.c.id)
        post.id = self.session.execute(stmt).scalar_one()
        post.version = 1
        self._sync_comments(post)
        self._sync_likes(post)

    def _save(self, post: model.PostAggregate) -> None:
        self._bump_version(post)
        self._sync_comments(post)
        self._sync_likes(post)
        post.version += 1

    def _delete(self, post: model.PostAggregate) -> None:
        self._bump_version(post)
        self.session.execute(likes_table.delete().where(likes_table.c.post_id == post.id))
        self.session.execute(comment_table.delete().where(comment_table.c.post_id == post.id))
        self.session.execute(post_table.delete().where(post_table.c.id == post.id))

    def _bump_version(self, post: model.PostAggregate) -> None:
        """Conditional update: only succeeds against the version we loaded."""
        result = self.session.execute(
            post_table.update()
            .where(post_table.c.id == post.id, post_table.c.version == post.version)
            .values(version=post.version + 1)
        )
        if result.rowcount == 1:
            return
        exists = self.session.execute(
            select(post_table.c.id).where(post_table.c.id == post.id)
        ).first()
        if exists is None:
            raise exceptions.PostNotFound(f"Post {post.id} not found")
        raise exceptions.Conflict(f"Post {post.id} was modified concurrently")

    def _sync_comments(self, post: model.PostAggregate) -> None:
        kept = {c.id for c in post.comments if c.id is not None}
        self.session.execute(
            comment_table.delete().where(
                comment_table.c.post_id == post.id, comment_table.c.id.not_in(kept)
            )
        )
        # Oldest unsaved comment first so ids follow creation order
        for index in reversed(range(len(post.comments))):
            comment = post.comments[index]
            if comment.id is not None:
                continue
            stmt = comment_table.insert().values(
                post_id=post.id,
                user_id=comment.user_id,
                name=comment.name,
                avatar=comment.avatar,
                text=comment.text,
                created_at=comment.created_at,
            ).returning(comment_table.c.id)
            new_id = self.session.execute(stmt).scalar_one()
            post.comments[index] = dataclasses.replace(comment, id=new_id, post_id=post.id)

    def _sync_likes(self, post: model.PostAggregate) -> None:
        wanted = {like.user_id for like in post.likes}
        stored = set(
            self.session.execute(
                select(likes_table.c.user_id).where(likes_table.c.post_id == post.id)
            ).scalars()
        )
        for user_id in stored - wanted:
            self._remove_like(post.id, user_id)
        for user_id in wanted - stored:
            self._add_like(post.id, user_id)
        post.likes = {model.Like(post_id=post.id, user_id=user_id) for user_id in wanted}

    def _add_like(self, post_id: int, user_id: int) -> None:
        self.session.execute(
            likes_table.insert().values(post_id=post_id, user_id=user_id)
        )

    def _remove_like(self, post_id: int, user_id: int) -> None:
        self.session.execute(
            likes_table.delete().where(
                likes_table.c.post_id == post_id, likes_table.c.user_id == user_id
            )
        )

    def _get(self, post_id: int) -> Optional[model.PostAggregate]:
        stmt = select(post_table).where(post_table.c.id == post_id)
        row = self.session.execute(stmt).mappings().first()
        if not row:
            return None
        return self._hydrate_post(row)

    def _list_all(self) -> List[model.PostAggregate]:
        stmt = select(post_table).order_by(post_table.c.id.desc())
        rows = self.session.execute(stmt).mappings().all()
        return [self._hydrate_post(row) for row in rows]

    def _hydrate_post(self, row) -> model.PostAggregate:
        post = model.PostAggregate(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            avatar=row.get("avatar"),
            text=row["text"],
            created_at=_as_utc(row["created_at"]),
            version=row["version"],
        )
        # newest first; ids follow insertion order, timestamps may not
        c_stmt = (
            select(comment_table)
            .where(comment_table.c.post_id == post.id)
            .order_by(comment_table.c.id.desc())
        )
        for crow in self.session.execute(c_stmt).mappings().all():
            post.comments.append(
                model.Comment(
                    id=crow["id"],
                    post_id=crow["post_id"],
                    user_id=crow["user_id"],
                    name=crow["name"],
                    avatar=crow.get("avatar"),
                    text=crow["text"],
                    created_at=_as_utc(crow["created_at"]),
                )
            )
        # Load likes
        l_stmt = select(likes_table).where(likes_table.c.post_id == post.id)
        for lrow in self.session.execute(l_stmt).mappings().all():
            post.likes.add(model.Like(post_id=lrow["post_id"], user_id=lrow["user_id"]))
        return post
