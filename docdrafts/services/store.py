from __future__ import annotations

import fcntl
import logging
import os
import threading
import time
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any, Iterable, Mapping

from sqlalchemy import func, insert, select, update
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from ..models import MEMORY_DB_PATH, DraftsBase, sqlite_engine
from ..models.records import Comment, CommentWithReactions, Document, Draft, Reaction
from ..models.tables import CommentRow, DocumentRow, DraftRow, ReactionRow

logger = logging.getLogger("docdrafts.store")

documents = DocumentRow.__table__
drafts = DraftRow.__table__
comments = CommentRow.__table__
reactions = ReactionRow.__table__

INIT_ATTEMPTS = 10


class StoreError(Exception):
    """The database rejected or failed an operation."""


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _engine_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


def fold_comment_rows(rows: Iterable[Mapping[str, Any]]) -> list[CommentWithReactions]:
    """Fold flat comment/reaction join rows into one entry per comment.

    The first row seen for a comment supplies its scalar fields. Rows whose
    reaction columns are all null (a comment without reactions) add nothing
    to the reaction list.
    """
    folded: dict[int, CommentWithReactions] = {}
    for row in rows:
        comment = folded.get(row["comment_id"])
        if comment is None:
            comment = CommentWithReactions(
                id=row["comment_id"],
                draft_id=row["draft_id"],
                user_id=row["comment_user_id"],
                text=row["text"],
                parent_comment_id=row["parent_comment_id"],
                created_at=row["comment_created_at"],
            )
            folded[comment.id] = comment
        if row["reaction_id"] is not None:
            comment.reactions.append(
                Reaction(
                    id=row["reaction_id"],
                    comment_id=comment.id,
                    user_id=row["reaction_user_id"],
                    emoji=row["emoji"],
                    created_at=row["reaction_created_at"],
                )
            )
    return list(folded.values())


class DraftStore:
    """Documents, their versioned drafts, comments and reactions in SQLite."""

    def __init__(self, engine, db_path: str = MEMORY_DB_PATH) -> None:
        self._engine = engine
        self.db_path = db_path
        self._write_lock = threading.Lock()

    @contextmanager
    def _conn(self, *, immediate: bool = False):
        try:
            with self._engine.connect() as conn:
                if immediate:
                    conn.execution_options(sqlite_begin="IMMEDIATE")
                with conn.begin():
                    yield conn
        except SQLAlchemyError as exc:
            logger.error("Drafts database operation failed: %s", exc)
            raise StoreError(_engine_message(exc)) from exc

    def initialize_schema(self) -> None:
        try:
            DraftsBase.metadata.create_all(self._engine)
        except SQLAlchemyError as exc:
            raise StoreError(_engine_message(exc)) from exc

    def ping(self) -> bool:
        with self._conn() as conn:
            return conn.execute(select(1)).scalar() == 1

    def close(self) -> None:
        self._engine.dispose()

    def _first(self, stmt, record_type):
        with self._conn() as conn:
            row = conn.execute(stmt).mappings().first()
        return record_type.from_row(row) if row is not None else None

    def _all(self, stmt, record_type) -> list:
        with self._conn() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [record_type.from_row(row) for row in rows]

    def get_document_by_id(self, document_id: int) -> Document | None:
        return self._first(select(documents).where(documents.c.id == document_id), Document)

    def get_document_by_name(self, name: str) -> Document | None:
        stmt = select(documents).where(documents.c.name == name).order_by(documents.c.id).limit(1)
        return self._first(stmt, Document)

    def get_draft(self, draft_id: int) -> Draft | None:
        return self._first(select(drafts).where(drafts.c.id == draft_id), Draft)

    def get_comment(self, comment_id: int) -> Comment | None:
        return self._first(select(comments).where(comments.c.id == comment_id), Comment)

    def create_draft(self, name: str, content: str) -> Draft:
        """Store ``content`` as the next version of the document called ``name``.

        The lookup, the document insert-or-bump and the draft insert share one
        ``BEGIN IMMEDIATE`` transaction, so two writers can never both see the
        name as new or both claim the same version.
        """
        now = _utcnow()
        with self._write_lock, self._conn(immediate=True) as conn:
            document = conn.execute(
                select(documents.c.id, documents.c.latest_version)
                .where(documents.c.name == name)
                .order_by(documents.c.id)
                .limit(1)
            ).mappings().first()

            if document is not None:
                document_id = document["id"]
                version = document["latest_version"] + 1
                conn.execute(
                    update(documents)
                    .where(documents.c.id == document_id)
                    .values(latest_version=version)
                )
            else:
                version = 1
                document_id = conn.execute(
                    insert(documents).values(name=name, latest_version=version, created_at=now)
                ).inserted_primary_key[0]

            draft_id = conn.execute(
                insert(drafts).values(
                    document_id=document_id,
                    content=content,
                    version_number=version,
                    created_at=now,
                )
            ).inserted_primary_key[0]

        logger.info("Stored draft %s as version %s of document %s", draft_id, version, document_id)
        return Draft(
            id=draft_id,
            document_id=document_id,
            content=content,
            version_number=version,
            created_at=now,
        )

    def get_latest_drafts(self, limit: int = 1) -> list[Draft]:
        """Return the ``limit`` newest drafts of every document, highest version first.

        ``limit == 0`` returns every draft and a negative limit returns nothing.
        """
        if limit < 0:
            return []

        stmt = select(drafts).order_by(drafts.c.version_number.desc(), drafts.c.id.desc())
        if limit > 0:
            newer = drafts.alias("newer")
            newer_count = (
                select(func.count())
                .select_from(newer)
                .where(newer.c.document_id == drafts.c.document_id, newer.c.id > drafts.c.id)
                .scalar_subquery()
            )
            stmt = stmt.where(newer_count < limit)
        return self._all(stmt, Draft)

    def search_drafts(self, query: str) -> list[Draft]:
        if not query:
            raise ValueError("search text must not be empty")
        stmt = (
            select(drafts)
            .where(drafts.c.content.contains(query, autoescape=True))
            .order_by(drafts.c.id.desc())
        )
        return self._all(stmt, Draft)

    def get_all_documents_latest_versions(self) -> list[Document]:
        return self._all(select(documents).order_by(documents.c.id), Document)

    def add_comment(
        self,
        draft_id: int,
        user_id: int,
        text: str,
        parent_comment_id: int | None = None,
    ) -> int:
        with self._conn() as conn:
            comment_id = conn.execute(
                insert(comments).values(
                    draft_id=draft_id,
                    user_id=user_id,
                    text=text,
                    parent_comment_id=parent_comment_id,
                    created_at=_utcnow(),
                )
            ).inserted_primary_key[0]
        return comment_id

    def add_reaction(self, comment_id: int, user_id: int, emoji: str) -> int:
        with self._conn() as conn:
            reaction_id = conn.execute(
                insert(reactions).values(
                    comment_id=comment_id,
                    user_id=user_id,
                    emoji=emoji,
                    created_at=_utcnow(),
                )
            ).inserted_primary_key[0]
        return reaction_id

    def get_comments_and_reactions(self, draft_id: int) -> list[CommentWithReactions]:
        stmt = (
            select(
                comments.c.id.label("comment_id"),
                comments.c.draft_id,
                comments.c.user_id.label("comment_user_id"),
                comments.c.text,
                comments.c.parent_comment_id,
                comments.c.created_at.label("comment_created_at"),
                reactions.c.id.label("reaction_id"),
                reactions.c.user_id.label("reaction_user_id"),
                reactions.c.emoji,
                reactions.c.created_at.label("reaction_created_at"),
            )
            .select_from(comments.outerjoin(reactions, reactions.c.comment_id == comments.c.id))
            .where(comments.c.draft_id == draft_id)
            .order_by(comments.c.id, reactions.c.id)
        )
        with self._conn() as conn:
            return fold_comment_rows(conn.execute(stmt).mappings())


def _init_lock_path(db_path: str) -> str | None:
    if db_path == MEMORY_DB_PATH:
        return None
    return f"{db_path}.init.lock"


def open_store(db_path: str, timeout: float = 30.0, pool_size: int | None = 4) -> DraftStore:
    """Open (or create) the drafts database at ``db_path`` and make sure its tables exist."""
    if db_path != MEMORY_DB_PATH:
        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    store = DraftStore(sqlite_engine(db_path, timeout, pool_size), db_path=db_path)

    lock_path = _init_lock_path(db_path)
    lock_file = open(lock_path, "w") if lock_path else None
    try:
        if lock_file:
            fcntl.flock(lock_file, fcntl.LOCK_EX)
        for attempt in range(INIT_ATTEMPTS):
            try:
                store.initialize_schema()
                break
            except StoreError as exc:
                cause = exc.__cause__
                if (
                    isinstance(cause, OperationalError)
                    and "locked" in str(cause).lower()
                    and attempt < INIT_ATTEMPTS - 1
                ):
                    time.sleep(0.05 * (attempt + 1))
                    continue
                logger.error("Drafts database init failed: %s", exc)
                store.close()
                raise
    finally:
        if lock_file:
            try:
                fcntl.flock(lock_file, fcntl.LOCK_UN)
            finally:
                lock_file.close()

    logger.info("Drafts database ready at %s", db_path)
    return store
