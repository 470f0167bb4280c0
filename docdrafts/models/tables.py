from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Text, func, text

from . import DraftsBase


class DocumentRow(DraftsBase):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    latest_version = Column(Integer, nullable=False, server_default=text("1"))
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())

    __table_args__ = (
        Index("idx_documents_name", "name"),
        {"sqlite_autoincrement": True},
    )


class DraftRow(DraftsBase):
    __tablename__ = "drafts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    document_id = Column(Integer, ForeignKey("documents.id"), nullable=False)
    content = Column(Text, nullable=False, server_default=text("''"))
    version_number = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())

    __table_args__ = (
        Index("idx_drafts_document_id", "document_id"),
        {"sqlite_autoincrement": True},
    )


class CommentRow(DraftsBase):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    draft_id = Column(Integer, ForeignKey("drafts.id"), nullable=False)
    user_id = Column(Integer, nullable=False)
    text = Column(Text, nullable=False)
    parent_comment_id = Column(Integer, ForeignKey("comments.id"))
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())

    __table_args__ = (
        Index("idx_comments_draft_id", "draft_id"),
        {"sqlite_autoincrement": True},
    )


class ReactionRow(DraftsBase):
    __tablename__ = "reactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    comment_id = Column(Integer, ForeignKey("comments.id"), nullable=False)
    user_id = Column(Integer, nullable=False)
    emoji = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())

    __table_args__ = (
        Index("idx_reactions_comment_id", "comment_id"),
        {"sqlite_autoincrement": True},
    )
