from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Mapping


def _isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        # SQLite hands back naive values; they are written in UTC.
        value = value.replace(tzinfo=UTC)
    return value.isoformat()


@dataclass
class Document:
    id: int
    name: str
    latest_version: int
    created_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Document":
        return cls(
            id=row["id"],
            name=row["name"],
            latest_version=row["latest_version"],
            created_at=row["created_at"],
        )

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "latestVersion": self.latest_version,
            "createdAt": _isoformat(self.created_at),
        }


@dataclass
class Draft:
    id: int
    document_id: int
    content: str
    version_number: int
    created_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Draft":
        return cls(
            id=row["id"],
            document_id=row["document_id"],
            content=row["content"],
            version_number=row["version_number"],
            created_at=row["created_at"],
        )

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "documentId": self.document_id,
            "content": self.content,
            "versionNumber": self.version_number,
            "createdAt": _isoformat(self.created_at),
        }


@dataclass
class Comment:
    id: int
    draft_id: int
    user_id: int
    text: str
    parent_comment_id: int | None
    created_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Comment":
        return cls(
            id=row["id"],
            draft_id=row["draft_id"],
            user_id=row["user_id"],
            text=row["text"],
            parent_comment_id=row["parent_comment_id"],
            created_at=row["created_at"],
        )

    def to_json(self) -> dict:
        payload = {
            "id": self.id,
            "draftId": self.draft_id,
            "userId": self.user_id,
            "text": self.text,
            "createdAt": _isoformat(self.created_at),
        }
        if self.parent_comment_id is not None:
            payload["parentCommentId"] = self.parent_comment_id
        return payload


@dataclass
class Reaction:
    id: int
    comment_id: int
    user_id: int
    emoji: str
    created_at: datetime

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "commentId": self.comment_id,
            "userId": self.user_id,
            "emoji": self.emoji,
            "createdAt": _isoformat(self.created_at),
        }


@dataclass
class CommentWithReactions(Comment):
    reactions: list[Reaction] = field(default_factory=list)

    def to_json(self) -> dict:
        payload = super().to_json()
        payload["reactions"] = [reaction.to_json() for reaction in self.reactions]
        return payload
