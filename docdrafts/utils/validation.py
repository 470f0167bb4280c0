from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .emoji import is_permitted_emoji_string

MAX_COMMENT_LENGTH = 10_000

# SQLite INTEGER is a signed 64-bit value
MIN_SQL_INT = -(2**63)
MAX_SQL_INT = 2**63 - 1


class PayloadError(ValueError):
    """The request body or a parameter cannot be decoded."""


class InvalidEmojiError(PayloadError):
    pass


@dataclass
class NewDraft:
    name: str
    content: str


@dataclass
class NewComment:
    draft_id: int
    user_id: int
    text: str
    parent_comment_id: int | None = None


@dataclass
class NewReaction:
    user_id: int
    emoji: str


def _require_object(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise PayloadError("Invalid request body")
    return payload


def _require_int(payload: dict, key: str, *, optional: bool = False) -> int | None:
    value = payload.get(key)
    if value is None and optional:
        return None
    # bool is an int subclass; reject it explicitly
    if not isinstance(value, int) or isinstance(value, bool):
        raise PayloadError(f"{key} must be an integer")
    if not MIN_SQL_INT <= value <= MAX_SQL_INT:
        raise PayloadError(f"{key} out of range")
    return value


def parse_int_param(raw: str | None, name: str, *, default: int | None = None) -> int:
    if raw is None or raw == "":
        if default is None:
            raise PayloadError(f"{name} query parameter is required")
        return default
    try:
        value = int(raw)
    except ValueError:
        raise PayloadError(f"Invalid {name}") from None
    if not MIN_SQL_INT <= value <= MAX_SQL_INT:
        raise PayloadError(f"Invalid {name}")
    return value


def parse_draft_payload(payload: Any) -> NewDraft:
    data = _require_object(payload)
    name = data.get("name")
    content = data.get("content", "")
    if not isinstance(name, str) or not name:
        raise PayloadError("name is required")
    if content is None:
        content = ""
    if not isinstance(content, str):
        raise PayloadError("content must be a string")
    return NewDraft(name=name, content=content)


def parse_comment_payload(payload: Any) -> NewComment:
    data = _require_object(payload)
    text = data.get("text")
    if not isinstance(text, str) or not text:
        raise PayloadError("text is required")
    if len(text) > MAX_COMMENT_LENGTH:
        raise PayloadError("Comment too long")
    return NewComment(
        draft_id=_require_int(data, "draftId"),
        user_id=_require_int(data, "userId"),
        text=text,
        parent_comment_id=_require_int(data, "parentCommentId", optional=True),
    )


def parse_reaction_payload(payload: Any) -> NewReaction:
    """Decode a reaction body; the target comment comes from the URL, never the body."""
    data = _require_object(payload)
    user_id = _require_int(data, "userId")
    emoji = data.get("emoji")
    if not isinstance(emoji, str) or not emoji or not is_permitted_emoji_string(emoji):
        raise InvalidEmojiError("Invalid emoji")
    return NewReaction(user_id=user_id, emoji=emoji)
