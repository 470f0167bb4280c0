from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from ..metrics import COMMENTS_CREATED, REACTIONS_CREATED, REACTIONS_REJECTED, observe
from ..services.store import DraftStore, StoreError
from ..utils.request import plain_error
from ..utils.validation import (
    InvalidEmojiError,
    PayloadError,
    parse_comment_payload,
    parse_int_param,
    parse_reaction_payload,
)

logger = logging.getLogger("docdrafts.comments")


def create_comments_blueprint(store: DraftStore):
    bp = Blueprint("comments", __name__)

    @bp.route("/api/comments", methods=["POST"])
    def add_comment():
        try:
            new_comment = parse_comment_payload(request.get_json(silent=True))
        except PayloadError as exc:
            return plain_error(str(exc), 400)

        try:
            if store.get_draft(new_comment.draft_id) is None:
                return plain_error("Draft not found", 404)
            if new_comment.parent_comment_id is not None:
                parent = store.get_comment(new_comment.parent_comment_id)
                if parent is None:
                    return plain_error("Parent comment not found", 404)
            comment_id = store.add_comment(
                new_comment.draft_id,
                new_comment.user_id,
                new_comment.text,
                new_comment.parent_comment_id,
            )
        except StoreError as exc:
            logger.error("Failed to add comment: %s", exc)
            return plain_error(str(exc), 500)

        observe(COMMENTS_CREATED)
        logger.info("Comment %s added to draft %s", comment_id, new_comment.draft_id)
        return jsonify({"id": comment_id, "message": "Comment added successfully"}), 201

    @bp.route("/api/comment/<comment_id>/reaction", methods=["POST"])
    def add_reaction(comment_id: str):
        try:
            target_id = parse_int_param(comment_id, "Comment ID")
        except PayloadError:
            return plain_error("Invalid Comment ID", 400)

        try:
            new_reaction = parse_reaction_payload(request.get_json(silent=True))
        except InvalidEmojiError as exc:
            observe(REACTIONS_REJECTED)
            return plain_error(str(exc), 400)
        except PayloadError as exc:
            return plain_error(str(exc), 400)

        try:
            if store.get_comment(target_id) is None:
                return plain_error("Comment not found", 404)
            store.add_reaction(target_id, new_reaction.user_id, new_reaction.emoji)
        except StoreError as exc:
            logger.error("Failed to add reaction: %s", exc)
            return plain_error(str(exc), 500)

        observe(REACTIONS_CREATED)
        return jsonify({"message": "Reaction added successfully"}), 201

    @bp.route("/api/drafts/comments-reactions", methods=["GET"])
    def get_comments_and_reactions():
        try:
            draft_id = parse_int_param(request.args.get("draftId"), "draftId")
        except PayloadError as exc:
            return plain_error(str(exc), 400)

        try:
            comments = store.get_comments_and_reactions(draft_id)
        except StoreError as exc:
            return plain_error(str(exc), 500)
        return jsonify([comment.to_json() for comment in comments])

    return bp
