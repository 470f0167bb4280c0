from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from ..metrics import DRAFTS_CREATED, observe
from ..services.store import DraftStore, StoreError
from ..utils.request import plain_error
from ..utils.validation import PayloadError, parse_draft_payload, parse_int_param

logger = logging.getLogger("docdrafts.drafts")

DEFAULT_DRAFTS_LIMIT = 1


def create_drafts_blueprint(store: DraftStore):
    bp = Blueprint("drafts", __name__)

    @bp.route("/api/drafts", methods=["POST"])
    def add_draft():
        try:
            new_draft = parse_draft_payload(request.get_json(silent=True))
        except PayloadError as exc:
            return plain_error(str(exc), 400)

        try:
            draft = store.create_draft(new_draft.name, new_draft.content)
        except StoreError as exc:
            return plain_error(str(exc), 500)

        observe(DRAFTS_CREATED, "new_document" if draft.version_number == 1 else "new_version")
        logger.info(
            "Draft %s added to document %s (version %s)",
            draft.id,
            draft.document_id,
            draft.version_number,
        )
        return jsonify({"message": "Draft added successfully"}), 200

    @bp.route("/api/drafts", methods=["GET"])
    def get_most_recent_drafts():
        try:
            limit = parse_int_param(request.args.get("limit"), "limit", default=DEFAULT_DRAFTS_LIMIT)
        except PayloadError:
            return plain_error("Invalid limit parameter", 400)

        try:
            drafts = store.get_latest_drafts(limit)
        except StoreError as exc:
            return plain_error(str(exc), 500)
        return jsonify([draft.to_json() for draft in drafts])

    @bp.route("/api/drafts/search", methods=["GET"])
    def search_drafts():
        text = request.args.get("text") or ""
        if not text:
            return plain_error("text parameter is required", 400)

        try:
            drafts = store.search_drafts(text)
        except StoreError as exc:
            return plain_error(str(exc), 500)
        return jsonify([draft.to_json() for draft in drafts])

    @bp.route("/api/documents/latest", methods=["GET"])
    def get_documents_latest_versions():
        try:
            documents = store.get_all_documents_latest_versions()
        except StoreError as exc:
            return plain_error(str(exc), 500)
        return jsonify([document.to_json() for document in documents])

    return bp
