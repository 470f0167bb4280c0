from __future__ import annotations

import secrets

from flask import Response

from ..logging_config import REQUEST_ID_RE


def _generate_request_id(raw: str | None) -> str:
    candidate = (raw or "").strip()
    if candidate and REQUEST_ID_RE.fullmatch(candidate):
        return candidate
    return secrets.token_urlsafe(12)


def plain_error(message: str, status: int) -> Response:
    return Response(message, status=status, mimetype="text/plain")
