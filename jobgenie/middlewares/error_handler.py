from __future__ import annotations

import logging
from typing import Any

from flask import Flask, g, jsonify
from werkzeug.exceptions import HTTPException

from jobgenie.utils.errors import ApiError


def error_payload(code: str, message: str, details: Any | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"error": message, "code": code}
    if details is not None:
        payload["details"] = details
    if getattr(g, "request_id", None):
        payload["request_id"] = g.request_id
    return payload


def init_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def _api_error(err: ApiError):
        return jsonify(error_payload(err.code, err.message, err.details)), err.status

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        status = int(err.code or 500)
        if status == 404:
            code = "NOT_FOUND"
        elif status == 405:
            code = "METHOD_NOT_ALLOWED"
        else:
            code = f"HTTP_{status}"
        return jsonify(error_payload(code, str(err.description or "HTTP error"))), status

    @app.errorhandler(Exception)
    def _unhandled(err: Exception):
        logging.getLogger("jobgenie").exception(
            "Unhandled exception request_id=%s", getattr(g, "request_id", "")
        )
        return jsonify(error_payload("INTERNAL_ERROR", "Internal server error")), 500
