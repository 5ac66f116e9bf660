from __future__ import annotations

import re
import time
import uuid

from flask import Flask, g, request

# Upstream ids end up in logs and error bodies; keep them short and printable.
_SAFE_ID = re.compile(r"^[A-Za-z0-9._:-]{1,64}$")


def _incoming_request_id() -> str | None:
    for header in ("X-Request-ID", "X-Correlation-ID"):
        value = str(request.headers.get(header) or "").strip()
        if value and _SAFE_ID.match(value):
            return value
    return None


def init_request_id(app: Flask) -> None:
    @app.before_request
    def _assign():
        g.request_id = _incoming_request_id() or uuid.uuid4().hex
        g.start_ts = time.monotonic()

    @app.after_request
    def _echo(resp):
        if getattr(g, "request_id", None):
            resp.headers["X-Request-ID"] = g.request_id
        return resp
