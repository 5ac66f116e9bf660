from __future__ import annotations

import json
import logging
import time
from typing import Any

from flask import Flask, g, request

from jobgenie.middlewares.rate_limit import client_ip

_QUIET_PATHS = {"/health", "/version"}


def _access_record(status: int) -> dict[str, Any]:
    start = getattr(g, "start_ts", None)
    user = getattr(g, "current_user", None) or {}
    record: dict[str, Any] = {
        "type": "request",
        "request_id": getattr(g, "request_id", ""),
        "method": request.method,
        "path": request.path,
        "status": status,
        "latency_ms": int((time.monotonic() - start) * 1000) if start is not None else None,
        "ip": client_ip(),
        "user": user.get("id") or "anonymous",
        "role": user.get("role") or "anonymous",
    }
    action = request.args.get("action")
    if action:
        record["action"] = action
    return record


def init_request_logging(app: Flask) -> None:
    logger = logging.getLogger("jobgenie.request")

    @app.after_request
    def _log(resp):
        level = logging.DEBUG if request.path in _QUIET_PATHS else logging.INFO
        if resp.status_code >= 500:
            level = logging.WARNING
        if logger.isEnabledFor(level):
            logger.log(level, json.dumps(_access_record(resp.status_code), separators=(",", ":")))
        return resp
