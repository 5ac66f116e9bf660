from __future__ import annotations

from flask import Flask, request

_BASE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}


def _behind_https() -> bool:
    return request.is_secure or str(request.headers.get("X-Forwarded-Proto") or "").lower() == "https"


def init_security_headers(app: Flask) -> None:
    cfg = app.config["CFG"]

    @app.after_request
    def _headers(resp):
        for name, value in _BASE_HEADERS.items():
            resp.headers.setdefault(name, value)

        # Approval state and listings are per-user and change under the reader.
        if request.path.startswith("/api/"):
            resp.headers.setdefault("Cache-Control", "no-store")
            resp.vary.add("Authorization")

        if cfg.IS_PRODUCTION and _behind_https():
            resp.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return resp
