from __future__ import annotations

from flask import Flask, request

from jobgenie.utils.rate_limiter import InMemoryRateLimiter


def client_ip() -> str:
    forwarded = str(request.headers.get("X-Forwarded-For") or "")
    if forwarded:
        return forwarded.split(",", 1)[0].strip()
    return request.remote_addr or ""


def init_rate_limiting(app: Flask) -> None:
    cfg = app.config["CFG"]
    limiter = InMemoryRateLimiter()
    app.extensions["rate_limiter"] = limiter

    @app.before_request
    def _rate_limit():
        # CORS preflights carry no credentials and never reach a handler.
        if request.method == "OPTIONS" or not request.path.startswith("/api/"):
            return None

        ip = client_ip()
        limiter.check(f"{ip}:all", cfg.RATE_LIMIT_GLOBAL)
        limiter.check(f"{ip}:{request.method}:{request.path}", cfg.RATE_LIMIT_DEFAULT)
        return None
