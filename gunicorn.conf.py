import os


def _env_int(name: str, default: int) -> int:
    try:
        return int(str(os.getenv(name, "") or "").strip() or default)
    except Exception:
        return default


wsgi_app = "jobgenie:create_app()"

bind = f"0.0.0.0:{_env_int('PORT', 8000)}"

# Request threads share the DB pool (DB_POOL_SIZE + DB_MAX_OVERFLOW) with nothing else;
# approval emails run on their own NOTIFY_MAX_WORKERS pool.
workers = max(1, _env_int("WEB_CONCURRENCY", 2))
threads = max(1, _env_int("PYTHON_THREADS", 4))

timeout = max(10, _env_int("GUNICORN_TIMEOUT", 60))
graceful_timeout = max(5, _env_int("GUNICORN_GRACEFUL_TIMEOUT", 30))
keepalive = max(1, _env_int("GUNICORN_KEEPALIVE", 5))

accesslog = "-"
errorlog = "-"

max_requests = max(0, _env_int("GUNICORN_MAX_REQUESTS", 0))
max_requests_jitter = max(0, _env_int("GUNICORN_MAX_REQUESTS_JITTER", 0))


def worker_exit(server, worker):
    # Let queued approval emails finish before the worker goes away.
    app = getattr(worker, "wsgi", None)
    dispatcher = getattr(app, "extensions", {}).get("notifications")
    if dispatcher is not None:
        dispatcher.shutdown(wait=True)
