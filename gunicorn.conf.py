import os


def _as_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    try:
        return int(raw) if raw is not None else int(default)
    except (TypeError, ValueError):
        return int(default)


# Auto-loaded by gunicorn from the project root.
wsgi_app = "wsgi:app"
bind = f"0.0.0.0:{_as_int('PORT', 8000)}"

workers = max(1, _as_int("GUNICORN_WORKERS", _as_int("WEB_CONCURRENCY", 2)))
threads = max(1, _as_int("GUNICORN_THREADS", 4))
worker_class = os.getenv("GUNICORN_WORKER_CLASS", "gthread")

timeout = _as_int("GUNICORN_TIMEOUT", 60)
graceful_timeout = _as_int("GUNICORN_GRACEFUL_TIMEOUT", 30)
keepalive = _as_int("GUNICORN_KEEPALIVE", 5)

preload_app = os.getenv("GUNICORN_PRELOAD", "false").lower() == "true"

accesslog = "-"
errorlog = "-"
loglevel = os.getenv("GUNICORN_LOG_LEVEL", os.getenv("LOG_LEVEL", "info")).lower()
