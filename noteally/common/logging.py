# noteally/common/logging.py
import logging, sys, time, uuid
from pythonjsonlogger import jsonlogger
from flask import g, request, has_app_context

# libs bavardes en DEBUG (requêtes HTTP sortantes, SDK Gemini, boto)
NOISY_LOGGERS = ("urllib3", "botocore", "boto3", "httpx", "google_genai")


def setup_json_logging(app):
    # Niveau: LOG_LEVEL si défini, sinon DEBUG en dev / INFO ailleurs
    default_level = "DEBUG" if app.debug else "INFO"
    level = getattr(logging, str(app.config.get("LOG_LEVEL") or default_level).upper(), logging.INFO)
    root = logging.getLogger()
    root.handlers = []  # nettoie
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    fmt = jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s "
        "%(request_id)s %(method)s %(path)s %(status)s %(latency_ms)s"
    )
    handler.setFormatter(fmt)
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def current_request_id() -> str:
    return getattr(g, "request_id", "-") if has_app_context() else "-"


def register_request_logging(app):
    @app.before_request
    def _assign_request_id_and_start_timer():
        # request id: X-Request-Id entrant ou généré
        rid = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        g.request_id = rid
        g._start_time = time.time()

    @app.after_request
    def _log_request(resp):
        latency = int((time.time() - getattr(g, "_start_time", time.time())) * 1000)

        # expose le request id au client
        resp.headers.setdefault("X-Request-Id", getattr(g, "request_id", "-"))

        logging.getLogger("noteally.request").info(
            "http_request",
            extra={
                "request_id": getattr(g, "request_id", "-"),
                "method": request.method,
                "path": request.path,
                "status": resp.status_code,
                "latency_ms": latency,
            },
        )
        return resp

    @app.teardown_request
    def _teardown(exc):
        if exc:
            logging.getLogger("noteally.error").error(
                "unhandled_exception",
                exc_info=exc,
                extra={"request_id": getattr(g, "request_id", "-")},
            )
