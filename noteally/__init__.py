import os
from flask import Flask, jsonify, request
from dotenv import load_dotenv
from sqlalchemy import text

from .config import DevConfig, ProdConfig, TestConfig
from .extensions import db, migrate, jwt, cors
from .common.errors import register_error_handlers
from .common.logging import setup_json_logging, register_request_logging


def create_app(overrides=None):
    # Charge .env si présent (dev)
    load_dotenv()

    app = Flask(__name__)

    # Choix config selon env
    env = os.getenv("APP_ENV") or os.getenv("FLASK_ENV", "development")
    if env in ("test", "testing"):
        app.config.from_object(TestConfig)
    elif env == "production":
        app.config.from_object(ProdConfig)
    else:
        app.config.from_object(DevConfig)
    if overrides:
        app.config.update(overrides)

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    setup_json_logging(app)
    register_request_logging(app)

    # --- Helpers ---
    def _csv(value, default_if_empty):
        """Convertit une chaîne CSV en liste, sinon retourne la valeur telle quelle ou un défaut."""
        if value is None:
            return default_if_empty
        if isinstance(value, str) and "," in value:
            items = [x.strip() for x in value.split(",") if x.strip()]
            return items if items else default_if_empty
        return value

    # --- CORS: whitelist + headers ---
    origins = _csv(app.config.get("CORS_ORIGINS", "*"), "*")
    allow_headers = _csv(app.config.get("CORS_ALLOW_HEADERS"), ["Authorization", "Content-Type"])
    expose_headers = _csv(app.config.get("CORS_EXPOSE_HEADERS"), ["Content-Type"])

    cors.init_app(app, resources={
        r"/api/*": {
            "origins": origins,
            "allow_headers": allow_headers,
            "expose_headers": expose_headers,
            "supports_credentials": False,
        }
    })

    # Importer les modèles pour que Flask-Migrate/Alembic voie les tables
    from .users import models as users_models  # noqa: F401
    from .notes import models as notes_models  # noqa: F401
    from .auth import models as auth_models    # noqa: F401

    # --- Services: stockage PDF, pipeline IA, jobs de résumé ---
    from .storage.backends import build_storage
    from .ai.service import Summarizer, SummarizerSettings
    from .ai.jobs import SummaryJobRunner

    summarizer = Summarizer(SummarizerSettings.from_config(app.config))
    app.extensions["storage"] = build_storage(app.config)
    app.extensions["summarizer"] = summarizer
    app.extensions["summary_jobs"] = SummaryJobRunner(
        app, summarizer,
        eager=app.config.get("SUMMARY_JOBS_EAGER", False),
        stale_after=app.config.get("SUMMARY_JOB_STALE_SECONDS", 900),
    )

    # Handlers d'erreurs JSON uniformes
    register_error_handlers(app)

    # --- Callbacks JWT (revocation & erreurs standardisées) ---
    from .auth.models import TokenBlocklist

    @jwt.token_in_blocklist_loader
    def is_token_revoked(jwt_header, jwt_payload: dict) -> bool:
        return TokenBlocklist.is_revoked(jwt_payload["jti"])

    @jwt.revoked_token_loader
    def revoked_token_callback(jwt_header, jwt_payload):
        return jsonify({"error": {"code": "token_revoked", "message": "Token has been revoked", "details": {}}}), 401

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({"error": {"code": "token_expired", "message": "Token has expired", "details": {}}}), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(err_msg):
        return jsonify({"error": {"code": "token_invalid", "message": err_msg, "details": {}}}), 422

    @jwt.unauthorized_loader
    def unauthorized_callback(err_msg):
        return jsonify({"error": {"code": "authorization_required", "message": err_msg, "details": {}}}), 401

    # --- Security headers (UN SEUL after_request) ---
    @app.after_request
    def set_security_headers(resp):
        path = request.path or ""

        if path.startswith("/docs"):
            # Docs: Swagger UI servi par unpkg + init locale
            resp.headers["Content-Security-Policy"] = (
                "default-src 'self'; "
                "connect-src 'self'; "
                "img-src 'self' data:; "
                "style-src 'self' 'unsafe-inline' https://unpkg.com; "
                "script-src 'self' https://unpkg.com; "
                "font-src 'self' data:"
            )
            resp.headers["X-Frame-Options"] = "SAMEORIGIN"
        else:
            # API JSON / PDF: CSP très restrictif
            resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'; base-uri 'none'"
            resp.headers["X-Frame-Options"] = "DENY"

        # Headers communs
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["Referrer-Policy"] = "no-referrer"

        # HSTS uniquement si HTTPS (prod / reverse-proxy)
        if (env == "production" or app.config.get("ENFORCE_HTTPS")) and (
            request.is_secure or request.headers.get("X-Forwarded-Proto", "") == "https"
        ):
            resp.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains; preload"

        return resp

    # --- Blueprints ---
    from .auth.routes import bp as auth_bp
    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")

    from .notes.routes import bp as notes_bp
    app.register_blueprint(notes_bp, url_prefix="/api/v1/notes")

    from .ai.routes import bp as ai_bp
    app.register_blueprint(ai_bp, url_prefix="/api/v1/ai")

    from .storage.routes import bp as files_bp
    app.register_blueprint(files_bp)

    from .docs.routes import bp as docs_bp
    app.register_blueprint(docs_bp)

    def _db_up() -> bool:
        try:
            with db.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception:
            app.logger.warning("db_ping_failed", exc_info=True)
            return False

    # Liveness probe (ping DB simple)
    @app.get("/healthz")
    def healthz():
        return jsonify({
            "status": "ok",
            "env": env,
            "db": "up" if _db_up() else "down",
        })

    # Readiness probe (DB)
    @app.get("/readyz")
    def readyz():
        ok = _db_up()
        status = {"db": "up" if ok else "down", "status": "ok" if ok else "error"}
        return jsonify(status), (200 if ok else 503)

    return app
