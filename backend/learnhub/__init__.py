import logging
import os

from flask import Flask, jsonify
from sqlalchemy import text
from werkzeug.exceptions import HTTPException

from learnhub.config import Config, is_production
from learnhub.extensions import db, migrate, cors, login_manager
from learnhub.workflows.errors import WorkflowError


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    env = app.config.get("LEARNHUB_ENV", "dev")

    # Production safety checks
    if is_production(env):
        secret = (app.config.get("SECRET_KEY") or "").strip()
        if not secret or len(secret) < 16 or secret == "dev-secret":
            raise RuntimeError("SECRET_KEY must be set and at least 16 chars in production")
        if not (os.getenv("DATABASE_URL") or "").strip() and not (os.getenv("SQLALCHEMY_DATABASE_URI") or "").strip():
            raise RuntimeError("DATABASE_URL (or SQLALCHEMY_DATABASE_URI) must be set in production")

    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL") or "INFO"), logging.INFO))

    database_url = app.config["SQLALCHEMY_DATABASE_URI"]
    if database_url.startswith("sqlite:///") and database_url != "sqlite:///:memory:":
        # Ensure instance dir exists for SQLite paths
        os.makedirs(os.path.dirname(os.path.abspath(database_url[len("sqlite:///"):])), exist_ok=True)

    # CORS configuration
    cors_origins = (app.config.get("CORS_ORIGINS") or "").strip()
    origins = [o.strip() for o in cors_origins.split(",") if o.strip()]
    if not origins and not is_production(env):
        origins = ["*"]
    cors.init_app(app, resources={r"/api/*": {"origins": origins}})

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # Models and auth loaders register themselves on import
    from learnhub import auth, models  # noqa: F401
    from learnhub.segments.segment_promotions import promotions_bp
    from learnhub.segments.segment_role_change import role_change_bp
    from learnhub.segments.segment_users import users_bp
    from learnhub.segments.segment_audit_admin import audit_bp
    from learnhub.segments.segment_system_settings import system_settings_bp

    app.register_blueprint(promotions_bp)
    app.register_blueprint(role_change_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(audit_bp)
    app.register_blueprint(system_settings_bp)

    @app.errorhandler(WorkflowError)
    def _workflow_error(e: WorkflowError):
        db.session.rollback()
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(Exception)
    def _unexpected_error(e: Exception):
        if isinstance(e, HTTPException):
            return jsonify({"message": e.description}), e.code
        db.session.rollback()
        app.logger.exception("unhandled error: %s", e)
        return jsonify({"message": "Server error"}), 500

    # Health check
    @app.get("/api/health")
    def health():
        db_state = "ok"
        try:
            db.session.execute(text("SELECT 1"))
        except Exception:
            db.session.rollback()
            app.logger.exception("health check database probe failed")
            db_state = "fail"
        return jsonify({
            "ok": True,
            "service": "learnhub-backend",
            "env": env,
            "db": db_state,
        })

    if app.config.get("AUTO_CREATE_TABLES"):
        with app.app_context():
            db.create_all()

    return app
