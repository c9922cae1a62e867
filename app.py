"""Application factory."""

import json
import os
import uuid

from flask import Flask, g, jsonify, redirect, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config
from models import db
from repositories import SqlAlchemyRepository
from routes.account import account_bp
from routes.admin import admin_bp
from routes.ai import ai_bp
from routes.auth import auth_bp
from routes.listings import listings_bp
from routes.notifications import notifications_bp
from routes.reservations import reservations_bp
from routes.reviews import favourites_bp, reviews_bp
from services.access_policy import PolicyPaths, evaluate, is_under
from services.mailer import build_email_sender
from services.notifications import NotificationDispatcher
from utils.identity import current_principal

migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Core subsystems
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    # CORS
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    # Rate limiting
    storage_uri = app.config.get("RATELIMIT_STORAGE_URI", "memory://")
    headers_enabled = app.config.get("RATELIMIT_HEADERS_ENABLED", True)
    key_prefix = app.config.get("RATELIMIT_KEY_PREFIX") or str(uuid.uuid4())

    global limiter
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[lambda: app.config.get("RATE_LIMIT", "60 per minute")],
        storage_uri=storage_uri,
        headers_enabled=headers_enabled,
        key_prefix=key_prefix,
    )
    limiter.init_app(app)
    app.config["RATELIMIT_KEY_PREFIX"] = key_prefix

    # Collaborators reached through current_app.extensions
    repository = SqlAlchemyRepository(db)
    app.extensions["repository"] = repository
    app.extensions["notifier"] = NotificationDispatcher(repository)
    app.extensions["email_sender"] = build_email_sender(app.config)

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(account_bp, url_prefix="/api")
    app.register_blueprint(listings_bp, url_prefix="/api/listings")
    app.register_blueprint(reservations_bp, url_prefix="/api/reservations")
    app.register_blueprint(reviews_bp, url_prefix="/api/reviews")
    app.register_blueprint(favourites_bp, url_prefix="/api/favourites")
    app.register_blueprint(ai_bp, url_prefix="/api/ai")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")
    app.register_blueprint(notifications_bp, url_prefix="/api/notifications")

    # Health
    @app.route("/health", methods=["GET"])
    def health_check():
        return jsonify({"status": "ok"})

    # Errors
    _register_error_handlers(app)

    # Page access
    _register_access_policy(app)

    return app


def _register_access_policy(app: Flask) -> None:
    """Redirect page requests the access policy does not allow."""

    paths = PolicyPaths.from_config(app.config)
    unguarded = tuple(app.config.get("UNGUARDED_PATH_PREFIXES", ()))

    @app.before_request
    def _enforce_access_policy():
        if request.method == "OPTIONS":
            return None
        if any(is_under(request.path, prefix) for prefix in unguarded):
            return None

        principal = current_principal()
        decision = evaluate(principal, request.path, paths)
        if decision.allowed:
            return None

        app.logger.info(
            "Access to %s denied for user %s (%s); redirecting to %s",
            request.path,
            principal.user_id,
            decision.state,
            decision.redirect_to,
        )
        return redirect(decision.redirect_to)


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers with request IDs."""

    @app.before_request
    def _assign_request_id():  # pragma: no cover
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    @app.after_request
    def _add_request_id_header(response):  # pragma: no cover
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        request_id = g.get("request_id") or str(uuid.uuid4())
        response = error.get_response()
        payload = {
            "error": getattr(error, "name", "Error"),
            "detail": error.description,
            "request_id": request_id,
        }
        response.data = json.dumps(payload)
        response.content_type = "application/json"
        response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):  # pragma: no cover
        request_id = g.get("request_id") or str(uuid.uuid4())
        app.logger.exception("Unhandled application error", exc_info=error)
        payload = {
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred.",
            "request_id": request_id,
        }
        response = jsonify(payload)
        response.status_code = 500
        response.headers.setdefault("X-Request-ID", request_id)
        return response


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
