from __future__ import annotations

import logging
import os
import sys
import uuid
from typing import Any, Mapping

from flask import Flask, jsonify
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.errors import GameError, RateLimited, Unexpected
from .game.service import RoomService
from .realtime.events import make_socketio_notifier
from .realtime.handlers import register_socketio_handlers
from .routes.actions import bp as actions_bp
from .routes.health import bp as health_bp
from .routes.rooms import bp as rooms_bp
from .routes.words import bp as words_bp
from .security.gate import ActionGate
from .security.ratelimit import RateLimiter


logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Keep the request log quiet unless debugging.
    logging.getLogger("werkzeug").setLevel(logging.WARNING)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(GameError)
    def handle_game_error(err: GameError):
        response = jsonify(err.to_dict())
        response.status_code = err.status
        if isinstance(err, RateLimited):
            response.headers["Retry-After"] = str(err.retry_after)
        return response

    @app.errorhandler(HTTPException)
    def handle_http_error(err: HTTPException):
        response = jsonify({"error": (err.name or "error").lower().replace(" ", "_")})
        response.status_code = err.code or 500
        return response

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        correlation_id = uuid.uuid4().hex
        logger.exception("Unhandled error [%s]", correlation_id)
        unexpected = Unexpected(correlation_id)
        response = jsonify(unexpected.to_dict())
        response.status_code = unexpected.status
        return response


def create_app(overrides: Mapping[str, Any] | None = None) -> tuple[Flask, SocketIO]:
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    _configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    env_async_mode = app.config.get("SOCKETIO_ASYNC_MODE") or os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()
    if env_async_mode:
        async_mode = env_async_mode
    else:
        # Default choice:
        # - Windows: threading (eventlet has known compatibility issues on newer Python)
        # - Python >= 3.13: threading (safer default)
        # - Otherwise: eventlet
        if sys.platform.startswith("win") or sys.version_info >= (3, 13):
            async_mode = "threading"
        else:
            async_mode = "eventlet"

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=async_mode,
    )

    service = RoomService(
        rng=app.config.get("RANDOM"),
        notifier=make_socketio_notifier(socketio),
        min_participants=app.config["MIN_ONLINE_PARTICIPANTS"],
        max_participants=app.config["MAX_PARTICIPANTS"],
    )
    limiter = RateLimiter(
        limits=app.config["RATE_LIMITS"],
        window_sec=app.config["RATE_LIMIT_WINDOW_SEC"],
        default_limit=app.config["RATE_LIMIT_DEFAULT"],
    )
    gate = ActionGate(service, limiter)
    app.extensions["impostor"] = {
        "service": service,
        "gate": gate,
        "limiter": limiter,
        "socketio": socketio,
    }

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")
    app.register_blueprint(actions_bp, url_prefix="/api")
    app.register_blueprint(words_bp, url_prefix="/api")

    _register_error_handlers(app)
    register_socketio_handlers(socketio, gate)

    logger.info("App created (async_mode=%s)", async_mode)
    return app, socketio
