"""
API gateway: combines the auth and events blueprints into one app.
This is the local entrypoint for development.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from event_api.auth_service.passwords import PasswordManager
from event_api.auth_service.routes import auth_bp
from event_api.auth_service.service import AuthService
from event_api.config import load_config
from event_api.database.memory_store import MemoryStore
from event_api.database.postgres_store import PostgresStore
from event_api.errors import APIError
from event_api.events_service.routes import events_bp
from event_api.events_service.service import EventService

# Basic console logging during API requests
logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")


def build_store(config: Dict[str, Any]):
    """
    Construct the store named by STORE_BACKEND.

    Raises:
        RuntimeError: Unknown backend, or postgres without DATABASE_URL.
    """
    backend = config["STORE_BACKEND"]
    if backend == "postgres":
        return PostgresStore(config["DATABASE_URL"])
    if backend == "memory":
        logging.warning("Using the in-memory store; data is lost on restart.")
        return MemoryStore()
    raise RuntimeError(f"Unknown STORE_BACKEND '{backend}'. Use 'postgres' or 'memory'.")


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(APIError)
    def handle_api_error(error: APIError):
        return jsonify({"message": error.message}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return jsonify({"message": error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        logging.exception(f"Unhandled error: {error}")
        return jsonify({"message": "Internal server error"}), 500


def create_app(test_config: Optional[Dict[str, Any]] = None, store=None) -> Flask:
    """
    Application factory for creating the Flask app.

    Args:
        test_config (dict, optional): Overrides for the environment settings.
        store (optional): A ready-made store. Built from STORE_BACKEND when omitted.

    Returns:
        Flask: The configured Flask application.

    Raises:
        RuntimeError: JWT_SECRET is missing.
    """
    app = Flask(__name__)
    app.config.update(load_config())
    if test_config:
        app.config.update(test_config)

    if not app.config.get("JWT_SECRET"):
        raise RuntimeError("JWT_SECRET is missing. Set it in .env")

    CORS(app, resources={
        r"/*": {
            "origins": app.config["CORS_ORIGINS"],
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
            "expose_headers": ["Content-Type", "Authorization"],
        }
    })

    # --- WIRE SERVICES ---
    if store is None:
        store = build_store(app.config)

    passwords = PasswordManager(
        time_cost=app.config["ARGON2_TIME_COST"],
        memory_cost=app.config["ARGON2_MEMORY_COST"],
        parallelism=app.config["ARGON2_PARALLELISM"],
    )
    app.extensions["event_api.store"] = store
    app.extensions["event_api.auth_service"] = AuthService(
        store,
        passwords,
        jwt_secret=app.config["JWT_SECRET"],
        token_ttl=timedelta(minutes=app.config["TOKEN_EXPIRATION_MINUTES"]),
        max_failed_logins=app.config["MAX_FAILED_LOGINS"],
        lockout_duration=timedelta(minutes=app.config["LOCKOUT_MINUTES"]),
        clock=app.config.get("CLOCK"),
    )
    app.extensions["event_api.event_service"] = EventService(store)

    # --- REGISTER BLUEPRINTS ---
    app.register_blueprint(auth_bp)
    app.register_blueprint(events_bp, url_prefix="/events")
    logging.info("All blueprints registered successfully.")

    register_error_handlers(app)

    # --- BASIC HEALTH CHECKPOINTS ---
    @app.route("/")
    def ping():
        """
        Root URL for simple 'online' check.
        """
        return jsonify({"message": "Hello, World!"}), 200

    @app.route("/health")
    def health():
        """
        Health check endpoint.
        """
        return jsonify({"status": "ok"}), 200

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=app.config["GATEWAY_PORT"], debug=True)
