import logging
import os

from blueprints.account import account_bp
from blueprints.applications import applications_bp
from blueprints.auth import auth_bp
from blueprints.jobs import jobs_bp
from blueprints.saved_jobs import saved_jobs_bp
from blueprints.system import system_bp
from config import Config
from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from shared.errors import AuthRequired, MarketplaceError

from utils.errors import error_response
from utils.services import get_auth_service, get_session_events, log_session_event

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app():
    """Application factory function."""
    app = Flask(__name__)
    app.config.from_object(Config)

    # Initialize JWT
    jwt = JWTManager(app)

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify(AuthRequired("Your session has expired. Please sign in again").to_dict()), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        logger.warning(f"Invalid token: {error}")
        return jsonify(AuthRequired("Your session is invalid. Please sign in again").to_dict()), 401

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return jsonify(AuthRequired(redirect=Config.SIGNIN_PATH).to_dict()), 401

    @jwt.revoked_token_loader
    def revoked_token_callback(jwt_header, jwt_payload):
        return jsonify(AuthRequired("You have signed out. Please sign in again").to_dict()), 401

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        return get_auth_service().is_token_revoked(jwt_payload["jti"])

    # Errors raised by token checks, outside any route
    @app.errorhandler(MarketplaceError)
    def marketplace_error_handler(error):
        return error_response(error)

    # Initialize CORS
    CORS(
        app,
        origins=Config.CORS_ORIGINS,
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization"],
    )

    # Register Blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(account_bp)
    app.register_blueprint(jobs_bp)
    app.register_blueprint(applications_bp)
    app.register_blueprint(saved_jobs_bp)
    app.register_blueprint(system_bp)

    # Audit sign-in and sign-out once per process
    events = get_session_events()
    if log_session_event not in events:
        events.subscribe(log_session_event)

    return app


if __name__ == "__main__":
    app = create_app()
    debug = os.getenv("ENVIRONMENT", "development") == "development"
    app.run(host="0.0.0.0", port=5000, debug=debug, use_reloader=debug)
