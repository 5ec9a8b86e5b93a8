"""Flask application factory for the HR admin API."""

import logging
import os

from flask import Flask
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from config.settings import settings
from src.routes.departments import departments_bp
from src.routes.health import health_bp
from src.routes.holidays import holidays_bp
from src.routes.teams import teams_bp
from src.routes.users import users_bp
from src.services.auth import AuthService
from src.utils.database import get_session, init_database
from src.utils.responses import register_error_handlers

logger = logging.getLogger(__name__)

MIN_SECRET_LENGTH = 32
WEAK_SECRETS = ['dev', 'test', 'secret', 'password', 'changeme', '12345']
DEVELOPMENT_SECRET = 'dev-secret-DO-NOT-USE-IN-PRODUCTION-' + 'a' * 32


def validate_jwt_secret(jwt_secret, is_production):
    """Return the secret to sign tokens with.

    Missing or short secrets are fatal in production; development falls back
    to a fixed, clearly insecure secret and only warns.
    """
    jwt_secret = (jwt_secret or '').strip()

    if not jwt_secret:
        if is_production:
            error_msg = (
                "CRITICAL SECURITY ERROR: JWT_SECRET_KEY is not set in production!\n"
                "The application cannot start without a secure JWT secret.\n"
                "Generate a secure secret with: python -c 'import secrets; print(secrets.token_hex(32))'"
            )
            logger.error(error_msg)
            raise ValueError(error_msg)

        logger.warning("JWT_SECRET_KEY not set - using development secret (NOT FOR PRODUCTION)")
        return DEVELOPMENT_SECRET

    if len(jwt_secret) < MIN_SECRET_LENGTH:
        error_msg = (
            f"CRITICAL SECURITY ERROR: JWT_SECRET_KEY is too short ({len(jwt_secret)} chars)!\n"
            f"Minimum length: {MIN_SECRET_LENGTH} characters."
        )
        logger.error(error_msg)
        if is_production:
            raise ValueError(error_msg)
        logger.warning("Continuing in development with weak secret (NOT FOR PRODUCTION)")

    if any(weak in jwt_secret.lower() for weak in WEAK_SECRETS):
        logger.warning(
            "JWT_SECRET_KEY appears to contain common weak patterns. "
            "Use a cryptographically secure random value in production."
        )

    return jwt_secret


def create_app(testing=None):
    """Build the Flask app: CORS, rate limits, auth, blueprints and error handlers."""
    if testing is None:
        testing = os.getenv('TESTING', '').lower() == 'true'

    is_production = os.getenv('FLASK_ENV', settings.web.environment) == 'production'

    app = Flask(__name__)
    app.config['TESTING'] = testing
    app.config['JSON_SORT_KEYS'] = False

    jwt_secret = validate_jwt_secret(os.getenv('JWT_SECRET_KEY', ''), is_production)
    app.secret_key = jwt_secret

    CORS(app, origins=settings.web.client_urls, supports_credentials=True,
         allow_headers=['Content-Type', 'Authorization'],
         methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'])
    logger.info(f"CORS origins: {settings.web.client_urls}")

    limiter = Limiter(
        key_func=get_remote_address,
        app=app,
        default_limits=[settings.web.rate_limit_default],
        storage_uri=os.getenv('RATELIMIT_STORAGE_URI', 'memory://'),
        strategy='moving-window',
        headers_enabled=True,
        enabled=not testing,
    )

    init_database()

    app.auth_service = AuthService(get_session, jwt_secret=jwt_secret)

    app.register_blueprint(health_bp)
    limiter.exempt(health_bp)

    app.register_blueprint(teams_bp)
    app.register_blueprint(holidays_bp)
    app.register_blueprint(departments_bp)
    app.register_blueprint(users_bp)

    register_error_handlers(app)

    app.limiter = limiter
    logger.info(f"HR admin API initialized (environment={'production' if is_production else 'development'})")
    return app
