"""Authentication service: bearer token verification and route decorators."""
import jwt
from datetime import datetime, timedelta, timezone
from functools import wraps
from flask import request, jsonify, current_app
from config.settings import settings
from src.models.user import User, UserRole
from src.services.access_control import Actor, PRIVILEGED_ROLES
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """Service for handling authentication.

    Login itself happens elsewhere; this service only mints and verifies the
    JWTs the dashboard sends with every request.
    """

    def __init__(self, db_session_factory, jwt_secret=None):
        self.db_session_factory = db_session_factory

        self.jwt_secret = jwt_secret or settings.auth.jwt_secret
        if not self.jwt_secret:
            logger.warning(
                "JWT_SECRET_KEY is not set - generating random secret (NOT RECOMMENDED FOR PRODUCTION). "
                "Set JWT_SECRET_KEY env var with: python -c 'import secrets; print(secrets.token_hex(32))'"
            )
            import secrets
            self.jwt_secret = secrets.token_hex(32)

        self.jwt_algorithm = settings.auth.jwt_algorithm
        self.jwt_expiry_hours = settings.auth.jwt_expiry_hours

    def generate_jwt_token(self, user, expiry_hours=None):
        """Generate JWT token for a user."""
        expiry_hours = expiry_hours or self.jwt_expiry_hours
        now = datetime.now(timezone.utc)

        payload = {
            'user_id': user.id,
            'email': user.email,
            'role': user.role.value,
            'exp': now + timedelta(hours=expiry_hours),
            'iat': now
        }

        return jwt.encode(payload, self.jwt_secret, algorithm=self.jwt_algorithm)

    def verify_jwt_token(self, token):
        """Verify JWT token and return its payload."""
        try:
            return jwt.decode(token, self.jwt_secret, algorithms=[self.jwt_algorithm])
        except jwt.ExpiredSignatureError:
            raise ValueError("Token has expired")
        except jwt.InvalidTokenError:
            raise ValueError("Invalid token")

    def get_current_user(self, token):
        """Resolve the token to an Actor.

        The role is always read from the database so a demotion takes effect
        without waiting for the token to expire.
        """
        payload = self.verify_jwt_token(token)

        db_session = self.db_session_factory()
        try:
            user = db_session.get(User, payload.get('user_id'))

            if not user:
                raise ValueError("User not found")

            if not user.can_access():
                raise ValueError("User account is deactivated")

            return Actor.from_user(user)
        finally:
            db_session.close()


def _extract_token():
    auth_header = request.headers.get('Authorization')
    if auth_header:
        parts = auth_header.split(' ')
        if len(parts) != 2 or parts[0].lower() != 'bearer':
            raise ValueError('Invalid authorization header format')
        return parts[1]

    # Cookie fallback for the dashboard
    return request.cookies.get(settings.auth.cookie_name)


def auth_required(f):
    """Decorator to require authentication for routes.

    The resolved Actor is passed as the first positional argument.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            token = _extract_token()
        except ValueError as e:
            return jsonify({'success': False, 'message': str(e)}), 401

        if not token:
            return jsonify({'success': False, 'message': 'Authentication required'}), 401

        try:
            actor = current_app.auth_service.get_current_user(token)
        except ValueError as e:
            logger.warning(f"Authentication failed: {e}")
            return jsonify({'success': False, 'message': str(e)}), 401

        request.current_user = actor
        return f(actor, *args, **kwargs)

    return decorated_function


def roles_required(*roles):
    """Decorator to restrict a route to the given roles."""
    allowed = frozenset(roles)

    def decorator(f):
        @wraps(f)
        @auth_required
        def decorated_function(actor, *args, **kwargs):
            if actor.role not in allowed:
                logger.warning(f"User {actor.id} with role {actor.role.value} denied access to {request.path}")
                return jsonify({
                    'success': False,
                    'message': f"Access denied. Required role: {', '.join(r.value for r in roles)}"
                }), 403
            return f(actor, *args, **kwargs)

        return decorated_function
    return decorator


def privileged_required(f):
    """Decorator to restrict a route to the HR and leadership roles."""
    return roles_required(*sorted(PRIVILEGED_ROLES, key=lambda r: list(UserRole).index(r)))(f)
