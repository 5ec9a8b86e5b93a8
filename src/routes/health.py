"""Health check endpoints."""

from flask import Blueprint, jsonify
from datetime import datetime
from sqlalchemy import text
import logging

from src.utils.database import get_engine

logger = logging.getLogger(__name__)

# Create blueprint
health_bp = Blueprint('health', __name__, url_prefix='/api')


@health_bp.route('/health', methods=['GET'])
def health_check():
    """Liveness probe. Exempt from rate limiting and authentication."""
    return jsonify({
        'success': True,
        'status': 'healthy',
        'timestamp': datetime.now().isoformat()
    }), 200


@health_bp.route('/health/database', methods=['GET'])
def database_health_check():
    """Database connectivity check."""
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()

        return jsonify({
            'success': True,
            'status': 'healthy',
            'timestamp': datetime.now().isoformat()
        }), 200

    except Exception as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        return jsonify({
            'success': False,
            'status': 'unhealthy',
            'error': str(e),
            'timestamp': datetime.now().isoformat()
        }), 503
