# bidtracker/routes/health.py
from datetime import datetime, timezone
from flask import Blueprint, jsonify, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .. import __version__
from ..models import db

health_bp = Blueprint('health', __name__)


@health_bp.route('/health', methods=['GET'])
def health_check():
    """Database connectivity check; 503 when the database is unreachable"""
    health_status = {
        'status': 'healthy',
        'app': 'Bid Tracker API',
        'version': __version__,
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'checks': {}
    }

    try:
        db.session.execute(text('SELECT 1'))
        health_status['checks']['database'] = {'status': 'healthy', 'connected': True}
        status_code = 200
    except SQLAlchemyError as db_error:
        db.session.rollback()
        current_app.logger.error(f"Database health check failed: {db_error}")
        health_status['status'] = 'unhealthy'
        health_status['checks']['database'] = {'status': 'unhealthy', 'connected': False, 'error': str(db_error)}
        status_code = 503

    return jsonify(health_status), status_code
