# bidtracker/middleware/auth.py
"""
Bridges Flask-Login's session user to the service layer's explicit
RequestContext, and offers a route decorator for the permission matrix.
"""

from functools import wraps
from flask import jsonify, request
from flask_login import current_user
import logging

from ..services.permissions import ANONYMOUS, RequestContext, can

logger = logging.getLogger(__name__)


def current_context():
    """
    RequestContext for the user behind the current request.

    Anonymous or inactive users get a context with no role, which the
    permission matrix treats as having no permissions.
    """
    if not current_user or not current_user.is_authenticated:
        return ANONYMOUS
    if not getattr(current_user, 'is_active', False):
        return RequestContext(user_id=current_user.id, role=None)
    return RequestContext(user_id=current_user.id, role=current_user.role)


def permission_required(action):
    """
    Decorator to require a permission from the role matrix.
    Must be placed AFTER the @login_required decorator.

    Usage:
        @bp.route('/things', methods=['POST'])
        @login_required
        @permission_required('create')
        def create_thing():
            ...
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            ctx = current_context()
            if not can(ctx.role, action):
                logger.warning(f"User {ctx.user_id} (role: {ctx.role or 'N/A'}) denied '{action}' on {request.endpoint}")
                return jsonify({'error': 'Forbidden'}), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator
