from functools import wraps
from flask import request, jsonify
from app.utils.security import verify_token
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _token_payload():
    """Decode the bearer token, returning (payload, error)"""
    auth_header = request.headers.get('Authorization')

    if not auth_header:
        return None, 'Authorization header missing'

    # Check format
    parts = auth_header.split()
    if len(parts) != 2 or parts[0] != 'Bearer':
        return None, 'Invalid authorization header format'

    payload = verify_token(parts[1])
    if not payload or 'user_id' not in payload:
        return None, 'Invalid or expired token'

    return payload, None


def require_auth(f):
    """Decorator to require authentication"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        payload, error = _token_payload()
        if error:
            return jsonify({'error': error}), 401

        # Add user info to kwargs
        return f(current_user=payload, *args, **kwargs)

    return decorated_function


def optional_auth(f):
    """Decorator that resolves the user when a valid token is present"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        payload, error = _token_payload()
        if error and request.headers.get('Authorization'):
            logger.debug(f"Ignoring unusable credentials: {error}")
        return f(current_user=payload, *args, **kwargs)

    return decorated_function


def require_role(allowed_roles):
    """Decorator to require specific roles"""
    def decorator(f):
        @wraps(f)
        def decorated_function(current_user, *args, **kwargs):
            if current_user.get('role') not in allowed_roles:
                return jsonify({'error': 'Insufficient permissions'}), 403
            return f(current_user=current_user, *args, **kwargs)
        return decorated_function
    return decorator


def require_admin(f):
    """Decorator to require admin role"""
    return require_role(['admin'])(f)
