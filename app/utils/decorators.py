from functools import wraps
from flask import jsonify
from flask_jwt_extended import get_jwt_identity, get_jwt, verify_jwt_in_request


def current_actor():
    """Returns (actor_id, role) from the verified JWT."""
    claims = get_jwt()
    identity = get_jwt_identity()
    role = claims.get("role")
    if role == "admin":
        return identity, role
    return int(identity), role


def require_role(*roles):
    """
    Decorator to require a JWT carrying one of the given roles
    Usage: @require_role('doctor', 'admin')
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            verify_jwt_in_request()
            role = get_jwt().get("role")
            if role not in roles:
                return jsonify({
                    'success': False,
                    'message': f'Permission denied. Required roles: {", ".join(roles)}'
                }), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator
