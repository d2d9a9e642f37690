from functools import wraps
from flask_jwt_extended import verify_jwt_in_request, get_jwt, get_jwt_identity
from flask import jsonify

from carnet.services.session_service import ROLE_STAFF


def role_required(*roles):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            claims = get_jwt()
            role = claims.get("role")
            if role not in roles:
                return jsonify({"success": False, "message": "No autorizado", "code": "forbidden"}), 403
            return fn(*args, **kwargs)
        return wrapper
    return decorator


def current_principal():
    """(identidad, rol, claims) del JWT ya verificado."""
    claims = get_jwt()
    return get_jwt_identity(), claims.get("role"), claims


def is_self_or_staff(student_code: str) -> bool:
    identity, role, _claims = current_principal()
    return role == ROLE_STAFF or identity == student_code
