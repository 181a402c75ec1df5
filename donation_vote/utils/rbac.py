from functools import wraps
from flask import abort, current_app
from flask_jwt_extended import get_jwt, verify_jwt_in_request

def operator_required(fn):
    """
    Require a JWT whose "role" claim is one of OPERATOR_ROLES.
    Trigger sources and reporting consumers authenticate this way.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        role = get_jwt().get("role")
        if role not in current_app.config["OPERATOR_ROLES"]:
            abort(403, description="Insufficient permissions")
        return fn(*args, **kwargs)
    return wrapper
