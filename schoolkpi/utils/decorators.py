from functools import wraps
from flask import abort
from flask_login import current_user

from ..models.user import Role


def role_required(*roles):
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)
            if getattr(current_user, "role", None) not in roles:
                abort(403)
            return view(*args, **kwargs)
        return wrapped
    return decorator


admin_required = role_required(Role.ADMIN)
teacher_required = role_required(Role.TEACHER)


def school_required(view):
    """Managers and teachers must be attached to a school."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not getattr(current_user, "school_id", None):
            abort(400, description="user has no school assigned")
        return view(*args, **kwargs)
    return wrapped
