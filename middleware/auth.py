# middleware/auth.py
from functools import wraps
from typing import Optional

from flask import session

from middleware.errors import AuthenticationError


def current_caller_id() -> Optional[str]:
    """User id of the signed-in caller, taken from the session."""
    user_id = session.get("user_id")
    return str(user_id) if user_id is not None else None


def login_required(view_func):
    """Decorator that requires a signed-in caller (session['user_id'])."""
    @wraps(view_func)
    def wrapper(*args, **kwargs):
        if current_caller_id() is None:
            raise AuthenticationError()
        return view_func(*args, **kwargs)
    return wrapper
