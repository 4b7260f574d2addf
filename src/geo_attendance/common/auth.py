"""Session identity at the HTTP boundary.

The authentication service stores ``user_id`` and ``role`` in the Flask
session; controllers only read them.
"""
from __future__ import annotations

from functools import wraps

from flask import session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError


def current_user_id() -> int:
    if "user_id" not in session:
        raise AuthenticationError()
    return int(session["user_id"])


def current_role() -> Role:
    try:
        return Role(session.get("role"))
    except ValueError:
        raise AuthorizationError("Unknown role")


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        current_user_id()
        return view(*args, **kwargs)

    return wrapper


def role_required(minimum: Role):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            current_user_id()
            if not current_role().at_least(minimum):
                raise AuthorizationError()
            return view(*args, **kwargs)

        return wrapper

    return decorator
