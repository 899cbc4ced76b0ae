"""Bearer-token authentication for blueprints.

Usage inside a blueprint factory:

    login_required = token_required(auth_service)

    @bp.route('/api/sweets')
    @login_required
    def list_sweets():
        principal = current_principal()
"""
from __future__ import annotations

from functools import wraps
from typing import Callable, Optional

from flask import g, request

from core.errors import UnauthorizedError
from schemas.user import Principal


def bearer_token(header: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not header or not header.startswith('Bearer '):
        return None
    token = header[len('Bearer '):].strip()
    return token or None


def token_required(auth_service) -> Callable:
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            token = bearer_token(request.headers.get('Authorization'))
            if not token:
                raise UnauthorizedError("Access denied. No token provided.", "NO_TOKEN")
            g.current_user = auth_service.authenticate(token)
            return view(*args, **kwargs)
        return wrapper
    return decorator


def current_principal() -> Principal:
    principal = g.get('current_user')
    if principal is None:
        raise UnauthorizedError("Authentication required", "NO_TOKEN")
    return principal


__all__ = ["bearer_token", "token_required", "current_principal"]
