from __future__ import annotations
from flask import Blueprint, current_app

from core.auth import current_principal, token_required
from core.response import json_created, json_success
from utils.tools import json_body


def init_auth_blueprint(auth_service, limiter=None):
    bp = Blueprint('auth_bp', __name__, url_prefix='/api/auth')
    login_required = token_required(auth_service)

    def _auth_limit():
        return current_app.config.get('AUTH_RATE_LIMIT', '20 per minute')

    def rate_limited(view):
        if limiter is None:
            return view
        return limiter.limit(_auth_limit)(view)

    @bp.route('/register', methods=['POST'])
    @rate_limited
    def register():
        data = json_body()
        result = auth_service.register(data.get('name'), data.get('email'), data.get('password'))
        return json_created("User registered successfully", result.model_dump(mode='json', by_alias=True))

    @bp.route('/login', methods=['POST'])
    @rate_limited
    def login():
        data = json_body()
        result = auth_service.login(data.get('email'), data.get('password'))
        return json_success("Login successful", result.model_dump(mode='json', by_alias=True))

    @bp.route('/me', methods=['GET'])
    @login_required
    def me():
        """Identity carried by the presented token."""
        principal = current_principal()
        return json_success("Authenticated", {
            'id': principal.id,
            'email': principal.email,
            'role': principal.role.value if principal.role else None,
            'isAdmin': principal.is_admin,
        })

    return bp
