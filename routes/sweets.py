from __future__ import annotations
from flask import Blueprint, request

from core.auth import current_principal, token_required
from core.response import json_created, json_success
from utils.tools import json_body, query_number


def _dump(result) -> dict:
    return result.model_dump(mode='json', by_alias=True)


def _role():
    principal = current_principal()
    # Service decides what an unknown / missing role means
    return principal.role.value if principal.role else None


def init_sweets_blueprint(sweet_service, auth_service):
    bp = Blueprint('sweets_bp', __name__, url_prefix='/api/sweets')
    login_required = token_required(auth_service)

    @bp.route('', methods=['POST'])
    @login_required
    def add_sweet():
        result = sweet_service.add_sweet(json_body())
        return json_created("Sweet added successfully", _dump(result))

    @bp.route('', methods=['GET'])
    @login_required
    def list_sweets():
        return json_success("Sweets retrieved successfully", _dump(sweet_service.list_all()))

    @bp.route('/search', methods=['GET'])
    @login_required
    def search_sweets():
        min_price = query_number('minPrice', 'INVALID_MIN_PRICE', "Minimum price must be a non-negative number")
        max_price = query_number('maxPrice', 'INVALID_MAX_PRICE', "Maximum price must be a non-negative number")
        result = sweet_service.search(
            name=request.args.get('name'),
            category=request.args.get('category'),
            min_price=min_price,
            max_price=max_price,
        )
        return json_success("Search completed successfully", _dump(result))

    @bp.route('/<sweet_id>', methods=['GET'])
    @login_required
    def get_sweet(sweet_id):
        return json_success("Sweet retrieved successfully", _dump(sweet_service.get_sweet(sweet_id)))

    @bp.route('/<sweet_id>', methods=['PUT'])
    @login_required
    def update_sweet(sweet_id):
        result = sweet_service.update_sweet(sweet_id, json_body())
        return json_success("Sweet updated successfully", _dump(result))

    @bp.route('/<sweet_id>', methods=['DELETE'])
    @login_required
    def delete_sweet(sweet_id):
        result = sweet_service.delete_sweet(sweet_id, _role())
        return json_success(result.message, _dump(result))

    @bp.route('/<sweet_id>/purchase', methods=['POST'])
    @login_required
    def purchase_sweet(sweet_id):
        result = sweet_service.purchase(sweet_id, json_body().get('quantity'))
        return json_success("Purchase successful", _dump(result))

    @bp.route('/<sweet_id>/restock', methods=['POST'])
    @login_required
    def restock_sweet(sweet_id):
        result = sweet_service.restock(sweet_id, json_body().get('quantity'), _role())
        return json_success("Restock successful", _dump(result))

    return bp
