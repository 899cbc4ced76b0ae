"""Business logic layer for the sweet catalog.

Validation, duplicate checks, role checks and stock arithmetic all live here;
the repository only stores what it is given.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping

from core.errors import ConflictError, ForbiddenError, NotFoundError, OperationError, ValidationError
from schemas.sweet import (
    DeletedSweet,
    DeleteResult,
    PurchaseResult,
    RestockResult,
    SweetList,
    SweetRecord,
    SweetResult,
    SweetSearchResult,
)
from schemas.user import is_admin
from utils.validators import (
    MAX_QUANTITY,
    validate_inventory_quantity,
    validate_search_query,
    validate_sweet_input,
    validate_sweet_update_input,
)

logger = logging.getLogger(__name__)


class SweetService:
    """Sweet lifecycle operations (add, update, delete, purchase, restock, list, search).

    Ordering per operation is part of the contract: role checks run before
    anything else, request validation before any lookup, and the lookup
    before any write.
    """

    def __init__(self, repo):
        self.repo = repo

    # ---- Helpers ----
    def _require_admin(self, role: Any, action: str) -> None:
        if not is_admin(role):
            raise ForbiddenError(f"Only admins can {action} sweets", "ADMIN_REQUIRED")

    def _get_or_404(self, sweet_id: str) -> SweetRecord:
        sweet = self.repo.find_by_id(sweet_id)
        if not sweet:
            raise NotFoundError("Sweet not found", "SWEET_NOT_FOUND")
        return sweet

    # ---- Public API ----
    def add_sweet(self, data: Mapping[str, Any]) -> SweetResult:
        fields = validate_sweet_input(data)
        if self.repo.find_by_name(fields.name):
            raise ConflictError("Sweet with this name already exists", "DUPLICATE_NAME")
        sweet = self.repo.create(fields)
        logger.info("Sweet created: %s", sweet.name, extra={"sweet_id": sweet.id})
        return SweetResult(sweet=sweet)

    def get_sweet(self, sweet_id: str) -> SweetResult:
        return SweetResult(sweet=self._get_or_404(sweet_id))

    def update_sweet(self, sweet_id: str, data: Mapping[str, Any]) -> SweetResult:
        existing = self._get_or_404(sweet_id)
        update = validate_sweet_update_input(data)
        if 'name' in update:
            clash = self.repo.find_by_name(update['name'])
            if clash and clash.id != existing.id:
                raise ConflictError("Sweet with this name already exists", "DUPLICATE_NAME")
        if not update:
            return SweetResult(sweet=existing)
        updated = self.repo.update(existing.id, update)
        if not updated:
            # Removed between the lookup and the write
            raise NotFoundError("Sweet not found", "SWEET_NOT_FOUND")
        logger.info("Sweet updated: %s (%s)", updated.name, ", ".join(sorted(update)), extra={"sweet_id": updated.id})
        return SweetResult(sweet=updated)

    def delete_sweet(self, sweet_id: str, role: Any) -> DeleteResult:
        self._require_admin(role, "delete")
        if not isinstance(sweet_id, str) or not sweet_id.strip():
            raise ValidationError("Sweet id is required", "INVALID_ID")
        sweet = self._get_or_404(sweet_id.strip())
        if not self.repo.delete(sweet.id):
            raise OperationError("Failed to delete sweet", "DELETE_FAILED")
        logger.info("Sweet deleted: %s", sweet.name, extra={"sweet_id": sweet.id})
        return DeleteResult(
            message="Sweet deleted successfully",
            deleted=DeletedSweet(id=sweet.id, name=sweet.name),
        )

    def purchase(self, sweet_id: str, quantity: Any) -> PurchaseResult:
        requested = validate_inventory_quantity(quantity)
        sweet = self._get_or_404(sweet_id)
        if requested > sweet.quantity:
            raise ValidationError(
                f"Insufficient stock. Only {sweet.quantity} available",
                "INSUFFICIENT_STOCK",
            )
        remaining = sweet.quantity - requested
        updated = self.repo.update_quantity(sweet.id, remaining)
        if not updated:
            raise NotFoundError("Sweet not found", "SWEET_NOT_FOUND")
        logger.info("Purchased %d x %s, %d left", requested, sweet.name, remaining, extra={"sweet_id": sweet.id})
        return PurchaseResult(sweet=updated, purchased=requested, remaining=remaining)

    def restock(self, sweet_id: str, quantity: Any, role: Any) -> RestockResult:
        self._require_admin(role, "restock")
        added = validate_inventory_quantity(quantity)
        sweet = self._get_or_404(sweet_id)
        new_quantity = sweet.quantity + added
        if new_quantity > MAX_QUANTITY:
            raise ValidationError("Restock would exceed the maximum stock level", "INVALID_QUANTITY")
        updated = self.repo.update_quantity(sweet.id, new_quantity)
        if not updated:
            raise NotFoundError("Sweet not found", "SWEET_NOT_FOUND")
        logger.info("Restocked %s: %d -> %d", sweet.name, sweet.quantity, new_quantity, extra={"sweet_id": sweet.id})
        return RestockResult(
            sweet=updated,
            added=added,
            previous_quantity=sweet.quantity,
            new_quantity=new_quantity,
        )

    def list_all(self) -> SweetList:
        sweets = self.repo.find_all()
        return SweetList(sweets=sweets, total=len(sweets))

    def search(
        self,
        name: Any = None,
        category: Any = None,
        min_price: Any = None,
        max_price: Any = None,
    ) -> SweetSearchResult:
        query = validate_search_query(name=name, category=category, min_price=min_price, max_price=max_price)
        sweets = self.repo.search(query)
        return SweetSearchResult(sweets=sweets, count=len(sweets))


__all__ = ["SweetService"]
