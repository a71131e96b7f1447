from __future__ import annotations

import logging
from typing import Any, Optional

import pandas as pd

from pos_core.db import load_store, save_store
from pos_core.errors import PreconditionViolation
from pos_core.models import (
    ITEM_ACTIVE,
    ITEM_INACTIVE,
    ITEM_OUT_OF_STOCK,
    TX_ADJUSTMENT,
    TX_PURCHASE,
    TX_SALE,
    VALID_ITEM_STATUSES,
    InventoryHistoryEntry,
    InventoryItem,
    InventoryItemUpdate,
    update_values,
)
from pos_core.schema import STORE_INVENTORY, STORE_INVENTORY_HISTORY
from pos_core.services.store import EntityStore
from pos_core.utils import iso_now, is_blank

logger = logging.getLogger(__name__)


def _as_count(value: Any, what: str) -> int:
    try:
        f = float(value)
    except (TypeError, ValueError):
        raise PreconditionViolation(f"{what} must be a whole number.", details={what: value})
    if not f.is_integer():
        raise PreconditionViolation(f"{what} must be a whole number.", details={what: value})
    return int(f)


class InventoryItemStore(EntityStore[InventoryItem]):
    record_cls = InventoryItem
    store_name = STORE_INVENTORY
    search_fields = ("name", "sku", "category")
    label = "Item"

    def _check(self, record: InventoryItem) -> None:
        if is_blank(record.name):
            raise PreconditionViolation("Item name is required.")
        if float(record.value) < 0:
            raise PreconditionViolation("Item value must be >= 0.")
        if int(record.quantity) < 0:
            raise PreconditionViolation("Item quantity must be >= 0.")
        if record.status not in VALID_ITEM_STATUSES:
            raise PreconditionViolation(f"Invalid item status '{record.status}'.")

    def update(self, record_id: int, changes) -> InventoryItem:
        if getattr(changes, "quantity", None) is not None:
            raise PreconditionViolation("Quantity changes must go through the inventory ledger.")
        return super().update(record_id, changes)


class InventoryLedger:
    """
    Inventory items plus the append-only history of quantity changes.

    Every quantity change goes through `_move`, which writes the item and
    its paired history entry (previous/new quantity) together.
    """

    def __init__(self, conn, operator: str = "System user"):
        self.conn = conn
        self.operator = operator
        self.items = InventoryItemStore(conn)
        self._history: list[InventoryHistoryEntry] = [
            InventoryHistoryEntry.from_dict(d) for d in load_store(conn, STORE_INVENTORY_HISTORY, []) or []
        ]

    # -------------------------
    # ledger core
    # -------------------------

    def _append_entry(
        self,
        *,
        item_id: int,
        previous_quantity: int,
        new_quantity: int,
        supplier_id: Optional[int],
        transaction_type: str,
        notes: str,
        created_by: Optional[str],
    ) -> InventoryHistoryEntry:
        entry = InventoryHistoryEntry(
            id=max((e.id for e in self._history), default=0) + 1,
            item_id=int(item_id),
            date=iso_now(),
            quantity=int(new_quantity) - int(previous_quantity),
            previous_quantity=int(previous_quantity),
            new_quantity=int(new_quantity),
            supplier_id=supplier_id,
            transaction_type=transaction_type,
            notes=notes or "",
            created_by=created_by or self.operator,
        )
        self._history.append(entry)
        save_store(self.conn, STORE_INVENTORY_HISTORY, [e.to_dict() for e in self._history])
        return entry

    def _move(
        self,
        item: InventoryItem,
        new_quantity: int,
        *,
        transaction_type: str,
        notes: str,
        created_by: Optional[str] = None,
        **item_values: Any,
    ) -> InventoryItem:
        previous = int(item.quantity)
        updated = self.items._replace(item.id, dict(item_values, quantity=int(new_quantity)))
        self._append_entry(
            item_id=item.id,
            previous_quantity=previous,
            new_quantity=int(new_quantity),
            supplier_id=updated.supplier_id,
            transaction_type=transaction_type,
            notes=notes,
            created_by=created_by,
        )
        return updated

    # -------------------------
    # item CRUD
    # -------------------------

    def add_item(self, **fields: Any) -> InventoryItem:
        quantity = _as_count(fields.pop("quantity", 0), "quantity")
        if quantity < 0:
            raise PreconditionViolation("Initial quantity must be >= 0.")
        fields.setdefault("created_by", self.operator)
        status = fields.pop("status", ITEM_ACTIVE) or ITEM_ACTIVE
        if quantity == 0 and status == ITEM_ACTIVE:
            status = ITEM_OUT_OF_STOCK

        item = self.items.add(quantity=quantity, status=status, **fields)
        if quantity > 0:
            self._append_entry(
                item_id=item.id,
                previous_quantity=0,
                new_quantity=quantity,
                supplier_id=item.supplier_id,
                transaction_type=TX_PURCHASE,
                notes="Initial stock",
                created_by=item.created_by,
            )
        return item

    def update_item(self, item_id: int, changes: InventoryItemUpdate, notes: Optional[str] = None) -> InventoryItem:
        """Edit-form save: field changes are merged, a quantity change becomes an Adjustment."""
        values = update_values(changes)
        new_quantity = values.pop("quantity", None)
        item = self.items.get(item_id)
        if values:
            item = self.items._replace(item.id, values)
            logger.info("Item %s updated", item.id)
        if new_quantity is not None:
            item = self.adjust(item.id, new_quantity, notes=notes)
        return item

    def delete_item(self, item_id: int) -> None:
        # History is append-only and survives the item.
        self.items.delete(item_id)

    def get_item(self, item_id: int) -> InventoryItem:
        return self.items.get(item_id)

    def list_items(self) -> list[InventoryItem]:
        return self.items.all()

    def search(self, term: str | None) -> list[InventoryItem]:
        return self.items.search(term)

    def available(self, item_id: int) -> int:
        return int(self.items.get(item_id).quantity)

    # -------------------------
    # quantity operations
    # -------------------------

    def add_stock(
        self,
        item_id: int,
        quantity: int,
        supplier_id: Optional[int],
        notes: Optional[str] = None,
    ) -> InventoryItem:
        delta = _as_count(quantity, "quantity")
        if delta <= 0:
            raise PreconditionViolation("Stock to add must be > 0.", details={"quantity": quantity})

        item = self.items.get(item_id)
        new_quantity = int(item.quantity) + delta

        status = item.status
        if status == ITEM_OUT_OF_STOCK and new_quantity > 0:
            status = ITEM_ACTIVE

        values: dict[str, Any] = {"status": status}
        if supplier_id is not None:
            # The restocking supplier becomes the item's supplier of record.
            values["supplier_id"] = int(supplier_id)

        updated = self._move(
            item,
            new_quantity,
            transaction_type=TX_PURCHASE,
            notes=notes or "Stock added",
            **values,
        )
        logger.info("Stock added to item %s: %s -> %s", item.id, item.quantity, new_quantity)
        return updated

    def apply_sale_deduction(self, item_id: int, quantity: int, notes: Optional[str] = None) -> InventoryItem:
        delta = _as_count(quantity, "quantity")
        if delta <= 0:
            raise PreconditionViolation("Quantity to deduct must be > 0.", details={"quantity": quantity})

        item = self.items.get(item_id)
        new_quantity = max(0, int(item.quantity) - delta)

        status = item.status
        if new_quantity == 0 and status != ITEM_INACTIVE:
            status = ITEM_OUT_OF_STOCK

        updated = self._move(
            item,
            new_quantity,
            transaction_type=TX_SALE,
            notes=notes or "Sale",
            status=status,
        )
        logger.info("Sale deduction on item %s: %s -> %s", item.id, item.quantity, new_quantity)
        return updated

    def adjust(self, item_id: int, new_quantity: int, notes: Optional[str] = None) -> InventoryItem:
        target = _as_count(new_quantity, "quantity")
        if target < 0:
            raise PreconditionViolation("Quantity must be >= 0.", details={"quantity": new_quantity})

        item = self.items.get(item_id)
        if target == int(item.quantity):
            return item

        updated = self._move(
            item,
            target,
            transaction_type=TX_ADJUSTMENT,
            notes=notes or "Manual adjustment",
        )
        logger.info("Item %s adjusted: %s -> %s", item.id, item.quantity, target)
        return updated

    # -------------------------
    # read side
    # -------------------------

    def history(self, item_id: int) -> list[InventoryHistoryEntry]:
        rows = [e for e in self._history if e.item_id == int(item_id)]
        return sorted(rows, key=lambda e: (e.date, e.id), reverse=True)

    def all_history(self) -> list[InventoryHistoryEntry]:
        return list(self._history)

    def history_frame(self, item_id: int) -> pd.DataFrame:
        return pd.DataFrame([e.to_dict() for e in self.history(item_id)])

    def summary_frame(self) -> pd.DataFrame:
        df = self.items.to_frame()
        if df.empty:
            return df
        df["stock_value"] = (pd.to_numeric(df["value"], errors="coerce") * pd.to_numeric(df["quantity"], errors="coerce")).round(2)
        return df.sort_values("id").reset_index(drop=True)
