from __future__ import annotations

from pos_core.errors import PreconditionViolation
from pos_core.models import Supplier
from pos_core.schema import STORE_SUPPLIERS
from pos_core.services.store import EntityStore
from pos_core.utils import is_blank


class SupplierStore(EntityStore[Supplier]):
    record_cls = Supplier
    store_name = STORE_SUPPLIERS
    search_fields = ("name", "email", "phone", "contact_person")
    label = "Supplier"

    def _check(self, record: Supplier) -> None:
        if is_blank(record.name):
            raise PreconditionViolation("Supplier name is required.")

    def active(self) -> list[Supplier]:
        # Only active suppliers can deliver stock.
        return [s for s in self._records if s.active]
