from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Optional

# Identification types
ID_NATIONAL = "national-id"
ID_PASSPORT = "passport"
ID_DRIVER_LICENSE = "driver-license"
VALID_ID_TYPES = [ID_NATIONAL, ID_PASSPORT, ID_DRIVER_LICENSE]

# Inventory item status
ITEM_ACTIVE = "Active"
ITEM_INACTIVE = "Inactive"
ITEM_OUT_OF_STOCK = "OutOfStock"
VALID_ITEM_STATUSES = [ITEM_ACTIVE, ITEM_INACTIVE, ITEM_OUT_OF_STOCK]

# Ledger transaction types
TX_PURCHASE = "Purchase"
TX_SALE = "Sale"
TX_RETURN = "Return"
TX_ADJUSTMENT = "Adjustment"

# Sale status
SALE_PENDING = "pending"
SALE_PAID = "paid"
SALE_VOIDED = "voided"
VALID_SALE_STATUSES = [SALE_PENDING, SALE_PAID, SALE_VOIDED]

# Payment / change methods
PAY_CASH = "cash"
PAY_CARD = "card"
PAY_TRANSFER = "transfer"
VALID_PAYMENT_TYPES = [PAY_CASH, PAY_CARD, PAY_TRANSFER]
VALID_CHANGE_METHODS = [PAY_CASH, PAY_TRANSFER]

BANKS = ["Banesco", "Provincial", "Mercantil", "Venezuela", "Other"]


def _from_dict(cls, data: dict) -> Any:
    # Ignore keys that are not fields (older payloads, extra UI state).
    names = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in names})


@dataclass
class Client:
    id: int
    name: str
    surname: str
    identification: str
    identification_type: str = ID_NATIONAL
    address: str = ""
    phone: str = ""
    email: str = ""
    created_at: str = ""
    last_updated: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}".strip()

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Client":
        return _from_dict(cls, data)


@dataclass
class Supplier:
    id: int
    name: str
    email: str = ""
    phone: str = ""
    active: bool = True
    address: str = ""
    contact_person: str = ""
    notes: str = ""
    created_at: str = ""
    last_updated: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Supplier":
        return _from_dict(cls, data)


@dataclass
class InventoryItem:
    id: int
    name: str
    value: float
    quantity: int
    status: str = ITEM_ACTIVE
    supplier_id: Optional[int] = None
    location: str = ""
    category: str = ""
    sku: str = ""
    description: str = ""
    created_by: str = ""
    created_at: str = ""
    last_updated: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "InventoryItem":
        return _from_dict(cls, data)


@dataclass(frozen=True)
class InventoryHistoryEntry:
    id: int
    item_id: int
    date: str
    quantity: int
    previous_quantity: int
    new_quantity: int
    supplier_id: Optional[int]
    transaction_type: str
    notes: str = ""
    created_by: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "InventoryHistoryEntry":
        return _from_dict(cls, data)


@dataclass
class ProductLine:
    product_id: Optional[int] = None
    product_name: str = ""
    product_sku: str = ""
    unit_value: str = "0"
    quantity: str = "1"
    available: str = "0"

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ProductLine":
        return _from_dict(cls, data)


@dataclass(frozen=True)
class PaymentMethod:
    type: str
    amount_usd: float
    amount_local: float
    reference: Optional[str] = None
    bank: Optional[str] = None
    card_last_digits: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "PaymentMethod":
        return _from_dict(cls, data)


@dataclass(frozen=True)
class ChangeInfo:
    amount: float
    amount_local: float
    method: str
    reference: Optional[str] = None
    bank: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ChangeInfo":
        return _from_dict(cls, data)


@dataclass
class Sale:
    id: int
    date: str
    client_id: int
    client_name: str
    products: list[ProductLine]
    total: float
    total_local: float
    debt: float
    debt_local: float
    currency_rate: float
    status: str
    created_by: str
    payments: list[PaymentMethod] = field(default_factory=list)
    change: Optional[ChangeInfo] = None

    @property
    def paid_usd(self) -> float:
        return sum(float(p.amount_usd) for p in self.payments)

    @property
    def paid_local(self) -> float:
        return sum(float(p.amount_local) for p in self.payments)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Sale":
        d = dict(data)
        d["products"] = [ProductLine.from_dict(p) for p in d.get("products") or []]
        d["payments"] = [PaymentMethod.from_dict(p) for p in d.get("payments") or []]
        d["change"] = ChangeInfo.from_dict(d["change"]) if d.get("change") else None
        return _from_dict(cls, d)


# -------------------------
# Partial updates
# -------------------------
# Only fields that are not None overwrite the stored record.

@dataclass
class ClientUpdate:
    name: Optional[str] = None
    surname: Optional[str] = None
    identification: Optional[str] = None
    identification_type: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


@dataclass
class SupplierUpdate:
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    active: Optional[bool] = None
    address: Optional[str] = None
    contact_person: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class InventoryItemUpdate:
    name: Optional[str] = None
    value: Optional[float] = None
    quantity: Optional[int] = None
    status: Optional[str] = None
    supplier_id: Optional[int] = None
    location: Optional[str] = None
    category: Optional[str] = None
    sku: Optional[str] = None
    description: Optional[str] = None


def update_values(update) -> dict:
    return {f.name: getattr(update, f.name) for f in fields(update) if getattr(update, f.name) is not None}
