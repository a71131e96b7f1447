"""
Sale transaction engine: checkout validation, totals, inventory deduction,
payments after creation and status changes.

Lifecycle:
  Draft (UI only, never persisted) -> pending (debt > 0) -> paid (debt <= 0)
  pending / paid -> voided (terminal)

A sale's debt is always `total - sum(payments)`. A sale overpaid at checkout
starts below zero (the change handed back) and stays paid.
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Optional

import pandas as pd

from pos_core.db import delete_store, load_store, save_store
from pos_core.errors import (
    IncompleteClientInfo,
    IncompletePayment,
    InsufficientInventory,
    InvalidProductLine,
    InvalidTransition,
    NotFound,
    PosError,
    PreconditionViolation,
)
from pos_core.models import (
    ID_NATIONAL,
    PAY_CARD,
    PAY_TRANSFER,
    SALE_PAID,
    SALE_PENDING,
    SALE_VOIDED,
    VALID_PAYMENT_TYPES,
    VALID_SALE_STATUSES,
    PaymentMethod,
    ProductLine,
    Sale,
)
from pos_core.schema import STORE_SALES, TEMP_PAYMENTS_PREFIX
from pos_core.services.change import ChangeSettlement
from pos_core.services.clients import ClientStore
from pos_core.services.currency import CurrencyRateStore, require_rate, to_local, to_usd
from pos_core.services.inventory import InventoryLedger
from pos_core.utils import iso_now, is_blank, safe_div

logger = logging.getLogger(__name__)

# Amounts closer than this are treated as equal (float sums of cents).
MONEY_EPSILON = 1e-6

ALLOWED_TRANSITIONS = {
    (SALE_PENDING, SALE_VOIDED),
    (SALE_PAID, SALE_VOIDED),
}


@dataclass
class ClientInput:
    name: str = ""
    surname: str = ""
    identification: str = ""
    identification_type: str = ID_NATIONAL
    address: str = ""
    phone: str = ""
    email: str = ""


@dataclass
class SaleDraft:
    client: ClientInput = field(default_factory=ClientInput)
    lines: list[ProductLine] = field(default_factory=list)
    payments: list[PaymentMethod] = field(default_factory=list)
    rate: float = 0.0
    temp_id: Optional[int] = None


@dataclass(frozen=True)
class SaleTotals:
    total: float
    total_local: float
    paid_usd: float
    paid_local: float

    @property
    def remaining(self) -> float:
        return self.total - self.paid_usd

    @property
    def remaining_local(self) -> float:
        return self.total_local - self.paid_local

    @property
    def overpaid(self) -> bool:
        return self.paid_usd - self.total > MONEY_EPSILON

    @property
    def underpaid(self) -> bool:
        return self.total - self.paid_usd > MONEY_EPSILON


@dataclass(frozen=True)
class SalesSummary:
    total_sales: float
    count: int
    average: float
    products_sold: int


# -------------------------
# pure helpers
# -------------------------

def _parse_value(raw: Any) -> Optional[float]:
    try:
        return float(str(raw).strip().replace(",", "."))
    except (TypeError, ValueError):
        return None


def _parse_quantity(raw: Any) -> Optional[int]:
    v = _parse_value(raw)
    if v is None or not v.is_integer():
        return None
    return int(v)


def line_subtotal(line: ProductLine) -> float:
    value = _parse_value(line.unit_value)
    qty = _parse_quantity(line.quantity)
    if value is None or qty is None:
        return 0.0
    return value * qty


def compute_totals(lines: list[ProductLine], payments: list[PaymentMethod], rate: float) -> SaleTotals:
    """Recomputed from scratch on every call; unparseable lines count as 0."""
    total = sum(line_subtotal(line) for line in lines)
    return SaleTotals(
        total=total,
        total_local=to_local(total, rate),
        paid_usd=sum(float(p.amount_usd) for p in payments),
        paid_local=sum(float(p.amount_local) for p in payments),
    )


def validate_payment(payment: PaymentMethod) -> None:
    if payment.type not in VALID_PAYMENT_TYPES:
        raise PreconditionViolation(f"Invalid payment type '{payment.type}'.")
    if not float(payment.amount_usd) > 0:
        raise PreconditionViolation("Payment amount must be > 0.", details={"amount_usd": payment.amount_usd})
    if float(payment.amount_local) < 0:
        raise PreconditionViolation("Payment local amount must be >= 0.")
    if payment.type == PAY_TRANSFER and (is_blank(payment.reference) or is_blank(payment.bank)):
        raise PreconditionViolation("Transfer payments need a reference and a bank.")
    if payment.type == PAY_CARD and payment.card_last_digits:
        digits = str(payment.card_last_digits).strip()
        if len(digits) != 4 or not digits.isdigit():
            raise PreconditionViolation("Card last digits must be exactly 4 digits.")


def payment_from_input(
    payment_type: str,
    amount: float,
    currency: str,
    rate: float,
    *,
    reference: Optional[str] = None,
    bank: Optional[str] = None,
    card_last_digits: Optional[str] = None,
) -> PaymentMethod:
    """
    Build a payment from what the operator typed in one currency.

    The other currency is derived at the current rate and kept to cents, as
    the payment form shows it.
    """
    if currency == "usd":
        amount_usd = float(amount)
        amount_local = round(to_local(amount_usd, rate), 2)
    elif currency == "local":
        amount_local = float(amount)
        amount_usd = round(to_usd(amount_local, rate), 2)
    else:
        raise PreconditionViolation("Currency must be 'usd' or 'local'.")

    is_transfer = payment_type == PAY_TRANSFER
    is_card = payment_type == PAY_CARD
    payment = PaymentMethod(
        type=payment_type,
        amount_usd=amount_usd,
        amount_local=amount_local,
        reference=(str(reference).strip() or None) if is_transfer and reference else None,
        bank=(str(bank).strip() or None) if is_transfer and bank else None,
        card_last_digits=(str(card_last_digits).strip() or None) if is_card and card_last_digits else None,
    )
    validate_payment(payment)
    return payment


def new_draft_id() -> int:
    # Millisecond clock: unique enough for one open draft per session.
    return int(time.time() * 1000)


# -------------------------
# engine
# -------------------------

class SaleTransactionEngine:
    def __init__(
        self,
        conn,
        *,
        clients: ClientStore,
        inventory: InventoryLedger,
        rates: CurrencyRateStore,
        operator: str = "System user",
    ):
        self.conn = conn
        self.clients = clients
        self.inventory = inventory
        self.rates = rates
        self.operator = operator
        self._sales: list[Sale] = [Sale.from_dict(d) for d in load_store(conn, STORE_SALES, []) or []]

    def _persist(self) -> None:
        save_store(self.conn, STORE_SALES, [s.to_dict() for s in self._sales])

    def _index(self, sale_id: int) -> int:
        for i, s in enumerate(self._sales):
            if int(s.id) == int(sale_id):
                return i
        raise NotFound(f"Sale {sale_id} not found.", details={"id": sale_id})

    # -------------------------
    # checkout
    # -------------------------

    def validate(
        self,
        client: ClientInput,
        lines: list[ProductLine],
        payments: list[PaymentMethod],
        rate: Optional[float] = None,
    ) -> SaleTotals:
        rate = require_rate(self.rates.get() if rate is None else rate)

        if is_blank(client.name) or is_blank(client.surname) or is_blank(client.identification):
            raise IncompleteClientInfo("Please complete the client's name, surname and identification.")

        if not lines:
            raise InvalidProductLine("A sale needs at least one product.")

        requested: dict[int, int] = {}
        for i, line in enumerate(lines, start=1):
            value = _parse_value(line.unit_value)
            qty = _parse_quantity(line.quantity)
            if line.product_id is None or value is None or value <= 0 or qty is None or qty <= 0:
                raise InvalidProductLine(
                    "Every product must be selected, with a value and a quantity greater than zero.",
                    details={"line": i},
                )
            requested[int(line.product_id)] = requested.get(int(line.product_id), 0) + qty

        insufficient = []
        for product_id, qty in requested.items():
            item = self.inventory.items.find(product_id)
            if item is None:
                raise InvalidProductLine(f"Product {product_id} no longer exists.", details={"product_id": product_id})
            if qty > int(item.quantity):
                insufficient.append({"product_id": product_id, "requested_quantity": qty, "on_hand": int(item.quantity)})
        if insufficient:
            raise InsufficientInventory(
                "One or more products do not have enough inventory available.",
                details={"items": insufficient},
            )

        totals = compute_totals(lines, payments, rate)
        if totals.underpaid:
            raise IncompletePayment(
                "The amount paid must cover the sale total.",
                details={"total": totals.total, "paid": totals.paid_usd},
            )
        return totals

    def prepare(self, draft: SaleDraft) -> Optional[ChangeSettlement]:
        """Validate a draft; returns the change to settle when it is overpaid."""
        try:
            totals = self.validate(draft.client, draft.lines, draft.payments, draft.rate)
        except PosError as e:
            logger.warning("Checkout rejected: %s", e)
            raise
        if totals.overpaid:
            return ChangeSettlement.for_overpayment(totals.total, totals.paid_usd, draft.rate)
        return None

    def finalize(self, draft: SaleDraft, settlement: Optional[ChangeSettlement] = None) -> Sale:
        """
        Commit a validated draft.

        Every check runs before the first write: client upsert, inventory
        deductions and the sale record only happen once validation passed.
        """
        rate = require_rate(draft.rate)
        totals = self.validate(draft.client, draft.lines, draft.payments, rate)

        change = None
        if totals.overpaid:
            if settlement is None or not settlement.confirmed:
                raise PreconditionViolation(
                    "The change must be returned to the client before the sale is saved.",
                    details={"change": totals.paid_usd - totals.total},
                )
            if abs(settlement.amount - (totals.paid_usd - totals.total)) > MONEY_EPSILON:
                raise PreconditionViolation("The change settled does not match the overpayment.")
            change = settlement.info

        client = self.clients.add(**asdict(draft.client))

        sale_id = max((s.id for s in self._sales), default=0) + 1
        for line in draft.lines:
            self.inventory.apply_sale_deduction(
                int(line.product_id),
                _parse_quantity(line.quantity),
                notes=f"Sale #{sale_id}",
            )

        sale = Sale(
            id=sale_id,
            date=iso_now(),
            client_id=client.id,
            client_name=client.full_name,
            products=[replace(line) for line in draft.lines],
            total=totals.total,
            total_local=totals.total_local,
            debt=totals.total - totals.paid_usd,
            debt_local=totals.total_local - totals.paid_local,
            currency_rate=rate,
            status=SALE_PAID,
            created_by=self.operator,
            payments=list(draft.payments),
            change=change,
        )
        self._sales.append(sale)
        self._persist()

        if draft.temp_id is not None:
            self.clear_staged(draft.temp_id)

        logger.info(
            "Sale %s created for client %s: total %.2f, paid %.2f, change %s",
            sale.id,
            client.id,
            totals.total,
            totals.paid_usd,
            f"{change.amount:.2f} via {change.method}" if change else "none",
        )
        return sale

    # -------------------------
    # after creation
    # -------------------------

    def add_payment(self, sale_id: int, payment: PaymentMethod) -> Sale:
        i = self._index(sale_id)
        sale = self._sales[i]
        if sale.status == SALE_VOIDED:
            logger.warning("Payment rejected on voided sale %s", sale_id)
            raise InvalidTransition(f"Sale {sale_id} is voided and cannot take payments.")
        validate_payment(payment)

        debt = sale.debt - float(payment.amount_usd)
        updated = replace(
            sale,
            payments=[*sale.payments, payment],
            debt=debt,
            debt_local=sale.debt_local - float(payment.amount_local),
            status=SALE_PAID if debt <= 0 else SALE_PENDING,
        )
        self._sales[i] = updated
        self._persist()
        logger.info("Payment of %.2f (%s) added to sale %s; debt now %.2f", payment.amount_usd, payment.type, sale_id, debt)
        return updated

    def set_status(self, sale_id: int, new_status: str) -> Sale:
        i = self._index(sale_id)
        sale = self._sales[i]
        if new_status not in VALID_SALE_STATUSES or (sale.status, new_status) not in ALLOWED_TRANSITIONS:
            logger.warning("Rejected status change on sale %s: %s -> %s", sale_id, sale.status, new_status)
            raise InvalidTransition(
                f"Cannot change sale {sale_id} from '{sale.status}' to '{new_status}'.",
                details={"from": sale.status, "to": new_status},
            )
        updated = replace(sale, status=new_status)
        self._sales[i] = updated
        self._persist()
        logger.info("Sale %s status %s -> %s", sale_id, sale.status, new_status)
        return updated

    # -------------------------
    # draft payment staging
    # -------------------------

    def stage_payment(self, temp_id: int, payment: PaymentMethod) -> list[PaymentMethod]:
        validate_payment(payment)
        staged = [*self.staged_payments(temp_id), payment]
        save_store(self.conn, f"{TEMP_PAYMENTS_PREFIX}{temp_id}", [p.to_dict() for p in staged])
        return staged

    def staged_payments(self, temp_id: int) -> list[PaymentMethod]:
        rows = load_store(self.conn, f"{TEMP_PAYMENTS_PREFIX}{temp_id}", []) or []
        return [PaymentMethod.from_dict(r) for r in rows]

    def remove_staged_payment(self, temp_id: int, index: int) -> list[PaymentMethod]:
        staged = self.staged_payments(temp_id)
        if not 0 <= int(index) < len(staged):
            raise NotFound(f"Payment {index} not found in the current draft.")
        del staged[int(index)]
        save_store(self.conn, f"{TEMP_PAYMENTS_PREFIX}{temp_id}", [p.to_dict() for p in staged])
        return staged

    def clear_staged(self, temp_id: int) -> None:
        delete_store(self.conn, f"{TEMP_PAYMENTS_PREFIX}{temp_id}")

    # -------------------------
    # read side
    # -------------------------

    def get(self, sale_id: int) -> Sale:
        return self._sales[self._index(sale_id)]

    def sales(self) -> list[Sale]:
        return sorted(self._sales, key=lambda s: (s.date, s.id), reverse=True)

    def search(self, term: str | None) -> list[Sale]:
        if not term or not str(term).strip():
            return self.sales()
        needle = str(term).strip().lower()
        return [s for s in self.sales() if needle in s.client_name.lower() or needle == str(s.id)]

    def summary(self) -> SalesSummary:
        live = [s for s in self._sales if s.status != SALE_VOIDED]
        total = sum(float(s.total) for s in live)
        products = sum(_parse_quantity(p.quantity) or 0 for s in live for p in s.products)
        return SalesSummary(
            total_sales=total,
            count=len(live),
            average=safe_div(total, len(live)),
            products_sold=products,
        )

    def to_frame(self, sales: Optional[list[Sale]] = None) -> pd.DataFrame:
        rows = []
        for s in self.sales() if sales is None else sales:
            rows.append(
                {
                    "id": s.id,
                    "date": s.date,
                    "client": s.client_name,
                    "total": round(s.total, 2),
                    "total_local": round(s.total_local, 2),
                    "debt": round(s.debt, 2),
                    "debt_local": round(s.debt_local, 2),
                    "rate": s.currency_rate,
                    "change": round(s.change.amount, 2) if s.change else 0.0,
                    "status": s.status,
                }
            )
        return pd.DataFrame(rows)
