from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from pos_core.config import Settings
from pos_core.db import ensure_schema
from pos_core.services.clients import ClientStore
from pos_core.services.currency import CurrencyRateStore
from pos_core.services.inventory import InventoryLedger
from pos_core.services.sales import SaleTransactionEngine
from pos_core.services.suppliers import SupplierStore


@dataclass
class PosContext:
    """Owns every store for one run; pages build one and pass it around."""

    conn: sqlite3.Connection
    settings: Settings
    clients: ClientStore
    suppliers: SupplierStore
    inventory: InventoryLedger
    rates: CurrencyRateStore
    sales: SaleTransactionEngine


def open_context(conn: sqlite3.Connection, settings: Settings) -> PosContext:
    ensure_schema(conn)
    clients = ClientStore(conn)
    suppliers = SupplierStore(conn)
    inventory = InventoryLedger(conn, operator=settings.operator)
    rates = CurrencyRateStore(conn, default_rate=settings.default_rate)
    sales = SaleTransactionEngine(
        conn,
        clients=clients,
        inventory=inventory,
        rates=rates,
        operator=settings.operator,
    )
    return PosContext(
        conn=conn,
        settings=settings,
        clients=clients,
        suppliers=suppliers,
        inventory=inventory,
        rates=rates,
        sales=sales,
    )
