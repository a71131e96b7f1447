from __future__ import annotations

import logging

from pos_core.db import delete_store, store_names
from pos_core.models import ID_NATIONAL

logger = logging.getLogger(__name__)


DEMO_CLIENTS = [
    ("Juan", "Perez", "123456789", "Calle Falsa 123", "555-1234", "juan.perez@example.com"),
    ("Maria", "Gomez", "987654321", "Avenida Siempre Viva 742", "555-5678", "maria.gomez@example.com"),
    ("Carlos", "Lopez", "456789123", "Boulevard Central 45", "555-9012", "carlos.lopez@example.com"),
]

DEMO_SUPPLIERS = [
    ("Supplier 1", "supplier1@example.com", "123-456-7890", True, "123 Main St, City", "John Doe"),
    ("Supplier 2", "supplier2@example.com", "098-765-4321", False, "456 Oak St, Town", "Jane Smith"),
]


def load_demo_data(ctx) -> None:
    """Seed sample records into stores that are still empty."""
    if not len(ctx.clients):
        for name, surname, ident, address, phone, email in DEMO_CLIENTS:
            ctx.clients.add(
                name=name,
                surname=surname,
                identification=ident,
                identification_type=ID_NATIONAL,
                address=address,
                phone=phone,
                email=email,
            )

    if not len(ctx.suppliers):
        for name, email, phone, active, address, contact in DEMO_SUPPLIERS:
            ctx.suppliers.add(
                name=name,
                email=email,
                phone=phone,
                active=active,
                address=address,
                contact_person=contact,
            )

    if not len(ctx.inventory.items):
        supplier = ctx.suppliers.active()[0] if ctx.suppliers.active() else None
        ctx.inventory.add_item(
            name="Sample product",
            value=100.0,
            quantity=50,
            supplier_id=supplier.id if supplier else None,
            location="Main warehouse",
            description="A sample product to show in the inventory",
            category="General",
            sku="SKU-001",
        )
        ctx.inventory.add_item(
            name="Cable HDMI 2m",
            value=7.5,
            quantity=120,
            supplier_id=supplier.id if supplier else None,
            location="Shelf B",
            category="Accessories",
            sku="SKU-002",
        )

    logger.info("Demo data loaded")


def wipe_all(conn) -> None:
    # Keep schema, delete every store (sales, history, staged payments included).
    for name in store_names(conn):
        delete_store(conn, name)
    logger.info("All stores wiped")
