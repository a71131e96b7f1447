"""
Shared pytest fixtures: a fresh on-disk sqlite database per test and a
PosContext wired over it.
"""

import pytest

from pos_core.config import Settings
from pos_core.context import open_context
from pos_core.db import connect, ensure_schema
from pos_core.models import PAY_CASH, PaymentMethod, ProductLine
from pos_core.services.sales import ClientInput, SaleDraft

RATE = 40.0


@pytest.fixture(scope='function')
def settings(tmp_path):
    return Settings(
        data_dir=tmp_path,
        db_path=tmp_path / 'pos.db',
        log_dir=tmp_path / 'logs',
        default_rate=RATE,
        operator='Tester',
    )


@pytest.fixture(scope='function')
def conn(settings):
    conn = connect(settings.db_path)
    ensure_schema(conn)
    yield conn
    conn.close()


@pytest.fixture(scope='function')
def ctx(conn, settings):
    return open_context(conn, settings)


@pytest.fixture
def sample_supplier(ctx):
    return ctx.suppliers.add(name='Acme Wholesale', email='sales@acme.test', phone='555-0100')


@pytest.fixture
def sample_item(ctx, sample_supplier):
    """Item worth $25.00 with 5 units on hand."""
    return ctx.inventory.add_item(
        name='Keyboard',
        value=25.0,
        quantity=5,
        supplier_id=sample_supplier.id,
        sku='KB-01',
        category='Peripherals',
    )


@pytest.fixture
def client_input():
    return ClientInput(
        name='Ana',
        surname='Rivas',
        identification='V-12345678',
        phone='555-2000',
        email='ana@example.com',
    )


def make_line(item, quantity):
    return ProductLine(
        product_id=item.id,
        product_name=item.name,
        product_sku=item.sku,
        unit_value=str(item.value),
        quantity=str(quantity),
        available=str(item.quantity),
    )


def cash(amount_usd, rate=RATE):
    return PaymentMethod(type=PAY_CASH, amount_usd=float(amount_usd), amount_local=float(amount_usd) * rate)


def make_draft(client_input, lines, payments, rate=RATE, temp_id=None):
    return SaleDraft(client=client_input, lines=list(lines), payments=list(payments), rate=rate, temp_id=temp_id)
