from __future__ import annotations

from html import escape
from typing import Optional

from pos_core.models import PAY_CARD, PAY_TRANSFER, SALE_PAID, SALE_PENDING, Client, Sale
from pos_core.services.sales import line_subtotal
from pos_core.utils import format_number, format_ts, iso_now

BUSINESS_NAME = "POS Dashboard"

_STYLE = """
body { font-family: Arial, sans-serif; margin: 0; padding: 20px; }
.invoice-container { max-width: 800px; margin: 0 auto; }
table { width: 100%; border-collapse: collapse; margin-bottom: 20px; }
th, td { padding: 8px; text-align: left; border-bottom: 1px solid #ddd; }
th { background-color: #f8f9fa; }
.section { margin-bottom: 20px; }
.footer { margin-top: 30px; text-align: center; font-size: 12px; }
.total-row { font-weight: bold; }
"""

_STATUS_LABELS = {SALE_PAID: "PAID", SALE_PENDING: "PENDING"}
_METHOD_LABELS = {"cash": "Cash", "card": "Card", "transfer": "Transfer"}


def _e(value) -> str:
    return escape("" if value is None else str(value))


def _payment_detail(p) -> str:
    if p.type == PAY_CARD and p.card_last_digits:
        return f"**** {_e(p.card_last_digits)}"
    if p.type == PAY_TRANSFER and p.reference:
        return f"Ref: {_e(p.reference)} ({_e(p.bank or 'N/A')})"
    return "-"


def render_invoice_html(sale: Sale, client: Optional[Client] = None, local_currency: str = "Bs") -> str:
    lc = _e(local_currency)
    status = _STATUS_LABELS.get(sale.status, "VOIDED")

    product_rows = "".join(
        f"<tr><td>{_e(p.product_name)}</td><td>{_e(p.product_sku)}</td>"
        f"<td>${format_number(float(p.unit_value or 0))}</td><td>{_e(p.quantity)}</td>"
        f"<td>${format_number(line_subtotal(p))}</td></tr>"
        for p in sale.products
    )
    payment_rows = "".join(
        f"<tr><td>{_METHOD_LABELS.get(p.type, _e(p.type))}</td><td>{_payment_detail(p)}</td>"
        f"<td>${format_number(p.amount_usd)}</td><td>{lc}. {format_number(p.amount_local)}</td></tr>"
        for p in sale.payments
    )

    client_block = f"<p><strong>Client:</strong> {_e(sale.client_name)}</p>"
    if client is not None:
        client_block += (
            f"<p><strong>Identification:</strong> {_e(client.identification)} ({_e(client.identification_type)})</p>"
            f"<p><strong>Phone:</strong> {_e(client.phone or '-')}</p>"
            f"<p><strong>Email:</strong> {_e(client.email or '-')}</p>"
            f"<p><strong>Address:</strong> {_e(client.address or '-')}</p>"
        )

    change_block = ""
    if sale.change and sale.change.amount > 0:
        ch = sale.change
        change_block = (
            '<div class="section"><h3>Change returned</h3>'
            f"<p>${format_number(ch.amount)} / {lc}. {format_number(ch.amount_local)}</p>"
            f"<p>Method: {_METHOD_LABELS.get(ch.method, _e(ch.method))}</p>"
        )
        if ch.method == PAY_TRANSFER:
            change_block += f"<p>Reference: {_e(ch.reference)}</p><p>Bank: {_e(ch.bank)}</p>"
        change_block += "</div>"

    return f"""<html>
<head><title>Invoice {BUSINESS_NAME} - {sale.id}</title><style>{_STYLE}</style></head>
<body><div class="invoice-container">
<div class="section">
<h2>{BUSINESS_NAME}</h2>
<p>Invoice #{sale.id}</p>
<p>Date: {_e(format_ts(sale.date))}</p>
<p>Status: {status}</p>
<p>Rate: {format_number(sale.currency_rate)} {lc}/USD</p>
</div>
<div class="section">{client_block}</div>
<table>
<thead><tr><th>Product</th><th>SKU</th><th>Unit price</th><th>Quantity</th><th>Subtotal</th></tr></thead>
<tbody>{product_rows}
<tr class="total-row"><td colspan="4">Total:</td><td>${format_number(sale.total)}</td></tr>
<tr class="total-row"><td colspan="4">Total ({lc}):</td><td>{lc}. {format_number(sale.total_local)}</td></tr>
</tbody>
</table>
<table>
<thead><tr><th>Method</th><th>Detail</th><th>USD</th><th>{lc}</th></tr></thead>
<tbody>{payment_rows}
<tr class="total-row"><td colspan="2">Total paid:</td><td>${format_number(sale.paid_usd)}</td><td>{lc}. {format_number(sale.paid_local)}</td></tr>
</tbody>
</table>
{change_block}
<div class="section"><p class="total-row">Balance due: ${format_number(sale.debt)} / {lc}. {format_number(sale.debt_local)}</p></div>
<div class="footer"><p>{BUSINESS_NAME} - Inventory Management System</p><p>Invoice generated {_e(format_ts(iso_now()))}</p></div>
</div></body>
</html>
"""
