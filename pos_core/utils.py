from __future__ import annotations

from datetime import datetime, timezone


def iso_now() -> str:
    # UTC, microseconds kept so records created in the same second still order.
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def safe_div(n: float, d: float) -> float:
    return float(n) / float(d) if d else 0.0


def is_blank(value) -> bool:
    return value is None or not str(value).strip()


def format_number(value: float) -> str:
    """Two decimals, '.' for thousands and ',' for decimals: 1234.5 -> '1.234,50'."""
    s = f"{float(value):,.2f}"
    return s.replace(",", "_").replace(".", ",").replace("_", ".")


def format_money(amount_usd: float, amount_local: float, local_currency: str = "Bs") -> str:
    return f"${format_number(amount_usd)} / {local_currency}. {format_number(amount_local)}"


def format_ts(ts: str | None) -> str:
    if not ts:
        return "-"
    try:
        return datetime.fromisoformat(str(ts)).strftime("%d/%m/%Y %H:%M")
    except ValueError:
        return str(ts)
