from __future__ import annotations

import logging

from pos_core.db import load_store, save_store
from pos_core.errors import PreconditionViolation
from pos_core.schema import STORE_CURRENCY_RATE

logger = logging.getLogger(__name__)


def require_rate(rate) -> float:
    try:
        r = float(rate)
    except (TypeError, ValueError):
        raise PreconditionViolation("Exchange rate must be a number.", details={"rate": rate})
    if not r > 0:
        raise PreconditionViolation("Exchange rate must be > 0.", details={"rate": rate})
    return r


def to_local(amount_usd: float, rate: float) -> float:
    return float(amount_usd) * require_rate(rate)


def to_usd(amount_local: float, rate: float) -> float:
    return float(amount_local) / require_rate(rate)


class CurrencyRateStore:
    """Process-wide current USD -> local exchange rate."""

    def __init__(self, conn, default_rate: float):
        self.conn = conn
        self.default_rate = require_rate(default_rate)

    def get(self) -> float:
        saved = load_store(self.conn, STORE_CURRENCY_RATE)
        if saved is None:
            return self.default_rate
        return float(saved)

    def set(self, rate: float) -> float:
        r = require_rate(rate)
        save_store(self.conn, STORE_CURRENCY_RATE, r)
        logger.info("Exchange rate set to %s", r)
        return r
