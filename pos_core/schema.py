SCHEMA_SQL = r"""
-- One row per named store; payload is a JSON-serialized sequence or number
CREATE TABLE IF NOT EXISTS stores (
  name TEXT PRIMARY KEY,
  payload TEXT NOT NULL,                 -- JSON
  updated_at TEXT NOT NULL               -- ISO datetime
);
"""

STORE_CLIENTS = "clients"
STORE_INVENTORY = "inventory"
STORE_INVENTORY_HISTORY = "inventory_history"
STORE_SUPPLIERS = "suppliers"
STORE_SALES = "sales"
STORE_CURRENCY_RATE = "currency_rate"
TEMP_PAYMENTS_PREFIX = "temp_payments_"
