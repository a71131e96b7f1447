from __future__ import annotations

import streamlit as st

from pos_core.config import get_settings
from pos_core.context import open_context
from pos_core.db import get_conn
from pos_core.models import ITEM_OUT_OF_STOCK, SALE_PENDING
from pos_core.utils import format_number

st.set_page_config(page_title="POS Dashboard", page_icon="🧾", layout="wide")

st.title("🧾 POS & Inventory Dashboard")
st.caption("Clients, stock with history, suppliers, and checkout with USD / local-currency totals, split payments and change.")

settings = get_settings()
ctx = open_context(get_conn(settings.db_path), settings)
lc = settings.local_currency

with st.sidebar:
    st.subheader("Environment")
    st.write(f"**Data directory:** `{settings.data_dir}`")
    st.write(f"**Database:** `{settings.db_path.name}`")

summary = ctx.sales.summary()
c1, c2, c3, c4 = st.columns(4)
c1.metric("Total sales", f"${format_number(summary.total_sales)}")
c2.metric("Number of sales", f"{summary.count}")
c3.metric("Average sale", f"${format_number(summary.average)}")
c4.metric("Products sold", f"{summary.products_sold}")

st.divider()

col1, col2 = st.columns([1, 1], gap="large")

with col1:
    st.subheader("Exchange rate")
    current = ctx.rates.get()
    st.write(f"Current rate: **{format_number(current)} {lc} / USD**")
    new_rate = st.number_input(f"New rate ({lc} per USD)", min_value=0.0, value=float(current), step=0.01, format="%.4f")
    if st.button("Update rate", type="primary"):
        try:
            ctx.rates.set(new_rate)
            st.success("Exchange rate updated.")
            st.rerun()
        except Exception as e:
            st.error(str(e))

with col2:
    st.subheader("Stock alerts")
    out = [i for i in ctx.inventory.list_items() if i.status == ITEM_OUT_OF_STOCK]
    if out:
        st.warning(f"{len(out)} product(s) out of stock: " + ", ".join(i.name for i in out))
    else:
        st.info("No products out of stock.", icon="ℹ️")

    pending = [s for s in ctx.sales.sales() if s.status == SALE_PENDING]
    if pending:
        st.caption(f"{len(pending)} sale(s) with outstanding debt. See **Sales**.")
