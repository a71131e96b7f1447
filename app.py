from __future__ import annotations

import streamlit as st

from pos_core.config import get_settings
from pos_core.logging_config import setup_logging

st.set_page_config(page_title="POS Dashboard", page_icon="🧾", layout="wide")


@st.cache_resource
def _init_logging(log_dir: str):
    return setup_logging(log_dir)


_init_logging(str(get_settings().log_dir))

pages = [
    st.Page("home.py", title="Dashboard", icon="🏠"),
    st.Page("pages/1_🛒_Sell.py", title="Sell", icon="🛒"),
    st.Page("pages/2_💵_Sales.py", title="Sales", icon="💵"),
    st.Page("pages/3_📦_Inventory.py", title="Inventory", icon="📦"),
    st.Page("pages/4_👥_Clients.py", title="Clients", icon="👥"),
    st.Page("pages/5_🚚_Suppliers.py", title="Suppliers", icon="🚚"),
    st.Page("pages/6_🧪_Data_Management.py", title="Data Management", icon="🧪"),
]

st.navigation(pages).run()
