"""
Recibo não fiscal da venda escolhida no PDV ou no histórico de vendas.
O sale_id chega por session_state; o último recibo aberto fica guardado
para que um F5 não perca a venda.
"""
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import streamlit as st
import streamlit.components.v1 as components

from config.database import SessionLocal
from services.errors import NotFoundError
from services.sale_service import SaleService
from services.tenant import TenantService
from utils.navigation import show_sidebar
from utils.receipt_builder import build_receipt_html
from utils.receipt_config import load_receipt_config
from utils.store_logo import logo_data_uri
from utils.ui_helpers import require_tenant

st.set_page_config(page_title="Recibo", page_icon="🖨️", layout="centered")

pending = st.session_state.pop("print_receipt_sale_id", None)
if pending is not None:
    st.session_state["last_receipt_sale_id"] = pending
sale_id = st.session_state.get("last_receipt_sale_id")

db = SessionLocal()
try:
    tenant = require_tenant(db)
    show_sidebar(tenant)

    if sale_id is None:
        st.info("Nenhum recibo selecionado. Finalize uma venda no **PDV** ou escolha uma em **Vendas**.")
        st.page_link("pages/0_PDV.py", label="Ir para o PDV", icon="🛒")
        st.stop()

    try:
        sale = SaleService.get_sale(db, tenant.company_id, sale_id)
    except NotFoundError as exc:
        st.session_state.pop("last_receipt_sale_id", None)
        st.warning(exc.message)
        st.stop()

    config = load_receipt_config()
    settings = TenantService.get_settings(db, tenant.company_id)
    logo_url = (settings.receipt_logo_url if settings else None) or logo_data_uri()
    html = build_receipt_html(sale, sale.items, sale.customer, config, logo_url=logo_url)

    components.html(html, height=650, scrolling=True)

    col_pdv, col_download, col_vendas = st.columns(3)
    with col_pdv:
        if st.button("Nova venda", type="primary", use_container_width=True):
            st.switch_page("pages/0_PDV.py")
    with col_download:
        st.download_button(
            "Baixar HTML",
            data=html.encode("utf-8"),
            file_name=f"recibo_{sale.id}.html",
            mime="text/html",
            use_container_width=True,
        )
    with col_vendas:
        if st.button("Histórico de vendas", use_container_width=True):
            st.switch_page("pages/4_Vendas.py")
finally:
    db.close()
