import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import pandas as pd
import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from config.database import SessionLocal
from services.errors import PDVError
from services.payment_fee_service import PaymentFeeService
from utils.formatters import format_percent, payment_method_label
from utils.navigation import show_sidebar
from utils.ui_helpers import info_box, page_header, require_tenant, show_error


st.set_page_config(page_title="Taxas de Pagamento", page_icon="💳", layout="wide")

db = SessionLocal()

try:
    tenant = require_tenant(db)
    show_sidebar(tenant)
    page_header("Taxas de Pagamento", "💳", "Taxa da operadora (custo) e taxa aplicada ao cliente (acréscimo).")
    info_box("A taxa aplicada deve ser maior ou igual à taxa da operadora. A diferença entra no lucro da venda.")

    taxas = PaymentFeeService.list_fees(db, tenant.company_id)
    if not taxas:
        st.warning("Nenhuma taxa cadastrada.")
        if st.button("Criar tabela padrão", type="primary"):
            try:
                PaymentFeeService.initialize_default_fees(db, tenant.company_id)
                st.rerun()
            except SQLAlchemyError as exc:
                show_error(exc, "Criar tabela padrão")
        st.stop()

    df = pd.DataFrame(
        [
            {
                "Forma": payment_method_label(t.payment_method),
                "Parcelas": f"{t.installments}x",
                "Operadora": t.operator_name or "-",
                "Taxa operadora": format_percent(t.operator_fee),
                "Taxa aplicada": format_percent(t.applied_fee),
                "Margem": format_percent(t.applied_fee - t.operator_fee),
            }
            for t in taxas
        ]
    )
    st.dataframe(df, use_container_width=True, hide_index=True)

    st.markdown("---")
    st.subheader("Editar taxa")
    taxa = st.selectbox(
        "Taxa",
        options=taxas,
        format_func=lambda t: f"{payment_method_label(t.payment_method)} {t.installments}x",
    )
    with st.form("editar_taxa"):
        operadora = st.text_input("Operadora", value=taxa.operator_name or "")
        c1, c2 = st.columns(2)
        taxa_operadora = c1.number_input("Taxa da operadora (%)", min_value=0.0, value=float(taxa.operator_fee), step=0.1)
        taxa_aplicada = c2.number_input("Taxa aplicada (%)", min_value=0.0, value=float(taxa.applied_fee), step=0.1)
        if st.form_submit_button("Salvar", type="primary"):
            try:
                PaymentFeeService.update_fee(
                    db, tenant.company_id, taxa.id, operadora, taxa_operadora, taxa_aplicada
                )
                st.success("Taxa atualizada.")
                st.rerun()
            except (PDVError, SQLAlchemyError) as exc:
                show_error(exc, "Salvar taxa")
finally:
    db.close()
