import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import pandas as pd
import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from config.database import SessionLocal
from services.customer_service import CustomerService
from services.errors import PDVError
from services.sale_service import SaleFilters, SaleService
from utils.documents import format_cpf_cnpj
from utils.formatters import format_currency, format_date
from utils.navigation import show_sidebar
from utils.ui_helpers import page_header, require_tenant, show_error


st.set_page_config(page_title="Clientes", page_icon="👥", layout="wide")

db = SessionLocal()

try:
    tenant = require_tenant(db)
    show_sidebar(tenant)
    page_header("Clientes", "👥", "Busque por nome, CPF/CNPJ, e-mail ou telefone.")

    termo = st.text_input("Buscar cliente")
    clientes = (
        CustomerService.search_customers(db, tenant.company_id, termo)
        if termo
        else CustomerService.list_customers(db, tenant.company_id)
    )
    if clientes:
        st.dataframe(
            pd.DataFrame(
                [
                    {
                        "Nome": c.name,
                        "CPF/CNPJ": format_cpf_cnpj(c.cpf_cnpj) or "-",
                        "Telefone": c.phone or "-",
                        "E-mail": c.email or "-",
                        "Cidade": c.city or "-",
                    }
                    for c in clientes
                ]
            ),
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.info("Nenhum cliente encontrado.")

    c1, c2 = st.columns(2)
    with c1:
        st.subheader("Novo cliente")
        with st.form("novo_cliente", clear_on_submit=True):
            nome = st.text_input("Nome *")
            documento = st.text_input("CPF/CNPJ")
            telefone = st.text_input("Telefone")
            email = st.text_input("E-mail")
            cidade = st.text_input("Cidade")
            obs = st.text_area("Observações")
            if st.form_submit_button("Cadastrar", type="primary"):
                try:
                    CustomerService.create_customer(
                        db,
                        tenant.company_id,
                        {
                            "name": nome,
                            "cpf_cnpj": documento,
                            "phone": telefone,
                            "email": email,
                            "city": cidade,
                            "notes": obs,
                        },
                    )
                    st.success("Cliente cadastrado.")
                    st.rerun()
                except (PDVError, SQLAlchemyError) as exc:
                    show_error(exc, "Cadastrar cliente")

    with c2:
        if clientes:
            st.subheader("Editar cliente")
            cliente = st.selectbox("Cliente", options=clientes, format_func=lambda c: c.name)
            with st.form("editar_cliente"):
                novo_nome = st.text_input("Nome", value=cliente.name)
                novo_doc = st.text_input("CPF/CNPJ", value=format_cpf_cnpj(cliente.cpf_cnpj))
                novo_tel = st.text_input("Telefone", value=cliente.phone or "")
                novo_email = st.text_input("E-mail", value=cliente.email or "")
                nova_cidade = st.text_input("Cidade", value=cliente.city or "")
                ativo = st.checkbox("Ativo", value=cliente.is_active)
                if st.form_submit_button("Salvar"):
                    try:
                        CustomerService.update_customer(
                            db,
                            tenant.company_id,
                            cliente.id,
                            {
                                "name": novo_nome,
                                "cpf_cnpj": novo_doc,
                                "phone": novo_tel,
                                "email": novo_email,
                                "city": nova_cidade,
                                "is_active": ativo,
                            },
                        )
                        st.success("Cliente atualizado.")
                        st.rerun()
                    except (PDVError, SQLAlchemyError) as exc:
                        show_error(exc, "Salvar cliente")

            compras = SaleService.list_sales(db, tenant.company_id, SaleFilters(customer_id=cliente.id), limit=20)
            st.markdown("**Últimas compras**")
            if compras:
                for venda in compras:
                    st.caption(f"#{venda.id} • {format_date(venda.created_at)} • {format_currency(venda.total)} • {venda.status}")
            else:
                st.caption("Nenhuma compra registrada.")
finally:
    db.close()
