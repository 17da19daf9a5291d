import sys
from datetime import date
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import streamlit as st

from config.database import SessionLocal
from services.brand_service import BrandService
from services.catalog_export_service import (
    CUSTOMER_TYPES,
    build_catalog_pdf,
    build_whatsapp_link,
    generate_catalog_message,
    generate_quote_message,
    price_for_customer_type,
)
from services.errors import PDVError
from services.installment_calculator import calculate_installment_plans
from services.payment_fee_service import PaymentFeeService
from services.product_service import ProductFilters, ProductService
from services.tenant import TenantService
from utils.formatters import format_currency, format_percent
from utils.navigation import show_sidebar
from utils.ui_helpers import page_header, require_tenant, show_error


st.set_page_config(page_title="Catálogo", page_icon="📚", layout="wide")

db = SessionLocal()

try:
    tenant = require_tenant(db)
    show_sidebar(tenant)
    page_header("Catálogo", "📚", "Exporte o catálogo em PDF ou texto para o WhatsApp e simule parcelas.")

    configuracoes = TenantService.get_settings(db, tenant.company_id)
    produtos_ativos = ProductService.list_products(db, tenant.company_id, ProductFilters(status="active"))
    categorias = sorted({p.category for p in produtos_ativos if p.category})

    c1, c2, c3 = st.columns(3)
    tipo_cliente = c1.selectbox("Tipo de cliente", options=list(CUSTOMER_TYPES), format_func=CUSTOMER_TYPES.get)
    categoria = c2.selectbox("Categoria", options=[None] + categorias, format_func=lambda c: c or "Todas")
    marcas = BrandService.list_brands(db, tenant.company_id, active_only=True)
    marca = c3.selectbox("Marca", options=[None] + marcas, format_func=lambda m: m.name if m else "Todas")

    produtos = [
        p
        for p in produtos_ativos
        if (not categoria or p.category == categoria) and (not marca or p.brand_id == marca.id)
    ]
    st.caption(f"{len(produtos)} produto(s) selecionado(s).")

    tab_whats, tab_pdf, tab_simulador = st.tabs(["WhatsApp", "PDF", "Simulador de parcelas"])

    with tab_whats:
        mensagem = generate_catalog_message(produtos, tipo_cliente, categoria)
        st.text_area("Mensagem", value=mensagem, height=400)
        telefone = st.text_input("Enviar para (telefone com DDD)")
        if st.button("Gerar link do WhatsApp") and telefone:
            try:
                st.link_button("Abrir WhatsApp", build_whatsapp_link(telefone, mensagem))
            except PDVError as exc:
                show_error(exc, "Gerar link do WhatsApp")

    with tab_pdf:
        if st.button("Gerar PDF", type="primary"):
            pdf = build_catalog_pdf(produtos, tipo_cliente, configuracoes or tenant, categoria)
            st.download_button(
                "⬇️ Baixar catálogo",
                data=pdf,
                file_name=f"catalogo-{tipo_cliente}-{date.today().isoformat()}.pdf",
                mime="application/pdf",
            )

    with tab_simulador:
        if not produtos:
            st.info("Nenhum produto para simular.")
        else:
            produto = st.selectbox("Produto", options=produtos, format_func=lambda p: p.name)
            preco = price_for_customer_type(produto, tipo_cliente)
            planos = calculate_installment_plans(preco, PaymentFeeService.list_fees(db, tenant.company_id))
            linhas = [
                {
                    "Plano": ("⭐ " if p.highlighted else "") + p.label,
                    "Parcela": format_currency(p.monthly_payment),
                    "Total": format_currency(p.total),
                    "Taxa": format_percent(p.fee_percentage),
                }
                for p in planos
            ]
            st.dataframe(linhas, use_container_width=True, hide_index=True)

            plano = st.selectbox("Plano do orçamento", options=planos, format_func=lambda p: p.label)
            retirada = st.radio("Entrega", options=["Retirada na loja", "Entrega"], horizontal=True)
            endereco = st.text_input("Endereço de entrega") if retirada == "Entrega" else ""
            orcamento = generate_quote_message(
                produto.name,
                produto.color.name if produto.color else None,
                plano,
                {"address": endereco} if endereco else None,
                company_name=tenant.name,
            )
            st.text_area("Orçamento", value=orcamento, height=260)
            telefone_loja = configuracoes.phone if configuracoes else None
            if telefone_loja:
                try:
                    st.link_button("Enviar orçamento para a loja", build_whatsapp_link(telefone_loja, orcamento))
                except PDVError as exc:
                    show_error(exc, "Gerar link do WhatsApp")
            else:
                st.caption("Configure o telefone da loja em Configurações para enviar pelo WhatsApp.")
finally:
    db.close()
