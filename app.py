import sys
from pathlib import Path

# Garante que o diretório raiz do projeto esteja no path (para rodar de qualquer cwd)
_ROOT = Path(__file__).resolve().parents[0]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import streamlit as st

from config.database import SessionLocal, init_db
from config.settings import COMPANY_NAME, COMPANY_SLUG, configure_logging
from models.customer import Customer
from models.product import Product
from services.payment_fee_service import PaymentFeeService
from services.sale_service import SaleFilters, SaleService, get_period
from services.tenant import ensure_company
from utils.formatters import format_currency, format_date, format_percent
from utils.navigation import show_sidebar


st.set_page_config(
    page_title=f"PDV - {COMPANY_NAME}",
    page_icon="📱",
    layout="wide",
    initial_sidebar_state="expanded",
    menu_items={
        "Get Help": None,
        "Report a bug": None,
        "About": None,
    },
)


@st.cache_resource
def initialize_app():
    """
    Configura o log, cria as tabelas, garante a loja e a tabela de taxas padrão.
    """
    configure_logging()
    init_db()
    db = SessionLocal()
    try:
        tenant = ensure_company(db, COMPANY_SLUG, COMPANY_NAME)
        PaymentFeeService.initialize_default_fees(db, tenant.company_id)
    finally:
        db.close()
    return tenant


def home_page(tenant):
    from datetime import datetime

    st.markdown("# 🏠 Início")
    st.markdown(f"Bem-vindo ao PDV da **{tenant.name}**. Use o menu ao lado para navegar.")
    st.markdown("---")

    db = SessionLocal()
    try:
        inicio, fim = get_period("Hoje")
        resumo = SaleService.sales_summary(
            db, tenant.company_id, SaleFilters(start_date=inicio, end_date=fim)
        )
        produtos_ativos = (
            db.query(Product)
            .filter(Product.company_id == tenant.company_id, Product.status == "active")
            .count()
        )
        clientes = (
            db.query(Customer)
            .filter(Customer.company_id == tenant.company_id, Customer.is_active.is_(True))
            .count()
        )
    finally:
        db.close()

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Hoje", format_date(datetime.now()))
    with col2:
        st.metric("Vendas hoje", resumo["count"], help=f"Faturamento: {format_currency(resumo['revenue'])}")
    with col3:
        st.metric("Lucro hoje", format_currency(resumo["profit"]), help=f"Margem: {format_percent(resumo['margin'])}")
    with col4:
        st.metric("Produtos ativos", produtos_ativos, help=f"Clientes ativos: {clientes}")

    st.markdown("### O que o sistema oferece")

    st.markdown("#### 🛒 PDV")
    st.markdown(
        "Busque produtos por nome, SKU, IMEI ou código de barras; selecione o cliente, a modalidade de entrega "
        "e combine formas de pagamento (dinheiro, PIX, débito, crédito parcelado com taxas). "
        "Troco apenas em dinheiro. Ao finalizar, imprima o recibo."
    )

    st.markdown("#### 📦 Produtos")
    st.markdown(
        "- **Cadastro** com EANs, IMEI 1/2, serial, preços de custo, varejo, revenda e atacado.\n"
        "- **Template do modelo**: ao escolher o modelo, os valores padrão são preenchidos automaticamente.\n"
        "- **Imagens**: produtos novos usam as imagens do modelo + cor; usados têm imagens próprias."
    )

    st.markdown("#### 🏷️ Marcas e Modelos")
    st.markdown("Cadastre marcas, modelos e os valores padrão (template) copiados para novos produtos.")

    st.markdown("#### 📚 Catálogo")
    st.markdown("Gere o catálogo em PDF ou em texto para o WhatsApp, com preços por tipo de cliente e simulação de parcelas.")

    st.markdown("#### 💳 Taxas de Pagamento")
    st.markdown("Taxa da operadora x taxa aplicada ao cliente para débito, PIX e crédito de 1x a 18x.")

    st.markdown("---")
    st.markdown("### Próximos passos")
    st.markdown(
        "1. Confira as **Taxas de Pagamento**.  \n"
        "2. Cadastre **Marcas e Modelos** e depois os **Produtos**.  \n"
        "3. Cadastre **Clientes** ou faça o cadastro rápido direto no **PDV**.  \n"
        "4. Acompanhe as **Vendas** e envie o **Catálogo** para os clientes."
    )


def main():
    tenant = initialize_app()
    show_sidebar(tenant)
    home_page(tenant)


if __name__ == "__main__":
    main()
