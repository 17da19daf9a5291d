"""
PDV: carrinho, cliente, entrega e pagamentos combinados.
Todos os totais da tela vêm de calculate_checkout.
"""
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from config.database import SessionLocal
from services.customer_service import CustomerService
from services.delivery_service import (
    DEFAULT_DELIVERY_COST,
    DELIVERY_ICONS,
    DELIVERY_LABELS,
    DeliveryService,
    DeliveryType,
    split_delivery,
)
from services.errors import PDVError
from services.installment_calculator import build_payment, installment_options
from services.payment_fee_service import PaymentFeeService
from services.product_service import ProductService
from services.sale_calculations import CartItem, calculate_checkout, item_total, validate_new_payment
from services.sale_service import SaleInput, SaleService
from utils.formatters import (
    PAYMENT_METHOD_LABELS,
    cents_to_reais,
    format_currency,
    format_percent,
    parse_currency,
    payment_method_icon,
    payment_method_label,
    reais_to_cents,
)
from utils.navigation import show_sidebar
from utils.ui_helpers import page_header, require_tenant, show_error, step_label, success_box, warning_box


st.set_page_config(page_title="PDV", page_icon="🛒", layout="wide")


def _init_state():
    defaults = {
        "pdv_cart": [],
        "pdv_payments": [],
        "pdv_customer_id": None,
        "pdv_promo_discount": 0,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def _reset_sale():
    """
    Limpa o carrinho e os pagamentos após finalizar ou cancelar a venda.
    """
    st.session_state.pdv_cart = []
    st.session_state.pdv_payments = []
    st.session_state.pdv_customer_id = None
    st.session_state.pdv_promo_discount = 0


def _add_to_cart(product):
    for item in st.session_state.pdv_cart:
        if item.product_id == product.id:
            item.quantity += 1
            return
    st.session_state.pdv_cart.append(
        CartItem(
            product_id=product.id,
            name=product.name,
            unit_price=product.price_retail,
            unit_cost=product.price_cost,
            quantity=1,
            is_gift=bool(product.is_gift),
            sku=product.sku,
            track_inventory=bool(product.track_inventory),
        )
    )


_init_state()

db = SessionLocal()

try:
    tenant = require_tenant(db)
    show_sidebar(tenant)
    page_header("PDV", "🛒", "Cliente, produtos, entrega e pagamento. Troco apenas em dinheiro.")

    fees = PaymentFeeService.list_fees(db, tenant.company_id)
    col_left, col_right = st.columns([3, 2])

    with col_left:
        # ----- Cliente -----
        step_label(1, "Cliente")
        customer = None
        if st.session_state.pdv_customer_id:
            customer = CustomerService.get_customer(db, tenant.company_id, st.session_state.pdv_customer_id)
            c1, c2 = st.columns([4, 1])
            c1.success(f"👤 {customer.name}" + (f" • {customer.phone}" if customer.phone else ""))
            if c2.button("Trocar", key="trocar_cliente"):
                st.session_state.pdv_customer_id = None
                st.rerun()
        else:
            termo_cliente = st.text_input("Buscar cliente", placeholder="Nome, CPF/CNPJ, e-mail ou telefone")
            if termo_cliente:
                encontrados = CustomerService.search_customers(db, tenant.company_id, termo_cliente)
                if encontrados:
                    escolhido = st.selectbox(
                        "Resultados",
                        options=encontrados,
                        format_func=lambda c: f"{c.name} ({c.cpf_cnpj or 'sem documento'})",
                    )
                    if st.button("Selecionar cliente"):
                        st.session_state.pdv_customer_id = escolhido.id
                        st.rerun()
                else:
                    st.caption("Nenhum cliente encontrado.")
            with st.expander("➕ Cadastro rápido de cliente"):
                with st.form("novo_cliente_pdv", clear_on_submit=True):
                    nome = st.text_input("Nome *")
                    telefone = st.text_input("Telefone")
                    documento = st.text_input("CPF/CNPJ")
                    if st.form_submit_button("Cadastrar e selecionar"):
                        try:
                            novo = CustomerService.create_customer(
                                db, tenant.company_id, {"name": nome, "phone": telefone, "cpf_cnpj": documento}
                            )
                            st.session_state.pdv_customer_id = novo.id
                            st.rerun()
                        except (PDVError, SQLAlchemyError) as exc:
                            show_error(exc, "Cadastrar cliente")

        st.markdown("---")

        # ----- Produtos -----
        step_label(2, "Produtos")
        c1, c2 = st.columns(2)
        with c1:
            with st.form("leitor_codigo", clear_on_submit=True):
                codigo = st.text_input("SKU, IMEI ou código de barras")
                if st.form_submit_button("Adicionar") and codigo:
                    produto = ProductService.lookup_code(db, tenant.company_id, codigo)
                    if produto:
                        _add_to_cart(produto)
                        st.toast(f"{produto.name} adicionado")
                    else:
                        st.error("Produto não encontrado para o código informado.")
        with c2:
            termo = st.text_input("Buscar por nome ou SKU")
            if termo:
                resultados = ProductService.search_products(db, tenant.company_id, termo)
                for produto in resultados:
                    r1, r2 = st.columns([4, 1])
                    estoque = f" • estoque {produto.stock_quantity or 0}" if produto.track_inventory else ""
                    r1.markdown(f"**{produto.name}** • {format_currency(produto.price_retail)}{estoque}")
                    if r2.button("➕", key=f"add_{produto.id}"):
                        _add_to_cart(produto)
                        st.rerun()
                if not resultados:
                    st.caption("Nenhum produto encontrado.")

        cart = st.session_state.pdv_cart
        if not cart:
            st.info("Carrinho vazio.")
        for idx, item in enumerate(list(cart)):
            with st.container(border=True):
                r1, r2, r3, r4, r5 = st.columns([3, 1, 1.3, 1, 0.6])
                r1.markdown(f"**{item.name}**  \n{format_currency(item.unit_price)} un.")
                item.quantity = int(r2.number_input("Qtd", min_value=1, value=item.quantity, step=1, key=f"qty_{idx}"))
                desconto = r3.number_input(
                    "Desconto un. (R$)",
                    min_value=0.0,
                    max_value=cents_to_reais(item.unit_price),
                    value=cents_to_reais(item.discount),
                    step=1.0,
                    key=f"disc_{idx}",
                    disabled=item.is_gift,
                )
                item.discount = reais_to_cents(desconto)
                item.is_gift = r4.checkbox("Brinde", value=item.is_gift, key=f"gift_{idx}")
                if r5.button("🗑️", key=f"rm_{idx}"):
                    cart.pop(idx)
                    st.rerun()
                st.caption(f"Total do item: {format_currency(item_total(item))}")

        st.markdown("---")

        # ----- Entrega -----
        step_label(3, "Entrega")
        tipo = st.radio(
            "Modalidade",
            options=list(DeliveryType.ALL),
            format_func=lambda t: f"{DELIVERY_ICONS[t]} {DELIVERY_LABELS[t]}",
            horizontal=True,
        )
        delivery_person_id = None
        custo_loja = custo_cliente = None
        if tipo != DeliveryType.STORE_PICKUP:
            d1, d2, d3 = st.columns(3)
            custo_loja = reais_to_cents(
                d1.number_input(
                    "Custo da loja (R$)",
                    min_value=0.0,
                    value=cents_to_reais(DEFAULT_DELIVERY_COST if tipo == DeliveryType.STORE_DELIVERY else DEFAULT_DELIVERY_COST // 2),
                    step=1.0,
                )
            )
            if tipo == DeliveryType.HYBRID_DELIVERY:
                custo_cliente = reais_to_cents(
                    d2.number_input("Custo do cliente (R$)", min_value=0.0, value=cents_to_reais(DEFAULT_DELIVERY_COST // 2), step=1.0)
                )
            entregadores = DeliveryService.list_delivery_persons(db, tenant.company_id)
            if entregadores:
                entregador = d3.selectbox(
                    "Entregador", options=[None] + entregadores, format_func=lambda p: p.name if p else "—"
                )
                delivery_person_id = entregador.id if entregador else None
            else:
                d3.caption("Nenhum entregador cadastrado (Configurações).")
        try:
            delivery = split_delivery(tipo, custo_loja, custo_cliente)
        except PDVError as exc:
            show_error(exc, "Calcular entrega")
            delivery = split_delivery(DeliveryType.STORE_PICKUP)

        promo = st.number_input(
            "Desconto promocional (R$)",
            min_value=0.0,
            value=cents_to_reais(st.session_state.pdv_promo_discount),
            step=1.0,
        )
        st.session_state.pdv_promo_discount = reais_to_cents(promo)

    summary = calculate_checkout(
        st.session_state.pdv_cart,
        st.session_state.pdv_payments,
        delivery,
        st.session_state.pdv_promo_discount,
    )

    with col_right:
        # ----- Pagamento -----
        step_label(4, "Pagamento")
        metodo = st.selectbox(
            "Forma de pagamento",
            options=list(PAYMENT_METHOD_LABELS.keys()),
            format_func=lambda m: f"{payment_method_icon(m)} {payment_method_label(m)}",
        )
        valor = st.text_input(
            "Valor (R$)", value=format_currency(summary.remaining), key=f"valor_{metodo}_{summary.remaining}"
        )
        try:
            valor_cents = parse_currency(valor)
        except PDVError as exc:
            show_error(exc, "Ler valor do pagamento")
            valor_cents = 0
        parcelas = 1
        if metodo == "credit":
            opcoes = installment_options(valor_cents, fees)
            if opcoes:
                escolha = st.selectbox(
                    "Parcelas",
                    options=opcoes,
                    format_func=lambda o: (
                        f"{o.installments}x de {format_currency(o.monthly_payment)} "
                        f"(total {format_currency(o.total_with_fee)} • taxa {format_percent(o.fee_percentage)})"
                    ),
                )
                parcelas = escolha.installments
        if st.button("Adicionar pagamento", use_container_width=True):
            try:
                validate_new_payment(summary.amount_due, st.session_state.pdv_payments, metodo, valor_cents)
                st.session_state.pdv_payments.append(build_payment(metodo, valor_cents, fees, parcelas))
                st.rerun()
            except PDVError as exc:
                show_error(exc, "Adicionar pagamento")

        for idx, pagamento in enumerate(list(st.session_state.pdv_payments)):
            p1, p2 = st.columns([5, 1])
            detalhe = f"{payment_method_icon(pagamento.method)} {payment_method_label(pagamento.method)}"
            if pagamento.method == "credit":
                detalhe += f" {pagamento.installments}x"
            detalhe += f": {format_currency(pagamento.total_with_fee)}"
            if pagamento.fee_amount:
                detalhe += f" (taxa {format_currency(pagamento.fee_amount)})"
            p1.markdown(detalhe)
            if p2.button("✖", key=f"rm_pay_{idx}"):
                st.session_state.pdv_payments.pop(idx)
                st.rerun()

        st.markdown("---")
        st.subheader("Resumo")
        st.markdown(f"Subtotal: **{format_currency(summary.subtotal)}**")
        if summary.items_discount:
            st.markdown(f"Descontos: -{format_currency(summary.items_discount)}")
        if summary.gift_discount:
            st.markdown(f"Brindes: -{format_currency(summary.gift_discount)}")
        if summary.promotional_discount:
            st.markdown(f"Desconto promocional: -{format_currency(summary.promotional_discount)}")
        if summary.delivery_customer_cost:
            st.markdown(f"Frete (cliente): {format_currency(summary.delivery_customer_cost)}")
        if summary.fees_total:
            st.markdown(f"Taxas: {format_currency(summary.fees_total)}")
        st.markdown(f"### Total: {format_currency(summary.amount_due)}")
        st.markdown(f"Pago: {format_currency(summary.total_paid)}")
        if summary.change:
            success_box(f"Troco: {format_currency(summary.change)}")
        elif summary.remaining:
            warning_box(f"Restante: {format_currency(summary.remaining)}")
        st.caption(f"Lucro líquido estimado: {format_currency(summary.net_profit)}")

        imprimir = st.checkbox("Imprimir recibo ao finalizar", value=True)
        pode_finalizar = bool(st.session_state.pdv_cart) and customer is not None and summary.is_complete
        c1, c2 = st.columns(2)
        if c1.button("✅ Finalizar venda", type="primary", use_container_width=True, disabled=not pode_finalizar):
            try:
                venda = SaleService.create_sale(
                    db,
                    tenant.company_id,
                    SaleInput(
                        customer_id=st.session_state.pdv_customer_id,
                        items=st.session_state.pdv_cart,
                        payments=st.session_state.pdv_payments,
                        delivery=delivery,
                        delivery_person_id=delivery_person_id,
                        promotional_discount=st.session_state.pdv_promo_discount,
                    ),
                )
                _reset_sale()
                st.success(f"Venda #{venda.id} registrada.")
                if imprimir:
                    st.session_state["print_receipt_sale_id"] = venda.id
                    st.switch_page("pages/9_Recibo_Impressao.py")
            except (PDVError, SQLAlchemyError) as exc:
                show_error(exc, "Finalizar venda")
        if c2.button("Cancelar venda", use_container_width=True):
            _reset_sale()
            st.rerun()
finally:
    db.close()
