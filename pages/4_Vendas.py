"""
Histórico de vendas: filtros, resumo do período, produtos mais vendidos,
cancelamento/estorno e créditos dos entregadores.
"""
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import pandas as pd
import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from config.database import SessionLocal
from services.delivery_service import DeliveryService, delivery_label
from services.errors import PDVError
from services.sale_service import PERIODS, SaleFilters, SaleService, get_period
from utils.formatters import format_currency, format_date, format_percent, payment_method_label, reais_to_cents
from utils.navigation import show_sidebar
from utils.ui_helpers import page_header, require_tenant, show_error


st.set_page_config(page_title="Vendas", page_icon="🧾", layout="wide")

STATUS_LABELS = {"completed": "Concluída", "cancelled": "Cancelada", "refunded": "Estornada"}
CREDIT_LABELS = {"pending": "Pendente", "paid": "Pago", "cancelled": "Cancelado"}

db = SessionLocal()

try:
    tenant = require_tenant(db)
    show_sidebar(tenant)
    page_header("Vendas", "🧾", "Vendas por período, cancelamento e estorno, créditos de entrega.")

    tab_vendas, tab_entregas = st.tabs(["Vendas", "Entregadores"])

    with tab_vendas:
        f1, f2, f3, f4 = st.columns(4)
        periodo = f1.selectbox("Período", options=PERIODS, index=2)
        inicio_padrao, fim_padrao = get_period(periodo)
        data_inicio = f2.date_input("Data inicial", value=inicio_padrao)
        data_fim = f3.date_input("Data final", value=fim_padrao)
        status = f4.selectbox("Status", options=[None] + list(STATUS_LABELS), format_func=lambda s: STATUS_LABELS.get(s, "Todos"))
        g1, g2, g3 = st.columns(3)
        vendedor = g1.text_input("Vendedor")
        minimo = g2.number_input("Total mínimo (R$)", min_value=0.0, value=0.0, step=10.0)
        maximo = g3.number_input("Total máximo (R$, 0 = sem limite)", min_value=0.0, value=0.0, step=10.0)

        filtros = SaleFilters(
            seller_name=vendedor or None,
            status=status,
            start_date=data_inicio,
            end_date=data_fim,
            min_total=reais_to_cents(minimo) if minimo else None,
            max_total=reais_to_cents(maximo) if maximo else None,
        )

        resumo = SaleService.sales_summary(db, tenant.company_id, filtros)
        m1, m2, m3, m4, m5 = st.columns(5)
        m1.metric("Vendas", resumo["count"])
        m2.metric("Faturamento", format_currency(resumo["revenue"]))
        m3.metric("Lucro", format_currency(resumo["profit"]))
        m4.metric("Ticket médio", format_currency(resumo["average_ticket"]))
        m5.metric("Margem", format_percent(resumo["margin"]))

        vendas = SaleService.list_sales(db, tenant.company_id, filtros)
        if not vendas:
            st.info("Nenhuma venda no período.")
        else:
            linhas = [
                {
                    "#": v.id,
                    "Data": format_date(v.created_at),
                    "Cliente": v.customer.name if v.customer else "-",
                    "Pagamento": ", ".join(payment_method_label(p.get("method", "")) for p in v.payment_methods or []),
                    "Entrega": delivery_label(v.delivery_type),
                    "Total": format_currency(v.total),
                    "Lucro": format_currency(v.profit),
                    "Status": STATUS_LABELS.get(v.status, v.status),
                }
                for v in vendas
            ]
            st.dataframe(linhas, use_container_width=True, hide_index=True)

            st.markdown("---")
            venda = st.selectbox(
                "Detalhes da venda", options=vendas, format_func=lambda v: f"#{v.id} • {format_date(v.created_at)} • {format_currency(v.total)}"
            )
            itens = pd.DataFrame(
                [
                    {
                        "Produto": i.product_name + (" (brinde)" if i.is_gift else ""),
                        "Qtd": i.quantity,
                        "Unitário": format_currency(i.unit_price),
                        "Desconto un.": format_currency(i.discount),
                        "Total": format_currency(i.total),
                    }
                    for i in venda.items
                ]
            )
            st.dataframe(itens, use_container_width=True, hide_index=True)
            d1, d2, d3 = st.columns(3)
            if d1.button("🖨️ Imprimir recibo", use_container_width=True):
                st.session_state["print_receipt_sale_id"] = venda.id
                st.switch_page("pages/9_Recibo_Impressao.py")
            if venda.status == "completed":
                if d2.button("Cancelar venda", use_container_width=True):
                    try:
                        SaleService.cancel_sale(db, tenant.company_id, venda.id)
                        st.success("Venda cancelada. Estoque devolvido.")
                        st.rerun()
                    except (PDVError, SQLAlchemyError) as exc:
                        show_error(exc, "Cancelar venda")
                if d3.button("Estornar venda", use_container_width=True):
                    try:
                        SaleService.refund_sale(db, tenant.company_id, venda.id)
                        st.success("Venda estornada. Estoque devolvido.")
                        st.rerun()
                    except (PDVError, SQLAlchemyError) as exc:
                        show_error(exc, "Estornar venda")

        st.markdown("---")
        st.subheader("Produtos mais vendidos")
        top = SaleService.top_products(db, tenant.company_id, filtros)
        if not top:
            st.info("Nenhuma venda registrada no período.")
        else:
            df_top = pd.DataFrame(
                [{"Produto": nome, "Quantidade vendida": qtd, "Receita": receita} for nome, qtd, receita in top]
            )
            df_top["Receita"] = df_top["Receita"].apply(format_currency)
            st.dataframe(df_top, use_container_width=True, hide_index=True)

    with tab_entregas:
        ganhos = DeliveryService.delivery_person_earnings(db, tenant.company_id)
        if ganhos:
            df = pd.DataFrame(ganhos).drop(columns=["delivery_person_id"])
            df = df.rename(columns={"name": "Entregador", "deliveries": "Entregas", "pending": "Pendente", "paid": "Pago", "total": "Total"})
            for coluna in ("Pendente", "Pago", "Total"):
                df[coluna] = df[coluna].apply(format_currency)
            st.dataframe(df, use_container_width=True, hide_index=True)
        else:
            st.info("Nenhum crédito de entrega registrado.")

        pendentes = DeliveryService.list_delivery_credits(db, tenant.company_id, status="pending")
        st.subheader("Créditos pendentes")
        for credito in pendentes:
            c1, c2 = st.columns([5, 1])
            c1.markdown(
                f"Venda #{credito.sale_id} • {credito.delivery_person.name} • "
                f"{format_currency(credito.amount)} • {CREDIT_LABELS[credito.status]}"
            )
            if c2.button("Pagar", key=f"pagar_{credito.id}"):
                try:
                    DeliveryService.mark_credit_paid(db, tenant.company_id, credito.id)
                    st.rerun()
                except (PDVError, SQLAlchemyError) as exc:
                    show_error(exc, "Pagar crédito")
        if not pendentes:
            st.caption("Nenhum crédito pendente.")
finally:
    db.close()
