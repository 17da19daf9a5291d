import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from config.database import SessionLocal
from services.delivery_service import DeliveryService
from services.errors import PDVError
from services.tenant import TenantService
from utils.navigation import show_sidebar
from utils.receipt_config import load_receipt_config, save_receipt_config
from utils.store_logo import get_logo_path, remove_logo, save_logo
from utils.ui_helpers import page_header, require_tenant, show_error


st.set_page_config(page_title="Configurações", page_icon="⚙️", layout="wide")

db = SessionLocal()

try:
    tenant = require_tenant(db)
    show_sidebar(tenant)
    page_header("Configurações", "⚙️", "Dados da loja, entregadores, logo e layout do recibo.")

    with st.expander("Dados da loja", expanded=True):
        st.caption("Usados no recibo, no catálogo em PDF e no link do WhatsApp.")
        cfg = TenantService.get_settings(db, tenant.company_id)
        with st.form("dados_loja"):
            nome = st.text_input("Nome da loja *", value=cfg.name if cfg else tenant.name)
            telefone = st.text_input("Telefone / WhatsApp", value=(cfg.phone if cfg else "") or "")
            email = st.text_input("E-mail", value=(cfg.email if cfg else "") or "")
            endereco = st.text_input("Endereço", value=(cfg.address if cfg else "") or "")
            logo_recibo = st.text_input("URL do logo do recibo", value=(cfg.receipt_logo_url if cfg else "") or "")
            if st.form_submit_button("Salvar", type="primary"):
                try:
                    TenantService.save_settings(
                        db,
                        tenant.company_id,
                        name=nome.strip(),
                        phone=telefone.strip() or None,
                        email=email.strip() or None,
                        address=endereco.strip() or None,
                        receipt_logo_url=logo_recibo.strip() or None,
                    )
                    st.success("Dados da loja salvos.")
                except (PDVError, SQLAlchemyError) as exc:
                    show_error(exc, "Salvar dados da loja")

    with st.expander("Entregadores"):
        entregadores = DeliveryService.list_delivery_persons(db, tenant.company_id, active_only=False)
        for p in entregadores:
            st.markdown(f"- **{p.name}** {p.phone or ''} {'' if p.active else '(inativo)'}")
        if not entregadores:
            st.caption("Nenhum entregador cadastrado.")
        with st.form("novo_entregador", clear_on_submit=True):
            nome_entregador = st.text_input("Nome *")
            telefone_entregador = st.text_input("Telefone")
            if st.form_submit_button("Cadastrar entregador"):
                try:
                    DeliveryService.create_delivery_person(db, tenant.company_id, nome_entregador, telefone_entregador)
                    st.rerun()
                except (PDVError, SQLAlchemyError) as exc:
                    show_error(exc, "Cadastrar entregador")

    with st.expander("Logo da loja (menu e recibo)"):
        st.caption(
            "A logo aparece no menu lateral e, se ativado no layout do recibo, no topo do recibo. "
            "Formatos: PNG, JPG, JPEG ou WEBP."
        )
        logo_path = get_logo_path()
        if logo_path:
            st.image(str(logo_path), width=180)
            if st.button("Remover logo", key="remove_logo_btn"):
                remove_logo()
                st.success("Logo removida.")
                st.rerun()
        logo_file = st.file_uploader(
            "Enviar nova logo",
            type=["png", "jpg", "jpeg", "webp"],
            key="store_logo_upload",
        )
        if logo_file and st.button("Salvar logo", key="save_logo_btn"):
            save_logo(logo_file.getvalue(), logo_file.name)
            st.success("Logo salva.")
            st.rerun()

    with st.expander("Layout do recibo para impressão"):
        st.caption("Ajuste o layout do recibo conforme a impressora (largura do papel, margens, fonte).")
        rc = load_receipt_config()
        c1, c2 = st.columns(2)
        with c1:
            paper_width_mm = st.number_input(
                "Largura do papel (mm)", min_value=58, max_value=120, value=rc["paper_width_mm"], step=1
            )
            margin_mm = st.number_input("Margem (mm)", min_value=0, max_value=20, value=rc["margin_mm"], step=1)
            font_size_pt = st.number_input(
                "Tamanho da fonte (pt)", min_value=8, max_value=14, value=rc["font_size_pt"], step=1
            )
            show_customer = st.checkbox("Mostrar cliente", value=rc["show_customer"])
            show_payment_fees = st.checkbox("Mostrar taxas de pagamento", value=rc["show_payment_fees"])
            show_logo = st.checkbox("Mostrar logo", value=rc["show_logo"])
        with c2:
            header_text = st.text_input("Texto do cabeçalho", value=rc["header_text"])
            subheader_text = st.text_input("Subtítulo do recibo", value=rc["subheader_text"])
            footer_text = st.text_input("Texto do rodapé", value=rc["footer_text"])
        if st.button("Salvar configuração do recibo", type="primary"):
            save_receipt_config(
                {
                    "paper_width_mm": paper_width_mm,
                    "margin_mm": margin_mm,
                    "font_size_pt": font_size_pt,
                    "header_text": header_text or "",
                    "subheader_text": subheader_text or "Recibo nao fiscal",
                    "footer_text": footer_text or "",
                    "show_customer": show_customer,
                    "show_payment_fees": show_payment_fees,
                    "show_logo": show_logo,
                }
            )
            st.success("Configuração do recibo salva.")
finally:
    db.close()
