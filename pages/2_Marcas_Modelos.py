import json
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import pandas as pd
import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from config.database import SessionLocal
from services.brand_service import BrandService
from services.errors import PDVError
from services.model_service import ModelService
from utils.navigation import show_sidebar
from utils.ui_helpers import page_header, require_tenant, show_error


st.set_page_config(page_title="Marcas e Modelos", page_icon="🏷️", layout="wide")

db = SessionLocal()

try:
    tenant = require_tenant(db)
    show_sidebar(tenant)
    page_header("Marcas e Modelos", "🏷️", "O template do modelo é copiado para cada produto novo daquele modelo.")

    tab_marcas, tab_modelos = st.tabs(["Marcas", "Modelos"])

    with tab_marcas:
        marcas = BrandService.list_brands(db, tenant.company_id)
        if marcas:
            st.dataframe(
                pd.DataFrame(
                    [{"Nome": m.name, "Slug": m.slug, "Ativa": "Sim" if m.active else "Não"} for m in marcas]
                ),
                use_container_width=True,
                hide_index=True,
            )
        else:
            st.info("Nenhuma marca cadastrada.")

        c1, c2 = st.columns(2)
        with c1:
            st.subheader("Nova marca")
            with st.form("nova_marca", clear_on_submit=True):
                nome = st.text_input("Nome *")
                logo = st.text_input("URL do logo")
                if st.form_submit_button("Cadastrar", type="primary"):
                    try:
                        BrandService.create_brand(db, tenant.company_id, nome, logo_url=logo)
                        st.success("Marca cadastrada.")
                        st.rerun()
                    except (PDVError, SQLAlchemyError) as exc:
                        show_error(exc, "Cadastrar marca")
        with c2:
            if marcas:
                st.subheader("Editar marca")
                marca = st.selectbox("Marca", options=marcas, format_func=lambda m: m.name)
                with st.form("editar_marca"):
                    novo_nome = st.text_input("Nome", value=marca.name)
                    novo_logo = st.text_input("URL do logo", value=marca.logo_url or "")
                    ativa = st.checkbox("Ativa", value=marca.active)
                    s1, s2 = st.columns(2)
                    salvar = s1.form_submit_button("Salvar")
                    excluir = s2.form_submit_button("Excluir")
                if salvar:
                    try:
                        BrandService.update_brand(
                            db, tenant.company_id, marca.id, name=novo_nome, logo_url=novo_logo, active=ativa
                        )
                        st.rerun()
                    except (PDVError, SQLAlchemyError) as exc:
                        show_error(exc, "Salvar marca")
                if excluir:
                    try:
                        BrandService.delete_brand(db, tenant.company_id, marca.id)
                        st.rerun()
                    except (PDVError, SQLAlchemyError) as exc:
                        show_error(exc, "Excluir marca")

    with tab_modelos:
        marcas_ativas = BrandService.list_brands(db, tenant.company_id, active_only=True)
        if not marcas_ativas:
            st.info("Cadastre uma marca primeiro.")
            st.stop()
        filtro_marca = st.selectbox(
            "Filtrar por marca", options=[None] + marcas_ativas, format_func=lambda m: m.name if m else "Todas"
        )
        modelos = ModelService.list_models(db, tenant.company_id, brand_id=filtro_marca.id if filtro_marca else None)
        if modelos:
            st.dataframe(
                pd.DataFrame(
                    [
                        {
                            "Modelo": m.name,
                            "Marca": m.brand.name if m.brand else "-",
                            "Categoria": m.category or "-",
                            "Campos no template": len(m.template_values or {}),
                            "Ativo": "Sim" if m.active else "Não",
                        }
                        for m in modelos
                    ]
                ),
                use_container_width=True,
                hide_index=True,
            )

        c1, c2 = st.columns(2)
        with c1:
            st.subheader("Novo modelo")
            with st.form("novo_modelo", clear_on_submit=True):
                marca_modelo = st.selectbox("Marca *", options=marcas_ativas, format_func=lambda m: m.name)
                nome_modelo = st.text_input("Nome *")
                categoria = st.text_input("Categoria", placeholder="Ex: Smartphones")
                descricao = st.text_area("Descrição")
                if st.form_submit_button("Cadastrar", type="primary"):
                    try:
                        ModelService.create_model(
                            db, tenant.company_id, marca_modelo.id, nome_modelo, categoria, descricao
                        )
                        st.success("Modelo cadastrado.")
                        st.rerun()
                    except (PDVError, SQLAlchemyError) as exc:
                        show_error(exc, "Cadastrar modelo")
        with c2:
            if modelos:
                st.subheader("Editar modelo e template")
                modelo = st.selectbox("Modelo", options=modelos, format_func=lambda m: m.name)
                with st.form("editar_modelo"):
                    novo_nome = st.text_input("Nome", value=modelo.name)
                    nova_categoria = st.text_input("Categoria", value=modelo.category or "")
                    nova_descricao = st.text_area("Descrição", value=modelo.description or "")
                    ativo = st.checkbox("Ativo", value=modelo.active)
                    template_txt = st.text_area(
                        "Template (JSON)",
                        value=json.dumps(modelo.template_values or {}, ensure_ascii=False, indent=2),
                        height=200,
                        help="Chaves price_* em centavos. IMEI, serial, cor, EAN e SKU são ignorados.",
                    )
                    s1, s2 = st.columns(2)
                    salvar = s1.form_submit_button("Salvar")
                    excluir = s2.form_submit_button("Excluir")
                if salvar:
                    try:
                        template = json.loads(template_txt or "{}")
                        if not isinstance(template, dict):
                            raise ValueError("template deve ser um objeto")
                    except ValueError:
                        st.error("Template inválido: informe um objeto JSON.")
                    else:
                        try:
                            ModelService.update_model(
                                db,
                                tenant.company_id,
                                modelo.id,
                                name=novo_nome,
                                category=nova_categoria,
                                description=nova_descricao,
                                active=ativo,
                                template_values=template,
                            )
                            st.rerun()
                        except (PDVError, SQLAlchemyError) as exc:
                            show_error(exc, "Salvar modelo")
                if excluir:
                    try:
                        ModelService.delete_model(db, tenant.company_id, modelo.id)
                        st.rerun()
                    except (PDVError, SQLAlchemyError) as exc:
                        show_error(exc, "Excluir modelo")
finally:
    db.close()
