import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import pandas as pd
import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from config.database import SessionLocal
from models.product import PRODUCT_CONDITIONS
from services.brand_service import BrandService
from services.errors import PDVError
from services.model_service import ModelService, apply_model_template
from services.product_service import DEFAULT_NAME_TEMPLATE, ProductFilters, ProductService
from utils.formatters import cents_to_reais, format_currency, reais_to_cents
from utils.navigation import show_sidebar
from utils.ui_helpers import page_header, require_tenant, show_error


st.set_page_config(page_title="Produtos", page_icon="📦", layout="wide")

CONDITION_LABELS = {"new": "Novo", "used": "Usado"}
STATUS_LABELS = {"active": "Ativo", "inactive": "Inativo"}

db = SessionLocal()

try:
    tenant = require_tenant(db)
    show_sidebar(tenant)
    page_header("Produtos", "📦", "Cadastre aparelhos e acessórios. O modelo preenche os valores padrão automaticamente.")

    if "selected_product_id" not in st.session_state:
        st.session_state.selected_product_id = None

    tab_cadastro, tab_lista, tab_imagens, tab_opcoes = st.tabs(
        ["Cadastrar ou editar", "Lista de produtos", "Imagens por modelo e cor", "Cores e armazenamentos"]
    )

    marcas = BrandService.list_brands(db, tenant.company_id, active_only=True)
    cores = ProductService.list_colors(db, tenant.company_id)
    armazenamentos = ProductService.list_storages(db, tenant.company_id)

    with tab_cadastro:
        produto = None
        if st.session_state.selected_product_id:
            try:
                produto = ProductService.get_product(db, tenant.company_id, st.session_state.selected_product_id)
            except PDVError:
                st.session_state.selected_product_id = None
        col_titulo, col_novo = st.columns([3, 1])
        col_titulo.subheader(f"Editar: {produto.name}" if produto else "Novo produto")
        if produto and col_novo.button("➕ Novo produto", type="primary", use_container_width=True):
            st.session_state.selected_product_id = None
            st.rerun()

        c1, c2, c3 = st.columns(3)
        marca = c1.selectbox(
            "Marca",
            options=[None] + marcas,
            index=next((i + 1 for i, m in enumerate(marcas) if produto and m.id == produto.brand_id), 0),
            format_func=lambda m: m.name if m else "—",
        )
        modelos = ModelService.list_models(db, tenant.company_id, brand_id=marca.id, active_only=True) if marca else []
        modelo = c2.selectbox(
            "Modelo",
            options=[None] + modelos,
            index=next((i + 1 for i, m in enumerate(modelos) if produto and m.id == produto.model_id), 0),
            format_func=lambda m: m.name if m else "—",
        )
        cor = c3.selectbox(
            "Cor",
            options=[None] + cores,
            index=next((i + 1 for i, c in enumerate(cores) if produto and c.id == produto.color_id), 0),
            format_func=lambda c: c.name if c else "—",
        )

        # Pré-visualização do template do modelo (apenas produto novo)
        base = {}
        if modelo and not produto:
            preenchidos = apply_model_template(modelo, base)
            if preenchidos:
                st.caption(f"✨ Template do modelo: {preenchidos} campo(s) preenchido(s) automaticamente.")

        def _valor(campo, padrao=None):
            if produto is not None:
                return getattr(produto, campo)
            return base.get(campo, padrao)

        specs_atual = dict((produto.specs if produto else base.get("specs")) or {})

        with st.form("form_produto"):
            f1, f2 = st.columns(2)
            nome = f1.text_input("Nome (vazio = gerar automaticamente)", value=_valor("name") or "")
            sku = f2.text_input("SKU *", value=_valor("sku") or "")
            modelo_nome = st.text_input("Template do nome", value=DEFAULT_NAME_TEMPLATE, help="Use {marca}, {modelo}, {ram}, {armazenamento}, {cor}, {versao}")

            g1, g2, g3, g4 = st.columns(4)
            condicao = g1.selectbox(
                "Condição",
                options=list(PRODUCT_CONDITIONS),
                index=list(PRODUCT_CONDITIONS).index(_valor("condition", "new") or "new"),
                format_func=CONDITION_LABELS.get,
            )
            status = g2.selectbox(
                "Status",
                options=list(STATUS_LABELS),
                index=list(STATUS_LABELS).index(_valor("status", "active") or "active"),
                format_func=STATUS_LABELS.get,
            )
            ram = g3.text_input("RAM", value=specs_atual.get("ram", ""))
            nomes_armazenamento = [""] + [a.name for a in armazenamentos]
            atual_armazenamento = specs_atual.get("storage", "")
            if atual_armazenamento not in nomes_armazenamento:
                nomes_armazenamento.append(atual_armazenamento)
            armazenamento = g4.selectbox(
                "Armazenamento", options=nomes_armazenamento, index=nomes_armazenamento.index(atual_armazenamento)
            )

            h1, h2, h3, h4 = st.columns(4)
            eans = h1.text_input("EANs (separados por vírgula)", value=", ".join(_valor("eans", []) or []))
            imei1 = h2.text_input("IMEI 1", value=_valor("imei1") or "")
            imei2 = h3.text_input("IMEI 2", value=_valor("imei2") or "")
            serial = h4.text_input("Serial", value=_valor("serial") or "")

            p1, p2, p3, p4 = st.columns(4)
            preco_custo = p1.number_input("Custo (R$)", min_value=0.0, value=cents_to_reais(_valor("price_cost", 0)), step=10.0)
            preco_varejo = p2.number_input("Varejo (R$)", min_value=0.0, value=cents_to_reais(_valor("price_retail", 0)), step=10.0)
            preco_revenda = p3.number_input("Revenda (R$)", min_value=0.0, value=cents_to_reais(_valor("price_reseller", 0)), step=10.0)
            preco_atacado = p4.number_input("Atacado (R$)", min_value=0.0, value=cents_to_reais(_valor("price_wholesale", 0)), step=10.0)

            e1, e2, e3 = st.columns(3)
            controla_estoque = e1.checkbox("Controlar estoque", value=bool(_valor("track_inventory", False)))
            estoque = e2.number_input("Estoque", min_value=0, value=int(_valor("stock_quantity", 0) or 0), step=1)
            brinde = e3.checkbox("Brinde", value=bool(_valor("is_gift", False)))

            with st.expander("Fiscal e SEO"):
                s1, s2, s3, s4 = st.columns(4)
                ncm = s1.text_input("NCM", value=_valor("ncm") or "")
                cest = s2.text_input("CEST", value=_valor("cest") or "")
                origem = s3.text_input("Origem", value=_valor("origin") or "")
                peso = s4.number_input("Peso (kg)", min_value=0.0, value=float(_valor("weight_kg", 0) or 0), step=0.01)
                descricao = st.text_area("Descrição", value=_valor("description") or "")
                meta_title = st.text_input("Meta title (até 60)", value=_valor("meta_title") or "", max_chars=60)
                meta_description = st.text_input("Meta description (até 160)", value=_valor("meta_description") or "", max_chars=160)
                palavras = st.text_input("Palavras-chave (vírgula)", value=", ".join(_valor("keywords", []) or []))

            imagens = ""
            if condicao == "used":
                imagens = st.text_area("URLs das imagens (uma por linha)", value="\n".join(_valor("images", []) or []))

            b1, b2 = st.columns(2)
            salvar = b1.form_submit_button("💾 Salvar produto", type="primary", use_container_width=True)
            salvar_template = b2.form_submit_button(
                "📋 Salvar como padrão do modelo", use_container_width=True, disabled=modelo is None
            )

        specs = dict(specs_atual)
        specs.update({"ram": ram.strip(), "storage": armazenamento})
        dados = {
            "name": nome,
            "sku": sku,
            "brand_id": marca.id if marca else None,
            "model_id": modelo.id if modelo else None,
            "color_id": cor.id if cor else None,
            "eans": eans,
            "imei1": imei1,
            "imei2": imei2,
            "serial": serial,
            "price_cost": reais_to_cents(preco_custo),
            "price_retail": reais_to_cents(preco_varejo),
            "price_reseller": reais_to_cents(preco_revenda),
            "price_wholesale": reais_to_cents(preco_atacado),
            "specs": {k: v for k, v in specs.items() if v},
            "condition": condicao,
            "status": status,
            "track_inventory": controla_estoque,
            "stock_quantity": int(estoque) if controla_estoque else None,
            "is_gift": brinde,
            "ncm": ncm.strip() or None,
            "cest": cest.strip() or None,
            "origin": origem.strip() or None,
            "weight_kg": peso or None,
            "description": descricao.strip() or None,
            "meta_title": meta_title.strip() or None,
            "meta_description": meta_description.strip() or None,
            "keywords": [k.strip() for k in palavras.split(",") if k.strip()],
            "images": [u.strip() for u in imagens.splitlines() if u.strip()],
        }

        if salvar:
            try:
                if produto:
                    ProductService.update_product(db, tenant.company_id, produto.id, dados)
                    st.success("Produto atualizado.")
                else:
                    novo = ProductService.create_product(db, tenant.company_id, dados, name_template=modelo_nome)
                    st.session_state.selected_product_id = novo.id
                    st.success(f"Produto cadastrado: {novo.name}")
                st.rerun()
            except (PDVError, SQLAlchemyError) as exc:
                show_error(exc, "Salvar produto")
        if salvar_template and modelo:
            try:
                valores = ModelService.save_as_model_template(db, modelo, dados)
                st.success(f"Padrão do modelo salvo ({len(valores)} campos).")
            except (PDVError, SQLAlchemyError) as exc:
                show_error(exc, "Salvar padrão do modelo")

        if produto:
            st.markdown("---")
            imgs = ProductService.get_product_images(db, produto)
            if imgs:
                st.image(imgs[:4], width=120)
            if st.button("🗑️ Excluir produto"):
                try:
                    ProductService.delete_product(db, tenant.company_id, produto.id)
                    st.session_state.selected_product_id = None
                    st.rerun()
                except (PDVError, SQLAlchemyError) as exc:
                    show_error(exc, "Excluir produto")

    with tab_lista:
        l1, l2, l3 = st.columns([2, 1, 1])
        termo = l1.text_input("Buscar", placeholder="Nome ou SKU")
        filtro_condicao = l2.selectbox("Condição", options=[None, "new", "used"], format_func=lambda c: CONDITION_LABELS.get(c, "Todas"))
        filtro_status = l3.selectbox("Status", options=[None, "active", "inactive"], format_func=lambda s: STATUS_LABELS.get(s, "Todos"))
        produtos = ProductService.list_products(
            db,
            tenant.company_id,
            ProductFilters(term=termo or None, condition=filtro_condicao, status=filtro_status),
        )
        if not produtos:
            st.info("Nenhum produto encontrado.")
        else:
            df = pd.DataFrame(
                [
                    {
                        "ID": p.id,
                        "SKU": p.sku,
                        "Nome": p.name,
                        "Marca": p.brand.name if p.brand else "-",
                        "Condição": CONDITION_LABELS.get(p.condition, p.condition),
                        "Varejo": format_currency(p.price_retail),
                        "Estoque": p.stock_quantity if p.track_inventory else "-",
                        "Status": STATUS_LABELS.get(p.status, p.status),
                    }
                    for p in produtos
                ]
            )
            st.dataframe(df, use_container_width=True, hide_index=True)
            escolhido = st.selectbox("Abrir para edição", options=produtos, format_func=lambda p: f"{p.sku} • {p.name}")
            if st.button("Abrir para edição"):
                st.session_state.selected_product_id = escolhido.id
                st.rerun()

    with tab_imagens:
        st.caption("Produtos novos usam as imagens compartilhadas do modelo + cor.")
        todos_modelos = ModelService.list_models(db, tenant.company_id, active_only=True)
        if not todos_modelos or not cores:
            st.info("Cadastre modelos e cores para gerenciar imagens.")
        else:
            i1, i2 = st.columns(2)
            img_modelo = i1.selectbox("Modelo", options=todos_modelos, format_func=lambda m: m.name, key="img_modelo")
            img_cor = i2.selectbox("Cor", options=cores, format_func=lambda c: c.name, key="img_cor")
            atuais = ProductService.get_shared_images(db, tenant.company_id, img_modelo.id, img_cor.id)
            for url in atuais:
                u1, u2 = st.columns([5, 1])
                u1.image(url, width=120)
                if u2.button("Remover", key=f"rm_img_{url}"):
                    try:
                        ProductService.remove_shared_image(db, tenant.company_id, img_modelo.id, img_cor.id, url)
                        st.rerun()
                    except (PDVError, SQLAlchemyError) as exc:
                        show_error(exc, "Remover imagem")
            with st.form("nova_imagem", clear_on_submit=True):
                nova_url = st.text_input("URL da imagem")
                if st.form_submit_button("Adicionar imagem") and nova_url.strip():
                    try:
                        ProductService.upsert_shared_images(
                            db, tenant.company_id, img_modelo.id, img_cor.id, atuais + [nova_url.strip()]
                        )
                        st.rerun()
                    except SQLAlchemyError as exc:
                        show_error(exc, "Adicionar imagem")

    with tab_opcoes:
        o1, o2 = st.columns(2)
        with o1:
            st.subheader("Cores")
            st.write(", ".join(c.name for c in cores) or "Nenhuma cor cadastrada.")
            with st.form("nova_cor", clear_on_submit=True):
                nome_cor = st.text_input("Nova cor")
                hex_cor = st.color_picker("Cor", value="#000000")
                if st.form_submit_button("Adicionar cor"):
                    try:
                        ProductService.create_color(db, tenant.company_id, nome_cor, hex_cor)
                        st.rerun()
                    except (PDVError, SQLAlchemyError) as exc:
                        show_error(exc, "Adicionar cor")
        with o2:
            st.subheader("Armazenamentos")
            st.write(", ".join(a.name for a in armazenamentos) or "Nenhum armazenamento cadastrado.")
            with st.form("novo_armazenamento", clear_on_submit=True):
                nome_arm = st.text_input("Capacidade", placeholder="Ex: 128GB")
                ordem = st.number_input("Ordem", min_value=0, value=len(armazenamentos), step=1)
                if st.form_submit_button("Adicionar"):
                    try:
                        ProductService.create_storage(db, tenant.company_id, nome_arm, int(ordem))
                        st.rerun()
                    except (PDVError, SQLAlchemyError) as exc:
                        show_error(exc, "Adicionar armazenamento")
finally:
    db.close()
