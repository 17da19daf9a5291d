import streamlit as st

from config.settings import COMPANY_NAME
from utils.store_logo import get_logo_path


def show_sidebar(tenant=None) -> None:
    """
    Sidebar com o nome da loja e links para as páginas do PDV.
    Exibe a logo em uploads/logo/ se existir; caso contrário, o título "PDV".
    """
    with st.sidebar:
        logo_path = get_logo_path()
        if logo_path:
            st.image(str(logo_path), use_container_width=True)
        else:
            st.markdown("## 📱 PDV")
        st.markdown(f"**{tenant.name if tenant else COMPANY_NAME}**")

        st.markdown("---")
        st.markdown("### Menu")
        st.page_link("app.py", label="Início", icon="🏠")
        st.page_link("pages/0_PDV.py", label="PDV", icon="🛒")
        st.page_link("pages/1_Produtos.py", label="Produtos", icon="📦")
        st.page_link("pages/2_Marcas_Modelos.py", label="Marcas e Modelos", icon="🏷️")
        st.page_link("pages/3_Clientes.py", label="Clientes", icon="👥")
        st.page_link("pages/4_Vendas.py", label="Vendas", icon="🧾")
        st.page_link("pages/5_Catalogo.py", label="Catálogo", icon="📚")
        st.page_link("pages/6_Taxas_Pagamento.py", label="Taxas de Pagamento", icon="💳")
        st.page_link("pages/7_Configuracoes.py", label="Configurações", icon="⚙️")
        st.page_link("pages/9_Recibo_Impressao.py", label="Recibo", icon="🖨️")
