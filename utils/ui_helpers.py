"""
Componentes de tela compartilhados pelas páginas e exibição de erros.
"""
import logging

import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from config.settings import COMPANY_SLUG
from services.errors import PDVError, TenantError
from services.tenant import TenantContext, resolve_tenant

logger = logging.getLogger(__name__)


def page_header(title: str, icon: str, subtitle: str = ""):
    """Título da página com possível subtítulo."""
    st.markdown(
        f"<p style='margin:0 0 0.25rem 0; font-size:1.25rem;'><strong>{icon} {title}</strong></p>"
        + (f"<p style='margin:0; font-size:0.8rem; color:#666;'>{subtitle}</p>" if subtitle else ""),
        unsafe_allow_html=True,
    )
    st.markdown("---")


_CALLOUT_COLORS = {
    "info": ("#e8f4fd", "#1e88e5", "ℹ️"),
    "success": ("#e8f5e9", "#43a047", "✅"),
    "warning": ("#fff3e0", "#fb8c00", "⚠️"),
}


def _callout(kind: str, message: str, icon: str | None = None):
    background, border, default_icon = _CALLOUT_COLORS[kind]
    weight = "400" if kind == "info" else "500"
    st.markdown(
        f"<div style='background-color:{background}; border-left:4px solid {border}; "
        f"padding:12px 16px; margin:12px 0; border-radius:0 8px 8px 0; font-weight:{weight};'>"
        f"<strong>{icon or default_icon}</strong> {message}</div>",
        unsafe_allow_html=True,
    )


def info_box(message: str, icon: str = "ℹ️"):
    _callout("info", message, icon)


def success_box(message: str):
    """Status positivo no PDV (pagamento completo, troco)."""
    _callout("success", message)


def warning_box(message: str):
    """Saldo restante ou pendência."""
    _callout("warning", message)


def step_label(step: int, label: str):
    """Etapas do PDV: cliente, produtos, entrega, pagamento."""
    st.markdown(f"**{step}. {label}**")


def require_tenant(db) -> TenantContext:
    """
    Resolve a loja configurada (COMPANY_SLUG). Interrompe a página se não existir.
    """
    try:
        return resolve_tenant(db, COMPANY_SLUG)
    except TenantError as exc:
        logger.error("Loja não resolvida: %s", exc.context)
        st.error(exc.message)
        st.stop()


def show_error(exc: Exception, action: str) -> None:
    """
    Registra o erro no log e mostra a mensagem na tela; o estado da tela não muda.
    """
    if isinstance(exc, PDVError):
        logger.warning("%s: %s %s", action, exc.code, exc.context)
        st.error(exc.message)
    elif isinstance(exc, SQLAlchemyError):
        logger.exception("%s: erro de banco", action)
        st.error(f"Erro ao {action.lower()}. Tente novamente.")
    else:
        raise exc
