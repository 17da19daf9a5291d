"""
Layout do recibo de impressão, salvo em config/receipt_config.json.
"""
import json
import logging

from config.settings import COMPANY_NAME, PROJECT_ROOT

logger = logging.getLogger(__name__)

CONFIG_PATH = PROJECT_ROOT / "config" / "receipt_config.json"

DEFAULTS = {
    "paper_width_mm": 80,
    "margin_mm": 5,
    "font_size_pt": 10,
    "header_text": COMPANY_NAME.upper(),
    "subheader_text": "Recibo nao fiscal",
    "footer_text": "Obrigado pela preferencia!",
    "show_customer": True,
    "show_payment_fees": True,
    "show_logo": False,
}


def load_receipt_config(path=None) -> dict:
    """Retorna a configuração do recibo (merge com defaults)."""
    path = path or CONFIG_PATH
    out = dict(DEFAULTS)
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError):
            logger.warning("Configuração do recibo ilegível em %s; usando padrão", path, exc_info=True)
            return out
        out.update({k: v for k, v in data.items() if k in DEFAULTS})
    return out


def save_receipt_config(config: dict, path=None) -> None:
    """Salva a configuração do recibo em JSON."""
    path = path or CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {k: config.get(k, v) for k, v in DEFAULTS.items()}
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
