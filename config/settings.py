"""
Configurações gerais do PDV lidas do ambiente (.env na raiz do projeto).
"""
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent.parent
env_path = PROJECT_ROOT / ".env"
if env_path.exists():
    load_dotenv(dotenv_path=env_path)

# Loja atual (tenant). Resolvida para company_id uma vez por página.
COMPANY_SLUG = os.getenv("COMPANY_SLUG", "mercado-do-vale")
COMPANY_NAME = os.getenv("COMPANY_NAME", "Mercado do Vale")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

UPLOADS_DIR = Path(os.getenv("UPLOADS_DIR", str(PROJECT_ROOT / "uploads")))

_logging_configured = False


def configure_logging(level: str | None = None) -> None:
    """
    Configura o logging da aplicação (uma vez por processo).
    """
    global _logging_configured
    if _logging_configured:
        return
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
    _logging_configured = True
