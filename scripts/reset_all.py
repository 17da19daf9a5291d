"""
Script para limpar todas as bases e testar do zero.
- Limpa todos os dados do banco (via SQL, sem apagar o arquivo)
- Remove a logo em uploads/logo/
- Recria a loja configurada e a tabela de taxas padrão

Pode rodar mesmo com o Streamlit aberto.
"""
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from config.database import DATABASE_URL, SessionLocal, engine, init_db
from config.settings import COMPANY_NAME, COMPANY_SLUG
from services.payment_fee_service import PaymentFeeService
from services.tenant import ensure_company
from utils.store_logo import remove_logo


# Ordem: tabelas filhas primeiro (por causa das chaves estrangeiras)
TABLES_TO_TRUNCATE = [
    "delivery_credits",
    "sale_items",
    "sales",
    "delivery_persons",
    "model_color_images",
    "products",
    "models",
    "brands",
    "colors",
    "storages",
    "customers",
    "payment_fees",
    "company_settings",
    "companies",
]


def main() -> None:
    print("Limpando bases do PDV...")
    init_db()  # garante que tabelas existem
    is_sqlite = DATABASE_URL.startswith("sqlite")

    with engine.connect() as conn:
        for table in TABLES_TO_TRUNCATE:
            sql = f"DELETE FROM {table}" if is_sqlite else f"TRUNCATE TABLE {table} CASCADE"
            try:
                conn.execute(text(sql))
                conn.commit()
                print("  Limpo:", table)
            except SQLAlchemyError as e:
                conn.rollback()
                print("  ", table, "-", e)
        if is_sqlite:
            # sqlite_sequence só existe quando alguma tabela usa AUTOINCREMENT
            try:
                conn.execute(text("DELETE FROM sqlite_sequence"))
                conn.commit()
            except SQLAlchemyError:
                conn.rollback()
    print("  Banco de dados limpo (dados removidos).")

    if remove_logo():
        print("  Logo removida.")

    db = SessionLocal()
    try:
        tenant = ensure_company(db, COMPANY_SLUG, COMPANY_NAME)
        PaymentFeeService.initialize_default_fees(db, tenant.company_id)
        print(f"\nLoja recriada: {tenant.name} (id={tenant.company_id})")
    finally:
        db.close()

    print("\nPronto. Pode testar do zero. (Atualize a pagina no navegador se o Streamlit estiver aberto.)")


if __name__ == "__main__":
    main()
