"""
Script para inicializar o banco de dados do PDV.
- Cria todas as tabelas
- Garante a loja configurada (COMPANY_SLUG) e a tabela de taxas padrão
"""
from config.database import SessionLocal, init_db
from config.settings import COMPANY_NAME, COMPANY_SLUG, configure_logging
from services.payment_fee_service import PaymentFeeService
from services.tenant import ensure_company


def main() -> None:
    configure_logging()
    print("📦 Inicializando banco de dados do PDV...")
    init_db()
    print("✅ Tabelas criadas (se não existiam).")

    db = SessionLocal()
    try:
        tenant = ensure_company(db, COMPANY_SLUG, COMPANY_NAME)
        print(f"✅ Loja: {tenant.name} (slug={tenant.slug}, id={tenant.company_id})")
        created = PaymentFeeService.initialize_default_fees(db, tenant.company_id)
        if created:
            print(f"✅ Tabela de taxas padrão criada ({created} linhas).")
        else:
            print("ℹ️ Tabela de taxas já existe.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
