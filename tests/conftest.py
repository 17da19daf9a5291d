import pytest
from sqlalchemy.orm import sessionmaker

from config.database import Base, build_engine, import_models
from services.payment_fee_service import PaymentFeeService
from services.tenant import ensure_company


@pytest.fixture
def engine(tmp_path):
    import_models()
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def tenant(db):
    return ensure_company(db, "loja-teste", "Loja Teste")


@pytest.fixture
def fees(db, tenant):
    PaymentFeeService.initialize_default_fees(db, tenant.company_id)
    return PaymentFeeService.list_fees(db, tenant.company_id)
