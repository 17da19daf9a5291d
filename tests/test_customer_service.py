import pytest

from services.customer_service import CustomerService
from services.errors import NotFoundError, ValidationError


def test_create_customer_normalizes_fields(db, tenant):
    customer = CustomerService.create_customer(
        db,
        tenant.company_id,
        {"name": " Maria Souza ", "cpf_cnpj": "529.982.247-25", "phone": "(11) 98765-4321", "email": " Maria@Email.COM "},
    )
    assert customer.name == "Maria Souza"
    assert customer.cpf_cnpj == "52998224725"
    assert customer.phone == "11987654321"
    assert customer.email == "maria@email.com"


def test_invalid_and_duplicate_documents(db, tenant):
    with pytest.raises(ValidationError) as exc:
        CustomerService.create_customer(db, tenant.company_id, {"name": "X", "cpf_cnpj": "123.456.789-00"})
    assert exc.value.code == "invalid_document"

    CustomerService.create_customer(db, tenant.company_id, {"name": "Empresa", "cpf_cnpj": "11.222.333/0001-81"})
    with pytest.raises(ValidationError) as exc:
        CustomerService.create_customer(db, tenant.company_id, {"name": "Outra", "cpf_cnpj": "11222333000181"})
    assert exc.value.code == "duplicate_customer"


def test_customer_requires_name(db, tenant):
    with pytest.raises(ValidationError):
        CustomerService.create_customer(db, tenant.company_id, {"name": "  "})


def test_search_by_name_document_and_phone(db, tenant):
    maria = CustomerService.create_customer(
        db, tenant.company_id, {"name": "Maria Souza", "cpf_cnpj": "52998224725", "phone": "11987654321"}
    )
    CustomerService.create_customer(db, tenant.company_id, {"name": "João Lima", "is_active": False})

    assert [c.id for c in CustomerService.search_customers(db, tenant.company_id, "mar")] == [maria.id]
    assert [c.id for c in CustomerService.search_customers(db, tenant.company_id, "529.982")] == [maria.id]
    assert [c.id for c in CustomerService.search_customers(db, tenant.company_id, "98765-4321")] == [maria.id]
    assert CustomerService.search_customers(db, tenant.company_id, "João") == []
    assert CustomerService.search_customers(db, tenant.company_id, "") == []


def test_update_customer_keeps_own_document(db, tenant):
    customer = CustomerService.create_customer(db, tenant.company_id, {"name": "Maria", "cpf_cnpj": "52998224725"})
    updated = CustomerService.update_customer(
        db, tenant.company_id, customer.id, {"cpf_cnpj": "529.982.247-25", "city": "Campinas"}
    )
    assert updated.city == "Campinas"

    with pytest.raises(NotFoundError):
        CustomerService.update_customer(db, tenant.company_id, 999, {"city": "X"})
