"""
Clientes: busca do PDV e cadastro rápido.
"""
import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from models.customer import Customer
from services.errors import NotFoundError, ValidationError
from utils.documents import validate_cpf_cnpj
from utils.formatters import only_digits

logger = logging.getLogger(__name__)

CUSTOMER_FIELDS = ("name", "cpf_cnpj", "email", "phone", "city", "notes", "is_active")


class CustomerService:
    @staticmethod
    def search_customers(db: Session, company_id: int, term: str, limit: int = 20) -> List[Customer]:
        term = (term or "").strip()
        if not term:
            return []
        like = f"%{term}%"
        conditions = [Customer.name.ilike(like), Customer.email.ilike(like)]
        digits = only_digits(term)
        if digits:
            conditions.append(Customer.cpf_cnpj.like(f"%{digits}%"))
            conditions.append(Customer.phone.like(f"%{digits}%"))
        return (
            db.query(Customer)
            .filter(Customer.company_id == company_id, Customer.is_active.is_(True))
            .filter(or_(*conditions))
            .order_by(Customer.name)
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_customer(db: Session, company_id: int, customer_id: int) -> Customer:
        customer = (
            db.query(Customer)
            .filter(Customer.id == customer_id, Customer.company_id == company_id)
            .first()
        )
        if not customer:
            raise NotFoundError("customer_not_found", "Cliente não encontrado", {"customer_id": customer_id})
        return customer

    @staticmethod
    def list_customers(db: Session, company_id: int, active_only: bool = True) -> List[Customer]:
        query = db.query(Customer).filter(Customer.company_id == company_id)
        if active_only:
            query = query.filter(Customer.is_active.is_(True))
        return query.order_by(Customer.name).all()

    @staticmethod
    def _prepare(db: Session, company_id: int, data: dict, exclude_id: Optional[int] = None) -> dict:
        clean = {k: v for k, v in data.items() if k in CUSTOMER_FIELDS}
        if "name" in clean:
            clean["name"] = (clean["name"] or "").strip()
            if not clean["name"]:
                raise ValidationError("invalid_name", "Informe o nome do cliente")
        if "phone" in clean:
            clean["phone"] = only_digits(clean["phone"]) or None
        if "email" in clean:
            clean["email"] = (clean["email"] or "").strip().lower() or None
        if "cpf_cnpj" in clean:
            document = only_digits(clean["cpf_cnpj"])
            if document:
                if not validate_cpf_cnpj(document):
                    raise ValidationError("invalid_document", "CPF/CNPJ inválido", {"cpf_cnpj": document})
                query = db.query(Customer).filter(
                    Customer.company_id == company_id, Customer.cpf_cnpj == document
                )
                if exclude_id:
                    query = query.filter(Customer.id != exclude_id)
                if query.first():
                    raise ValidationError("duplicate_customer", "Já existe um cliente com esse CPF/CNPJ")
            clean["cpf_cnpj"] = document or None
        return clean

    @staticmethod
    def create_customer(db: Session, company_id: int, data: dict) -> Customer:
        if not (data.get("name") or "").strip():
            raise ValidationError("invalid_name", "Informe o nome do cliente")
        clean = CustomerService._prepare(db, company_id, data)
        customer = Customer(company_id=company_id, **clean)
        db.add(customer)
        db.commit()
        db.refresh(customer)
        logger.info("Cliente cadastrado: #%s", customer.id)
        return customer

    @staticmethod
    def update_customer(db: Session, company_id: int, customer_id: int, data: dict) -> Customer:
        customer = CustomerService.get_customer(db, company_id, customer_id)
        clean = CustomerService._prepare(db, company_id, data, exclude_id=customer.id)
        for key, value in clean.items():
            setattr(customer, key, value)
        db.commit()
        db.refresh(customer)
        return customer
