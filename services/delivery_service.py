"""
Modalidades de entrega, divisão do frete entre loja e cliente e créditos dos entregadores.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.delivery import DeliveryCredit, DeliveryPerson
from services.errors import NotFoundError, ValidationError


logger = logging.getLogger(__name__)


class DeliveryType:
    STORE_PICKUP = "store_pickup"
    STORE_DELIVERY = "store_delivery"
    HYBRID_DELIVERY = "hybrid_delivery"

    ALL = (STORE_PICKUP, STORE_DELIVERY, HYBRID_DELIVERY)


DELIVERY_LABELS = {
    DeliveryType.STORE_PICKUP: "Retirada na Loja",
    DeliveryType.STORE_DELIVERY: "Entrega pela Loja",
    DeliveryType.HYBRID_DELIVERY: "Entrega Híbrida",
}

DELIVERY_ICONS = {
    DeliveryType.STORE_PICKUP: "🏪",
    DeliveryType.STORE_DELIVERY: "🛵",
    DeliveryType.HYBRID_DELIVERY: "🤝",
}

DEFAULT_DELIVERY_COST = 3000
CREDIT_STATUSES = ("pending", "paid", "cancelled")


@dataclass(frozen=True)
class DeliverySplit:
    delivery_type: Optional[str]
    store_cost: int
    customer_cost: int
    total: int
    needs_delivery_person: bool


def delivery_label(delivery_type: Optional[str]) -> str:
    if not delivery_type:
        return DELIVERY_LABELS[DeliveryType.STORE_PICKUP]
    return DELIVERY_LABELS.get(delivery_type, delivery_type)


def split_delivery(
    delivery_type: Optional[str],
    store_cost: Optional[int] = None,
    customer_cost: Optional[int] = None,
) -> DeliverySplit:
    """
    Retirada: sem custo. Entrega pela loja: a loja paga tudo.
    Híbrida: o custo é dividido (padrão metade para cada lado).
    """
    if delivery_type is not None and delivery_type not in DeliveryType.ALL:
        raise ValidationError("invalid_delivery_type", "Modalidade de entrega inválida", {"type": delivery_type})
    for value in (store_cost, customer_cost):
        if value is not None and value < 0:
            raise ValidationError("invalid_delivery_cost", "O valor do frete não pode ser negativo")

    if delivery_type in (None, DeliveryType.STORE_PICKUP):
        return DeliverySplit(delivery_type, 0, 0, 0, False)

    if delivery_type == DeliveryType.STORE_DELIVERY:
        store = store_cost if store_cost is not None else DEFAULT_DELIVERY_COST
        return DeliverySplit(delivery_type, store, 0, store, True)

    if store_cost is None and customer_cost is None:
        store = customer = DEFAULT_DELIVERY_COST // 2
    else:
        store, customer = store_cost or 0, customer_cost or 0
    return DeliverySplit(delivery_type, store, customer, store + customer, True)


class DeliveryService:
    @staticmethod
    def list_delivery_persons(db: Session, company_id: int, active_only: bool = True) -> List[DeliveryPerson]:
        query = db.query(DeliveryPerson).filter(DeliveryPerson.company_id == company_id)
        if active_only:
            query = query.filter(DeliveryPerson.active.is_(True))
        return query.order_by(DeliveryPerson.name).all()

    @staticmethod
    def create_delivery_person(db: Session, company_id: int, name: str, phone: Optional[str] = None) -> DeliveryPerson:
        if not (name or "").strip():
            raise ValidationError("invalid_name", "Informe o nome do entregador")
        person = DeliveryPerson(company_id=company_id, name=name.strip(), phone=phone or None, active=True)
        db.add(person)
        db.commit()
        db.refresh(person)
        return person

    @staticmethod
    def create_credit(db: Session, company_id: int, sale, delivery_person_id: int) -> DeliveryCredit:
        credit = DeliveryCredit(
            company_id=company_id,
            delivery_person_id=delivery_person_id,
            sale_id=sale.id,
            amount=sale.delivery_total,
            delivery_type=sale.delivery_type or DeliveryType.STORE_DELIVERY,
            status="pending",
        )
        db.add(credit)
        db.commit()
        db.refresh(credit)
        return credit

    @staticmethod
    def list_delivery_credits(
        db: Session,
        company_id: int,
        delivery_person_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> List[DeliveryCredit]:
        query = db.query(DeliveryCredit).filter(DeliveryCredit.company_id == company_id)
        if delivery_person_id:
            query = query.filter(DeliveryCredit.delivery_person_id == delivery_person_id)
        if status:
            query = query.filter(DeliveryCredit.status == status)
        return query.order_by(DeliveryCredit.created_at.desc()).all()

    @staticmethod
    def mark_credit_paid(db: Session, company_id: int, credit_id: int) -> DeliveryCredit:
        credit = (
            db.query(DeliveryCredit)
            .filter(DeliveryCredit.id == credit_id, DeliveryCredit.company_id == company_id)
            .first()
        )
        if not credit:
            raise NotFoundError("credit_not_found", "Crédito de entrega não encontrado", {"credit_id": credit_id})
        if credit.status != "pending":
            raise ValidationError(
                "credit_not_pending", "Apenas créditos pendentes podem ser pagos", {"status": credit.status}
            )
        credit.status = "paid"
        credit.paid_at = datetime.utcnow()
        db.commit()
        db.refresh(credit)
        return credit

    @staticmethod
    def cancel_sale_credits(db: Session, company_id: int, sale_id: int) -> int:
        """
        Cancela os créditos ainda pendentes de uma venda. Não faz commit.
        """
        credits = (
            db.query(DeliveryCredit)
            .filter(
                DeliveryCredit.company_id == company_id,
                DeliveryCredit.sale_id == sale_id,
                DeliveryCredit.status == "pending",
            )
            .all()
        )
        for credit in credits:
            credit.status = "cancelled"
        return len(credits)

    @staticmethod
    def delivery_person_earnings(db: Session, company_id: int) -> List[dict]:
        """
        Totais por entregador: quantidade de entregas, valor pendente e valor pago.
        """
        rows = (
            db.query(
                DeliveryPerson.id,
                DeliveryPerson.name,
                DeliveryCredit.status,
                func.count(DeliveryCredit.id),
                func.coalesce(func.sum(DeliveryCredit.amount), 0),
            )
            .join(DeliveryCredit, DeliveryCredit.delivery_person_id == DeliveryPerson.id)
            .filter(DeliveryPerson.company_id == company_id)
            .filter(DeliveryCredit.status != "cancelled")
            .group_by(DeliveryPerson.id, DeliveryPerson.name, DeliveryCredit.status)
            .all()
        )
        earnings = {}
        for person_id, name, status, count, amount in rows:
            entry = earnings.setdefault(
                person_id,
                {"delivery_person_id": person_id, "name": name, "deliveries": 0, "pending": 0, "paid": 0, "total": 0},
            )
            entry["deliveries"] += count
            entry[status] += int(amount)
            entry["total"] += int(amount)
        return sorted(earnings.values(), key=lambda e: e["name"])
