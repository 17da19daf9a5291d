"""
Tabela de taxas por forma de pagamento (débito, PIX e crédito 1x a 18x).
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from models.payment_fee import PaymentFee
from services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MAX_CREDIT_INSTALLMENTS = 18
DEFAULT_OPERATOR = "Padrão"


def _default_fee_rows() -> List[dict]:
    rows = [
        {"payment_method": "debit", "installments": 1, "operator_fee": 1.0, "applied_fee": 1.0},
        {"payment_method": "pix", "installments": 1, "operator_fee": 0.0, "applied_fee": 0.0},
    ]
    for n in range(1, MAX_CREDIT_INSTALLMENTS + 1):
        rows.append(
            {
                "payment_method": "credit",
                "installments": n,
                "operator_fee": float(4 + n),
                "applied_fee": float(6 + n),
            }
        )
    return rows


class PaymentFeeService:
    @staticmethod
    def list_fees(db: Session, company_id: int, method: Optional[str] = None) -> List[PaymentFee]:
        query = db.query(PaymentFee).filter(PaymentFee.company_id == company_id)
        if method:
            query = query.filter(PaymentFee.payment_method == method)
        return query.order_by(PaymentFee.payment_method, PaymentFee.installments).all()

    @staticmethod
    def validate_fee(operator_fee: float, applied_fee: float) -> None:
        if operator_fee < 0 or applied_fee < 0:
            raise ValidationError("invalid_fee", "As taxas não podem ser negativas")
        if applied_fee < operator_fee:
            raise ValidationError(
                "applied_below_operator",
                "A taxa aplicada ao cliente não pode ser menor que a taxa da operadora",
                {"operator_fee": operator_fee, "applied_fee": applied_fee},
            )

    @staticmethod
    def update_fee(
        db: Session,
        company_id: int,
        fee_id: int,
        operator_name: Optional[str],
        operator_fee: float,
        applied_fee: float,
    ) -> PaymentFee:
        PaymentFeeService.validate_fee(operator_fee, applied_fee)
        fee = (
            db.query(PaymentFee)
            .filter(PaymentFee.id == fee_id, PaymentFee.company_id == company_id)
            .first()
        )
        if not fee:
            raise NotFoundError("fee_not_found", "Taxa não encontrada", {"fee_id": fee_id})
        fee.operator_name = (operator_name or "").strip() or None
        fee.operator_fee = float(operator_fee)
        fee.applied_fee = float(applied_fee)
        db.commit()
        db.refresh(fee)
        logger.info("Taxa atualizada: %r", fee)
        return fee

    @staticmethod
    def initialize_default_fees(db: Session, company_id: int) -> int:
        """
        Cria a tabela padrão quando a loja ainda não tem nenhuma taxa.
        Retorna a quantidade de linhas criadas.
        """
        existing = db.query(PaymentFee).filter(PaymentFee.company_id == company_id).count()
        if existing:
            return 0
        rows = _default_fee_rows()
        for row in rows:
            db.add(PaymentFee(company_id=company_id, operator_name=DEFAULT_OPERATOR, **row))
        db.commit()
        logger.info("Taxas padrão criadas para a loja %s (%s linhas)", company_id, len(rows))
        return len(rows)
