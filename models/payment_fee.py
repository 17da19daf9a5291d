"""
Tabela de taxas por forma de pagamento e número de parcelas.
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint

from config.database import Base

FEE_PAYMENT_METHODS = ("debit", "pix", "credit")


class PaymentFee(Base):
    """
    operator_fee: custo real cobrado pela operadora (%).
    applied_fee: acréscimo repassado ao cliente (%). Deve ser >= operator_fee.
    """

    __tablename__ = "payment_fees"
    __table_args__ = (
        UniqueConstraint("company_id", "payment_method", "installments", name="uq_payment_fees_key"),
    )

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    payment_method = Column(String(20), nullable=False)  # debit / pix / credit
    installments = Column(Integer, nullable=False, default=1)
    operator_name = Column(String(100), nullable=True)
    operator_fee = Column(Float, nullable=False, default=0.0)
    applied_fee = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self):
        return (
            f"<PaymentFee(method='{self.payment_method}', installments={self.installments}, "
            f"applied={self.applied_fee})>"
        )
