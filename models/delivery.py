"""
Entregadores e créditos de entrega (valor devido ao entregador por venda).
"""
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from config.database import Base


class DeliveryPerson(Base):
    __tablename__ = "delivery_persons"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(150), nullable=False)
    phone = Column(String(20), nullable=True)
    active = Column(Boolean, nullable=False, default=True)


class DeliveryCredit(Base):
    """
    Crédito do entregador gerado por uma venda com entrega.
    Status: pending / paid / cancelled.
    """

    __tablename__ = "delivery_credits"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    delivery_person_id = Column(Integer, ForeignKey("delivery_persons.id"), nullable=False, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False, default=0)
    delivery_type = Column(String(30), nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    delivery_person = relationship("DeliveryPerson")
