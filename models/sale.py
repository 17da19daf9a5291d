from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from config.database import Base

SALE_STATUSES = ("completed", "cancelled", "refunded")


class Sale(Base):
    """
    Venda (cabeçalho). Valores em centavos.
    payment_methods guarda a lista de pagamentos com o detalhamento de taxas.
    """

    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    seller_name = Column(String(150), nullable=True)
    subtotal = Column(Integer, nullable=False, default=0)
    discount_total = Column(Integer, nullable=False, default=0)
    promotional_discount = Column(Integer, nullable=False, default=0)
    fee_total = Column(Integer, nullable=False, default=0)
    total = Column(Integer, nullable=False, default=0)
    cost_total = Column(Integer, nullable=False, default=0)
    profit = Column(Integer, nullable=False, default=0)
    payment_methods = Column(JSON, nullable=False, default=list)
    notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="completed")  # completed | cancelled | refunded

    delivery_type = Column(String(30), nullable=True)
    delivery_person_id = Column(Integer, ForeignKey("delivery_persons.id"), nullable=True)
    delivery_cost_store = Column(Integer, nullable=False, default=0)
    delivery_cost_customer = Column(Integer, nullable=False, default=0)
    delivery_total = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    customer = relationship("Customer")
    delivery_person = relationship("DeliveryPerson")
    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")


class SaleItem(Base):
    """
    Itens de venda. Nome e SKU são copiados do produto no momento da venda.
    """

    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    product_name = Column(String(255), nullable=False)
    product_sku = Column(String(60), nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Integer, nullable=False, default=0)
    unit_cost = Column(Integer, nullable=False, default=0)
    discount = Column(Integer, nullable=False, default=0)  # por unidade
    subtotal = Column(Integer, nullable=False, default=0)
    total = Column(Integer, nullable=False, default=0)
    is_gift = Column(Boolean, nullable=False, default=False)

    sale = relationship("Sale", back_populates="items")
