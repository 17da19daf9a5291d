from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from config.database import Base

PRODUCT_CONDITIONS = ("new", "used")
PRODUCT_STATUSES = ("active", "inactive")


class Product(Base):
    """
    Produtos da loja (aparelhos e acessórios).
    Todos os preços são inteiros em centavos (R$ 10,50 = 1050).
    Produtos novos usam as imagens compartilhadas do modelo + cor;
    produtos usados têm imagens próprias em `images`.
    """

    __tablename__ = "products"
    __table_args__ = (UniqueConstraint("company_id", "sku", name="uq_products_company_sku"),)

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    sku = Column(String(60), nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)
    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=True)
    model_id = Column(Integer, ForeignKey("models.id"), nullable=True)
    color_id = Column(Integer, ForeignKey("colors.id"), nullable=True)
    category = Column(String(100), nullable=True)

    # Identificadores
    eans = Column(JSON, nullable=False, default=list)
    imei1 = Column(String(20), nullable=True, index=True)
    imei2 = Column(String(20), nullable=True, index=True)
    serial = Column(String(60), nullable=True)

    # Preços (centavos)
    price_cost = Column(Integer, nullable=False, default=0)
    price_retail = Column(Integer, nullable=False, default=0)
    price_reseller = Column(Integer, nullable=False, default=0)
    price_wholesale = Column(Integer, nullable=False, default=0)

    specs = Column(JSON, nullable=False, default=dict)
    images = Column(JSON, nullable=False, default=list)
    condition = Column(String(10), nullable=False, default="new")  # new / used
    status = Column(String(20), nullable=False, default="active")  # active / inactive

    track_inventory = Column(Boolean, nullable=False, default=False)
    stock_quantity = Column(Integer, nullable=True)
    is_gift = Column(Boolean, nullable=False, default=False)

    # Fiscal e logística
    ncm = Column(String(8), nullable=True)
    cest = Column(String(7), nullable=True)
    origin = Column(String(1), nullable=True)
    weight_kg = Column(Float, nullable=True)

    # SEO (editado manualmente)
    description = Column(Text, nullable=True)
    slug = Column(String(255), nullable=True)
    meta_title = Column(String(60), nullable=True)
    meta_description = Column(String(160), nullable=True)
    keywords = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    brand = relationship("Brand", lazy="joined")
    model = relationship("DeviceModel", lazy="joined")
    color = relationship("Color", lazy="joined")

    @property
    def is_active(self) -> bool:
        return self.status == "active"
