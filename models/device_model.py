from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from config.database import Base


class DeviceModel(Base):
    """
    Modelo de aparelho (iPhone 15, Galaxy S24...) vinculado a uma marca.
    template_values guarda os valores padrão copiados para novos produtos.
    """

    __tablename__ = "models"
    __table_args__ = (UniqueConstraint("company_id", "slug", name="uq_models_company_slug"),)

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=False, index=True)
    name = Column(String(150), nullable=False)
    slug = Column(String(170), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    category = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    template_values = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    brand = relationship("Brand", lazy="joined")
