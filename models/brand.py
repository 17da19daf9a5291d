from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from config.database import Base


class Brand(Base):
    """
    Marca de aparelho (Apple, Samsung, Xiaomi...).
    """

    __tablename__ = "brands"
    __table_args__ = (UniqueConstraint("company_id", "slug", name="uq_brands_company_slug"),)

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(120), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    logo_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )
