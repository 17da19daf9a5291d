from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from config.database import Base


class Company(Base):
    """
    Loja (tenant). Todas as tabelas de negócio referenciam company_id.
    """

    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    settings = relationship("CompanySettings", back_populates="company", uselist=False)


class CompanySettings(Base):
    """
    Dados de contato usados no recibo, no catálogo em PDF e no link do WhatsApp.
    """

    __tablename__ = "company_settings"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    phone = Column(String(30), nullable=True)
    email = Column(String(200), nullable=True)
    address = Column(String(255), nullable=True)
    receipt_logo_url = Column(String(500), nullable=True)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    company = relationship("Company", back_populates="settings")
