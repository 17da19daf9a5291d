from sqlalchemy import Boolean, Column, ForeignKey, Integer, String

from config.database import Base


class Color(Base):
    """
    Cor disponível no seletor do cadastro de produtos.
    """

    __tablename__ = "colors"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(60), nullable=False)
    hex_code = Column(String(7), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
