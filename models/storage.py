from sqlalchemy import Boolean, Column, ForeignKey, Integer, String

from config.database import Base


class Storage(Base):
    """
    Capacidade de armazenamento (64GB, 128GB...) do seletor de produtos.
    """

    __tablename__ = "storages"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(30), nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)
