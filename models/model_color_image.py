from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, UniqueConstraint

from config.database import Base


class ModelColorImage(Base):
    """
    Imagens compartilhadas por todos os produtos novos de um mesmo modelo + cor.
    """

    __tablename__ = "model_color_images"
    __table_args__ = (
        UniqueConstraint("company_id", "model_id", "color_id", name="uq_model_color_images"),
    )

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    model_id = Column(Integer, ForeignKey("models.id"), nullable=False, index=True)
    color_id = Column(Integer, ForeignKey("colors.id"), nullable=False)
    images = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )
