"""
Cadastro de marcas.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from models.brand import Brand
from models.device_model import DeviceModel
from services.errors import NotFoundError, ValidationError
from utils.text import generate_slug

logger = logging.getLogger(__name__)


class BrandService:
    @staticmethod
    def list_brands(db: Session, company_id: int, active_only: bool = False) -> List[Brand]:
        query = db.query(Brand).filter(Brand.company_id == company_id)
        if active_only:
            query = query.filter(Brand.active.is_(True))
        return query.order_by(Brand.name).all()

    @staticmethod
    def get_brand(db: Session, company_id: int, brand_id: int) -> Brand:
        brand = db.query(Brand).filter(Brand.id == brand_id, Brand.company_id == company_id).first()
        if not brand:
            raise NotFoundError("brand_not_found", "Marca não encontrada", {"brand_id": brand_id})
        return brand

    @staticmethod
    def _check_slug(db: Session, company_id: int, slug: str, exclude_id: Optional[int] = None) -> None:
        if not slug:
            raise ValidationError("invalid_name", "Informe o nome da marca")
        query = db.query(Brand).filter(Brand.company_id == company_id, Brand.slug == slug)
        if exclude_id:
            query = query.filter(Brand.id != exclude_id)
        if query.first():
            raise ValidationError("duplicate_brand", "Já existe uma marca com esse nome", {"slug": slug})

    @staticmethod
    def create_brand(
        db: Session, company_id: int, name: str, active: bool = True, logo_url: Optional[str] = None
    ) -> Brand:
        name = (name or "").strip()
        slug = generate_slug(name)
        BrandService._check_slug(db, company_id, slug)
        brand = Brand(company_id=company_id, name=name, slug=slug, active=active, logo_url=logo_url or None)
        db.add(brand)
        db.commit()
        db.refresh(brand)
        logger.info("Marca criada: %s", brand.slug)
        return brand

    @staticmethod
    def update_brand(db: Session, company_id: int, brand_id: int, **fields) -> Brand:
        brand = BrandService.get_brand(db, company_id, brand_id)
        if "name" in fields:
            name = (fields["name"] or "").strip()
            slug = generate_slug(name)
            BrandService._check_slug(db, company_id, slug, exclude_id=brand.id)
            brand.name = name
            brand.slug = slug
        if "active" in fields:
            brand.active = bool(fields["active"])
        if "logo_url" in fields:
            brand.logo_url = fields["logo_url"] or None
        db.commit()
        db.refresh(brand)
        return brand

    @staticmethod
    def delete_brand(db: Session, company_id: int, brand_id: int) -> None:
        brand = BrandService.get_brand(db, company_id, brand_id)
        in_use = db.query(DeviceModel).filter(DeviceModel.brand_id == brand.id).count()
        if in_use:
            raise ValidationError(
                "brand_in_use",
                f"A marca possui {in_use} modelo(s) cadastrado(s). Desative-a em vez de excluir.",
            )
        db.delete(brand)
        db.commit()
        logger.info("Marca excluída: %s", brand.slug)
