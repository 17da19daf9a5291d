"""
Cadastro de modelos e valores padrão (template) copiados para novos produtos.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from models.device_model import DeviceModel
from models.product import Product
from services.brand_service import BrandService
from services.errors import NotFoundError, ValidationError
from utils.text import generate_slug

logger = logging.getLogger(__name__)

# Campos que identificam um aparelho específico: nunca vêm do template
UNIQUE_FIELDS = ("imei1", "imei2", "serial", "color", "ean", "sku")

PRICE_FIELDS = ("price_cost", "price_retail", "price_reseller", "price_wholesale")
FISCAL_FIELDS = ("ncm", "cest", "origin", "weight_kg")


def _is_empty(value) -> bool:
    return value is None or value == "" or value == [] or value == {}


def apply_model_template(model: DeviceModel, product_data: dict) -> int:
    """
    Preenche os campos vazios de um produto novo com os valores padrão do modelo.
    Chaves price_* vão para os preços, campos fiscais para a raiz e o restante
    para specs. Retorna quantos campos foram preenchidos.
    """
    template = model.template_values or {}
    specs = dict(product_data.get("specs") or {})
    filled = 0

    for key, value in template.items():
        if key in UNIQUE_FIELDS or _is_empty(value):
            continue
        if key in PRICE_FIELDS or key in FISCAL_FIELDS:
            current = product_data.get(key)
            if _is_empty(current) or (key in PRICE_FIELDS and current == 0):
                product_data[key] = value
                filled += 1
        elif _is_empty(specs.get(key)):
            specs[key] = value
            filled += 1

    for key in ("category", "description"):
        value = getattr(model, key)
        if value and _is_empty(product_data.get(key)):
            product_data[key] = value
            filled += 1

    product_data["specs"] = specs
    return filled


def extract_template_values(product_data: dict) -> dict:
    """
    Valores não únicos e não vazios do produto que podem virar padrão do modelo.
    """
    values = {}
    for key in PRICE_FIELDS + FISCAL_FIELDS:
        value = product_data.get(key)
        if not _is_empty(value) and value != 0:
            values[key] = value
    for key, value in (product_data.get("specs") or {}).items():
        if key not in UNIQUE_FIELDS and not _is_empty(value):
            values[key] = value
    return values


class ModelService:
    @staticmethod
    def list_models(
        db: Session, company_id: int, brand_id: Optional[int] = None, active_only: bool = False
    ) -> List[DeviceModel]:
        query = db.query(DeviceModel).filter(DeviceModel.company_id == company_id)
        if brand_id:
            query = query.filter(DeviceModel.brand_id == brand_id)
        if active_only:
            query = query.filter(DeviceModel.active.is_(True))
        return query.order_by(DeviceModel.name).all()

    @staticmethod
    def get_model(db: Session, company_id: int, model_id: int) -> DeviceModel:
        model = (
            db.query(DeviceModel)
            .filter(DeviceModel.id == model_id, DeviceModel.company_id == company_id)
            .first()
        )
        if not model:
            raise NotFoundError("model_not_found", "Modelo não encontrado", {"model_id": model_id})
        return model

    @staticmethod
    def _check_slug(db: Session, company_id: int, slug: str, exclude_id: Optional[int] = None) -> None:
        if not slug:
            raise ValidationError("invalid_name", "Informe o nome do modelo")
        query = db.query(DeviceModel).filter(DeviceModel.company_id == company_id, DeviceModel.slug == slug)
        if exclude_id:
            query = query.filter(DeviceModel.id != exclude_id)
        if query.first():
            raise ValidationError("duplicate_model", "Já existe um modelo com esse nome", {"slug": slug})

    @staticmethod
    def create_model(
        db: Session,
        company_id: int,
        brand_id: int,
        name: str,
        category: Optional[str] = None,
        description: Optional[str] = None,
        template_values: Optional[dict] = None,
        active: bool = True,
    ) -> DeviceModel:
        BrandService.get_brand(db, company_id, brand_id)
        name = (name or "").strip()
        slug = generate_slug(name)
        ModelService._check_slug(db, company_id, slug)
        model = DeviceModel(
            company_id=company_id,
            brand_id=brand_id,
            name=name,
            slug=slug,
            category=category or None,
            description=description or None,
            template_values=template_values or {},
            active=active,
        )
        db.add(model)
        db.commit()
        db.refresh(model)
        logger.info("Modelo criado: %s", model.slug)
        return model

    @staticmethod
    def update_model(db: Session, company_id: int, model_id: int, **fields) -> DeviceModel:
        model = ModelService.get_model(db, company_id, model_id)
        if "name" in fields:
            name = (fields["name"] or "").strip()
            slug = generate_slug(name)
            ModelService._check_slug(db, company_id, slug, exclude_id=model.id)
            model.name = name
            model.slug = slug
        if "brand_id" in fields:
            BrandService.get_brand(db, company_id, fields["brand_id"])
            model.brand_id = fields["brand_id"]
        for key in ("category", "description"):
            if key in fields:
                setattr(model, key, fields[key] or None)
        if "active" in fields:
            model.active = bool(fields["active"])
        if "template_values" in fields:
            model.template_values = dict(fields["template_values"] or {})
        db.commit()
        db.refresh(model)
        return model

    @staticmethod
    def delete_model(db: Session, company_id: int, model_id: int) -> None:
        model = ModelService.get_model(db, company_id, model_id)
        in_use = db.query(Product).filter(Product.model_id == model.id).count()
        if in_use:
            raise ValidationError(
                "model_in_use",
                f"O modelo possui {in_use} produto(s). Desative-o em vez de excluir.",
            )
        db.delete(model)
        db.commit()

    @staticmethod
    def save_as_model_template(db: Session, model: DeviceModel, product_data: dict) -> dict:
        values = extract_template_values(product_data)
        if not values:
            raise ValidationError("empty_template", "Nenhum valor para salvar como padrão do modelo")
        model.template_values = values
        db.commit()
        db.refresh(model)
        logger.info("Template do modelo %s atualizado (%s campos)", model.slug, len(values))
        return values
