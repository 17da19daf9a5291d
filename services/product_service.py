"""
Cadastro de produtos, busca do PDV (nome, SKU, IMEI, EAN) e imagens.

Produtos novos usam as imagens compartilhadas do modelo + cor; produtos
usados têm imagens próprias.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Session

from models.color import Color
from models.model_color_image import ModelColorImage
from models.product import PRODUCT_CONDITIONS, PRODUCT_STATUSES, Product
from models.storage import Storage
from services.errors import NotFoundError, ValidationError
from services.model_service import ModelService, apply_model_template
from utils.formatters import only_digits
from utils.text import generate_product_name, generate_slug

logger = logging.getLogger(__name__)

DEFAULT_NAME_TEMPLATE = "{modelo} {ram}/{armazenamento} {cor}"
SEARCH_LIMIT = 20

PRODUCT_FIELDS = (
    "sku", "name", "brand_id", "model_id", "color_id", "category", "eans", "imei1", "imei2",
    "serial", "price_cost", "price_retail", "price_reseller", "price_wholesale", "specs",
    "images", "condition", "status", "track_inventory", "stock_quantity", "is_gift", "ncm",
    "cest", "origin", "weight_kg", "description", "slug", "meta_title", "meta_description",
    "keywords",
)
PRICE_FIELDS = ("price_cost", "price_retail", "price_reseller", "price_wholesale")


@dataclass
class ProductFilters:
    term: Optional[str] = None
    brand_id: Optional[int] = None
    model_id: Optional[int] = None
    category: Optional[str] = None
    condition: Optional[str] = None
    status: Optional[str] = None


def _clean_eans(eans) -> List[str]:
    if isinstance(eans, str):
        eans = eans.replace(";", ",").split(",")
    cleaned = []
    for ean in eans or []:
        digits = only_digits(str(ean))
        if digits and digits not in cleaned:
            cleaned.append(digits)
    return cleaned


def _eans_contain(ean: str):
    # pré-filtro no texto da coluna JSON; a comparação exata fica em Python
    return cast(Product.eans, String).like(f'%"{ean}"%')


class ProductService:
    # ----- Busca -----

    @staticmethod
    def search_products(db: Session, company_id: int, term: str, limit: int = SEARCH_LIMIT) -> List[Product]:
        term = (term or "").strip()
        if not term:
            return []
        like = f"%{term}%"
        return (
            db.query(Product)
            .filter(Product.company_id == company_id, Product.status == "active")
            .filter(or_(Product.name.ilike(like), Product.sku.ilike(like)))
            .order_by(Product.name)
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_by_sku(db: Session, company_id: int, sku: str) -> Optional[Product]:
        return (
            db.query(Product)
            .filter(Product.company_id == company_id, Product.sku == (sku or "").strip())
            .first()
        )

    @staticmethod
    def get_by_imei(db: Session, company_id: int, imei: str) -> Optional[Product]:
        imei = only_digits(imei)
        if not imei:
            return None
        return (
            db.query(Product)
            .filter(Product.company_id == company_id)
            .filter(or_(Product.imei1 == imei, Product.imei2 == imei))
            .first()
        )

    @staticmethod
    def get_by_ean(db: Session, company_id: int, ean: str) -> Optional[Product]:
        """
        Busca por código de barras entre os produtos ativos.
        """
        ean = only_digits(ean)
        if not ean:
            return None
        products = (
            db.query(Product)
            .filter(Product.company_id == company_id, Product.status == "active")
            .filter(_eans_contain(ean))
            .all()
        )
        for product in products:
            if ean in (product.eans or []):
                return product
        return None

    @staticmethod
    def lookup_code(db: Session, company_id: int, code: str) -> Optional[Product]:
        """
        Leitor do PDV: tenta SKU, depois IMEI, depois EAN.
        """
        product = ProductService.get_by_sku(db, company_id, code)
        if product and product.is_active:
            return product
        product = ProductService.get_by_imei(db, company_id, code)
        if product and product.is_active:
            return product
        return ProductService.get_by_ean(db, company_id, code)

    # ----- CRUD -----

    @staticmethod
    def get_product(db: Session, company_id: int, product_id: int) -> Product:
        product = (
            db.query(Product)
            .filter(Product.id == product_id, Product.company_id == company_id)
            .first()
        )
        if not product:
            raise NotFoundError("product_not_found", "Produto não encontrado", {"product_id": product_id})
        return product

    @staticmethod
    def list_products(db: Session, company_id: int, filters: Optional[ProductFilters] = None) -> List[Product]:
        filters = filters or ProductFilters()
        query = db.query(Product).filter(Product.company_id == company_id)
        if filters.term:
            like = f"%{filters.term.strip()}%"
            query = query.filter(or_(Product.name.ilike(like), Product.sku.ilike(like)))
        if filters.brand_id:
            query = query.filter(Product.brand_id == filters.brand_id)
        if filters.model_id:
            query = query.filter(Product.model_id == filters.model_id)
        if filters.category:
            query = query.filter(Product.category == filters.category)
        if filters.condition:
            query = query.filter(Product.condition == filters.condition)
        if filters.status:
            query = query.filter(Product.status == filters.status)
        return query.order_by(Product.name).all()

    @staticmethod
    def _normalize(data: dict) -> dict:
        clean = {k: v for k, v in data.items() if k in PRODUCT_FIELDS}
        if "eans" in clean:
            clean["eans"] = _clean_eans(clean["eans"])
        for key in ("imei1", "imei2"):
            if key in clean:
                clean[key] = only_digits(clean[key]) or None
        for key in ("sku", "name", "serial"):
            if key in clean and isinstance(clean[key], str):
                clean[key] = clean[key].strip() or None
        for key in PRICE_FIELDS:
            if key in clean:
                clean[key] = int(clean[key] or 0)
                if clean[key] < 0:
                    raise ValidationError("invalid_price", "Os preços não podem ser negativos", {"field": key})
        if clean.get("condition") and clean["condition"] not in PRODUCT_CONDITIONS:
            raise ValidationError("invalid_condition", "Condição inválida", {"condition": clean["condition"]})
        if clean.get("status") and clean["status"] not in PRODUCT_STATUSES:
            raise ValidationError("invalid_status", "Status inválido", {"status": clean["status"]})
        if clean.get("stock_quantity") is not None and clean["stock_quantity"] < 0:
            raise ValidationError("invalid_stock", "O estoque não pode ser negativo")
        return clean

    @staticmethod
    def _check_unique_codes(db: Session, company_id: int, data: dict, exclude_id: Optional[int] = None) -> None:
        sku = data.get("sku")
        if sku:
            existing = ProductService.get_by_sku(db, company_id, sku)
            if existing and existing.id != exclude_id:
                raise ValidationError("duplicate_sku", f"SKU {sku} já cadastrado", {"product_id": existing.id})

        imeis = [i for i in (data.get("imei1"), data.get("imei2")) if i]
        if len(imeis) == 2 and imeis[0] == imeis[1]:
            raise ValidationError("duplicate_imei", "IMEI 1 e IMEI 2 não podem ser iguais")
        for imei in imeis:
            existing = ProductService.get_by_imei(db, company_id, imei)
            if existing and existing.id != exclude_id:
                raise ValidationError("duplicate_imei", f"IMEI {imei} já cadastrado", {"product_id": existing.id})

        eans = data.get("eans") or []
        if eans:
            others = db.query(Product).filter(
                Product.company_id == company_id,
                or_(*[_eans_contain(ean) for ean in eans]),
            )
            if exclude_id:
                others = others.filter(Product.id != exclude_id)
            for other in others.all():
                shared = set(eans) & set(other.eans or [])
                if shared:
                    raise ValidationError(
                        "duplicate_ean",
                        f"EAN {sorted(shared)[0]} já cadastrado em {other.name}",
                        {"product_id": other.id},
                    )

    @staticmethod
    def _name_data(db: Session, company_id: int, data: dict) -> dict:
        name_data = dict(data)
        if data.get("model_id"):
            model = ModelService.get_model(db, company_id, data["model_id"])
            name_data["model"] = model.name
            name_data["brand"] = model.brand.name if model.brand else None
        if data.get("color_id"):
            color = db.get(Color, data["color_id"])
            name_data["color"] = color.name if color else None
        return name_data

    @staticmethod
    def create_product(
        db: Session, company_id: int, data: dict, name_template: Optional[str] = None
    ) -> Product:
        data = ProductService._normalize(data)

        if data.get("model_id"):
            model = ModelService.get_model(db, company_id, data["model_id"])
            filled = apply_model_template(model, data)
            if not data.get("brand_id"):
                data["brand_id"] = model.brand_id
            if filled:
                logger.info("Template do modelo %s aplicou %s campo(s)", model.slug, filled)

        if not data.get("name"):
            data["name"] = generate_product_name(
                name_template or DEFAULT_NAME_TEMPLATE, ProductService._name_data(db, company_id, data)
            )
        if not data.get("name"):
            raise ValidationError("invalid_name", "Informe o nome do produto")
        if not data.get("sku"):
            raise ValidationError("invalid_sku", "Informe o SKU do produto")

        ProductService._check_unique_codes(db, company_id, data)
        data.setdefault("slug", generate_slug(data["name"]))

        product = Product(company_id=company_id, **data)
        try:
            db.add(product)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Falha ao cadastrar produto %s", data.get("sku"))
            raise
        db.refresh(product)
        logger.info("Produto cadastrado: %s (%s)", product.sku, product.name)
        return product

    @staticmethod
    def update_product(db: Session, company_id: int, product_id: int, data: dict) -> Product:
        product = ProductService.get_product(db, company_id, product_id)
        data = ProductService._normalize(data)
        if "name" in data and not data["name"]:
            raise ValidationError("invalid_name", "Informe o nome do produto")
        if "sku" in data and not data["sku"]:
            raise ValidationError("invalid_sku", "Informe o SKU do produto")

        merged = {
            "sku": data.get("sku", product.sku),
            "imei1": data.get("imei1", product.imei1),
            "imei2": data.get("imei2", product.imei2),
            "eans": data.get("eans", product.eans),
        }
        ProductService._check_unique_codes(db, company_id, merged, exclude_id=product.id)

        for key, value in data.items():
            setattr(product, key, value)
        try:
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Falha ao atualizar produto #%s", product_id)
            raise
        db.refresh(product)
        return product

    @staticmethod
    def delete_product(db: Session, company_id: int, product_id: int) -> None:
        product = ProductService.get_product(db, company_id, product_id)
        db.delete(product)
        db.commit()
        logger.info("Produto excluído: %s", product.sku)

    # ----- Imagens -----

    @staticmethod
    def get_shared_images(db: Session, company_id: int, model_id: int, color_id: int) -> List[str]:
        row = (
            db.query(ModelColorImage)
            .filter(
                ModelColorImage.company_id == company_id,
                ModelColorImage.model_id == model_id,
                ModelColorImage.color_id == color_id,
            )
            .first()
        )
        return list(row.images or []) if row else []

    @staticmethod
    def upsert_shared_images(
        db: Session, company_id: int, model_id: int, color_id: int, images: List[str]
    ) -> ModelColorImage:
        row = (
            db.query(ModelColorImage)
            .filter(
                ModelColorImage.company_id == company_id,
                ModelColorImage.model_id == model_id,
                ModelColorImage.color_id == color_id,
            )
            .first()
        )
        if not row:
            row = ModelColorImage(company_id=company_id, model_id=model_id, color_id=color_id)
            db.add(row)
        row.images = [url for url in images if url]
        db.commit()
        db.refresh(row)
        return row

    @staticmethod
    def remove_shared_image(db: Session, company_id: int, model_id: int, color_id: int, url: str) -> List[str]:
        images = ProductService.get_shared_images(db, company_id, model_id, color_id)
        if url not in images:
            raise NotFoundError("image_not_found", "Imagem não encontrada", {"url": url})
        images.remove(url)
        ProductService.upsert_shared_images(db, company_id, model_id, color_id, images)
        return images

    @staticmethod
    def get_product_images(db: Session, product: Product) -> List[str]:
        """
        Novo com modelo e cor: imagens compartilhadas. Caso contrário: imagens próprias.
        """
        if product.condition == "new" and product.model_id and product.color_id:
            return ProductService.get_shared_images(db, product.company_id, product.model_id, product.color_id)
        return list(product.images or [])

    # ----- Cores e armazenamentos -----

    @staticmethod
    def list_colors(db: Session, company_id: int) -> List[Color]:
        return (
            db.query(Color)
            .filter(Color.company_id == company_id, Color.active.is_(True))
            .order_by(Color.name)
            .all()
        )

    @staticmethod
    def create_color(db: Session, company_id: int, name: str, hex_code: Optional[str] = None) -> Color:
        name = (name or "").strip()
        if not name:
            raise ValidationError("invalid_name", "Informe o nome da cor")
        exists = (
            db.query(Color)
            .filter(Color.company_id == company_id, Color.name.ilike(name))
            .first()
        )
        if exists:
            raise ValidationError("duplicate_color", f"A cor {name} já existe")
        color = Color(company_id=company_id, name=name, hex_code=hex_code or None)
        db.add(color)
        db.commit()
        db.refresh(color)
        return color

    @staticmethod
    def list_storages(db: Session, company_id: int) -> List[Storage]:
        return (
            db.query(Storage)
            .filter(Storage.company_id == company_id, Storage.active.is_(True))
            .order_by(Storage.sort_order, Storage.name)
            .all()
        )

    @staticmethod
    def create_storage(db: Session, company_id: int, name: str, sort_order: int = 0) -> Storage:
        name = (name or "").strip().upper()
        if not name:
            raise ValidationError("invalid_name", "Informe a capacidade")
        exists = (
            db.query(Storage)
            .filter(Storage.company_id == company_id, Storage.name == name)
            .first()
        )
        if exists:
            raise ValidationError("duplicate_storage", f"{name} já cadastrado")
        storage = Storage(company_id=company_id, name=name, sort_order=sort_order)
        db.add(storage)
        db.commit()
        db.refresh(storage)
        return storage
