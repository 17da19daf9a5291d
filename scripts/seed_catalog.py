"""
Seed de marcas, modelos, cores, armazenamentos, produtos e clientes fictícios
para testes do PDV. Idempotente: registros existentes (mesmo slug/SKU) são mantidos.
"""
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from config.database import SessionLocal, init_db
from config.settings import COMPANY_NAME, COMPANY_SLUG, configure_logging
from models.brand import Brand
from models.color import Color
from models.customer import Customer
from models.device_model import DeviceModel
from models.storage import Storage
from services.brand_service import BrandService
from services.customer_service import CustomerService
from services.delivery_service import DeliveryService
from services.model_service import ModelService
from services.payment_fee_service import PaymentFeeService
from services.product_service import ProductService
from services.tenant import ensure_company
from utils.text import generate_slug

BRANDS = {
    "Apple": [
        ("iPhone 15", {"price_cost": 420000, "price_retail": 549900, "price_reseller": 519900, "ram": "6GB"}),
        ("iPhone 13", {"price_cost": 260000, "price_retail": 349900, "price_reseller": 329900, "ram": "4GB"}),
    ],
    "Samsung": [
        ("Galaxy S24", {"price_cost": 350000, "price_retail": 469900, "price_wholesale": 439900, "ram": "8GB"}),
        ("Galaxy A55", {"price_cost": 160000, "price_retail": 229900, "price_wholesale": 209900, "ram": "8GB"}),
    ],
    "Xiaomi": [
        ("Redmi Note 13", {"price_cost": 110000, "price_retail": 159900, "ram": "8GB"}),
    ],
}

COLORS = [("Preto", "#000000"), ("Branco", "#ffffff"), ("Azul", "#1e88e5"), ("Verde", "#43a047")]
STORAGES = ["64GB", "128GB", "256GB", "512GB"]

PRODUCTS = [
    # (sku, modelo, cor, armazenamento, condição, estoque)
    ("IP15-128-PRT", "iPhone 15", "Preto", "128GB", "new", 3),
    ("IP15-128-AZL", "iPhone 15", "Azul", "128GB", "new", 2),
    ("IP15-256-PRT", "iPhone 15", "Preto", "256GB", "new", 1),
    ("IP13-128-BRC-U1", "iPhone 13", "Branco", "128GB", "used", 1),
    ("S24-256-PRT", "Galaxy S24", "Preto", "256GB", "new", 4),
    ("A55-128-AZL", "Galaxy A55", "Azul", "128GB", "new", 6),
    ("A55-128-VRD", "Galaxy A55", "Verde", "128GB", "new", 5),
    ("RN13-256-PRT", "Redmi Note 13", "Preto", "256GB", "new", 8),
]

CUSTOMERS = [
    {"name": "Consumidor Final", "city": "Vale"},
    {"name": "Maria Souza", "phone": "11987654321", "cpf_cnpj": "529.982.247-25", "city": "São Paulo"},
    {"name": "Loja Parceira LTDA", "phone": "1133334444", "cpf_cnpj": "11.222.333/0001-81"},
]


def main() -> None:
    configure_logging()
    init_db()
    db = SessionLocal()
    try:
        tenant = ensure_company(db, COMPANY_SLUG, COMPANY_NAME)
        company_id = tenant.company_id
        PaymentFeeService.initialize_default_fees(db, company_id)

        colors = {}
        for name, hex_code in COLORS:
            color = db.query(Color).filter(Color.company_id == company_id, Color.name == name).first()
            colors[name] = color or ProductService.create_color(db, company_id, name, hex_code)
        for order, name in enumerate(STORAGES):
            if not db.query(Storage).filter(Storage.company_id == company_id, Storage.name == name).first():
                ProductService.create_storage(db, company_id, name, order)

        models = {}
        for brand_name, brand_models in BRANDS.items():
            brand = (
                db.query(Brand)
                .filter(Brand.company_id == company_id, Brand.slug == generate_slug(brand_name))
                .first()
            ) or BrandService.create_brand(db, company_id, brand_name)
            for model_name, template in brand_models:
                model = (
                    db.query(DeviceModel)
                    .filter(DeviceModel.company_id == company_id, DeviceModel.slug == generate_slug(model_name))
                    .first()
                ) or ModelService.create_model(
                    db, company_id, brand.id, model_name, category="Smartphones", template_values=template
                )
                models[model_name] = model

        created = 0
        for sku, model_name, color_name, storage, condition, stock in PRODUCTS:
            if ProductService.get_by_sku(db, company_id, sku):
                continue
            ProductService.create_product(
                db,
                company_id,
                {
                    "sku": sku,
                    "model_id": models[model_name].id,
                    "color_id": colors[color_name].id,
                    "specs": {"storage": storage},
                    "condition": condition,
                    "track_inventory": True,
                    "stock_quantity": stock,
                },
            )
            created += 1
        print(f"Produtos criados: {created}")

        for data in CUSTOMERS:
            if not db.query(Customer).filter(Customer.company_id == company_id, Customer.name == data["name"]).first():
                CustomerService.create_customer(db, company_id, data)
        if not DeliveryService.list_delivery_persons(db, company_id):
            DeliveryService.create_delivery_person(db, company_id, "João Entregas", "11911112222")
        print("Seed concluído.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
