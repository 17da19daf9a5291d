import pytest

from models.device_model import DeviceModel
from services.brand_service import BrandService
from services.errors import NotFoundError, ValidationError
from services.model_service import ModelService, apply_model_template, extract_template_values
from services.product_service import ProductFilters, ProductService


@pytest.fixture
def brand(db, tenant):
    return BrandService.create_brand(db, tenant.company_id, "Samsung")


@pytest.fixture
def model(db, tenant, brand):
    return ModelService.create_model(
        db,
        tenant.company_id,
        brand.id,
        "Galaxy S24",
        category="Smartphones",
        template_values={"price_retail": 500000, "price_cost": 380000, "ram": "8GB", "storage": "256GB"},
    )


@pytest.fixture
def black(db, tenant):
    return ProductService.create_color(db, tenant.company_id, "Preto", "#000000")


def test_brand_slug_and_duplicates(db, tenant, brand):
    assert brand.slug == "samsung"
    with pytest.raises(ValidationError) as exc:
        BrandService.create_brand(db, tenant.company_id, " samsung ")
    assert exc.value.code == "duplicate_brand"

    renamed = BrandService.update_brand(db, tenant.company_id, brand.id, name="Samsung Electronics")
    assert renamed.slug == "samsung-electronics"


def test_brand_with_models_cannot_be_deleted(db, tenant, brand, model):
    with pytest.raises(ValidationError) as exc:
        BrandService.delete_brand(db, tenant.company_id, brand.id)
    assert exc.value.code == "brand_in_use"

    ModelService.delete_model(db, tenant.company_id, model.id)
    BrandService.delete_brand(db, tenant.company_id, brand.id)
    assert BrandService.list_brands(db, tenant.company_id) == []


def test_model_requires_existing_brand(db, tenant):
    with pytest.raises(NotFoundError):
        ModelService.create_model(db, tenant.company_id, 999, "Moto G84")


def test_apply_model_template_fills_only_empty_fields():
    model = DeviceModel(
        category="Smartphones",
        description=None,
        template_values={
            "price_retail": 500000,
            "ram": "8GB",
            "imei1": "123456789012345",
            "color": "Preto",
            "ncm": "85171231",
        },
    )
    data = {"specs": {}, "price_retail": 0}

    filled = apply_model_template(model, data)

    assert filled == 4
    assert data["price_retail"] == 500000
    assert data["ncm"] == "85171231"
    assert data["category"] == "Smartphones"
    assert data["specs"] == {"ram": "8GB"}
    assert "imei1" not in data


def test_apply_model_template_keeps_typed_values():
    model = DeviceModel(category=None, description=None, template_values={"price_retail": 500000, "ram": "8GB"})
    data = {"price_retail": 450000, "specs": {"ram": "12GB"}}
    assert apply_model_template(model, data) == 0
    assert data["price_retail"] == 450000


def test_save_product_values_as_model_template(db, model):
    data = {
        "price_retail": 100000,
        "price_cost": 0,
        "ncm": "85171231",
        "imei1": "999",
        "specs": {"ram": "8GB", "imei1": "x", "storage": "256GB"},
    }
    expected = {"price_retail": 100000, "ncm": "85171231", "ram": "8GB", "storage": "256GB"}
    assert extract_template_values(data) == expected
    assert ModelService.save_as_model_template(db, model, data) == expected
    assert model.template_values == expected

    with pytest.raises(ValidationError):
        ModelService.save_as_model_template(db, model, {"imei1": "1"})


def test_create_product_from_model_generates_name(db, tenant, brand, model, black):
    product = ProductService.create_product(
        db,
        tenant.company_id,
        {"sku": "S24-PRT", "model_id": model.id, "color_id": black.id, "imei1": "35-123456-789012-3"},
    )

    assert product.name == "Galaxy S24 8GB/256GB Preto"
    assert product.brand_id == brand.id
    assert product.price_retail == 500000
    assert product.price_cost == 380000
    assert product.category == "Smartphones"
    assert product.imei1 == "351234567890123"
    assert product.slug == "galaxy-s24-8gb-256gb-preto"


def test_create_product_with_custom_name_template(db, tenant, model, black):
    product = ProductService.create_product(
        db,
        tenant.company_id,
        {"sku": "S24-X", "model_id": model.id, "color_id": black.id},
        name_template="{marca} {modelo}, {ram}/{armazenamento} ({cor})",
    )
    assert product.name == "Samsung Galaxy S24, 8GB/256GB (Preto)"


def test_product_requires_name_and_sku(db, tenant):
    with pytest.raises(ValidationError) as exc:
        ProductService.create_product(db, tenant.company_id, {"name": "Cabo USB-C"})
    assert exc.value.code == "invalid_sku"
    with pytest.raises(ValidationError) as exc:
        ProductService.create_product(db, tenant.company_id, {"name": "Cabo", "sku": "C1", "price_retail": -1})
    assert exc.value.code == "invalid_price"


def test_unique_codes_are_enforced(db, tenant):
    first = ProductService.create_product(
        db,
        tenant.company_id,
        {"sku": "A1", "name": "Aparelho 1", "imei1": "111111111111111", "eans": "7890000000001; 7890000000002"},
    )
    assert first.eans == ["7890000000001", "7890000000002"]

    cases = [
        ({"sku": "A1", "name": "Outro"}, "duplicate_sku"),
        ({"sku": "A2", "name": "Outro", "imei2": "111111111111111"}, "duplicate_imei"),
        ({"sku": "A3", "name": "Outro", "imei1": "222", "imei2": "222"}, "duplicate_imei"),
        ({"sku": "A4", "name": "Outro", "eans": ["7890000000002"]}, "duplicate_ean"),
    ]
    for data, code in cases:
        with pytest.raises(ValidationError) as exc:
            ProductService.create_product(db, tenant.company_id, data)
        assert exc.value.code == code
    assert ProductService.create_product(db, tenant.company_id, {"sku": "A5", "name": "Prefixo", "eans": ["789000000000"]})

    second = ProductService.create_product(db, tenant.company_id, {"sku": "B1", "name": "Aparelho 2"})
    with pytest.raises(ValidationError):
        ProductService.update_product(db, tenant.company_id, second.id, {"sku": "A1"})
    assert ProductService.update_product(db, tenant.company_id, first.id, {"sku": "A1"}).sku == "A1"


def test_lookup_by_sku_imei_and_ean(db, tenant):
    active = ProductService.create_product(
        db, tenant.company_id, {"sku": "CAPA-1", "name": "Capa", "eans": ["7891"], "imei2": "123456"}
    )
    ProductService.create_product(
        db, tenant.company_id, {"sku": "OLD", "name": "Antigo", "eans": ["7892"], "status": "inactive"}
    )

    assert ProductService.lookup_code(db, tenant.company_id, "CAPA-1").id == active.id
    assert ProductService.lookup_code(db, tenant.company_id, "123456").id == active.id
    assert ProductService.lookup_code(db, tenant.company_id, "7891").id == active.id
    assert ProductService.get_by_ean(db, tenant.company_id, "7892") is None
    assert ProductService.get_by_ean(db, tenant.company_id, "789") is None
    assert ProductService.lookup_code(db, tenant.company_id, "OLD") is None


def test_search_and_list_products(db, tenant, model, black):
    ProductService.create_product(db, tenant.company_id, {"sku": "S24-1", "model_id": model.id, "color_id": black.id})
    ProductService.create_product(db, tenant.company_id, {"sku": "CABO", "name": "Cabo USB-C"})

    assert [p.sku for p in ProductService.search_products(db, tenant.company_id, "galaxy")] == ["S24-1"]
    assert ProductService.search_products(db, tenant.company_id, "  ") == []
    listed = ProductService.list_products(db, tenant.company_id, ProductFilters(model_id=model.id))
    assert [p.sku for p in listed] == ["S24-1"]


def test_new_products_share_model_color_images(db, tenant, model, black):
    new = ProductService.create_product(
        db, tenant.company_id, {"sku": "N1", "model_id": model.id, "color_id": black.id}
    )
    used = ProductService.create_product(
        db,
        tenant.company_id,
        {"sku": "U1", "model_id": model.id, "color_id": black.id, "condition": "used", "images": ["u.jpg"]},
    )
    ProductService.upsert_shared_images(db, tenant.company_id, model.id, black.id, ["a.jpg", "", "b.jpg"])

    assert ProductService.get_product_images(db, new) == ["a.jpg", "b.jpg"]
    assert ProductService.get_product_images(db, used) == ["u.jpg"]

    remaining = ProductService.remove_shared_image(db, tenant.company_id, model.id, black.id, "a.jpg")
    assert remaining == ["b.jpg"]
    with pytest.raises(NotFoundError):
        ProductService.remove_shared_image(db, tenant.company_id, model.id, black.id, "a.jpg")


def test_colors_and_storages(db, tenant, black):
    with pytest.raises(ValidationError):
        ProductService.create_color(db, tenant.company_id, "preto")
    storage = ProductService.create_storage(db, tenant.company_id, "128gb", sort_order=2)
    assert storage.name == "128GB"
    with pytest.raises(ValidationError):
        ProductService.create_storage(db, tenant.company_id, "128GB")
    assert [c.name for c in ProductService.list_colors(db, tenant.company_id)] == ["Preto"]
