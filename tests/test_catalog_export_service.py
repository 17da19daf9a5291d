from datetime import date, datetime
from types import SimpleNamespace

import pytest

from services.catalog_export_service import (
    build_catalog_pdf,
    build_whatsapp_link,
    generate_catalog_message,
    generate_quote_message,
    group_products_by_variant,
    price_for_customer_type,
)
from services.errors import ValidationError


def _product(name, color, price=100000, wholesale=0, reseller=0, model="Galaxy S24", ram="8GB", storage="256GB"):
    return SimpleNamespace(
        name=name,
        specs={"ram": ram, "storage": storage},
        price_retail=price,
        price_wholesale=wholesale,
        price_reseller=reseller,
        model=SimpleNamespace(name=model) if model else None,
        color=SimpleNamespace(name=color) if color else None,
    )


def test_price_for_customer_type_falls_back():
    product = _product("X", "Preto", price=100000, wholesale=90000)
    assert price_for_customer_type(product, "retail") == 100000
    assert price_for_customer_type(product, "wholesale") == 90000
    assert price_for_customer_type(product, "resale") == 90000
    assert price_for_customer_type(_product("Y", None), "wholesale") == 100000


def test_group_products_by_variant_collects_colors():
    products = [
        _product("Galaxy S24, 8GB/256GB", "Preto"),
        _product("Galaxy S24, 8GB/256GB", "Azul"),
        _product("Galaxy S24, 8GB/256GB", "Preto"),
        _product("Galaxy S24, 8GB/512GB", "Preto", storage="512GB"),
    ]
    groups = group_products_by_variant(products)
    assert len(groups) == 2
    first = next(g for g in groups if g.storage == "256GB")
    assert first.name == "Galaxy S24"
    assert first.colors == ["Preto", "Azul"]


def test_group_without_color_uses_specs_or_placeholder():
    product = _product("Cabo USB-C", None, model=None, ram=None, storage=None)
    product.specs = {"color": "Branco"}
    other = _product("Fone", None, model=None)
    groups = group_products_by_variant([product, other])
    assert [g.colors for g in groups] == [["Branco"], ["Sem cor"]]
    assert groups[0].ram == "N/A"


def test_catalog_message_layout():
    message = generate_catalog_message([_product("Galaxy S24", "Preto")], today=date(2026, 10, 18))
    lines = message.split("\n")
    assert lines[0] == "📚 *CATÁLOGO COMPLETO*"
    assert lines[1] == "📅 Data: 18/10/2026"
    assert "1. *Galaxy S24*" in lines
    assert "   💰 R$ 1.000,00 à vista" in lines
    assert "   💳 10x de R$ 116,00 (R$ 1.160,00)" in lines
    assert "   🎨 Cores: Preto" in lines
    assert lines[-1] == "🛒 Total: 1 modelo"


def test_catalog_message_for_category_and_empty():
    message = generate_catalog_message(
        [_product("A", "Preto"), _product("B", "Preto", model="Outro")], category_name="Smartphones"
    )
    assert message.startswith("📱 *CATÁLOGO - SMARTPHONES*")
    assert message.endswith("🛒 Total: 2 modelos")
    assert generate_catalog_message([]) == "Nenhum produto disponível no momento."


def test_quote_message_with_installments_and_pickup():
    plan = SimpleNamespace(total=116000, installments=10, monthly_payment=11600)
    message = generate_quote_message("Galaxy S24", "Preto", plan, company_name="Loja Teste", today=date(2026, 10, 18))
    assert "• Galaxy S24" in message
    assert "  Cor: Preto" in message
    assert "  💳 10x de R$ 116,00 (Total: R$ 1.160,00)" in message
    assert "*🏪 RETIRADA NA LOJA*" in message
    assert "🎯 *Orçamento exclusivo Loja Teste!*" in message


def test_quote_message_with_delivery_address():
    plan = SimpleNamespace(total=100000, installments=1, monthly_payment=100000)
    message = generate_quote_message("Galaxy S24", None, plan, delivery={"address": "Rua A, 10", "notes": "Portão azul"})
    assert "*🚚 ENTREGA:*\nRua A, 10\nObs: Portão azul" in message
    assert "💳" not in message


def test_whatsapp_link():
    link = build_whatsapp_link("(11) 98765-4321", "Olá mundo")
    assert link == "https://web.whatsapp.com/send?phone=5511987654321&text=Ol%C3%A1%20mundo"
    assert build_whatsapp_link("11987654321", "x", mobile=True).startswith("https://api.whatsapp.com/send")
    with pytest.raises(ValidationError):
        build_whatsapp_link("1234", "x")


def test_catalog_pdf_spans_pages():
    products = [_product(f"Modelo {i}", "Preto", model=f"Modelo {i}") for i in range(40)]
    company = SimpleNamespace(name="Loja Teste", phone="(11) 98765-4321")
    pdf = build_catalog_pdf(products, "retail", company, "Smartphones", datetime(2026, 10, 18, 10, 0))
    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000


def test_catalog_pdf_without_products():
    assert build_catalog_pdf([], company=None).startswith(b"%PDF")
