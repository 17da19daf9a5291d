import logging
from datetime import date

import pytest
from sqlalchemy.exc import SQLAlchemyError

from models.delivery import DeliveryCredit
from models.product import Product
from models.sale import Sale, SaleItem
from services.customer_service import CustomerService
from services.delivery_service import DeliveryService, DeliveryType, split_delivery
from services.errors import NotFoundError, ValidationError
from services.product_service import ProductService
from services.sale_calculations import CartItem, PaymentEntry
from services.sale_service import SaleFilters, SaleInput, SaleService, get_period


@pytest.fixture
def customer(db, tenant):
    return CustomerService.create_customer(db, tenant.company_id, {"name": "Maria Souza"})


@pytest.fixture
def product(db, tenant):
    return ProductService.create_product(
        db,
        tenant.company_id,
        {
            "sku": "CAPA-001",
            "name": "Capa Silicone",
            "price_retail": 10000,
            "price_cost": 4000,
            "track_inventory": True,
            "stock_quantity": 5,
        },
    )


@pytest.fixture
def courier(db, tenant):
    return DeliveryService.create_delivery_person(db, tenant.company_id, "Carlos")


def _cart(product, quantity=2, **kwargs):
    return CartItem(
        product_id=product.id,
        name=product.name,
        unit_price=product.price_retail,
        unit_cost=product.price_cost,
        quantity=quantity,
        **kwargs,
    )


def _pix(amount):
    return PaymentEntry("pix", amount, total_with_fee=amount)


def test_create_sale_persists_header_items_and_stock(db, tenant, customer, product):
    sale = SaleService.create_sale(
        db,
        tenant.company_id,
        SaleInput(customer_id=customer.id, items=[_cart(product)], payments=[_pix(20000)], seller_name="Ana"),
    )

    assert sale.status == "completed"
    assert sale.total == 20000
    assert sale.subtotal == 20000
    assert sale.cost_total == 8000
    assert sale.profit == 12000
    assert sale.payment_methods[0]["method"] == "pix"
    assert len(sale.items) == 1
    assert sale.items[0].total == 20000
    db.refresh(product)
    assert product.stock_quantity == 3


def test_gift_item_is_recorded_with_zero_total(db, tenant, customer, product):
    sale = SaleService.create_sale(
        db,
        tenant.company_id,
        SaleInput(customer_id=customer.id, items=[_cart(product, quantity=1, is_gift=True)]),
    )
    assert sale.total == 0
    assert sale.items[0].is_gift
    assert sale.items[0].total == 0
    assert sale.profit == -4000


def test_sale_requires_customer(db, tenant, product):
    with pytest.raises(ValidationError) as exc:
        SaleService.create_sale(db, tenant.company_id, SaleInput(customer_id=None, items=[_cart(product)]))
    assert exc.value.code == "customer_required"


def test_sale_requires_items(db, tenant, customer):
    with pytest.raises(ValidationError) as exc:
        SaleService.create_sale(db, tenant.company_id, SaleInput(customer_id=customer.id, items=[]))
    assert exc.value.code == "empty_cart"


def test_sale_requires_full_payment(db, tenant, customer, product):
    with pytest.raises(ValidationError) as exc:
        SaleService.create_sale(
            db,
            tenant.company_id,
            SaleInput(customer_id=customer.id, items=[_cart(product)], payments=[_pix(5000)]),
        )
    assert exc.value.context["remaining"] == 15000


@pytest.mark.parametrize(
    "price,discount,code",
    [
        (1000, 5000, "invalid_discount"),
        (1000, -100, "invalid_discount"),
        (-1000, 0, "invalid_price"),
    ],
)
def test_sale_rejects_invalid_item_values(db, tenant, customer, price, discount, code):
    item = CartItem(product_id=None, name="Avulso", unit_price=price, unit_cost=500, discount=discount)
    with pytest.raises(ValidationError) as exc:
        SaleService.create_sale(db, tenant.company_id, SaleInput(customer_id=customer.id, items=[item], payments=[]))
    assert exc.value.code == code
    assert db.query(Sale).count() == 0
    assert db.query(SaleItem).count() == 0


def test_sale_rejects_zero_quantity(db, tenant, customer, product):
    with pytest.raises(ValidationError) as exc:
        SaleService.create_sale(
            db,
            tenant.company_id,
            SaleInput(customer_id=customer.id, items=[_cart(product, quantity=0)], payments=[_pix(20000)]),
        )
    assert exc.value.code == "invalid_quantity"
    assert db.get(Product, product.id).stock_quantity == 5


def test_missing_product_rolls_back_whole_sale(db, tenant, customer, product):
    ghost = CartItem(product_id=9999, name="Fantasma", unit_price=1000)
    with pytest.raises(NotFoundError):
        SaleService.create_sale(
            db,
            tenant.company_id,
            SaleInput(customer_id=customer.id, items=[_cart(product), ghost], payments=[_pix(21000)]),
        )
    assert db.query(Sale).count() == 0
    assert db.query(SaleItem).count() == 0
    assert db.get(Product, product.id).stock_quantity == 5


def test_insufficient_stock_rolls_back(db, tenant, customer, product):
    with pytest.raises(ValidationError) as exc:
        SaleService.create_sale(
            db,
            tenant.company_id,
            SaleInput(customer_id=customer.id, items=[_cart(product, quantity=6)], payments=[_pix(60000)]),
        )
    assert exc.value.code == "insufficient_stock"
    assert db.query(Sale).count() == 0


def test_delivery_sale_creates_pending_credit(db, tenant, customer, product, courier):
    sale = SaleService.create_sale(
        db,
        tenant.company_id,
        SaleInput(
            customer_id=customer.id,
            items=[_cart(product)],
            payments=[_pix(20000)],
            delivery=split_delivery(DeliveryType.STORE_DELIVERY),
            delivery_person_id=courier.id,
        ),
    )

    assert sale.delivery_total == 3000
    assert sale.total == 20000
    assert sale.profit == 9000
    credits = DeliveryService.list_delivery_credits(db, tenant.company_id, courier.id)
    assert len(credits) == 1
    assert credits[0].amount == 3000
    assert credits[0].status == "pending"


def test_credit_failure_keeps_sale_and_logs(db, tenant, customer, product, courier, monkeypatch, caplog):
    def fail(*args, **kwargs):
        raise SQLAlchemyError("falha simulada")

    monkeypatch.setattr(DeliveryService, "create_credit", fail)
    with caplog.at_level(logging.ERROR):
        sale = SaleService.create_sale(
            db,
            tenant.company_id,
            SaleInput(
                customer_id=customer.id,
                items=[_cart(product)],
                payments=[_pix(21500)],
                delivery=split_delivery(DeliveryType.HYBRID_DELIVERY),
                delivery_person_id=courier.id,
            ),
        )

    assert db.query(Sale).filter(Sale.id == sale.id).count() == 1
    assert db.query(DeliveryCredit).count() == 0
    assert "crédito de entrega" in caplog.text


def test_cancel_returns_stock_and_cancels_credit(db, tenant, customer, product, courier):
    sale = SaleService.create_sale(
        db,
        tenant.company_id,
        SaleInput(
            customer_id=customer.id,
            items=[_cart(product)],
            payments=[_pix(20000)],
            delivery=split_delivery(DeliveryType.STORE_DELIVERY),
            delivery_person_id=courier.id,
        ),
    )

    cancelled = SaleService.cancel_sale(db, tenant.company_id, sale.id)

    assert cancelled.status == "cancelled"
    assert db.get(Product, product.id).stock_quantity == 5
    credit = DeliveryService.list_delivery_credits(db, tenant.company_id)[0]
    assert credit.status == "cancelled"
    assert DeliveryService.delivery_person_earnings(db, tenant.company_id) == []

    with pytest.raises(ValidationError):
        SaleService.refund_sale(db, tenant.company_id, sale.id)


def test_delivery_person_earnings_split_pending_and_paid(db, tenant, customer, product, courier):
    for _ in range(2):
        SaleService.create_sale(
            db,
            tenant.company_id,
            SaleInput(
                customer_id=customer.id,
                items=[_cart(product, quantity=1)],
                payments=[_pix(10000)],
                delivery=split_delivery(DeliveryType.STORE_DELIVERY),
                delivery_person_id=courier.id,
            ),
        )
    first = DeliveryService.list_delivery_credits(db, tenant.company_id)[-1]
    DeliveryService.mark_credit_paid(db, tenant.company_id, first.id)

    earnings = DeliveryService.delivery_person_earnings(db, tenant.company_id)
    assert earnings == [
        {
            "delivery_person_id": courier.id,
            "name": "Carlos",
            "deliveries": 2,
            "pending": 3000,
            "paid": 3000,
            "total": 6000,
        }
    ]
    with pytest.raises(ValidationError):
        DeliveryService.mark_credit_paid(db, tenant.company_id, first.id)


def test_list_and_summary_only_count_completed(db, tenant, customer, product):
    kept = SaleService.create_sale(
        db,
        tenant.company_id,
        SaleInput(customer_id=customer.id, items=[_cart(product)], payments=[_pix(20000)]),
    )
    refunded = SaleService.create_sale(
        db,
        tenant.company_id,
        SaleInput(customer_id=customer.id, items=[_cart(product, quantity=1)], payments=[_pix(10000)]),
    )
    SaleService.refund_sale(db, tenant.company_id, refunded.id)

    assert len(SaleService.list_sales(db, tenant.company_id)) == 2
    completed = SaleService.list_sales(db, tenant.company_id, SaleFilters(status="completed"))
    assert [s.id for s in completed] == [kept.id]
    assert SaleService.list_sales(db, tenant.company_id, SaleFilters(min_total=15000))[0].id == kept.id

    summary = SaleService.sales_summary(db, tenant.company_id)
    assert summary["count"] == 1
    assert summary["revenue"] == 20000
    assert summary["profit"] == 12000
    assert summary["average_ticket"] == 20000
    assert summary["margin"] == 60.0

    top = SaleService.top_products(db, tenant.company_id)
    assert top[0][0] == "Capa Silicone"
    assert top[0][1] == 2


def test_get_sale_from_other_tenant_is_not_found(db, tenant, customer, product):
    sale = SaleService.create_sale(
        db,
        tenant.company_id,
        SaleInput(customer_id=customer.id, items=[_cart(product)], payments=[_pix(20000)]),
    )
    with pytest.raises(NotFoundError):
        SaleService.get_sale(db, tenant.company_id + 1, sale.id)


def test_checkout_from_sale_matches_recorded_totals(db, tenant, customer, product):
    sale = SaleService.create_sale(
        db,
        tenant.company_id,
        SaleInput(
            customer_id=customer.id,
            items=[_cart(product)],
            payments=[PaymentEntry("money", 25000, total_with_fee=25000)],
            promotional_discount=1000,
        ),
    )
    summary = SaleService.checkout_from_sale(sale)
    assert summary.amount_due == sale.total == 19000
    assert summary.change == 6000
    assert summary.net_profit == sale.profit


def test_get_period():
    today = date(2026, 3, 15)
    assert get_period("Hoje", today) == (today, today)
    assert get_period("Este mês", today) == (date(2026, 3, 1), today)
    assert get_period("Últimos 3 meses", today) == (date(2025, 12, 15), today)
    assert get_period("Este ano", today) == (date(2026, 1, 1), today)
