import pytest

from services.delivery_service import split_delivery
from services.errors import ValidationError
from services.sale_calculations import (
    CartItem,
    PaymentEntry,
    calculate_change,
    calculate_checkout,
    calculate_remaining,
    calculate_sale_totals,
    calculate_total_paid,
    is_payment_complete,
    item_discount,
    item_total,
    payment_value,
    validate_new_payment,
)


def _item(price, qty=1, discount=0, cost=0, gift=False):
    return CartItem(
        product_id=None,
        name="Item",
        unit_price=price,
        unit_cost=cost,
        quantity=qty,
        discount=discount,
        is_gift=gift,
    )


def test_single_item_paid_with_pix():
    items = [_item(10000, qty=2)]
    payments = [PaymentEntry("pix", 20000, total_with_fee=20000)]
    totals = calculate_sale_totals(items)

    assert totals.total == 20000
    assert calculate_total_paid(payments) == 20000
    assert calculate_change(totals.total, payments) == 0
    assert calculate_remaining(totals.total, payments) == 0
    assert is_payment_complete(totals.total, payments)


def test_discount_is_per_unit():
    totals = calculate_sale_totals([_item(10000, qty=3, discount=500, cost=6000)])
    assert totals.subtotal == 30000
    assert totals.discount_total == 1500
    assert totals.total == 28500
    assert totals.cost_total == 18000
    assert totals.profit == 10500


def test_gift_item_costs_nothing_to_customer():
    gift = _item(5000, cost=2000, gift=True)
    assert item_total(gift) == 0
    assert item_discount(gift) == 5000

    totals = calculate_sale_totals([gift])
    assert totals.total == 0
    assert totals.profit == -2000


def test_totals_invariant_holds_for_mixed_cart():
    items = [_item(12990, qty=2, discount=990), _item(4500, gift=True), _item(100, qty=7)]
    totals = calculate_sale_totals(items)
    assert totals.total == totals.subtotal - totals.discount_total
    assert totals.total == sum(item_total(i) for i in items)


def test_payment_value_falls_back_to_amount():
    assert payment_value(PaymentEntry("money", 5000)) == 5000
    assert payment_value(PaymentEntry("credit", 5000, total_with_fee=5450)) == 5450


def test_money_overpayment_gives_change():
    payments = [PaymentEntry("money", 20000, total_with_fee=20000)]
    assert calculate_change(15000, payments) == 5000
    assert calculate_remaining(15000, payments) == 0


def test_validate_new_payment_rules():
    payments = [PaymentEntry("pix", 6000, total_with_fee=6000)]
    validate_new_payment(10000, payments, "money", 9000)
    validate_new_payment(10000, payments, "debit", 4000)

    with pytest.raises(ValidationError) as exc:
        validate_new_payment(10000, payments, "pix", 4001)
    assert exc.value.code == "amount_exceeds_remaining"

    with pytest.raises(ValidationError) as exc:
        validate_new_payment(10000, payments, "money", 0)
    assert exc.value.code == "invalid_amount"


def test_checkout_with_fees_gift_promo_and_hybrid_delivery():
    items = [_item(100000, cost=70000), _item(5000, cost=2000, gift=True)]
    delivery = split_delivery("hybrid_delivery")
    payments = [
        PaymentEntry(
            "credit",
            99500,
            installments=3,
            fee_percentage=9.0,
            fee_amount=8955,
            operator_fee_amount=6965,
            total_with_fee=108455,
        )
    ]

    summary = calculate_checkout(items, payments, delivery, promotional_discount=2000)

    assert summary.subtotal == 105000
    assert summary.gift_discount == 5000
    assert summary.items_discount == 0
    assert summary.discount_total == 7000
    assert summary.items_total == 100000
    assert summary.delivery_store_cost == 1500
    assert summary.delivery_customer_cost == 1500
    assert summary.delivery_total == 3000
    assert summary.fees_total == 8955
    assert summary.amount_due == 108455
    assert summary.net_profit == 26490
    assert summary.is_complete
    assert summary.change == 0
    assert summary.remaining == 0


def test_checkout_without_payments_reports_remaining():
    summary = calculate_checkout([_item(2500, qty=2)], [])
    assert summary.amount_due == 5000
    assert summary.remaining == 5000
    assert not summary.is_complete
    assert summary.delivery_type is None


def test_checkout_rejects_negative_promotional_discount():
    with pytest.raises(ValidationError):
        calculate_checkout([_item(1000)], [], promotional_discount=-1)


def test_payment_entry_dict_round_trip_keeps_fee_details():
    entry = PaymentEntry("credit", 1000, installments=2, fee_percentage=8.0, fee_amount=80, total_with_fee=1080)
    assert PaymentEntry.from_dict(entry.to_dict()) == entry
