import pytest

from services.delivery_service import (
    DEFAULT_DELIVERY_COST,
    DeliveryService,
    DeliveryType,
    delivery_label,
    split_delivery,
)
from services.errors import ValidationError


def test_pickup_has_no_cost():
    for delivery_type in (None, DeliveryType.STORE_PICKUP):
        split = split_delivery(delivery_type, 1000, 1000)
        assert (split.store_cost, split.customer_cost, split.total) == (0, 0, 0)
        assert not split.needs_delivery_person


def test_store_delivery_defaults_to_store_paying_everything():
    split = split_delivery(DeliveryType.STORE_DELIVERY)
    assert split.store_cost == DEFAULT_DELIVERY_COST
    assert split.customer_cost == 0
    assert split.total == DEFAULT_DELIVERY_COST
    assert split.needs_delivery_person

    assert split_delivery(DeliveryType.STORE_DELIVERY, 4500).total == 4500


def test_store_delivery_accepts_free_shipping():
    split = split_delivery(DeliveryType.STORE_DELIVERY, 0)
    assert (split.store_cost, split.customer_cost, split.total) == (0, 0, 0)
    assert split.needs_delivery_person


def test_hybrid_delivery_split():
    default = split_delivery(DeliveryType.HYBRID_DELIVERY)
    assert (default.store_cost, default.customer_cost) == (1500, 1500)

    custom = split_delivery(DeliveryType.HYBRID_DELIVERY, 2000, 1000)
    assert custom.total == 3000
    assert custom.customer_cost == 1000


def test_split_delivery_validation():
    with pytest.raises(ValidationError):
        split_delivery("drone")
    with pytest.raises(ValidationError):
        split_delivery(DeliveryType.HYBRID_DELIVERY, -1, 0)


def test_delivery_label():
    assert delivery_label(None) == "Retirada na Loja"
    assert delivery_label("other") == "other"


def test_create_delivery_person(db, tenant):
    person = DeliveryService.create_delivery_person(db, tenant.company_id, "  João  ", "11999990000")
    assert person.name == "João"
    assert [p.id for p in DeliveryService.list_delivery_persons(db, tenant.company_id)] == [person.id]

    with pytest.raises(ValidationError):
        DeliveryService.create_delivery_person(db, tenant.company_id, " ")
