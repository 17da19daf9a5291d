import pytest

from services.errors import NotFoundError, ValidationError
from services.payment_fee_service import MAX_CREDIT_INSTALLMENTS, PaymentFeeService


def test_default_table_has_debit_pix_and_credit_rows(db, tenant):
    created = PaymentFeeService.initialize_default_fees(db, tenant.company_id)
    assert created == 2 + MAX_CREDIT_INSTALLMENTS

    credit = PaymentFeeService.list_fees(db, tenant.company_id, method="credit")
    assert [f.installments for f in credit] == list(range(1, 19))
    assert (credit[0].operator_fee, credit[0].applied_fee) == (5.0, 7.0)
    assert (credit[-1].operator_fee, credit[-1].applied_fee) == (22.0, 24.0)

    pix = PaymentFeeService.list_fees(db, tenant.company_id, method="pix")
    assert len(pix) == 1
    assert pix[0].applied_fee == 0.0


def test_default_table_is_created_once(db, tenant, fees):
    assert len(fees) == 20
    assert PaymentFeeService.initialize_default_fees(db, tenant.company_id) == 0
    assert len(PaymentFeeService.list_fees(db, tenant.company_id)) == 20


def test_update_fee(db, tenant, fees):
    fee = fees[0]
    updated = PaymentFeeService.update_fee(db, tenant.company_id, fee.id, " Stone ", 3.5, 4.99)
    assert updated.operator_name == "Stone"
    assert updated.operator_fee == 3.5
    assert updated.applied_fee == 4.99


def test_update_fee_rejects_applied_below_operator(db, tenant, fees):
    with pytest.raises(ValidationError) as exc:
        PaymentFeeService.update_fee(db, tenant.company_id, fees[0].id, None, 5.0, 4.0)
    assert exc.value.code == "applied_below_operator"


def test_update_fee_rejects_negative(db, tenant, fees):
    with pytest.raises(ValidationError) as exc:
        PaymentFeeService.update_fee(db, tenant.company_id, fees[0].id, None, -1.0, 2.0)
    assert exc.value.code == "invalid_fee"


def test_update_fee_from_other_tenant_is_not_found(db, tenant, fees):
    with pytest.raises(NotFoundError):
        PaymentFeeService.update_fee(db, tenant.company_id + 99, fees[0].id, None, 1.0, 2.0)
