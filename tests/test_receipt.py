from services.customer_service import CustomerService
from services.delivery_service import DeliveryType, split_delivery
from services.sale_calculations import CartItem, PaymentEntry
from services.sale_service import SaleInput, SaleService
from utils.receipt_builder import build_receipt_html
from utils.receipt_config import DEFAULTS, load_receipt_config, save_receipt_config


def _sale(db, tenant):
    customer = CustomerService.create_customer(
        db, tenant.company_id, {"name": "Ana <Teste>", "cpf_cnpj": "52998224725"}
    )
    items = [
        CartItem(product_id=None, name="Galaxy S24", unit_price=100000, unit_cost=70000, discount=5000),
        CartItem(product_id=None, name="Película", unit_price=3000, is_gift=True),
    ]
    payments = [
        PaymentEntry("credit", 96500, installments=3, fee_percentage=9.0, fee_amount=8685,
                     operator_fee_amount=6755, total_with_fee=105185),
    ]
    sale = SaleService.create_sale(
        db,
        tenant.company_id,
        SaleInput(
            customer_id=customer.id,
            items=items,
            payments=payments,
            delivery=split_delivery(DeliveryType.HYBRID_DELIVERY),
            promotional_discount=0,
            seller_name="Bruno",
        ),
    )
    return sale, customer


def test_receipt_lists_items_totals_and_payments(db, tenant):
    sale, customer = _sale(db, tenant)
    html = build_receipt_html(sale, sale.items, customer, config=dict(DEFAULTS))

    assert f"Venda #{sale.id}" in html
    assert "Cliente: Ana &lt;Teste&gt;" in html
    assert "CPF/CNPJ: 529.982.247-25" in html
    assert "Película (BRINDE)" in html
    assert "Desconto: -R$ 50,00" in html
    assert "<span>Brindes</span><span>-R$ 30,00</span>" in html
    assert "<span>Frete (Entrega Híbrida)</span><span>R$ 15,00</span>" in html
    assert "<span>Taxas de pagamento</span><span>R$ 86,85</span>" in html
    assert "<span>TOTAL</span><span>R$ 1.051,85</span>" in html
    assert "Cartão de Crédito 3x" in html
    assert "Troco" not in html


def test_receipt_respects_layout_flags(db, tenant):
    sale, customer = _sale(db, tenant)
    config = dict(DEFAULTS, show_customer=False, show_payment_fees=False)
    html = build_receipt_html(sale, sale.items, customer, config=config)
    assert "Cliente:" not in html
    assert "Taxas de pagamento" not in html


def test_cancelled_sale_is_marked(db, tenant):
    sale, customer = _sale(db, tenant)
    SaleService.cancel_sale(db, tenant.company_id, sale.id)
    html = build_receipt_html(sale, sale.items, customer, config=dict(DEFAULTS))
    assert "VENDA CANCELADA" in html


def test_receipt_config_round_trip_and_bad_file(tmp_path):
    path = tmp_path / "receipt.json"
    save_receipt_config({"paper_width_mm": 58, "unknown": 1}, path)
    loaded = load_receipt_config(path)
    assert loaded["paper_width_mm"] == 58
    assert loaded["margin_mm"] == DEFAULTS["margin_mm"]
    assert "unknown" not in loaded

    path.write_text("{not json", encoding="utf-8")
    assert load_receipt_config(path) == DEFAULTS
