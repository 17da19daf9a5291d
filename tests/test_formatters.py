from datetime import date, datetime

import pytest

from services.errors import ValidationError
from utils.formatters import (
    calculate_profit_margin,
    format_currency,
    format_date,
    format_percent,
    parse_currency,
    payment_method_icon,
    payment_method_label,
    percent_of,
    reais_to_cents,
    round_cents,
)


def test_format_currency_uses_brazilian_grouping():
    assert format_currency(123456) == "R$ 1.234,56"
    assert format_currency(0) == "R$ 0,00"
    assert format_currency(5) == "R$ 0,05"
    assert format_currency(100000000) == "R$ 1.000.000,00"


def test_format_currency_negative():
    assert format_currency(-100) == "-R$ 1,00"


@pytest.mark.parametrize(
    "text,cents",
    [
        ("12,50", 1250),
        ("1.234,56", 123456),
        ("12.5", 1250),
        ("R$ 10", 1000),
        ("0,01", 1),
    ],
)
def test_parse_currency_accepts_common_inputs(text, cents):
    assert parse_currency(text) == cents


@pytest.mark.parametrize("text", ["", "abc", "-5", "R$", "nan", "NaN", "sNaN", "Infinity"])
def test_parse_currency_rejects_garbage_and_negative(text):
    with pytest.raises(ValidationError):
        parse_currency(text)


def test_parse_currency_reads_formatted_amount():
    assert parse_currency(format_currency(123456)) == 123456
    assert parse_currency(format_currency(0)) == 0


def test_percent_of_rounds_half_up():
    assert percent_of(10000, 7) == 700
    assert percent_of(12345, 2.5) == 309
    assert percent_of(50, 1) == 1
    assert percent_of(49, 1) == 0


def test_round_cents_half_up():
    assert round_cents(3633.5) == 3634
    assert round_cents(3633.49) == 3633


def test_reais_to_cents_avoids_float_noise():
    assert reais_to_cents(19.99) == 1999
    assert reais_to_cents(0.1 + 0.2) == 30


def test_profit_margin_zero_total():
    assert calculate_profit_margin(500, 0) == 0.0
    assert calculate_profit_margin(250, 1000) == 25.0


def test_format_percent_and_date():
    assert format_percent(12.5) == "12,50%"
    assert format_date(date(2026, 10, 18)) == "18/10/2026"
    assert format_date(datetime(2026, 10, 18, 9, 5)) == "18/10/2026 09:05"


def test_payment_method_label_fallback():
    assert payment_method_label("credit") == "Cartão de Crédito"
    assert payment_method_label("boleto") == "boleto"
    assert payment_method_icon("boleto") == "💰"
