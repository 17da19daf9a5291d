"""
Formatação de moeda, datas e porcentagens.
Valores monetários circulam sempre como inteiros em centavos.
"""
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from services.errors import ValidationError

PAYMENT_METHOD_LABELS = {
    "money": "Dinheiro",
    "credit": "Cartão de Crédito",
    "debit": "Cartão de Débito",
    "pix": "PIX",
}

PAYMENT_METHOD_ICONS = {
    "money": "💵",
    "credit": "💳",
    "debit": "💳",
    "pix": "📱",
}


def round_cents(value) -> int:
    """
    Arredonda para o centavo inteiro mais próximo (meio para cima).
    """
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_currency(cents: int) -> str:
    """
    Formata centavos como moeda em reais: 123456 -> "R$ 1.234,56".
    """
    cents = int(cents or 0)
    sign = "-" if cents < 0 else ""
    reais = Decimal(abs(cents)) / 100
    text = f"{reais:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"{sign}R$ {text}"


def cents_to_reais(cents: int) -> float:
    return (cents or 0) / 100


def reais_to_cents(value: float) -> int:
    return round_cents(Decimal(str(value or 0)) * 100)


def parse_currency(text: str) -> int:
    """
    Converte o texto digitado no caixa para centavos.
    Aceita "12,50", "1.234,56", "12.5" e "R$ 10".
    """
    raw = (text or "").strip().replace("R$", "").replace(" ", "")
    if not raw:
        raise ValidationError("invalid_amount", "Digite um valor válido")
    if "," in raw:
        raw = raw.replace(".", "").replace(",", ".")
    elif raw.count(".") > 1:
        raw = raw.replace(".", "")
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise ValidationError("invalid_amount", "Digite um valor válido", {"text": text})
    if not value.is_finite():
        raise ValidationError("invalid_amount", "Digite um valor válido", {"text": text})
    if value < 0:
        raise ValidationError("invalid_amount", "O valor não pode ser negativo", {"text": text})
    return round_cents(value * 100)


def percent_of(cents: int, percentage: float) -> int:
    """
    Aplica uma porcentagem sobre um valor em centavos, arredondando.
    """
    return round_cents(Decimal(int(cents)) * Decimal(str(percentage)) / 100)


def calculate_profit_margin(profit: int, total: int) -> float:
    if total == 0:
        return 0.0
    return (profit / total) * 100


def format_percent(value: float, decimals: int = 2) -> str:
    return f"{value:.{decimals}f}%".replace(".", ",")


def format_date(d: date | datetime) -> str:
    """
    Formata datas no padrão brasileiro.
    """
    if isinstance(d, datetime):
        return d.strftime("%d/%m/%Y %H:%M")
    return d.strftime("%d/%m/%Y")


def payment_method_label(method: str) -> str:
    return PAYMENT_METHOD_LABELS.get(method, method)


def payment_method_icon(method: str) -> str:
    return PAYMENT_METHOD_ICONS.get(method, "💰")


def only_digits(text: str | None) -> str:
    return re.sub(r"\D", "", text or "")
