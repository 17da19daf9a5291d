"""
Cálculos do carrinho, dos pagamentos e do resumo de fechamento da venda.

Todos os valores são inteiros em centavos. Funções puras, sem acesso ao banco:
a tela do PDV, o painel de resumo, o recibo e a venda gravada usam o mesmo
`calculate_checkout`.
"""
from dataclasses import asdict, dataclass, field
from typing import Iterable, List, Optional

from services.errors import ValidationError


@dataclass
class CartItem:
    product_id: Optional[int]
    name: str
    unit_price: int
    unit_cost: int = 0
    quantity: int = 1
    discount: int = 0  # por unidade
    is_gift: bool = False
    sku: Optional[str] = None
    track_inventory: bool = False


@dataclass
class PaymentEntry:
    method: str  # money / debit / credit / pix
    amount: int
    installments: int = 1
    fee_percentage: float = 0.0
    fee_amount: int = 0
    operator_fee_amount: int = 0
    total_with_fee: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "PaymentEntry":
        return cls(
            method=data["method"],
            amount=int(data.get("amount") or 0),
            installments=int(data.get("installments") or 1),
            fee_percentage=float(data.get("fee_percentage") or 0),
            fee_amount=int(data.get("fee_amount") or 0),
            operator_fee_amount=int(data.get("operator_fee_amount") or 0),
            total_with_fee=data.get("total_with_fee"),
        )


@dataclass
class SaleTotals:
    subtotal: int = 0
    discount_total: int = 0
    total: int = 0
    cost_total: int = 0
    profit: int = 0


@dataclass
class CheckoutSummary:
    subtotal: int
    items_discount: int
    gift_discount: int
    promotional_discount: int
    discount_total: int
    items_total: int
    cost_total: int
    delivery_type: Optional[str]
    delivery_store_cost: int
    delivery_customer_cost: int
    delivery_total: int
    fees_total: int
    amount_due: int
    net_profit: int
    total_paid: int
    change: int
    remaining: int
    is_complete: bool
    payments: List[PaymentEntry] = field(default_factory=list)


# ----- Itens -----


def item_subtotal(item: CartItem) -> int:
    return item.unit_price * item.quantity


def item_discount(item: CartItem) -> int:
    # Brinde: o desconto é o valor cheio do item
    if item.is_gift:
        return item.unit_price * item.quantity
    return item.discount * item.quantity


def item_total(item: CartItem) -> int:
    if item.is_gift:
        return 0
    return item.unit_price * item.quantity - item.discount * item.quantity


def item_cost(item: CartItem) -> int:
    return item.unit_cost * item.quantity


def calculate_sale_totals(items: Iterable[CartItem]) -> SaleTotals:
    totals = SaleTotals()
    for item in items:
        totals.subtotal += item_subtotal(item)
        totals.discount_total += item_discount(item)
        totals.cost_total += item_cost(item)
    totals.total = totals.subtotal - totals.discount_total
    totals.profit = totals.total - totals.cost_total
    return totals


# ----- Pagamentos -----


def payment_value(payment: PaymentEntry) -> int:
    if payment.total_with_fee is not None:
        return payment.total_with_fee
    return payment.amount


def calculate_total_paid(payments: Iterable[PaymentEntry]) -> int:
    return sum(payment_value(p) for p in payments)


def calculate_change(total: int, payments: Iterable[PaymentEntry]) -> int:
    return max(0, calculate_total_paid(payments) - total)


def calculate_remaining(total: int, payments: Iterable[PaymentEntry]) -> int:
    return max(0, total - calculate_total_paid(payments))


def is_payment_complete(total: int, payments: Iterable[PaymentEntry]) -> bool:
    return calculate_total_paid(payments) >= total


def validate_new_payment(total: int, payments: List[PaymentEntry], method: str, amount: int) -> None:
    """
    Valida um pagamento antes de adicioná-lo à lista.
    Só dinheiro pode ultrapassar o saldo restante (gera troco).
    """
    if amount <= 0:
        raise ValidationError("invalid_amount", "Digite um valor válido", {"amount": amount})
    remaining = calculate_remaining(total, payments)
    if method != "money" and amount > remaining:
        raise ValidationError(
            "amount_exceeds_remaining",
            "Valor maior que o restante. Troco apenas em dinheiro.",
            {"method": method, "amount": amount, "remaining": remaining},
        )


# ----- Fechamento -----


def calculate_checkout(
    items: Iterable[CartItem],
    payments: Iterable[PaymentEntry],
    delivery=None,
    promotional_discount: int = 0,
) -> CheckoutSummary:
    """
    Resumo único do fechamento da venda.

    amount_due = itens - desconto promocional + frete do cliente + taxas.
    O desconto de brindes já está dentro do total dos itens e não é
    subtraído de novo.
    """
    items = list(items)
    payments = list(payments)
    if promotional_discount < 0:
        raise ValidationError("invalid_discount", "O desconto não pode ser negativo")

    totals = calculate_sale_totals(items)
    gift_discount = sum(item_discount(i) for i in items if i.is_gift)
    fees_total = sum(p.fee_amount for p in payments)
    fee_margin = sum(p.fee_amount - p.operator_fee_amount for p in payments)

    store_cost = delivery.store_cost if delivery else 0
    customer_cost = delivery.customer_cost if delivery else 0
    delivery_type = delivery.delivery_type if delivery else None

    amount_due = max(0, totals.total - promotional_discount + customer_cost + fees_total)
    net_profit = totals.profit - promotional_discount - store_cost + fee_margin
    total_paid = calculate_total_paid(payments)

    return CheckoutSummary(
        subtotal=totals.subtotal,
        items_discount=totals.discount_total - gift_discount,
        gift_discount=gift_discount,
        promotional_discount=promotional_discount,
        discount_total=totals.discount_total + promotional_discount,
        items_total=totals.total,
        cost_total=totals.cost_total,
        delivery_type=delivery_type,
        delivery_store_cost=store_cost,
        delivery_customer_cost=customer_cost,
        delivery_total=store_cost + customer_cost,
        fees_total=fees_total,
        amount_due=amount_due,
        net_profit=net_profit,
        total_paid=total_paid,
        change=max(0, total_paid - amount_due),
        remaining=max(0, amount_due - total_paid),
        is_complete=total_paid >= amount_due,
        payments=payments,
    )
