"""
Parcelamento e taxas de cartão/PIX aplicadas sobre o saldo da venda.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from services.sale_calculations import PaymentEntry
from utils.formatters import percent_of, round_cents

logger = logging.getLogger(__name__)

# Parcelamento fixo exibido no catálogo (WhatsApp e PDF)
CATALOG_INSTALLMENTS = 10
CATALOG_INSTALLMENT_FEE = 16.0
HIGHLIGHTED_INSTALLMENTS = 10


@dataclass
class InstallmentOption:
    installments: int
    fee_percentage: float
    fee_amount: int
    total_with_fee: int
    monthly_payment: int


@dataclass
class InstallmentPlan:
    label: str
    installments: int
    fee_percentage: float
    total: int
    monthly_payment: int
    highlighted: bool = False


def find_fee(fees: Sequence, method: str, installments: int = 1):
    """
    Procura a taxa configurada para (forma de pagamento, parcelas).
    Retorna None, com aviso no log, quando não há linha cadastrada.
    """
    for fee in fees:
        if fee.payment_method == method and fee.installments == installments:
            return fee
    logger.warning("Taxa não encontrada para %s em %sx", method, installments)
    return None


def installment_options(balance: int, fees: Sequence) -> List[InstallmentOption]:
    if balance <= 0:
        return []
    credit_fees = sorted(
        (f for f in fees if f.payment_method == "credit"), key=lambda f: f.installments
    )
    options = []
    for fee in credit_fees:
        fee_amount = percent_of(balance, fee.applied_fee)
        total_with_fee = balance + fee_amount
        options.append(
            InstallmentOption(
                installments=fee.installments,
                fee_percentage=fee.applied_fee,
                fee_amount=fee_amount,
                total_with_fee=total_with_fee,
                monthly_payment=round_cents(total_with_fee / fee.installments),
            )
        )
    return options


def build_payment(method: str, balance: int, fees: Sequence, installments: int = 1) -> PaymentEntry:
    """
    Monta o pagamento com o detalhamento de taxas sobre o saldo informado.
    Dinheiro nunca tem taxa.
    """
    if method == "money":
        return PaymentEntry(method=method, amount=balance, total_with_fee=balance)

    if method != "credit":
        installments = 1
    fee = find_fee(fees, method, installments)
    applied = fee.applied_fee if fee else 0.0
    operator = fee.operator_fee if fee else 0.0
    fee_amount = percent_of(balance, applied)
    return PaymentEntry(
        method=method,
        amount=balance,
        installments=installments,
        fee_percentage=applied,
        fee_amount=fee_amount,
        operator_fee_amount=percent_of(balance, operator),
        total_with_fee=balance + fee_amount,
    )


def calculate_installment_plans(
    price: int, fees: Sequence, max_installments: int = 12
) -> List[InstallmentPlan]:
    """
    Simulação exibida no catálogo: PIX à vista e uma linha por parcela de crédito.
    """
    plans = []
    pix_fee = next((f for f in fees if f.payment_method == "pix" and f.installments == 1), None)
    pix_pct = pix_fee.applied_fee if pix_fee else 0.0
    pix_total = price + percent_of(price, pix_pct)
    plans.append(
        InstallmentPlan(
            label="À VISTA (PIX)",
            installments=1,
            fee_percentage=pix_pct,
            total=pix_total,
            monthly_payment=pix_total,
            highlighted=True,
        )
    )

    credit_fees = sorted(
        (f for f in fees if f.payment_method == "credit" and 1 <= f.installments <= max_installments),
        key=lambda f: f.installments,
    )
    for fee in credit_fees:
        total = price + percent_of(price, fee.applied_fee)
        plans.append(
            InstallmentPlan(
                label=f"{fee.installments}x",
                installments=fee.installments,
                fee_percentage=fee.applied_fee,
                total=total,
                monthly_payment=round_cents(total / fee.installments),
                highlighted=fee.installments == HIGHLIGHTED_INSTALLMENTS,
            )
        )
    return plans


def catalog_installment(price: int) -> InstallmentOption:
    total = price + percent_of(price, CATALOG_INSTALLMENT_FEE)
    return InstallmentOption(
        installments=CATALOG_INSTALLMENTS,
        fee_percentage=CATALOG_INSTALLMENT_FEE,
        fee_amount=total - price,
        total_with_fee=total,
        monthly_payment=round_cents(total / CATALOG_INSTALLMENTS),
    )
