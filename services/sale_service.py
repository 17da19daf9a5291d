"""
Gravação e consulta de vendas do PDV.

O cabeçalho e os itens da venda são gravados na mesma transação: se algum
item falhar, a venda inteira é desfeita. O crédito do entregador é gravado
depois; se falhar, o erro vai para o log e a venda é mantida.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.customer import Customer
from models.product import Product
from models.sale import Sale, SaleItem
from services.delivery_service import DeliveryService, DeliverySplit, split_delivery
from services.errors import NotFoundError, ValidationError
from services.sale_calculations import (
    CartItem,
    CheckoutSummary,
    PaymentEntry,
    calculate_checkout,
    item_subtotal,
    item_total,
)
from utils.formatters import calculate_profit_margin

logger = logging.getLogger(__name__)

PERIODS = ("Hoje", "Últimos 7 dias", "Este mês", "Últimos 3 meses", "Este ano", "Geral")


@dataclass
class SaleInput:
    customer_id: Optional[int]
    items: List[CartItem]
    payments: List[PaymentEntry] = field(default_factory=list)
    delivery: Optional[DeliverySplit] = None
    delivery_person_id: Optional[int] = None
    promotional_discount: int = 0
    seller_name: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class SaleFilters:
    customer_id: Optional[int] = None
    seller_name: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    min_total: Optional[int] = None
    max_total: Optional[int] = None


def get_period(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """
    Converte o período escolhido na tela em (data inicial, data final).
    """
    today = today or date.today()
    if period == "Hoje":
        return today, today
    if period == "Últimos 7 dias":
        return today - timedelta(days=6), today
    if period == "Este mês":
        return today.replace(day=1), today
    if period == "Últimos 3 meses":
        return today - relativedelta(months=3), today
    if period == "Este ano":
        return today.replace(month=1, day=1), today
    return date(2000, 1, 1), today


class SaleService:
    @staticmethod
    def create_sale(db: Session, company_id: int, sale_input: SaleInput) -> Sale:
        if not sale_input.customer_id:
            raise ValidationError("customer_required", "Selecione um cliente antes de finalizar a venda")
        if not sale_input.items:
            raise ValidationError("empty_cart", "Adicione ao menos um produto ao carrinho")

        customer = (
            db.query(Customer)
            .filter(Customer.id == sale_input.customer_id, Customer.company_id == company_id)
            .first()
        )
        if not customer:
            raise NotFoundError("customer_not_found", "Cliente não encontrado", {"customer_id": sale_input.customer_id})
        for item in sale_input.items:
            SaleService._validate_item(item)

        delivery = sale_input.delivery or split_delivery(None)
        summary = calculate_checkout(
            sale_input.items,
            sale_input.payments,
            delivery,
            sale_input.promotional_discount,
        )
        if not summary.is_complete:
            raise ValidationError(
                "payment_incomplete",
                "O pagamento não cobre o total da venda",
                {"remaining": summary.remaining},
            )

        sale = Sale(
            company_id=company_id,
            customer_id=customer.id,
            seller_name=sale_input.seller_name,
            subtotal=summary.subtotal,
            discount_total=summary.discount_total,
            promotional_discount=summary.promotional_discount,
            fee_total=summary.fees_total,
            total=summary.amount_due,
            cost_total=summary.cost_total,
            profit=summary.net_profit,
            payment_methods=[p.to_dict() for p in summary.payments],
            notes=sale_input.notes,
            status="completed",
            delivery_type=summary.delivery_type,
            delivery_person_id=sale_input.delivery_person_id if delivery.needs_delivery_person else None,
            delivery_cost_store=summary.delivery_store_cost,
            delivery_cost_customer=summary.delivery_customer_cost,
            delivery_total=summary.delivery_total,
        )

        try:
            db.add(sale)
            db.flush()
            for item in sale_input.items:
                SaleService._add_item(db, company_id, sale, item)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Falha ao gravar a venda; operação desfeita")
            raise
        db.refresh(sale)
        logger.info("Venda #%s registrada: total=%s", sale.id, sale.total)

        if sale.delivery_person_id and sale.delivery_total > 0:
            try:
                DeliveryService.create_credit(db, company_id, sale, sale.delivery_person_id)
            except SQLAlchemyError:
                db.rollback()
                logger.error(
                    "Falha ao gerar crédito de entrega da venda #%s (entregador %s)",
                    sale.id,
                    sale.delivery_person_id,
                    exc_info=True,
                )
        return sale

    @staticmethod
    def _validate_item(item: CartItem) -> None:
        if item.quantity <= 0:
            raise ValidationError("invalid_quantity", "Quantidade inválida", {"product": item.name})
        if item.unit_price < 0:
            raise ValidationError("invalid_price", "Preço inválido", {"product": item.name})
        if not item.is_gift and not 0 <= item.discount <= item.unit_price:
            raise ValidationError(
                "invalid_discount",
                f"Desconto inválido para {item.name}",
                {"discount": item.discount, "unit_price": item.unit_price},
            )

    @staticmethod
    def _add_item(db: Session, company_id: int, sale: Sale, item: CartItem) -> SaleItem:
        product = None
        if item.product_id:
            product = (
                db.query(Product)
                .filter(Product.id == item.product_id, Product.company_id == company_id)
                .first()
            )
            if not product:
                raise NotFoundError("product_not_found", "Produto não encontrado", {"product_id": item.product_id})
            if product.track_inventory:
                stock = product.stock_quantity or 0
                if stock < item.quantity:
                    raise ValidationError(
                        "insufficient_stock",
                        f"Estoque insuficiente para {product.name}",
                        {"stock": stock, "quantity": item.quantity},
                    )
                product.stock_quantity = stock - item.quantity

        sale_item = SaleItem(
            sale_id=sale.id,
            product_id=item.product_id,
            product_name=item.name,
            product_sku=item.sku or (product.sku if product else None),
            quantity=item.quantity,
            unit_price=item.unit_price,
            unit_cost=item.unit_cost,
            discount=0 if item.is_gift else item.discount,
            subtotal=item_subtotal(item),
            total=item_total(item),
            is_gift=item.is_gift,
        )
        db.add(sale_item)
        return sale_item

    @staticmethod
    def get_sale(db: Session, company_id: int, sale_id: int) -> Sale:
        sale = db.query(Sale).filter(Sale.id == sale_id, Sale.company_id == company_id).first()
        if not sale:
            raise NotFoundError("sale_not_found", "Venda não encontrada", {"sale_id": sale_id})
        return sale

    @staticmethod
    def _filtered_query(db: Session, company_id: int, filters: Optional[SaleFilters]):
        filters = filters or SaleFilters()
        query = db.query(Sale).filter(Sale.company_id == company_id)
        if filters.customer_id:
            query = query.filter(Sale.customer_id == filters.customer_id)
        if filters.seller_name:
            query = query.filter(Sale.seller_name.ilike(f"%{filters.seller_name}%"))
        if filters.status:
            query = query.filter(Sale.status == filters.status)
        if filters.start_date:
            query = query.filter(Sale.created_at >= datetime.combine(filters.start_date, time.min))
        if filters.end_date:
            query = query.filter(Sale.created_at <= datetime.combine(filters.end_date, time.max))
        if filters.min_total is not None:
            query = query.filter(Sale.total >= filters.min_total)
        if filters.max_total is not None:
            query = query.filter(Sale.total <= filters.max_total)
        return query

    @staticmethod
    def list_sales(db: Session, company_id: int, filters: Optional[SaleFilters] = None, limit: int = 200) -> List[Sale]:
        return (
            SaleService._filtered_query(db, company_id, filters)
            .order_by(Sale.created_at.desc(), Sale.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def _reverse_sale(db: Session, company_id: int, sale_id: int, new_status: str) -> Sale:
        sale = SaleService.get_sale(db, company_id, sale_id)
        if sale.status != "completed":
            raise ValidationError(
                "sale_not_completed",
                "Apenas vendas concluídas podem ser canceladas ou estornadas",
                {"status": sale.status},
            )
        try:
            for item in sale.items:
                if not item.product_id:
                    continue
                product = db.get(Product, item.product_id)
                if product and product.track_inventory:
                    product.stock_quantity = (product.stock_quantity or 0) + item.quantity
            DeliveryService.cancel_sale_credits(db, company_id, sale.id)
            sale.status = new_status
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Falha ao alterar status da venda #%s para %s", sale_id, new_status)
            raise
        db.refresh(sale)
        logger.info("Venda #%s marcada como %s", sale.id, new_status)
        return sale

    @staticmethod
    def cancel_sale(db: Session, company_id: int, sale_id: int) -> Sale:
        return SaleService._reverse_sale(db, company_id, sale_id, "cancelled")

    @staticmethod
    def refund_sale(db: Session, company_id: int, sale_id: int) -> Sale:
        return SaleService._reverse_sale(db, company_id, sale_id, "refunded")

    @staticmethod
    def sales_summary(db: Session, company_id: int, filters: Optional[SaleFilters] = None) -> dict:
        """
        Totais das vendas concluídas que atendem aos filtros.
        """
        query = SaleService._filtered_query(db, company_id, filters).filter(Sale.status == "completed")
        count, revenue, profit, cost = query.with_entities(
            func.count(Sale.id),
            func.coalesce(func.sum(Sale.total), 0),
            func.coalesce(func.sum(Sale.profit), 0),
            func.coalesce(func.sum(Sale.cost_total), 0),
        ).one()
        revenue, profit, cost = int(revenue), int(profit), int(cost)
        return {
            "count": count,
            "revenue": revenue,
            "profit": profit,
            "cost": cost,
            "average_ticket": revenue // count if count else 0,
            "margin": calculate_profit_margin(profit, revenue),
        }

    @staticmethod
    def top_products(db: Session, company_id: int, filters: Optional[SaleFilters] = None, limit: int = 10) -> List[tuple]:
        """
        Produtos mais vendidos (nome, quantidade, receita) nas vendas concluídas.
        """
        sale_ids = (
            SaleService._filtered_query(db, company_id, filters)
            .filter(Sale.status == "completed")
            .with_entities(Sale.id)
        )
        return (
            db.query(
                SaleItem.product_name,
                func.sum(SaleItem.quantity),
                func.coalesce(func.sum(SaleItem.total), 0),
            )
            .filter(SaleItem.sale_id.in_(sale_ids))
            .group_by(SaleItem.product_name)
            .order_by(func.sum(SaleItem.quantity).desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def checkout_from_sale(sale: Sale) -> CheckoutSummary:
        """
        Recalcula o resumo de fechamento a partir de uma venda gravada (recibo).
        """
        items = [
            CartItem(
                product_id=i.product_id,
                name=i.product_name,
                unit_price=i.unit_price,
                unit_cost=i.unit_cost,
                quantity=i.quantity,
                discount=i.discount,
                is_gift=i.is_gift,
                sku=i.product_sku,
            )
            for i in sale.items
        ]
        payments = [PaymentEntry.from_dict(p) for p in (sale.payment_methods or [])]
        delivery = DeliverySplit(
            sale.delivery_type,
            sale.delivery_cost_store,
            sale.delivery_cost_customer,
            sale.delivery_total,
            bool(sale.delivery_person_id),
        )
        return calculate_checkout(items, payments, delivery, sale.promotional_discount or 0)
