"""
Exportação do catálogo: mensagem de WhatsApp, orçamento e PDF.
"""
import io
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Sequence
from urllib.parse import quote

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from services.errors import ValidationError
from services.installment_calculator import CATALOG_INSTALLMENTS, catalog_installment
from utils.formatters import format_currency, format_date, only_digits

logger = logging.getLogger(__name__)

CUSTOMER_TYPES = {
    "retail": "Varejo",
    "wholesale": "Atacado",
    "resale": "Revenda",
}

SEPARATOR = "━━━━━━━━━━━━━━━━━━━━━━"
_RAM_STORAGE_SUFFIX = re.compile(r",?\s*\d+GB/\d+GB\s*$", re.IGNORECASE)


@dataclass
class CatalogGroup:
    name: str
    model: str
    ram: str
    storage: str
    price: int
    colors: List[str] = field(default_factory=list)


def price_for_customer_type(product, customer_type: str = "retail") -> int:
    """
    Preço conforme o tipo de cliente. Atacado cai para varejo; revenda cai
    para atacado e depois varejo.
    """
    if customer_type == "wholesale":
        return product.price_wholesale or product.price_retail
    if customer_type == "resale":
        return product.price_reseller or product.price_wholesale or product.price_retail
    return product.price_retail


def _product_color(product) -> str:
    color = getattr(product, "color", None)
    if color is not None and getattr(color, "name", None):
        return color.name
    return (product.specs or {}).get("color") or "Sem cor"


def group_products_by_variant(products: Sequence, customer_type: str = "retail") -> List[CatalogGroup]:
    grouped = {}
    for product in products:
        clean_name = _RAM_STORAGE_SUFFIX.sub("", product.name or "").strip()
        specs = product.specs or {}
        ram = specs.get("ram") or "N/A"
        storage = specs.get("storage") or "N/A"
        model = product.model.name if getattr(product, "model", None) else clean_name
        color = _product_color(product)
        key = (model, ram, storage)

        if key in grouped:
            if color not in grouped[key].colors:
                grouped[key].colors.append(color)
        else:
            grouped[key] = CatalogGroup(
                name=clean_name,
                model=model,
                ram=ram,
                storage=storage,
                price=price_for_customer_type(product, customer_type),
                colors=[color],
            )
    return sorted(grouped.values(), key=lambda g: g.name.lower())


def generate_catalog_message(
    products: Sequence,
    customer_type: str = "retail",
    category_name: Optional[str] = None,
    today: Optional[date] = None,
) -> str:
    if not products:
        return "Nenhum produto disponível no momento."

    groups = group_products_by_variant(products, customer_type)
    if category_name:
        lines = [f"📱 *CATÁLOGO - {category_name.upper()}*"]
    else:
        lines = ["📚 *CATÁLOGO COMPLETO*"]
    lines.append(f"📅 Data: {format_date(today or date.today())}")
    lines.extend(["", SEPARATOR, ""])

    for index, group in enumerate(groups, start=1):
        installment = catalog_installment(group.price)
        lines.append(f"{index}. *{group.name}*")
        lines.append(f"   📱 {group.ram}/{group.storage}")
        lines.append(f"   💰 {format_currency(group.price)} à vista")
        lines.append(
            f"   💳 {CATALOG_INSTALLMENTS}x de {format_currency(installment.monthly_payment)} "
            f"({format_currency(installment.total_with_fee)})"
        )
        lines.append(f"   🎨 Cores: {', '.join(group.colors)}")
        lines.append("")

    lines.extend([SEPARATOR, ""])
    lines.append("📞 *Entre em contato para mais informações!*")
    lines.append(f"🛒 Total: {len(groups)} {'modelo' if len(groups) == 1 else 'modelos'}")
    return "\n".join(lines)


def generate_quote_message(
    product_name: str,
    color: Optional[str],
    plan,
    delivery: Optional[dict] = None,
    company_name: str = "",
    today: Optional[date] = None,
) -> str:
    """
    Orçamento de um produto para o WhatsApp.
    delivery: None para retirada ou {"address": ..., "notes": ...} para entrega.
    """
    lines = [
        "*📱 ORÇAMENTO DE PRODUTOS*",
        f"📅 Data: {format_date(today or date.today())}",
        "",
        "*ITENS:*",
        f"• {product_name}",
    ]
    if color:
        lines.append(f"  Cor: {color}")
    lines.append(f"  {format_currency(plan.total)} à vista")
    if plan.installments > 1:
        lines.append(
            f"  💳 {plan.installments}x de {format_currency(plan.monthly_payment)} "
            f"(Total: {format_currency(plan.total)})"
        )

    if delivery and delivery.get("address"):
        lines.extend(["", "*🚚 ENTREGA:*", delivery["address"]])
        if delivery.get("notes"):
            lines.append(f"Obs: {delivery['notes']}")
    else:
        lines.extend(["", "*🏪 RETIRADA NA LOJA*"])

    lines.extend(["", "---"])
    if company_name:
        lines.append(f"🎯 *Orçamento exclusivo {company_name}!*")
    lines.append("Garanta o seu agora enquanto está disponível em estoque! 🔥")
    return "\n".join(lines)


def build_whatsapp_link(phone: str, message: str, mobile: bool = False) -> str:
    digits = only_digits(phone)
    if len(digits) < 10:
        raise ValidationError(
            "invalid_phone",
            "Número do WhatsApp inválido. Configure o telefone da loja.",
            {"phone": phone},
        )
    base = "https://api.whatsapp.com/send" if mobile else "https://web.whatsapp.com/send"
    return f"{base}?phone=55{digits}&text={quote(message, safe='')}"


# ----- PDF -----

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 15 * mm
ROW_HEIGHT = 16 * mm
BRAND_COLOR = colors.HexColor("#1f4e79")


def _draw_header(pdf: canvas.Canvas, company_name: str, title: str, generated_at: datetime) -> float:
    pdf.setFillColor(BRAND_COLOR)
    pdf.rect(0, PAGE_HEIGHT - 30 * mm, PAGE_WIDTH, 30 * mm, fill=1, stroke=0)
    pdf.setFillColor(colors.white)
    pdf.setFont("Helvetica-Bold", 18)
    pdf.drawString(MARGIN, PAGE_HEIGHT - 15 * mm, company_name)
    pdf.setFont("Helvetica", 11)
    pdf.drawString(MARGIN, PAGE_HEIGHT - 23 * mm, title)
    pdf.drawRightString(PAGE_WIDTH - MARGIN, PAGE_HEIGHT - 23 * mm, format_date(generated_at))
    pdf.setFillColor(colors.black)
    return PAGE_HEIGHT - 38 * mm


def _draw_footer(pdf: canvas.Canvas, page: int, phone: Optional[str]) -> None:
    pdf.setFont("Helvetica", 8)
    pdf.setFillColor(colors.grey)
    text = "Preços sujeitos a alteração sem aviso prévio."
    if phone:
        text += f"  WhatsApp: {phone}"
    pdf.drawString(MARGIN, 10 * mm, text)
    pdf.drawRightString(PAGE_WIDTH - MARGIN, 10 * mm, f"Página {page}")
    pdf.setFillColor(colors.black)


def build_catalog_pdf(
    products: Sequence,
    customer_type: str = "retail",
    company=None,
    category_name: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> bytes:
    """
    Catálogo em PDF: cabeçalho com a loja, quadro de resumo e uma linha por variante.
    """
    generated_at = generated_at or datetime.now()
    company_name = getattr(company, "name", None) or "Catálogo"
    phone = getattr(company, "phone", None)
    title = f"Catálogo - {category_name}" if category_name else "Catálogo completo"
    title += f" ({CUSTOMER_TYPES.get(customer_type, customer_type)})"
    groups = group_products_by_variant(products, customer_type)

    output = io.BytesIO()
    pdf = canvas.Canvas(output, pagesize=A4)
    pdf.setTitle(title)
    page = 1
    y = _draw_header(pdf, company_name, title, generated_at)

    # Quadro de resumo
    pdf.setStrokeColor(BRAND_COLOR)
    pdf.roundRect(MARGIN, y - 14 * mm, PAGE_WIDTH - 2 * MARGIN, 14 * mm, 3 * mm, fill=0)
    pdf.setFont("Helvetica", 10)
    pdf.drawString(MARGIN + 4 * mm, y - 6 * mm, f"Modelos: {len(groups)}")
    pdf.drawString(
        MARGIN + 4 * mm,
        y - 11 * mm,
        f"Parcelamento em até {CATALOG_INSTALLMENTS}x no cartão de crédito",
    )
    y -= 22 * mm

    if not groups:
        pdf.setFont("Helvetica-Oblique", 11)
        pdf.drawString(MARGIN, y, "Nenhum produto disponível no momento.")

    for index, group in enumerate(groups, start=1):
        if y - ROW_HEIGHT < 20 * mm:
            _draw_footer(pdf, page, phone)
            pdf.showPage()
            page += 1
            y = _draw_header(pdf, company_name, title, generated_at)

        installment = catalog_installment(group.price)
        if index % 2 == 0:
            pdf.setFillColor(colors.HexColor("#f2f5f9"))
            pdf.rect(MARGIN, y - ROW_HEIGHT + 3 * mm, PAGE_WIDTH - 2 * MARGIN, ROW_HEIGHT, fill=1, stroke=0)
            pdf.setFillColor(colors.black)
        pdf.setFont("Helvetica-Bold", 11)
        pdf.drawString(MARGIN + 2 * mm, y - 2 * mm, f"{index}. {group.name}")
        pdf.setFont("Helvetica", 9)
        pdf.drawString(
            MARGIN + 2 * mm,
            y - 7 * mm,
            f"{group.ram}/{group.storage}  |  Cores: {', '.join(group.colors)}",
        )
        pdf.setFont("Helvetica-Bold", 11)
        pdf.drawRightString(PAGE_WIDTH - MARGIN - 2 * mm, y - 2 * mm, f"{format_currency(group.price)} à vista")
        pdf.setFont("Helvetica", 9)
        pdf.drawRightString(
            PAGE_WIDTH - MARGIN - 2 * mm,
            y - 7 * mm,
            f"{CATALOG_INSTALLMENTS}x de {format_currency(installment.monthly_payment)}",
        )
        y -= ROW_HEIGHT

    _draw_footer(pdf, page, phone)
    pdf.showPage()
    pdf.save()
    logger.info("Catálogo em PDF gerado: %s modelo(s), %s página(s)", len(groups), page)
    return output.getvalue()
