"""
Gera HTML do recibo não fiscal da venda do PDV, conforme config de layout.
Os valores vêm do mesmo resumo de fechamento usado na tela do PDV.
"""
from html import escape

from services.delivery_service import delivery_label
from services.sale_service import SaleService
from utils.documents import format_cpf_cnpj
from utils.formatters import format_currency, format_date, payment_method_label
from utils.receipt_config import load_receipt_config


def _row(label: str, value: str, css: str = "line") -> str:
    return f"<div class='{css} row'><span>{escape(label)}</span><span>{escape(value)}</span></div>"


def build_receipt_html(sale, items: list, customer=None, config: dict = None, logo_url: str = None) -> str:
    """
    sale: Sale gravada. items: SaleItem da venda. customer: Customer ou None.
    config: dict de layout (ou None para usar load_receipt_config()).
    Retorna HTML completo (documento) para exibir em iframe e imprimir.
    """
    if config is None:
        config = load_receipt_config()
    w_mm = config.get("paper_width_mm", 80)
    margin_mm = config.get("margin_mm", 5)
    font_pt = config.get("font_size_pt", 10)
    header = escape((config.get("header_text") or "").strip())
    subheader = escape((config.get("subheader_text") or "Recibo nao fiscal").strip())
    footer = escape((config.get("footer_text") or "").strip())
    summary = SaleService.checkout_from_sale(sale)

    linhas = []
    if config.get("show_logo") and logo_url:
        linhas.append(f"<div class='header'><img src='{escape(logo_url)}' style='max-width:60%'></div>")
    linhas.append(f"<div class='header'>{header}</div>")
    linhas.append(f"<div class='subheader'>{subheader}</div>")
    linhas.append(f"<div class='line'>Venda #{sale.id} &nbsp; {format_date(sale.created_at)}</div>")
    if sale.seller_name:
        linhas.append(f"<div class='line'>Vendedor: {escape(sale.seller_name)}</div>")
    if customer is not None and config.get("show_customer", True):
        linhas.append(f"<div class='line'>Cliente: {escape(customer.name)}</div>")
        if customer.cpf_cnpj:
            linhas.append(f"<div class='line'>CPF/CNPJ: {format_cpf_cnpj(customer.cpf_cnpj)}</div>")
    linhas.append("<div class='line'>--------------------------------</div>")

    for it in items:
        nome = escape((it.product_name or "-")[:28])
        if it.is_gift:
            nome += " (BRINDE)"
        linhas.append(f"<div class='line'>{nome}</div>")
        linhas.append(
            f"<div class='line'>{it.quantity} x {format_currency(it.unit_price)} = {format_currency(it.total)}</div>"
        )
        if it.discount and not it.is_gift:
            linhas.append(f"<div class='line small'>Desconto: -{format_currency(it.discount * it.quantity)}</div>")

    linhas.append("<div class='line'>--------------------------------</div>")
    linhas.append(_row("Subtotal", format_currency(summary.subtotal)))
    if summary.items_discount:
        linhas.append(_row("Descontos", f"-{format_currency(summary.items_discount)}"))
    if summary.gift_discount:
        linhas.append(_row("Brindes", f"-{format_currency(summary.gift_discount)}"))
    if summary.promotional_discount:
        linhas.append(_row("Desconto promocional", f"-{format_currency(summary.promotional_discount)}"))
    if summary.delivery_customer_cost:
        linhas.append(_row(f"Frete ({delivery_label(summary.delivery_type)})", format_currency(summary.delivery_customer_cost)))
    elif summary.delivery_type:
        linhas.append(_row(delivery_label(summary.delivery_type), "Grátis"))
    if summary.fees_total and config.get("show_payment_fees", True):
        linhas.append(_row("Taxas de pagamento", format_currency(summary.fees_total)))
    linhas.append(_row("TOTAL", format_currency(summary.amount_due), "line total"))

    linhas.append("<div class='line'>--------------------------------</div>")
    for p in summary.payments:
        label = payment_method_label(p.method)
        if p.method == "credit" and p.installments > 1:
            label += f" {p.installments}x"
        linhas.append(_row(label, format_currency(p.total_with_fee if p.total_with_fee is not None else p.amount)))
    if summary.change:
        linhas.append(_row("Troco", format_currency(summary.change)))
    if sale.status != "completed":
        linhas.append(f"<div class='line total'>VENDA {'CANCELADA' if sale.status == 'cancelled' else 'ESTORNADA'}</div>")
    if footer:
        linhas.append(f"<div class='footer'>{footer}</div>")

    return _document(sale.id, "\n".join(linhas), w_mm, margin_mm, font_pt)


def _document(sale_id: int, body: str, width_mm: int, margin_mm: int, font_pt: int) -> str:
    # Largura em px aproximada para a pré-visualização (80mm ~ 302px)
    width_px = max(200, min(400, width_mm * 3.78))
    return f"""<!DOCTYPE html>
<html lang="pt-BR">
<head>
<meta charset="utf-8">
<title>Recibo #{sale_id}</title>
<style>
  body {{ width: {width_mm}mm; max-width: {width_px}px; margin: {margin_mm}mm auto; padding: 8px;
         font: {font_pt}pt monospace; color: #000; background: #fff; }}
  .header, .subheader, .footer, .actions {{ text-align: center; }}
  .header {{ font-weight: bold; margin-bottom: 4px; }}
  .subheader, .footer {{ font-size: 0.9em; }}
  .subheader {{ margin-bottom: 8px; }}
  .footer, .actions {{ margin-top: 12px; }}
  .line {{ margin: 2px 0; word-break: break-word; }}
  .row {{ display: flex; justify-content: space-between; }}
  .small {{ font-size: 0.85em; }}
  .total {{ font-weight: bold; margin-top: 6px; }}
  .actions button {{ padding: 8px 16px; border: 0; border-radius: 4px; background: #1a73e8; color: #fff; cursor: pointer; }}
  @media print {{ .actions {{ display: none; }} }}
</style>
</head>
<body>
<main class="receipt">
{body}
</main>
<div class="actions"><button type="button" onclick="window.print();">Imprimir</button></div>
</body>
</html>"""
