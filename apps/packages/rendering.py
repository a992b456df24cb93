"""
Receipt-style PNGs for prepaid packages.

The invoice is printed when a package is sold; the bill is printed for
each redemption transaction and shows every service at MRP fully
discounted, since the customer already paid for it up front.
"""

from django.conf import settings
from django.utils import timezone
from PIL import Image, ImageDraw

from apps.vouchers.rendering import (
    load_font,
    draw_text_right,
    draw_text_center,
    to_png_bytes,
)

from .models import bill_number


RECEIPT_WIDTH = 450
PADDING = 25
TOTALS_LABEL_X = PADDING + 150
INK = '#000000'
SEPARATOR = '-' * 42


def money(value):
    return f"{settings.CURRENCY_SYMBOL}{value:.2f}"


def receipt_datetime(value):
    """('19 OCT 2026', '04:30 PM') in the project time zone."""
    value = timezone.localtime(value)
    return value.strftime('%d %b %Y').upper(), value.strftime('%I:%M %p')


def fit_text(draw, text, font, max_width):
    """Cut text with an ellipsis so it is at most max_width pixels wide."""
    if draw.textlength(text, font=font) <= max_width:
        return text
    while text and draw.textlength(text + '...', font=font) > max_width:
        text = text[:-1]
    return text.rstrip() + '...'


class Receipt:
    """Cursor-based drawing on a white, fixed-width receipt."""

    def __init__(self, height):
        self.image = Image.new('RGB', (RECEIPT_WIDTH, height), '#FFFFFF')
        self.draw = ImageDraw.Draw(self.image)
        self.y = 0

    def centered(self, text, font, advance):
        draw_text_center(self.draw, RECEIPT_WIDTH / 2, self.y, text, font, INK)
        self.y += advance

    def left(self, text, font):
        self.draw.text((PADDING, self.y), text, font=font, fill=INK)

    def right(self, text, font):
        draw_text_right(self.draw, RECEIPT_WIDTH - PADDING, self.y, text, font, INK)

    def separator(self, advance=25):
        self.centered(SEPARATOR, load_font(14, mono=True), advance)

    def rule(self):
        self.draw.line(
            [(TOTALS_LABEL_X - 10, self.y), (RECEIPT_WIDTH - PADDING, self.y)],
            fill=INK,
            width=2,
        )

    def total_row(self, label, value, bold=False):
        font = load_font(16, bold=bold, mono=True)
        draw_text_right(self.draw, TOTALS_LABEL_X, self.y, label, font, INK)
        self.right(value, font)

    def header(self, outlet):
        """Brand, tagline and the outlet block."""
        self.y = 25
        self.centered(settings.BRAND_NAME, load_font(40, bold=True), 50)
        self.centered(settings.BRAND_TAGLINE, load_font(16), 30)

        small = load_font(14, mono=True)
        if outlet is not None:
            self.centered(outlet.name, load_font(18, bold=True, mono=True), 24)
            for line in (outlet.address or '').splitlines():
                self.centered(line, small, 18)
            self.centered(f"GSTIN: {outlet.gstin}", small, 20)
            self.centered(f"PHONE: {outlet.phone}", small, 20)
        self.separator()

    def customer_block(self, name, mobile, bill_no, when):
        small = load_font(14, mono=True)
        date_text, time_text = receipt_datetime(when)
        self.left(fit_text(self.draw, f"NAME: {name}", small, RECEIPT_WIDTH - 2 * PADDING), small)
        self.y += 20
        self.left(f"PHONE: {mobile}", small)
        self.y += 25
        self.left(f"BILL NO: {bill_no}", small)
        self.right(f"DATE: {date_text}", small)
        self.y += 20
        self.right(f"TIME: {time_text}", small)
        self.y += 20
        self.separator()

    def column_heads(self, amount_label):
        bold = load_font(14, bold=True, mono=True)
        self.left('ITEM NAME', bold)
        self.right(amount_label, bold)
        self.y += 18
        self.left('QTY X PRICE', bold)
        self.y += 15
        self.separator()

    def item(self, name, price, amount, mrp=None):
        name_font = load_font(16, bold=True, mono=True)
        self.left(fit_text(self.draw, name.upper(), name_font, RECEIPT_WIDTH - 2 * PADDING), name_font)
        self.y += 20
        small = load_font(14, mono=True)
        self.left(f"1 X {price}", small)
        if mrp is not None:
            self.draw.text((PADDING + 90, self.y), f"[MRP {mrp:.2f}]", font=small, fill=INK)
        self.right(amount, load_font(16, mono=True))
        self.y += 28

    def totals(self, subtotal, discount, total):
        self.y += 5
        self.total_row('SUBTOTAL:', money(subtotal))
        self.y += 25
        self.total_row('DISCOUNT:', f"- {money(discount)}")
        self.y += 22
        self.rule()
        self.y += 10
        self.total_row('TOTAL AMOUNT:', money(total), bold=True)
        self.y += 24
        self.rule()

    def footer(self, extra_lines=()):
        small = load_font(14, mono=True)
        self.y += 20
        for line in extra_lines:
            self.centered(line, load_font(14, bold=True, mono=True), 22)
        self.centered('THANK YOU VISIT AGAIN!', load_font(14, bold=True, mono=True), 20)
        self.centered('- - - * - - -', small, 20)

    def png(self):
        return to_png_bytes(self.image)


def _receipt_height(outlet, item_count):
    address_lines = len((outlet.address or '').splitlines()) if outlet is not None else 0
    return 640 + address_lines * 18 + item_count * 48


def render_package_invoice(package) -> bytes:
    """
    Sale invoice for a customer package as PNG bytes.

    The template's service value is the subtotal, the gap to the package
    value is the discount and the customer pays the package value.
    """
    receipt = Receipt(_receipt_height(package.outlet, 1))
    receipt.header(package.outlet)
    receipt.customer_block(
        package.customer_name,
        package.customer_mobile,
        package.invoice_number,
        package.assigned_date,
    )
    receipt.column_heads('AMOUNT')
    receipt.item(package.template_name, money(package.package_value), money(package.package_value))
    receipt.separator()
    receipt.totals(
        subtotal=package.service_value,
        discount=package.service_value - package.package_value,
        total=package.package_value,
    )
    receipt.footer([f"REMAINING BALANCE: {money(package.remaining_service_value)}"])
    return receipt.png()


def render_service_bill(package, records) -> bytes:
    """
    Bill for one redemption transaction as PNG bytes.

    Every service is listed at MRP and discounted in full, so the total
    is always zero.
    """
    records = list(records)
    subtotal = sum(record.service_value for record in records)

    receipt = Receipt(_receipt_height(package.outlet, len(records)))
    receipt.header(package.outlet)
    receipt.customer_block(
        package.customer_name,
        package.customer_mobile,
        bill_number(records[0].transaction_id),
        records[0].redeemed_date,
    )
    receipt.column_heads('AMOUNT (SAVINGS)')
    for record in records:
        receipt.item(
            record.service_name,
            "0.00",
            f"0 ({record.service_value:.2f})",
            mrp=record.service_value,
        )
    receipt.separator()
    receipt.totals(subtotal=subtotal, discount=subtotal, total=0)
    receipt.footer()
    return receipt.png()
