"""
Branded PNG rendering for vouchers.

Cards are drawn with Pillow and carry a QR code of the voucher id
(generated with qrcode) so the redeem counter can scan instead of typing.
The drawing helpers here are shared with the package invoice and bill
renderers.
"""

from io import BytesIO

import qrcode
from django.conf import settings
from django.utils import timezone
from PIL import Image, ImageDraw, ImageFont

from .models import VoucherType


BRAND_PURPLE = '#4A2A7B'
GOLD_START = (0xEA, 0xCD, 0x81)
GOLD_END = (0xD4, 0xB3, 0x68)
BLUSH = '#FEF6F6'
ORANGE = '#E59333'
ROSE = '#D9534F'
INK = '#000000'
MUTED = '#333333'

CARD_WIDTH = 1200
CARD_HEIGHT = 600
CARD_SPLIT_X = 700


def load_font(size, bold=False, italic=False, mono=False):
    """DejaVu when the system has it, Pillow's bundled font otherwise."""
    family = 'DejaVuSansMono' if mono else 'DejaVuSans'
    if bold:
        name = f'{family}-Bold.ttf'
    elif italic:
        name = f'{family}-Oblique.ttf'
    else:
        name = f'{family}.ttf'
    try:
        return ImageFont.truetype(name, size)
    except OSError:
        return ImageFont.load_default(size=size)


def draw_text_right(draw, right_x, y, text, font, fill):
    """Draw text so that it ends at right_x."""
    width = draw.textlength(text, font=font)
    draw.text((right_x - width, y), text, font=font, fill=fill)


def draw_text_center(draw, center_x, y, text, font, fill):
    width = draw.textlength(text, font=font)
    draw.text((center_x - width / 2, y), text, font=font, fill=fill)


def make_qr_image(data, size):
    """QR code for data as an RGB Pillow image of size x size pixels."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white").convert('RGB')
    return img.resize((size, size), Image.NEAREST)


def to_png_bytes(image):
    buffer = BytesIO()
    image.save(buffer, format='PNG')
    return buffer.getvalue()


def format_date(value):
    """dd/mm/yyyy in the project time zone."""
    if hasattr(value, 'tzinfo') and timezone.is_aware(value):
        value = timezone.localtime(value)
    return value.strftime('%d/%m/%Y')


def _gold_gradient(draw, left, right, height):
    span = right - left
    for offset in range(span):
        ratio = offset / span
        colour = tuple(
            round(start + (end - start) * ratio)
            for start, end in zip(GOLD_START, GOLD_END)
        )
        draw.line([(left + offset, 0), (left + offset, height)], fill=colour)


def voucher_title(voucher):
    if voucher.voucher_type == VoucherType.FAMILY_AND_FRIENDS:
        return 'FAMILY & FRIENDS PRIVILEGE VOUCHER'
    return 'PARTNER PRIVILEGE VOUCHER'


def render_voucher_card(voucher) -> bytes:
    """
    Render the branded privilege voucher as PNG bytes.

    Layout: blush panel on the left with brand and discount, gold panel on
    the right with recipient, voucher id, validity and a QR code of the id.
    """
    image = Image.new('RGB', (CARD_WIDTH, CARD_HEIGHT), BLUSH)
    draw = ImageDraw.Draw(image)
    _gold_gradient(draw, CARD_SPLIT_X, CARD_WIDTH, CARD_HEIGHT)

    # Header
    draw.text((60, 30), settings.BRAND_NAME, font=load_font(50, bold=True), fill=BRAND_PURPLE)
    draw.text((60, 92), settings.BRAND_TAGLINE, font=load_font(20), fill=BRAND_PURPLE)
    draw_text_right(draw, 1140, 50, voucher_title(voucher), load_font(28, bold=True), INK)

    # Discount
    draw.text((60, 195), 'SPECIAL DISCOUNT', font=load_font(24), fill=INK)
    draw.text((60, 230), f"{voucher.discount_percentage}%", font=load_font(160, bold=True), fill=ORANGE)
    draw.text((150, 410), 'OFF', font=load_font(60), fill=INK)

    # Details
    quote_font = load_font(20, italic=True)
    draw.text((720, 170), 'This exclusive treat awaits you,', font=quote_font, fill=ROSE)
    draw.text((720, 200), 'courtesy of someone who cares.', font=quote_font, fill=ROSE)

    label_font = load_font(20, bold=True)
    value_font = load_font(20)
    rows = [
        ('PARTNER NAME:', voucher.recipient_name),
        ('VOUCHER ID:', voucher.id),
        ('VALIDITY:', format_date(voucher.expiry_date)),
    ]
    for index, (label, value) in enumerate(rows):
        y = 270 + index * 45
        draw.text((720, y), label, font=label_font, fill=INK)
        draw.text((900, y), str(value), font=value_font, fill=INK)

    qr = make_qr_image(voucher.id, 130)
    image.paste(qr, (1040, 420))

    # Footer
    footer_font = load_font(15)
    if voucher.outlet:
        outlet_line = f"Issued at {voucher.outlet.name}"
        if voucher.outlet.location:
            outlet_line += f", {voucher.outlet.location}"
        draw.text((60, 520), outlet_line, font=footer_font, fill=MUTED)
    draw.text(
        (60, 548),
        '* Not applicable on Hair Treatments & Bridal makeup. '
        'Valid only at the issuing store, please book an appointment.',
        font=footer_font,
        fill=MUTED,
    )

    return to_png_bytes(image)
