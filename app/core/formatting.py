# app/core/formatting.py
from decimal import Decimal, ROUND_HALF_UP

from app.core.config import get_settings

settings = get_settings()

CENTS = Decimal("0.01")


def quantize_money(amount: Decimal | int | float) -> Decimal:
    """Round to 2 decimal places, half-up (currency rounding)."""
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal) -> str:
    """
    Display string for a monetary amount.

    Example:
        Decimal("2200") -> "Rs. 2,200.00"
    """
    return f"{settings.CURRENCY_PREFIX} {quantize_money(amount):,.2f}"


def money_pair(amount: Decimal | int | float) -> tuple[float, str]:
    """
    Raw value and display string derived from one rounded Decimal.

    Always use this instead of formatting separately so that the number
    a client sums and the string it renders can never disagree.
    """
    value = quantize_money(amount)
    return float(value), format_money(value)


def stock_status(stock: int | None) -> str:
    stock = stock or 0
    if stock <= 0:
        return "Out of stock"
    if stock < settings.LOW_STOCK_THRESHOLD:
        return f"Only {stock} left in stock"
    return "In Stock"


def image_url(image_ref: str | None, folder: str = "products") -> str:
    """
    Resolve a stored image reference to a public URL.

    - None / empty -> placeholder image
    - absolute http(s) URL -> unchanged
    - anything else -> <MEDIA_BASE_URL>/<folder>/<ref>
    """
    if not image_ref:
        return settings.PLACEHOLDER_IMAGE_URL
    if image_ref.startswith(("http://", "https://")):
        return image_ref
    base = settings.MEDIA_BASE_URL.rstrip("/")
    return f"{base}/{folder}/{image_ref.lstrip('/')}"
