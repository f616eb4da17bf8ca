from decimal import Decimal

from app.core.formatting import format_money, image_url, money_pair, stock_status


def test_money_pair_uses_one_rounded_value():
    raw, display = money_pair(Decimal("1234.565"))

    assert raw == 1234.57
    assert display == "Rs. 1,234.57"


def test_format_money_pads_cents():
    assert format_money(Decimal("2200")) == "Rs. 2,200.00"
    assert format_money(Decimal("0")) == "Rs. 0.00"


def test_money_pair_accepts_floats_from_aggregates():
    assert money_pair(499.995) == (500.0, "Rs. 500.00")


def test_stock_status_thresholds():
    assert stock_status(0) == "Out of stock"
    assert stock_status(-3) == "Out of stock"
    assert stock_status(None) == "Out of stock"
    assert stock_status(1) == "Only 1 left in stock"
    assert stock_status(9) == "Only 9 left in stock"
    assert stock_status(10) == "In Stock"


def test_image_url_resolution():
    assert image_url(None) == "http://media.test/images/placeholder.jpg"
    assert image_url("tee.jpg") == "http://media.test/storage/products/tee.jpg"
    assert image_url("https://cdn.example.org/x.png") == "https://cdn.example.org/x.png"
    assert (
        image_url("men.jpg", folder="categories")
        == "http://media.test/storage/categories/men.jpg"
    )
