from datetime import datetime

from nvago.models.order import Order, Sale
from nvago.services.sales import build_sale_from_order, summarize_sales


def make_order(**overrides):
    fields = dict(
        id=7,
        first_name="Kriz",
        last_name="Cultura",
        contact="09171234567",
        address="Quezon City",
        email="kriz@example.com",
        product_name="VINYL STICKER",
        variant="Glossy",
        height=3.0,
        width=4.0,
        quantity=5,
        has_file=False,
        total=6150.0,
    )
    fields.update(overrides)
    return Order(**fields)


def test_sale_splits_out_layout_fee():
    sale = build_sale_from_order(make_order(), now=datetime(2025, 5, 19, 9, 30))
    assert sale.order_id == 7
    assert sale.layout_fee == 150
    assert sale.subtotal == 6000
    assert sale.unit_price == 1200
    assert sale.total_amount == 6150
    assert sale.customer_name == "Kriz Cultura"
    assert sale.product_name == "Glossy"
    assert sale.variant == "4x3 in"
    assert sale.sale_month == "May"
    assert sale.sale_year == 2025


def test_sale_with_customer_file_has_no_layout_fee():
    sale = build_sale_from_order(make_order(has_file=True, quantity=12, total=11520.0))
    assert sale.layout_fee == 0
    assert sale.unit_price == 960


def test_sale_defaults_for_sparse_orders():
    order = make_order(email=None, first_name="", last_name="", variant=None, product_name=None,
                       height=None, width=None, total=100.0, quantity=0)
    sale = build_sale_from_order(order)
    assert sale.customer_email == "unknown@local"
    assert sale.customer_name == "Customer"
    assert sale.product_name == "Order"
    assert sale.variant is None
    assert sale.quantity == 1
    # total below the layout fee never yields a negative subtotal
    assert sale.subtotal == 0


def test_summarize_sales():
    sales = [
        Sale(order_id=1, quantity=5, subtotal=6000, layout_fee=150, total_amount=6150),
        Sale(order_id=2, quantity=12, subtotal=11520, layout_fee=0, total_amount=11520),
    ]
    assert summarize_sales(sales) == {
        "transactions": 2,
        "total_quantity": 17,
        "subtotal": 17520,
        "layout_fees": 150,
        "grand_total": 17670,
    }
    assert summarize_sales([])["transactions"] == 0
