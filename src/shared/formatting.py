"""Display formatting shared by API responses and notification emails."""

from datetime import datetime


def format_order_date(value: datetime) -> str:
    """`Monday, 2 January 2006` style, without a zero-padded day."""
    return f"{value:%A}, {value.day} {value:%B %Y}"


def format_rupiah(amount: int) -> str:
    """`Rp15,000.00` style amounts."""
    return f"Rp{amount:,.2f}"
