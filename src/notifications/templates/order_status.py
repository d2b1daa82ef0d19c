"""Order status template — sent whenever an order reaches a customer-visible status."""

from html import escape

from shared.formatting import format_order_date, format_rupiah


class OrderStatusTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        """Render subject, plain-text and HTML bodies.

        Context keys: subject, transaction_id, status, customer_name,
        order_date, total, products (list of dicts with name, price,
        quantity, subtotal).
        """
        transaction_id = context.get("transaction_id", "N/A")
        status = context.get("status", "")
        customer_name = context.get("customer_name", "Customer")
        order_date = format_order_date(context["order_date"]) if context.get("order_date") else ""
        total = format_rupiah(context.get("total", 0))
        products = context.get("products", [])

        lines = [
            f"- {p['name']} x{p['quantity']} @ {format_rupiah(p['price'])} = {format_rupiah(p['subtotal'])}"
            for p in products
        ]
        body = (
            f"Hi {customer_name},\n\n"
            f"Transaction {transaction_id} ({order_date})\n"
            f"Status: {status}\n\n" + "\n".join(lines) + f"\n\nTotal: {total}\n"
        )

        rows = "".join(
            "<tr>"
            f"<td>{escape(p['name'])}</td><td>{format_rupiah(p['price'])}</td>"
            f"<td>{p['quantity']}</td><td>{format_rupiah(p['subtotal'])}</td>"
            "</tr>"
            for p in products
        )
        html_body = (
            f"<p>Hi {escape(customer_name)},</p>"
            f"<p>Transaction <strong>{escape(transaction_id)}</strong> ({order_date})</p>"
            f"<p>Status: <strong>{escape(status)}</strong></p>"
            "<table><tr><th>Product</th><th>Price</th><th>Qty</th><th>Subtotal</th></tr>"
            f"{rows}</table>"
            f"<p>Total: <strong>{total}</strong></p>"
        )

        return {
            "subject": context.get("subject", "ORDER NOTIFICATION"),
            "body": body,
            "html_body": html_body,
        }
