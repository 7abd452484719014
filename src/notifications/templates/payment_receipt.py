"""Purchase receipt template — sent once an order is paid."""

from notifications.channel import EMAIL


def _money(value) -> str:
    return f"${float(value or 0):.2f}"


class PurchaseReceiptTemplate:
    notification_type = "PurchaseReceipt"
    default_channels = [EMAIL]

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        lines = [
            f"  {item['quantity']} x {item['name']} @ {_money(item['price'])}" for item in context.get("items", [])
        ]
        paid_at = context.get("paid_at") or ""
        return {
            "subject": f"Order Confirmation {order_id}",
            "body": (
                f"Thank you for your purchase! Order {order_id} was paid {paid_at}.\n\n"
                + "\n".join(lines)
                + "\n\n"
                f"Items:    {_money(context.get('items_price'))}\n"
                f"Shipping: {_money(context.get('shipping_price'))}\n"
                f"Tax:      {_money(context.get('tax_price'))}\n"
                f"Total:    {_money(context.get('total_price'))}\n"
            ),
        }
