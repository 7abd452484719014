"""Purchase receipts — best-effort email after an order is paid.

``send_receipt`` runs after the paid transition has committed. Whatever goes
wrong here (no address on file, template error, provider failure) is logged
and reported as ``False``; it never reaches the payment caller.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from notifications.channel import EMAIL, get_channel
from notifications.templates import get_template
from notifications.templates.payment_receipt import PurchaseReceiptTemplate
from ordering.customer.customer import Customer

logger = structlog.get_logger(__name__)


def _recipient_for(order) -> str | None:
    try:
        customer = current_domain.repository_for(Customer).get(order.customer_id)
        if customer.email:
            return customer.email
    except ObjectNotFoundError:
        pass

    if order.payment_result is not None:
        return order.payment_result.email_address
    return None


def _context_for(order) -> dict:
    return {
        "order_id": str(order.id),
        "items": [{"name": item.name, "quantity": item.quantity, "price": item.price} for item in order.items],
        "items_price": order.items_price,
        "shipping_price": order.shipping_price,
        "tax_price": order.tax_price,
        "total_price": order.total_price,
        "paid_at": order.paid_at.isoformat() if order.paid_at else None,
    }


def send_receipt(order) -> bool:
    """Email a purchase receipt for a paid order. Returns whether it was sent."""
    try:
        recipient = _recipient_for(order)
        if not recipient:
            logger.warning("No receipt recipient on file", order_id=str(order.id))
            return False

        content = get_template(PurchaseReceiptTemplate.notification_type).render(_context_for(order))
        result = get_channel(EMAIL).send(to=recipient, subject=content["subject"], body=content["body"])
    except Exception:
        logger.exception("Receipt dispatch failed", order_id=str(order.id))
        return False

    if result.get("status") != "sent":
        logger.warning("Receipt dispatch failed", order_id=str(order.id), error=result.get("error"))
        return False

    logger.info("Receipt sent", order_id=str(order.id), message_id=result.get("message_id"))
    return True
