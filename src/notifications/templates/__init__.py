"""Template registry — maps notification kinds to template classes."""

from notifications.templates.payment_receipt import PurchaseReceiptTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    PurchaseReceiptTemplate.notification_type: PurchaseReceiptTemplate,
}


def get_template(notification_type: str):
    """Look up a template class by notification type string."""
    template_cls = TEMPLATE_REGISTRY.get(notification_type)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template_cls
