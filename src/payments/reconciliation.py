"""Payment reconciliation — three ways in, one paid transition.

- Gateway capture: ``initiate_capture`` then ``confirm_capture``, driven by
  the buyer.
- Webhook: ``handle_webhook``, driven by the provider and safe to redeliver.
- Manual: ``settle_manually``, driven by an operator for cash-on-delivery.

Each path ends in a single command processed while the order's key is held;
the handler re-reads the order, so the already-paid guard and the write
commit together. The key only serialises writers in this process. Across
processes the order's settlement key rejects the second commit, and that
conflict is reported as ``OrderAlreadyPaidError``. Gateway calls are made before the key is taken and are
never retried here. The receipt is sent after commit and cannot fail the
payment.
"""

from enum import Enum

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from notifications.receipts import send_receipt
from ordering.concurrency import get_locks, order_key
from ordering.errors import (
    CheckoutError,
    OrderAlreadyPaidError,
    PaymentGatewayError,
    TransactionFailedError,
    WebhookVerificationError,
)
from ordering.order.order import COMPLETED, Order
from ordering.order.payment import MarkOrderPaid, RecordPaymentIntent, SettleOrderManually, load_order
from payments.gateway import get_capture_gateway, get_webhook_gateway

logger = structlog.get_logger(__name__)


class WebhookOutcome(Enum):
    PAID = "paid"
    DUPLICATE = "duplicate"
    IGNORED = "ignored"


_PAID_COMMANDS = (MarkOrderPaid, SettleOrderManually)


def _process_for_order(order_id: str, command) -> None:
    try:
        with get_locks().hold(order_key(order_id)):
            current_domain.process(command, asynchronous=False)
    except CheckoutError:
        raise
    except Exception as exc:
        # A paid transition that lost a race to another writer surfaces as a
        # key or version conflict at commit.
        if isinstance(command, _PAID_COMMANDS) and load_order(order_id).is_paid:
            logger.info("Paid transition committed elsewhere", order_id=order_id, command=type(command).__name__)
            raise OrderAlreadyPaidError(order_id) from exc
        if isinstance(exc, ValidationError):
            raise
        logger.exception("Payment transaction failed", order_id=order_id, command=type(command).__name__)
        raise TransactionFailedError() from exc


def _after_paid(order_id: str) -> Order:
    order = load_order(order_id)
    logger.info(
        "Order paid",
        order_id=order_id,
        payment_method=order.payment_method,
        transaction_id=order.payment_result.transaction_id if order.payment_result else None,
    )
    send_receipt(order)
    return order


def mark_order_paid(
    order_id: str,
    transaction_id: str,
    status: str,
    email_address: str | None = None,
    amount_paid: float | None = None,
    expected_intent_id: str | None = None,
) -> Order:
    """Apply the paid transition. Raises ``OrderAlreadyPaidError`` if it already happened."""
    _process_for_order(
        order_id,
        MarkOrderPaid(
            order_id=order_id,
            transaction_id=transaction_id,
            status=status,
            email_address=email_address,
            amount_paid=amount_paid,
            expected_intent_id=expected_intent_id,
        ),
    )
    return _after_paid(order_id)


# ---------------------------------------------------------------------------
# Gateway capture path
# ---------------------------------------------------------------------------
def initiate_capture(order_id: str) -> str:
    """Create a gateway intent for the order's total and remember its id."""
    order = load_order(order_id)
    if order.is_paid:
        raise OrderAlreadyPaidError(str(order.id))

    try:
        intent = get_capture_gateway().create_intent(order.total_price, reference=str(order.id))
    except PaymentGatewayError as exc:
        logger.error("Payment intent creation failed", order_id=order_id, provider_detail=exc.detail)
        raise

    _process_for_order(order_id, RecordPaymentIntent(order_id=order_id, intent_id=intent.intent_id))
    logger.info("Payment intent created", order_id=order_id, intent_id=intent.intent_id, amount=order.total_price)
    return intent.intent_id


def confirm_capture(order_id: str, claimed_intent_id: str) -> Order:
    """Capture the buyer-approved intent and, if the provider confirms it, mark the order paid."""
    order = load_order(order_id)
    if order.is_paid:
        raise OrderAlreadyPaidError(str(order.id))

    recorded_intent_id = order.pending_intent_id
    if not recorded_intent_id or recorded_intent_id != claimed_intent_id:
        logger.warning(
            "Capture claim does not match the recorded intent",
            order_id=order_id,
            claimed_intent_id=claimed_intent_id,
            recorded_intent_id=recorded_intent_id,
        )
        raise PaymentGatewayError(detail="Claimed intent does not match the recorded intent", order_id=order_id)

    try:
        result = get_capture_gateway().capture_and_verify(claimed_intent_id)
    except PaymentGatewayError as exc:
        logger.error("Payment capture failed", order_id=order_id, provider_detail=exc.detail)
        raise

    if result.intent_id != recorded_intent_id or not result.is_completed:
        logger.warning(
            "Capture verification failed",
            order_id=order_id,
            provider_status=result.status,
            returned_intent_id=result.intent_id,
            recorded_intent_id=recorded_intent_id,
        )
        raise PaymentGatewayError(
            detail=f"Capture returned status {result.status!r} for intent {result.intent_id!r}",
            order_id=order_id,
        )

    return mark_order_paid(
        order_id,
        transaction_id=result.intent_id,
        status=result.status,
        email_address=result.payer_email,
        amount_paid=result.captured_amount,
        expected_intent_id=recorded_intent_id,
    )


# ---------------------------------------------------------------------------
# Webhook path
# ---------------------------------------------------------------------------
def handle_webhook(payload: str, signature: str) -> WebhookOutcome:
    """Apply a provider's charge notification.

    Unverified payloads raise ``WebhookVerificationError``. Events that do
    not report a successful charge are ignored. A redelivery for an order
    that is already paid is reported as ``DUPLICATE`` rather than an error.
    """
    try:
        charge = get_webhook_gateway().verify_and_parse(payload, signature)
    except WebhookVerificationError:
        logger.warning("Webhook rejected: signature verification failed")
        raise
    except PaymentGatewayError as exc:
        logger.error("Webhook payload could not be read", provider_detail=exc.detail)
        raise

    if not charge.succeeded:
        logger.info("Webhook event ignored", event_type=charge.event_type, charge_id=charge.charge_id)
        return WebhookOutcome.IGNORED

    if not charge.order_id:
        logger.error("Webhook charge carries no order id", charge_id=charge.charge_id)
        raise PaymentGatewayError(detail="Charge metadata has no order id", charge_id=charge.charge_id)

    try:
        mark_order_paid(
            charge.order_id,
            transaction_id=charge.charge_id,
            status=COMPLETED,
            email_address=charge.billing_email,
            amount_paid=charge.amount,
        )
    except OrderAlreadyPaidError:
        logger.info("Duplicate webhook delivery absorbed", order_id=charge.order_id, charge_id=charge.charge_id)
        return WebhookOutcome.DUPLICATE

    return WebhookOutcome.PAID


# ---------------------------------------------------------------------------
# Manual path
# ---------------------------------------------------------------------------
def settle_manually(order_id: str, operator_id: str) -> Order:
    """Record cash collected on delivery. Only valid for cash-on-delivery orders."""
    _process_for_order(order_id, SettleOrderManually(order_id=order_id, operator_id=operator_id))
    logger.info("Order settled manually", order_id=order_id, operator_id=operator_id)
    return _after_paid(order_id)
