"""Order line status transitions and derived order status.

These are pure functions over status values so the rules can be used by the
order service and tested without a database.
"""

from decimal import Decimal
from typing import Iterable

from storefront.core.exceptions import InvalidStatusError
from storefront.models.order import Order, OrderStatus, PaymentStatus, StockStatus

# Allowed payment transitions; setting the current value again is a no-op
PAYMENT_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PAID, PaymentStatus.CANCELLED}),
    PaymentStatus.PAID: frozenset({PaymentStatus.CANCELLED}),
    PaymentStatus.CANCELLED: frozenset(),
}


def parse_payment_status(value: str) -> PaymentStatus:
    try:
        return PaymentStatus(value)
    except ValueError:
        raise InvalidStatusError(f"Unknown payment status '{value}'") from None


def parse_stock_status(value: str) -> StockStatus:
    try:
        return StockStatus(value)
    except ValueError:
        raise InvalidStatusError(f"Unknown stock status '{value}'") from None


def next_payment_status(current: str, target: str) -> PaymentStatus:
    """Validate a payment status change and return the resulting status.

    Args:
        current: The line's current payment status
        target: Requested payment status

    Returns:
        The status the line should have after the change

    Raises:
        InvalidStatusError: If the value is unknown or the transition is not allowed
    """
    current_status = PaymentStatus(current)
    target_status = parse_payment_status(target)

    if target_status == current_status:
        return current_status
    if target_status not in PAYMENT_TRANSITIONS[current_status]:
        raise InvalidStatusError(
            f"Cannot change payment status from {current_status.value} to {target_status.value}"
        )
    return target_status


def next_stock_status(current: str, target: str) -> StockStatus:
    """Return the stock status after a requested change.

    Stock never moves back from arrived to pending; such a request leaves the
    line unchanged without raising.
    """
    current_status = StockStatus(current)
    target_status = parse_stock_status(target)

    if current_status == StockStatus.ARRIVED and target_status == StockStatus.PENDING:
        return current_status
    return target_status


def derive_order_status(line_statuses: Iterable[str], payment_marker: str) -> OrderStatus:
    """Compute the order status from its lines and the order payment marker.

    Cancelled wins over the payment marker: an order whose lines are all
    cancelled is cancelled even if payment was confirmed earlier.
    """
    statuses = list(line_statuses)
    if statuses and all(s == PaymentStatus.CANCELLED.value for s in statuses):
        return OrderStatus.CANCELLED
    if payment_marker == PaymentStatus.PAID.value:
        return OrderStatus.PAID
    return OrderStatus.PENDING


def order_status(order: Order) -> OrderStatus:
    return derive_order_status((line.payment_status for line in order.lines), order.payment_status)


def order_totals(order: Order) -> tuple[Decimal, int]:
    """Total amount and quantity over the order's non-cancelled lines."""
    total = Decimal("0")
    quantity = 0
    for line in order.lines:
        if line.payment_status == PaymentStatus.CANCELLED.value:
            continue
        total += line.unit_price * line.quantity
        quantity += line.quantity
    return total, quantity
