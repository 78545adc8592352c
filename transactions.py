import copy
import logging
from datetime import datetime

from history import event_name_for_date
from models import Cart, Payment, PaymentItem
from products import clear_all_quantities, sorted_groups

logger = logging.getLogger(__name__)


def format_date(now):
    """Calendar day as month/day/year without zero padding, e.g. 3/7/2025."""
    return f"{now.month}/{now.day}/{now.year}"


def format_time(now):
    # hour is the 24h clock value, only the period is added
    period = "pm" if now.hour >= 12 else "am"
    return f"{now.hour}:{now.minute:02d} {period}"


def build_items(groups):
    items = []
    for group in sorted_groups(groups):
        for product in group.products:
            if product.quantity <= 0:
                continue
            items.append(PaymentItem(
                product_name=product.name,
                group_name=group.name,
                group_color=group.color,
                quantity=product.quantity,
                price=product.price,
            ))
    return items


def create_transaction(groups, tax_rate, include_tax, payment_id, now, event_name=None):
    """Snapshot the cart into a Payment. Returns None when there is nothing to record."""
    cart = Cart(groups, tax_rate)
    subtotal = cart.subtotal
    if subtotal <= 0:
        return None

    items = build_items(groups)
    if not items:
        return None

    tax = cart.tax if include_tax else None
    return Payment(
        id=payment_id,
        date=format_date(now),
        event_name=event_name,
        items=items,
        subtotal=subtotal,
        tax=tax,
        tax_rate=tax_rate if include_tax else None,
        include_tax=include_tax,
        total=cart.total(include_tax),
        timestamp=format_time(now),
    )


def record_payment(groups, history, tax_rate, include_tax, new_id, now=None):
    """Record the current cart.

    Returns (payment, history, groups). When nothing is recorded the payment is
    None and the history and groups passed in are returned untouched. Otherwise
    the new payment heads a new history list and every quantity is reset.
    """
    now = now or datetime.now()
    date = format_date(now)
    event_name = event_name_for_date(history, date)

    payment = create_transaction(groups, tax_rate, include_tax, new_id(), now, event_name)
    if payment is None:
        return None, history, groups

    updated_history = [payment] + copy.deepcopy(history)
    logger.info("Recorded payment %s on %s: %.2f", payment.id, payment.date, payment.total)
    return payment, updated_history, clear_all_quantities(groups)
