"""Payment history aggregation and export.

History is a list of Payment, newest first. Aggregates are recomputed from
that list on every call.
"""
import copy
from datetime import date as _date
from decimal import ROUND_HALF_UP, Decimal

CSV_HEADER = "Date,Event,Time,Items,Subtotal,Tax,Total"


def group_by_date(history):
    """Map each date to its payments, keeping history order inside each bucket."""
    by_date = {}
    for payment in history:
        by_date.setdefault(payment.date, []).append(payment)
    return by_date


def payments_for_date(history, date):
    return [p for p in history if p.date == date]


def event_name_for_date(history, date):
    # the first payment of the bucket is the most recent one and wins
    payments = payments_for_date(history, date)
    if not payments:
        return None
    return payments[0].event_name or None


def total_for_date(history, date):
    return sum(p.total for p in payments_for_date(history, date))


def daily_summary(history, date):
    """Units sold per product name on `date`, highest first.

    Each entry is a dict with productName, totalQuantity, groupName and
    groupColor; group details come from the first sale seen for that name.
    """
    counts = {}
    for payment in payments_for_date(history, date):
        for item in payment.items:
            entry = counts.get(item.product_name)
            if entry is None:
                entry = {
                    "productName": item.product_name,
                    "totalQuantity": 0,
                    "groupName": item.group_name,
                    "groupColor": item.group_color,
                }
                counts[item.product_name] = entry
            entry["totalQuantity"] += item.quantity
    return sorted(counts.values(), key=lambda e: e["totalQuantity"], reverse=True)


def daily_totals(history):
    """(date, total) pairs, oldest date first."""
    buckets = group_by_date(history)
    pairs = [(day, sum(p.total for p in payments)) for day, payments in buckets.items()]
    pairs.reverse()
    return pairs


def top_items(history, limit=10):
    counts = {}
    for payment in history:
        for item in payment.items:
            counts[item.product_name] = counts.get(item.product_name, 0) + item.quantity
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return ranked[:limit]


def sales_by_group(history):
    """Revenue per group name as (name, revenue, color), highest first."""
    revenue = {}
    colors = {}
    for payment in history:
        for item in payment.items:
            revenue[item.group_name] = revenue.get(item.group_name, 0.0) + item.total
            colors.setdefault(item.group_name, item.group_color)
    ranked = sorted(revenue.items(), key=lambda kv: kv[1], reverse=True)
    return [(name, amount, colors[name]) for name, amount in ranked]


def set_event_name(history, date, name):
    # blank clears the event, anything else is kept as typed
    if not name or not name.strip():
        name = None
    updated = copy.deepcopy(history)
    for payment in updated:
        if payment.date == date:
            payment.event_name = name
    return updated


def delete_payment(history, payment_id):
    if not any(p.id == payment_id for p in history):
        return history
    return [copy.deepcopy(p) for p in history if p.id != payment_id]


def _money(value):
    # half cents round up, Decimal(float) keeps the exact binary value
    return str(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def export_csv(history):
    lines = [CSV_HEADER]
    for payment in history:
        event = payment.event_name or ""
        if "," in event:
            event = f'"{event}"'
        items = "; ".join(f"{item.quantity}x {item.product_name}" for item in payment.items)
        subtotal = payment.subtotal if payment.subtotal is not None else payment.total
        tax = _money(payment.tax) if payment.tax is not None else "0.00"
        lines.append(",".join([
            payment.date,
            event,
            payment.timestamp,
            f'"{items}"',
            _money(subtotal),
            tax,
            _money(payment.total),
        ]))
    return "\n".join(lines) + "\n"


def export_filename(today=None):
    today = today or _date.today()
    return f"payment-history-{today.isoformat()}.csv"
