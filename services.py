import json
import logging
import math
import os
import time
from datetime import date, datetime

import history as history_ops
import products as catalog_ops
from database import CATALOG_KEY, HISTORY_KEY, TAX_RATE_KEY
from inserting import seed
from models import DEFAULT_TAX_RATE, Cart, Payment, ProductGroup
from transactions import record_payment

logger = logging.getLogger(__name__)


#Id source
class TimestampIdGenerator:
    """Millisecond-timestamp ids that never repeat within one process."""

    def __init__(self, clock=time.time):
        self._clock = clock
        self._last = 0

    def __call__(self):
        value = int(self._clock() * 1000)
        if value <= self._last:
            value = self._last + 1
        self._last = value
        return str(value)


def _load_json_list(db, key):
    raw = db.get(key)
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Stored %r is not valid JSON, ignoring it", key)
        return None
    if not isinstance(data, list):
        logger.warning("Stored %r is not a list, ignoring it", key)
        return None
    return data


#Catalog service
class CatalogService:
    def __init__(self, db, new_id=None):
        self.db = db
        self.new_id = new_id or TimestampIdGenerator()
        self.groups = self.load()

    def load(self):
        data = _load_json_list(self.db, CATALOG_KEY)
        if data is not None:
            try:
                return [ProductGroup.from_dict(g, index) for index, g in enumerate(data)]
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning("Stored catalog is malformed (%s), using defaults", e)
        return seed(self.db)

    def save(self, groups=None):
        groups = self.groups if groups is None else groups
        self.db.set(CATALOG_KEY, json.dumps([g.to_dict() for g in groups]))

    def _apply(self, updated):
        if updated is self.groups:
            return self.groups
        # only adopt the new value once the store has it
        self.save(updated)
        self.groups = updated
        return self.groups

    def sorted_groups(self):
        return catalog_ops.sorted_groups(self.groups)

    def cart(self, tax_rate=DEFAULT_TAX_RATE):
        return Cart(self.groups, tax_rate)

    def add_group(self, name, color=None):
        return self._apply(catalog_ops.add_group(self.groups, name, color, self.new_id))

    def rename_group(self, group_id, name, color=None):
        return self._apply(catalog_ops.rename_group(self.groups, group_id, name, color))

    def delete_group(self, group_id):
        return self._apply(catalog_ops.delete_group(self.groups, group_id))

    def toggle_group(self, group_id):
        return self._apply(catalog_ops.toggle_group(self.groups, group_id))

    def reorder_group(self, moved_id, target_id):
        return self._apply(catalog_ops.reorder_group(self.groups, moved_id, target_id))

    def add_product(self, group_id):
        return self._apply(catalog_ops.add_product(self.groups, group_id, self.new_id))

    def rename_product(self, group_id, product_id, name):
        return self._apply(catalog_ops.rename_product(self.groups, group_id, product_id, name))

    def set_product_price(self, group_id, product_id, price_text):
        return self._apply(catalog_ops.set_product_price(self.groups, group_id, product_id, price_text))

    def delete_product(self, group_id, product_id):
        return self._apply(catalog_ops.delete_product(self.groups, group_id, product_id))

    def move_product(self, source_group_id, source_product_id, target_group_id, target_product_id):
        return self._apply(catalog_ops.move_product(
            self.groups, source_group_id, source_product_id, target_group_id, target_product_id, self.new_id))

    def set_quantity(self, group_id, product_id, delta):
        return self._apply(catalog_ops.set_quantity(self.groups, group_id, product_id, delta))

    def increment(self, group_id, product_id):
        return self.set_quantity(group_id, product_id, 1)

    def decrement(self, group_id, product_id):
        return self.set_quantity(group_id, product_id, -1)

    def clear_all_quantities(self):
        return self._apply(catalog_ops.clear_all_quantities(self.groups))

    def add_custom_item(self, name, price_text, quantity=1):
        return self._apply(catalog_ops.add_custom_item(self.groups, name, price_text, quantity, self.new_id))


#Settings service
class SettingsService:
    def __init__(self, db):
        self.db = db
        self.tax_rate = self.load_tax_rate()

    def load_tax_rate(self):
        raw = self.db.get(TAX_RATE_KEY)
        if raw is None:
            return DEFAULT_TAX_RATE
        try:
            rate = float(raw)
        except ValueError:
            logger.warning("Stored tax rate %r is not a number, using %s", raw, DEFAULT_TAX_RATE)
            return DEFAULT_TAX_RATE
        if not math.isfinite(rate) or rate < 0:
            logger.warning("Stored tax rate %r is out of range, using %s", raw, DEFAULT_TAX_RATE)
            return DEFAULT_TAX_RATE
        return rate

    def save_tax_rate(self, rate):
        try:
            rate = float(rate)
        except (TypeError, ValueError):
            return self.tax_rate
        if not math.isfinite(rate) or rate < 0:
            return self.tax_rate
        self.db.set(TAX_RATE_KEY, str(rate))
        self.tax_rate = rate
        return self.tax_rate


#History service
class HistoryService:
    def __init__(self, db):
        self.db = db
        self.payments = self.load()

    def load(self):
        data = _load_json_list(self.db, HISTORY_KEY)
        if data is None:
            return []
        try:
            return [Payment.from_dict(p) for p in data]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Stored payment history is malformed (%s), starting empty", e)
            return []

    def save(self, payments=None):
        payments = self.payments if payments is None else payments
        self.db.set(HISTORY_KEY, json.dumps([p.to_dict() for p in payments]))

    def _apply(self, updated):
        if updated is self.payments:
            return self.payments
        self.save(updated)
        self.payments = updated
        return self.payments

    def group_by_date(self):
        return history_ops.group_by_date(self.payments)

    def event_name_for_date(self, day):
        return history_ops.event_name_for_date(self.payments, day)

    def total_for_date(self, day):
        return history_ops.total_for_date(self.payments, day)

    def daily_summary(self, day):
        return history_ops.daily_summary(self.payments, day)

    def set_event_name(self, day, name):
        return self._apply(history_ops.set_event_name(self.payments, day, name))

    def delete_payment(self, payment_id):
        return self._apply(history_ops.delete_payment(self.payments, payment_id))

    def export_csv(self):
        return history_ops.export_csv(self.payments)

    def export_csv_file(self, directory, today=None):
        path = os.path.join(directory, history_ops.export_filename(today or date.today()))
        with open(path, 'w', encoding='utf-8', newline='') as fh:
            fh.write(self.export_csv())
        return path


#Check-out service
class CheckoutService:
    def __init__(self, catalog, history, settings, now=datetime.now):
        self.catalog = catalog
        self.history = history
        self.settings = settings
        self.now = now

    def cart(self):
        return self.catalog.cart(self.settings.tax_rate)

    def record_payment(self, include_tax=False):
        """Record the cart as a payment; returns it, or None when the cart is empty.

        History is written before the catalog reset. If the history write fails
        nothing changes. The two writes are not atomic: if the second one fails
        the payment stays recorded while the quantities are not cleared.
        """
        payment, payments, groups = record_payment(
            self.catalog.groups,
            self.history.payments,
            self.settings.tax_rate,
            include_tax,
            self.catalog.new_id,
            self.now(),
        )
        if payment is None:
            return None

        self.history.save(payments)
        self.history.payments = payments
        self.catalog.save(groups)
        self.catalog.groups = groups
        return payment
