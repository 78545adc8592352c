import os
import unittest
import sys
from datetime import datetime
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import products
import transactions
from history import set_event_name
from inserting import default_groups


def counter_ids():
    state = {'n': 0}

    def new_id():
        state['n'] += 1
        return str(state['n'])
    return new_id


class FormatTests(unittest.TestCase):
    def test_format_date(self):
        self.assertEqual(transactions.format_date(datetime(2025, 3, 7, 9, 5)), '3/7/2025')

    def test_format_time(self):
        self.assertEqual(transactions.format_time(datetime(2025, 3, 7, 9, 5)), '9:05 am')
        self.assertEqual(transactions.format_time(datetime(2025, 3, 7, 0, 30)), '0:30 am')
        self.assertEqual(transactions.format_time(datetime(2025, 3, 7, 12, 0)), '12:00 pm')
        self.assertEqual(transactions.format_time(datetime(2025, 3, 7, 17, 45)), '17:45 pm')


class RecordPaymentTests(unittest.TestCase):
    def setUp(self):
        self.new_id = counter_ids()
        self.now = datetime(2025, 3, 7, 14, 5)

    def _cart(self, *lines):
        groups = default_groups()
        for gid, pid, qty in lines:
            groups = products.set_quantity(groups, gid, pid, qty)
        return groups

    def test_keychain_scenario(self):
        groups = self._cart(('1', '1-1', 1), ('1', '1-1', 1))
        payment, history, updated = transactions.record_payment(groups, [], 10, True, self.new_id, self.now)

        self.assertEqual(len(history), 1)
        self.assertIs(history[0], payment)
        self.assertEqual(len(payment.items), 1)
        item = payment.items[0]
        self.assertEqual((item.product_name, item.group_name, item.quantity, item.price),
                         ('1 key chain', 'Keychains', 2, 4.0))
        self.assertEqual(payment.subtotal, 8.0)
        self.assertAlmostEqual(payment.tax, 0.8)
        self.assertEqual(payment.tax_rate, 10)
        self.assertTrue(payment.include_tax)
        self.assertAlmostEqual(payment.total, 8.8)
        self.assertEqual(payment.date, '3/7/2025')
        self.assertEqual(payment.timestamp, '14:05 pm')
        self.assertEqual(products.get_group(updated, '1').products[0].quantity, 0)

    def test_without_tax(self):
        groups = self._cart(('3', '3-1', 2))
        payment, _, _ = transactions.record_payment(groups, [], 8.75, False, self.new_id, self.now)
        self.assertIsNone(payment.tax)
        self.assertIsNone(payment.tax_rate)
        self.assertFalse(payment.include_tax)
        self.assertEqual(payment.total, payment.subtotal)

    def test_total_identity_with_tax(self):
        groups = self._cart(('1', '1-2', 3), ('2', '2-1', 1))
        payment, _, _ = transactions.record_payment(groups, [], 8.75, True, self.new_id, self.now)
        self.assertEqual(payment.total, payment.subtotal + payment.tax)

    def test_items_follow_group_then_product_order(self):
        groups = self._cart(('3', '3-1', 1), ('1', '1-3', 1), ('1', '1-1', 2))
        groups = products.reorder_group(groups, '3', '1')
        payment, _, _ = transactions.record_payment(groups, [], 0, False, self.new_id, self.now)
        self.assertEqual([i.product_name for i in payment.items], ['1 magnet', '1 key chain', '5 key chains'])

    def test_every_quantity_reset(self):
        groups = self._cart(('1', '1-1', 4), ('2', '2-2', 1), ('3', '3-1', 9))
        _, _, updated = transactions.record_payment(groups, [], 0, False, self.new_id, self.now)
        self.assertTrue(all(p.quantity == 0 for g in updated for p in g.products))

    def test_empty_cart_records_nothing(self):
        groups = default_groups()
        history = []
        payment, new_history, new_groups = transactions.record_payment(groups, history, 10, True, self.new_id, self.now)
        self.assertIsNone(payment)
        self.assertIs(new_history, history)
        self.assertIs(new_groups, groups)

    def test_zero_priced_cart_records_nothing(self):
        groups = products.add_product(default_groups(), '3', lambda: 'zero')
        groups = products.set_quantity(groups, '3', '3-zero', 3)
        payment, history, _ = transactions.record_payment(groups, [], 10, False, self.new_id, self.now)
        self.assertIsNone(payment)
        self.assertEqual(history, [])

    def test_history_newest_first(self):
        history = []
        recorded = []
        for minute in range(4):
            groups = self._cart(('2', '2-1', minute + 1))
            payment, history, _ = transactions.record_payment(
                groups, history, 0, False, self.new_id, datetime(2025, 3, 7, 10, minute))
            recorded.append(payment.id)
        self.assertEqual([p.id for p in history], list(reversed(recorded)))

    def test_event_name_carried_to_same_day(self):
        groups = self._cart(('1', '1-1', 1))
        _, history, _ = transactions.record_payment(groups, [], 0, False, self.new_id, self.now)
        history = set_event_name(history, '3/7/2025', 'Spring Fair')

        payment, history, _ = transactions.record_payment(groups, history, 0, False, self.new_id, self.now)
        self.assertEqual(payment.event_name, 'Spring Fair')

        payment, _, _ = transactions.record_payment(groups, history, 0, False, self.new_id, datetime(2025, 3, 8, 9, 0))
        self.assertIsNone(payment.event_name)

    def test_payment_items_are_snapshots(self):
        groups = self._cart(('1', '1-1', 1))
        payment, _, updated = transactions.record_payment(groups, [], 0, False, self.new_id, self.now)
        updated = products.rename_product(updated, '1', '1-1', 'Renamed')
        updated = products.delete_group(updated, '1')
        self.assertEqual(payment.items[0].product_name, '1 key chain')
        self.assertEqual(payment.items[0].group_name, 'Keychains')


if __name__ == '__main__':
    unittest.main()
