"""Tests for stock status classification.

Copyright (c) Bryn Gwalad 2025
"""

import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import unittest
from unittest import mock

from inventory_api import config
from inventory_api.models import StockStatus
from inventory_api.status import classify


class ClassifyTest(unittest.TestCase):

    def test_zero_and_negative_are_out_of_stock(self):
        for quantity in (0, -1, -100):
            self.assertEqual(classify(quantity), StockStatus.OUT_OF_STOCK)

    def test_one_to_threshold_is_low_stock(self):
        for quantity in range(1, 6):
            self.assertEqual(classify(quantity), StockStatus.LOW_STOCK)

    def test_above_threshold_is_in_stock(self):
        for quantity in (6, 7, 25, 10_000):
            self.assertEqual(classify(quantity), StockStatus.IN_STOCK)

    def test_explicit_threshold(self):
        self.assertEqual(classify(10, threshold=10), StockStatus.LOW_STOCK)
        self.assertEqual(classify(11, threshold=10), StockStatus.IN_STOCK)

    def test_configured_threshold_is_used_by_default(self):
        with mock.patch.object(config, "LOW_STOCK_THRESHOLD", 20):
            self.assertEqual(classify(19), StockStatus.LOW_STOCK)
            self.assertEqual(classify(21), StockStatus.IN_STOCK)

    def test_status_values_match_display_labels(self):
        self.assertEqual(StockStatus.OUT_OF_STOCK.value, "Out of Stock")
        self.assertEqual(StockStatus.LOW_STOCK.value, "Low Stock")
        self.assertEqual(StockStatus.IN_STOCK.value, "In Stock")


if __name__ == "__main__":
    unittest.main()
