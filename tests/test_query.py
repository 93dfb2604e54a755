"""Tests for item filtering and pagination.

Copyright (c) Bryn Gwalad 2025
"""

import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import unittest

from inventory_api.models import InventoryItem
from inventory_api.query import filter_items, paginate


def _item(id, sku, name, category):
    return InventoryItem(id=id, sku=sku, name=name, category=category, quantity=1)


class FilterItemsTest(unittest.TestCase):

    def setUp(self):
        self.items = [
            _item(1, "SKU001", "Laptop", "Electronics"),
            _item(2, "SKU002", "Office Chair", "Furniture"),
            _item(3, "SKU003", "Printer Ink", "Office Supplies"),
            _item(4, "LAP-9", "Docking Station", "Electronics"),
        ]

    def test_no_filters_pass_everything_through(self):
        self.assertEqual(filter_items(self.items), self.items)
        self.assertEqual(filter_items(self.items, "", ""), self.items)

    def test_search_matches_name_ignoring_case(self):
        result = filter_items(self.items, search_term="oFFice")
        self.assertEqual([i.id for i in result], [2])

    def test_search_matches_sku(self):
        result = filter_items(self.items, search_term="lap")
        self.assertEqual([i.id for i in result], [1, 4])

    def test_category_is_exact(self):
        self.assertEqual([i.id for i in filter_items(self.items, category="Electronics")], [1, 4])
        self.assertEqual(filter_items(self.items, category="electronics"), [])
        self.assertEqual(filter_items(self.items, category="Office"), [])

    def test_search_and_category_are_combined(self):
        result = filter_items(self.items, search_term="sku", category="Furniture")
        self.assertEqual([i.id for i in result], [2])

    def test_repeated_filtering_is_stable(self):
        first = filter_items(self.items, search_term="o")
        second = filter_items(self.items, search_term="o")
        self.assertEqual([i.id for i in first], [i.id for i in second])


class PaginateTest(unittest.TestCase):

    def test_pages(self):
        seq = list(range(12))
        self.assertEqual(paginate(seq, 0, 5), [0, 1, 2, 3, 4])
        self.assertEqual(paginate(seq, 1, 5), [5, 6, 7, 8, 9])

    def test_last_page_is_clipped(self):
        self.assertEqual(paginate(list(range(12)), 2, 5), [10, 11])

    def test_out_of_range_is_empty(self):
        self.assertEqual(paginate(list(range(12)), 3, 5), [])
        self.assertEqual(paginate([], 0, 5), [])
        self.assertEqual(paginate(list(range(12)), -1, 5), [])
        self.assertEqual(paginate(list(range(12)), 0, 0), [])


if __name__ == "__main__":
    unittest.main()
