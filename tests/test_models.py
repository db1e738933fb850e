import unittest

from pydantic import ValidationError

from rebarcut import CapacityError, CutItem, ShapeType, StockBar


class TestStockBar(unittest.TestCase):

    def test_open_bar_is_empty(self):
        bar = StockBar.open(12000)
        self.assertEqual(bar.cuts, [])
        self.assertEqual(bar.remainder_mm, 12000)
        self.assertEqual(bar.used_mm, 0)

    def test_place_decrements_remainder(self):
        bar = StockBar.open(12000)
        bar.place("A", 4000)
        bar.place("B", 3000)
        self.assertEqual(bar.remainder_mm, 5000)
        self.assertEqual(bar.used_mm, 7000)
        self.assertEqual([cut.mark for cut in bar.cuts], ["A", "B"])

    def test_kerf_charged_after_first_cut(self):
        bar = StockBar.open(1000)
        self.assertEqual(bar.space_needed(400, kerf_mm=5), 400)
        bar.place("A", 400, kerf_mm=5)
        self.assertEqual(bar.space_needed(400, kerf_mm=5), 405)
        bar.place("B", 400, kerf_mm=5)
        self.assertEqual(bar.remainder_mm, 195)

    def test_place_refuses_overflow(self):
        bar = StockBar.open(1000)
        bar.place("A", 600)
        self.assertFalse(bar.can_fit(500))
        with self.assertRaises(CapacityError):
            bar.place("B", 500)
        self.assertEqual(bar.remainder_mm, 400)
        self.assertEqual(len(bar.cuts), 1)


class TestCutItem(unittest.TestCase):

    def test_item_is_immutable(self):
        item = CutItem(id="1", mark="B1", bar_size="15M", length_mm=3000, quantity=2)
        with self.assertRaises(ValidationError):
            item.quantity = 5

    def test_shape_type(self):
        item = CutItem(id="1", mark="B1", bar_size="15M", length_mm=3000, quantity=2, shape_type="bent")
        self.assertEqual(item.shape_type, ShapeType.BENT)

    def test_shape_type_accepts_free_text(self):
        item = CutItem(id="1", mark="S1", bar_size="10M", length_mm=1200, quantity=4, shape_type="stirrup")
        self.assertEqual(item.shape_type, "stirrup")


if __name__ == "__main__":
    unittest.main()
