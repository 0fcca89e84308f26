import unittest

from inventory_ai.core.formatting import format_currency, format_promotion


class FormattingTest(unittest.TestCase):
    def test_currency(self):
        self.assertEqual(format_currency(1234.5), "$1,234.50")
        self.assertEqual(format_currency(-3), "-$3.00")

    def test_promotion(self):
        self.assertEqual(format_promotion(0), "None")
        self.assertEqual(format_promotion(0.15), "15%")


if __name__ == "__main__":
    unittest.main()
