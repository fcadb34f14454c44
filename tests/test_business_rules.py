from __future__ import annotations

import unittest
from datetime import date

from bulk_import.business_rules import BusinessRuleValidator, years_before

TODAY = date(2025, 6, 30)


class YearsBeforeTests(unittest.TestCase):
    def test_leap_day_falls_back_to_feb_28(self):
        self.assertEqual(years_before(date(2024, 2, 29), 2), date(2022, 2, 28))
        self.assertEqual(years_before(date(2025, 6, 30), 2), date(2023, 6, 30))


class BusinessRuleTests(unittest.TestCase):
    def setUp(self):
        self.rules = BusinessRuleValidator(today=TODAY)

    def test_warranty_before_purchase_is_an_error(self):
        issues = self.rules.validate({"purchase_date": "2024-06-01", "warranty_expiry": "2024-01-01"}, 7)
        self.assertEqual(len(issues), 1)
        issue = issues[0]
        self.assertEqual((issue.row, issue.column, issue.code, issue.severity), (7, "warranty_expiry", "date_ordering_violation", "error"))
        self.assertEqual(issue.error, "Warranty expiry date cannot be before purchase date")

    def test_same_day_warranty_is_fine(self):
        self.assertEqual(self.rules.validate({"purchase_date": "2024-06-01", "warranty_expiry": "2024-06-01"}, 6), [])

    def test_ordering_skips_blank_or_unparsable_dates(self):
        self.assertEqual(self.rules.validate({"purchase_date": "", "warranty_expiry": "2024-01-01"}, 6), [])
        self.assertEqual(self.rules.validate({"purchase_date": "June", "warranty_expiry": "2024-01-01"}, 6), [])

    def test_policy_expiry_before_start(self):
        issues = self.rules.validate({"start_date": "2024-03-01", "expiry_date": "2024-02-01"}, 6)
        self.assertEqual([issue.column for issue in issues], ["expiry_date"])
        self.assertEqual(issues[0].code, "date_ordering_violation")

    def test_stale_incident_is_a_warning(self):
        issues = self.rules.validate({"incident_date": "2023-06-29"}, 6)
        self.assertEqual([(i.code, i.severity) for i in issues], [("stale_date", "warning")])
        self.assertEqual(self.rules.validate({"incident_date": "2023-06-30"}, 6), [])

    def test_price_outliers(self):
        high = self.rules.validate({"purchase_price": "150000"}, 6)
        self.assertEqual([(i.column, i.code, i.severity) for i in high], [("purchase_price", "price_outlier", "warning")])
        self.assertEqual(self.rules.validate({"purchase_price": "100000"}, 6), [])

        low = self.rules.validate({"price": "50"}, 6)
        self.assertEqual(low[0].error, "Unusually low price. Please verify this is correct.")
        self.assertEqual(self.rules.validate({"price": "0"}, 6), [])
        self.assertEqual(self.rules.validate({"price": "100"}, 6), [])
        self.assertEqual(self.rules.validate({"price": "cheap"}, 6), [])


if __name__ == "__main__":
    unittest.main()
