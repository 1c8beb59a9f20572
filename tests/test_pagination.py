import unittest

from invoice_builder.layout import LayoutConfig
from invoice_builder.pagination import estimate_page_count, max_items_for_pages, plan_pages, rows_per_page


class PaginationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.layout = LayoutConfig()

    def test_rows_per_page_for_default_layout(self) -> None:
        self.assertEqual(rows_per_page(self.layout, self.layout.table_top), 15)
        self.assertEqual(rows_per_page(self.layout, self.layout.top_margin), 25)

    def test_estimate_page_count_boundary_values(self) -> None:
        self.assertEqual(estimate_page_count(0, self.layout), 1)
        self.assertEqual(estimate_page_count(11, self.layout), 1)
        self.assertEqual(estimate_page_count(12, self.layout), 2)
        self.assertEqual(estimate_page_count(13, self.layout), 2)
        self.assertEqual(estimate_page_count(16, self.layout), 2)
        self.assertEqual(estimate_page_count(40, self.layout), 3)

    def test_max_items_for_pages_matches_plan(self) -> None:
        self.assertEqual(max_items_for_pages(1, self.layout), 11)
        self.assertEqual(max_items_for_pages(2, self.layout), 36)
        self.assertEqual(estimate_page_count(max_items_for_pages(5, self.layout) + 1, self.layout), 6)

    def test_plan_places_totals_after_last_row(self) -> None:
        plan = plan_pages(1, self.layout)

        self.assertEqual(len(plan.slices), 1)
        self.assertFalse(plan.totals_on_new_page)
        self.assertEqual(plan.totals_y, 150.0)

    def test_twelve_rows_push_totals_past_bottom_margin(self) -> None:
        plan = plan_pages(12, self.layout)

        self.assertEqual([(s.start, s.end) for s in plan.slices], [(0, 12)])
        self.assertTrue(plan.totals_on_new_page)
        self.assertEqual(plan.page_count, 2)

    def test_plan_moves_totals_to_new_page_when_they_do_not_fit(self) -> None:
        plan = plan_pages(15, self.layout)

        self.assertEqual([(s.start, s.end) for s in plan.slices], [(0, 15)])
        self.assertTrue(plan.totals_on_new_page)
        self.assertEqual(plan.totals_y, self.layout.top_margin)
        self.assertEqual(plan.page_count, 2)

    def test_continuation_pages_start_at_top_margin(self) -> None:
        plan = plan_pages(20, self.layout)

        self.assertEqual([(s.start, s.end) for s in plan.slices], [(0, 15), (15, 20)])
        self.assertEqual(plan.slices[1].header_y, self.layout.top_margin)


if __name__ == "__main__":
    unittest.main()
