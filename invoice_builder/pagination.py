"""Helpers for splitting invoice rows across pages."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Tuple

from .layout import LayoutConfig


@dataclass(frozen=True)
class PageSlice:
    start: int
    end: int
    header_y: float

    @property
    def count(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class PagePlan:
    slices: Tuple[PageSlice, ...]
    totals_y: float
    totals_on_new_page: bool

    @property
    def page_count(self) -> int:
        return len(self.slices) + (1 if self.totals_on_new_page else 0)


def rows_per_page(layout: LayoutConfig, header_y: float) -> int:
    first_row_y = header_y + layout.line_height
    if first_row_y > layout.page_bottom:
        return 0
    return int(math.floor((layout.page_bottom - first_row_y) / layout.line_height)) + 1


def plan_pages(item_count: int, layout: LayoutConfig) -> PagePlan:
    first_capacity = rows_per_page(layout, layout.table_top)
    continuation_capacity = max(1, rows_per_page(layout, layout.top_margin))

    slices: List[PageSlice] = []
    cursor = 0
    capacity = first_capacity
    header_y = layout.table_top
    while True:
        take = min(capacity, item_count - cursor)
        slices.append(PageSlice(cursor, cursor + take, header_y))
        cursor += take
        if cursor >= item_count:
            break
        capacity = continuation_capacity
        header_y = layout.top_margin

    last = slices[-1]
    next_row_y = last.header_y + layout.line_height * (last.count + 1)
    totals_y = next_row_y + layout.totals_gap
    if totals_y + 2 * layout.line_height <= layout.page_bottom:
        return PagePlan(tuple(slices), totals_y, totals_on_new_page=False)
    return PagePlan(tuple(slices), layout.top_margin, totals_on_new_page=True)


def estimate_page_count(item_count: int, layout: LayoutConfig) -> int:
    return plan_pages(item_count, layout).page_count


def max_items_for_pages(page_count: int, layout: LayoutConfig) -> int:
    page_count = max(1, page_count)
    first_capacity = rows_per_page(layout, layout.table_top)
    continuation_capacity = max(1, rows_per_page(layout, layout.top_margin))
    candidate = first_capacity + continuation_capacity * (page_count - 1)
    while candidate > 0 and estimate_page_count(candidate, layout) > page_count:
        candidate -= 1
    return candidate
