"""Property-based tests for the budget declaration set.

Testing Configuration:
- Library: Hypothesis (Python)
- Minimum iterations: 100 per property test
"""

import calendar
from datetime import date

from hypothesis import given, settings, strategies as st

from src.toolserver.budget.declarations import (
    COMPANION_SEPARATOR,
    budget_time_window,
    merge_companion_file,
    render_resource_file,
)

any_day = st.dates(min_value=date(2000, 1, 1), max_value=date(2200, 12, 31))


class TestBudgetWindowProperties:
    @settings(max_examples=100)
    @given(today=any_day)
    def test_window_starts_on_first_of_month(self, today):
        start, _ = budget_time_window(today)

        assert start == date(today.year, today.month, 1)

    @settings(max_examples=100)
    @given(today=any_day)
    def test_window_ends_on_last_day_of_same_month_next_year(self, today):
        _, end = budget_time_window(today)

        assert end.year == today.year + 1
        assert end.month == today.month
        assert end.day == calendar.monthrange(end.year, end.month)[1]

    @settings(max_examples=100)
    @given(today=any_day)
    def test_window_contains_today(self, today):
        start, end = budget_time_window(today)

        assert start <= today < end

    @settings(max_examples=100)
    @given(today=any_day)
    def test_rendered_file_depends_only_on_month(self, today):
        first = today.replace(day=1)

        assert render_resource_file(today) == render_resource_file(first)


class TestMergeProperties:
    @settings(max_examples=100)
    @given(existing=st.text(min_size=1), block=st.text())
    def test_existing_content_is_a_prefix(self, existing, block):
        merged = merge_companion_file(existing, block)

        assert merged.startswith(existing)
        assert merged.endswith(block)

    @settings(max_examples=100)
    @given(existing=st.text(min_size=1), block=st.text())
    def test_merge_adds_only_separator_and_block(self, existing, block):
        merged = merge_companion_file(existing, block)

        assert len(merged) == len(existing) + len(COMPANION_SEPARATOR) + len(block)
