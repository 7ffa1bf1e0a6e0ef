"""Unit tests for the budget declaration set.

Tests the budget period computation, the rendered resource file, companion
file merging, and writing the three files into a repository checkout.
"""

from datetime import date

import pytest

from src.toolserver.budget.declarations import (
    BUDGET_MARKER,
    COMPANION_SEPARATOR,
    OUTPUTS_BLOCK,
    OUTPUTS_FILE_NAME,
    RESOURCE_FILE_NAME,
    VARIABLES_BLOCK,
    VARIABLES_FILE_NAME,
    budget_time_window,
    merge_companion_file,
    render_resource_file,
    write_declarations,
)


class TestBudgetTimeWindow:
    """The period runs from the first of this month to the end of the same month next year."""

    def test_mid_month(self):
        assert budget_time_window(date(2025, 3, 15)) == (date(2025, 3, 1), date(2026, 3, 31))

    def test_first_day_of_month(self):
        assert budget_time_window(date(2025, 1, 1)) == (date(2025, 1, 1), date(2026, 1, 31))

    def test_december_rolls_into_next_year(self):
        assert budget_time_window(date(2025, 12, 31)) == (date(2025, 12, 1), date(2026, 12, 31))

    def test_leap_day_ends_on_non_leap_february(self):
        assert budget_time_window(date(2024, 2, 29)) == (date(2024, 2, 1), date(2025, 2, 28))

    def test_february_ending_in_leap_year(self):
        assert budget_time_window(date(2023, 2, 10)) == (date(2023, 2, 1), date(2024, 2, 29))

    @pytest.mark.parametrize("month", [4, 6, 9, 11])
    def test_thirty_day_months(self, month):
        _, end = budget_time_window(date(2025, month, 5))
        assert end == date(2026, month, 30)


class TestRenderResourceFile:
    def test_contains_period_timestamps(self, fixed_today):
        rendered = render_resource_file(fixed_today)

        assert 'start_date = "2025-03-01T00:00:00Z"' in rendered
        assert 'end_date   = "2026-03-31T00:00:00Z"' in rendered

    def test_declares_budget_resource(self, fixed_today):
        rendered = render_resource_file(fixed_today)

        assert BUDGET_MARKER in rendered
        assert rendered.startswith(f'resource "{BUDGET_MARKER}"')

    def test_is_deterministic_for_same_day(self, fixed_today):
        assert render_resource_file(fixed_today) == render_resource_file(fixed_today)

    def test_template_braces_are_rendered(self, fixed_today):
        rendered = render_resource_file(fixed_today)

        assert "{{" not in rendered
        assert "${var.budget_subscription_id}" in rendered


class TestMergeCompanionFile:
    def test_existing_content_is_followed_by_separator_and_block(self):
        assert merge_companion_file("A", "B") == "A" + COMPANION_SEPARATOR + "B"

    def test_missing_file_yields_block(self):
        assert merge_companion_file(None, "B") == "B"

    def test_empty_file_yields_block(self):
        assert merge_companion_file("", "B") == "B"

    def test_existing_content_is_not_normalized(self):
        existing = 'variable "x" {}\r\n\n   '
        merged = merge_companion_file(existing, "B")

        assert merged.startswith(existing)


class TestWriteDeclarations:
    def test_writes_all_three_files_in_empty_repo(self, tmp_path, fixed_today):
        written = write_declarations(tmp_path, fixed_today)

        assert written == [RESOURCE_FILE_NAME, VARIABLES_FILE_NAME, OUTPUTS_FILE_NAME]
        assert (tmp_path / RESOURCE_FILE_NAME).read_text() == render_resource_file(fixed_today)
        assert (tmp_path / VARIABLES_FILE_NAME).read_text() == VARIABLES_BLOCK
        assert (tmp_path / OUTPUTS_FILE_NAME).read_text() == OUTPUTS_BLOCK

    def test_appends_to_existing_companions(self, tmp_path, fixed_today):
        (tmp_path / VARIABLES_FILE_NAME).write_text('variable "region" {}\n')
        (tmp_path / OUTPUTS_FILE_NAME).write_text('output "rg" {}\n')

        write_declarations(tmp_path, fixed_today)

        variables = (tmp_path / VARIABLES_FILE_NAME).read_text()
        outputs = (tmp_path / OUTPUTS_FILE_NAME).read_text()
        assert variables == 'variable "region" {}\n' + COMPANION_SEPARATOR + VARIABLES_BLOCK
        assert outputs == 'output "rg" {}\n' + COMPANION_SEPARATOR + OUTPUTS_BLOCK

    def test_preserves_crlf_line_endings(self, tmp_path, fixed_today):
        original = b'variable "region" {\r\n  type = string\r\n}\r\n'
        (tmp_path / VARIABLES_FILE_NAME).write_bytes(original)

        write_declarations(tmp_path, fixed_today)

        assert (tmp_path / VARIABLES_FILE_NAME).read_bytes().startswith(original)

    def test_resource_file_is_overwritten(self, tmp_path, fixed_today):
        (tmp_path / RESOURCE_FILE_NAME).write_text("# stale\n")

        write_declarations(tmp_path, fixed_today)

        assert (tmp_path / RESOURCE_FILE_NAME).read_text() == render_resource_file(fixed_today)
