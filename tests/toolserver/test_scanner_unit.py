"""Unit tests for detecting an existing budget declaration."""

from src.toolserver.budget.declarations import BUDGET_MARKER
from src.toolserver.budget.scanner import has_declaration, iter_declaration_files

RESOURCE_LINE = f'resource "{BUDGET_MARKER}" "existing" {{}}\n'


class TestHasDeclaration:
    def test_empty_repository(self, tmp_path):
        assert has_declaration(tmp_path, BUDGET_MARKER) is False

    def test_marker_in_root_file(self, tmp_path):
        (tmp_path / "main.tf").write_text(RESOURCE_LINE)

        assert has_declaration(tmp_path, BUDGET_MARKER) is True

    def test_marker_in_nested_module(self, tmp_path):
        nested = tmp_path / "modules" / "billing"
        nested.mkdir(parents=True)
        (nested / "budget.tf").write_text(RESOURCE_LINE)

        assert has_declaration(tmp_path, BUDGET_MARKER) is True

    def test_marker_in_non_declaration_file_is_ignored(self, tmp_path):
        (tmp_path / "README.md").write_text(RESOURCE_LINE)
        (tmp_path / "main.tf.bak").write_text(RESOURCE_LINE)

        assert has_declaration(tmp_path, BUDGET_MARKER) is False

    def test_unrelated_declarations(self, tmp_path):
        (tmp_path / "main.tf").write_text('resource "azurerm_resource_group" "rg" {}\n')

        assert has_declaration(tmp_path, BUDGET_MARKER) is False

    def test_git_and_terraform_metadata_are_skipped(self, tmp_path):
        for skipped in (".git", ".terraform"):
            directory = tmp_path / skipped / "modules"
            directory.mkdir(parents=True)
            (directory / "vendored.tf").write_text(RESOURCE_LINE)

        assert has_declaration(tmp_path, BUDGET_MARKER) is False

    def test_undecodable_bytes_do_not_abort_scan(self, tmp_path):
        (tmp_path / "a.tf").write_bytes(b"\xff\xfe\x00garbage")
        (tmp_path / "b.tf").write_text(RESOURCE_LINE)

        assert has_declaration(tmp_path, BUDGET_MARKER) is True


class TestIterDeclarationFiles:
    def test_yields_sorted_files_only(self, tmp_path):
        (tmp_path / "b.tf").write_text("")
        (tmp_path / "a.tf").write_text("")
        (tmp_path / "dir.tf").mkdir()

        names = [path.name for path in iter_declaration_files(tmp_path)]

        assert names == ["a.tf", "b.tf"]
