"""Tests for the read-only query layer."""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from catalog.errors import NotFoundError, StorageUnavailableError, ValidationError
from catalog.sqlite_adapter import CommandCatalog, escape_like, parse_command_id, resolve_limit

from conftest import COMMANDS, SECTIONS, execute_sql


class TestStartup:
    """Opening the catalog and checking its schema."""

    def test_initialize_accepts_complete_schema(self, db_path):
        catalog = CommandCatalog(db_path)
        catalog.initialize()
        assert catalog.engine is not None
        catalog.close()
        assert catalog.engine is None

    def test_missing_table_is_fatal(self, db_path):
        execute_sql(db_path, "DROP TABLE BasicCommand;")
        catalog = CommandCatalog(db_path)
        with pytest.raises(StorageUnavailableError) as exc_info:
            catalog.initialize()
        assert "BasicCommand" in exc_info.value.detail
        assert catalog.engine is None

    def test_missing_file_is_fatal(self, tmp_path):
        catalog = CommandCatalog(str(tmp_path / "absent.db"))
        with pytest.raises(StorageUnavailableError):
            catalog.initialize()
        assert not (tmp_path / "absent.db").exists()

    def test_queries_before_initialize_report_storage_unavailable(self, db_path):
        with pytest.raises(StorageUnavailableError):
            CommandCatalog(db_path).get_stats()

    def test_database_is_opened_read_only(self, catalog):
        from sqlalchemy import text

        with catalog.engine.connect() as conn:
            with pytest.raises(OperationalError):
                conn.execute(text("DELETE FROM Command"))


class TestGetCommand:

    def test_command_detail_scenario(self, catalog):
        """Command 42 carries its translated category and verbatim description."""
        detail = catalog.get_command(42)
        assert detail.id == 42
        assert detail.name == "grep"
        assert detail.category == "System control"
        assert detail.description == "print lines matching a pattern"

    def test_sections_keep_stored_order_and_count(self, catalog):
        detail = catalog.get_command(42)
        expected = [title for _, title, _, owner in SECTIONS if owner == 42]
        assert [s.title for s in detail.sections] == expected
        assert len(detail.sections) == 4

    def test_tldr_is_lifted_from_sections(self, catalog):
        assert catalog.get_command(42).tldr == "grep pattern file"
        assert catalog.get_command(4).tldr is None

    def test_command_without_sections(self, catalog):
        detail = catalog.get_command(7)
        assert detail.sections == []

    def test_string_id_is_accepted(self, catalog):
        assert catalog.get_command("42").name == "grep"

    def test_unknown_id_is_not_found(self, catalog):
        with pytest.raises(NotFoundError) as exc_info:
            catalog.get_command(999999)
        assert exc_info.value.message == "Command not found"

    @pytest.mark.parametrize("raw", ["abc", "-1", "0", "1.5", "", " ", -3, 0, True, "٣",
                                     "99999999999999999999999", 2 ** 63])
    def test_malformed_id_is_rejected_before_querying(self, catalog, raw):
        with patch.object(catalog.engine, "connect") as connect:
            with pytest.raises(ValidationError):
                catalog.get_command(raw)
            connect.assert_not_called()

    def test_unknown_category_code_degrades_to_sentinel(self, catalog):
        assert catalog.get_command(6).category == "Other"


class TestSearch:

    def test_substring_over_name_and_description(self, catalog):
        names = [c.name for c in catalog.search_commands("gre")]
        assert names == ["agree", "great", "grep"]

    def test_ordering_is_deterministic(self, catalog):
        first = catalog.search_commands("gre")
        assert all(catalog.search_commands("gre") == first for _ in range(5))

    def test_exact_name_match_comes_first(self, catalog):
        names = [c.name for c in catalog.search_commands("ssh")]
        assert names == ["ssh", "autossh"]

    def test_case_insensitive(self, catalog):
        assert catalog.search_commands("GREP") == catalog.search_commands("grep")
        assert catalog.search_commands("GrE") == catalog.search_commands("gre")

    @pytest.mark.parametrize("query", ["", "   ", None])
    def test_blank_query_returns_nothing(self, catalog, query):
        assert catalog.search_commands(query) == []

    def test_limit_caps_results(self, catalog):
        assert len(catalog.search_commands("e", limit=2)) == 2

    def test_limit_is_clamped_to_maximum(self, db_path):
        catalog = CommandCatalog(db_path, search_default_limit=3, search_max_limit=4)
        catalog.initialize()
        try:
            assert len(catalog.search_commands("e")) == 3
            assert len(catalog.search_commands("e", limit=1000)) == 4
        finally:
            catalog.close()

    @pytest.mark.parametrize("limit", [0, -5, "many"])
    def test_invalid_limit(self, catalog, limit):
        with pytest.raises(ValidationError):
            catalog.search_commands("grep", limit=limit)

    def test_like_wildcards_match_literally(self, catalog):
        assert [c.name for c in catalog.search_commands("%")] == ["pct"]
        assert catalog.search_commands("_") == []

    def test_category_filter(self, catalog):
        names = [c.name for c in catalog.search_commands("s", category="ssh")]
        assert names == ["autossh", "ssh"]

    def test_unknown_category_filter_yields_nothing(self, catalog):
        assert catalog.search_commands("grep", category="Nope") == []


class TestSuggestions:

    def test_prefix_on_name_only(self, catalog):
        assert catalog.suggest_commands("gr") == ["great", "grep"]
        # "agree" contains "gr" but does not start with it
        assert "agree" not in catalog.suggest_commands("gr")

    def test_prefix_is_case_insensitive(self, catalog):
        assert catalog.suggest_commands("GR") == ["great", "grep"]

    def test_blank_prefix(self, catalog):
        assert catalog.suggest_commands("  ") == []

    def test_limit(self, catalog):
        assert catalog.suggest_commands("gr", limit=1) == ["great"]


class TestCategories:

    def test_list_commands_by_category_is_case_insensitive(self, catalog):
        names = [c.name for c in catalog.list_commands_by_category("files & FOLDERS")]
        assert names == ["cat", "chmod", "ls"]
        assert all(c.category == "Files & Folders" for c in catalog.list_commands_by_category("Files & Folders"))

    def test_unknown_category_is_empty_not_error(self, catalog):
        assert catalog.list_commands_by_category("Underwater Basket Weaving") == []

    def test_list_categories_by_position(self, catalog):
        assert catalog.list_categories() == ["One-liners", "Files & Folders", "Unlisted Things"]

    def test_detailed_categories(self, catalog):
        detailed = catalog.list_categories_detailed()
        assert [c.title for c in detailed] == ["One-liners", "Files & Folders", "Unlisted Things"]
        assert detailed[0].description == "Useful linux command line one liners"
        assert detailed[2].description is None
        assert all(c.icon is None for c in detailed)


class TestBasicGroups:

    def test_groups_with_commands(self, catalog):
        groups = catalog.list_basic_groups("files & folders")
        assert [g.title for g in groups] == ["Copy files", "List files"]
        assert [c.command for c in groups[0].commands] == ["cp source dest", "cp -r dir dest"]

    def test_command_name_is_first_line(self, catalog):
        groups = catalog.list_basic_groups("Files & Folders")
        listing = groups[1].commands[0]
        assert listing.name == "ls -la"
        assert listing.command == "ls -la\n# long listing"

    def test_unknown_basic_category(self, catalog):
        with pytest.raises(NotFoundError):
            catalog.list_basic_groups("Nope")

    def test_category_without_groups(self, catalog):
        assert catalog.list_basic_groups("Unlisted Things") == []


class TestMiscQueries:

    def test_stats(self, catalog):
        stats = catalog.get_stats()
        assert stats.total_commands == len(COMMANDS)
        assert stats.total_categories == 3
        assert stats.total_tips == 1
        assert stats.total_basic_categories == 3

    def test_all_commands_alphabetical(self, catalog):
        names = [c.name for c in catalog.list_all_commands()]
        assert names == sorted(names, key=str.lower)
        assert len(names) == len(COMMANDS)

    def test_popular_follows_curated_order_and_skips_missing(self, catalog):
        assert [c.name for c in catalog.get_popular_commands()] == ["ssh", "grep", "ls"]

    def test_popular_with_empty_list(self, db_path):
        catalog = CommandCatalog(db_path, popular_commands=[])
        catalog.initialize()
        try:
            assert catalog.get_popular_commands() == []
        finally:
            catalog.close()

    def test_random_tip_sections_by_position(self, catalog):
        tip = catalog.get_random_tip()
        assert tip.title == "Quick Navigation"
        assert [s.data1 for s in tip.sections] == ["Use Ctrl+A to go to beginning of line", "echo second"]
        assert tip.sections[0].type == 0

    def test_random_tip_on_empty_table(self, db_path):
        execute_sql(db_path, "DELETE FROM TipSection; DELETE FROM Tip;")
        catalog = CommandCatalog(db_path)
        catalog.initialize()
        try:
            with pytest.raises(NotFoundError):
                catalog.get_random_tip()
        finally:
            catalog.close()


class TestStorageFailures:

    def test_driver_error_becomes_storage_unavailable(self, catalog):
        error = OperationalError("SELECT", {}, Exception("disk I/O error"))
        with patch.object(catalog.engine, "connect", side_effect=error):
            with pytest.raises(StorageUnavailableError) as exc_info:
                catalog.get_stats()
        assert "disk I/O error" in exc_info.value.detail
        assert exc_info.value.message == "Database error"

    def test_corrupt_row_becomes_storage_unavailable(self, db_path):
        execute_sql(db_path, "INSERT INTO TipSection (tip_id, position, type, data1, data2, extra) "
                             "VALUES (1, 3, 'oops', 'x', '', '');")
        catalog = CommandCatalog(db_path)
        catalog.initialize()
        try:
            with pytest.raises(StorageUnavailableError):
                catalog.get_random_tip()
        finally:
            catalog.close()

    def test_not_found_is_distinct_from_storage_failure(self, catalog):
        with pytest.raises(NotFoundError) as exc_info:
            catalog.get_command(123456)
        assert not isinstance(exc_info.value, StorageUnavailableError)


def test_parse_command_id():
    assert parse_command_id(5) == 5
    assert parse_command_id(" 17 ") == 17


def test_resolve_limit():
    assert resolve_limit(None, 50, 100) == 50
    assert resolve_limit("20", 50, 100) == 20
    assert resolve_limit(500, 50, 100) == 100


def test_escape_like():
    assert escape_like("100%_a\\b") == "100\\%\\_a\\\\b"


def test_parse_command_id_upper_bound():
    assert parse_command_id(str(2 ** 63 - 1)) == 2 ** 63 - 1
    with pytest.raises(ValidationError):
        parse_command_id(str(2 ** 63))


def test_largest_id_is_not_found(catalog):
    with pytest.raises(NotFoundError):
        catalog.get_command(2 ** 63 - 1)
