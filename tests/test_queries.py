"""Tests for the GraphQL query builders."""

import pytest

from spsmonday.models import BoardState
from spsmonday.monday_client.queries import MondayQueries, escape_graphql_string, item_fields


class TestEscapeGraphqlString:
    """Tests for escape_graphql_string()."""

    @pytest.mark.parametrize("text", ["", "plain text", "Sprint 12 - QA/UAT (v2)", "émoji ✓"])
    def test_safe_strings_unchanged(self, text):
        assert escape_graphql_string(text) == text

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("back\\slash", "back\\\\slash"),
            ('say "hi"', 'say \\"hi\\"'),
            ("line\nbreak", "line\\nbreak"),
            ("carriage\rreturn", "carriage\\rreturn"),
            ("tab\there", "tab\\there"),
        ],
    )
    def test_special_characters_escaped(self, text, expected):
        assert escape_graphql_string(text) == expected

    def test_backslash_escaped_before_quote(self):
        assert escape_graphql_string('\\"') == '\\\\\\"'

    def test_no_raw_control_characters_remain(self):
        escaped = escape_graphql_string('a"b\\c\nd\re\tf')
        assert "\n" not in escaped and "\r" not in escaped and "\t" not in escaped
        assert escaped.count('\\"') == 1


class TestBoardItemsQuery:
    """Tests for MondayQueries.board_items_query()."""

    @pytest.mark.parametrize("limit", [1, 2, 50, 100, 499, 500])
    def test_limit_embedded_unmodified(self, limit):
        query = MondayQueries.board_items_query(board_id=123, limit=limit)
        assert f"items_page(limit: {limit})" in query

    @pytest.mark.parametrize("limit", [0, -1, 501, 10_000])
    def test_limit_out_of_range_rejected(self, limit):
        with pytest.raises(ValueError, match="limit"):
            MondayQueries.board_items_query(board_id=123, limit=limit)

    def test_non_integer_limit_rejected(self):
        with pytest.raises(ValueError):
            MondayQueries.board_items_query(board_id=123, limit="100")

    def test_cursor_included_when_present(self):
        query = MondayQueries.board_items_query(board_id=123, limit=10, cursor="MSw5NzI4MDA5MDAsaV9YcmxJb0p1VEdYc1VWeGlxeF9kLDg4MiwzNXw0MTQ1NzU1MTE5")
        assert 'items_page(limit: 10, cursor: "MSw5NzI4MDA5MDAsaV9YcmxJb0p1VEdYc1VWeGlxeF9kLDg4MiwzNXw0MTQ1NzU1MTE5")' in query

    def test_board_id_must_be_numeric(self):
        with pytest.raises(ValueError, match="Invalid monday.com ID"):
            MondayQueries.board_items_query(board_id="1] { id } boards(ids: [2")

    def test_column_ids_restrict_selection(self):
        query = MondayQueries.board_items_query(board_id=1, column_ids=["status", "date4"])
        assert 'column_values(ids: ["status", "date4"])' in query


class TestItemFields:
    """Tests for item_fields()."""

    def test_default_selection(self):
        fields = item_fields()
        assert "column_values" in fields
        assert "subitems" not in fields
        assert "updates" not in fields

    def test_flags_add_selections(self):
        fields = item_fields(include_column_values=False, include_subitems=True, include_updates=True)
        assert "column_values" not in fields
        assert "subitems {" in fields
        assert "updates {" in fields
        assert "text_body" in fields


class TestBoardsQuery:
    """Tests for MondayQueries.boards_query()."""

    def test_defaults(self):
        query = MondayQueries.boards_query()
        assert "boards(limit: 25, page: 1, state: active)" in query
        assert "columns" not in query
        assert "groups" not in query

    def test_ids_kind_and_workspaces(self):
        query = MondayQueries.boards_query(
            board_ids=[1, "2"], board_kind="private", workspace_ids=[9], state=BoardState.ALL
        )
        assert "ids: [1, 2]" in query
        assert "board_kind: private" in query
        assert "workspace_ids: [9]" in query
        assert "state: all" in query

    def test_invalid_state_rejected(self):
        with pytest.raises(ValueError, match="state must be one of"):
            MondayQueries.boards_query(state="closed")

    def test_include_columns_with_settings(self):
        query = MondayQueries.boards_query(include_columns=True, include_groups=True, include_settings=True)
        assert "columns {" in query
        assert "settings_str" in query
        assert "groups {" in query


class TestMutations:
    """Tests for mutation builders."""

    def test_create_item_escapes_name_and_column_values(self):
        query = MondayQueries.create_item_mutation(
            board_id=1,
            name='Fix "login"\nbug',
            group_id="topics",
            column_values_json='{"status":{"label":"Done"}}',
            create_labels_if_missing=True,
        )
        assert 'item_name: "Fix \\"login\\"\\nbug"' in query
        assert 'column_values: "{\\"status\\":{\\"label\\":\\"Done\\"}}"' in query
        assert 'group_id: "topics"' in query
        assert "create_labels_if_missing: true" in query

    def test_create_item_selects_only_id_by_default(self):
        query = MondayQueries.create_item_mutation(board_id=1, name="x")
        assert "column_values" not in query
        assert "created_at" not in query

    def test_create_item_full_selects_item_fields(self):
        query = MondayQueries.create_item_mutation(board_id=1, name="x", full=True)
        assert "created_at" in query
        assert "column_values" in query

    def test_create_column_type_restricted(self):
        assert "column_type: status" in MondayQueries.create_column_mutation(1, "State", "status")
        with pytest.raises(ValueError, match="column_type"):
            MondayQueries.create_column_mutation(1, "State", "status) { id } x: create_board(")

    def test_create_update_escapes_body(self):
        query = MondayQueries.create_update_mutation(5, "Line 1\r\nLine\t2")
        assert 'body: "Line 1\\r\\nLine\\t2"' in query


class TestUsersQuery:
    """Tests for MondayQueries.users_query()."""

    @pytest.mark.parametrize("limit", [1, 1000])
    def test_limit_bounds(self, limit):
        assert f"limit: {limit}" in MondayQueries.users_query(limit=limit)

    def test_limit_too_large(self):
        with pytest.raises(ValueError):
            MondayQueries.users_query(limit=1001)

    def test_filters(self):
        query = MondayQueries.users_query(
            user_ids=[7], emails=["a@example.com"], kind="guests", name='O"Neil', newest_first=True
        )
        assert "ids: [7]" in query
        assert 'emails: ["a@example.com"]' in query
        assert "kind: guests" in query
        assert 'name: "O\\"Neil"' in query
        assert "newest_first: true" in query

    def test_invalid_kind(self):
        with pytest.raises(ValueError, match="kind"):
            MondayQueries.users_query(kind="admins")
