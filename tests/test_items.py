"""Tests for item listing, pagination and item mutations."""

import math

import pytest
import respx

from spsmonday.errors import NotFoundError, RemoteError
from spsmonday.models import DateValue, Item, OperationResult, PersonValue, StatusValue, TextValue

from conftest import API_URL, gql, raw_item, sent_body


def board_page(items, cursor=None, board_id=1):
    return gql({"boards": [{"id": str(board_id), "name": "Board", "items_page": {"cursor": cursor, "items": items}}]})


def paged_responses(total, page_size, board_id=1):
    """Split ``total`` items into cursor-linked pages."""
    pages = math.ceil(total / page_size)
    responses = []
    for page in range(pages):
        ids = range(page * page_size + 1, min((page + 1) * page_size, total) + 1)
        cursor = f"cursor-{page + 1}" if page < pages - 1 else None
        responses.append(board_page([raw_item(i, board_id) for i in ids], cursor, board_id))
    return responses


class TestPagination:
    """Tests for the cursor-following loop in get_items()."""

    @pytest.mark.parametrize("total, page_size", [(1, 10), (10, 10), (25, 10), (7, 3), (500, 500)])
    @respx.mock
    def test_fetch_all_concatenates_pages_in_order(self, client, total, page_size):
        route = respx.post(API_URL).mock(side_effect=paged_responses(total, page_size))

        items = client.get_items(board_id=1, limit=page_size, fetch_all=True)

        assert [item.id for item in items] == list(range(1, total + 1))
        assert route.call_count == math.ceil(total / page_size)

    @respx.mock
    def test_cursor_passed_to_following_pages(self, client):
        route = respx.post(API_URL).mock(side_effect=paged_responses(6, 2))

        client.get_items(board_id=1, limit=2, fetch_all=True)

        queries = [sent_body(route, i)["query"] for i in range(3)]
        assert "cursor:" not in queries[0]
        assert 'items_page(limit: 2, cursor: "cursor-1")' in queries[1]
        assert 'items_page(limit: 2, cursor: "cursor-2")' in queries[2]

    @respx.mock
    def test_single_page_without_fetch_all(self, client):
        route = respx.post(API_URL).mock(side_effect=paged_responses(30, 10))

        items = client.get_items(board_id=1, limit=10)

        assert len(items) == 10
        assert route.call_count == 1

    @respx.mock
    def test_empty_cursor_string_ends_paging(self, client):
        route = respx.post(API_URL).mock(return_value=board_page([raw_item(1)], cursor=""))

        assert len(client.get_items(board_id=1, fetch_all=True)) == 1
        assert route.call_count == 1

    @respx.mock
    def test_default_limit_from_settings(self, client):
        route = respx.post(API_URL).mock(return_value=board_page([]))
        client.get_items(board_id=1)
        assert "items_page(limit: 100)" in sent_body(route)["query"]

    @respx.mock
    def test_group_and_state_filtered_client_side(self, client):
        respx.post(API_URL).mock(side_effect=[
            board_page([raw_item(1, group_id="topics"), raw_item(2, group_id="done")], cursor="c1"),
            board_page([raw_item(3, group_id="topics", state="archived"), raw_item(4, group_id="topics")]),
        ])

        items = client.get_items(board_id=1, group_ids=["topics"], fetch_all=True)
        assert [item.id for item in items] == [1, 4]

    @respx.mock
    def test_state_all_keeps_everything(self, client):
        respx.post(API_URL).mock(return_value=board_page([raw_item(1), raw_item(2, state="archived")]))
        assert len(client.get_items(board_id=1, state="all")) == 2

    @respx.mock
    def test_missing_board_is_empty_result(self, client, caplog):
        respx.post(API_URL).mock(return_value=gql({"boards": []}))
        with caplog.at_level("WARNING"):
            assert client.get_items(board_id=999) == []
        assert "999" in caplog.text

    @respx.mock
    def test_error_on_later_page_propagates(self, client):
        respx.post(API_URL).mock(side_effect=[
            board_page([raw_item(1)], cursor="c1"),
            gql(errors=["CursorExpiredError"]),
        ])
        with pytest.raises(RemoteError, match=r"get_items\(board_id=1\).*CursorExpiredError"):
            client.get_items(board_id=1, fetch_all=True)

    @respx.mock
    @pytest.mark.parametrize("limit", [0, -1, 501])
    def test_limit_validated_before_request(self, client, limit):
        route = respx.post(API_URL).mock(return_value=gql({"boards": []}))
        with pytest.raises(ValueError):
            client.get_items(board_id=1, limit=limit)
        assert not route.called

    def test_board_or_item_ids_required(self, client):
        with pytest.raises(ValueError):
            client.get_items()

    def test_invalid_state(self, client):
        with pytest.raises(ValueError, match="state"):
            client.get_items(board_id=1, state="gone")


class TestItemsById:
    """Tests for get_items(item_ids=...) and get_item()."""

    @respx.mock
    def test_filters_by_board_membership(self, client):
        route = respx.post(API_URL).mock(return_value=gql({"items": [raw_item(111, board_id=1), raw_item(222, board_id=2)]}))

        items = client.get_items(board_id=1, item_ids=[111, 222])

        assert [item.id for item in items] == [111]
        assert "items(ids: [111, 222], limit: 2)" in sent_body(route)["query"]

    @respx.mock
    def test_without_board_keeps_all(self, client):
        respx.post(API_URL).mock(return_value=gql({"items": [raw_item(111, board_id=1), raw_item(222, board_id=2)]}))
        assert [item.id for item in client.get_items(item_ids=[111, 222])] == [111, 222]

    @respx.mock
    def test_ids_chunked_by_hundred(self, client):
        route = respx.post(API_URL).mock(side_effect=[
            gql({"items": [raw_item(i) for i in range(1, 101)]}),
            gql({"items": [raw_item(i) for i in range(101, 151)]}),
        ])
        items = client.get_items(item_ids=list(range(1, 151)))
        assert len(items) == 150
        assert route.call_count == 2

    @respx.mock
    def test_get_item(self, client):
        respx.post(API_URL).mock(return_value=gql({"items": [raw_item(5)]}))
        item = client.get_item(5)
        assert isinstance(item, Item)
        assert item.column("status").parsed_value == {"index": 1}
        assert item.board_id == 1
        assert item.group_id == "topics"

    @respx.mock
    def test_get_item_not_found(self, client):
        respx.post(API_URL).mock(return_value=gql({"items": []}))
        with pytest.raises(NotFoundError, match="5"):
            client.get_item(5)


class TestItemMutations:
    """Tests for new_item, set_item, move_item and remove_item."""

    @respx.mock
    def test_new_item_returns_message_by_default(self, client):
        route = respx.post(API_URL).mock(return_value=gql({"create_item": {"id": "77"}}))

        result = client.new_item(
            board_id=1,
            name="Launch",
            group_id="topics",
            column_values={
                "status": StatusValue(label="Working on it"),
                "date4": DateValue(date="2024-05-01"),
                "person": PersonValue(ids=[9]),
            },
        )

        assert isinstance(result, OperationResult)
        assert result.success
        assert result.id == 77
        assert "Launch" in result.message
        query = sent_body(route)["query"]
        assert "create_item(board_id: 1" in query
        assert '\\"status\\":{\\"label\\":\\"Working on it\\"}' in query
        assert '\\"date4\\":{\\"date\\":\\"2024-05-01\\"}' in query
        assert '\\"personsAndTeams\\":[{\\"id\\":9,\\"kind\\":\\"person\\"}]' in query

    @respx.mock
    def test_new_item_return_item(self, client):
        respx.post(API_URL).mock(return_value=gql({"create_item": raw_item(78, name="Launch")}))
        item = client.new_item(board_id=1, name="Launch", return_item=True)
        assert isinstance(item, Item)
        assert item.name == "Launch"

    @respx.mock
    def test_new_item_null_payload(self, client):
        respx.post(API_URL).mock(return_value=gql({"create_item": None}))
        with pytest.raises(RemoteError, match=r"new_item\(board_id=1"):
            client.new_item(board_id=1, name="x")

    @respx.mock
    def test_set_item_with_name(self, client):
        route = respx.post(API_URL).mock(return_value=gql({"change_multiple_column_values": {"id": "5"}}))

        result = client.set_item(1, 5, column_values={"text": TextValue(text="hi")}, name="Renamed")

        assert result.id == 5
        query = sent_body(route)["query"]
        assert "change_multiple_column_values(board_id: 1, item_id: 5" in query
        assert '\\"name\\":\\"Renamed\\"' in query

    def test_set_item_requires_changes(self, client):
        with pytest.raises(ValueError):
            client.set_item(1, 5)

    @respx.mock
    def test_move_item(self, client):
        route = respx.post(API_URL).mock(return_value=gql({"move_item_to_group": {"id": "5"}}))
        result = client.move_item(5, "done")
        assert result.message == "Moved item 5 to group done"
        assert 'move_item_to_group(item_id: 5, group_id: "done")' in sent_body(route)["query"]

    @respx.mock
    @pytest.mark.parametrize("archive, mutation", [(False, "delete_item"), (True, "archive_item")])
    def test_remove_item(self, client, archive, mutation):
        route = respx.post(API_URL).mock(return_value=gql({mutation: {"id": "5"}}))
        result = client.remove_item(5, archive=archive)
        assert result.id == 5
        assert f"{mutation}(item_id: 5)" in sent_body(route)["query"]

    @respx.mock
    def test_build_column_values_uses_declared_types(self, client):
        respx.post(API_URL).mock(return_value=gql({"boards": [{"id": "1", "columns": [
            {"id": "status", "title": "Status", "type": "status"},
            {"id": "text_person", "title": "Person note", "type": "text"},
            {"id": "owner", "title": "Owner", "type": "people"},
        ]}]}))

        values = client.build_column_values(1, {"status": "Done", "text_person": "Ann", "owner": [4, 5]})

        assert values["status"] == StatusValue(label="Done")
        assert values["text_person"] == TextValue(text="Ann")
        assert values["owner"] == PersonValue(ids=[4, 5])

    @respx.mock
    def test_build_column_values_unknown_column(self, client):
        respx.post(API_URL).mock(return_value=gql({"boards": [{"id": "1", "columns": []}]}))
        with pytest.raises(ValueError, match="missing_col"):
            client.build_column_values(1, {"missing_col": 1})
