"""
GraphQL queries and mutations for monday.com API.

Every builder is a pure function of its arguments. Numeric arguments are
range-checked and enumerations restricted before anything is embedded in
the query text; free text goes through ``escape_graphql_string``.
"""

from enum import Enum
from typing import Iterable, Optional, Sequence, Union


BOARD_LIMIT_RANGE = (1, 500)
ITEM_LIMIT_RANGE = (1, 500)
ITEMS_BY_ID_LIMIT_RANGE = (1, 100)
USER_LIMIT_RANGE = (1, 1000)
WORKSPACE_LIMIT_RANGE = (1, 500)

BOARD_STATES = ("active", "archived", "deleted", "all")
BOARD_KINDS = ("public", "private", "share")
USER_KINDS = ("all", "non_guests", "guests", "non_pending")
COLUMN_TYPES = (
    "auto_number", "board_relation", "button", "checkbox", "color_picker",
    "country", "creation_log", "date", "dependency", "doc", "dropdown",
    "email", "file", "formula", "hour", "item_assignees", "item_id",
    "last_updated", "link", "location", "long_text", "mirror", "name",
    "numbers", "people", "phone", "progress", "rating", "status", "subtasks",
    "tags", "team", "text", "time_tracking", "timeline", "vote", "week",
    "world_clock",
)

BOARD_FIELDS = """
                id
                name
                description
                state
                board_kind
                workspace_id
                items_count
                url
                updated_at"""

COLUMN_FIELDS = """
                    id
                    title
                    type
                    description
                    archived"""

GROUP_FIELDS = """
                    id
                    title
                    color
                    position
                    archived"""

USER_FIELDS = """
                id
                name
                email
                title
                url
                enabled
                is_admin
                is_guest
                is_pending
                created_at"""

UPDATE_FIELDS = """
                id
                body
                text_body
                created_at
                creator_id"""

WORKSPACE_FIELDS = """
                id
                name
                kind
                description"""

ITEM_BASE_FIELDS = """
                id
                name
                state
                created_at
                updated_at
                board {
                    id
                    name
                }
                group {
                    id
                    title
                }"""


def escape_graphql_string(value: str) -> str:
    """
    Escape text for embedding inside a double-quoted GraphQL string literal.

    Handles backslash, double quote, newline, carriage return and tab.
    Strings without those characters come back unchanged.
    """
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


def _bounded(name: str, value: int, bounds: tuple) -> int:
    low, high = bounds
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")
    return value


def _choice(name: str, value: Union[str, Enum], allowed: Sequence[str]) -> str:
    text = value.value if isinstance(value, Enum) else value
    if text not in allowed:
        raise ValueError(f"{name} must be one of {', '.join(allowed)}; got {text!r}")
    return text


def _id_list(ids: Iterable[Union[int, str]]) -> str:
    """Render IDs as a GraphQL list body, rejecting anything non-numeric."""
    rendered = []
    for raw in ids:
        try:
            rendered.append(str(int(raw)))
        except (TypeError, ValueError):
            raise ValueError(f"Invalid monday.com ID: {raw!r}") from None
    if not rendered:
        raise ValueError("At least one ID is required")
    return ", ".join(rendered)


def _string_list(values: Iterable[str]) -> str:
    return ", ".join(f'"{escape_graphql_string(str(v))}"' for v in values)


def _column_values_selection(column_ids: Optional[Sequence[str]] = None) -> str:
    ids_arg = f"(ids: [{_string_list(column_ids)}])" if column_ids else ""
    return f"""
                column_values{ids_arg} {{
                    id
                    type
                    text
                    value
                }}"""


def item_fields(
    include_column_values: bool = True,
    include_subitems: bool = False,
    include_updates: bool = False,
    column_ids: Optional[Sequence[str]] = None,
) -> str:
    """
    Compose the field selection for items from the ``include_*`` flags.

    Args:
        include_column_values: Select ``column_values`` (restricted to
            ``column_ids`` when given)
        include_subitems: Select ``subitems`` with the same column values
        include_updates: Select the item's ``updates``
        column_ids: Optional subset of column IDs to select

    Returns:
        Field selection text (without surrounding braces)
    """
    fields = ITEM_BASE_FIELDS
    if include_column_values:
        fields += _column_values_selection(column_ids)
    if include_subitems:
        sub_fields = ITEM_BASE_FIELDS
        if include_column_values:
            sub_fields += _column_values_selection(column_ids)
        fields += f"""
                subitems {{{sub_fields}
                }}"""
    if include_updates:
        fields += f"""
                updates {{{UPDATE_FIELDS}
                }}"""
    return fields


class MondayQueries:
    """Collection of GraphQL queries and mutations for monday.com API."""

    # ------------------------------------------------------------------
    #  Boards
    # ------------------------------------------------------------------

    @staticmethod
    def boards_query(
        board_ids: Optional[Sequence[int]] = None,
        limit: int = 25,
        page: int = 1,
        state: Union[str, Enum] = "active",
        board_kind: Optional[Union[str, Enum]] = None,
        workspace_ids: Optional[Sequence[int]] = None,
        include_columns: bool = False,
        include_groups: bool = False,
        include_settings: bool = False,
    ) -> str:
        """
        Generate query to list boards.

        Args:
            board_ids: Restrict to these board IDs
            limit: Boards per page (1-500)
            page: Page number, starting at 1
            state: Board state filter
            board_kind: Optional board kind filter
            workspace_ids: Restrict to these workspaces
            include_columns: Select the boards' columns
            include_groups: Select the boards' groups
            include_settings: Select ``settings_str`` on columns

        Returns:
            GraphQL query string
        """
        args = [
            f"limit: {_bounded('limit', limit, BOARD_LIMIT_RANGE)}",
            f"page: {_bounded('page', page, (1, 2 ** 31 - 1))}",
            f"state: {_choice('state', state, BOARD_STATES)}",
        ]
        if board_ids:
            args.insert(0, f"ids: [{_id_list(board_ids)}]")
        if board_kind is not None:
            args.append(f"board_kind: {_choice('board_kind', board_kind, BOARD_KINDS)}")
        if workspace_ids:
            args.append(f"workspace_ids: [{_id_list(workspace_ids)}]")

        fields = BOARD_FIELDS
        if include_columns:
            column_fields = COLUMN_FIELDS + ("\n                    settings_str" if include_settings else "")
            fields += f"""
                columns {{{column_fields}
                }}"""
        if include_groups:
            fields += f"""
                groups {{{GROUP_FIELDS}
                }}"""

        return f"""
        query {{
            boards({", ".join(args)}) {{{fields}
            }}
        }}
        """

    @staticmethod
    def create_board_mutation(
        name: str,
        board_kind: Union[str, Enum] = "public",
        workspace_id: Optional[int] = None,
        folder_id: Optional[int] = None,
        description: Optional[str] = None,
        full: bool = False,
    ) -> str:
        """Generate mutation to create a board."""
        args = [
            f'board_name: "{escape_graphql_string(name)}"',
            f"board_kind: {_choice('board_kind', board_kind, BOARD_KINDS)}",
        ]
        if workspace_id is not None:
            args.append(f"workspace_id: {_id_list([workspace_id])}")
        if folder_id is not None:
            args.append(f"folder_id: {_id_list([folder_id])}")
        if description:
            args.append(f'description: "{escape_graphql_string(description)}"')
        fields = BOARD_FIELDS if full else "\n                id"
        return f"""
        mutation {{
            create_board({", ".join(args)}) {{{fields}
            }}
        }}
        """

    @staticmethod
    def archive_board_mutation(board_id: int) -> str:
        return f"""
        mutation {{
            archive_board(board_id: {_id_list([board_id])}) {{
                id
            }}
        }}
        """

    @staticmethod
    def delete_board_mutation(board_id: int) -> str:
        return f"""
        mutation {{
            delete_board(board_id: {_id_list([board_id])}) {{
                id
            }}
        }}
        """

    # ------------------------------------------------------------------
    #  Columns & groups
    # ------------------------------------------------------------------

    @staticmethod
    def columns_query(
        board_id: int,
        column_ids: Optional[Sequence[str]] = None,
        include_settings: bool = False,
    ) -> str:
        """
        Generate query to fetch the column definitions of a board.

        Args:
            board_id: The monday.com board ID
            column_ids: Optional subset of column IDs
            include_settings: Select ``settings_str`` (status labels etc.)

        Returns:
            GraphQL query string
        """
        ids_arg = f"(ids: [{_string_list(column_ids)}])" if column_ids else ""
        fields = COLUMN_FIELDS + ("\n                    settings_str" if include_settings else "")
        return f"""
        query {{
            boards(ids: [{_id_list([board_id])}]) {{
                id
                columns{ids_arg} {{{fields}
                }}
            }}
        }}
        """

    @staticmethod
    def create_column_mutation(
        board_id: int,
        title: str,
        column_type: str,
        description: Optional[str] = None,
        full: bool = False,
    ) -> str:
        """Generate mutation to add a column to a board."""
        args = [
            f"board_id: {_id_list([board_id])}",
            f'title: "{escape_graphql_string(title)}"',
            f"column_type: {_choice('column_type', column_type, COLUMN_TYPES)}",
        ]
        if description:
            args.append(f'description: "{escape_graphql_string(description)}"')
        fields = COLUMN_FIELDS if full else "\n                    id"
        return f"""
        mutation {{
            create_column({", ".join(args)}) {{{fields}
            }}
        }}
        """

    @staticmethod
    def groups_query(board_id: int) -> str:
        return f"""
        query {{
            boards(ids: [{_id_list([board_id])}]) {{
                id
                groups {{{GROUP_FIELDS}
                }}
            }}
        }}
        """

    @staticmethod
    def create_group_mutation(board_id: int, name: str, full: bool = False) -> str:
        fields = GROUP_FIELDS if full else "\n                    id"
        return f"""
        mutation {{
            create_group(board_id: {_id_list([board_id])}, group_name: "{escape_graphql_string(name)}") {{{fields}
            }}
        }}
        """

    # ------------------------------------------------------------------
    #  Items
    # ------------------------------------------------------------------

    @staticmethod
    def board_items_query(
        board_id: int,
        limit: int = 100,
        cursor: Optional[str] = None,
        include_column_values: bool = True,
        include_subitems: bool = False,
        include_updates: bool = False,
        column_ids: Optional[Sequence[str]] = None,
    ) -> str:
        """
        Generate query to fetch one page of items from a board.

        Args:
            board_id: The monday.com board ID
            limit: Number of items per page (1-500)
            cursor: Pagination cursor for fetching next page
            include_column_values: Select item column values
            include_subitems: Select subitems
            include_updates: Select item updates
            column_ids: Optional subset of column IDs

        Returns:
            GraphQL query string
        """
        cursor_arg = f', cursor: "{escape_graphql_string(cursor)}"' if cursor else ""
        fields = item_fields(include_column_values, include_subitems, include_updates, column_ids)

        return f"""
        query {{
            boards(ids: [{_id_list([board_id])}]) {{
                id
                name
                items_page(limit: {_bounded('limit', limit, ITEM_LIMIT_RANGE)}{cursor_arg}) {{
                    cursor
                    items {{{fields}
                    }}
                }}
            }}
        }}
        """

    @staticmethod
    def items_by_id_query(
        item_ids: Sequence[int],
        include_column_values: bool = True,
        include_subitems: bool = False,
        include_updates: bool = False,
        column_ids: Optional[Sequence[str]] = None,
    ) -> str:
        """
        Generate query to fetch items by ID (at most 100 per query).

        Returns:
            GraphQL query string
        """
        _bounded("number of item IDs", len(item_ids), ITEMS_BY_ID_LIMIT_RANGE)
        fields = item_fields(include_column_values, include_subitems, include_updates, column_ids)
        return f"""
        query {{
            items(ids: [{_id_list(item_ids)}], limit: {len(item_ids)}) {{{fields}
            }}
        }}
        """

    @staticmethod
    def create_item_mutation(
        board_id: int,
        name: str,
        group_id: Optional[str] = None,
        column_values_json: Optional[str] = None,
        create_labels_if_missing: bool = False,
        full: bool = False,
    ) -> str:
        """
        Generate mutation to create an item.

        Args:
            board_id: Target board
            name: Item name
            group_id: Optional target group
            column_values_json: Output of ``encode_column_values``
            create_labels_if_missing: Let status/dropdown labels be created
            full: Select the whole item instead of just its ID

        Returns:
            GraphQL mutation string
        """
        args = [
            f"board_id: {_id_list([board_id])}",
            f'item_name: "{escape_graphql_string(name)}"',
        ]
        if group_id:
            args.append(f'group_id: "{escape_graphql_string(group_id)}"')
        if column_values_json:
            args.append(f'column_values: "{escape_graphql_string(column_values_json)}"')
        if create_labels_if_missing:
            args.append("create_labels_if_missing: true")
        fields = item_fields() if full else "\n                id"
        return f"""
        mutation {{
            create_item({", ".join(args)}) {{{fields}
            }}
        }}
        """

    @staticmethod
    def change_column_values_mutation(
        board_id: int,
        item_id: int,
        column_values_json: str,
        create_labels_if_missing: bool = False,
        full: bool = False,
    ) -> str:
        """Generate mutation to change several column values on one item."""
        args = [
            f"board_id: {_id_list([board_id])}",
            f"item_id: {_id_list([item_id])}",
            f'column_values: "{escape_graphql_string(column_values_json)}"',
        ]
        if create_labels_if_missing:
            args.append("create_labels_if_missing: true")
        fields = item_fields() if full else "\n                id"
        return f"""
        mutation {{
            change_multiple_column_values({", ".join(args)}) {{{fields}
            }}
        }}
        """

    @staticmethod
    def move_item_mutation(item_id: int, group_id: str, full: bool = False) -> str:
        fields = item_fields() if full else "\n                id"
        return f"""
        mutation {{
            move_item_to_group(item_id: {_id_list([item_id])}, group_id: "{escape_graphql_string(group_id)}") {{{fields}
            }}
        }}
        """

    @staticmethod
    def archive_item_mutation(item_id: int) -> str:
        return f"""
        mutation {{
            archive_item(item_id: {_id_list([item_id])}) {{
                id
            }}
        }}
        """

    @staticmethod
    def delete_item_mutation(item_id: int) -> str:
        return f"""
        mutation {{
            delete_item(item_id: {_id_list([item_id])}) {{
                id
            }}
        }}
        """

    @staticmethod
    def create_update_mutation(item_id: int, body: str, full: bool = False) -> str:
        fields = UPDATE_FIELDS if full else "\n                id"
        return f"""
        mutation {{
            create_update(item_id: {_id_list([item_id])}, body: "{escape_graphql_string(body)}") {{{fields}
            }}
        }}
        """

    # ------------------------------------------------------------------
    #  Users & workspaces
    # ------------------------------------------------------------------

    @staticmethod
    def users_query(
        user_ids: Optional[Sequence[int]] = None,
        emails: Optional[Sequence[str]] = None,
        kind: Union[str, Enum] = "all",
        name: Optional[str] = None,
        limit: int = 50,
        newest_first: bool = False,
    ) -> str:
        """
        Generate query to list account users.

        Args:
            user_ids: Restrict to these user IDs
            emails: Restrict to these email addresses
            kind: User kind filter
            name: Fuzzy name filter
            limit: Maximum users returned (1-1000)
            newest_first: Sort newest accounts first

        Returns:
            GraphQL query string
        """
        args = [
            f"kind: {_choice('kind', kind, USER_KINDS)}",
            f"limit: {_bounded('limit', limit, USER_LIMIT_RANGE)}",
        ]
        if user_ids:
            args.insert(0, f"ids: [{_id_list(user_ids)}]")
        if emails:
            args.append(f"emails: [{_string_list(emails)}]")
        if name:
            args.append(f'name: "{escape_graphql_string(name)}"')
        if newest_first:
            args.append("newest_first: true")
        return f"""
        query {{
            users({", ".join(args)}) {{{USER_FIELDS}
            }}
        }}
        """

    @staticmethod
    def me_query() -> str:
        return f"""
        query {{
            me {{{USER_FIELDS}
            }}
        }}
        """

    @staticmethod
    def workspaces_query(workspace_ids: Optional[Sequence[int]] = None, limit: int = 25) -> str:
        args = [f"limit: {_bounded('limit', limit, WORKSPACE_LIMIT_RANGE)}"]
        if workspace_ids:
            args.insert(0, f"ids: [{_id_list(workspace_ids)}]")
        return f"""
        query {{
            workspaces({", ".join(args)}) {{{WORKSPACE_FIELDS}
            }}
        }}
        """
