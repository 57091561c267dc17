"""
monday.com GraphQL API client implementation.
Handles API communication, pagination, and mapping responses to models.
"""

import httpx
import logging
from enum import Enum
from typing import Dict, Any, List, Mapping, Optional, Sequence, Union

from ..config import get_settings
from ..errors import (
    ConfigurationError,
    MondayClientError,
    NotFoundError,
    RemoteError,
    TransportError,
)
from ..models.column_values import ColumnValueInput, TextValue, column_value_for, encode_column_values
from ..models.schemas import (
    Board,
    Column,
    Group,
    Item,
    OperationResult,
    Profile,
    Update,
    User,
    Workspace,
)
from ..profiles import ProfileStore
from .queries import BOARD_STATES, ITEMS_BY_ID_LIMIT_RANGE, MondayQueries

logger = logging.getLogger(__name__)

AUTH_HINT = "authentication failed; check that the API token is valid and has not been revoked"
RATE_LIMIT_HINT = "rate limit exceeded; monday.com throttled this request, wait before sending more"


def _error_messages(payload: Any) -> List[str]:
    """Collect human-readable messages from a monday.com error body."""
    if not isinstance(payload, dict):
        return []
    errors = payload.get("errors")
    if isinstance(errors, list):
        messages = [
            e.get("message", "Unknown error") if isinstance(e, dict) else str(e)
            for e in errors
        ]
    else:
        messages = [str(errors)] if errors else []
    if payload.get("error_message"):
        messages.append(str(payload["error_message"]))
    return messages


class MondayClient:
    """
    Client session for the monday.com GraphQL API.

    Holds the base URL and token for one profile and exposes one method per
    API operation. Each method issues its requests sequentially through
    ``execute``.
    """

    def __init__(
        self,
        api_key: str = None,
        api_url: str = None,
        api_version: str = None,
        timeout: float = None,
        page_size: int = None,
        profile_name: str = None,
    ):
        """
        Initialize the monday.com client.

        Args:
            api_key: monday.com API token (optional, uses settings if not provided)
            api_url: API URL (optional, uses settings if not provided)
            api_version: Value of the ``API-Version`` header
            timeout: Request timeout in seconds (``None`` waits indefinitely)
            page_size: Default items per page for ``get_items``
            profile_name: Name of the profile the token came from
        """
        settings = get_settings()
        self.api_key = api_key or settings.MONDAY_API_KEY
        self.api_url = api_url or settings.MONDAY_API_URL
        self.api_version = api_version or settings.MONDAY_API_VERSION
        self.timeout = timeout if timeout is not None else settings.MONDAY_TIMEOUT
        self.page_size = page_size or settings.MONDAY_PAGE_SIZE
        self.profile_name = profile_name

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": self.api_key or "",
            "Content-Type": "application/json",
            "API-Version": self.api_version,
        }

    # ------------------------------------------------------------------
    #  Profiles
    # ------------------------------------------------------------------

    @classmethod
    def from_profile(cls, name: str = None, store: ProfileStore = None, **kwargs) -> "MondayClient":
        """
        Create a client from a stored profile.

        Args:
            name: Profile name (defaults to ``MONDAY_PROFILE``)
            store: Profile store (defaults to ``MONDAY_CONFIG_DIR``)

        Raises:
            ConfigurationError: If the profile cannot be loaded
        """
        client = cls(**kwargs)
        client.activate_profile(name, store=store)
        return client

    def activate_profile(self, name: str = None, store: ProfileStore = None) -> Profile:
        """
        Switch this session to another stored profile.

        The session is only changed once the profile has loaded; a missing or
        unreadable profile leaves the current token and URL in place.

        Raises:
            ConfigurationError: If the profile cannot be loaded
        """
        name = name or get_settings().MONDAY_PROFILE
        if not name:
            raise ConfigurationError("No profile name given and MONDAY_PROFILE is not set")
        profile = (store or ProfileStore()).load(name)

        self.api_key = profile.token
        self.api_url = profile.base_url
        self.profile_name = profile.name
        logger.info(f"Activated profile '{profile.name}' ({profile.base_url})")
        return profile

    # ------------------------------------------------------------------
    #  Request executor
    # ------------------------------------------------------------------

    def execute(self, query: str, variables: Dict[str, Any] = None, context: str = None) -> Dict[str, Any]:
        """
        Execute a GraphQL query against the monday.com API.

        Args:
            query: GraphQL query string
            variables: Optional query variables
            context: Operation label prefixed to error messages

        Returns:
            The ``data`` object of the response

        Raises:
            ConfigurationError: If no API token is set
            RemoteError: If the response carries GraphQL errors
            TransportError: If the request or the HTTP exchange fails
        """
        prefix = f"{context}: " if context else ""
        if not self.api_key:
            raise ConfigurationError(f"{prefix}No API token configured; activate a profile or set MONDAY_API_KEY")

        payload = {"query": query, "variables": variables or {}}
        logger.debug(f"POST {self.api_url} ({context or 'query'})")

        with httpx.Client(timeout=self.timeout) as client:
            try:
                response = client.post(
                    self.api_url,
                    headers=self.headers,
                    json=payload
                )

                response.raise_for_status()
                data = response.json()

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                try:
                    body = e.response.json()
                except ValueError:
                    body = None
                message = f"{prefix}HTTP error: {status}"
                details = _error_messages(body)
                if details:
                    message += f" ({'; '.join(details)})"
                if status == 401:
                    message += f" - {AUTH_HINT}"
                elif status == 429:
                    message += f" - {RATE_LIMIT_HINT}"
                logger.error(f"HTTP error from monday.com API: {message}")
                raise TransportError(message, status_code=status, response_data=body) from e
            except httpx.RequestError as e:
                logger.error(f"Request error to monday.com API: {e}")
                raise TransportError(f"{prefix}Request failed: {e}") from e
            except ValueError as e:
                logger.error(f"Failed to parse monday.com API response: {e}")
                raise TransportError(
                    f"{prefix}Invalid JSON response from API",
                    status_code=response.status_code,
                ) from e

        if not isinstance(data, dict):
            raise TransportError(f"{prefix}Unexpected response shape from API", status_code=response.status_code)

        # Errors win even when partial data came back.
        error_messages = _error_messages(data)
        if error_messages:
            logger.error(f"GraphQL errors from monday.com API ({context or 'query'}): {error_messages}")
            raise RemoteError(
                f"{prefix}GraphQL errors: {'; '.join(error_messages)}",
                status_code=response.status_code,
                response_data=data,
            )

        return data.get("data") or {}

    def _mutation_payload(self, data: Dict[str, Any], field: str, context: str) -> Dict[str, Any]:
        payload = data.get(field)
        if not payload:
            raise RemoteError(f"{context}: mutation '{field}' returned no data", response_data=data)
        return payload

    # ------------------------------------------------------------------
    #  Boards
    # ------------------------------------------------------------------

    def get_boards(
        self,
        board_ids: Sequence[int] = None,
        limit: int = 25,
        page: int = 1,
        state: Union[str, Enum] = "active",
        board_kind: Union[str, Enum] = None,
        workspace_ids: Sequence[int] = None,
        include_columns: bool = False,
        include_groups: bool = False,
    ) -> List[Board]:
        """
        List boards visible to the token.

        Returns:
            Boards, or an empty list when none match
        """
        context = f"get_boards(board_ids={list(board_ids) if board_ids else None})"
        query = MondayQueries.boards_query(
            board_ids=board_ids,
            limit=limit,
            page=page,
            state=state,
            board_kind=board_kind,
            workspace_ids=workspace_ids,
            include_columns=include_columns,
            include_groups=include_groups,
        )
        data = self.execute(query, context=context)

        boards = [Board.model_validate(raw) for raw in data.get("boards") or []]
        if not boards:
            logger.warning(f"No boards found ({context})")
        return boards

    def get_board(self, board_id: int, include_columns: bool = True, include_groups: bool = True) -> Board:
        """
        Fetch a single board with its columns and groups.

        Raises:
            NotFoundError: If the board is absent or inaccessible
        """
        query = MondayQueries.boards_query(
            board_ids=[board_id],
            limit=1,
            state="all",
            include_columns=include_columns,
            include_groups=include_groups,
            include_settings=include_columns,
        )
        data = self.execute(query, context=f"get_board(board_id={board_id})")

        boards = data.get("boards") or []
        if not boards:
            raise NotFoundError(f"Board not found: {board_id}")
        return Board.model_validate(boards[0])

    def new_board(
        self,
        name: str,
        board_kind: Union[str, Enum] = "public",
        workspace_id: int = None,
        folder_id: int = None,
        description: str = None,
        return_board: bool = False,
    ) -> Union[Board, OperationResult]:
        """Create a board; returns the board when ``return_board`` is set."""
        context = f"new_board(name={name!r})"
        query = MondayQueries.create_board_mutation(
            name=name,
            board_kind=board_kind,
            workspace_id=workspace_id,
            folder_id=folder_id,
            description=description,
            full=return_board,
        )
        payload = self._mutation_payload(self.execute(query, context=context), "create_board", context)

        logger.info(f"Created board '{name}' ({payload.get('id')})")
        if return_board:
            return Board.model_validate(payload)
        return OperationResult(message=f"Created board '{name}' ({payload['id']})", id=payload["id"])

    def remove_board(self, board_id: int, archive: bool = True) -> OperationResult:
        """Archive (default) or permanently delete a board."""
        if archive:
            context = f"archive_board(board_id={board_id})"
            field, query = "archive_board", MondayQueries.archive_board_mutation(board_id)
        else:
            context = f"delete_board(board_id={board_id})"
            field, query = "delete_board", MondayQueries.delete_board_mutation(board_id)
        self._mutation_payload(self.execute(query, context=context), field, context)

        verb = "Archived" if archive else "Deleted"
        logger.info(f"{verb} board {board_id}")
        return OperationResult(message=f"{verb} board {board_id}", id=board_id)

    # ------------------------------------------------------------------
    #  Columns & groups
    # ------------------------------------------------------------------

    def get_columns(
        self,
        board_id: int,
        column_ids: Sequence[str] = None,
        include_settings: bool = False,
    ) -> List[Column]:
        """
        Fetch the column definitions of a board.

        Returns:
            Columns, or an empty list when the board is not found
        """
        context = f"get_columns(board_id={board_id})"
        query = MondayQueries.columns_query(board_id, column_ids=column_ids, include_settings=include_settings)
        data = self.execute(query, context=context)

        boards = data.get("boards") or []
        if not boards:
            logger.warning(f"No board found with ID {board_id}")
            return []
        return [Column.model_validate(raw) for raw in boards[0].get("columns") or []]

    def new_column(
        self,
        board_id: int,
        title: str,
        column_type: str,
        description: str = None,
        return_column: bool = False,
    ) -> Union[Column, OperationResult]:
        context = f"new_column(board_id={board_id}, title={title!r})"
        query = MondayQueries.create_column_mutation(
            board_id, title, column_type, description=description, full=return_column
        )
        payload = self._mutation_payload(self.execute(query, context=context), "create_column", context)

        logger.info(f"Created column '{title}' ({payload.get('id')}) on board {board_id}")
        if return_column:
            return Column.model_validate(payload)
        return OperationResult(message=f"Created column '{title}' ({payload['id']}) on board {board_id}")

    def get_groups(self, board_id: int) -> List[Group]:
        context = f"get_groups(board_id={board_id})"
        data = self.execute(MondayQueries.groups_query(board_id), context=context)

        boards = data.get("boards") or []
        if not boards:
            logger.warning(f"No board found with ID {board_id}")
            return []
        return [Group.model_validate(raw) for raw in boards[0].get("groups") or []]

    def new_group(self, board_id: int, name: str, return_group: bool = False) -> Union[Group, OperationResult]:
        context = f"new_group(board_id={board_id}, name={name!r})"
        query = MondayQueries.create_group_mutation(board_id, name, full=return_group)
        payload = self._mutation_payload(self.execute(query, context=context), "create_group", context)

        logger.info(f"Created group '{name}' ({payload.get('id')}) on board {board_id}")
        if return_group:
            return Group.model_validate(payload)
        return OperationResult(message=f"Created group '{name}' ({payload['id']}) on board {board_id}")

    # ------------------------------------------------------------------
    #  Items
    # ------------------------------------------------------------------

    @staticmethod
    def _keep_item(item: Item, group_ids: Optional[set], state: str) -> bool:
        if group_ids and item.group_id not in group_ids:
            return False
        if state != "all" and item.state is not None and item.state != state:
            return False
        return True

    def get_items(
        self,
        board_id: int = None,
        item_ids: Sequence[int] = None,
        group_ids: Sequence[str] = None,
        state: Union[str, Enum] = "active",
        limit: int = None,
        fetch_all: bool = False,
        include_column_values: bool = True,
        include_subitems: bool = False,
        include_updates: bool = False,
        column_ids: Sequence[str] = None,
    ) -> List[Item]:
        """
        Fetch items from a board, or specific items by ID.

        Args:
            board_id: Board to list; with ``item_ids`` it restricts the
                result to items that belong to this board
            item_ids: Fetch these items instead of paging through a board
            group_ids: Keep only items in these groups
            state: Keep only items in this state (``all`` keeps everything)
            limit: Items per page (1-500, defaults to ``MONDAY_PAGE_SIZE``)
            fetch_all: Follow the cursor until the last page
            include_column_values: Select item column values
            include_subitems: Select subitems
            include_updates: Select item updates
            column_ids: Optional subset of column IDs

        Returns:
            Items in the order the API returned them; empty when none match
        """
        if board_id is None and not item_ids:
            raise ValueError("get_items needs a board_id or item_ids")
        state = state.value if isinstance(state, Enum) else state
        if state not in BOARD_STATES:
            raise ValueError(f"state must be one of {', '.join(BOARD_STATES)}; got {state!r}")

        wanted_groups = set(group_ids) if group_ids else None
        fields = dict(
            include_column_values=include_column_values,
            include_subitems=include_subitems,
            include_updates=include_updates,
            column_ids=column_ids,
        )

        if item_ids:
            items = self._get_items_by_id(item_ids, **fields)
            if board_id is not None:
                items = [item for item in items if item.board_id == int(board_id)]
            items = [item for item in items if self._keep_item(item, wanted_groups, state)]
            if not items:
                logger.warning(f"No items found for item IDs {list(item_ids)} (board {board_id})")
            return items

        return self._paginate_board_items(
            board_id,
            limit=limit if limit is not None else self.page_size,
            fetch_all=fetch_all,
            group_ids=wanted_groups,
            state=state,
            **fields,
        )

    def _get_items_by_id(self, item_ids: Sequence[int], **fields) -> List[Item]:
        unique_ids = list(dict.fromkeys(int(item_id) for item_id in item_ids))
        chunk_size = ITEMS_BY_ID_LIMIT_RANGE[1]
        items: List[Item] = []

        for start in range(0, len(unique_ids), chunk_size):
            chunk = unique_ids[start:start + chunk_size]
            query = MondayQueries.items_by_id_query(chunk, **fields)
            data = self.execute(query, context=f"get_items(item_ids={chunk})")
            items.extend(Item.model_validate(raw) for raw in data.get("items") or [])

        return items

    def _paginate_board_items(
        self,
        board_id: int,
        limit: int,
        fetch_all: bool,
        group_ids: Optional[set],
        state: str,
        **fields,
    ) -> List[Item]:
        all_items: List[Item] = []
        cursor = None
        page = 0
        context = f"get_items(board_id={board_id})"

        logger.info(f"Fetching items from board {board_id}")

        while True:
            page += 1
            query = MondayQueries.board_items_query(
                board_id=board_id,
                limit=limit,
                cursor=cursor,
                **fields,
            )

            data = self.execute(query, context=context)

            boards = data.get("boards") or []
            if not boards:
                logger.warning(f"No board found with ID {board_id}")
                break

            items_page = boards[0].get("items_page") or {}
            items = [Item.model_validate(raw) for raw in items_page.get("items") or []]
            all_items.extend(item for item in items if self._keep_item(item, group_ids, state))

            logger.info(f"Page {page}: Fetched {len(items)} items (total: {len(all_items)})")

            # Check for more pages
            cursor = items_page.get("cursor")
            if not cursor or not fetch_all:
                break

        if not all_items:
            logger.warning(f"No items found on board {board_id}")
        logger.info(f"Completed fetching {len(all_items)} items from board {board_id}")
        return all_items

    def get_item(self, item_id: int, **fields) -> Item:
        """
        Fetch a single item by ID.

        Raises:
            NotFoundError: If the item is absent or inaccessible
        """
        items = self._get_items_by_id([item_id], **fields)
        if not items:
            raise NotFoundError(f"Item not found: {item_id}")
        return items[0]

    def build_column_values(self, board_id: int, values: Mapping[str, Any]) -> Dict[str, ColumnValueInput]:
        """
        Wrap plain Python values using the board's declared column types.

        Raises:
            ValueError: If a column ID does not exist on the board
        """
        columns = {column.id: column.type for column in self.get_columns(board_id, column_ids=list(values))}
        missing = [column_id for column_id in values if column_id not in columns]
        if missing:
            raise ValueError(f"Columns not found on board {board_id}: {', '.join(missing)}")
        return {column_id: column_value_for(columns[column_id], value) for column_id, value in values.items()}

    def new_item(
        self,
        board_id: int,
        name: str,
        group_id: str = None,
        column_values: Mapping[str, ColumnValueInput] = None,
        create_labels_if_missing: bool = False,
        return_item: bool = False,
    ) -> Union[Item, OperationResult]:
        """
        Create an item on a board.

        Args:
            board_id: Target board
            name: Item name
            group_id: Optional target group (the board's top group otherwise)
            column_values: ``{column_id: variant}`` initial values
            create_labels_if_missing: Create unknown status/dropdown labels
            return_item: Return the created item instead of a message

        Returns:
            The new ``Item`` or an ``OperationResult``
        """
        context = f"new_item(board_id={board_id}, name={name!r})"
        query = MondayQueries.create_item_mutation(
            board_id=board_id,
            name=name,
            group_id=group_id,
            column_values_json=encode_column_values(column_values) if column_values else None,
            create_labels_if_missing=create_labels_if_missing,
            full=return_item,
        )
        payload = self._mutation_payload(self.execute(query, context=context), "create_item", context)

        logger.info(f"Created item '{name}' ({payload.get('id')}) on board {board_id}")
        if return_item:
            return Item.model_validate(payload)
        return OperationResult(message=f"Created item '{name}' ({payload['id']}) on board {board_id}", id=payload["id"])

    def set_item(
        self,
        board_id: int,
        item_id: int,
        column_values: Mapping[str, ColumnValueInput] = None,
        name: str = None,
        create_labels_if_missing: bool = False,
        return_item: bool = False,
    ) -> Union[Item, OperationResult]:
        """Change column values (and optionally the name) of an item."""
        values: Dict[str, ColumnValueInput] = dict(column_values or {})
        if name is not None:
            values["name"] = TextValue(text=name)
        if not values:
            raise ValueError("set_item needs column_values or a name")

        context = f"set_item(board_id={board_id}, item_id={item_id})"
        query = MondayQueries.change_column_values_mutation(
            board_id=board_id,
            item_id=item_id,
            column_values_json=encode_column_values(values),
            create_labels_if_missing=create_labels_if_missing,
            full=return_item,
        )
        payload = self._mutation_payload(
            self.execute(query, context=context), "change_multiple_column_values", context
        )

        logger.info(f"Updated item {item_id} on board {board_id} ({', '.join(values)})")
        if return_item:
            return Item.model_validate(payload)
        return OperationResult(message=f"Updated item {item_id} on board {board_id}", id=item_id)

    def move_item(self, item_id: int, group_id: str, return_item: bool = False) -> Union[Item, OperationResult]:
        context = f"move_item(item_id={item_id}, group_id={group_id!r})"
        query = MondayQueries.move_item_mutation(item_id, group_id, full=return_item)
        payload = self._mutation_payload(self.execute(query, context=context), "move_item_to_group", context)

        logger.info(f"Moved item {item_id} to group {group_id}")
        if return_item:
            return Item.model_validate(payload)
        return OperationResult(message=f"Moved item {item_id} to group {group_id}", id=item_id)

    def remove_item(self, item_id: int, archive: bool = False) -> OperationResult:
        """Delete (default) or archive an item."""
        if archive:
            context = f"archive_item(item_id={item_id})"
            field, query = "archive_item", MondayQueries.archive_item_mutation(item_id)
        else:
            context = f"delete_item(item_id={item_id})"
            field, query = "delete_item", MondayQueries.delete_item_mutation(item_id)
        self._mutation_payload(self.execute(query, context=context), field, context)

        verb = "Archived" if archive else "Deleted"
        logger.info(f"{verb} item {item_id}")
        return OperationResult(message=f"{verb} item {item_id}", id=item_id)

    def new_update(self, item_id: int, body: str, return_update: bool = False) -> Union[Update, OperationResult]:
        """Post an update (comment) on an item."""
        context = f"new_update(item_id={item_id})"
        query = MondayQueries.create_update_mutation(item_id, body, full=return_update)
        payload = self._mutation_payload(self.execute(query, context=context), "create_update", context)

        logger.info(f"Posted update {payload.get('id')} on item {item_id}")
        if return_update:
            return Update.model_validate(payload)
        return OperationResult(message=f"Posted update {payload['id']} on item {item_id}", id=payload["id"])

    # ------------------------------------------------------------------
    #  Users & workspaces
    # ------------------------------------------------------------------

    def get_users(
        self,
        user_ids: Sequence[int] = None,
        emails: Sequence[str] = None,
        kind: Union[str, Enum] = "all",
        name: str = None,
        limit: int = 50,
        newest_first: bool = False,
    ) -> List[User]:
        context = f"get_users(user_ids={list(user_ids) if user_ids else None}, emails={list(emails) if emails else None})"
        query = MondayQueries.users_query(
            user_ids=user_ids,
            emails=emails,
            kind=kind,
            name=name,
            limit=limit,
            newest_first=newest_first,
        )
        data = self.execute(query, context=context)

        users = [User.model_validate(raw) for raw in data.get("users") or []]
        if not users:
            logger.warning(f"No users found ({context})")
        return users

    def get_current_user(self) -> User:
        """Return the user that owns the active token."""
        data = self.execute(MondayQueries.me_query(), context="get_current_user()")
        if not data.get("me"):
            raise RemoteError("get_current_user(): response had no 'me' object", response_data=data)
        return User.model_validate(data["me"])

    def get_workspaces(self, workspace_ids: Sequence[int] = None, limit: int = 25) -> List[Workspace]:
        context = f"get_workspaces(workspace_ids={list(workspace_ids) if workspace_ids else None})"
        data = self.execute(MondayQueries.workspaces_query(workspace_ids, limit=limit), context=context)

        workspaces = [Workspace.model_validate(raw) for raw in data.get("workspaces") or []]
        if not workspaces:
            logger.warning(f"No workspaces found ({context})")
        return workspaces


__all__ = ["MondayClient", "MondayClientError"]
