"""
Pydantic schemas for monday.com records and operation results.
"""

import json
from pydantic import BaseModel, Field
from typing import Optional, List, Any
from datetime import datetime
from enum import Enum


class BoardState(str, Enum):
    """Board/item lifecycle states accepted by the API filters."""
    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"
    ALL = "all"


class BoardKind(str, Enum):
    """Board visibility kinds."""
    PUBLIC = "public"
    PRIVATE = "private"
    SHARE = "share"


class UserKind(str, Enum):
    """User kinds accepted by the ``users`` query."""
    ALL = "all"
    NON_GUESTS = "non_guests"
    GUESTS = "guests"
    NON_PENDING = "non_pending"


class Column(BaseModel):
    """A typed field definition on a board."""
    id: str
    title: str
    type: str
    description: Optional[str] = None
    settings_str: Optional[str] = None
    archived: Optional[bool] = None

    @property
    def settings(self) -> dict:
        """Decoded ``settings_str`` (empty dict when absent)."""
        return json.loads(self.settings_str) if self.settings_str else {}


class Group(BaseModel):
    """A group (section) of items within a board."""
    id: str
    title: str
    color: Optional[str] = None
    position: Optional[str] = None
    archived: Optional[bool] = None


class BoardRef(BaseModel):
    """Minimal board reference embedded in items."""
    id: int
    name: Optional[str] = None


class GroupRef(BaseModel):
    """Minimal group reference embedded in items."""
    id: str
    title: Optional[str] = None


class ColumnValue(BaseModel):
    """The value of one column on one item, as returned by the API."""
    id: str
    type: Optional[str] = None
    text: Optional[str] = None
    value: Optional[str] = None

    @property
    def parsed_value(self) -> Any:
        """Decoded JSON ``value`` (``None`` when the cell is empty)."""
        return json.loads(self.value) if self.value else None


class Update(BaseModel):
    """An update (comment) posted on an item."""
    id: int
    body: Optional[str] = None
    text_body: Optional[str] = None
    created_at: Optional[datetime] = None
    creator_id: Optional[int] = None


class Item(BaseModel):
    """A row within a board."""
    id: int
    name: str
    state: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    board: Optional[BoardRef] = None
    group: Optional[GroupRef] = None
    column_values: List[ColumnValue] = Field(default_factory=list)
    subitems: List["Item"] = Field(default_factory=list)
    updates: List[Update] = Field(default_factory=list)

    @property
    def board_id(self) -> Optional[int]:
        return self.board.id if self.board else None

    @property
    def group_id(self) -> Optional[str]:
        return self.group.id if self.group else None

    def column(self, column_id: str) -> Optional[ColumnValue]:
        """Return the value of ``column_id`` on this item, if selected."""
        for column_value in self.column_values:
            if column_value.id == column_id:
                return column_value
        return None


Item.model_rebuild()


class Board(BaseModel):
    """A remote workspace table."""
    id: int
    name: str
    description: Optional[str] = None
    state: Optional[str] = None
    board_kind: Optional[str] = None
    workspace_id: Optional[int] = None
    items_count: Optional[int] = None
    url: Optional[str] = None
    updated_at: Optional[datetime] = None
    columns: List[Column] = Field(default_factory=list)
    groups: List[Group] = Field(default_factory=list)


class User(BaseModel):
    """A monday.com account user."""
    id: int
    name: str
    email: Optional[str] = None
    title: Optional[str] = None
    url: Optional[str] = None
    enabled: Optional[bool] = None
    is_admin: Optional[bool] = None
    is_guest: Optional[bool] = None
    is_pending: Optional[bool] = None
    created_at: Optional[datetime] = None


class Workspace(BaseModel):
    """A workspace that boards live in."""
    id: int
    name: str
    kind: Optional[str] = None
    description: Optional[str] = None


class OperationResult(BaseModel):
    """Plain success message returned by mutations when no object is requested."""
    success: bool = True
    message: str
    id: Optional[int] = None


class ProfileMetadata(BaseModel):
    """Metadata persisted next to a profile's encrypted credential."""
    name: str
    created: datetime
    base_url: str


class Profile(BaseModel):
    """A loaded profile: metadata plus the decrypted token."""
    metadata: ProfileMetadata
    token: str = Field(repr=False)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def base_url(self) -> str:
        return self.metadata.base_url
