"""Data models for SPSMonday."""

from .schemas import (
    Board,
    BoardKind,
    BoardRef,
    BoardState,
    Column,
    ColumnValue,
    Group,
    GroupRef,
    Item,
    OperationResult,
    Profile,
    ProfileMetadata,
    Update,
    User,
    UserKind,
    Workspace,
)
from .column_values import (
    CheckboxValue,
    ColumnValueInput,
    DateValue,
    EmailValue,
    LinkValue,
    LongTextValue,
    NumberValue,
    PersonValue,
    RawValue,
    StatusValue,
    TextValue,
    column_value_for,
    encode_column_values,
    parse_column_value,
)

__all__ = [
    "Board",
    "BoardKind",
    "BoardRef",
    "BoardState",
    "Column",
    "ColumnValue",
    "Group",
    "GroupRef",
    "Item",
    "OperationResult",
    "Profile",
    "ProfileMetadata",
    "Update",
    "User",
    "UserKind",
    "Workspace",
    "CheckboxValue",
    "ColumnValueInput",
    "DateValue",
    "EmailValue",
    "LinkValue",
    "LongTextValue",
    "NumberValue",
    "PersonValue",
    "RawValue",
    "StatusValue",
    "TextValue",
    "column_value_for",
    "encode_column_values",
    "parse_column_value",
]
