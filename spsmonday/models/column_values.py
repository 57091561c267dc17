"""
Column values written by item mutations.

Each variant knows the JSON shape its column type expects. Callers pick a
variant explicitly, or let ``column_value_for`` choose one from a declared
column type (as returned by ``get_columns``).
"""

import json
import datetime as dt
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, model_validator


class TextValue(BaseModel):
    kind: Literal["text"] = "text"
    text: str

    def to_api(self) -> Any:
        return self.text


class LongTextValue(BaseModel):
    kind: Literal["long_text"] = "long_text"
    text: str

    def to_api(self) -> Any:
        return {"text": self.text}


class NumberValue(BaseModel):
    kind: Literal["numbers"] = "numbers"
    number: Union[int, float]

    def to_api(self) -> Any:
        return str(self.number)


class StatusValue(BaseModel):
    """Status label, addressed by label text or by palette index."""
    kind: Literal["status"] = "status"
    label: Optional[str] = None
    index: Optional[int] = None

    @model_validator(mode="after")
    def _label_or_index(self) -> "StatusValue":
        if (self.label is None) == (self.index is None):
            raise ValueError("StatusValue needs exactly one of label or index")
        return self

    def to_api(self) -> Any:
        if self.label is not None:
            return {"label": self.label}
        return {"index": self.index}


class DateValue(BaseModel):
    kind: Literal["date"] = "date"
    date: dt.date
    time: Optional[dt.time] = None

    def to_api(self) -> Any:
        payload = {"date": self.date.isoformat()}
        if self.time is not None:
            payload["time"] = self.time.strftime("%H:%M:%S")
        return payload


class PersonValue(BaseModel):
    kind: Literal["people"] = "people"
    ids: List[int] = Field(min_length=1)

    def to_api(self) -> Any:
        return {"personsAndTeams": [{"id": user_id, "kind": "person"} for user_id in self.ids]}


class CheckboxValue(BaseModel):
    kind: Literal["checkbox"] = "checkbox"
    checked: bool

    def to_api(self) -> Any:
        # Clearing a checkbox is done by sending null.
        return {"checked": "true"} if self.checked else None


class EmailValue(BaseModel):
    kind: Literal["email"] = "email"
    email: str
    text: Optional[str] = None

    def to_api(self) -> Any:
        return {"email": self.email, "text": self.text or self.email}


class LinkValue(BaseModel):
    kind: Literal["link"] = "link"
    url: str
    text: Optional[str] = None

    def to_api(self) -> Any:
        return {"url": self.url, "text": self.text or self.url}


class RawValue(BaseModel):
    """Pre-shaped JSON passed through unchanged."""
    kind: Literal["raw"] = "raw"
    value: Any

    def to_api(self) -> Any:
        return self.value


ColumnValueInput = Annotated[
    Union[
        TextValue,
        LongTextValue,
        NumberValue,
        StatusValue,
        DateValue,
        PersonValue,
        CheckboxValue,
        EmailValue,
        LinkValue,
        RawValue,
    ],
    Field(discriminator="kind"),
]

_column_value_adapter = TypeAdapter(ColumnValueInput)


def parse_column_value(data: Mapping[str, Any]) -> ColumnValueInput:
    """Build a variant from a ``{"kind": ..., ...}`` mapping."""
    return _column_value_adapter.validate_python(data)


def _as_date(value: Any) -> DateValue:
    if isinstance(value, dt.datetime):
        return DateValue(date=value.date(), time=value.time().replace(microsecond=0))
    if isinstance(value, dt.date):
        return DateValue(date=value)
    if isinstance(value, str) and " " in value.strip():
        day, clock = value.strip().split(" ", 1)
        return DateValue(date=day, time=clock)
    return DateValue(date=value)


def _as_status(value: Any) -> StatusValue:
    if isinstance(value, int) and not isinstance(value, bool):
        return StatusValue(index=value)
    return StatusValue(label=str(value))


def _as_people(value: Any) -> PersonValue:
    if isinstance(value, (list, tuple, set)):
        return PersonValue(ids=list(value))
    return PersonValue(ids=[value])


CHECKED_STRINGS = {"true", "1", "yes", "checked"}
UNCHECKED_STRINGS = {"false", "0", "no", "unchecked", ""}


def _as_checkbox(value: Any) -> CheckboxValue:
    if isinstance(value, bool):
        return CheckboxValue(checked=value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in CHECKED_STRINGS:
            return CheckboxValue(checked=True)
        if text in UNCHECKED_STRINGS:
            return CheckboxValue(checked=False)
        raise ValueError(f"Cannot interpret {value!r} as a checkbox state")
    if value is None or value in (0, 1):
        return CheckboxValue(checked=bool(value))
    raise ValueError(f"Cannot interpret {value!r} as a checkbox state")


# Declared column type -> builder for plain Python values.
COLUMN_TYPE_BUILDERS = {
    "text": lambda value: TextValue(text=str(value)),
    "name": lambda value: TextValue(text=str(value)),
    "long_text": lambda value: LongTextValue(text=str(value)),
    "numbers": lambda value: NumberValue(number=value),
    "numeric": lambda value: NumberValue(number=value),
    "status": _as_status,
    "color": _as_status,
    "date": _as_date,
    "people": _as_people,
    "person": _as_people,
    "multiple-person": _as_people,
    "checkbox": _as_checkbox,
    "boolean": _as_checkbox,
    "email": lambda value: EmailValue(email=str(value)),
    "link": lambda value: LinkValue(url=str(value)),
}


def column_value_for(column_type: str, value: Any) -> ColumnValueInput:
    """
    Wrap a plain Python value in the variant matching a declared column type.

    Values that are already variants are returned unchanged. Unknown column
    types fall back to ``RawValue``.
    """
    if isinstance(value, BaseModel) and hasattr(value, "to_api"):
        return value
    builder = COLUMN_TYPE_BUILDERS.get(column_type)
    if builder is None:
        return RawValue(value=value)
    return builder(value)


def encode_column_values(values: Mapping[str, ColumnValueInput]) -> str:
    """Serialize ``{column_id: variant}`` to the JSON string the API expects."""
    payload: Dict[str, Any] = {}
    for column_id, column_value in values.items():
        if not hasattr(column_value, "to_api"):
            raise TypeError(
                f"Column '{column_id}' needs a column value variant, got {type(column_value).__name__}"
            )
        payload[column_id] = column_value.to_api()
    return json.dumps(payload, separators=(",", ":"))
