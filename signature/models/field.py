# signature/models/field.py
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from core.helpers.date_time_helper import parse_timestamp, utc_now
from ..exceptions.errors import FieldValueError

FieldValue = Union[str, bool, None]

CHECKBOX_SIZE_MIN = 60
CHECKBOX_SIZE_MAX = 200
DEFAULT_FONT_SIZE = 12


class FieldType(str, Enum):
    """Kind of a placed field. Closed set."""
    SIGNATURE = "signature"
    TEXT = "text"
    CHECKBOX = "checkbox"
    DATE = "date"


@dataclass(frozen=True)
class Position:
    """Screen pixels from the top-left corner of the rendered page."""
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    width: float
    height: float


def clamp_checkbox_size(size: Optional[float]) -> int:
    if size is None:
        return 100
    return int(max(CHECKBOX_SIZE_MIN, min(CHECKBOX_SIZE_MAX, round(size))))


def check_value(field_type: FieldType, value: Any) -> None:
    """Raise FieldValueError if *value* cannot be held by a field of *field_type*."""
    if value is None:
        return
    if field_type is FieldType.CHECKBOX:
        if not isinstance(value, bool):
            raise FieldValueError(f"checkbox value must be bool or None, got {type(value).__name__}")
    elif field_type in (FieldType.SIGNATURE, FieldType.TEXT, FieldType.DATE):
        if not isinstance(value, str):
            raise FieldValueError(f"{field_type.value} value must be str or None, got {type(value).__name__}")
    else:
        raise FieldValueError(f"Unknown field type {field_type!r}")


@dataclass
class Field:
    """
    A field placed on one page of a document or template.

    Position and size are kept in screen pixels of the unzoomed page
    rendering; conversion to PDF points happens at export time.
    """
    page: int
    position: Position
    size: Size
    field_type: FieldType
    id: Optional[str] = None
    temporary_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    field_name: str = ""
    value: FieldValue = None
    required: bool = False
    placeholder: Optional[str] = None

    # text/date formatting
    font_size: Optional[float] = None
    is_bold: bool = False
    is_italic: bool = False

    # checkbox scale in percent
    checkbox_size: int = 100

    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        try:
            self.field_type = FieldType(self.field_type)
        except ValueError as exc:
            raise FieldValueError(f"Unknown field type {self.field_type!r}") from exc
        if self.page < 1:
            raise FieldValueError(f"page must be >= 1, got {self.page}")
        check_value(self.field_type, self.value)
        self.checkbox_size = clamp_checkbox_size(self.checkbox_size)

    # ------------------------------------------------------------------ #
    @property
    def key(self) -> str:
        """Persisted id if present, otherwise the local temporary id."""
        return self.id if self.id else self.temporary_id

    def matches(self, key: str) -> bool:
        return key == self.id or key == self.temporary_id

    @property
    def is_checked(self) -> bool:
        return self.field_type is FieldType.CHECKBOX and self.value is True

    @property
    def has_value(self) -> bool:
        if self.value is None:
            return False
        if isinstance(self.value, bool):
            return self.value
        return self.value.strip() != ""

    # ------------------------------------------------------------------ #
    @classmethod
    def from_dict(cls, data: dict) -> "Field":
        """Build a Field from the API's camelCase representation."""
        field_type = data.get("fieldType", "text")
        value = data.get("value")
        if field_type == FieldType.CHECKBOX.value and value is None and "isChecked" in data:
            value = bool(data["isChecked"])

        raw_id = data.get("_id") or data.get("id")
        kwargs: dict = dict(
            page=int(data.get("page", 1)),
            position=Position(float(data.get("xPosition", 0)), float(data.get("yPosition", 0))),
            size=Size(float(data.get("width", 0)), float(data.get("height", 0))),
            field_type=field_type,
            id=str(raw_id) if raw_id else None,
            field_name=data.get("fieldName", ""),
            value=value,
            required=bool(data.get("required", False)),
            placeholder=data.get("placeholder"),
            font_size=data.get("fontSize"),
            is_bold=bool(data.get("isBold", False)),
            is_italic=bool(data.get("isItalic", False)),
            checkbox_size=data.get("checkboxSize", 100),
        )
        if data.get("temporary_id"):
            kwargs["temporary_id"] = data["temporary_id"]
        if data.get("createdAt"):
            kwargs["created_at"] = parse_timestamp(data["createdAt"])
        if data.get("updatedAt"):
            kwargs["updated_at"] = parse_timestamp(data["updatedAt"])
        return cls(**kwargs)

    def to_dict(self) -> dict:
        data = {
            "_id": self.id,
            "temporary_id": self.temporary_id,
            "page": self.page,
            "xPosition": self.position.x,
            "yPosition": self.position.y,
            "width": self.size.width,
            "height": self.size.height,
            "fieldType": self.field_type.value,
            "fieldName": self.field_name,
            "required": self.required,
            "value": self.value,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }
        if self.placeholder is not None:
            data["placeholder"] = self.placeholder
        if self.field_type in (FieldType.TEXT, FieldType.DATE):
            data.update(fontSize=self.font_size, isBold=self.is_bold, isItalic=self.is_italic)
        if self.field_type is FieldType.CHECKBOX:
            data.update(checkboxSize=self.checkbox_size, isChecked=self.is_checked)
        return data
