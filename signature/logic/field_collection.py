# signature/logic/field_collection.py
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Callable, Dict, Iterator, List, Optional

from core.helpers.date_time_helper import us_short_date, utc_now
from ..models.field import (
    DEFAULT_FONT_SIZE,
    Field,
    FieldType,
    FieldValue,
    Position,
    Size,
    check_value,
    clamp_checkbox_size,
)

logger = logging.getLogger(__name__)

# (x, y, width, height, name, required) used when a field is placed without template data
_PLACEMENT_DEFAULTS: Dict[FieldType, tuple] = {
    FieldType.SIGNATURE: (100, 300, 300, 100, "Signature", True),
    FieldType.TEXT: (100, 200, 300, 36, "Text Field", False),
    FieldType.CHECKBOX: (100, 150, 32, 32, "Checkbox", False),
    FieldType.DATE: (50, 50, 150, 36, "Date Field", False),
}


class FieldCollection:
    """
    Ordered set of fields placed during one editing or signing session.

    Template collections never hold values; document collections do. Fields
    are addressed by persisted id or temporary id. Draw order at export is
    the insertion order kept here.
    """

    def __init__(self, *, is_template: bool = False, today: Optional[date] = None) -> None:
        self.is_template = is_template
        self.today = today
        self._fields: List[Field] = []
        self._keys: set[str] = set()

    # -------- container protocol --------------------------------------------
    def __iter__(self) -> Iterator[Field]:
        return iter(list(self._fields))

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, key: object) -> bool:
        return any(f.matches(str(key)) for f in self._fields)

    @property
    def fields(self) -> List[Field]:
        return list(self._fields)

    def for_page(self, page: int) -> List[Field]:
        return [f for f in self._fields if f.page == page]

    def get(self, key: str) -> Optional[Field]:
        return next((f for f in self._fields if f.matches(key)), None)

    # -------- creation ------------------------------------------------------
    def _add(self, field_type: FieldType, page: int, value: FieldValue, *,
             template: Optional[bool], field_id: Optional[str], field_data: Optional[Field],
             **extra) -> Optional[Field]:
        x, y, w, h, name, required = _PLACEMENT_DEFAULTS[field_type]
        as_template = self.is_template if template is None else template
        if field_data is not None:
            if as_template:
                value = None
            elif field_data.value is not None:
                value = field_data.value
            fld = replace(
                field_data,
                page=page,
                id=field_id if field_id is not None else field_data.id,
                value=value,
            )
        else:
            fld = Field(
                page=page,
                position=Position(x, y),
                size=Size(w, h),
                field_type=field_type,
                id=field_id,
                field_name=name,
                value=None if as_template else value,
                required=required,
                **extra,
            )
        if fld.key in self._keys:
            logger.warning(f"Duplicate field {fld.key} detected, skipping addition")
            return None
        self._keys.add(fld.key)
        self._fields.append(fld)
        return fld

    def add_signature(self, page: int, signature: Optional[str] = None, *, template: Optional[bool] = None,
                      field_id: Optional[str] = None, field_data: Optional[Field] = None) -> Optional[Field]:
        return self._add(FieldType.SIGNATURE, page, signature,
                         template=template, field_id=field_id, field_data=field_data)

    def add_text(self, page: int, text: Optional[str] = None, *, template: Optional[bool] = None,
                 field_id: Optional[str] = None, field_data: Optional[Field] = None) -> Optional[Field]:
        return self._add(FieldType.TEXT, page, text, template=template, field_id=field_id,
                         field_data=field_data, placeholder="Enter text here",
                         font_size=DEFAULT_FONT_SIZE)

    def add_checkbox(self, page: int, checked: Optional[bool] = None, *, template: Optional[bool] = None,
                     field_id: Optional[str] = None, field_data: Optional[Field] = None) -> Optional[Field]:
        return self._add(FieldType.CHECKBOX, page, checked, template=template, field_id=field_id,
                         field_data=field_data, checkbox_size=100)

    def add_date(self, page: int, *, template: Optional[bool] = None,
                 field_id: Optional[str] = None, field_data: Optional[Field] = None) -> Optional[Field]:
        return self._add(FieldType.DATE, page, us_short_date(self.today), template=template,
                         field_id=field_id, field_data=field_data, font_size=DEFAULT_FONT_SIZE)

    # -------- updates -------------------------------------------------------
    def _update(self, key: str, change: Callable[[Field], Field],
                predicate: Callable[[Field], bool] = lambda f: True) -> Optional[Field]:
        for i, fld in enumerate(self._fields):
            if fld.matches(key) and predicate(fld):
                updated = replace(change(fld), updated_at=utc_now())
                self._fields[i] = updated
                return updated
        return None

    def move(self, key: str, x: float, y: float) -> Optional[Field]:
        return self._update(key, lambda f: replace(f, position=Position(x, y)))

    def resize(self, key: str, width: float, height: float) -> Optional[Field]:
        return self._update(key, lambda f: replace(f, size=Size(width, height)))

    def rename(self, key: str, name: str) -> Optional[Field]:
        return self._update(key, lambda f: replace(f, field_name=name))

    def set_value(self, key: str, value: FieldValue) -> Optional[Field]:
        fld = self.get(key)
        if fld is not None:
            check_value(fld.field_type, value)
        return self._update(key, lambda f: replace(f, value=value))

    def set_signature(self, key: str, signature: str) -> Optional[Field]:
        return self.set_value(key, signature)

    def set_text(self, key: str, text: Optional[str]) -> Optional[Field]:
        return self.set_value(key, text)

    def update_format(self, key: str, *, font_size: Optional[float] = None,
                      is_bold: Optional[bool] = None, is_italic: Optional[bool] = None) -> Optional[Field]:
        def change(f: Field) -> Field:
            return replace(
                f,
                font_size=f.font_size if font_size is None else font_size,
                is_bold=f.is_bold if is_bold is None else is_bold,
                is_italic=f.is_italic if is_italic is None else is_italic,
            )
        return self._update(key, change)

    def set_checkbox_size(self, key: str, size: float) -> Optional[Field]:
        return self._update(key, lambda f: replace(f, checkbox_size=clamp_checkbox_size(size)),
                            lambda f: f.field_type is FieldType.CHECKBOX)

    def toggle_checkbox(self, key: str) -> Optional[Field]:
        return self._update(key, lambda f: replace(f, value=not f.is_checked),
                            lambda f: f.field_type is FieldType.CHECKBOX)

    # -------- removal -------------------------------------------------------
    def remove(self, key: str) -> bool:
        fld = self.get(key)
        if fld is None:
            return False
        self._fields.remove(fld)
        self._keys.discard(fld.key)
        return True

    def reset(self) -> None:
        self._fields.clear()
        self._keys.clear()

    def load(self, fields: List[Field]) -> None:
        """Replace the collection with freshly loaded fields."""
        self.reset()
        for fld in fields:
            if fld.key in self._keys:
                logger.warning(f"Duplicate field {fld.key} detected, skipping addition")
                continue
            self._keys.add(fld.key)
            self._fields.append(fld)

    # -------- signing gate --------------------------------------------------
    def missing_required(self) -> List[Field]:
        return [f for f in self._fields if f.required and not f.has_value]

    def ready_to_sign(self) -> bool:
        """True when every required field carries a value."""
        return not self.missing_required()
