# signature/models/document_field.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class DocumentField:
    """Links a persisted field to the contact who has to fill it."""
    id: str
    field_id: str
    contact_id: Optional[str] = None
    is_signed: bool = False
    value: Union[str, bool, None] = None

    @classmethod
    def from_dict(cls, data: dict) -> "DocumentField":
        contact_id = data.get("contactId")
        return cls(
            id=str(data.get("_id") or data.get("id")),
            field_id=str(data["fieldId"]),
            contact_id=str(contact_id) if contact_id else None,
            is_signed=bool(data.get("isSigned", False)),
            value=data.get("value"),
        )
