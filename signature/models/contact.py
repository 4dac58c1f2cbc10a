# signature/models/contact.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Contact:
    """A signer. Only read during export (attribution and certificates)."""
    id: str
    name: str
    email: str
    phone: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Contact":
        return cls(
            id=str(data.get("_id") or data.get("id")),
            name=data.get("name", ""),
            email=data.get("email", ""),
            phone=data.get("phone") or None,
        )
