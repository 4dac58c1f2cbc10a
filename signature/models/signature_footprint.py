# signature/models/signature_footprint.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.helpers.date_time_helper import parse_timestamp


@dataclass(frozen=True)
class SignatureFootprint:
    """
    Audit record captured when a contact completes signing a document.

    The footprint id doubles as the certificate id printed on the
    certificate page.
    """
    id: str
    contact_id: str
    ip_address: str
    user_agent: str
    created_at: datetime
    forwarded_ip: Optional[str] = None
    real_ip: Optional[str] = None
    document_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "SignatureFootprint":
        return cls(
            id=str(data.get("_id") or data.get("id")),
            contact_id=str(data["contactId"]),
            ip_address=data.get("ipAddress", ""),
            user_agent=data.get("userAgent", ""),
            created_at=parse_timestamp(data["createdAt"]),
            forwarded_ip=data.get("forwardedIp") or None,
            real_ip=data.get("realIp") or None,
            document_id=data.get("documentId"),
        )
