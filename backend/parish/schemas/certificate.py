# parish/schemas/certificate.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from parish.models.certificate import CertificateStatus, DeliveryMethod


class IssuedCertificateRead(BaseModel):
    """Registry row. File bytes are never serialized; use the download endpoint."""
    id: int
    request_id: int
    type: str
    recipient_name: str
    requester_name: str
    date_issued: datetime
    issued_by: str
    delivery_method: DeliveryMethod
    notes: Optional[str] = None
    status: CertificateStatus

    file_name: Optional[str] = None
    file_mime_type: Optional[str] = None
    file_size: Optional[int] = None
    uploaded_at: Optional[datetime] = None
    uploaded_by: Optional[str] = None

    has_file: bool = False
    needs_upload_reminder: bool = False

    model_config = ConfigDict(from_attributes=True)


class CertificateRegistrySummary(BaseModel):
    total: int
    pending_uploads: int
    completed_uploads: int
    reminders_due: int
