# parish/schemas/service_request.py
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, constr

from parish.models.certificate import DeliveryMethod
from parish.models.service_request import RequestCategory, RequestStatus


class ServiceRequestCreate(BaseModel):
    """Public intake form. Status and submission date are server-assigned."""
    category: RequestCategory
    service_type: constr(strip_whitespace=True, min_length=1, max_length=120)
    requester_name: constr(strip_whitespace=True, min_length=1, max_length=200)
    contact_info: constr(strip_whitespace=True, min_length=1, max_length=200)
    details: constr(strip_whitespace=True, min_length=1)
    preferred_date: constr(strip_whitespace=True, max_length=40) | None = None


class ServiceRequestStatusUpdate(BaseModel):
    """
    Admin status change. Omitted auxiliary fields are left untouched;
    category is deliberately absent (it never changes).
    """
    status: RequestStatus
    confirmed_schedule: constr(max_length=100) | None = None
    admin_notes: Optional[str] = None
    expected_version: Optional[int] = Field(
        None, ge=1, description="If set, the update fails with 409 when the stored version differs"
    )


class ServiceRequestRead(BaseModel):
    id: int
    category: RequestCategory
    service_type: str
    requester_name: str
    contact_info: str
    details: str
    preferred_date: Optional[str] = None
    status: RequestStatus
    confirmed_schedule: Optional[str] = None
    admin_notes: Optional[str] = None
    submission_date: date
    version: int
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CertificateIssueRequest(BaseModel):
    delivery_method: DeliveryMethod
    notes: Optional[str] = None
    issued_by: constr(strip_whitespace=True, min_length=1, max_length=100) = "Administrator"
