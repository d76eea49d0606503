# parish/models/service_request.py
"""SQLAlchemy model for public service requests (sacraments & certificates).

Status changes are driven by administrators through
`parish.services.requests`; nothing here enforces the state machine.
"""
from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, DateTime, Enum, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from parish.db import Base


class RequestCategory(str, enum.Enum):
    SACRAMENT = "SACRAMENT"
    CERTIFICATE = "CERTIFICATE"


class RequestStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"


class ServiceRequest(Base):
    __tablename__ = "service_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Set once on submission; the update API has no way to change it
    category: Mapped[RequestCategory] = mapped_column(
        Enum(RequestCategory, name="requestcategory"), nullable=False, index=True
    )

    # e.g. "Baptism", "Marriage Certificate"
    service_type: Mapped[str] = mapped_column(String(120), nullable=False)
    requester_name: Mapped[str] = mapped_column(String(200), nullable=False)
    contact_info: Mapped[str] = mapped_column(String(200), nullable=False)
    details: Mapped[str] = mapped_column(Text(), nullable=False)
    preferred_date: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    status: Mapped[RequestStatus] = mapped_column(
        Enum(RequestStatus, name="requeststatus"),
        nullable=False,
        default=RequestStatus.PENDING,
        index=True,
    )
    # Only meaningful while SCHEDULED, but never cleared on later transitions
    confirmed_schedule: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)

    submission_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)

    # Managed by the mapper: starts at 1, every UPDATE is guarded by
    # "WHERE version = <loaded>" and bumps it. Clients may echo it back.
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<ServiceRequest(id={self.id}, category={self.category}, "
            f"service_type={self.service_type!r}, status={self.status})>"
        )
