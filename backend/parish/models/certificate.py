# parish/models/certificate.py
from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Enum, Integer, LargeBinary, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from parish.db import Base


class DeliveryMethod(str, enum.Enum):
    PICKUP = "PICKUP"
    EMAIL = "EMAIL"
    COURIER = "COURIER"


class CertificateStatus(str, enum.Enum):
    PENDING_UPLOAD = "PENDING_UPLOAD"
    UPLOADED = "UPLOADED"


class IssuedCertificate(Base):
    __tablename__ = "issued_certificates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Plain copy of the originating request id (no FK: the request may be deleted)
    request_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    # Descriptive copies, not references
    type: Mapped[str] = mapped_column(String(120), nullable=False)
    recipient_name: Mapped[str] = mapped_column(String(200), nullable=False)
    requester_name: Mapped[str] = mapped_column(String(200), nullable=False)

    date_issued: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    issued_by: Mapped[str] = mapped_column(String(100), nullable=False)
    delivery_method: Mapped[DeliveryMethod] = mapped_column(
        Enum(DeliveryMethod, name="deliverymethod"), nullable=False
    )
    notes: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)

    status: Mapped[CertificateStatus] = mapped_column(
        Enum(CertificateStatus, name="certificatestatus"),
        nullable=False,
        default=CertificateStatus.PENDING_UPLOAD,
        index=True,
    )

    # Attachment; the bytes are deferred so registry listings stay light
    file_data: Mapped[Optional[bytes]] = mapped_column(LargeBinary, nullable=True, deferred=True)
    file_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    file_mime_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    file_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    uploaded_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    uploaded_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "status <> 'UPLOADED' OR (file_data IS NOT NULL AND file_name IS NOT NULL "
            "AND file_mime_type IS NOT NULL)",
            name="ck_issued_certificates_uploaded_has_file",
        ),
    )

    @property
    def has_file(self) -> bool:
        return self.status == CertificateStatus.UPLOADED and self.file_name is not None

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<IssuedCertificate(id={self.id}, request_id={self.request_id}, "
            f"type={self.type!r}, status={self.status})>"
        )
