# parish/models/sacrament_record.py
"""SQLAlchemy model for historical sacrament records.

Records are either entered by an admin or generated when a sacrament
request is completed. There is no FK back to the request; provenance is
only the free-text `details`.
"""
from __future__ import annotations

import enum
from datetime import date as _date, datetime
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, Enum, Integer, String, Text, false, func
from sqlalchemy.orm import Mapped, mapped_column

from parish.db import Base


class SacramentType(str, enum.Enum):
    """Enumeration of recorded sacraments."""
    BAPTISM = "BAPTISM"
    CONFIRMATION = "CONFIRMATION"
    MARRIAGE = "MARRIAGE"
    FUNERAL = "FUNERAL"


class SacramentRecord(Base):
    __tablename__ = "sacrament_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    date: Mapped[_date] = mapped_column(Date, nullable=False)
    type: Mapped[SacramentType] = mapped_column(
        Enum(SacramentType, name="sacramentrecordtype"), nullable=False, index=True
    )
    officiant: Mapped[str] = mapped_column(String(200), nullable=False)

    # Parents, witnesses, sponsors... free text
    details: Mapped[str] = mapped_column(Text(), nullable=False, default="")

    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    archived_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    archived_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    archive_reason: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<SacramentRecord(id={self.id}, type={self.type}, name={self.name!r}, date={self.date})>"
