# parish/schemas/sacrament_record.py
from __future__ import annotations

from datetime import date as _date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, constr

from parish.models.sacrament_record import SacramentType


class _RecordBase(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=200)
    date: _date
    type: SacramentType
    officiant: constr(strip_whitespace=True, min_length=1, max_length=200)
    details: str = ""

    model_config = ConfigDict(from_attributes=True)


class SacramentRecordCreate(_RecordBase):
    pass


class SacramentRecordUpdate(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=200) | None = None
    date: Optional[_date] = None
    type: Optional[SacramentType] = None
    officiant: constr(strip_whitespace=True, min_length=1, max_length=200) | None = None
    details: Optional[str] = None


class SacramentRecordArchive(BaseModel):
    reason: Optional[str] = None


class SacramentRecordRead(_RecordBase):
    id: int
    is_archived: bool = False
    archived_at: Optional[datetime] = None
    archived_by: Optional[str] = None
    archive_reason: Optional[str] = None
