# parish/services/records.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from parish.models.sacrament_record import SacramentRecord, SacramentType
from parish.schemas.sacrament_record import SacramentRecordCreate
from parish.services.exceptions import NotFoundError

logger = logging.getLogger(__name__)

_PATCHABLE = ("name", "date", "type", "officiant", "details")


def get_record(db: Session, record_id: int) -> SacramentRecord:
    rec = db.get(SacramentRecord, record_id)
    if rec is None:
        raise NotFoundError("Record", record_id)
    return rec


def list_records(
    db: Session,
    *,
    type: Optional[SacramentType] = None,
    search: Optional[str] = None,
    include_archived: bool = False,
    skip: int = 0,
    limit: int = 100,
) -> List[SacramentRecord]:
    stmt = select(SacramentRecord)
    if not include_archived:
        stmt = stmt.where(SacramentRecord.is_archived.is_(False))
    if type is not None:
        stmt = stmt.where(SacramentRecord.type == type)
    if search:
        stmt = stmt.where(func.lower(SacramentRecord.name).like(f"%{search.strip().lower()}%"))
    stmt = (
        stmt.order_by(SacramentRecord.date.desc(), SacramentRecord.id.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())


def create_record(db: Session, payload: SacramentRecordCreate) -> SacramentRecord:
    rec = SacramentRecord(**payload.model_dump())
    db.add(rec)
    db.commit()
    db.refresh(rec)
    logger.info("sacrament record id=%s created type=%s", rec.id, rec.type.value)
    return rec


def update_record(db: Session, record_id: int, patch: Dict[str, Any]) -> SacramentRecord:
    rec = get_record(db, record_id)
    for key in _PATCHABLE:
        if key in patch and patch[key] is not None:
            setattr(rec, key, patch[key])
    db.commit()
    db.refresh(rec)
    return rec


def archive_record(
    db: Session,
    record_id: int,
    *,
    archived_by: Optional[str],
    reason: Optional[str] = None,
) -> SacramentRecord:
    """Soft delete. Archiving an already archived record keeps the first stamp."""
    rec = get_record(db, record_id)
    if rec.is_archived:
        return rec
    rec.is_archived = True
    rec.archived_at = datetime.now(timezone.utc)
    rec.archived_by = archived_by
    rec.archive_reason = reason
    db.commit()
    db.refresh(rec)
    logger.info("sacrament record id=%s archived by %s", rec.id, archived_by)
    return rec


def restore_record(db: Session, record_id: int) -> SacramentRecord:
    rec = get_record(db, record_id)
    rec.is_archived = False
    rec.archived_at = None
    rec.archived_by = None
    rec.archive_reason = None
    db.commit()
    db.refresh(rec)
    return rec


def delete_record(db: Session, record_id: int) -> None:
    rec = get_record(db, record_id)
    db.delete(rec)
    db.commit()
    logger.info("sacrament record id=%s deleted", record_id)
