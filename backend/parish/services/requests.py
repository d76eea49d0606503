# parish/services/requests.py
from __future__ import annotations

import logging
from datetime import date
from typing import Dict, FrozenSet, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from parish.config import get_settings
from parish.models.sacrament_record import SacramentRecord
from parish.models.service_request import RequestCategory, RequestStatus, ServiceRequest
from parish.schemas.service_request import ServiceRequestCreate
from parish.services.exceptions import (
    ConcurrencyConflictError,
    InvalidTransitionError,
    NotFoundError,
)
from parish.services.request_parsing import record_date_for_request, sacrament_type_for_service

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Status transition table
# ─────────────────────────────────────────────────────────────────────────────
# Currently fully permissive: admins may move a request between any two
# states (including re-opening COMPLETED/REJECTED). Tighten a row here to
# forbid a transition; update_request_status raises InvalidTransitionError.

_ALL_STATUSES: FrozenSet[RequestStatus] = frozenset(RequestStatus)

ALLOWED_TRANSITIONS: Dict[RequestStatus, FrozenSet[RequestStatus]] = {
    RequestStatus.PENDING: _ALL_STATUSES,
    RequestStatus.APPROVED: _ALL_STATUSES,
    RequestStatus.SCHEDULED: _ALL_STATUSES,
    RequestStatus.COMPLETED: _ALL_STATUSES,
    RequestStatus.REJECTED: _ALL_STATUSES,
}

INITIAL_STATUS = RequestStatus.PENDING


def can_transition(current: RequestStatus, new: RequestStatus) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


# ─────────────────────────────────────────────────────────────────────────────
# Reads
# ─────────────────────────────────────────────────────────────────────────────

def get_request(db: Session, request_id: int) -> ServiceRequest:
    req = db.get(ServiceRequest, request_id)
    if req is None:
        raise NotFoundError("Request", request_id)
    return req


def list_requests(
    db: Session,
    *,
    status: Optional[RequestStatus] = None,
    category: Optional[RequestCategory] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[ServiceRequest]:
    stmt = select(ServiceRequest)
    if status is not None:
        stmt = stmt.where(ServiceRequest.status == status)
    if category is not None:
        stmt = stmt.where(ServiceRequest.category == category)
    if search:
        like = f"%{search.strip().lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(ServiceRequest.requester_name).like(like),
                func.lower(ServiceRequest.service_type).like(like),
            )
        )
    stmt = stmt.order_by(ServiceRequest.id.desc()).offset(skip).limit(limit)
    return list(db.execute(stmt).scalars().all())


# ─────────────────────────────────────────────────────────────────────────────
# Writes
# ─────────────────────────────────────────────────────────────────────────────

def submit_request(db: Session, payload: ServiceRequestCreate) -> ServiceRequest:
    req = ServiceRequest(
        category=payload.category,
        service_type=payload.service_type,
        requester_name=payload.requester_name,
        contact_info=payload.contact_info,
        details=payload.details,
        preferred_date=(payload.preferred_date or None),
        status=INITIAL_STATUS,
        submission_date=date.today(),
    )
    db.add(req)
    db.commit()
    db.refresh(req)
    logger.info(
        "request submitted id=%s category=%s service_type=%r",
        req.id, req.category.value, req.service_type,
    )
    return req


def _derive_sacrament_record(req: ServiceRequest) -> Optional[SacramentRecord]:
    """Build (not persist) the record for a completed sacrament request, if its type is known."""
    sac_type = sacrament_type_for_service(req.service_type)
    if sac_type is None:
        logger.info(
            "request id=%s completed but service_type %r maps to no sacrament; no record created",
            req.id, req.service_type,
        )
        return None

    return SacramentRecord(
        name=req.requester_name,  # admin corrects later if the recipient differs
        date=record_date_for_request(req.confirmed_schedule, req.preferred_date),
        type=sac_type,
        officiant=get_settings().default_officiant,
        details=f"Generated from Request #{req.id}. Details: {req.details}",
    )


def update_request_status(
    db: Session,
    request_id: int,
    new_status: RequestStatus,
    *,
    confirmed_schedule: Optional[str] = None,
    admin_notes: Optional[str] = None,
    expected_version: Optional[int] = None,
    commit: bool = True,
) -> ServiceRequest:
    """
    Set a request's status (plus any supplied notes/schedule, verbatim).

    Moving a SACRAMENT request into COMPLETED from any other status also
    creates a SacramentRecord. The guard is on the previous status only, so
    COMPLETED -> SCHEDULED -> COMPLETED creates a second record.

    The status write and the derived record share one transaction. With
    commit=False the caller owns the transaction (changes are flushed only).

    The UPDATE is guarded by the version that was read, so a write that
    raced ahead of this one raises ConcurrencyConflictError instead of
    being overwritten.
    """
    req = get_request(db, request_id)
    loaded_version = req.version

    if expected_version is not None and expected_version != loaded_version:
        raise ConcurrencyConflictError(request_id, expected_version, loaded_version)

    previous = req.status
    if not can_transition(previous, new_status):
        raise InvalidTransitionError(request_id, previous.value, new_status.value)

    try:
        req.status = new_status
        if confirmed_schedule is not None:
            req.confirmed_schedule = confirmed_schedule
        if admin_notes is not None:
            req.admin_notes = admin_notes

        record: Optional[SacramentRecord] = None
        if (
            new_status == RequestStatus.COMPLETED
            and previous != RequestStatus.COMPLETED
            and req.category == RequestCategory.SACRAMENT
        ):
            record = _derive_sacrament_record(req)
            if record is not None:
                db.add(record)

        db.flush()
        if commit:
            db.commit()
            db.refresh(req)
    except StaleDataError:
        db.rollback()
        current = db.execute(
            select(ServiceRequest.version).where(ServiceRequest.id == request_id)
        ).scalar_one_or_none()
        logger.info(
            "request id=%s changed underneath (read v%s, now v%s); update refused",
            request_id, loaded_version, current,
        )
        raise ConcurrencyConflictError(
            request_id,
            expected_version if expected_version is not None else loaded_version,
            current,
        ) from None
    except Exception:
        db.rollback()
        raise

    logger.info("request id=%s status %s -> %s", request_id, previous.value, new_status.value)
    if record is not None:
        logger.info(
            "request id=%s produced sacrament record id=%s type=%s",
            request_id, record.id, record.type.value,
        )
    return req


def delete_request(db: Session, request_id: int) -> None:
    """Hard delete. Records and certificates issued from it are left alone."""
    req = get_request(db, request_id)
    db.delete(req)
    db.commit()
    logger.info("request id=%s deleted", request_id)
