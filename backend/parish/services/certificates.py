# parish/services/certificates.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, undefer

from parish.config import Settings, get_settings
from parish.models.certificate import CertificateStatus, DeliveryMethod, IssuedCertificate
from parish.models.service_request import RequestStatus
from parish.schemas.certificate import CertificateRegistrySummary, IssuedCertificateRead
from parish.services.exceptions import NotFoundError, ValidationError
from parish.services.request_parsing import recipient_name_from_details
from parish.services.requests import get_request, update_request_status

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = frozenset({"application/pdf", "image/png", "image/jpeg"})
FILE_NAME_MAX = 255  # issued_certificates.file_name width
_MIME_ALIASES = {"image/jpg": "image/jpeg", "image/pjpeg": "image/jpeg"}


@dataclass(frozen=True)
class CertificateFile:
    data: bytes
    filename: str
    mime_type: str


# ─────────────────────────────────────────────────────────────────────────────
# Utilities
# ─────────────────────────────────────────────────────────────────────────────

def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is written as UTC
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _normalize_mime(mime_type: Optional[str]) -> str:
    m = (mime_type or "").split(";", 1)[0].strip().lower()
    return _MIME_ALIASES.get(m, m)


def _clean_filename(filename: Optional[str], certificate_id: int) -> str:
    """Base name only, clipped to the column width with the extension kept."""
    name = os.path.basename((filename or "").replace("\\", "/")).strip()
    if not name:
        return f"certificate-{certificate_id}"
    if len(name) > FILE_NAME_MAX:
        stem, ext = os.path.splitext(name)
        ext = ext[:16]
        name = stem[: FILE_NAME_MAX - len(ext)] + ext
    return name


def needs_upload_reminder(
    cert: IssuedCertificate,
    *,
    now: Optional[datetime] = None,
    threshold_hours: Optional[int] = None,
) -> bool:
    """True when the file is still missing longer than the reminder threshold after issuance."""
    if cert.status != CertificateStatus.PENDING_UPLOAD or cert.date_issued is None:
        return False
    if threshold_hours is None:
        threshold_hours = get_settings().upload_reminder_hours
    elapsed = _as_utc(now or _now_utc()) - _as_utc(cert.date_issued)
    return elapsed > timedelta(hours=threshold_hours)


def to_read(cert: IssuedCertificate, *, now: Optional[datetime] = None) -> IssuedCertificateRead:
    out = IssuedCertificateRead.model_validate(cert)
    return out.model_copy(
        update={
            "has_file": cert.has_file,
            "needs_upload_reminder": needs_upload_reminder(cert, now=now),
        }
    )


# ─────────────────────────────────────────────────────────────────────────────
# Reads
# ─────────────────────────────────────────────────────────────────────────────

def get_certificate(db: Session, certificate_id: int) -> IssuedCertificate:
    cert = db.get(IssuedCertificate, certificate_id)
    if cert is None:
        raise NotFoundError("Certificate", certificate_id)
    return cert


def list_certificates(
    db: Session,
    *,
    status: Optional[CertificateStatus] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[IssuedCertificate]:
    stmt = select(IssuedCertificate)
    if status is not None:
        stmt = stmt.where(IssuedCertificate.status == status)
    stmt = stmt.order_by(IssuedCertificate.id.desc()).offset(skip).limit(limit)
    return list(db.execute(stmt).scalars().all())


def registry_summary(db: Session, *, now: Optional[datetime] = None) -> CertificateRegistrySummary:
    counts = dict(
        db.execute(
            select(IssuedCertificate.status, func.count()).group_by(IssuedCertificate.status)
        ).all()
    )
    pending = db.execute(
        select(IssuedCertificate).where(IssuedCertificate.status == CertificateStatus.PENDING_UPLOAD)
    ).scalars().all()
    reminders = sum(1 for c in pending if needs_upload_reminder(c, now=now))

    pending_n = int(counts.get(CertificateStatus.PENDING_UPLOAD, 0))
    uploaded_n = int(counts.get(CertificateStatus.UPLOADED, 0))
    return CertificateRegistrySummary(
        total=pending_n + uploaded_n,
        pending_uploads=pending_n,
        completed_uploads=uploaded_n,
        reminders_due=reminders,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Issuance
# ─────────────────────────────────────────────────────────────────────────────

def issue_certificate(
    db: Session,
    request_id: int,
    *,
    delivery_method: DeliveryMethod,
    notes: Optional[str],
    issued_by: str,
) -> IssuedCertificate:
    """
    Create the certificate row and mark the originating request COMPLETED,
    as one transaction. Works for any request category; the admin UI only
    offers it for CERTIFICATE requests.
    """
    req = get_request(db, request_id)

    cert = IssuedCertificate(
        request_id=req.id,
        type=req.service_type,
        recipient_name=recipient_name_from_details(req.details),
        requester_name=req.requester_name,
        date_issued=_now_utc(),
        issued_by=issued_by,
        delivery_method=delivery_method,
        notes=notes,
        status=CertificateStatus.PENDING_UPLOAD,
    )

    try:
        db.add(cert)
        db.flush()
        update_request_status(db, request_id, RequestStatus.COMPLETED, commit=False)
        db.commit()
    except Exception:
        db.rollback()
        logger.error(
            "certificate issuance for request id=%s failed; certificate and status change rolled back",
            request_id,
            exc_info=True,
        )
        raise

    db.refresh(cert)
    logger.info(
        "certificate id=%s issued for request id=%s by %s via %s",
        cert.id, request_id, issued_by, delivery_method.value,
    )
    return cert


# ─────────────────────────────────────────────────────────────────────────────
# Attachment upload / download
# ─────────────────────────────────────────────────────────────────────────────

def upload_certificate_file(
    db: Session,
    certificate_id: int,
    *,
    data: bytes,
    filename: str,
    mime_type: Optional[str],
    uploaded_by: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> IssuedCertificate:
    settings = settings or get_settings()
    cert = get_certificate(db, certificate_id)

    size = len(data or b"")
    if size == 0:
        raise ValidationError("Uploaded file is empty")
    if size > settings.upload_file_limit_bytes:
        raise ValidationError(
            f"File exceeds the {settings.upload_file_limit_mb} MB upload limit"
        )
    mime = _normalize_mime(mime_type)
    if mime not in ALLOWED_MIME_TYPES:
        raise ValidationError("Only PDF, PNG, or JPEG files are accepted")

    cert.file_data = data
    cert.file_name = _clean_filename(filename, cert.id)
    cert.file_mime_type = mime
    cert.file_size = size
    cert.uploaded_at = _now_utc()
    cert.uploaded_by = uploaded_by
    cert.status = CertificateStatus.UPLOADED
    db.commit()
    db.refresh(cert)

    logger.info(
        "certificate id=%s file uploaded name=%r size=%s by %s",
        cert.id, cert.file_name, size, uploaded_by,
    )
    return cert


def download_certificate_file(db: Session, certificate_id: int) -> CertificateFile:
    cert = db.execute(
        select(IssuedCertificate)
        .options(undefer(IssuedCertificate.file_data))
        .where(IssuedCertificate.id == certificate_id)
    ).scalars().first()
    if cert is None:
        raise NotFoundError("Certificate", certificate_id)
    if cert.status != CertificateStatus.UPLOADED or not cert.file_data:
        raise NotFoundError("Certificate file", certificate_id, "No file uploaded for this certificate")

    return CertificateFile(
        data=cert.file_data,
        filename=cert.file_name or f"certificate-{cert.id}",
        mime_type=cert.file_mime_type or "application/octet-stream",
    )
