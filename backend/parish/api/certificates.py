# parish/api/certificates.py
from __future__ import annotations

import io
import logging
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from parish.api.errors import http_error
from parish.auth import get_current_user
from parish.config import get_settings
from parish.db import get_db
from parish.models.certificate import CertificateStatus
from parish.models.user import User
from parish.schemas.certificate import CertificateRegistrySummary, IssuedCertificateRead
from parish.services import certificates as svc
from parish.services.exceptions import ParishError

router = APIRouter(prefix="/api/certificates", tags=["Certificates"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[IssuedCertificateRead])
def list_certificates(
    status_: Optional[CertificateStatus] = Query(None, alias="status"),
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    rows = svc.list_certificates(db, status=status_, skip=skip, limit=limit)
    return [svc.to_read(c) for c in rows]


@router.get("/summary", response_model=CertificateRegistrySummary)
def registry_summary(
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    """Counters for the registry header: pending, uploaded, overdue reminders."""
    return svc.registry_summary(db)


@router.get("/{certificate_id}", response_model=IssuedCertificateRead)
def get_certificate(
    certificate_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    try:
        return svc.to_read(svc.get_certificate(db, certificate_id))
    except ParishError as exc:
        raise http_error(exc) from exc


@router.post("/{certificate_id}/upload", response_model=IssuedCertificateRead)
def upload_certificate_file(
    certificate_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    settings = get_settings()
    # One byte past the limit is enough to reject; never buffer the rest
    data = file.file.read(settings.upload_file_limit_bytes + 1)
    try:
        cert = svc.upload_certificate_file(
            db,
            certificate_id,
            data=data,
            filename=file.filename or "",
            mime_type=file.content_type,
            uploaded_by=user.username,
            settings=settings,
        )
    except ParishError as exc:
        logger.info("upload rejected for certificate id=%s: %s", certificate_id, exc)
        raise http_error(exc) from exc
    return svc.to_read(cert)


@router.get("/{certificate_id}/download")
def download_certificate_file(
    certificate_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    try:
        f = svc.download_certificate_file(db, certificate_id)
    except ParishError as exc:
        raise http_error(exc) from exc

    # RFC 5987 form keeps non-ASCII names intact
    disposition = f"attachment; filename*=UTF-8''{quote(f.filename)}"
    return StreamingResponse(
        io.BytesIO(f.data),
        media_type=f.mime_type,
        headers={
            "Content-Disposition": disposition,
            "Content-Length": str(len(f.data)),
        },
    )
