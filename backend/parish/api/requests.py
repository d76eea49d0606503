# parish/api/requests.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from parish.api.errors import http_error
from parish.auth import get_current_user
from parish.db import get_db
from parish.models.service_request import RequestCategory, RequestStatus
from parish.models.user import User
from parish.schemas.certificate import IssuedCertificateRead
from parish.schemas.service_request import (
    CertificateIssueRequest,
    ServiceRequestCreate,
    ServiceRequestRead,
    ServiceRequestStatusUpdate,
)
from parish.services import certificates as cert_svc
from parish.services import requests as svc
from parish.services.exceptions import ParishError

router = APIRouter(prefix="/api/requests", tags=["Requests"])
logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────────────────────
# OpenAPI "examples" for request bodies
# ─────────────────────────────────────────────────────────────────────────────
CREATE_EXAMPLES: Dict[str, Dict[str, Any]] = {
    "baptism": {
        "summary": "Baptism request",
        "value": {
            "category": "SACRAMENT",
            "service_type": "Baptism",
            "requester_name": "Ana Smith",
            "contact_info": "09171234567",
            "preferred_date": "2023-12-10",
            "details": "Child: Baby Boy Smith. We are available on Sunday mornings.",
        },
    },
    "certificate": {
        "summary": "Certificate request",
        "value": {
            "category": "CERTIFICATE",
            "service_type": "Baptismal Certificate",
            "requester_name": "Juan Dela Cruz",
            "contact_info": "juan@email.com",
            "details": "For local employment purposes. Baptized year 1998.",
        },
    },
}


# Public intake: no bearer required
@router.post(
    "",
    response_model=ServiceRequestRead,
    status_code=status.HTTP_201_CREATED,
    openapi_extra={"requestBody": {"content": {"application/json": {"examples": CREATE_EXAMPLES}}}},
)
def submit_request(payload: ServiceRequestCreate, db: Session = Depends(get_db)):
    return svc.submit_request(db, payload)


@router.get("", response_model=List[ServiceRequestRead])
def list_requests(
    status_: Optional[RequestStatus] = Query(None, alias="status"),
    category: Optional[RequestCategory] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    return svc.list_requests(
        db, status=status_, category=category, search=search, skip=skip, limit=limit
    )


@router.get("/{request_id}", response_model=ServiceRequestRead)
def get_request(
    request_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    try:
        return svc.get_request(db, request_id)
    except ParishError as exc:
        raise http_error(exc) from exc


def _apply_status_update(
    request_id: int, payload: ServiceRequestStatusUpdate, db: Session, user: User
):
    logger.info(
        "status update id=%s -> %s by %s", request_id, payload.status.value, user.username
    )
    try:
        return svc.update_request_status(
            db,
            request_id,
            payload.status,
            confirmed_schedule=payload.confirmed_schedule,
            admin_notes=payload.admin_notes,
            expected_version=payload.expected_version,
        )
    except ParishError as exc:
        raise http_error(exc) from exc


@router.patch("/{request_id}", response_model=ServiceRequestRead)
def patch_request(
    request_id: int,
    payload: ServiceRequestStatusUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return _apply_status_update(request_id, payload, db, user)


@router.put("/{request_id}", response_model=ServiceRequestRead)
def put_request(
    request_id: int,
    payload: ServiceRequestStatusUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return _apply_status_update(request_id, payload, db, user)


# 204 must have no body; return Response explicitly
@router.delete("/{request_id}", status_code=204, response_class=Response)
def delete_request(
    request_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
) -> Response:
    try:
        svc.delete_request(db, request_id)
    except ParishError as exc:
        raise http_error(exc) from exc
    return Response(status_code=204)


@router.post(
    "/{request_id}/issue-certificate",
    response_model=IssuedCertificateRead,
    status_code=status.HTTP_201_CREATED,
)
def issue_certificate(
    request_id: int,
    payload: CertificateIssueRequest,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    try:
        cert = cert_svc.issue_certificate(
            db,
            request_id,
            delivery_method=payload.delivery_method,
            notes=payload.notes,
            issued_by=payload.issued_by,
        )
    except ParishError as exc:
        raise http_error(exc) from exc
    except Exception as exc:
        raise HTTPException(
            status_code=500,
            detail="Certificate issuance failed; nothing was saved",
        ) from exc
    return cert_svc.to_read(cert)
