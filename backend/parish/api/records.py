from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from parish.api.errors import http_error
from parish.auth import get_current_user
from parish.db import get_db
from parish.models.sacrament_record import SacramentType
from parish.models.user import User
from parish.schemas.sacrament_record import (
    SacramentRecordArchive,
    SacramentRecordCreate,
    SacramentRecordRead,
    SacramentRecordUpdate,
)
from parish.services import records as svc
from parish.services.exceptions import ParishError

router = APIRouter(prefix="/api/records", tags=["Records"])


@router.get("", response_model=List[SacramentRecordRead])
def list_records(
    type_: Optional[SacramentType] = Query(None, alias="type"),
    search: Optional[str] = None,
    include_archived: bool = False,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    return svc.list_records(
        db,
        type=type_,
        search=search,
        include_archived=include_archived,
        skip=skip,
        limit=limit,
    )


@router.post("", response_model=SacramentRecordRead, status_code=status.HTTP_201_CREATED)
def create_record(
    payload: SacramentRecordCreate,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    return svc.create_record(db, payload)


@router.get("/{record_id}", response_model=SacramentRecordRead)
def get_record(
    record_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    try:
        return svc.get_record(db, record_id)
    except ParishError as exc:
        raise http_error(exc) from exc


@router.patch("/{record_id}", response_model=SacramentRecordRead)
def update_record(
    record_id: int,
    payload: SacramentRecordUpdate,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    try:
        return svc.update_record(db, record_id, payload.model_dump(exclude_unset=True))
    except ParishError as exc:
        raise http_error(exc) from exc


@router.post("/{record_id}/archive", response_model=SacramentRecordRead)
def archive_record(
    record_id: int,
    payload: Optional[SacramentRecordArchive] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        return svc.archive_record(
            db, record_id, archived_by=user.username, reason=payload.reason if payload else None
        )
    except ParishError as exc:
        raise http_error(exc) from exc


@router.post("/{record_id}/restore", response_model=SacramentRecordRead)
def restore_record(
    record_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    try:
        return svc.restore_record(db, record_id)
    except ParishError as exc:
        raise http_error(exc) from exc


@router.delete("/{record_id}", status_code=204, response_class=Response)
def delete_record(
    record_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
) -> Response:
    try:
        svc.delete_record(db, record_id)
    except ParishError as exc:
        raise http_error(exc) from exc
    return Response(status_code=204)
