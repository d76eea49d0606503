from datetime import date

import pytest

from parish.models import (
    RequestCategory,
    RequestStatus,
    SacramentRecord,
    SacramentType,
    ServiceRequest,
)
from parish.schemas.service_request import ServiceRequestCreate
from parish.services import requests as svc
from parish.services.exceptions import (
    ConcurrencyConflictError,
    InvalidTransitionError,
    NotFoundError,
)


def _submit(db, **overrides) -> ServiceRequest:
    data = dict(
        category=RequestCategory.SACRAMENT,
        service_type="Baptism",
        requester_name="Ana Smith",
        contact_info="09171234567",
        preferred_date="2023-12-10",
        details="Child: Baby Boy Smith. We are available on Sunday mornings.",
    )
    data.update(overrides)
    return svc.submit_request(db, ServiceRequestCreate(**data))


def _records(db):
    return db.query(SacramentRecord).order_by(SacramentRecord.id).all()


def test_submit_assigns_pending_today_and_version_one(db):
    req = _submit(db)
    assert req.id is not None
    assert req.status == RequestStatus.PENDING
    assert req.submission_date == date.today()
    assert req.version == 1
    assert req.confirmed_schedule is None
    assert req.admin_notes is None


def test_submit_ids_are_unique(db):
    a = _submit(db)
    b = _submit(db, requester_name="Someone Else")
    assert a.id != b.id


def test_baptism_request_completed_produces_one_record(db):
    req = _submit(db)

    svc.update_request_status(
        db, req.id, RequestStatus.SCHEDULED, confirmed_schedule="2023-12-10 10:00 AM"
    )
    assert _records(db) == []

    svc.update_request_status(db, req.id, RequestStatus.COMPLETED)

    recs = _records(db)
    assert len(recs) == 1
    rec = recs[0]
    assert rec.name == "Ana Smith"
    assert rec.date == date(2023, 12, 10)
    assert rec.type == SacramentType.BAPTISM
    assert rec.officiant == "Parish Priest"
    assert rec.details == (
        f"Generated from Request #{req.id}. "
        "Details: Child: Baby Boy Smith. We are available on Sunday mornings."
    )
    assert rec.is_archived is False


def test_repeated_completed_does_not_duplicate_record(db):
    req = _submit(db)
    svc.update_request_status(db, req.id, RequestStatus.COMPLETED)
    svc.update_request_status(db, req.id, RequestStatus.COMPLETED, admin_notes="again")
    assert len(_records(db)) == 1


def test_reopen_then_complete_creates_second_record(db):
    req = _submit(db)
    svc.update_request_status(db, req.id, RequestStatus.COMPLETED)
    svc.update_request_status(db, req.id, RequestStatus.SCHEDULED)
    svc.update_request_status(db, req.id, RequestStatus.COMPLETED)
    assert len(_records(db)) == 2


def test_certificate_category_never_produces_record(db):
    req = _submit(
        db,
        category=RequestCategory.CERTIFICATE,
        service_type="Baptismal Certificate",
        preferred_date=None,
    )
    svc.update_request_status(db, req.id, RequestStatus.COMPLETED)
    assert _records(db) == []


def test_unmatched_service_type_completes_without_record(db):
    req = _submit(db, service_type="Anointing of the Sick")
    out = svc.update_request_status(db, req.id, RequestStatus.COMPLETED)
    assert out.status == RequestStatus.COMPLETED
    assert _records(db) == []


def test_record_date_uses_today_without_usable_dates(db):
    req = _submit(db, service_type="Funeral Mass", preferred_date=None)
    svc.update_request_status(db, req.id, RequestStatus.COMPLETED)
    rec = _records(db)[0]
    assert rec.type == SacramentType.FUNERAL
    assert rec.date == date.today()


def test_update_sets_supplied_fields_and_keeps_the_rest(db):
    req = _submit(db)
    svc.update_request_status(
        db, req.id, RequestStatus.SCHEDULED,
        confirmed_schedule="2023-12-10 10:00 AM",
        admin_notes="Requirements submitted.",
    )
    out = svc.update_request_status(db, req.id, RequestStatus.APPROVED)

    # schedule is not cleared when leaving SCHEDULED
    assert out.confirmed_schedule == "2023-12-10 10:00 AM"
    assert out.admin_notes == "Requirements submitted."
    assert out.category == RequestCategory.SACRAMENT
    assert out.version == 3


def test_any_status_can_reach_any_status_by_default(db):
    for current in RequestStatus:
        for new in RequestStatus:
            assert svc.can_transition(current, new)


def test_rejected_can_be_reopened(db):
    req = _submit(db)
    svc.update_request_status(db, req.id, RequestStatus.REJECTED)
    out = svc.update_request_status(db, req.id, RequestStatus.PENDING)
    assert out.status == RequestStatus.PENDING


def test_tightened_transition_table_is_enforced(db, monkeypatch):
    req = _submit(db)
    svc.update_request_status(db, req.id, RequestStatus.REJECTED)
    monkeypatch.setitem(
        svc.ALLOWED_TRANSITIONS, RequestStatus.REJECTED, frozenset({RequestStatus.REJECTED})
    )

    with pytest.raises(InvalidTransitionError) as ei:
        svc.update_request_status(db, req.id, RequestStatus.PENDING)
    assert ei.value.current == "REJECTED"
    assert ei.value.attempted == "PENDING"
    assert svc.get_request(db, req.id).status == RequestStatus.REJECTED


def test_stale_version_is_rejected(db):
    req = _submit(db)
    svc.update_request_status(db, req.id, RequestStatus.APPROVED, expected_version=1)

    with pytest.raises(ConcurrencyConflictError) as ei:
        svc.update_request_status(db, req.id, RequestStatus.REJECTED, expected_version=1)
    assert ei.value.actual_version == 2
    assert svc.get_request(db, req.id).status == RequestStatus.APPROVED


def test_write_from_stale_session_is_refused(db, second_db):
    req = _submit(db)

    # second admin loads v1, then the first admin writes
    stale = second_db.get(ServiceRequest, req.id)
    assert stale.version == 1
    svc.update_request_status(db, req.id, RequestStatus.REJECTED, expected_version=1)

    with pytest.raises(ConcurrencyConflictError) as ei:
        svc.update_request_status(second_db, req.id, RequestStatus.APPROVED, expected_version=1)
    assert ei.value.expected_version == 1
    assert ei.value.actual_version == 2

    db.expire_all()
    kept = svc.get_request(db, req.id)
    assert kept.status == RequestStatus.REJECTED
    assert kept.version == 2


def test_stale_session_without_expected_version_is_refused(db, second_db):
    req = _submit(db)
    stale = second_db.get(ServiceRequest, req.id)  # noqa: F841  keep the stale instance alive
    svc.update_request_status(db, req.id, RequestStatus.SCHEDULED)

    with pytest.raises(ConcurrencyConflictError):
        svc.update_request_status(second_db, req.id, RequestStatus.COMPLETED)

    db.expire_all()
    assert svc.get_request(db, req.id).status == RequestStatus.SCHEDULED
    assert _records(db) == []


def test_failed_record_derivation_rolls_back_status(db, monkeypatch):
    req = _submit(db)

    def boom(_req):
        raise RuntimeError("record store unavailable")

    monkeypatch.setattr(svc, "_derive_sacrament_record", boom)

    with pytest.raises(RuntimeError):
        svc.update_request_status(db, req.id, RequestStatus.COMPLETED)

    assert svc.get_request(db, req.id).status == RequestStatus.PENDING
    assert _records(db) == []


def test_unknown_request_raises_not_found(db):
    with pytest.raises(NotFoundError):
        svc.get_request(db, 999)
    with pytest.raises(NotFoundError):
        svc.update_request_status(db, 999, RequestStatus.APPROVED)
    with pytest.raises(NotFoundError):
        svc.delete_request(db, 999)


def test_list_filters_and_search(db):
    _submit(db)
    _submit(
        db,
        category=RequestCategory.CERTIFICATE,
        service_type="Marriage Certificate",
        requester_name="Elena Cruz",
        preferred_date=None,
    )

    assert len(svc.list_requests(db)) == 2
    certs = svc.list_requests(db, category=RequestCategory.CERTIFICATE)
    assert [r.requester_name for r in certs] == ["Elena Cruz"]
    assert [r.requester_name for r in svc.list_requests(db, search="smith")] == ["Ana Smith"]
    assert [r.service_type for r in svc.list_requests(db, search="MARRIAGE")] == [
        "Marriage Certificate"
    ]
    assert svc.list_requests(db, status=RequestStatus.COMPLETED) == []


def test_delete_leaves_derived_record(db):
    req = _submit(db)
    svc.update_request_status(db, req.id, RequestStatus.COMPLETED)
    svc.delete_request(db, req.id)

    assert db.get(ServiceRequest, req.id) is None
    assert len(_records(db)) == 1
