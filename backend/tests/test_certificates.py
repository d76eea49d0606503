from datetime import datetime, timedelta, timezone

import pytest

from parish.config import Settings
from parish.models import (
    CertificateStatus,
    DeliveryMethod,
    IssuedCertificate,
    RequestCategory,
    RequestStatus,
    ServiceRequest,
)
from parish.services import certificates as svc
from parish.services.exceptions import NotFoundError, ValidationError

PDF = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\n%%EOF\n"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _cert_request(db, status=RequestStatus.PENDING, details=None) -> ServiceRequest:
    req = ServiceRequest(
        category=RequestCategory.CERTIFICATE,
        service_type="Baptismal Certificate",
        requester_name="Juan Dela Cruz",
        contact_info="juan@email.com",
        details=details or "For local employment purposes. Baptized year 1998.",
        status=status,
    )
    db.add(req)
    db.commit()
    db.refresh(req)
    return req


def _issue(db, req) -> IssuedCertificate:
    return svc.issue_certificate(
        db,
        req.id,
        delivery_method=DeliveryMethod.PICKUP,
        notes="ID Presented",
        issued_by="Administrator",
    )


# ─────────────────────────────────────────────────────────────────────────────
# Issuance
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("start", list(RequestStatus))
def test_issue_marks_request_completed_from_any_status(db, start):
    req = _cert_request(db, status=start)
    cert = _issue(db, req)

    assert cert.status == CertificateStatus.PENDING_UPLOAD
    assert cert.request_id == req.id
    db.refresh(req)
    assert req.status == RequestStatus.COMPLETED


def test_issue_copies_request_fields(db):
    req = _cert_request(db)
    cert = _issue(db, req)

    assert cert.type == "Baptismal Certificate"
    assert cert.requester_name == "Juan Dela Cruz"
    assert cert.issued_by == "Administrator"
    assert cert.delivery_method == DeliveryMethod.PICKUP
    assert cert.notes == "ID Presented"
    assert cert.date_issued is not None
    assert cert.has_file is False


def test_recipient_name_is_details_prefix(db):
    details = "Carlos Dizon, born 1990 to Maria and Jose Dizon of Barangay San Isidro"
    req = _cert_request(db, details=details)
    cert = _issue(db, req)

    assert len(cert.recipient_name) <= 50
    assert details.startswith(cert.recipient_name)


def test_issue_for_unknown_request(db):
    with pytest.raises(NotFoundError):
        svc.issue_certificate(
            db, 404, delivery_method=DeliveryMethod.EMAIL, notes=None, issued_by="Administrator"
        )
    assert db.query(IssuedCertificate).count() == 0


def test_issue_rolls_back_certificate_when_status_update_fails(db, monkeypatch):
    req = _cert_request(db)

    def fail(*args, **kwargs):
        raise RuntimeError("status write failed")

    monkeypatch.setattr(svc, "update_request_status", fail)

    with pytest.raises(RuntimeError):
        _issue(db, req)

    assert db.query(IssuedCertificate).count() == 0
    db.refresh(req)
    assert req.status == RequestStatus.PENDING


# ─────────────────────────────────────────────────────────────────────────────
# Upload / download
# ─────────────────────────────────────────────────────────────────────────────

def test_upload_then_download(db):
    cert = _issue(db, _cert_request(db))

    out = svc.upload_certificate_file(
        db, cert.id, data=PDF, filename="baptismal.pdf",
        mime_type="application/pdf", uploaded_by="admin",
    )
    assert out.status == CertificateStatus.UPLOADED
    assert out.file_name == "baptismal.pdf"
    assert out.file_size == len(PDF)
    assert out.uploaded_by == "admin"
    assert out.uploaded_at is not None
    assert out.has_file is True

    f = svc.download_certificate_file(db, cert.id)
    assert f.data == PDF
    assert f.filename == "baptismal.pdf"
    assert f.mime_type == "application/pdf"


def test_upload_normalizes_jpg_alias(db):
    cert = _issue(db, _cert_request(db))
    out = svc.upload_certificate_file(
        db, cert.id, data=b"\xff\xd8\xff\xe0scan", filename="scan.jpg", mime_type="image/jpg"
    )
    assert out.file_mime_type == "image/jpeg"


def test_upload_over_limit_is_rejected_and_state_unchanged(db):
    cert = _issue(db, _cert_request(db))
    big = b"\x00" * (15 * 1024 * 1024)

    with pytest.raises(ValidationError):
        svc.upload_certificate_file(
            db, cert.id, data=big, filename="big.pdf", mime_type="application/pdf",
            settings=Settings(upload_file_limit_mb=10),
        )

    db.refresh(cert)
    assert cert.status == CertificateStatus.PENDING_UPLOAD
    assert cert.file_name is None


@pytest.mark.parametrize("mime", [DOCX_MIME, "text/plain", None])
def test_upload_rejects_other_types(db, mime):
    cert = _issue(db, _cert_request(db))

    with pytest.raises(ValidationError):
        svc.upload_certificate_file(db, cert.id, data=b"PK\x03\x04", filename="cert.docx", mime_type=mime)

    db.refresh(cert)
    assert cert.status == CertificateStatus.PENDING_UPLOAD


def test_upload_rejects_empty_file(db):
    cert = _issue(db, _cert_request(db))
    with pytest.raises(ValidationError):
        svc.upload_certificate_file(db, cert.id, data=b"", filename="x.pdf", mime_type="application/pdf")


def test_upload_replaces_existing_file(db):
    cert = _issue(db, _cert_request(db))
    svc.upload_certificate_file(db, cert.id, data=PDF, filename="v1.pdf", mime_type="application/pdf")
    svc.upload_certificate_file(db, cert.id, data=b"\x89PNG...", filename="v2.png", mime_type="image/png")

    f = svc.download_certificate_file(db, cert.id)
    assert f.filename == "v2.png"
    assert f.mime_type == "image/png"


def test_download_without_file_is_not_found(db):
    cert = _issue(db, _cert_request(db))
    with pytest.raises(NotFoundError) as ei:
        svc.download_certificate_file(db, cert.id)
    assert "No file uploaded" in str(ei.value)

    with pytest.raises(NotFoundError):
        svc.download_certificate_file(db, 12345)


# ─────────────────────────────────────────────────────────────────────────────
# Reminders & summary
# ─────────────────────────────────────────────────────────────────────────────

def test_upload_reminder_after_threshold(db):
    cert = _issue(db, _cert_request(db))
    issued = cert.date_issued if cert.date_issued.tzinfo else cert.date_issued.replace(tzinfo=timezone.utc)

    assert svc.needs_upload_reminder(cert, now=issued + timedelta(hours=47)) is False
    assert svc.needs_upload_reminder(cert, now=issued + timedelta(hours=49)) is True
    assert svc.needs_upload_reminder(cert, now=issued + timedelta(hours=2), threshold_hours=1) is True


def test_uploaded_certificate_never_needs_reminder(db):
    cert = _issue(db, _cert_request(db))
    svc.upload_certificate_file(db, cert.id, data=PDF, filename="c.pdf", mime_type="application/pdf")
    later = datetime.now(timezone.utc) + timedelta(days=30)
    assert svc.needs_upload_reminder(cert, now=later) is False


def test_registry_summary_counts(db):
    a = _issue(db, _cert_request(db))
    _issue(db, _cert_request(db))
    svc.upload_certificate_file(db, a.id, data=PDF, filename="a.pdf", mime_type="application/pdf")

    now = datetime.now(timezone.utc)
    summary = svc.registry_summary(db, now=now)
    assert summary.total == 2
    assert summary.pending_uploads == 1
    assert summary.completed_uploads == 1
    assert summary.reminders_due == 0

    overdue = svc.registry_summary(db, now=now + timedelta(hours=72))
    assert overdue.reminders_due == 1


def test_list_certificates_by_status(db):
    a = _issue(db, _cert_request(db))
    b = _issue(db, _cert_request(db))
    svc.upload_certificate_file(db, a.id, data=PDF, filename="a.pdf", mime_type="application/pdf")

    pending = svc.list_certificates(db, status=CertificateStatus.PENDING_UPLOAD)
    assert [c.id for c in pending] == [b.id]
    assert {c.id for c in svc.list_certificates(db)} == {a.id, b.id}


def test_upload_filename_is_clipped_to_column_width(db):
    cert = _issue(db, _cert_request(db))
    long_name = "scan-" + "a" * 400 + ".pdf"

    out = svc.upload_certificate_file(
        db, cert.id, data=PDF, filename=long_name, mime_type="application/pdf"
    )
    assert len(out.file_name) == svc.FILE_NAME_MAX
    assert out.file_name.startswith("scan-")
    assert out.file_name.endswith(".pdf")


def test_upload_filename_drops_client_path(db):
    cert = _issue(db, _cert_request(db))
    out = svc.upload_certificate_file(
        db, cert.id, data=PDF, filename="C:\\Users\\admin\\cert.pdf", mime_type="application/pdf"
    )
    assert out.file_name == "cert.pdf"

    out = svc.upload_certificate_file(db, cert.id, data=PDF, filename="   ", mime_type="application/pdf")
    assert out.file_name == f"certificate-{cert.id}"
