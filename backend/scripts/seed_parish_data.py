# backend/scripts/seed_parish_data.py
"""
Seed a demo parish database: one admin login, a handful of service requests,
sacrament records (one archived) and two issued certificates (one uploaded).

Usage (from repo root):
  python backend/scripts/seed_parish_data.py --dry-run
  python backend/scripts/seed_parish_data.py --reset --admin-password s3cret

Notes:
- Uses DATABASE_URL (env or .env) like the API; defaults to ./parish.db.
- Creates missing tables first, so it works on a fresh SQLite file.
- --reset wipes requests/records/certificates (never users) before seeding.
"""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, datetime, timezone
from pathlib import Path

# -----------------------------------------------------------------------------
# Paths & import setup (so "import parish" works regardless of CWD)
# -----------------------------------------------------------------------------
HERE = Path(__file__).resolve()
BACKEND_ROOT = HERE.parents[1]          # .../backend

if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from parish.auth import hash_password  # noqa: E402
from parish.db import SessionLocal, init_db  # noqa: E402
from parish.models import (  # noqa: E402
    CertificateStatus,
    DeliveryMethod,
    IssuedCertificate,
    RequestCategory,
    RequestStatus,
    SacramentRecord,
    SacramentType,
    ServiceRequest,
    User,
)

logger = logging.getLogger("seed_parish_data")

SAMPLE_PDF = b"%PDF-1.4\n% sample certificate for demonstration\n%%EOF\n"


# -----------------------------------------------------------------------------
# CLI
# -----------------------------------------------------------------------------
def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Seed demo parish data")
    p.add_argument("--admin-username", default="admin")
    p.add_argument("--admin-password", default="admin")
    p.add_argument("--reset", action="store_true", help="delete existing requests/records/certificates first")
    p.add_argument("--dry-run", action="store_true", help="roll back instead of committing")
    return p.parse_args(argv)


# -----------------------------------------------------------------------------
# Seeders
# -----------------------------------------------------------------------------
def _upsert_admin(db, username: str, password: str) -> User:
    user = db.query(User).filter(User.username == username).first()
    if user is None:
        user = User(username=username, password_hash=hash_password(password), role="ADMIN")
        db.add(user)
        db.flush()
        logger.info("created admin user %r", username)
    return user


def _seed_requests(db) -> dict:
    cert_req = ServiceRequest(
        category=RequestCategory.CERTIFICATE,
        service_type="Baptismal Certificate",
        requester_name="Juan Dela Cruz",
        contact_info="juan@email.com",
        details="For local employment purposes. Baptized year 1998.",
        status=RequestStatus.PENDING,
    )
    baptism_req = ServiceRequest(
        category=RequestCategory.SACRAMENT,
        service_type="Baptism",
        requester_name="Ana Smith",
        contact_info="09171234567",
        preferred_date="2023-12-10",
        details="Child: Baby Boy Smith. We are available on Sunday mornings.",
        status=RequestStatus.SCHEDULED,
        confirmed_schedule="2023-12-10 10:00 AM",
        admin_notes="Requirements submitted. Seminars attended.",
    )
    marriage_cert_req = ServiceRequest(
        category=RequestCategory.CERTIFICATE,
        service_type="Marriage Certificate",
        requester_name="Elena Cruz",
        contact_info="elena@example.com",
        details="For embassy requirements",
        status=RequestStatus.COMPLETED,
    )
    db.add_all([cert_req, baptism_req, marriage_cert_req])
    db.flush()
    return {"certificate": cert_req, "baptism": baptism_req, "marriage_cert": marriage_cert_req}


def _seed_records(db) -> None:
    db.add_all([
        SacramentRecord(
            name="Maria Santos", date=date(2023, 10, 15), type=SacramentType.BAPTISM,
            officiant="Fr. Juan Dela Cruz", details="Parents: Jose & Ana Santos",
        ),
        SacramentRecord(
            name="Pedro & Elena Reyes", date=date(2023, 11, 2), type=SacramentType.MARRIAGE,
            officiant="Fr. Juan Dela Cruz", details="Witnesses: Mr. & Mrs. Gomez",
        ),
        SacramentRecord(
            name="Sofia Garcia", date=date(2023, 5, 20), type=SacramentType.CONFIRMATION,
            officiant="Bp. Ricardo Alarcon", details="Sponsor: Teresa Dizon",
            is_archived=True, archived_at=datetime(2024, 1, 5, tzinfo=timezone.utc),
            archived_by="Administrator", archive_reason="Merged into diocesan register",
        ),
    ])


def _seed_certificates(db, reqs: dict) -> None:
    now = datetime.now(timezone.utc)
    db.add_all([
        IssuedCertificate(
            request_id=reqs["certificate"].id,
            type="Baptismal Certificate",
            recipient_name="Carlos Dizon",
            requester_name="Maria Dizon",
            date_issued=now,
            issued_by="Administrator",
            delivery_method=DeliveryMethod.PICKUP,
            notes="ID Presented",
            status=CertificateStatus.PENDING_UPLOAD,
        ),
        IssuedCertificate(
            request_id=reqs["marriage_cert"].id,
            type="Marriage Certificate",
            recipient_name="Elena Cruz",
            requester_name="Elena Cruz",
            date_issued=now,
            issued_by="Administrator",
            delivery_method=DeliveryMethod.EMAIL,
            notes="Sent via email",
            status=CertificateStatus.UPLOADED,
            file_data=SAMPLE_PDF,
            file_name="sample-certificate.pdf",
            file_mime_type="application/pdf",
            file_size=len(SAMPLE_PDF),
            uploaded_at=now,
            uploaded_by="Administrator",
        ),
    ])


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    args = _parse_args(argv)

    init_db()
    with SessionLocal() as db:
        if args.reset:
            db.query(IssuedCertificate).delete()
            db.query(SacramentRecord).delete()
            db.query(ServiceRequest).delete()
            logger.info("cleared requests, records and certificates")

        _upsert_admin(db, args.admin_username, args.admin_password)
        reqs = _seed_requests(db)
        _seed_records(db)
        _seed_certificates(db, reqs)

        if args.dry_run:
            db.rollback()
            logger.info("dry run: rolled back")
        else:
            db.commit()
            logger.info("seed complete")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
