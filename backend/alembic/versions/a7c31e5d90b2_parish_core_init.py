"""parish core init: users, service requests, sacrament records, issued certificates

Revision ID: a7c31e5d90b2
Revises:
Create Date: 2025-11-02 09:30:00

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "a7c31e5d90b2"
down_revision = None
branch_labels = None
depends_on = None

REQUEST_CATEGORY = sa.Enum("SACRAMENT", "CERTIFICATE", name="requestcategory")
REQUEST_STATUS = sa.Enum(
    "PENDING", "APPROVED", "SCHEDULED", "COMPLETED", "REJECTED", name="requeststatus"
)
SACRAMENT_TYPE = sa.Enum(
    "BAPTISM", "CONFIRMATION", "MARRIAGE", "FUNERAL", name="sacramentrecordtype"
)
DELIVERY_METHOD = sa.Enum("PICKUP", "EMAIL", "COURIER", name="deliverymethod")
CERTIFICATE_STATUS = sa.Enum("PENDING_UPLOAD", "UPLOADED", name="certificatestatus")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "service_requests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("category", REQUEST_CATEGORY, nullable=False),
        sa.Column("service_type", sa.String(length=120), nullable=False),
        sa.Column("requester_name", sa.String(length=200), nullable=False),
        sa.Column("contact_info", sa.String(length=200), nullable=False),
        sa.Column("details", sa.Text(), nullable=False),
        sa.Column("preferred_date", sa.String(length=40), nullable=True),
        sa.Column("status", REQUEST_STATUS, nullable=False),
        sa.Column("confirmed_schedule", sa.String(length=100), nullable=True),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("submission_date", sa.Date(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_service_requests_id", "service_requests", ["id"])
    op.create_index("ix_service_requests_category", "service_requests", ["category"])
    op.create_index("ix_service_requests_status", "service_requests", ["status"])

    op.create_table(
        "sacrament_records",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("type", SACRAMENT_TYPE, nullable=False),
        sa.Column("officiant", sa.String(length=200), nullable=False),
        sa.Column("details", sa.Text(), nullable=False),
        sa.Column("is_archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("archived_by", sa.String(length=100), nullable=True),
        sa.Column("archive_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sacrament_records_id", "sacrament_records", ["id"])
    op.create_index("ix_sacrament_records_name", "sacrament_records", ["name"])
    op.create_index("ix_sacrament_records_type", "sacrament_records", ["type"])

    op.create_table(
        "issued_certificates",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("request_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=120), nullable=False),
        sa.Column("recipient_name", sa.String(length=200), nullable=False),
        sa.Column("requester_name", sa.String(length=200), nullable=False),
        sa.Column("date_issued", sa.DateTime(timezone=True), nullable=False),
        sa.Column("issued_by", sa.String(length=100), nullable=False),
        sa.Column("delivery_method", DELIVERY_METHOD, nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", CERTIFICATE_STATUS, nullable=False),
        sa.Column("file_data", sa.LargeBinary(), nullable=True),
        sa.Column("file_name", sa.String(length=255), nullable=True),
        sa.Column("file_mime_type", sa.String(length=100), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("uploaded_by", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        # UPLOADED rows must carry their file
        sa.CheckConstraint(
            "status <> 'UPLOADED' OR (file_data IS NOT NULL AND file_name IS NOT NULL "
            "AND file_mime_type IS NOT NULL)",
            name="ck_issued_certificates_uploaded_has_file",
        ),
    )
    op.create_index("ix_issued_certificates_id", "issued_certificates", ["id"])
    op.create_index("ix_issued_certificates_request_id", "issued_certificates", ["request_id"])
    op.create_index("ix_issued_certificates_status", "issued_certificates", ["status"])


def downgrade() -> None:
    op.drop_index("ix_issued_certificates_status", table_name="issued_certificates")
    op.drop_index("ix_issued_certificates_request_id", table_name="issued_certificates")
    op.drop_index("ix_issued_certificates_id", table_name="issued_certificates")
    op.drop_table("issued_certificates")

    op.drop_index("ix_sacrament_records_type", table_name="sacrament_records")
    op.drop_index("ix_sacrament_records_name", table_name="sacrament_records")
    op.drop_index("ix_sacrament_records_id", table_name="sacrament_records")
    op.drop_table("sacrament_records")

    op.drop_index("ix_service_requests_status", table_name="service_requests")
    op.drop_index("ix_service_requests_category", table_name="service_requests")
    op.drop_index("ix_service_requests_id", table_name="service_requests")
    op.drop_table("service_requests")

    op.drop_index("ix_users_username", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in (
        CERTIFICATE_STATUS, DELIVERY_METHOD, SACRAMENT_TYPE, REQUEST_STATUS, REQUEST_CATEGORY
    ):
        enum_type.drop(bind, checkfirst=True)
