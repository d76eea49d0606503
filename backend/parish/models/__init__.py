# parish/models/__init__.py
"""
Central model registry.

Import this once at startup (main.py, alembic/env.py) so SQLAlchemy sees
every mapped class before metadata is used.
"""
from parish.db import Base  # re-export Base

from .certificate import CertificateStatus, DeliveryMethod, IssuedCertificate  # noqa: F401
from .sacrament_record import SacramentRecord, SacramentType  # noqa: F401
from .service_request import RequestCategory, RequestStatus, ServiceRequest  # noqa: F401
from .user import User  # noqa: F401
