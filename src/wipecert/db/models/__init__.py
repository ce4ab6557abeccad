"""SQLAlchemy ORM models for wipecert."""

from wipecert.db.models.base import Base, metadata
from wipecert.db.models.certificates import CertificateRecord

__all__ = [
    "Base",
    "CertificateRecord",
    "metadata",
]
