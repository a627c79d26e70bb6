# app/shared/database/models.py
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, JSON,
    UniqueConstraint, CheckConstraint, Index
)
from sqlalchemy.sql import func
from datetime import datetime
from enum import Enum

from app.config.database import Base


# =====================================================
# ENUMS
# =====================================================

class UserRole(str, Enum):
    STUDENT = "student"
    WORKER = "worker"


class Carrier(str, Enum):
    USPS = "USPS"
    OTHER = "Other"


class PackageStatus(str, Enum):
    CHECKED_IN = "Checked In"
    PICKED_UP = "Picked Up"


class RecipientType(str, Enum):
    STUDENT = "Student"
    FACULTY = "Faculty"
    STAFF = "Staff"
    DEPARTMENT = "Department"


# =====================================================
# TIMESTAMP MIXIN
# =====================================================
class TimestampMixin:
    """Adds created_at and updated_at columns"""
    created_at = Column(DateTime, nullable=False, default=datetime.now, server_default=func.current_timestamp())
    updated_at = Column(DateTime, nullable=False, default=datetime.now, server_default=func.current_timestamp(), onupdate=datetime.now)


# =====================================================
# USERS
# =====================================================

class User(Base, TimestampMixin):
    """Authenticated principal (worker or student)"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.STUDENT.value)
    full_name = Column(String(255))
    # Links a student principal to their Recipient record; NULLs are not compared
    l_number = Column(String(50), unique=True, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint("role IN ('student', 'worker')", name="users_role_check"),
    )

    @property
    def is_worker(self) -> bool:
        return self.role == UserRole.WORKER.value


# =====================================================
# RECIPIENTS
# =====================================================

class Recipient(Base, TimestampMixin):
    """Person or department that receives mail"""
    __tablename__ = "recipients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    l_number = Column(String(50), nullable=False)
    type = Column(String(20), nullable=False)
    mailbox = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False)

    __table_args__ = (
        UniqueConstraint('l_number', name='recipients_l_number_key'),
        CheckConstraint(
            "type IN ('Student', 'Faculty', 'Staff', 'Department')",
            name="recipients_type_check"
        ),
    )


# =====================================================
# PACKAGES
# =====================================================

class Package(Base):
    """Package held in the mailroom.

    recipient_name, l_number and mailbox are a copy of the recipient taken at
    check-in; editing or deleting the recipient later leaves them untouched.
    recipient_id is not a foreign key so package history outlives the recipient.
    """
    __tablename__ = "packages"

    id = Column(Integer, primary_key=True, index=True)
    tracking_code = Column(String(100), nullable=False)
    carrier = Column(String(20), nullable=False, default=Carrier.OTHER.value)
    status = Column(String(20), nullable=False, default=PackageStatus.CHECKED_IN.value)

    # Recipient snapshot
    recipient_id = Column(Integer, nullable=True, index=True)
    recipient_name = Column(String(255))
    l_number = Column(String(50), index=True)
    mailbox = Column(String(50))

    # Carrier enrichment (best effort)
    carrier_status = Column(String(255))
    service_type = Column(String(255))
    expected_delivery = Column(String(100))
    last_location = Column(String(255))
    carrier_data = Column(JSON, default=dict)

    check_in_date = Column(DateTime, nullable=False, default=datetime.now)
    checkout_date = Column(DateTime, nullable=True)
    last_updated = Column(DateTime, nullable=False, default=datetime.now)
    created_at = Column(DateTime, nullable=False, default=datetime.now, server_default=func.current_timestamp())

    __table_args__ = (
        UniqueConstraint('tracking_code', name='packages_tracking_code_key'),
        CheckConstraint(
            "status IN ('Checked In', 'Picked Up')",
            name="packages_status_check"
        ),
        Index('ix_packages_l_number_status', 'l_number', 'status'),
    )

    @property
    def is_picked_up(self) -> bool:
        return self.status == PackageStatus.PICKED_UP.value


# =====================================================
# AUDIT
# =====================================================

class AuditLog(Base):
    """Audit trail of mailroom mutations"""
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, index=True)
    action = Column(String(50), nullable=False)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(Integer)
    details = Column(JSON)
    created_at = Column(DateTime, nullable=False, default=datetime.now, server_default=func.current_timestamp())
