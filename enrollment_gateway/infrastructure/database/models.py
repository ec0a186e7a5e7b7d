"""SQLAlchemy ORM models for applications, enrollments and invoice numbering"""

from sqlalchemy import Column, String, BigInteger, Boolean, DateTime, Integer, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class EnrollmentApplication(Base):
    """Application submitted before payment, keyed by program and applicant email"""

    __tablename__ = "enrollment_application"

    program_id = Column(String(64), primary_key=True)
    email = Column(String(320), primary_key=True)
    name = Column(Text, nullable=False)
    company = Column(Text, nullable=True)
    job_title = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    country = Column(Text, nullable=True)
    tier = Column(Text, nullable=True)
    payment_status = Column(Text, nullable=False, default="unset", index=True)
    payment_method = Column(Text, nullable=True)
    payment_amount_cents = Column(BigInteger, nullable=True)
    final_fee_cents = Column(BigInteger, nullable=True)
    additional_seats = Column(Integer, nullable=True)
    support_hours = Column(Integer, nullable=True)
    payment_reference = Column(Text, nullable=True)
    invoice_requested_at = Column(DateTime(timezone=True), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    enrolled = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())


class StudentEnrollment(Base):
    """Student record created when payment or an invoice request is accepted"""

    __tablename__ = "student_enrollment"

    program_id = Column(String(64), primary_key=True)
    email = Column(String(320), primary_key=True)
    name = Column(Text, nullable=False)
    company = Column(Text, nullable=False)
    job_title = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    country = Column(Text, nullable=False)
    tier = Column(Text, nullable=False)
    account_owner = Column(Boolean, nullable=False, default=True)
    payment_status = Column(Text, nullable=False)
    payment_method = Column(Text, nullable=False)
    payment_plan = Column(Text, nullable=True)
    amount_paid_cents = Column(BigInteger, nullable=False, default=0)
    total_amount_cents = Column(BigInteger, nullable=False)
    base_seats = Column(Integer, nullable=False)
    additional_seats = Column(Integer, nullable=False, default=0)
    support_hours = Column(Integer, nullable=False, default=0)
    total_seats = Column(Integer, nullable=False)
    payment_reference = Column(Text, nullable=True)
    enrolled_at = Column(DateTime(timezone=True), nullable=False)


class InvoiceCounter(Base):
    """Monotonic counter for sequential invoice numbers"""

    __tablename__ = "invoice_counter"

    key = Column(String(128), primary_key=True)
    value = Column(BigInteger, nullable=False)
