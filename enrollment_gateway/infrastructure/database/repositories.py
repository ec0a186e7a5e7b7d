"""Data access layer for applications, enrollments and invoice numbering"""

import logging
from typing import Any, Dict, Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from enrollment_gateway.config import settings
from enrollment_gateway.domain.enrollment import Transition
from enrollment_gateway.domain.exceptions import StoreError
from enrollment_gateway.domain.models import Application, EnrollmentRecord, PaymentStatus
from enrollment_gateway.infrastructure.database.models import (
    EnrollmentApplication,
    InvoiceCounter,
    StudentEnrollment,
)
from enrollment_gateway.utils.retry import call_with_retries


def _to_application(row: EnrollmentApplication) -> Application:
    return Application(
        email=row.email,
        name=row.name,
        payment_status=PaymentStatus(row.payment_status or PaymentStatus.UNSET.value),
        company=row.company,
        job_title=row.job_title,
        phone=row.phone,
        country=row.country,
        tier=row.tier,
        payment_method=row.payment_method,
        payment_amount_cents=row.payment_amount_cents,
        payment_reference=row.payment_reference,
        invoice_requested_at=row.invoice_requested_at,
        paid_at=row.paid_at,
        enrolled=bool(row.enrolled),
    )


class EnrollmentStore:
    """
    Key-value style store for one program's enrollment state.

    Applications and student records are keyed by (program_id, email).
    Writes are flushed into the session's transaction; callers decide when to
    commit, except apply_transition and increment_counter which commit their
    own unit of work.
    """

    def __init__(
        self,
        db: Session,
        program_id: str | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
    ):
        self.db = db
        self.program_id = program_id or settings.program_id
        self.max_retries = max_retries or settings.store_max_retries
        self.backoff_base = settings.store_backoff_base if backoff_base is None else backoff_base

    def get_application(self, email: str) -> Optional[Application]:
        """Fetch an application, retrying transient connection errors"""

        def load() -> Optional[EnrollmentApplication]:
            return self.db.get(EnrollmentApplication, (self.program_id, email))

        try:
            row = call_with_retries(
                load,
                retry_on=(OperationalError,),
                max_attempts=self.max_retries,
                backoff_base=self.backoff_base,
                description="Application lookup",
                on_retry=lambda e: self.db.rollback(),
            )
        except SQLAlchemyError as e:
            raise StoreError("Application lookup failed") from e

        return _to_application(row) if row is not None else None

    def get_enrollment(self, email: str) -> Optional[StudentEnrollment]:
        return self.db.get(StudentEnrollment, (self.program_id, email))

    def conditional_update_application(
        self,
        email: str,
        attributes: Dict[str, Any],
        expected_statuses: Iterable[PaymentStatus],
    ) -> bool:
        """
        Update an application only while its status is one of expected_statuses.

        A single UPDATE ... WHERE payment_status IN (...) so that two requests
        racing for the same applicant cannot both move it forward.

        Returns:
            True if the row was updated, False if its status no longer matched
        """
        statement = (
            update(EnrollmentApplication)
            .where(EnrollmentApplication.program_id == self.program_id)
            .where(EnrollmentApplication.email == email)
            .where(EnrollmentApplication.payment_status.in_([s.value for s in expected_statuses]))
            .values(**attributes)
            .execution_options(synchronize_session="evaluate")
        )
        result = self.db.execute(statement)
        return result.rowcount == 1

    def put_enrollment(self, record: EnrollmentRecord) -> None:
        """Create or replace the student record"""
        self.db.merge(
            StudentEnrollment(
                program_id=self.program_id,
                email=record.email,
                name=record.name,
                company=record.company,
                job_title=record.job_title,
                phone=record.phone,
                country=record.country,
                tier=record.tier,
                account_owner=record.account_owner,
                payment_status=record.payment_status.value,
                payment_method=record.payment_method.value,
                payment_plan=record.payment_plan,
                amount_paid_cents=record.amount_paid_cents,
                total_amount_cents=record.total_amount_cents,
                base_seats=record.base_seats,
                additional_seats=record.additional_seats,
                support_hours=record.support_hours,
                total_seats=record.total_seats,
                payment_reference=record.payment_reference,
                enrolled_at=record.enrolled_at,
            )
        )
        self.db.flush()

    def apply_transition(
        self,
        email: str,
        transition: Transition,
        expected_statuses: Iterable[PaymentStatus],
    ) -> bool:
        """
        Write the application update and the student record in one transaction.

        Returns:
            False (nothing written) if the application left expected_statuses

        Raises:
            StoreError: Database failure; the transaction is rolled back
        """
        try:
            updated = self.conditional_update_application(
                email, transition.application_attributes, expected_statuses
            )
            if not updated:
                self.db.rollback()
                return False
            self.put_enrollment(transition.enrollment)
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("Enrollment state write failed") from e

    def increment_counter(self, key: str, start: int | None = None) -> int:
        """
        Atomically increment a counter and return its new value.

        The first call for a key returns start (default: settings.invoice_number_start).
        """
        start = settings.invoice_number_start if start is None else start
        try:
            return self._increment_counter(key, start)
        except IntegrityError:
            # Another request created the row between our UPDATE and INSERT
            self.db.rollback()
            logging.info(f"Counter {key} created concurrently, retrying increment")
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Counter increment failed for {key}") from e

        try:
            return self._increment_counter(key, start)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Counter increment failed for {key}") from e

    def _increment_counter(self, key: str, start: int) -> int:
        result = self.db.execute(
            update(InvoiceCounter)
            .where(InvoiceCounter.key == key)
            .values(value=InvoiceCounter.value + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.add(InvoiceCounter(key=key, value=start))
            self.db.flush()
        # Same transaction as the UPDATE, so this reads our own increment
        value = self.db.execute(
            select(InvoiceCounter.value).where(InvoiceCounter.key == key)
        ).scalar_one()
        self.db.commit()
        return int(value)

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
