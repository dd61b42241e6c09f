from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional

from ..common.datetime_utils import add_months, clamped_date, last_day_of_month, now_local, period_key, to_calendar_date
from ..common.validators import require_month, require_year
from ..core.enums import PaymentState
from ..core.exceptions import DataShapeError
from ..students.model import Student
from .model import PaymentStatus

logger = logging.getLogger(__name__)


class BillingCycleEngine:
    """Monthly billing rules relative to each student's registration day.

    The bill for month X falls due on the registration day-of-month in
    month X+1 (clamped to the month length). No I/O, no state besides the
    injected clock.
    """

    def __init__(self, *, today: Optional[Callable[[], date]] = None):
        self._today = today or (lambda: now_local().date())

    @staticmethod
    def _registration_date(student: Student) -> Optional[date]:
        raw = student.registration_date
        if not raw:
            return None
        try:
            return to_calendar_date(raw)
        except DataShapeError:
            logger.warning("Malformed registration date for student %s: %r", student.student_id, raw)
            return None

    def get_deadline(self, student: Student, month: int, year: int) -> Optional[date]:
        month, year = require_month(month), require_year(year)
        registered = self._registration_date(student)
        if registered is None:
            return None

        anniversary = clamped_date(year, month, registered.day)
        return add_months(anniversary, 1)

    def get_payment_status(self, student: Student, month: int, year: int) -> PaymentStatus:
        deadline = self.get_deadline(student, month, year)
        if deadline is None:
            return PaymentStatus.of(PaymentState.NONE)

        # Not yet registered during this period.
        if self._registration_date(student) > last_day_of_month(year, month):
            return PaymentStatus.of(PaymentState.NONE)

        paid_on = (student.payments or {}).get(period_key(year, month))
        if paid_on:
            try:
                paid_date = to_calendar_date(paid_on)
            except DataShapeError:
                logger.warning("Unreadable payment date %r for student %s", paid_on, student.student_id)
                return PaymentStatus.of(PaymentState.PAID, paid_on)
            if paid_date > deadline:
                return PaymentStatus.of(PaymentState.PAID_LATE, paid_on)
            return PaymentStatus.of(PaymentState.PAID, paid_on)

        if self._today() > deadline:
            return PaymentStatus.of(PaymentState.OVERDUE)
        return PaymentStatus.of(PaymentState.PENDING)

    def record_payment(self, student: Student, month: int, year: int, payment_date: Optional[str]) -> dict[str, str]:
        """Return the student's payment map with the period set or cleared.

        An empty value removes the period key, reverting it to pending/overdue.
        """

        month, year = require_month(month), require_year(year)
        key = period_key(year, month)
        payments = dict(student.payments or {})
        value = (payment_date or "").strip()
        if value:
            payments[key] = value
        else:
            payments.pop(key, None)
        return payments
