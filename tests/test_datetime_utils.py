from datetime import date, datetime

import pytest

from bimbel_tracker.common.datetime_utils import add_months, clamped_date, period_key, to_calendar_date
from bimbel_tracker.core.exceptions import DataShapeError


class Wrapper:
    def to_datetime(self):
        return datetime(2024, 2, 29, 7, 30)


def test_to_calendar_date_accepts_every_supported_shape():
    assert to_calendar_date(date(2025, 1, 2)) == date(2025, 1, 2)
    assert to_calendar_date(datetime(2025, 1, 2, 23, 59)) == date(2025, 1, 2)
    assert to_calendar_date("2025-01-02") == date(2025, 1, 2)
    assert to_calendar_date(" 2025-01-02T10:00:00 ") == date(2025, 1, 2)
    assert to_calendar_date(Wrapper()) == date(2024, 2, 29)


@pytest.mark.parametrize("value", ["", "02/01/2025", 12345, object()])
def test_to_calendar_date_rejects_garbage(value):
    with pytest.raises(DataShapeError):
        to_calendar_date(value)


def test_add_months_clamps_and_rolls_year():
    assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
    assert add_months(date(2025, 12, 15), 1) == date(2026, 1, 15)
    assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)


def test_clamped_date_and_period_key():
    assert clamped_date(2025, 4, 31) == date(2025, 4, 30)
    assert period_key(2025, 3) == "2025-03"
    assert period_key("2025", "11") == "2025-11"
