from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Peran pengguna untuk otorisasi."""

    ADMIN = "admin"
    TUTOR = "tutor"


class EducationLevel(str, Enum):
    TK = "TK"
    SD = "SD"
    SMP = "SMP"
    SMA = "SMA"
    UMUM = "Umum"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value) -> "EducationLevel":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class StudentStatus(str, Enum):
    """Status keaktifan siswa di roster."""

    ACTIVE = "Aktif"
    ON_LEAVE = "Cuti"
    INACTIVE = "Off"


class AttendanceStatus(str, Enum):
    """Status kehadiran yang disimpan di tiap record presensi."""

    PRESENT = "Hadir"
    ABSENT = "Tidak Hadir"
    EXCUSED = "Izin"
    SICK = "Sakit"


class PaymentState(str, Enum):
    """Status pembayaran bulanan (turunan, tidak disimpan)."""

    NONE = "none"
    PENDING = "pending"
    OVERDUE = "overdue"
    PAID = "paid"
    PAID_LATE = "paid-late"

    @property
    def is_paid(self) -> bool:
        return self in (PaymentState.PAID, PaymentState.PAID_LATE)

    @property
    def is_unpaid(self) -> bool:
        return self in (PaymentState.PENDING, PaymentState.OVERDUE)
