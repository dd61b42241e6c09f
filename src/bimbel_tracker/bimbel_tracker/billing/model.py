from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import PaymentState

STATUS_LABELS = {
    PaymentState.NONE: "-",
    PaymentState.PENDING: "Belum",
    PaymentState.OVERDUE: "Telat",
    PaymentState.PAID: "Lunas",
    PaymentState.PAID_LATE: "Lunas (Telat)",
}


@dataclass(frozen=True)
class PaymentStatus:
    """Status pembayaran satu periode. Dihitung ulang setiap kali diminta."""

    state: PaymentState
    label: str
    payment_date: Optional[str] = None
    is_overdue: bool = False

    @classmethod
    def of(cls, state: PaymentState, payment_date: Optional[str] = None) -> "PaymentStatus":
        return cls(
            state=state,
            label=STATUS_LABELS[state],
            payment_date=payment_date,
            is_overdue=state == PaymentState.OVERDUE,
        )

    def to_dict(self) -> dict:
        return {
            "status": self.state.value,
            "label": self.label,
            "date": self.payment_date,
            "is_overdue": self.is_overdue,
        }
