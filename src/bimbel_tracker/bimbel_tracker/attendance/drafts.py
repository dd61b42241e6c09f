from __future__ import annotations

import itertools
import logging
import threading
from datetime import datetime
from typing import Callable, Mapping, Optional

from ..common.datetime_utils import now_local, parse_hhmm, parse_iso_date
from ..core.enums import AttendanceStatus, EducationLevel, StudentStatus
from ..core.exceptions import AuthorizationError, SubmissionError, ValidationError
from ..students.model import RosterEntry
from ..students.roster import StudentRoster
from .model import ActiveSession, CommitResult, DraftEntry, SessionContext
from .repository import AttendanceRepository
from .time_slots import TimeSlot, generate_time_slots

logger = logging.getLogger(__name__)

SESSION_FIELDS = ("date", "education_level", "class_type", "location", "time_start", "time_end", "status", "tutor")

REQUIRED_SESSION_FIELDS = (
    ("date", "Tanggal"),
    ("education_level", "Tingkat Pendidikan"),
    ("class_type", "Jenis Kelas"),
    ("location", "Tempat"),
    ("status", "Status Kehadiran"),
)

TIME_MODE_PRESET = "preset"
TIME_MODE_CUSTOM = "custom"

_SELECTABLE_LEVELS = {lvl.value for lvl in EducationLevel if lvl != EducationLevel.UNKNOWN}


def counter_ids(prefix: str = "draft") -> Callable[[], str]:
    """Monotonic local ids: draft-1, draft-2, ..."""
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


def _require_hhmm(value: str, field_name: str) -> str:
    try:
        parse_hhmm(value)
    except ValueError:
        raise ValidationError("Waktu harus berformat HH:MM", field=field_name)
    return value


class SessionDraftAggregator:
    """Stages attendance entries for one editing session and commits them as one batch.

    One instance per editing user. Entries share the current session context
    (date, level, class, location, time range, tutor) at the moment they are
    staged; the context can change between entries, so staged drafts may span
    several time ranges.
    """

    def __init__(
        self,
        batch_writer: AttendanceRepository,
        *,
        tutor_name: str,
        enable_tutor_selection: bool = False,
        allow_manual_date: bool = False,
        roster: Optional[StudentRoster] = None,
        id_generator: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._writer = batch_writer
        self._roster = roster
        self._tutor_name = tutor_name
        self.enable_tutor_selection = bool(enable_tutor_selection)
        self.allow_manual_date = bool(allow_manual_date)
        self._next_id = id_generator or counter_ids()
        self._clock = clock or now_local
        self._commit_lock = threading.Lock()

        self._drafts: list[DraftEntry] = []
        self.active_session: Optional[ActiveSession] = None
        self.available_time_slots: list[TimeSlot] = []
        self.time_mode = TIME_MODE_PRESET
        self.context = SessionContext(date=self._clock().date().isoformat(), tutor=tutor_name)

    # ---- state ----

    @property
    def drafts(self) -> tuple[DraftEntry, ...]:
        return tuple(self._drafts)

    @property
    def is_committing(self) -> bool:
        return self._commit_lock.locked()

    def _blank_context(self) -> SessionContext:
        """Fresh context keeping the date and, where selectable, the chosen tutor."""
        tutor = self._tutor_name
        if self.enable_tutor_selection:
            tutor = self.context.tutor or self._tutor_name
        return SessionContext(date=self.context.date, tutor=tutor)

    def _reset_time_selection(self) -> None:
        self.active_session = None
        self.available_time_slots = []
        self.time_mode = TIME_MODE_PRESET

    def active_session_count(self) -> int:
        """Entries staged so far under the locked session's time range."""
        if not self.active_session:
            return 0
        return sum(1 for d in self._drafts if d.time_slot == self.active_session.key)

    # ---- session context ----

    def _clean_session_value(self, field: str, value) -> str:
        if field not in SESSION_FIELDS:
            raise ValidationError(f"Field sesi tidak dikenal: {field}", field=field)

        value = str(value or "").strip()

        if field == "date":
            if not self.allow_manual_date:
                raise AuthorizationError("Tanggal sesi tidak dapat diubah")
            if value:
                try:
                    parse_iso_date(value)
                except ValueError:
                    raise ValidationError("Tanggal harus berformat YYYY-MM-DD", field="date")
        elif field == "tutor" and not self.enable_tutor_selection:
            raise AuthorizationError("Tutor tidak dapat diubah")
        elif field == "status" and value:
            try:
                AttendanceStatus(value)
            except ValueError:
                raise ValidationError("Status kehadiran tidak dikenal", field="status")
        elif field == "education_level" and value and value not in _SELECTABLE_LEVELS:
            raise ValidationError("Tingkat pendidikan tidak dikenal", field="education_level")
        elif field in ("time_start", "time_end") and value:
            _require_hhmm(value, field)
        return value

    def set_session_field(self, field: str, value) -> None:
        self.update_session({field: value})

    def update_session(self, changes: Mapping[str, object]) -> None:
        """Apply several context fields at once; nothing changes unless all of them are valid."""

        clean = {field: self._clean_session_value(field, value) for field, value in changes.items()}
        for field, value in clean.items():
            setattr(self.context, field, value)
            if field == "education_level":
                self._on_education_level_changed(value)

    def _on_education_level_changed(self, level: str) -> None:
        self.available_time_slots = generate_time_slots(level) if level else []

        if self._drafts and self.active_session:
            # Keep the running session's time so staged entries stay grouped.
            self.context.time_start = self.active_session.time_start
            self.context.time_end = self.active_session.time_end
            self.time_mode = TIME_MODE_CUSTOM
        else:
            self.context.time_start = ""
            self.context.time_end = ""
            self.time_mode = TIME_MODE_PRESET

    def select_time_slot(self, value: str) -> None:
        value = (value or "").strip()
        if not value:
            self.context.time_start = ""
            self.context.time_end = ""
            return

        slot = next((s for s in self.available_time_slots if s.value == value), None)
        if not slot:
            raise ValidationError("Waktu sesi tidak tersedia untuk tingkat ini", field="time")
        self.context.time_start = slot.start
        self.context.time_end = slot.end
        self.time_mode = TIME_MODE_PRESET

    def set_custom_time(self, time_start: str, time_end: str) -> None:
        time_start = (time_start or "").strip()
        time_end = (time_end or "").strip()
        if time_start:
            _require_hhmm(time_start, "time_start")
        if time_end:
            _require_hhmm(time_end, "time_end")

        self.time_mode = TIME_MODE_CUSTOM
        self.context.time_start = time_start
        self.context.time_end = time_end

    def use_preset_time(self) -> None:
        self.time_mode = TIME_MODE_PRESET
        self.context.time_start = ""
        self.context.time_end = ""

    # ---- roster ----

    def student_options(self, search: str = "") -> list[RosterEntry]:
        if not self._roster:
            return []
        needle = (search or "").strip().lower()
        students = self._roster.fetch_active_students()
        if not needle:
            return list(students)
        return [s for s in students if needle in s.name.lower()]

    def class_options(self) -> list[str]:
        return list(self._roster.fetch_class_options()) if self._roster else []

    def select_student(self, name: str) -> str:
        """Check a picked student against the roster; students on leave or off are rejected."""

        name = (name or "").strip()
        if not name:
            raise ValidationError("Harap pilih siswa terlebih dahulu", field="student_name")
        if not self._roster:
            return name

        entry = next((s for s in self._roster.fetch_active_students() if s.name == name), None)
        if entry and entry.status == StudentStatus.ON_LEAVE:
            raise ValidationError(f"Siswa {name} sedang CUTI. Tidak dapat dipilih.", field="student_name")
        if entry and entry.status == StudentStatus.INACTIVE:
            raise ValidationError(f"Siswa {name} statusnya OFF. Tidak dapat dipilih.", field="student_name")
        return name

    # ---- drafts ----

    def _validate_for_entry(self, student_name: str) -> None:
        ctx = self.context
        for key, label in REQUIRED_SESSION_FIELDS:
            if not getattr(ctx, key):
                raise ValidationError(f"Mohon isi {label} terlebih dahulu.", field=key)

        if self.enable_tutor_selection and not ctx.tutor:
            raise ValidationError("Mohon pilih Tutor terlebih dahulu.", field="tutor")

        if not ctx.time_start or not ctx.time_end:
            raise ValidationError("Harap set waktu sesi terlebih dahulu", field="time")

        if not student_name:
            raise ValidationError("Harap pilih siswa terlebih dahulu", field="student_name")

    def add_entry(self, student_name: str, notes: str = "") -> DraftEntry:
        student_name = (student_name or "").strip()
        self._validate_for_entry(student_name)

        ctx = self.context
        entry = DraftEntry(
            local_id=self._next_id(),
            date=ctx.date,
            education_level=ctx.education_level,
            class_type=ctx.class_type,
            location=ctx.location,
            time_start=ctx.time_start,
            time_end=ctx.time_end,
            student_name=student_name,
            tutor=ctx.tutor or self._tutor_name,
            status=ctx.status,
            notes=(notes or "").strip(),
            timestamp=self._clock(),
        )
        self._drafts.append(entry)

        if self.active_session is None:
            self.active_session = ActiveSession(
                time_start=ctx.time_start,
                time_end=ctx.time_end,
                education_level=ctx.education_level,
                class_type=ctx.class_type,
                location=ctx.location,
            )
        return entry

    def remove_entry(self, local_id: str) -> None:
        self._drafts = [d for d in self._drafts if d.local_id != local_id]

    def get_grouped_drafts(self) -> dict[str, list[DraftEntry]]:
        groups: dict[str, list[DraftEntry]] = {}
        for d in self._drafts:
            groups.setdefault(d.time_slot, []).append(d)
        return groups

    def start_new_session(self, *, confirmed: bool = False) -> bool:
        """Reset the session context; staged drafts are kept.

        Returns False without touching anything when drafts exist and the
        caller has not confirmed.
        """

        if self._drafts and not confirmed:
            return False
        self.context = self._blank_context()
        self._reset_time_selection()
        return True

    def commit(self) -> CommitResult:
        if not self._drafts:
            raise ValidationError("Tidak ada data presensi untuk disimpan", field="drafts")
        if not self._commit_lock.acquire(blocking=False):
            raise ValidationError("Penyimpanan sedang berlangsung", field="drafts")

        try:
            staged = list(self._drafts)
            records = [d.to_record() for d in staged]
            try:
                result = self._writer.submit_batch(records)
            except Exception as e:
                logger.exception("Attendance batch of %d records raised", len(records))
                raise SubmissionError(f"Gagal menyimpan presensi: {e}") from e

            if not result.success:
                failed = [r for r in result.results if not r.success]
                if failed:
                    message = f"Gagal menyimpan {len(failed)} dari {len(staged)} data. Silakan coba lagi."
                else:
                    message = f"Gagal menyimpan data presensi: {result.error or 'kesalahan tidak diketahui'}"
                logger.warning("Attendance commit rejected: %s", result.error)
                raise SubmissionError(message, results=result.results)

            # Entries staged while the batch was in flight were not submitted; keep them.
            submitted = {d.local_id for d in staged}
            self._drafts = [d for d in self._drafts if d.local_id not in submitted]
            if not self._drafts:
                self.context = self._blank_context()
                self._reset_time_selection()
            logger.info("Committed %d attendance drafts for tutor %s", len(staged), self._tutor_name)
            return CommitResult(success=True, count=len(staged), results=tuple(result.results))
        finally:
            self._commit_lock.release()

    def snapshot(self) -> dict:
        return {
            "context": self.context.to_dict(),
            "time_mode": self.time_mode,
            "available_time_slots": [s.to_dict() for s in self.available_time_slots],
            "active_session": self.active_session.key if self.active_session else None,
            "active_session_count": self.active_session_count(),
            "enable_tutor_selection": self.enable_tutor_selection,
            "drafts": {key: [d.to_dict() for d in items] for key, items in self.get_grouped_drafts().items()},
            "draft_count": len(self._drafts),
        }


class DraftSessionRegistry:
    """Keeps one aggregator per editing user between requests."""

    def __init__(self, factory: Callable[..., SessionDraftAggregator]):
        self._factory = factory
        self._sessions: dict[str, SessionDraftAggregator] = {}
        self._lock = threading.Lock()

    def get_or_create(self, owner: str, **options) -> SessionDraftAggregator:
        with self._lock:
            agg = self._sessions.get(owner)
            if agg is None:
                agg = self._factory(**options)
                self._sessions[owner] = agg
            return agg
