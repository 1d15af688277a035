from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..users.model import User


@dataclass(frozen=True)
class AttendanceMark:
    """Domain entity: one student's status for one session."""

    mark_id: str
    session_id: str
    student_id: str
    status: AttendanceStatus
    marked_at: datetime
    marked_by: str
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.mark_id,
            "sessionId": self.session_id,
            "studentId": self.student_id,
            "status": self.status.value,
            "notes": self.notes,
            "markedAt": self.marked_at.isoformat(timespec="seconds"),
            "markedBy": self.marked_by,
        }


@dataclass(frozen=True)
class MarkEntry:
    """Input row of a bulk mark."""

    student_id: str
    status: Any
    notes: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "MarkEntry":
        if not isinstance(payload, Mapping):
            raise ValidationError("Each entry must be an object with studentId and status", field="entries")
        return cls(
            student_id=payload.get("studentId") or "",
            status=payload.get("status"),
            notes=payload.get("notes"),
        )


@dataclass(frozen=True)
class BulkMarkFailure:
    student_id: str
    reason: str


@dataclass(frozen=True)
class BulkMarkResult:
    marks: list[AttendanceMark] = field(default_factory=list)
    failures: list[BulkMarkFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class AttendanceStats:
    total: int
    present: int
    absent: int
    late: int
    excused: int
    rate: float

    @classmethod
    def from_marks(cls, marks: Iterable[AttendanceMark]) -> "AttendanceStats":
        counts = {s: 0 for s in AttendanceStatus}
        total = 0
        for m in marks:
            counts[m.status] += 1
            total += 1

        present = counts[AttendanceStatus.PRESENT]
        late = counts[AttendanceStatus.LATE]
        # Late counts as attended; excused only adds to the total.
        rate = (present + late) / total * 100 if total > 0 else 0
        return cls(
            total=total,
            present=present,
            absent=counts[AttendanceStatus.ABSENT],
            late=late,
            excused=counts[AttendanceStatus.EXCUSED],
            rate=rate,
        )

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "present": self.present,
            "absent": self.absent,
            "late": self.late,
            "excused": self.excused,
            "rate": self.rate,
        }


@dataclass(frozen=True)
class MarkWithStudent:
    mark: AttendanceMark
    student: User


@dataclass(frozen=True)
class RosterRow:
    """A student expected in (or marked for) a session, with their mark if any."""

    student: User
    mark: Optional[AttendanceMark]
    in_group: bool = True
