from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import ClassVar, Optional, Union

from ..catalog.model import Group, Subject
from ..core.exceptions import ValidationError
from ..users.model import User


@dataclass(frozen=True)
class _SessionBase:
    session_id: str
    recurring_slot_id: Optional[str]
    subject_id: str
    group_id: str
    teacher_id: str
    session_date: date
    start_time: str
    end_time: str
    classroom: str
    topic: Optional[str] = None
    notes: Optional[str] = None
    completed: bool = False
    canceled: bool = False

    is_virtual: ClassVar[bool] = False

    @property
    def state(self) -> str:
        if self.canceled:
            return "canceled"
        if self.completed:
            return "completed"
        return "scheduled"

    def to_dict(self) -> dict:
        return {
            "id": self.session_id,
            "virtual": self.is_virtual,
            "recurringSlotId": self.recurring_slot_id,
            "subjectId": self.subject_id,
            "groupId": self.group_id,
            "teacherId": self.teacher_id,
            "date": self.session_date.strftime("%Y-%m-%d"),
            "startTime": self.start_time,
            "endTime": self.end_time,
            "classroom": self.classroom,
            "topic": self.topic,
            "notes": self.notes,
            "completed": self.completed,
            "canceled": self.canceled,
            "state": self.state,
        }


@dataclass(frozen=True)
class VirtualSession(_SessionBase):
    """Synthesized on read from a recurring slot; never stored as such."""

    is_virtual: ClassVar[bool] = True


@dataclass(frozen=True)
class PersistedSession(_SessionBase):
    """A stored session record.

    virtual_id is the id the session had before it was first written to.
    """

    virtual_id: Optional[str] = None

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["virtualId"] = self.virtual_id
        return out


Session = Union[VirtualSession, PersistedSession]


@dataclass(frozen=True)
class SessionOwner:
    """Whose timetable is being materialized: a teacher, a group, or both."""

    teacher_id: Optional[str] = None
    group_id: Optional[str] = None

    def __post_init__(self):
        if not self.teacher_id and not self.group_id:
            raise ValidationError("teacherId or groupId is required", field="teacherId")


@dataclass(frozen=True)
class SessionDetails:
    session: Session
    subject: Optional[Subject]
    group: Optional[Group]
    teacher: Optional[User]

    def to_dict(self) -> dict:
        out = self.session.to_dict()
        out["subjectName"] = self.subject.name if self.subject else None
        out["groupName"] = self.group.name if self.group else None
        out["teacherName"] = self.teacher.name if self.teacher else None
        return out
