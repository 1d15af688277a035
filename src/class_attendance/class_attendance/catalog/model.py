from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Group:
    group_id: str
    name: str
    code: str
    course: int = 1
    specialization: str = ""
    is_active: bool = True


@dataclass(frozen=True)
class Subject:
    subject_id: str
    name: str
    code: str
    teacher_id: Optional[str] = None
    group_ids: tuple[str, ...] = field(default_factory=tuple)
    hours_total: int = 0
    is_active: bool = True
