from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Plain data object (no store access). Students carry the group they belong to.
    """

    user_id: str
    name: str
    email: str
    role: Role
    is_active: bool = True
    group_id: Optional[str] = None
    student_number: Optional[str] = None
