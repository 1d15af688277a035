"""Turn the weekly timetable into dated sessions.

Stored sessions for an owner and date win outright: when any exist, they are
returned as-is and nothing is synthesized for that date. Otherwise every active
slot of the owner on that weekday whose parity matches the week becomes a
virtual session whose id is derived from (slot id, date), so repeated reads
give identical ids. Reading never writes.
"""

from __future__ import annotations

import hashlib
import logging
from datetime import date, timedelta
from typing import Dict, List

from ..common.time_utils import day_of_week, format_iso_date, is_odd_week
from ..core.constants import MAX_RANGE_DAYS, VIRTUAL_SESSION_PREFIX
from ..core.exceptions import ValidationError
from ..schedules.model import RecurringSlot
from ..schedules.repository import RecurringSlotRepository
from .model import Session, SessionOwner, VirtualSession
from .repository import SessionRepository

logger = logging.getLogger(__name__)


def virtual_session_id(slot_id: str, session_date: date) -> str:
    digest = hashlib.md5(f"{slot_id}-{format_iso_date(session_date)}".encode("utf-8")).hexdigest()
    return VIRTUAL_SESSION_PREFIX + digest


def is_virtual_id(session_id: str) -> bool:
    return str(session_id).startswith(VIRTUAL_SESSION_PREFIX)


def virtual_from_slot(slot: RecurringSlot, session_date: date) -> VirtualSession:
    return VirtualSession(
        session_id=virtual_session_id(slot.slot_id, session_date),
        recurring_slot_id=slot.slot_id,
        subject_id=slot.subject_id,
        group_id=slot.group_id,
        teacher_id=slot.teacher_id,
        session_date=session_date,
        start_time=slot.start_time,
        end_time=slot.end_time,
        classroom=slot.classroom,
    )


def slot_runs_on(slot: RecurringSlot, session_date: date) -> bool:
    return slot.day_of_week == day_of_week(session_date) and slot.week_parity.matches(is_odd_week(session_date))


def _start_order(session: Session) -> tuple[str, str]:
    return session.start_time, session.session_id


class SessionMaterializer:
    def __init__(self, slots: RecurringSlotRepository, sessions: SessionRepository):
        self._slots = slots
        self._sessions = sessions

    def sessions_for_date(self, owner: SessionOwner, session_date: date) -> List[Session]:
        persisted = self._sessions.list_sessions(
            session_date=session_date,
            teacher_id=owner.teacher_id,
            group_id=owner.group_id,
        )
        if persisted:
            logger.debug("%s: %d stored session(s) for %s", session_date, len(persisted), owner)
            return sorted(persisted, key=_start_order)

        dow = day_of_week(session_date)
        odd = is_odd_week(session_date)
        slots = self._slots.list_slots(
            day_of_week=dow,
            teacher_id=owner.teacher_id,
            group_id=owner.group_id,
            active_only=True,
        )
        matching = [s for s in slots if s.week_parity.matches(odd)]
        logger.debug(
            "%s (%s, %s week): %d of %d slot(s) materialize for %s",
            session_date,
            dow.value,
            "odd" if odd else "even",
            len(matching),
            len(slots),
            owner,
        )
        return sorted((virtual_from_slot(s, session_date) for s in matching), key=_start_order)

    def sessions_for_range(self, owner: SessionOwner, start: date, end: date) -> Dict[date, List[Session]]:
        if end < start:
            raise ValidationError("End date must not be before start date", field="dateTo")
        if (end - start).days >= MAX_RANGE_DAYS:
            raise ValidationError(f"Date range is limited to {MAX_RANGE_DAYS} days", field="dateTo")

        out: Dict[date, List[Session]] = {}
        day = start
        while day <= end:
            out[day] = self.sessions_for_date(owner, day)
            day += timedelta(days=1)
        return out
