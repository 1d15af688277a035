from __future__ import annotations

import copy

import pytest

from class_attendance.container import build_container
from class_attendance.database.memory_store import InMemoryDocumentStore

SEED = {
    "groups": [
        {"id": "g1", "name": "CS-21", "code": "CS21", "course": 2},
        {"id": "g2", "name": "EE-22", "code": "EE22", "course": 1},
    ],
    "users": [
        {"id": "t1", "name": "Anna Ivanova", "email": "ivanova@example.com", "role": "teacher"},
        {"id": "t2", "name": "Pavel Smirnov", "email": "smirnov@example.com", "role": "teacher"},
        {"id": "s1", "name": "Oleg Petrov", "email": "s1@example.com", "role": "student", "groupId": "g1"},
        {"id": "s2", "name": "Maria Sokolova", "email": "s2@example.com", "role": "student", "groupId": "g1"},
        {"id": "s3", "name": "Ivan Orlov", "email": "s3@example.com", "role": "student", "groupId": "g2"},
    ],
    "subjects": [
        {"id": "math", "name": "Mathematics", "code": "MTH", "teacherId": "t1", "groupIds": ["g1"]},
        {"id": "phys", "name": "Physics", "code": "PHY", "teacherId": "t2", "groupIds": ["g1", "g2"]},
    ],
}


@pytest.fixture
def seed():
    return copy.deepcopy(SEED)


@pytest.fixture
def store(seed):
    return InMemoryDocumentStore(seed)


@pytest.fixture
def container(store):
    return build_container(store=store)


@pytest.fixture
def make_slot(container):
    def _make(**overrides):
        kwargs = dict(
            subject_id="math",
            group_id="g1",
            teacher_id="t1",
            day_of_week="monday",
            start_time="09:00",
            end_time="10:30",
            classroom="101",
        )
        kwargs.update(overrides)
        return container.schedule_service.create_slot(**kwargs).slot

    return _make
