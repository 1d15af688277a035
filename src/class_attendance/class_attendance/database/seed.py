from __future__ import annotations

import logging
from typing import Dict, List

from ..core.constants import GROUPS_COLLECTION, SUBJECTS_COLLECTION, USERS_COLLECTION
from .store import Document, DocumentStore

logger = logging.getLogger(__name__)

# Demo records used by scripts/seed_db.py and local development.
DEMO_DATA: Dict[str, List[Document]] = {
    GROUPS_COLLECTION: [
        {"id": "grp-cs-21", "name": "CS-21", "code": "CS21", "course": 2, "specialization": "Computer Science"},
    ],
    USERS_COLLECTION: [
        {"id": "admin", "name": "Administrator", "email": "admin@example.com", "role": "admin"},
        {"id": "t-ivanova", "name": "Anna Ivanova", "email": "ivanova@example.com", "role": "teacher"},
        {
            "id": "s-001",
            "name": "Oleg Petrov",
            "email": "petrov@example.com",
            "role": "student",
            "groupId": "grp-cs-21",
            "studentId": "21-001",
        },
        {
            "id": "s-002",
            "name": "Maria Sokolova",
            "email": "sokolova@example.com",
            "role": "student",
            "groupId": "grp-cs-21",
            "studentId": "21-002",
        },
    ],
    SUBJECTS_COLLECTION: [
        {
            "id": "subj-algo",
            "name": "Algorithms",
            "code": "ALG",
            "teacherId": "t-ivanova",
            "groupIds": ["grp-cs-21"],
            "hoursTotal": 72,
        },
    ],
}


def seed_demo_data(store: DocumentStore, data: Dict[str, List[Document]] = DEMO_DATA) -> int:
    """Create demo documents that are not there yet. Returns how many were created."""
    created = 0
    for collection, docs in data.items():
        for doc in docs:
            if store.get(collection, doc["id"]) is not None:
                continue
            fields = {k: v for k, v in doc.items() if k != "id"}
            store.create(collection, fields, doc_id=doc["id"])
            created += 1
    logger.info("Demo seed: %d document(s) created", created)
    return created
