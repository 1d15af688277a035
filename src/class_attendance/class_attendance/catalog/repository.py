from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Group, Subject


class CatalogRepository(Protocol):
    """Read access to groups and subjects, used for in-memory joins."""

    def get_group(self, group_id: str) -> Optional[Group]:
        raise NotImplementedError

    def list_groups(self) -> Sequence[Group]:
        raise NotImplementedError

    def get_subject(self, subject_id: str) -> Optional[Subject]:
        raise NotImplementedError

    def list_subjects(self) -> Sequence[Subject]:
        raise NotImplementedError
