from __future__ import annotations

from typing import Optional, Protocol

from .model import Group


class GroupRepository(Protocol):
    def get_by_id(self, group_id: int) -> Optional[Group]:
        raise NotImplementedError
