from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Child


class ChildRepository(Protocol):
    """Read-only view of the child directory.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    def get_by_id(self, child_id: int) -> Optional[Child]:
        raise NotImplementedError

    def list_ids_for_parent(self, parent_id: int) -> Sequence[int]:
        raise NotImplementedError
