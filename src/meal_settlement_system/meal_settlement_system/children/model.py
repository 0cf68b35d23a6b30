from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Child:
    """Domain entity: a child as seen by the meal engine.

    Note: The child directory is owned by the wider facility application;
    only the fields needed for ownership checks and group lookup are read.
    """

    child_id: int
    parent_id: Optional[int]
    group_id: Optional[int]
    name: str = ""
    surname: str = ""
