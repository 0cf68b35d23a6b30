from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import STAFF_ROLES, MANAGER_ROLES, Role


@dataclass(frozen=True)
class Caller:
    """Identity of whoever is calling, as issued by the session layer."""

    user_id: int
    role: Role

    @property
    def is_guardian(self) -> bool:
        return self.role == Role.PARENT

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def is_manager(self) -> bool:
        return self.role in MANAGER_ROLES
