from __future__ import annotations

from typing import Any, Optional

from ..children.model import Child
from ..children.repository import ChildRepository
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from .model import Caller


def caller_from_session(user_id: Any, role: Any) -> Optional[Caller]:
    """Build a Caller from raw session values; None when unusable."""

    if user_id is None or role is None:
        return None
    try:
        return Caller(user_id=int(user_id), role=Role(str(role)))
    except ValueError:
        return None


class AccessPolicy:
    """Role and ownership rules shared by every meal operation.

    Guardians are narrowed to their own children; staff roles see everyone.
    Settlement operations are reserved to managers.
    """

    def __init__(self, children: ChildRepository):
        self._children = children

    @staticmethod
    def require_caller(caller: Optional[Caller]) -> Caller:
        if caller is None or not isinstance(caller.role, Role):
            raise AuthenticationError("Not authenticated")
        return caller

    def require_manager(self, caller: Optional[Caller]) -> Caller:
        caller = self.require_caller(caller)
        if not caller.is_manager:
            raise AuthorizationError("Only the head teacher or an administrator may manage settlements")
        return caller

    @staticmethod
    def can_access_child(caller: Caller, child: Child) -> bool:
        if caller.is_staff:
            return True
        if caller.is_guardian:
            return child.parent_id is not None and int(child.parent_id) == caller.user_id
        return False

    def ensure_can_access_child(self, caller: Caller, child: Child) -> None:
        if not self.can_access_child(caller, child):
            raise AuthorizationError("You do not have access to this child")

    def scope_child_ids(self, caller: Caller, requested_child_id: Optional[int] = None) -> Optional[list[int]]:
        """Child ids a query may touch; None means unrestricted.

        A guardian asking for a child that is not theirs silently gets all of
        their own children instead. This never raises and never leaks.
        """

        if caller.is_staff:
            return [int(requested_child_id)] if requested_child_id else None

        own = [int(c) for c in self._children.list_ids_for_parent(caller.user_id)]
        if requested_child_id and int(requested_child_id) in own:
            return [int(requested_child_id)]
        return own
