from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Read-only user lookup used for notification routing and team access checks.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def list_active_by_role(self, role: Role) -> Sequence[User]:
        raise NotImplementedError

    def get_team_lead_id(self, team_id: int) -> Optional[int]:
        raise NotImplementedError
