from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User, as far as attendance needs to know it.

    Note: credentials live with the authentication service, not here.
    """

    user_id: int
    full_name: str
    role: Role
    team_id: Optional[int] = None
    is_active: bool = True
