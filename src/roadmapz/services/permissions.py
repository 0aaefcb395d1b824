# Rev 0.1.0

"""Roadmap capability checks (Rev 0.1.0)
Owner may do everything; anyone may read a public roadmap.
"""
from __future__ import annotations
from typing import Optional

from ..models.entities import Roadmap

_OWNER_ACTIONS = frozenset({"read", "edit", "delete", "manage_statuses"})
_PUBLIC_ACTIONS = frozenset({"read"})


def allowed_actions(user_id: Optional[str], roadmap: Optional[Roadmap]) -> frozenset:
    if roadmap is None:
        return frozenset()
    if user_id is not None and roadmap.owner_id == user_id:
        return _OWNER_ACTIONS
    if roadmap.is_public:
        return _PUBLIC_ACTIONS
    return frozenset()


def has_permission(user_id: Optional[str], roadmap: Optional[Roadmap], action: str) -> bool:
    return action in allowed_actions(user_id, roadmap)
