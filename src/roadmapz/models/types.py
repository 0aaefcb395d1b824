# roadmapZ type definitions
# Rev 0.1.0

from __future__ import annotations
from datetime import date, datetime
from typing import Literal, Union

Priority = Literal["low", "medium", "high", "urgent"]
PRIORITIES: tuple[str, ...] = ("low", "medium", "high", "urgent")

DependencyType = Literal["finish-to-start", "start-to-start", "finish-to-finish", "start-to-finish"]
DEPENDENCY_TYPES: tuple[str, ...] = ("finish-to-start", "start-to-start", "finish-to-finish", "start-to-finish")

TimeScale = Literal["day", "week", "month", "quarter", "year"]
TIME_SCALES: tuple[str, ...] = ("day", "week", "month", "quarter", "year")

GroupBy = Literal["none", "status", "assignee", "priority"]

# Roadmap-level capabilities checked by services.permissions
Action = Literal["read", "edit", "delete", "manage_statuses"]

# Dates arrive as ISO strings from storage and as date objects from the UI
DateLike = Union[date, datetime, str, None]
