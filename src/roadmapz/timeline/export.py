# Rev 0.1.0
"""JSON / CSV export of a timeline snapshot."""
from __future__ import annotations

import json
import re
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Sequence

from ..models.entities import Dependency, Milestone, Post

CSV_HEADERS = (
    "Type", "ID", "Title", "Description", "Start Date",
    "End Date", "Status", "Priority", "Assignee", "Tags",
)
EXPORT_FORMATS = ("json", "csv")


def _quoted(text: Optional[str]) -> str:
    return '"' + (text or "").replace('"', '""') + '"'


def _plain(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def export_json(
    posts: Sequence[Post],
    milestones: Sequence[Milestone],
    dependencies: Sequence[Dependency],
    roadmap_name: str = "Roadmap",
    exported_at: Optional[datetime] = None,
) -> str:
    exported_at = exported_at or datetime.now(timezone.utc)
    data = {
        "roadmapName": roadmap_name,
        "exportDate": exported_at.isoformat(),
        "posts": [p.to_dict() for p in posts],
        "milestones": [m.to_dict() for m in milestones],
        "dependencies": [d.to_dict() for d in dependencies],
    }
    return json.dumps(data, indent=2)


def export_csv(posts: Iterable[Post], milestones: Iterable[Milestone]) -> str:
    """Posts first, then milestones; Title and Description always quoted."""
    lines = [",".join(CSV_HEADERS)]
    for p in posts:
        lines.append(",".join([
            "Post",
            _plain(p.id),
            _quoted(p.title),
            _quoted(p.description),
            _plain(p.start_date),
            _plain(p.end_date),
            _plain(p.status_id),
            _plain(p.priority),
            _plain(p.assignee_id),
            ";".join(p.tags or []),
        ]))
    for m in milestones:
        lines.append(",".join([
            "Milestone",
            _plain(m.id),
            _quoted(m.title),
            _quoted(m.description),
            _plain(m.date),
            "", "", "", "", "",
        ]))
    return "\n".join(lines)


def export_filename(roadmap_name: str, fmt: str, on: Optional[date] = None) -> str:
    on = on or date.today()
    sanitized = re.sub(r"[^a-z0-9]", "-", roadmap_name, flags=re.IGNORECASE).lower()
    return f"{sanitized}-timeline-{on.isoformat()}.{fmt}"


def render_export(
    fmt: str,
    posts: Sequence[Post],
    milestones: Sequence[Milestone],
    dependencies: Sequence[Dependency],
    roadmap_name: str = "Roadmap",
) -> str:
    if fmt == "json":
        return export_json(posts, milestones, dependencies, roadmap_name)
    if fmt == "csv":
        return export_csv(posts, milestones)
    raise ValueError(f"Unsupported export format: {fmt!r}")


def write_export(path: Path, content: str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path
