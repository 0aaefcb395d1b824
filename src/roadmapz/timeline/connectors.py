# Rev 0.1.0
"""Dependency arrows between positioned items.

Side selection, in order:
  source above target  -> source bottom-center to target top-center
  source below target  -> source top-center to target bottom-center
  source left of target -> source right-center to target left-center
  source right of target -> source left-center to target right-center
  otherwise            -> center to center
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..models.entities import Dependency, Post
from .positions import PositionedRect

_log = logging.getLogger(__name__)

MAX_CURVE = 100

Point = Tuple[float, float]


@dataclass(frozen=True)
class DependencyStyle:
    color: str
    dash: Optional[str]     # SVG dasharray, None for a solid stroke
    verb: Tuple[str, str]   # (source verb, target verb) for descriptions


DEPENDENCY_STYLES: Dict[str, DependencyStyle] = {
    "finish-to-start":  DependencyStyle("#ef4444", None, ("finish", "start")),    # red
    "start-to-start":   DependencyStyle("#f97316", "5,5", ("start", "start")),    # orange
    "finish-to-finish": DependencyStyle("#3b82f6", None, ("finish", "finish")),   # blue
    "start-to-finish":  DependencyStyle("#8b5cf6", None, ("start", "finish")),    # purple
}
FALLBACK_STYLE = DependencyStyle("#64748b", None, ("", ""))


@dataclass(frozen=True)
class Connector:
    dependency_id: int
    source_id: int
    target_id: int
    path: str
    color: str
    dash: Optional[str]
    start: Point
    end: Point
    midpoint: Point
    description: str


def style_for(dependency_type: str) -> DependencyStyle:
    return DEPENDENCY_STYLES.get(dependency_type, FALLBACK_STYLE)


def describe_dependency(dependency_type: str, source_title: str, target_title: str) -> str:
    style = DEPENDENCY_STYLES.get(dependency_type)
    if style is None:
        return f'"{source_title}" depends on "{target_title}"'
    src_verb, dst_verb = style.verb
    return f'"{source_title}" must {src_verb} before "{target_title}" can {dst_verb}'


def _num(v: float) -> str:
    v = float(v)
    if v.is_integer():
        return str(int(v))
    return repr(round(v, 3))


def _sign(v: float) -> int:
    return (v > 0) - (v < 0)


def anchor_points(source: PositionedRect, target: PositionedRect) -> Tuple[Point, Point, str]:
    """Connection points and the axis ('x' or 'y') the curve bends along."""
    if source.bottom < target.top:
        return (source.center_x, source.bottom), (target.center_x, target.top), "y"
    if target.bottom < source.top:
        return (source.center_x, source.top), (target.center_x, target.bottom), "y"
    if source.right < target.left:
        return (source.right, source.center_y), (target.left, target.center_y), "x"
    if target.right < source.left:
        return (source.left, source.center_y), (target.right, target.center_y), "x"
    s = (source.center_x, source.center_y)
    t = (target.center_x, target.center_y)
    axis = "x" if abs(t[0] - s[0]) >= abs(t[1] - s[1]) else "y"
    return s, t, axis


def route_connector(source: PositionedRect, target: PositionedRect) -> Tuple[str, Point, Point]:
    """Cubic path string from `source` to `target` plus its end points."""
    (sx, sy), (tx, ty), axis = anchor_points(source, target)
    curve = min(abs(tx - sx), MAX_CURVE) / 2
    if axis == "x":
        d = _sign(tx - sx) * curve
        c1, c2 = (sx + d, sy), (tx - d, ty)
    else:
        d = _sign(ty - sy) * curve
        c1, c2 = (sx, sy + d), (tx, ty - d)
    path = (
        f"M {_num(sx)} {_num(sy)} "
        f"C {_num(c1[0])} {_num(c1[1])}, {_num(c2[0])} {_num(c2[1])}, {_num(tx)} {_num(ty)}"
    )
    return path, (sx, sy), (tx, ty)


def route_dependencies(
    dependencies: Iterable[Dependency],
    positions: Mapping[int, PositionedRect],
    posts_by_id: Optional[Mapping[int, Post]] = None,
    *,
    log: Optional[logging.Logger] = None,
) -> List[Connector]:
    log = log or _log
    posts_by_id = posts_by_id or {}
    out: List[Connector] = []
    for dep in dependencies:
        src = positions.get(dep.source_id)
        dst = positions.get(dep.target_id)
        if src is None or dst is None:
            log.debug("Dependency %s has an endpoint off the timeline; not routed", dep.id)
            continue
        path, start, end = route_connector(src, dst)
        style = style_for(dep.dependency_type)
        s_title = posts_by_id[dep.source_id].title if dep.source_id in posts_by_id else str(dep.source_id)
        t_title = posts_by_id[dep.target_id].title if dep.target_id in posts_by_id else str(dep.target_id)
        out.append(Connector(
            dependency_id=dep.id,
            source_id=dep.source_id,
            target_id=dep.target_id,
            path=path,
            color=style.color,
            dash=style.dash,
            start=start,
            end=end,
            midpoint=((src.center_x + dst.center_x) / 2, (src.center_y + dst.center_y) / 2),
            description=describe_dependency(dep.dependency_type, s_title, t_title),
        ))
    return out
