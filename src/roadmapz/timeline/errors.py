# Rev 0.1.0
from __future__ import annotations


class TimelineError(Exception):
    """Base class for layout engine failures."""


class InvalidRangeError(TimelineError, ValueError):
    def __init__(self, start, end):
        super().__init__(f"Range start {start} is after range end {end}")
        self.start = start
        self.end = end
