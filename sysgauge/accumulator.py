"""In-memory collector of measurements, used to inspect what plugins report."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class Point:
    """A single reported measurement."""

    measurement: str
    value: Any = None
    tags: dict[str, str] | None = None
    values: dict[str, Any] | None = None
    time: datetime | None = None


def _same(left: Any, right: Any) -> bool:
    """Equality that also requires both values to be of the same type."""
    return type(left) is type(right) and left == right


def _type_name(value: Any) -> str:
    return type(value).__name__


@dataclass
class Accumulator:
    """Collects points in the order they are added."""

    points: list[Point] = field(default_factory=list)

    def add(self, measurement: str, value: Any, tags: dict[str, str] | None = None) -> None:
        """Record a single value under ``measurement``."""
        self.points.append(Point(measurement=measurement, value=value, tags=tags))

    def add_values_with_time(
        self,
        measurement: str,
        values: dict[str, Any],
        tags: dict[str, str] | None,
        timestamp: datetime,
    ) -> None:
        """Record several named values taken at ``timestamp``."""
        self.points.append(
            Point(measurement=measurement, values=values, tags=tags, time=timestamp)
        )

    def _first(self, measurement: str) -> Point | None:
        return next((p for p in self.points if p.measurement == measurement), None)

    def get(self, measurement: str) -> Point | None:
        """Return the first point recorded under ``measurement``, or None."""
        return self._first(measurement)

    def check_value(self, measurement: str, val: Any) -> bool:
        """True when the first point for ``measurement`` holds ``val``."""
        point = self._first(measurement)
        return point is not None and _same(point.value, val)

    def check_tagged_value(
        self, measurement: str, val: Any, tags: dict[str, str] | None
    ) -> bool:
        """True when :meth:`validate_tagged_value` succeeds."""
        try:
            self.validate_tagged_value(measurement, val, tags)
        except ValueError:
            return False
        return True

    def validate_tagged_value(
        self, measurement: str, val: Any, tags: dict[str, str] | None
    ) -> None:
        """Raise ValueError unless a matching tagged point holds ``val``.

        A point matches when both it and ``tags`` are untagged, or when any
        of its tags has the same value in ``tags``.
        """
        wanted = tags or {}
        for point in self.points:
            if point.tags is None and tags is None:
                found = True
            else:
                found = any(
                    wanted.get(key, "") == value
                    for key, value in (point.tags or {}).items()
                )
            if found and point.measurement == measurement:
                if not _same(point.value, val):
                    raise ValueError(
                        f"{point.value!r} ({_type_name(point.value)}) != "
                        f"{val!r} ({_type_name(val)})"
                    )
                return
        raise ValueError(f"unknown value {measurement} with tags {tags}")

    def validate_value(self, measurement: str, val: Any) -> None:
        """Validate an untagged value; raises ValueError on mismatch."""
        self.validate_tagged_value(measurement, val, None)

    def has_int_value(self, measurement: str) -> bool:
        """True when the first point for ``measurement`` holds an integer."""
        point = self._first(measurement)
        return (
            point is not None
            and isinstance(point.value, int)
            and not isinstance(point.value, bool)
        )

    def has_float_value(self, measurement: str) -> bool:
        """True when the first point for ``measurement`` holds a float."""
        point = self._first(measurement)
        return point is not None and isinstance(point.value, float)