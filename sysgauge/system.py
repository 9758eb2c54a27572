"""System load plugin."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .load import LoadAvgStat, load_avg


class SystemPS:
    """Reads statistics from the running host."""

    def load_avg(self) -> LoadAvgStat:
        return load_avg()


@dataclass
class SystemStats:
    """Reports the system load averages."""

    ps: Any = field(default_factory=SystemPS)

    def description(self) -> str:
        return "Read metrics about system load"

    def sample_config(self) -> str:
        return ""

    def _add(self, acc, name: str, val: float, tags: dict[str, str] | None) -> None:
        if val >= 0:
            acc.add(name, val, tags)

    def gather(self, acc) -> None:
        """Add load1, load5 and load15 to ``acc``."""
        stat = self.ps.load_avg()
        acc.add("load1", stat.load1, None)
        acc.add("load5", stat.load5, None)
        acc.add("load15", stat.load15, None)