"""System load averages."""

from __future__ import annotations

import json
import subprocess
import sys
from dataclasses import asdict, dataclass

_LOADAVG_PATH = "/proc/loadavg"


def _to_json(obj) -> str:
    data = {
        key: int(value) if isinstance(value, float) and value.is_integer() else value
        for key, value in asdict(obj).items()
    }
    return json.dumps(data, separators=(",", ":"))


@dataclass
class LoadAvgStat:
    """Load averages over one, five and fifteen minutes."""

    load1: float = 0.0
    load5: float = 0.0
    load15: float = 0.0

    def __str__(self) -> str:
        return _to_json(self)


def _from_fields(fields: list[str]) -> LoadAvgStat:
    if len(fields) < 3:
        raise ValueError(f"expected three load averages, got {fields!r}")
    load1, load5, load15 = (float(value) for value in fields[:3])
    return LoadAvgStat(load1=load1, load5=load5, load15=load15)


def parse_loadavg(text: str) -> LoadAvgStat:
    """Parse the contents of ``/proc/loadavg``."""
    return _from_fields(text.split())


def _sysctl_fields(text: str) -> list[str]:
    return text.replace("{ ", "", 1).replace(" }", "", 1).split()


def parse_sysctl_loadavg(text: str) -> LoadAvgStat:
    """Parse the output of ``sysctl -n vm.loadavg``, e.g. ``{ 1.2 1.4 1.6 }``."""
    return _from_fields(_sysctl_fields(text))


def _sysctl(name: str) -> str:
    return subprocess.run(
        ["sysctl", "-n", name], capture_output=True, text=True, check=True
    ).stdout


def load_avg() -> LoadAvgStat:
    """Return the current load averages of this host."""
    platform = sys.platform
    if platform.startswith("linux"):
        with open(_LOADAVG_PATH, encoding="ascii") as handle:
            return parse_loadavg(handle.read())
    if platform == "darwin" or platform.startswith("freebsd"):
        return parse_sysctl_loadavg(_sysctl("vm.loadavg"))
    raise NotImplementedError(f"load averages are not available on {platform}")