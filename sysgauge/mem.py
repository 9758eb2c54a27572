"""Virtual and swap memory statistics."""

from __future__ import annotations

import json
import math
import subprocess
import sys
from collections.abc import Iterable
from dataclasses import asdict, dataclass

_MEMINFO_PATH = "/proc/meminfo"
_VMSTAT_PATH = "/proc/vmstat"
_UINT64_LIMIT = 1 << 64

_MEMINFO_FIELDS = {
    "MemTotal": "total",
    "MemFree": "free",
    "Buffers": "buffers",
    "Cached": "cached",
    "Active": "active",
    "Inactive": "inactive",
}


def _to_json(obj) -> str:
    data = {
        key: int(value) if isinstance(value, float) and value.is_integer() else value
        for key, value in asdict(obj).items()
    }
    return json.dumps(data, separators=(",", ":"))


@dataclass
class VirtualMemoryStat:
    """Physical memory usage in bytes."""

    total: int = 0
    available: int = 0
    used: int = 0
    used_percent: float = 0.0
    free: int = 0
    active: int = 0
    inactive: int = 0
    buffers: int = 0
    cached: int = 0
    wired: int = 0
    shared: int = 0

    def __str__(self) -> str:
        return _to_json(self)


@dataclass
class SwapMemoryStat:
    """Swap usage in bytes, with bytes swapped in and out."""

    total: int = 0
    used: int = 0
    free: int = 0
    used_percent: float = 0.0
    sin: int = 0
    sout: int = 0

    def __str__(self) -> str:
        return _to_json(self)


def _parse_uint(text: str) -> int:
    if not (text.isascii() and text.isdigit()):
        raise ValueError(f"invalid unsigned integer: {text!r}")
    value = int(text)
    if value >= _UINT64_LIMIT:
        raise ValueError(f"value out of range: {text!r}")
    return value


def _finish_virtual(stat: VirtualMemoryStat) -> VirtualMemoryStat:
    stat.available = stat.free + stat.buffers + stat.cached
    stat.used = stat.total - stat.free
    if stat.total:
        stat.used_percent = (stat.total - stat.available) / stat.total * 100.0
    else:
        stat.used_percent = math.nan
    return stat


def _read_lines(path: str) -> list[str]:
    try:
        with open(path, encoding="utf-8") as handle:
            return handle.read().splitlines()
    except OSError:
        return []


def _run(*args: str) -> str:
    return subprocess.run(list(args), capture_output=True, text=True, check=True).stdout


def _sysctl(name: str) -> list[str]:
    out = _run("sysctl", "-n", name)
    return out.replace("{ ", "", 1).replace(" }", "", 1).split()


def _sysctl_uint(name: str) -> int:
    fields = _sysctl(name)
    if not fields:
        raise ValueError(f"sysctl {name} returned nothing")
    return _parse_uint(fields[0])


def parse_meminfo(lines: Iterable[str]) -> VirtualMemoryStat:
    """Build memory statistics from the lines of ``/proc/meminfo``."""
    stat = VirtualMemoryStat()
    for line in lines:
        fields = line.split(":")
        if len(fields) != 2:
            continue
        key = fields[0].strip()
        amount = _parse_uint(fields[1].strip().replace(" kB", ""))
        attr = _MEMINFO_FIELDS.get(key)
        if attr is not None:
            setattr(stat, attr, amount * 1000)
    return _finish_virtual(stat)


def parse_vmstat_swap(lines: Iterable[str], total: int, free: int) -> SwapMemoryStat:
    """Build swap statistics from totals and the lines of ``/proc/vmstat``."""
    stat = SwapMemoryStat(total=total, free=free, used=total - free)
    stat.used_percent = (total - free) / total * 100.0 if total else 0.0
    for line in lines:
        fields = line.split()
        if len(fields) < 2 or fields[0] not in ("pswpin", "pswpout"):
            continue
        try:
            pages = _parse_uint(fields[1])
        except ValueError:
            continue
        if fields[0] == "pswpin":
            stat.sin = pages * 4 * 1024
        else:
            stat.sout = pages * 4 * 1024
    return stat


def parse_darwin_swapusage(text: str) -> SwapMemoryStat:
    """Parse ``sysctl -n vm.swapusage`` output such as ``total = 64.00M ...``."""
    fields = text.replace("{ ", "", 1).replace(" }", "", 1).split()
    if len(fields) < 9:
        raise ValueError(f"unexpected swap usage output: {text!r}")
    total, used, free = (float(fields[i].replace("M", "", 1)) for i in (2, 5, 8))
    percent = (total - free) / total * 100.0 if total else 0.0
    # The values are reported in megabytes.
    return SwapMemoryStat(
        total=int(total * 1000),
        used=int(used * 1000),
        free=int(free * 1000),
        used_percent=percent,
    )


def parse_freebsd_swapinfo(text: str) -> SwapMemoryStat | None:
    """Parse ``swapinfo`` output; the last device line wins, None if there is none."""
    result = None
    for line in text.split("\n"):
        values = line.split()
        if not values or values[0] == "Device":
            continue
        if len(values) < 5:
            raise ValueError(f"unexpected swapinfo line: {line!r}")
        result = SwapMemoryStat(
            total=_parse_uint(values[1]),
            used=_parse_uint(values[2]),
            free=_parse_uint(values[3]),
            used_percent=float(values[4].replace("%", "", 1)),
        )
    return result


def _darwin_virtual() -> VirtualMemoryStat:
    page_size = _parse_uint(_run("pagesize").strip())
    total = _sysctl_uint("hw.memsize")
    free = _sysctl_uint("vm.page_free_count")
    stat = VirtualMemoryStat(total=total * page_size, free=free * page_size)
    return _finish_virtual(stat)


def _freebsd_virtual() -> VirtualMemoryStat:
    page_size = _sysctl_uint("vm.stats.vm.v_page_size")
    stat = VirtualMemoryStat(
        total=_sysctl_uint("vm.stats.vm.v_page_count") * page_size,
        free=_sysctl_uint("vm.stats.vm.v_free_count") * page_size,
        active=_sysctl_uint("vm.stats.vm.v_active_count") * page_size,
        inactive=_sysctl_uint("vm.stats.vm.v_inactive_count") * page_size,
        cached=_sysctl_uint("vm.stats.vm.v_cache_count") * page_size,
        buffers=_sysctl_uint("vfs.bufspace"),
        wired=_sysctl_uint("vm.stats.vm.v_wire_count") * page_size,
    )
    return _finish_virtual(stat)


def _linux_swap() -> SwapMemoryStat:
    totals = {"SwapTotal": 0, "SwapFree": 0}
    for line in _read_lines(_MEMINFO_PATH):
        key, sep, rest = line.partition(":")
        if sep and key.strip() in totals:
            totals[key.strip()] = _parse_uint(rest.strip().replace(" kB", "")) * 1024
    return parse_vmstat_swap(
        _read_lines(_VMSTAT_PATH), totals["SwapTotal"], totals["SwapFree"]
    )


def virtual_memory() -> VirtualMemoryStat:
    """Return physical memory statistics of this host."""
    platform = sys.platform
    if platform.startswith("linux"):
        return parse_meminfo(_read_lines(_MEMINFO_PATH))
    if platform == "darwin":
        return _darwin_virtual()
    if platform.startswith("freebsd"):
        return _freebsd_virtual()
    raise NotImplementedError(f"virtual memory is not available on {platform}")


def swap_memory() -> SwapMemoryStat | None:
    """Return swap statistics of this host."""
    platform = sys.platform
    if platform.startswith("linux"):
        return _linux_swap()
    if platform == "darwin":
        return parse_darwin_swapusage(" ".join(_sysctl("vm.swapusage")))
    if platform.startswith("freebsd"):
        return parse_freebsd_swapinfo(_run("swapinfo"))
    raise NotImplementedError(f"swap memory is not available on {platform}")