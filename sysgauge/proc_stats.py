"""Per-process statistics and parsers for the files under ``/proc/<pid>``."""

from __future__ import annotations

import json
import re
from dataclasses import asdict, dataclass, field

CLOCK_TICKS = 100
PAGE_SIZE = 4096

_UINT64_LIMIT = 1 << 64
_INT_RE = re.compile(r"[+-]?\d+")

_IO_FIELDS = {
    "syscr": "read_count",
    "syscw": "write_count",
    "read_bytes": "read_bytes",
    "write_bytes": "write_bytes",
}

_SMAPS_FIELDS = {
    "Size": "size",
    "Rss": "rss",
    "Pss": "pss",
    "Shared_Clean": "shared_clean",
    "Shared_Dirty": "shared_dirty",
    "Private_Clean": "private_clean",
    "Private_Dirty": "private_dirty",
    "Referenced": "referenced",
    "Anonymous": "anonymous",
    "Swap": "swap",
}

_STATUS_MEMORY = {"VmRSS": "rss", "VmSize": "vms", "VmSwap": "swap"}


def _to_json(obj) -> str:
    data = {
        key: int(value) if isinstance(value, float) and value.is_integer() else value
        for key, value in asdict(obj).items()
    }
    return json.dumps(data, separators=(",", ":"))


class _JsonStr:
    def __str__(self) -> str:
        return _to_json(self)


@dataclass
class CPUTimesStat(_JsonStr):
    """CPU time spent in each mode, in seconds."""

    cpu: str = ""
    user: float = 0.0
    system: float = 0.0
    idle: float = 0.0
    nice: float = 0.0
    iowait: float = 0.0
    irq: float = 0.0
    softirq: float = 0.0
    steal: float = 0.0
    guest: float = 0.0
    guest_nice: float = 0.0
    stolen: float = 0.0


@dataclass
class MemoryInfoStat(_JsonStr):
    """Resident, virtual and swapped memory of a process, in bytes."""

    rss: int = 0
    vms: int = 0
    swap: int = 0


@dataclass
class MemoryInfoExStat(_JsonStr):
    """Extended memory figures of a process, in bytes."""

    rss: int = 0
    vms: int = 0
    shared: int = 0
    text: int = 0
    lib: int = 0
    data: int = 0
    dirty: int = 0


@dataclass
class MemoryMapsStat(_JsonStr):
    """One mapping from ``/proc/<pid>/smaps``; sizes in kB."""

    path: str = ""
    rss: int = 0
    size: int = 0
    pss: int = 0
    shared_clean: int = 0
    shared_dirty: int = 0
    private_clean: int = 0
    private_dirty: int = 0
    referenced: int = 0
    anonymous: int = 0
    swap: int = 0


@dataclass
class OpenFilesStat(_JsonStr):
    """A file a process holds open."""

    path: str = ""
    fd: int = 0


@dataclass
class RlimitStat(_JsonStr):
    """A resource limit."""

    resource: int = 0
    soft: int = 0
    hard: int = 0


@dataclass
class IOCountersStat(_JsonStr):
    """Read and write counters of a process."""

    read_count: int = 0
    write_count: int = 0
    read_bytes: int = 0
    write_bytes: int = 0


@dataclass
class NumCtxSwitchesStat(_JsonStr):
    """Voluntary and involuntary context switches of a process."""

    voluntary: int = 0
    involuntary: int = 0


@dataclass
class StatusInfo:
    """What ``/proc/<pid>/status`` tells about a process."""

    name: str = ""
    status: str = ""
    uids: list[int] = field(default_factory=list)
    gids: list[int] = field(default_factory=list)
    num_threads: int = 0
    num_ctx_switches: NumCtxSwitchesStat = field(default_factory=NumCtxSwitchesStat)
    mem_info: MemoryInfoStat = field(default_factory=MemoryInfoStat)


@dataclass
class StatInfo:
    """What ``/proc/<pid>/stat`` tells about a process."""

    tty_nr: int = 0
    ppid: int = 0
    cpu_times: CPUTimesStat = field(default_factory=CPUTimesStat)
    create_time: int = 0


def _parse_uint(text: str) -> int:
    if not (text.isascii() and text.isdigit()):
        raise ValueError(f"invalid unsigned integer: {text!r}")
    value = int(text)
    if value >= _UINT64_LIMIT:
        raise ValueError(f"value out of range: {text!r}")
    return value


def _parse_int(text: str, bits: int = 64) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid integer: {text!r}")
    value = int(text)
    limit = 1 << (bits - 1)
    if not -limit <= value < limit:
        raise ValueError(f"value out of range: {text!r}")
    return value


def _parse_float(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"invalid number: {text!r}") from None


def _kilobytes(text: str) -> int:
    return _parse_uint(text.strip(" kB"))


def parse_io(text: str) -> IOCountersStat:
    """Parse the contents of ``/proc/<pid>/io``."""
    stat = IOCountersStat()
    for line in text.split("\n"):
        parts = line.split()
        if len(parts) < 2:
            continue
        amount = _parse_uint(parts[1])
        attr = _IO_FIELDS.get(parts[0].removesuffix(":"))
        if attr is not None:
            setattr(stat, attr, amount)
    return stat


def parse_statm(text: str) -> tuple[MemoryInfoStat, MemoryInfoExStat]:
    """Parse ``/proc/<pid>/statm`` into basic and extended memory figures."""
    parts = text.split()
    if len(parts) < 6:
        raise ValueError(f"unexpected statm contents: {text!r}")
    vms, rss, shared, text_pages, lib, dirty = (_parse_uint(p) for p in parts[:6])
    info = MemoryInfoStat(rss=rss * PAGE_SIZE, vms=vms * PAGE_SIZE)
    extended = MemoryInfoExStat(
        rss=rss * PAGE_SIZE,
        vms=vms * PAGE_SIZE,
        shared=shared * PAGE_SIZE,
        text=text_pages * PAGE_SIZE,
        lib=lib * PAGE_SIZE,
        dirty=dirty * PAGE_SIZE,
    )
    return info, extended


def parse_smaps(text: str) -> list[MemoryMapsStat]:
    """Parse ``/proc/<pid>/smaps`` into one entry per mapping."""
    maps: list[MemoryMapsStat] = []
    current: MemoryMapsStat | None = None
    for line in text.split("\n"):
        if not line:
            continue
        words = line.split(" ")
        if not words[0].endswith(":"):
            current = MemoryMapsStat(path=words[-1])
            maps.append(current)
            continue
        if current is None or "VmFlags" in line:
            continue
        key, _, rest = line.partition(":")
        amount = _kilobytes(rest.split(":")[0])
        attr = _SMAPS_FIELDS.get(key)
        if attr is not None:
            setattr(current, attr, amount)
    return maps


def _id_list(value: str) -> list[int]:
    return [_parse_int(item, 32) for item in value.split("\t")]


def parse_status(text: str) -> StatusInfo:
    """Parse the contents of ``/proc/<pid>/status``."""
    info = StatusInfo()
    for line in text.split("\n"):
        key, sep, value = line.partition("\t")
        if not sep:
            continue
        key = key.rstrip(":")
        if key == "Name":
            info.name = value.strip(" \t")
        elif key == "State":
            start, end = value.find("("), value.find(")")
            if start < 0 or end < start:
                raise ValueError(f"unexpected state: {value!r}")
            info.status = value[start + 1 : end]
        elif key == "Uid":
            info.uids = _id_list(value)
        elif key == "Gid":
            info.gids = _id_list(value)
        elif key == "Threads":
            info.num_threads = _parse_int(value, 32)
        elif key == "voluntary_ctxt_switches":
            info.num_ctx_switches.voluntary = _parse_int(value)
        elif key == "nonvoluntary_ctxt_switches":
            info.num_ctx_switches.involuntary = _parse_int(value)
        elif key in _STATUS_MEMORY:
            setattr(info.mem_info, _STATUS_MEMORY[key], _kilobytes(value) * 1024)
    return info


def parse_stat(text: str, boot_time: int) -> StatInfo:
    """Parse ``/proc/<pid>/stat``; ``create_time`` is in milliseconds."""
    parts = text.split()
    if len(parts) < 22:
        raise ValueError(f"unexpected stat contents: {text!r}")
    tty_nr = _parse_uint(parts[6])
    ppid = _parse_int(parts[3], 32)
    utime = _parse_float(parts[13])
    stime = _parse_float(parts[14])
    start_ticks = _parse_uint(parts[21])
    cpu_times = CPUTimesStat(
        cpu="cpu", user=utime / CLOCK_TICKS, system=stime / CLOCK_TICKS
    )
    create_time = (start_ticks // CLOCK_TICKS + boot_time) * 1000
    return StatInfo(
        tty_nr=tty_nr, ppid=ppid, cpu_times=cpu_times, create_time=create_time
    )


def parse_cmdline(data: bytes | str) -> str:
    """Join the NUL-separated arguments of ``/proc/<pid>/cmdline`` with spaces."""
    if isinstance(data, bytes):
        data = data.decode("utf-8", "replace")
    return " ".join(arg for arg in data.split("\0") if arg)