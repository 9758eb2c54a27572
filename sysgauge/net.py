"""Network interfaces and per-interface I/O counters."""

from __future__ import annotations

import ipaddress
import json
import os
import socket
import struct
import subprocess
import sys
from collections.abc import Iterable
from dataclasses import dataclass, field, fields

_NET_DEV_PATH = "/proc/net/dev"
_IF_INET6_PATH = "/proc/net/if_inet6"
_SYS_NET_PATH = "/sys/class/net"
_UINT64_LIMIT = 1 << 64

_SIOCGIFADDR = 0x8915
_SIOCGIFNETMASK = 0x891B

_FLAG_NAMES = (
    (0x1, "up"),
    (0x2, "broadcast"),
    (0x8, "loopback"),
    (0x10, "pointtopoint"),
    (0x1000, "multicast"),
)

_COUNTER_FIELDS = (
    "bytes_sent",
    "bytes_recv",
    "packets_sent",
    "packets_recv",
    "errin",
    "errout",
    "dropin",
    "dropout",
)


def _dumps(data: dict) -> str:
    return json.dumps(data, separators=(",", ":"))


@dataclass
class NetIOCountersStat:
    """I/O counters of one network interface."""

    name: str = ""
    bytes_sent: int = 0
    bytes_recv: int = 0
    packets_sent: int = 0
    packets_recv: int = 0
    errin: int = 0
    errout: int = 0
    dropin: int = 0
    dropout: int = 0

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def __str__(self) -> str:
        return _dumps(self.to_dict())


@dataclass
class Addr:
    """An IP address with a port."""

    ip: str = ""
    port: int = 0

    def to_dict(self) -> dict:
        return {"ip": self.ip, "port": self.port}

    def __str__(self) -> str:
        return _dumps(self.to_dict())


@dataclass
class NetConnectionStat:
    """A network connection owned by a process."""

    fd: int = 0
    family: int = 0
    type: int = 0
    laddr: Addr = field(default_factory=Addr)
    raddr: Addr = field(default_factory=Addr)
    status: str = ""
    pid: int = 0

    def to_dict(self) -> dict:
        return {
            "fd": self.fd,
            "family": self.family,
            "type": self.type,
            "localaddr": self.laddr.to_dict(),
            "remoteaddr": self.raddr.to_dict(),
            "status": self.status,
            "pid": self.pid,
        }

    def __str__(self) -> str:
        return _dumps(self.to_dict())


@dataclass
class NetInterfaceAddr:
    """An address assigned to an interface, in ``ip/prefix`` form."""

    addr: str = ""

    def to_dict(self) -> dict:
        return {"addr": self.addr}

    def __str__(self) -> str:
        return _dumps(self.to_dict())


@dataclass
class NetInterfaceStat:
    """Description of a network interface."""

    mtu: int = 0
    name: str = ""
    hardwareaddr: str = ""
    flags: list[str] = field(default_factory=list)
    addrs: list[NetInterfaceAddr] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "mtu": self.mtu,
            "name": self.name,
            "hardwareaddr": self.hardwareaddr,
            "flags": list(self.flags),
            "addrs": [a.to_dict() for a in self.addrs],
        }

    def __str__(self) -> str:
        return _dumps(self.to_dict())


def _parse_uint(text: str) -> int:
    if not (text.isascii() and text.isdigit()):
        raise ValueError(f"invalid unsigned integer: {text!r}")
    value = int(text)
    if value >= _UINT64_LIMIT:
        raise ValueError(f"value out of range: {text!r}")
    return value


def _counter(text: str) -> int:
    return 0 if text == "-" else _parse_uint(text)


def _read_sys(name: str, attr: str) -> str | None:
    try:
        with open(os.path.join(_SYS_NET_PATH, name, attr), encoding="ascii") as handle:
            return handle.read().strip()
    except OSError:
        return None


def _hardware_addr(name: str) -> str:
    raw = _read_sys(name, "address")
    if not raw:
        return ""
    try:
        if all(int(octet, 16) == 0 for octet in raw.split(":")):
            return ""
    except ValueError:
        return ""
    return raw.lower()


def _flag_names(flags: int) -> list[str]:
    return [label for bit, label in _FLAG_NAMES if flags & bit]


def _ipv4_addrs(name: str) -> list[NetInterfaceAddr]:
    try:
        import fcntl
    except ImportError:
        return []
    request = struct.pack("256s", name.encode("utf-8")[:15])
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            addr = fcntl.ioctl(sock.fileno(), _SIOCGIFADDR, request)[20:24]
            mask = fcntl.ioctl(sock.fileno(), _SIOCGIFNETMASK, request)[20:24]
    except OSError:
        return []
    prefix = bin(int.from_bytes(mask, "big")).count("1")
    return [NetInterfaceAddr(addr=f"{socket.inet_ntoa(addr)}/{prefix}")]


def _ipv6_addrs() -> dict[str, list[NetInterfaceAddr]]:
    result: dict[str, list[NetInterfaceAddr]] = {}
    try:
        with open(_IF_INET6_PATH, encoding="ascii") as handle:
            lines = handle.read().splitlines()
    except OSError:
        return result
    for line in lines:
        parts = line.split()
        if len(parts) < 6:
            continue
        try:
            ip = ipaddress.IPv6Address(bytes.fromhex(parts[0]))
            prefix = int(parts[2], 16)
        except ValueError:
            continue
        result.setdefault(parts[5], []).append(NetInterfaceAddr(addr=f"{ip}/{prefix}"))
    return result


def net_interfaces() -> list[NetInterfaceStat]:
    """Describe every network interface of this host, in index order."""
    names = [name for _index, name in sorted(socket.if_nameindex())]
    if not sys.platform.startswith("linux"):
        return [NetInterfaceStat(name=name) for name in names]
    inet6 = _ipv6_addrs()
    result = []
    for name in names:
        mtu_text = _read_sys(name, "mtu")
        flags_text = _read_sys(name, "flags")
        try:
            flags = int(flags_text, 16) if flags_text else 0
        except ValueError:
            flags = 0
        result.append(
            NetInterfaceStat(
                mtu=int(mtu_text) if mtu_text and mtu_text.isdigit() else 0,
                name=name,
                hardwareaddr=_hardware_addr(name),
                flags=_flag_names(flags),
                addrs=_ipv4_addrs(name) + inet6.get(name, []),
            )
        )
    return result


def io_counters_all(stats: Iterable[NetIOCountersStat]) -> list[NetIOCountersStat]:
    """Sum the counters of all interfaces into a single entry named ``all``."""
    total = NetIOCountersStat(name="all")
    for nic in stats:
        for name in _COUNTER_FIELDS:
            setattr(total, name, getattr(total, name) + getattr(nic, name))
    return [total]


def parse_net_dev(lines: Iterable[str]) -> list[NetIOCountersStat]:
    """Parse the lines of ``/proc/net/dev``, skipping its two header lines."""
    result = []
    for line in list(lines)[2:]:
        name, sep, rest = line.partition(":")
        if not sep:
            continue
        name = name.strip()
        if not name:
            continue
        values = rest.split()
        if len(values) < 14:
            raise ValueError(f"too few counters for {name}: {line!r}")
        result.append(
            NetIOCountersStat(
                name=name,
                bytes_recv=_parse_uint(values[0]),
                packets_recv=_parse_uint(values[1]),
                errin=_parse_uint(values[2]),
                dropin=_parse_uint(values[3]),
                bytes_sent=_parse_uint(values[8]),
                packets_sent=_parse_uint(values[9]),
                errout=_parse_uint(values[10]),
                dropout=_parse_uint(values[13]),
            )
        )
    return result


def _netstat_rows(text: str):
    """Yield ``(values, first_seen)`` for each data row of ``netstat -ibdn``."""
    seen: set[str] = set()
    for line in text.split("\n"):
        values = line.split()
        if not values or values[0] == "Name":
            continue
        if values[0] in seen:
            continue
        seen.add(values[0])
        yield values


def _pick(values: list[str], indices: Iterable[int]) -> list[int]:
    indices = list(indices)
    if max(indices) >= len(values):
        raise ValueError(f"too few columns in netstat line: {values!r}")
    return [_counter(values[i]) for i in indices]


def parse_darwin_netstat(text: str) -> list[NetIOCountersStat]:
    """Parse ``netstat -ibdn`` output as printed on macOS."""
    result = []
    for values in _netstat_rows(text):
        base = 1 if len(values) >= 11 else 0
        packets, errin, dropin = _pick(values, (base + 3, base + 4, base + 5))
        result.append(
            NetIOCountersStat(
                name=values[0], packets_recv=packets, errin=errin, dropin=dropin
            )
        )
    return result


def parse_freebsd_netstat(text: str) -> list[NetIOCountersStat]:
    """Parse ``netstat -ibdn`` output as printed on FreeBSD."""
    result = []
    for values in _netstat_rows(text):
        base = 1 if len(values) >= 13 else 0
        offsets = (3, 4, 5, 6, 7, 8, 9, 11)
        (
            packets_recv,
            errin,
            dropin,
            bytes_recv,
            packets_sent,
            errout,
            bytes_sent,
            dropout,
        ) = _pick(values, (base + offset for offset in offsets))
        result.append(
            NetIOCountersStat(
                name=values[0],
                packets_recv=packets_recv,
                errin=errin,
                dropin=dropin,
                bytes_recv=bytes_recv,
                packets_sent=packets_sent,
                errout=errout,
                bytes_sent=bytes_sent,
                dropout=dropout,
            )
        )
    return result


def _netstat(path: str) -> str:
    return subprocess.run(
        [path, "-ibdn"], capture_output=True, text=True, check=True
    ).stdout


def net_io_counters(pernic: bool) -> list[NetIOCountersStat]:
    """I/O counters per interface, or summed into one ``all`` entry."""
    platform = sys.platform
    if platform.startswith("linux"):
        with open(_NET_DEV_PATH, encoding="utf-8") as handle:
            stats = parse_net_dev(handle.read().splitlines())
    elif platform == "darwin":
        stats = parse_darwin_netstat(_netstat("/usr/sbin/netstat"))
    elif platform.startswith("freebsd"):
        stats = parse_freebsd_netstat(_netstat("/usr/bin/netstat"))
    else:
        raise NotImplementedError(f"network counters are not available on {platform}")
    return stats if pernic else io_counters_all(stats)