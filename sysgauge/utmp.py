"""Decoding of the login records kept in utmp and utmpx files."""

from __future__ import annotations

import struct
from collections.abc import Iterator
from dataclasses import dataclass

# glibc struct utmp on x86 and x86-64; the ARM layout shares its size.
_LINUX = struct.Struct("<h2xi32s4s32s256shhiii16s20s")
# struct utmpx on macOS, with the time value reduced to its seconds field.
_DARWIN = struct.Struct("<256s4s32sih6xi256s64s")
# struct utmp on FreeBSD.
_FREEBSD = struct.Struct("<8s16s16si")

_USER_PROCESS = 7


@dataclass
class UtmpRecord:
    """One login record."""

    user: str
    terminal: str
    host: str
    started: int
    entry_type: int = 0


def c_string(raw: bytes) -> str:
    """Decode a NUL-terminated byte field."""
    return raw.split(b"\0", 1)[0].decode("utf-8", "replace")


def _entries(data: bytes, layout: struct.Struct) -> Iterator[tuple]:
    usable = len(data) - len(data) % layout.size
    return layout.iter_unpack(data[:usable])


def parse_linux_utmp(data: bytes) -> list[UtmpRecord]:
    """Decode every record of a Linux utmp file."""
    records = []
    for entry in _entries(data, _LINUX):
        entry_type, _pid, line, _id, user, host, _term, _exit, _session, sec = entry[:10]
        records.append(
            UtmpRecord(
                user=c_string(user),
                terminal=c_string(line),
                host=c_string(host),
                started=sec,
                entry_type=entry_type,
            )
        )
    return records


def parse_darwin_utmpx(data: bytes) -> list[UtmpRecord]:
    """Decode the user-process records of a macOS utmpx file."""
    records = []
    for user, _id, line, _pid, entry_type, sec, host, _pad in _entries(data, _DARWIN):
        if entry_type != _USER_PROCESS:
            continue
        records.append(
            UtmpRecord(
                user=c_string(user),
                terminal=c_string(line),
                host=c_string(host),
                started=sec,
                entry_type=entry_type,
            )
        )
    return records


def parse_freebsd_utmp(data: bytes) -> list[UtmpRecord]:
    """Decode the records of a FreeBSD utmp file, skipping empty slots."""
    return [
        UtmpRecord(
            user=c_string(name),
            terminal=c_string(line),
            host=c_string(host),
            started=when,
        )
        for line, name, host, when in _entries(data, _FREEBSD)
        if when != 0
    ]