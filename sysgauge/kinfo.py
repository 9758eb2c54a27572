"""Decoding of the kernel ``kinfo_proc`` records of macOS and FreeBSD."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any

from .utmp import c_string

# Values from sys/sysctl.h.
CTL_KERN = 1
KERN_PROC = 14
KERN_PROC_ALL = 0
KERN_PROC_PID = 1
KERN_PROC_PROC = 8
KERN_PROC_PATHNAME = 12

_Field = tuple  # (name or None for padding, struct code yielding one value)


def _layout(fields: list[_Field]) -> tuple[struct.Struct, list[str]]:
    layout = struct.Struct("<" + "".join(code for _name, code in fields))
    names = [name for name, _code in fields if name is not None]
    return layout, names


def _timeval(prefix: str) -> list[_Field]:
    return [(f"{prefix}_sec", "q"), (f"{prefix}_usec", "i"), (None, "4x")]


def _darwin_fields() -> list[_Field]:
    extern_proc: list[_Field] = [
        ("p_un", "16s"),
        ("p_vmspace", "Q"),
        ("p_sigacts", "Q"),
        (None, "3x"),
        ("p_flag", "i"),
        ("p_stat", "b"),
        ("p_pid", "i"),
        ("p_oppid", "i"),
        ("p_dupfd", "i"),
        (None, "4x"),
        ("user_stack", "Q"),
        ("exit_thread", "Q"),
        ("p_debugger", "i"),
        ("sigwait", "i"),
        ("p_estcpu", "I"),
        ("p_cpticks", "i"),
        ("p_pctcpu", "I"),
        (None, "4x"),
        ("p_wchan", "Q"),
        ("p_wmesg", "Q"),
        ("p_swtime", "I"),
        ("p_slptime", "I"),
        *_timeval("p_realtimer_interval"),
        *_timeval("p_realtimer_value"),
        *_timeval("p_rtime"),
        ("p_uticks", "Q"),
        ("p_sticks", "Q"),
        ("p_iticks", "Q"),
        ("p_traceflag", "i"),
        (None, "4x"),
        ("p_tracep", "Q"),
        ("p_siglist", "i"),
        (None, "4x"),
        ("p_textvp", "Q"),
        ("p_holdcnt", "i"),
        ("p_sigmask", "I"),
        ("p_sigignore", "I"),
        ("p_sigcatch", "I"),
        ("p_priority", "B"),
        ("p_usrpri", "B"),
        ("p_nice", "b"),
        ("p_comm", "17s"),
        (None, "4x"),
        ("p_pgrp", "Q"),
        ("p_addr", "Q"),
        ("p_xstat", "H"),
        ("p_acflag", "H"),
        (None, "4x"),
        ("p_ru", "Q"),
    ]
    eproc: list[_Field] = [
        ("e_paddr", "Q"),
        ("e_sess", "Q"),
        # struct _pcred
        ("pc_lock", "72s"),
        ("pc_ucred", "Q"),
        ("p_ruid", "I"),
        ("p_svuid", "I"),
        ("p_rgid", "I"),
        ("p_svgid", "I"),
        ("p_refcnt", "i"),
        (None, "4x"),
        # struct _ucred
        ("cr_ref", "i"),
        ("cr_uid", "I"),
        ("cr_ngroups", "h"),
        (None, "2x"),
        ("cr_groups", "64s"),
        (None, "4x"),
        # struct vmspace
        ("vm_dummy", "i"),
        (None, "4x"),
        ("vm_dummy2", "Q"),
        ("vm_dummy3", "20s"),
        (None, "4x"),
        ("vm_dummy4", "24s"),
        ("e_ppid", "i"),
        ("e_pgid", "i"),
        ("e_jobc", "h"),
        (None, "2x"),
        ("e_tdev", "i"),
        ("e_tpgid", "i"),
        (None, "4x"),
        ("e_tsess", "Q"),
        ("e_wmesg", "8s"),
        ("e_xsize", "i"),
        ("e_xrssize", "h"),
        ("e_xccount", "h"),
        ("e_xswrss", "h"),
        (None, "2x"),
        ("e_flag", "i"),
        ("e_login", "12s"),
        ("e_spare", "16s"),
        (None, "4x"),
    ]
    return extern_proc + eproc


def _freebsd_fields(word: str, width: int) -> list[_Field]:
    pointers = ("args", "paddr", "addr", "tracep", "textvp", "fd", "vmspace", "wchan")
    return [
        ("structsize", "i"),
        ("layout", "i"),
        *((name, word) for name in pointers),
        ("pid", "i"),
        ("ppid", "i"),
        ("pgid", "i"),
        ("tpgid", "i"),
        ("sid", "i"),
        ("tsid", "i"),
        ("jobc", "2s"),
        (None, "2x"),
        ("tdev", "i"),
        ("siglist", "16s"),
        ("sigmask", "16s"),
        ("sigignore", "16s"),
        ("sigcatch", "16s"),
        ("uid", "i"),
        ("ruid", "i"),
        ("svuid", "i"),
        ("rgid", "i"),
        ("svgid", "i"),
        ("ngroups", "2s"),
        (None, "2x"),
        ("groups", "64s"),
        ("size", word),
        ("rssize", word),
        ("swrss", word),
        ("tsize", word),
        ("dsize", word),
        ("ssize", word),
        ("xstat", "2s"),
        ("acflag", "2s"),
        ("pctcpu", "i"),
        ("estcpu", "i"),
        ("slptime", "i"),
        ("swtime", "i"),
        ("cow", "i"),
        ("runtime", "q"),
        ("start", f"{2 * width}s"),
        ("childtime", f"{2 * width}s"),
        ("flag", word),
        ("kflag", word),
        ("traceflag", "i"),
        ("stat", "B"),
        ("nice", "b"),
        ("lock", "B"),
        ("rqindex", "B"),
        ("oncpu", "B"),
        ("lastcpu", "B"),
        ("ocomm", "17s"),
        ("wmesg", "9s"),
        ("login", "18s"),
        ("lockname", "9s"),
        ("comm", "20s"),
        ("emul", "17s"),
        ("sparestrings", "68s"),
        ("spareints", "36s"),
        ("cr_flags", "i"),
        ("jid", "i"),
        ("numthreads", "i"),
        ("tid", "i"),
        ("pri", "i"),
        ("rusage", f"{18 * width}s"),
        ("rusage_ch", f"{18 * width}s"),
        ("pcb", word),
        ("kstack", word),
        ("udata", word),
        ("tdaddr", word),
        ("spareptrs", f"{6 * width}s"),
        ("spareint64s", f"{12 * width}s"),
        ("sflag", word),
        ("tdflags", word),
    ]


_DARWIN = _layout(_darwin_fields())
_FREEBSD = {
    "amd64": _layout(_freebsd_fields("q", 8)),
    "386": _layout(_freebsd_fields("i", 4)),
}
_ARCH_ALIASES = {
    "amd64": "amd64",
    "x86_64": "amd64",
    "386": "386",
    "i386": "386",
    "i686": "386",
}


def _unpack(layout: tuple[struct.Struct, list[str]], data: bytes) -> dict[str, Any]:
    record, names = layout
    if len(data) < record.size:
        raise ValueError(
            f"kinfo_proc needs {record.size} bytes, got {len(data)}"
        )
    return dict(zip(names, record.unpack_from(data)))


def _freebsd_layout(arch: str) -> tuple[struct.Struct, list[str]]:
    try:
        return _FREEBSD[_ARCH_ALIASES[arch]]
    except KeyError:
        raise ValueError(f"unsupported architecture: {arch!r}") from None


@dataclass
class DarwinKinfoProc:
    """The parts of a macOS ``kinfo_proc`` that describe a process."""

    pid: int = 0
    ppid: int = 0
    pgid: int = 0
    tpgid: int = 0
    tdev: int = 0
    flag: int = 0
    stat: int = 0
    nice: int = 0
    comm: str = ""
    ruid: int = 0
    uid: int = 0
    svuid: int = 0
    rgid: int = 0
    svgid: int = 0
    ngroups: int = 0


@dataclass
class FreeBSDKinfoProc:
    """The parts of a FreeBSD ``kinfo_proc`` that describe a process."""

    structsize: int = 0
    pid: int = 0
    ppid: int = 0
    pgid: int = 0
    tpgid: int = 0
    sid: int = 0
    tdev: int = 0
    uid: int = 0
    ruid: int = 0
    svuid: int = 0
    rgid: int = 0
    svgid: int = 0
    ngroups: int = 0
    size: int = 0
    rssize: int = 0
    stat: int = 0
    nice: int = 0
    comm: str = ""
    numthreads: int = 0


def darwin_kinfo_size() -> int:
    """Size in bytes of a macOS ``kinfo_proc`` record."""
    return _DARWIN[0].size


def freebsd_kinfo_size(arch: str) -> int:
    """Size in bytes of a FreeBSD ``kinfo_proc`` record on ``arch``."""
    return _freebsd_layout(arch)[0].size


def parse_darwin_kinfo(data: bytes) -> DarwinKinfoProc:
    """Decode a macOS ``kinfo_proc`` record; trailing bytes are ignored."""
    raw = _unpack(_DARWIN, data)
    return DarwinKinfoProc(
        pid=raw["p_pid"],
        ppid=raw["e_ppid"],
        pgid=raw["e_pgid"],
        tpgid=raw["e_tpgid"],
        tdev=raw["e_tdev"],
        flag=raw["p_flag"],
        stat=raw["p_stat"],
        nice=raw["p_nice"],
        comm=c_string(raw["p_comm"]),
        ruid=raw["p_ruid"],
        uid=raw["cr_uid"],
        svuid=raw["p_svuid"],
        rgid=raw["p_rgid"],
        svgid=raw["p_svgid"],
        ngroups=raw["cr_ngroups"],
    )


def parse_freebsd_kinfo(data: bytes, arch: str) -> FreeBSDKinfoProc:
    """Decode a FreeBSD ``kinfo_proc`` record laid out for ``arch``."""
    raw = _unpack(_freebsd_layout(arch), data)
    return FreeBSDKinfoProc(
        structsize=raw["structsize"],
        pid=raw["pid"],
        ppid=raw["ppid"],
        pgid=raw["pgid"],
        tpgid=raw["tpgid"],
        sid=raw["sid"],
        tdev=raw["tdev"],
        uid=raw["uid"],
        ruid=raw["ruid"],
        svuid=raw["svuid"],
        rgid=raw["rgid"],
        svgid=raw["svgid"],
        ngroups=raw["ngroups"][0],
        size=raw["size"],
        rssize=raw["rssize"],
        stat=raw["stat"],
        nice=raw["nice"],
        comm=c_string(raw["comm"]),
        numthreads=raw["numthreads"],
    )