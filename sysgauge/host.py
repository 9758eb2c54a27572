"""Host information: name, platform, virtualization, uptime and users."""

from __future__ import annotations

import json
import os
import re
import socket
import subprocess
import sys
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from collections.abc import Iterable

from .utmp import parse_darwin_utmpx, parse_freebsd_utmp, parse_linux_utmp

_ROOT = "/"

_RELEASE_RE = re.compile(r"release (\d[\d.]*)")

_FAMILIES = {
    "debian": "debian",
    "ubuntu": "debian",
    "linuxmint": "debian",
    "raspbian": "debian",
    "fedora": "fedora",
    "oracle": "rhel",
    "centos": "rhel",
    "redhat": "rhel",
    "scientific": "rhel",
    "enterpriseenterprise": "rhel",
    "amazon": "rhel",
    "xenserver": "rhel",
    "cloudlinux": "rhel",
    "ibm_powerkvm": "rhel",
    "suse": "suse",
    "gentoo": "gentoo",
    "slackware": "slackware",
    "arch": "arch",
    "exherbo": "exherbo",
}

_LSB_ID_PLATFORMS = {
    "RedHat": "redhat",
    "Amazon": "amazon",
    "ScientificSL": "scientific",
    "XenServer": "xenserver",
}


def _json(obj) -> str:
    return json.dumps(asdict(obj), separators=(",", ":"))


@dataclass
class HostInfoStat:
    """Description of the host."""

    hostname: str = ""
    uptime: int = 0
    procs: int = 0
    os: str = ""
    platform: str = ""
    platform_family: str = ""
    platform_version: str = ""
    virtualization_system: str = ""
    virtualization_role: str = ""

    def __str__(self) -> str:
        return _json(self)


@dataclass
class UserStat:
    """A logged-in user."""

    user: str = ""
    terminal: str = ""
    host: str = ""
    started: int = 0

    def __str__(self) -> str:
        return _json(self)


@dataclass
class LSB:
    """Fields of the Linux Standard Base release description."""

    id: str = ""
    release: str = ""
    codename: str = ""
    description: str = ""


def _is_linux() -> bool:
    return sys.platform.startswith("linux")


def _is_bsd() -> bool:
    return sys.platform == "darwin" or sys.platform.startswith("freebsd")


def _path(path: str) -> str:
    return os.path.join(_ROOT, path.lstrip("/"))


def _exists(path: str) -> bool:
    return os.path.exists(_path(path))


def _read_lines(path: str) -> list[str]:
    with open(_path(path), encoding="utf-8", errors="replace") as handle:
        return handle.read().splitlines()


def _try_lines(path: str) -> list[str] | None:
    try:
        return _read_lines(path)
    except OSError:
        return None


def _any_contains(lines: Iterable[str], needle: str) -> bool:
    return any(needle in line for line in lines)


def _run(*args: str) -> str:
    return subprocess.run(list(args), capture_output=True, text=True, check=True).stdout


def _try_run(*args: str) -> str | None:
    try:
        return _run(*args)
    except (OSError, subprocess.CalledProcessError):
        return None


def _wmic(*args: str) -> list[list[str]]:
    out = _run("wmic", *args, "/format:csv")
    rows = [line.strip().split(",") for line in out.splitlines() if line.strip()]
    return rows[1:]


def _assign_lsb(lsb: LSB, key: str, value: str, names: dict[str, str]) -> None:
    attr = names.get(key)
    if attr is not None:
        setattr(lsb, attr, value)


def parse_lsb_release(lines: Iterable[str]) -> LSB:
    """Parse the lines of ``/etc/lsb-release``."""
    names = {
        "DISTRIB_ID": "id",
        "DISTRIB_RELEASE": "release",
        "DISTRIB_CODENAME": "codename",
        "DISTRIB_DESCRIPTION": "description",
    }
    lsb = LSB()
    for line in lines:
        fields = line.split("=")
        if len(fields) >= 2:
            _assign_lsb(lsb, fields[0], fields[1], names)
    return lsb


def parse_lsb_release_output(text: str) -> LSB:
    """Parse the output of the ``lsb_release`` command."""
    names = {
        "Distributor ID": "id",
        "Release": "release",
        "Codename": "codename",
        "Description": "description",
    }
    lsb = LSB()
    for line in text.split("\n"):
        fields = line.split(":")
        if len(fields) >= 2:
            _assign_lsb(lsb, fields[0], fields[1], names)
    return lsb


def parse_kern_boottime(text: str) -> int:
    """Extract the seconds from ``sysctl -n kern.boottime`` output."""
    fields = text.replace("{ ", "", 1).replace(" }", "", 1).split()
    if len(fields) < 3:
        raise ValueError(f"unexpected kern.boottime output: {text!r}")
    return int(fields[2].replace(",", "", 1))


def parse_wmic_boot_time(value: str, now: datetime) -> int:
    """Seconds elapsed between a WMI ``LastBootUpTime`` value and ``now``."""
    booted = datetime.strptime(value.split(".")[0], "%Y%m%d%H%M%S")
    if now.tzinfo is not None:
        booted = booted.replace(tzinfo=timezone.utc)
    return int((now - booted).total_seconds())


def platform_family(platform: str) -> str:
    """The distribution family a platform belongs to, or an empty string."""
    return _FAMILIES.get(platform, "")


def get_redhatish_version(contents: Iterable[str]) -> str:
    """Version from a Red Hat style release file."""
    text = "".join(contents).lower()
    if "rawhide" in text:
        return "rawhide"
    match = _RELEASE_RE.search(text)
    return match.group(1) if match else ""


def get_redhatish_platform(contents: Iterable[str]) -> str:
    """Platform name from a Red Hat style release file."""
    text = "".join(contents).lower()
    if "red hat" in text:
        return "redhat"
    return text.split(" ")[0]


def _get_lsb() -> LSB:
    if _exists("/etc/lsb-release"):
        return parse_lsb_release(_read_lines("/etc/lsb-release"))
    if _exists("/usr/bin/lsb_release"):
        return parse_lsb_release_output(_run(_path("/usr/bin/lsb_release")))
    return LSB()


def _linux_platform() -> tuple[str, str]:
    try:
        lsb = _get_lsb()
    except (OSError, subprocess.CalledProcessError):
        lsb = LSB()

    for path in ("/etc/oracle-release", "/etc/enterprise-release"):
        if _exists(path):
            contents = _try_lines(path)
            return "oracle", get_redhatish_version(contents) if contents is not None else ""

    if _exists("/etc/debian_version"):
        if lsb.id == "Ubuntu":
            return "ubuntu", lsb.release
        if lsb.id == "LinuxMint":
            return "linuxmint", lsb.release
        platform = "raspbian" if _exists("/usr/bin/raspi-config") else "debian"
        contents = _try_lines("/etc/debian_version")
        return platform, contents[0] if contents else ""

    for path in ("/etc/redhat-release", "/etc/system-release"):
        if _exists(path):
            contents = _try_lines(path)
            if contents is None:
                return "", ""
            return get_redhatish_platform(contents), get_redhatish_version(contents)

    if _exists("/etc/gentoo-release"):
        contents = _try_lines("/etc/gentoo-release")
        return "gentoo", get_redhatish_version(contents) if contents is not None else ""
    if _exists("/etc/arch-release"):
        return "arch", ""
    if lsb.id in _LSB_ID_PLATFORMS:
        return _LSB_ID_PLATFORMS[lsb.id], lsb.release
    if lsb.id:
        return lsb.id.lower(), lsb.release
    return "", ""


def _uname(flag: str) -> str:
    out = _try_run("uname", flag)
    return out.strip().lower() if out is not None else ""


def get_platform_information() -> tuple[str, str, str]:
    """Return ``(platform, family, version)`` of this host."""
    if _is_linux():
        platform, version = _linux_platform()
        return platform, platform_family(platform), version
    if _is_bsd():
        return _uname("-s"), "", _uname("-r")
    return "", "", ""


def _linux_virtualization() -> tuple[str, str]:
    system = role = ""

    if _exists("/proc/xen"):
        system, role = "xen", "guest"
        if _exists("/proc/xen/capabilities"):
            contents = _try_lines("/proc/xen/capabilities")
            if contents is not None and _any_contains(contents, "control_d"):
                role = "host"

    if _exists("/proc/modules"):
        contents = _try_lines("/proc/modules")
        if contents is not None:
            if _any_contains(contents, "kvm"):
                system, role = "kvm", "host"
            elif _any_contains(contents, "vboxdrv"):
                system, role = "vbox", "host"
            elif _any_contains(contents, "vboxguest"):
                system, role = "vbox", "guest"

    if _exists("/proc/cpuinfo"):
        contents = _try_lines("/proc/cpuinfo")
        if contents is not None and any(
            _any_contains(contents, name)
            for name in (
                "QEMU Virtual CPU",
                "Common KVM processor",
                "Common 32-bit KVM processor",
            )
        ):
            system, role = "kvm", "guest"

    if _exists("/proc/bc/0"):
        system, role = "openvz", "host"
    elif _exists("/proc/vz"):
        system, role = "openvz", "guest"

    if _exists("/proc/self/status"):
        contents = _try_lines("/proc/self/status")
        if contents is not None and (
            _any_contains(contents, "s_context:") or _any_contains(contents, "VxID:")
        ):
            system = "linux-vserver"

    if _exists("/proc/self/cgroup"):
        contents = _try_lines("/proc/self/cgroup")
        if contents is not None:
            if _any_contains(contents, "lxc") or _any_contains(contents, "docker"):
                system, role = "lxc", "guest"
            elif _exists("/usr/bin/lxc-version"):
                system, role = "lxc", "host"

    return system, role


def get_virtualization() -> tuple[str, str]:
    """Return ``(system, role)`` of any virtualization this host runs in or provides."""
    if _is_linux():
        return _linux_virtualization()
    return "", ""


def boot_time() -> int:
    """Seconds the host has been up on Linux and Windows; boot timestamp on BSDs."""
    if _is_linux():
        with open(_path("/proc/uptime"), encoding="ascii") as handle:
            return int(float(handle.read().split()[0]))
    if _is_bsd():
        return parse_kern_boottime(_run("sysctl", "-n", "kern.boottime"))
    if sys.platform == "win32":
        rows = _wmic("os", "get", "LastBootUpTime")
        if not rows or len(rows[0]) != 2:
            raise ValueError("could not get LastBootUpTime")
        return parse_wmic_boot_time(rows[0][1], datetime.now())
    raise NotImplementedError(f"boot time is not available on {sys.platform}")


def _windows_pid_count() -> int:
    try:
        rows = _wmic("process", "get", "processid")
    except (OSError, subprocess.CalledProcessError):
        return 0
    return sum(1 for row in rows if len(row) > 1 and row[1].strip().isdigit())


def _fill_platform(info: HostInfoStat) -> None:
    platform, family, version = get_platform_information()
    info.platform, info.platform_family, info.platform_version = platform, family, version
    info.virtualization_system, info.virtualization_role = get_virtualization()


def host_info() -> HostInfoStat:
    """Collect a description of this host."""
    hostname = socket.gethostname()
    if _is_linux():
        info = HostInfoStat(hostname=hostname, os="linux")
        _fill_platform(info)
        try:
            info.uptime = boot_time()
        except (OSError, ValueError, IndexError):
            pass
        return info
    if _is_bsd():
        name = "darwin" if sys.platform == "darwin" else "freebsd"
        info = HostInfoStat(hostname=hostname, os=name, platform_family=name)
        _fill_platform(info)
        text = _try_run("sysctl", "-n", "kern.boottime")
        if text is not None:
            info.uptime = parse_kern_boottime(text)
        return info
    if sys.platform == "win32":
        info = HostInfoStat(hostname=hostname)
        try:
            info.uptime = boot_time()
        except (OSError, ValueError, subprocess.CalledProcessError):
            pass
        info.procs = _windows_pid_count()
        return info
    return HostInfoStat(hostname=hostname, os=sys.platform)


def users() -> list[UserStat]:
    """Users currently logged in to this host."""
    if _is_linux():
        path, parser = "/var/run/utmp", parse_linux_utmp
    elif sys.platform == "darwin":
        path, parser = "/var/run/utmpx", parse_darwin_utmpx
    elif sys.platform.startswith("freebsd"):
        path, parser = "/var/run/utmp", parse_freebsd_utmp
    else:
        return []
    with open(_path(path), "rb") as handle:
        data = handle.read()
    return [
        UserStat(user=r.user, terminal=r.terminal, host=r.host, started=r.started)
        for r in parser(data)
    ]