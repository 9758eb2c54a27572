"""Process queries on Windows through the ``wmic`` command."""

from __future__ import annotations

import subprocess


def parse_wmic(text: str) -> list[list[str]]:
    """Split ``wmic ... /format:csv`` output into rows, dropping the header."""
    rows = [line.strip().split(",") for line in text.splitlines() if line.strip()]
    return rows[1:]


def wmic(*args: str) -> list[list[str]]:
    """Run ``wmic`` with ``args`` and return its rows."""
    out = subprocess.run(
        ["wmic", *args, "/format:csv"], capture_output=True, text=True, check=True
    ).stdout
    return parse_wmic(out)


def pids() -> list[int]:
    """Ids of all running processes; empty when they cannot be listed."""
    try:
        rows = wmic("process", "get", "processid")
    except (OSError, subprocess.CalledProcessError):
        return []
    result = []
    for row in rows:
        if len(row) < 2:
            continue
        try:
            result.append(int(row[1]))
        except ValueError:
            continue
    return result


def query_value(pid: int, field: str) -> str:
    """Value of one WMI ``Win32_Process`` property of process ``pid``."""
    rows = wmic("process", "where", f"ProcessId = {pid}", "get", field)
    if not rows or len(rows[0]) < 2:
        raise LookupError(f"could not get {field}")
    return ",".join(rows[0][1:])


def name(pid: int) -> str:
    """Image name of the process."""
    return query_value(pid, "Name")


def exe(pid: int) -> str:
    """Path of the process executable."""
    return query_value(pid, "ExecutablePath")


def cmdline(pid: int) -> str:
    """Command line the process was started with."""
    return query_value(pid, "CommandLine")


def nice(pid: int) -> int:
    """Scheduling priority of the process."""
    return int(query_value(pid, "Priority"))


def num_threads(pid: int) -> int:
    """Number of threads in the process."""
    return int(query_value(pid, "ThreadCount"))