"""Read system load, memory, host, network and per-process statistics."""

__version__ = "0.1.0"

__all__ = [
    "accumulator",
    "host",
    "kinfo",
    "load",
    "mem",
    "net",
    "proc_stats",
    "system",
    "utmp",
    "winproc",
]