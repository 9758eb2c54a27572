# sysgauge

sysgauge reads statistics about the machine it runs on: load averages,
virtual and swap memory, host and platform details, login records,
network interfaces and I/O counters. It also has parsers for the
per-process files under `/proc/<pid>`, decoders for the kernel
`kinfo_proc` records of macOS and FreeBSD, and a few process queries
for Windows. Data comes from `/proc`, `/sys/class/net`, `sysctl`,
`netstat`, `swapinfo`, `uname` and `wmic`, depending on the platform.
The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Usage

### Load average (`sysgauge.load`)

```python
from sysgauge.load import load_avg, parse_loadavg

stat = load_avg()
print(stat.load1, stat.load5, stat.load15)

print(parse_loadavg("0.30 1.50 0.80 1/123 4567"))
# {"load1":0.3,"load5":1.5,"load15":0.8}
```

`load_avg()` reads `/proc/loadavg` on Linux and `sysctl -n vm.loadavg`
on macOS and FreeBSD (`parse_sysctl_loadavg` parses that output).

### Memory (`sysgauge.mem`)

```python
from sysgauge.mem import virtual_memory, swap_memory

vm = virtual_memory()
print(vm.total, vm.available, vm.used, vm.used_percent)

swap = swap_memory()
if swap is not None:
    print(swap.total, swap.used, swap.free, swap.sin, swap.sout)
```

`swap_memory()` returns `None` on FreeBSD when `swapinfo` lists no
device. The parsers `parse_meminfo`, `parse_vmstat_swap`,
`parse_darwin_swapusage` and `parse_freebsd_swapinfo` work on text you
supply.

### Host (`sysgauge.host`)

```python
from sysgauge.host import host_info, boot_time, users, get_platform_information

info = host_info()
print(info.hostname, info.os, info.platform, info.platform_family, info.platform_version)
print(info.virtualization_system, info.virtualization_role, info.uptime)

platform, family, version = get_platform_information()

for user in users():
    print(user.user, user.terminal, user.host, user.started)
```

`boot_time()` gives the seconds the host has been up on Linux
(from `/proc/uptime`) and Windows (from `wmic`), and the boot timestamp
from `kern.boottime` on macOS and FreeBSD. On Linux, platform
detection looks at the release files under `/etc` and at
`lsb_release`; `get_redhatish_version`, `get_redhatish_platform` and
`platform_family` are available on their own:

```python
from sysgauge.host import get_redhatish_version, get_redhatish_platform

get_redhatish_version(["Fedora release 15 (Lovelock)"])   # "15"
get_redhatish_platform(["Fedora release 15 (Lovelock)"])  # "fedora"
```

`users()` decodes `/var/run/utmp` (Linux, FreeBSD) or `/var/run/utmpx`
(macOS). On Linux every record in the file is returned; on macOS only
user-process records, and on FreeBSD only non-empty slots. The record
decoders live in `sysgauge.utmp` (`parse_linux_utmp`,
`parse_darwin_utmpx`, `parse_freebsd_utmp`).

### Network (`sysgauge.net`)

```python
from sysgauge.net import net_interfaces, net_io_counters

for nic in net_interfaces():
    print(nic.name, nic.mtu, nic.hardwareaddr, nic.flags, [a.addr for a in nic.addrs])

per_nic = net_io_counters(True)    # one entry per interface
total = net_io_counters(False)     # a single entry named "all"
print(total[0].bytes_recv, total[0].bytes_sent)
```

Outside Linux, `net_interfaces()` lists names only. Counters come from
`/proc/net/dev` on Linux and `netstat -ibdn` on macOS and FreeBSD;
`parse_net_dev`, `parse_darwin_netstat`, `parse_freebsd_netstat` and
`io_counters_all` can be used directly.

### Process files (`sysgauge.proc_stats`)

Parsers for the files of one process under `/proc/<pid>`:

```python
from sysgauge.proc_stats import parse_status, parse_statm, parse_io, parse_cmdline

with open("/proc/self/status") as handle:
    status = parse_status(handle.read())
print(status.name, status.status, status.uids, status.num_threads)
print(status.mem_info.rss, status.num_ctx_switches.voluntary)

with open("/proc/self/statm") as handle:
    info, extended = parse_statm(handle.read())

with open("/proc/self/cmdline", "rb") as handle:
    print(parse_cmdline(handle.read()))
```

`parse_stat(text, boot_time)` returns the parent pid, terminal number,
CPU times and the start time in milliseconds; `parse_smaps` returns one
`MemoryMapsStat` per mapping; `parse_io` returns an `IOCountersStat`.

### Kernel process records (`sysgauge.kinfo`)

`parse_darwin_kinfo(data)` and `parse_freebsd_kinfo(data, arch)`
(`arch` is `"amd64"` or `"386"`, with `x86_64`, `i386` and `i686`
accepted) decode raw `kinfo_proc` bytes into `DarwinKinfoProc` and
`FreeBSDKinfoProc`. `darwin_kinfo_size()` and `freebsd_kinfo_size(arch)`
give the record sizes.

### Windows processes (`sysgauge.winproc`)

```python
from sysgauge import winproc

for pid in winproc.pids():
    print(pid, winproc.name(pid))
```

`exe`, `cmdline`, `nice` and `num_threads` query the matching
`Win32_Process` property; `query_value(pid, field)` reads any other.

### Gathering metrics

`SystemStats` adds the load averages to an accumulator as `load1`,
`load5` and `load15`:

```python
from sysgauge.accumulator import Accumulator
from sysgauge.system import SystemStats

acc = Accumulator()
SystemStats().gather(acc)
for point in acc.points:
    print(point.measurement, point.value)
```

`Accumulator` also provides `get`, `check_value`, `check_tagged_value`,
`validate_tagged_value` (raises `ValueError` on a mismatch),
`has_int_value` and `has_float_value`, which help when testing
collectors.

Stat objects print as compact JSON with the keys shown by their fields.

## Errors

Functions that a platform does not support raise `NotImplementedError`.
Unreadable system files raise `OSError`, malformed data raises
`ValueError`, and a failing external command raises
`subprocess.CalledProcessError`.

## What it does not do

There is no process object that ties the `/proc` parsers together, no
listing of running processes on Linux, macOS or FreeBSD, and no way to
signal, suspend or kill a process. Running `ps` and calling `sysctl` for
process records is not done either: `sysgauge.kinfo` only decodes bytes
you already have. There is no command-line tool; the package is used as
a library.