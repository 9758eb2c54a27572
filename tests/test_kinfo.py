import struct

import pytest

from sysgauge.kinfo import (
    DarwinKinfoProc,
    FreeBSDKinfoProc,
    darwin_kinfo_size,
    freebsd_kinfo_size,
    parse_darwin_kinfo,
    parse_freebsd_kinfo,
)


def test_darwin_size_matches_kernel_struct():
    assert darwin_kinfo_size() == 648


def test_freebsd_sizes_match_kernel_struct():
    assert freebsd_kinfo_size("amd64") == 1088
    assert freebsd_kinfo_size("386") == 768


@pytest.mark.parametrize("alias,arch", [("x86_64", "amd64"), ("i386", "386"), ("i686", "386")])
def test_freebsd_arch_aliases(alias, arch):
    assert freebsd_kinfo_size(alias) == freebsd_kinfo_size(arch)


def test_freebsd_unknown_arch():
    with pytest.raises(ValueError):
        freebsd_kinfo_size("sparc64")


def test_darwin_zero_record():
    assert parse_darwin_kinfo(bytes(darwin_kinfo_size())) == DarwinKinfoProc()


def test_freebsd_zero_record():
    assert parse_freebsd_kinfo(bytes(freebsd_kinfo_size("amd64")), "amd64") == FreeBSDKinfoProc()


def test_darwin_short_record():
    with pytest.raises(ValueError):
        parse_darwin_kinfo(bytes(darwin_kinfo_size() - 1))


def test_freebsd_short_record():
    with pytest.raises(ValueError):
        parse_freebsd_kinfo(bytes(10), "386")


def test_darwin_fields():
    buf = bytearray(darwin_kinfo_size())
    struct.pack_into("<i", buf, 40, 4321)
    buf[243:247] = b"bash"
    struct.pack_into("<I", buf, 392, 501)
    struct.pack_into("<i", buf, 560, 77)
    proc = parse_darwin_kinfo(bytes(buf))
    assert proc.pid == 4321
    assert proc.comm == "bash"
    assert proc.ruid == 501
    assert proc.ppid == 77


def test_darwin_trailing_bytes_ignored():
    buf = bytearray(darwin_kinfo_size() + 16)
    struct.pack_into("<i", buf, 40, 99)
    assert parse_darwin_kinfo(bytes(buf)).pid == 99


def test_freebsd_amd64_fields():
    buf = bytearray(freebsd_kinfo_size("amd64"))
    struct.pack_into("<ii", buf, 72, 812, 1)
    buf[447:452] = b"sshd\0"
    proc = parse_freebsd_kinfo(bytes(buf), "amd64")
    assert proc.pid == 812
    assert proc.ppid == 1
    assert proc.comm == "sshd"


def test_freebsd_386_pid():
    buf = bytearray(freebsd_kinfo_size("386"))
    struct.pack_into("<ii", buf, 40, 555, 3)
    proc = parse_freebsd_kinfo(bytes(buf), "i386")
    assert (proc.pid, proc.ppid) == (555, 3)