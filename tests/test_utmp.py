import struct

from sysgauge.utmp import (
    UtmpRecord,
    c_string,
    parse_darwin_utmpx,
    parse_freebsd_utmp,
    parse_linux_utmp,
)

LINUX_FMT = "<h2xi32s4s32s256shhiii16s20s"
DARWIN_FMT = "<256s4s32sih6xi256s64s"
FREEBSD_FMT = "<8s16s16si"


def linux_record(user, line, host, sec, entry_type=7):
    return struct.pack(
        LINUX_FMT, entry_type, 42, line, b"ts/0", user, host, 0, 0, 0, sec, 0, b"", b""
    )


def darwin_record(user, line, host, sec, entry_type):
    return struct.pack(DARWIN_FMT, user, b"s000", line, 42, entry_type, sec, host, b"")


def test_c_string_stops_at_nul():
    assert c_string(b"abc\x00def") == "abc"


def test_c_string_without_nul():
    assert c_string(b"abc") == "abc"
    assert c_string(b"") == ""


def test_linux_round_trip():
    data = linux_record(b"alice", b"pts/0", b"example.com", 1400000000)
    assert parse_linux_utmp(data) == [
        UtmpRecord(
            user="alice",
            terminal="pts/0",
            host="example.com",
            started=1400000000,
            entry_type=7,
        )
    ]


def test_linux_keeps_every_entry_type():
    data = linux_record(b"a", b"tty1", b"", 1, entry_type=1) + linux_record(
        b"b", b"tty2", b"", 2, entry_type=7
    )
    records = parse_linux_utmp(data)
    assert [r.user for r in records] == ["a", "b"]
    assert [r.entry_type for r in records] == [1, 7]


def test_linux_ignores_trailing_partial_record():
    one = linux_record(b"alice", b"pts/0", b"", 5)
    records = parse_linux_utmp(one + one + one[:10])
    assert len(records) == 2


def test_empty_input():
    assert parse_linux_utmp(b"") == []
    assert parse_darwin_utmpx(b"") == []
    assert parse_freebsd_utmp(b"") == []


def test_darwin_keeps_only_user_processes():
    data = darwin_record(b"bob", b"console", b"", 1392261637, 7) + darwin_record(
        b"boot", b"~", b"", 1392261600, 2
    )
    records = parse_darwin_utmpx(data)
    assert [(r.user, r.terminal, r.started) for r in records] == [
        ("bob", "console", 1392261637)
    ]


def test_freebsd_skips_empty_slots():
    data = struct.pack(FREEBSD_FMT, b"ttyv0", b"carol", b"example.com", 1000) + struct.pack(
        FREEBSD_FMT, b"ttyv1", b"", b"", 0
    )
    records = parse_freebsd_utmp(data)
    assert len(records) == 1
    assert records[0].user == "carol"
    assert records[0].terminal == "ttyv0"
    assert records[0].host == "example.com"
    assert records[0].started == 1000