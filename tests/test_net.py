import json
import sys

import pytest

import sysgauge.net as net_module
from sysgauge.net import (
    Addr,
    NetConnectionStat,
    NetInterfaceAddr,
    NetInterfaceStat,
    NetIOCountersStat,
    io_counters_all,
    net_interfaces,
    net_io_counters,
    parse_darwin_netstat,
    parse_freebsd_netstat,
    parse_net_dev,
)

NET_DEV = """\
Inter-|   Receive                                                |  Transmit
 face |bytes    packets errs drop fifo frame compressed multicast|bytes    packets errs drop fifo colls carrier compressed
    lo:  1000      10    0    0    0     0          0         0     1000      10    0    0    0     0       0          0
  eth0: 8734422  23456  832    7    0     0          0         0     1123     781    8    1    0     1       0          0
"""


def test_addr_string():
    v = Addr(ip="192.168.0.1", port=8000)
    assert str(v) == '{"ip":"192.168.0.1","port":8000}'


def test_net_io_counters_stat_string():
    v = NetIOCountersStat(name="test", bytes_sent=100)
    e = (
        '{"name":"test","bytes_sent":100,"bytes_recv":0,"packets_sent":0,'
        '"packets_recv":0,"errin":0,"errout":0,"dropin":0,"dropout":0}'
    )
    assert str(v) == e


def test_net_connection_stat_string():
    v = NetConnectionStat(fd=10, family=10, type=10)
    e = (
        '{"fd":10,"family":10,"type":10,"localaddr":{"ip":"","port":0},'
        '"remoteaddr":{"ip":"","port":0},"status":"","pid":0}'
    )
    assert str(v) == e


def test_interface_stat_json_round_trip():
    v = NetInterfaceStat(
        mtu=1500,
        name="eth0",
        hardwareaddr="02:00:00:00:00:01",
        flags=["up", "broadcast"],
        addrs=[NetInterfaceAddr(addr="10.0.0.2/24")],
    )
    data = json.loads(str(v))
    assert data == {
        "mtu": 1500,
        "name": "eth0",
        "hardwareaddr": "02:00:00:00:00:01",
        "flags": ["up", "broadcast"],
        "addrs": [{"addr": "10.0.0.2/24"}],
    }
    assert str(NetInterfaceAddr(addr="10.0.0.2/24")) == '{"addr":"10.0.0.2/24"}'


def test_get_net_io_counters_all():
    n = [
        NetIOCountersStat(name="a", bytes_recv=10, packets_recv=10),
        NetIOCountersStat(name="b", bytes_recv=10, packets_recv=10, errin=10),
    ]
    ret = io_counters_all(n)
    assert len(ret) == 1
    assert ret[0].name == "all"
    assert ret[0].bytes_recv == 20
    assert ret[0].errin == 10


def test_io_counters_all_empty():
    assert io_counters_all([]) == [NetIOCountersStat(name="all")]


def test_parse_net_dev():
    stats = parse_net_dev(NET_DEV.splitlines())
    assert [s.name for s in stats] == ["lo", "eth0"]
    eth0 = stats[1]
    assert eth0.bytes_recv == 8734422
    assert eth0.packets_recv == 23456
    assert eth0.errin == 832
    assert eth0.dropin == 7
    assert eth0.bytes_sent == 1123
    assert eth0.packets_sent == 781
    assert eth0.errout == 8
    assert eth0.dropout == 1


def test_parse_net_dev_rejects_garbage():
    lines = NET_DEV.splitlines()[:2] + ["  eth0: 1 2 x 4 5 6 7 8 9 10 11 12 13 14 15 16"]
    with pytest.raises(ValueError):
        parse_net_dev(lines)


def test_parse_net_dev_rejects_short_line():
    lines = NET_DEV.splitlines()[:2] + ["  eth0: 1 2 3"]
    with pytest.raises(ValueError):
        parse_net_dev(lines)


def test_parse_darwin_netstat():
    text = (
        "Name  Mtu   Network     Address            Ipkts Ierrs Ibytes Opkts Oerrs Obytes Coll Drop\n"
        "en0   1500  <Link#4>  02:00:00:00:00:01  23456   832      7   781     8   1123    0    0\n"
        "en0   1500  10.0.0    10.0.0.2            999     9      9   999     9    999    -    -\n"
        "gif0* 1280  <Link#2>  0  -  3  0  0  0\n"
    )
    stats = parse_darwin_netstat(text)
    assert [s.name for s in stats] == ["en0", "gif0*"]
    assert (stats[0].packets_recv, stats[0].errin, stats[0].dropin) == (23456, 832, 7)
    assert (stats[1].packets_recv, stats[1].errin, stats[1].dropin) == (0, 0, 3)


def test_parse_freebsd_netstat():
    text = (
        "Name Mtu Network Address Ipkts Ierrs Idrop Ibytes Opkts Oerrs Obytes Coll Drop\n"
        "em0 1500 <Link#1> 02:00:00:00:00:01 10 1 2 300 20 3 400 0 5 0\n"
        "lo0 16384 <Link#2> 4 0 0 50 4 0 50 0 0\n"
    )
    stats = parse_freebsd_netstat(text)
    em0, lo0 = stats
    assert em0.name == "em0"
    assert (em0.packets_recv, em0.errin, em0.dropin, em0.bytes_recv) == (10, 1, 2, 300)
    assert (em0.packets_sent, em0.errout, em0.bytes_sent, em0.dropout) == (20, 3, 400, 5)
    assert lo0.packets_recv == 4
    assert lo0.bytes_recv == 50
    assert lo0.bytes_sent == 50


def test_parse_freebsd_netstat_short_line():
    with pytest.raises(ValueError):
        parse_freebsd_netstat("em0 1500 <Link#1> 1 2\n")


def test_net_io_counters_from_proc(tmp_path, monkeypatch):
    path = tmp_path / "dev"
    path.write_text(NET_DEV)
    monkeypatch.setattr(net_module, "_NET_DEV_PATH", str(path))
    monkeypatch.setattr(sys, "platform", "linux")
    total = net_io_counters(False)
    per = net_io_counters(True)
    assert len(total) == 1
    assert total[0].name == "all"
    assert total[0].packets_recv == sum(p.packets_recv for p in per)
    assert all(p.name for p in per)


def test_net_io_counters_unsupported(monkeypatch):
    monkeypatch.setattr(sys, "platform", "plan9")
    with pytest.raises(NotImplementedError):
        net_io_counters(True)


def test_net_interfaces():
    v = net_interfaces()
    assert len(v) > 0
    known = {"up", "broadcast", "loopback", "pointtopoint", "multicast"}
    for vv in v:
        assert vv.name != ""
        assert set(vv.flags) <= known