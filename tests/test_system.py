import pytest

from sysgauge.accumulator import Accumulator
from sysgauge.load import LoadAvgStat
from sysgauge.system import SystemStats


class FakePS:
    def __init__(self, stat=None, error=None):
        self.stat = stat
        self.error = error
        self.calls = 0

    def load_avg(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.stat


def test_gather_reports_load_averages():
    ps = FakePS(LoadAvgStat(load1=0.3, load5=1.5, load15=0.8))
    acc = Accumulator()
    SystemStats(ps=ps).gather(acc)
    assert ps.calls == 1
    assert acc.check_value("load1", 0.3)
    assert acc.check_value("load5", 1.5)
    assert acc.check_value("load15", 0.8)
    assert [p.measurement for p in acc.points] == ["load1", "load5", "load15"]


def test_gather_points_are_untagged():
    acc = Accumulator()
    SystemStats(ps=FakePS(LoadAvgStat(load1=0.3, load5=1.5, load15=0.8))).gather(acc)
    assert acc.check_tagged_value("load1", 0.3, None)
    assert all(p.tags is None for p in acc.points)


def test_gather_propagates_errors():
    acc = Accumulator()
    stats = SystemStats(ps=FakePS(error=OSError("no load")))
    with pytest.raises(OSError, match="no load"):
        stats.gather(acc)
    assert acc.points == []


def test_description_and_sample_config():
    stats = SystemStats(ps=FakePS())
    assert stats.description() == "Read metrics about system load"
    assert stats.sample_config() == ""