import subprocess
from unittest import mock

import pytest

from sysgauge import winproc


def _completed(stdout):
    return subprocess.CompletedProcess(args=[], returncode=0, stdout=stdout, stderr="")


def test_parse_wmic_drops_header_and_blanks():
    text = "\r\nNode,ProcessId\r\nHOST,4\r\n\r\nHOST,100\r\n"
    assert winproc.parse_wmic(text) == [["HOST", "4"], ["HOST", "100"]]


def test_parse_wmic_header_only():
    assert winproc.parse_wmic("Node,Name\n") == []


@mock.patch("sysgauge.winproc.subprocess.run")
def test_wmic_passes_arguments(run):
    run.return_value = _completed("Node,Name\nHOST,cmd.exe\n")
    rows = winproc.wmic("process", "get", "Name")
    assert rows == [["HOST", "cmd.exe"]]
    assert run.call_args.args[0][:4] == ["wmic", "process", "get", "Name"]


@mock.patch("sysgauge.winproc.subprocess.run")
def test_pids_skips_non_numeric(run):
    run.return_value = _completed("Node,ProcessId\nHOST,0\nHOST,abc\nHOST,812\n")
    assert winproc.pids() == [0, 812]


@mock.patch("sysgauge.winproc.subprocess.run", side_effect=OSError("missing"))
def test_pids_empty_on_failure(run):
    assert winproc.pids() == []


@mock.patch("sysgauge.winproc.subprocess.run")
def test_query_value_uses_pid_filter(run):
    run.return_value = _completed("Node,Name\nHOST,notepad.exe\n")
    assert winproc.name(42) == "notepad.exe"
    assert "ProcessId = 42" in run.call_args.args[0]


@mock.patch("sysgauge.winproc.subprocess.run")
def test_query_value_missing_raises(run):
    run.return_value = _completed("No Instance(s) Available.\n")
    with pytest.raises(LookupError):
        winproc.exe(42)


@mock.patch("sysgauge.winproc.subprocess.run")
def test_cmdline_keeps_commas(run):
    run.return_value = _completed("Node,CommandLine\nHOST,prog.exe a,b\n")
    assert winproc.cmdline(7) == "prog.exe a,b"


@mock.patch("sysgauge.winproc.subprocess.run")
def test_nice_and_threads_are_integers(run):
    run.return_value = _completed("Node,Priority\nHOST,8\n")
    assert winproc.nice(7) == 8
    run.return_value = _completed("Node,ThreadCount\nHOST,12\n")
    assert winproc.num_threads(7) == 12


@mock.patch("sysgauge.winproc.subprocess.run")
def test_nice_invalid_number(run):
    run.return_value = _completed("Node,Priority\nHOST,high\n")
    with pytest.raises(ValueError):
        winproc.nice(7)