from anode.exec_bench import main
from anode.exec_harness import header, separator


def test_runs_both_queues(capsys):
    assert main(["1", "0"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 6
    assert lines[0] == separator()
    assert lines[2] == header()
    assert lines[-1] == separator()
    assert "queue: Bounded(100000)" in lines[3]
    assert "queue: Unbounded" in lines[4]
    assert "workers: 1" in lines[3]


def test_range_of_workers(capsys):
    assert main(["1:2", "0"]) == 0
    out = capsys.readouterr().out
    assert "workers: 1," in out
    assert "workers: 2," in out
    assert out.count(header()) == 2


def test_no_arguments_prints_usage(capsys):
    assert main([]) == 1
    out = capsys.readouterr().out
    assert "workers duration" in out
    assert "start:end:step" in out


def test_wrong_argument_count(capsys):
    assert main(["1"]) == 1
    out = capsys.readouterr().out
    assert "Invalid number of arguments (expected 2, got 1)" in out


def test_invalid_value(capsys):
    assert main(["x", "0"]) == 1
    out = capsys.readouterr().out
    assert "Invalid value for workers: x" in out