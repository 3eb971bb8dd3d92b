from __future__ import annotations

import re

import pytest

import main
from monte_carlo import WorkerStartError


def _forbid_simulation(*args, **kwargs):
    raise AssertionError("simulation must not start")


@pytest.mark.parametrize(
    "argv",
    [
        ["main.py"],
        ["main.py", "100"],
        ["main.py", "100", "4", "direct", "threads", "extra"],
        ["main.py", "0", "4"],
        ["main.py", "100", "0"],
        ["main.py", "-10", "4"],
        ["main.py", "abc", "4"],
        ["main.py", "100", "2.5"],
        ["main.py", "100", "4", "riffle"],
        ["main.py", "100", "4", "direct", "fibers"],
    ],
)
def test_invalid_arguments_exit_with_failure(monkeypatch: pytest.MonkeyPatch, argv: list[str]) -> None:
    monkeypatch.setattr(main, "run_simulation", _forbid_simulation)

    with pytest.raises(SystemExit) as excinfo:
        main.main(argv)

    assert excinfo.value.code == 1


def test_usage_is_printed_for_wrong_argument_count(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit):
        main.main(["prog"])

    out = capsys.readouterr().out
    assert "Usage: prog <total_rounds> <num_threads>" in out


def test_worker_start_failure_exits_with_failure(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def failing_simulation(*args, **kwargs):
        raise WorkerStartError("Failed to start worker 2: can't start new thread")

    monkeypatch.setattr(main, "run_simulation", failing_simulation)

    with pytest.raises(SystemExit) as excinfo:
        main.main(["main.py", "100", "4"])

    assert excinfo.value.code == 1
    assert "Error creating workers" in capsys.readouterr().out


def test_successful_run_prints_report(capsys: pytest.CaptureFixture[str]) -> None:
    main.main(["main.py", "1001", "4", "shuffle"])

    out = capsys.readouterr().out
    assert "Total rounds: 1001" in out
    assert "Strategy: shuffle" in out
    assert "- Base rounds per worker: 250" in out
    assert "- Extra rounds: 1" in out

    worker_lines = re.findall(r"Worker (\d+): (\d+) successes out of (\d+) rounds", out)
    assert [int(i) for i, _, _ in worker_lines] == [0, 1, 2, 3]
    assert [int(r) for _, _, r in worker_lines] == [251, 250, 250, 250]

    total = re.search(r"Successful rounds: (\d+) of 1001", out)
    assert total is not None
    assert int(total.group(1)) == sum(int(s) for _, s, _ in worker_lines)

    assert "Theoretical probability: 0.058824" in out
    assert "rounds/s" in out
    assert "ps -eLf | grep" in out


def test_single_round_run(capsys: pytest.CaptureFixture[str]) -> None:
    main.main(["main.py", "1", "1"])

    out = capsys.readouterr().out
    assert re.search(r"Successful rounds: [01] of 1", out)
    assert "Extra rounds" not in out


def test_empty_argv_prints_usage(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main.main([])

    assert excinfo.value.code == 1
    assert "Usage: main.py" in capsys.readouterr().out


def test_choice_arguments_are_trimmed_and_case_insensitive(capsys: pytest.CaptureFixture[str]) -> None:
    main.main(["main.py", "20", "2", " Shuffle ", "THREADS "])

    out = capsys.readouterr().out
    assert "Strategy: shuffle" in out
    assert "Workers: 2 (threads)" in out


def test_thread_inspection_hint_only_for_threads(capsys: pytest.CaptureFixture[str]) -> None:
    main.main(["main.py", "20", "2", "direct", "threads"])
    assert "ps -eLf | grep" in capsys.readouterr().out

    main.main(["main.py", "20", "2", "direct", "processes"])
    out = capsys.readouterr().out
    assert "Workers: 2 (processes)" in out
    assert "THREAD INSPECTION" not in out
