import pytest

from threshsig.config import MAX_WORKERS_ENV, SessionConfig, run_parallel


@pytest.mark.parametrize("t,n", [(0, 3), (4, 3), (-1, 1)])
def test_invalid_threshold(t, n):
    with pytest.raises(ValueError):
        SessionConfig(t, n, b"msg")


def test_message_must_be_bytes():
    with pytest.raises(ValueError):
        SessionConfig(2, 3, "msg")


def test_max_workers(monkeypatch):
    monkeypatch.delenv(MAX_WORKERS_ENV, raising=False)
    assert SessionConfig(2, 3, b"msg").max_workers == 3
    assert SessionConfig(2, 30, b"msg").max_workers == 10
    monkeypatch.setenv(MAX_WORKERS_ENV, "4")
    assert SessionConfig(2, 30, b"msg").max_workers == 4
    assert SessionConfig(2, 30, b"msg", max_workers=2).max_workers == 2
    with pytest.raises(ValueError):
        SessionConfig(2, 3, b"msg", max_workers=0)


def test_run_parallel_keeps_order():
    assert run_parallel(lambda x: x * x, range(20), 4) == [x * x for x in range(20)]
    assert run_parallel(lambda x: x, []) == []


def test_run_parallel_propagates():
    def fail(x):
        if x == 3:
            raise ValueError("boom")
        return x

    with pytest.raises(ValueError):
        run_parallel(fail, range(5))
