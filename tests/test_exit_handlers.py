import pytest

from gouml.logkit import exit_handlers
from gouml.logkit.exit_handlers import (
    register_exit_handler,
    run_exit_handlers,
    terminate,
)


@pytest.fixture(autouse=True)
def fresh_handlers(monkeypatch):
    monkeypatch.setattr(exit_handlers, "_handlers", [])


def test_handlers_run_in_order():
    calls = []
    register_exit_handler(lambda: calls.append("first"))
    register_exit_handler(lambda: calls.append("second"))
    run_exit_handlers()
    assert calls == ["first", "second"]


def test_failing_handler_does_not_stop_others(capsys):
    calls = []

    def broken():
        raise RuntimeError("boom")

    register_exit_handler(broken)
    register_exit_handler(lambda: calls.append("after"))
    run_exit_handlers()
    assert calls == ["after"]
    err = capsys.readouterr().err
    assert err.startswith("Error:")
    assert "boom" in err


def test_terminate_runs_handlers_then_exits():
    calls = []
    register_exit_handler(lambda: calls.append("ran"))
    with pytest.raises(SystemExit) as info:
        terminate(1)
    assert info.value.code == 1
    assert calls == ["ran"]