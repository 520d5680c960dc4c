import io
import json

import pytest

from gouml.logkit import exported as log
from gouml.logkit.entry import PanicError
from gouml.logkit.formatters import JSONFormatter
from gouml.logkit.hooks import Hook
from gouml.logkit.levels import Level


@pytest.fixture
def out():
    std = log.standard_logger()
    saved = (std.out, std.formatter, std.level, dict(std.hooks))
    stream = io.StringIO()
    log.set_output(stream)
    log.set_formatter(JSONFormatter(disable_timestamp=True))
    log.set_level(Level.INFO)
    yield stream
    std.out, std.formatter, std.level = saved[:3]
    std.hooks.clear()
    std.hooks.update(saved[3])


def records(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines()]


class Recorder(Hook):
    def __init__(self):
        self.messages = []

    def levels(self):
        return [Level.WARN]

    def fire(self, entry):
        self.messages.append(entry.message)


def test_standard_logger_is_shared(out):
    log.standard_logger().info("via logger")
    log.info("via shortcut")
    assert [r["msg"] for r in records(out)] == ["via logger", "via shortcut"]


def test_set_and_get_level(out):
    log.set_level(Level.DEBUG)
    assert log.get_level() == Level.DEBUG
    assert log.standard_logger().level == Level.DEBUG


def test_set_output_receives_entries(out):
    log.info("hello")
    assert records(out)[0]["msg"] == "hello"


def test_level_applies_to_shortcuts(out):
    log.set_level(Level.ERROR)
    log.debug("d")
    log.info("i")
    log.warn("w")
    log.error("e")
    assert [r["msg"] for r in records(out)] == ["e"]


def test_with_fields_shortcut(out):
    log.with_fields({"animal": "walrus", "size": 10}).info("A walrus appears")
    (record,) = records(out)
    assert record["animal"] == "walrus"
    assert record["size"] == 10


def test_with_field_and_error_bind_standard_logger(out):
    assert log.with_field("k", 1).logger is log.standard_logger()
    log.with_error(KeyError("missing")).error("oops")
    assert "missing" in records(out)[0]["error"]


def test_formatted_shortcuts(out):
    log.set_level(Level.DEBUG)
    log.debugf("%s", "d")
    log.infof("%s", "i")
    log.warnf("%s", "w")
    log.errorf("%s", "e")
    assert [r["msg"] for r in records(out)] == ["d", "i", "w", "e"]


def test_add_hook(out):
    hook = Recorder()
    log.add_hook(hook)
    log.info("skip")
    log.warn("caught")
    assert hook.messages == ["caught"]


def test_panic_shortcut_raises(out):
    with pytest.raises(PanicError):
        log.panic("halt")
    assert records(out)[0]["msg"] == "halt"


def test_fatalf_shortcut_exits(out):
    with pytest.raises(SystemExit) as info:
        log.fatalf("%s", "bye")
    assert info.value.code == 1
    assert records(out)[0]["msg"] == "bye"