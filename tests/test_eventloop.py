import os

import pytest

from sponge.eventloop import Direction, EventLoop, Result
from sponge.file_descriptor import FileDescriptor


@pytest.fixture
def pipe():
    read_fd, write_fd = os.pipe()
    reader = FileDescriptor(read_fd)
    writer = FileDescriptor(write_fd)
    yield reader, writer
    for end in (reader, writer):
        if not end.closed:
            end.close()


def test_no_rules_exits():
    assert EventLoop().wait_next_event(0) is Result.EXIT


def test_readable_rule_runs_callback(pipe):
    reader, writer = pipe
    received = []
    loop = EventLoop()
    loop.add_rule(reader, Direction.IN, lambda: received.append(reader.read()))
    writer.write(b"hello")
    assert loop.wait_next_event(1000) is Result.SUCCESS
    assert received == [b"hello"]


def test_timeout_when_nothing_ready(pipe):
    reader, _writer = pipe
    called = []
    loop = EventLoop()
    loop.add_rule(reader, Direction.IN, lambda: called.append(True))
    assert loop.wait_next_event(10) is Result.TIMEOUT
    assert called == []


def test_uninterested_rules_exit(pipe):
    reader, writer = pipe
    writer.write(b"x")
    called = []
    loop = EventLoop()
    loop.add_rule(reader, Direction.IN, lambda: called.append(True), interest=lambda: False)
    assert loop.wait_next_event(0) is Result.EXIT
    assert called == []


def test_uninterested_rule_skipped_while_other_fires(pipe):
    reader, writer = pipe
    writer.write(b"x")
    fired = []
    loop = EventLoop()
    loop.add_rule(reader, Direction.IN, lambda: fired.append("quiet"), interest=lambda: False)
    loop.add_rule(writer, Direction.OUT, lambda: fired.append(writer.write(b"y")))
    assert loop.wait_next_event(1000) is Result.SUCCESS
    assert fired == [1]


def test_writable_rule_writes(pipe):
    reader, writer = pipe
    loop = EventLoop()
    loop.add_rule(writer, Direction.OUT, lambda: writer.write(b"data"))
    assert loop.wait_next_event(1000) is Result.SUCCESS
    assert reader.read(4) == b"data"
    assert writer.write_count == 1


def test_busy_wait_detected(pipe):
    reader, writer = pipe
    writer.write(b"x")
    loop = EventLoop()
    loop.add_rule(reader, Direction.IN, lambda: None)
    with pytest.raises(RuntimeError, match="busy wait"):
        loop.wait_next_event(1000)


def test_no_busy_wait_when_interest_turns_false(pipe):
    reader, writer = pipe
    writer.write(b"x")
    state = {"interested": True}

    def callback():
        state["interested"] = False

    loop = EventLoop()
    loop.add_rule(reader, Direction.IN, callback, interest=lambda: state["interested"])
    assert loop.wait_next_event(1000) is Result.SUCCESS
    assert state["interested"] is False


def test_closed_descriptor_cancels_rule(pipe):
    reader, _writer = pipe
    cancelled = []
    loop = EventLoop()
    loop.add_rule(reader, Direction.IN, lambda: None, cancel=lambda: cancelled.append(True))
    reader.close()
    assert loop.wait_next_event(0) is Result.EXIT
    assert cancelled == [True]
    assert loop.wait_next_event(0) is Result.EXIT
    assert cancelled == [True]


def test_rule_keeps_firing_across_calls(pipe):
    reader, writer = pipe
    received = []
    loop = EventLoop()
    loop.add_rule(reader, Direction.IN, lambda: received.append(reader.read()))
    writer.write(b"one")
    assert loop.wait_next_event(1000) is Result.SUCCESS
    writer.write(b"two")
    assert loop.wait_next_event(1000) is Result.SUCCESS
    assert b"".join(received) == b"onetwo"
    assert reader.read_count == len(received)