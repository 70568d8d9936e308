"""A poll-based loop that runs callbacks when file descriptors become ready."""

from __future__ import annotations

import select
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .file_descriptor import FileDescriptor

Callback = Callable[[], None]
Interest = Callable[[], bool]


class Direction(Enum):
    """Whether a rule waits for its descriptor to be readable or writable."""

    IN = select.POLLIN
    OUT = select.POLLOUT


class Result(Enum):
    """Outcome of one call to ``EventLoop.wait_next_event``."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    EXIT = "exit"


def _always() -> bool:
    return True


def _nothing() -> None:
    return None


@dataclass(eq=False)
class _Rule:
    fd: FileDescriptor
    direction: Direction
    callback: Callback
    interest: Interest
    cancel: Callback

    def service_count(self) -> int:
        if self.direction is Direction.IN:
            return self.fd.read_count
        return self.fd.write_count


class EventLoop:
    """Holds rules and runs the callback of each rule whose descriptor is ready.

    A rule is cancelled (its ``cancel`` callback runs and it is dropped) when
    its descriptor is closed, reaches EOF while reading, or hangs up.
    Every callback must read or write its descriptor, or its ``interest``
    must turn false; otherwise a busy wait is reported as RuntimeError.
    """

    def __init__(self) -> None:
        self._rules: list[_Rule] = []

    def add_rule(
        self,
        fd: FileDescriptor,
        direction: Direction,
        callback: Callback,
        interest: Interest = _always,
        cancel: Callback = _nothing,
    ) -> None:
        """Run ``callback`` whenever ``fd`` is ready in ``direction`` and ``interest()`` holds."""
        self._rules.append(_Rule(fd.duplicate(), direction, callback, interest, cancel))

    def _cancel(self, rule: _Rule) -> None:
        rule.cancel()
        if rule in self._rules:
            self._rules.remove(rule)

    def wait_next_event(self, timeout_ms: int) -> Result:
        """Poll every interested rule for up to ``timeout_ms`` and run the ready callbacks.

        Returns EXIT when nothing is left to poll or the wait was interrupted,
        TIMEOUT when nothing became ready, and SUCCESS otherwise.
        """
        polled: list[tuple[_Rule, int]] = []
        masks: dict[int, int] = {}
        something_to_poll = False

        for rule in list(self._rules):
            if (rule.direction is Direction.IN and rule.fd.eof) or rule.fd.closed:
                self._cancel(rule)
                continue
            events = rule.direction.value if rule.interest() else 0
            something_to_poll = something_to_poll or bool(events)
            masks[rule.fd.fd_num] = masks.get(rule.fd.fd_num, 0) | events
            polled.append((rule, events))

        if not something_to_poll:
            return Result.EXIT

        poller = select.poll()
        for fd_num, mask in masks.items():
            poller.register(fd_num, mask)

        try:
            ready = poller.poll(timeout_ms)
        except InterruptedError:
            return Result.EXIT
        if not ready:
            return Result.TIMEOUT
        revents_by_fd = dict(ready)

        for rule, events in polled:
            if rule not in self._rules:
                continue
            revents = revents_by_fd.get(rule.fd.fd_num, 0)
            if revents & (select.POLLERR | select.POLLNVAL):
                raise RuntimeError("EventLoop: error on polled file descriptor")

            poll_ready = bool(revents & events)
            poll_hup = bool(revents & select.POLLHUP)
            if poll_hup and events and not poll_ready:
                # Only a hangup: nothing more will be read or written.
                self._cancel(rule)
                continue

            if poll_ready:
                count_before = rule.service_count()
                rule.callback()
                if count_before == rule.service_count() and rule.interest():
                    raise RuntimeError(
                        "EventLoop: busy wait detected: callback did not read/write fd "
                        "and is still interested"
                    )

        return Result.SUCCESS