"""Waits for events on file descriptors and runs the matching callbacks."""

from __future__ import annotations

import select
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, Optional

from sponge.file_descriptor import FileDescriptor
from sponge.util import UnixError

Callback = Callable[[], None]
Interest = Callable[[], bool]

_POLL_FAILURE = select.POLLERR | select.POLLNVAL


class Direction(IntEnum):
    """Whether a rule waits for its descriptor to be readable or writable."""

    IN = select.POLLIN
    OUT = select.POLLOUT


class EventResult(Enum):
    """What one call to :meth:`EventLoop.wait_next_event` achieved."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    EXIT = "exit"


def _always_interested() -> bool:
    return True


@dataclass(eq=False)
class _Rule:
    fd: FileDescriptor
    direction: Direction
    callback: Callback
    interest: Interest
    cancel: Optional[Callback]

    def service_count(self) -> int:
        if self.direction is Direction.IN:
            return self.fd.read_count()
        return self.fd.write_count()


class EventLoop:
    """Holds rules and uses them to build each call to ``poll``.

    A rule is polled in its direction whenever its ``interest`` returns True,
    and is cancelled (its ``cancel`` called, then dropped) when its descriptor
    is closed, reaches EOF while reading, or hangs up.

    Every callback must read or write its descriptor, or its ``interest``
    must stop returning True; otherwise the loop reports a busy wait.
    """

    def __init__(self) -> None:
        self._rules: list[_Rule] = []

    def add_rule(
        self,
        fd: FileDescriptor,
        direction: Direction,
        callback: Callback,
        interest: Interest | None = None,
        cancel: Callback | None = None,
    ) -> None:
        """Call ``callback`` whenever ``fd`` is ready in ``direction``."""
        self._rules.append(
            _Rule(
                fd.duplicate(),
                Direction(direction),
                callback,
                interest or _always_interested,
                cancel,
            )
        )

    def _drop(self, rule: _Rule) -> None:
        if rule.cancel is not None:
            rule.cancel()
        self._rules = [r for r in self._rules if r is not rule]

    def wait_next_event(self, timeout_ms: int) -> EventResult:
        """Poll once (waiting at most ``timeout_ms``; negative waits forever) and run callbacks."""
        polled: list[tuple[_Rule, int]] = []
        something_to_poll = False

        for rule in list(self._rules):
            if (rule.direction is Direction.IN and rule.fd.eof()) or rule.fd.closed():
                self._drop(rule)
                continue
            if rule.interest():
                events = int(rule.direction)
                something_to_poll = True
            else:
                events = 0  # still polled, so errors are reported
            polled.append((rule, events))

        if not something_to_poll:
            return EventResult.EXIT

        masks: dict[int, int] = {}
        for rule, events in polled:
            fd_num = rule.fd.fd_num()
            masks[fd_num] = masks.get(fd_num, 0) | events

        poller = select.poll()
        for fd_num, mask in masks.items():
            poller.register(fd_num, mask)

        try:
            ready = poller.poll(timeout_ms)
        except InterruptedError:
            return EventResult.EXIT
        except OSError as exc:
            raise UnixError("poll", exc.errno or 0) from exc

        if not ready:
            return EventResult.TIMEOUT

        revents_by_fd = dict(ready)
        for rule, events in polled:
            revents = revents_by_fd.get(rule.fd.fd_num(), 0)
            if revents & _POLL_FAILURE:
                raise RuntimeError("EventLoop: error on polled file descriptor")

            poll_ready = bool(revents & events)
            poll_hup = bool(revents & select.POLLHUP)
            if poll_hup and events and not poll_ready:
                # Hung up with nothing left to read or no way to write: defunct.
                self._drop(rule)
                continue

            if poll_ready:
                count_before = rule.service_count()
                rule.callback()
                if count_before == rule.service_count() and rule.interest():
                    raise RuntimeError(
                        "EventLoop: busy wait detected: callback did not read/write fd and is still interested"
                    )

        return EventResult.SUCCESS