"""
Check-phase scheduler.

One thread per probe runs Probe.execute(); every thread sends exactly one
Completion into a shared CompletionChannel and releases its sender. The
channel closes when the last sender is released, which is how the
collector knows the scan is over without counting anything itself.

    scheduler = Scheduler(probes, config)
    scheduler.launch()
    for completion in scheduler.channel:   # completion order
        ...
    scheduler.join()
"""

from __future__ import annotations

import concurrent.futures
import logging
import queue
import threading
import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from archsweep.config import RunConfig
from archsweep.errors import ProbeCheckError
from archsweep.probes.base import Probe, ProbeResult

logger = logging.getLogger(__name__)


# ── Messages ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Completion:
    """The (probe, outcome) pair one check task sends. Outcome is a result or an error."""

    probe: Probe
    result: ProbeResult | None = None
    error: ProbeCheckError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


# ── Channel ───────────────────────────────────────────────────────────────────

_CLOSED = object()


class Sender:
    """One producer's handle on a CompletionChannel. Release it exactly once."""

    def __init__(self, channel: "CompletionChannel") -> None:
        self._channel = channel
        self._released = False

    def send(self, completion: Completion) -> None:
        if self._released:
            raise RuntimeError("send() on a released sender")
        self._channel._queue.put(completion)

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._channel._release_sender()

    def __enter__(self) -> "Sender":
        return self

    def __exit__(self, *args) -> None:
        self.release()


class CompletionChannel:
    """
    Multi-producer, single-consumer fan-in.

    Iterating yields completions in arrival order and stops once every
    sender has been released. A channel that never had a sender other
    than its owner closes as soon as the owner releases.
    """

    def __init__(self) -> None:
        self._queue: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self._senders = 0
        self._closed = False

    def sender(self) -> Sender:
        with self._lock:
            if self._closed:
                raise RuntimeError("channel is closed")
            self._senders += 1
        return Sender(self)

    def _release_sender(self) -> None:
        with self._lock:
            self._senders -= 1
            if self._senders == 0:
                self._closed = True
                self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[Completion]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                return
            yield item


# ── Scheduler ─────────────────────────────────────────────────────────────────

def _run_check(probe: Probe, config: RunConfig, sender: Sender) -> None:
    """Body of one check task: run, wrap the outcome, send it, release."""
    with sender:
        start = time.monotonic()
        try:
            result = probe.execute(config)
        except ProbeCheckError as e:
            completion = Completion(probe, error=e)
        except Exception as e:
            # execute() already wraps everything; this keeps a broken
            # subclass from losing its one message
            completion = Completion(
                probe, error=ProbeCheckError(probe.id, f"Unexpected error in {probe.id}: {e}")
            )
        else:
            completion = Completion(probe, result=result)
        logger.debug(
            "%s finished in %.2fs (%s)",
            probe.id, time.monotonic() - start, "ok" if completion.ok else "failed",
        )
        sender.send(completion)


class Scheduler:
    """Launches one concurrent check per probe and owns the fan-in channel."""

    def __init__(self, probes: Sequence[Probe], config: RunConfig) -> None:
        self.probes = list(probes)
        self.config = config
        self.channel = CompletionChannel()
        self._pool: concurrent.futures.ThreadPoolExecutor | None = None
        self._futures: list[concurrent.futures.Future] = []

    def launch(self) -> CompletionChannel:
        """
        Start every check and return the channel immediately.

        Never waits for the consumer. Each task gets its own sender; the
        scheduler holds one more while submitting so the channel can't
        close between two submissions.
        """
        if self._pool is not None:
            raise RuntimeError("Scheduler.launch() called twice")

        # One worker per probe — the probe set is small and fixed
        self._pool = concurrent.futures.ThreadPoolExecutor(
            max_workers=max(1, len(self.probes)),
            thread_name_prefix="archsweep-check",
        )
        with self.channel.sender():
            for probe in self.probes:
                logger.debug("launching check %s", probe.id)
                sender = self.channel.sender()
                try:
                    future = self._pool.submit(_run_check, probe, self.config, sender)
                except BaseException:
                    # The task never ran, so its sender is still ours to release
                    sender.release()
                    raise
                self._futures.append(future)
        return self.channel

    @property
    def launched(self) -> bool:
        return self._pool is not None

    def join(self) -> None:
        """Wait for every launched task to finish."""
        if self._pool is None:
            return
        self._pool.shutdown(wait=True)
        for future in self._futures:
            # Tasks never raise; surface it loudly if one somehow did
            exc = future.exception()
            if exc is not None:
                raise exc
