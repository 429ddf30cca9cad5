"""
=============================================================================
COOPERATIVE SHUTDOWN
=============================================================================

Shutdown is driven by a single shared token rather than by killing threads:

    ┌──────────────────────┐   cancel()   ┌───────────────────────┐
    │ ShutdownCoordinator  │ ───────────► │   CancellationToken   │
    │ (dedicated thread)   │              │   running → stopping  │
    └──────────┬───────────┘              └───────────┬───────────┘
               │ wait()                               │ checked every
               ▼                                      ▼ iteration
    ┌──────────────────────┐              ┌───────────────────────┐
    │  TerminationSource   │              │      Accept Loop      │
    │  SIGTERM / SIGINT    │              │  stops within one     │
    │  or manual trigger   │              │  poll interval        │
    └──────────────────────┘              └───────────────────────┘

The coordinator is single-shot: it waits for the first termination,
cancels the token, and exits. The accept loop then leaves its loop and the
server shuts down the worker pool, which drains queued connections.

=============================================================================
SIGNALS ON A DEDICATED THREAD
=============================================================================

Python normally runs signal handlers on the main thread, which here is busy
in the accept loop. Instead we:

    1. Block SIGTERM/SIGINT in the main thread BEFORE any other thread is
       started (pthread_sigmask). New threads inherit the mask, so no thread
       has the default "terminate" action for these signals.

    2. Call sigwait() on the coordinator thread. The kernel parks the
       signal as pending and sigwait() consumes it synchronously.

SIGKILL cannot be caught or blocked; nothing here changes that.

=============================================================================
"""

import signal
import threading
import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional


logger = logging.getLogger(__name__)


class CancellationToken:
    """
    Shared "keep running?" flag.

    Starts in the running state and can be cancelled once; further cancel()
    calls have no effect. Backed by threading.Event, so reads and the single
    write are thread-safe without extra locking.
    """

    def __init__(self):
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> bool:
        """
        Move the token to the stopping state.

        Returns:
            True if this call performed the transition, False if the token
            was already cancelled.
        """
        if self._event.is_set():
            return False
        self._event.set()
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or until timeout; returns the cancelled state."""
        return self._event.wait(timeout)


class TerminationSource(ABC):
    """
    Something that eventually tells the process to stop.

    The coordinator only needs to block until a termination arrives and to
    be able to wake itself up when the server stops for another reason.
    """

    def install(self):
        """Prepare the source. Called on the main thread before workers start."""

    def uninstall(self):
        """Undo install()."""

    @abstractmethod
    def wait(self) -> Optional[str]:
        """
        Block until a termination arrives.

        Returns:
            A human-readable name for what arrived (e.g. "SIGTERM").
        """

    @abstractmethod
    def wake(self, thread: threading.Thread):
        """Unblock a thread currently inside wait()."""


class SignalTermination(TerminationSource):
    """
    Termination driven by POSIX signals, received on a dedicated thread.

    Usage:
        source = SignalTermination()
        source.install()        # main thread, before starting workers
        ...
        source.wait()           # on the coordinator thread
        ...
        source.uninstall()      # restore the previous signal mask
    """

    def __init__(self, signals: Iterable[signal.Signals] = (signal.SIGTERM, signal.SIGINT)):
        self.signals = set(signals)
        self._previous_mask: Optional[set] = None

    def install(self):
        self._previous_mask = signal.pthread_sigmask(signal.SIG_BLOCK, self.signals)

    def uninstall(self):
        if self._previous_mask is None:
            return

        # Signals that arrived after the first one are still pending; restoring
        # the mask would deliver them with their default action
        self.discard_pending()
        signal.pthread_sigmask(signal.SIG_SETMASK, self._previous_mask)
        self._previous_mask = None

    def discard_pending(self) -> list[str]:
        """Consume pending termination signals; returns their names."""
        discarded = []
        while self.signals & signal.sigpending():
            info = signal.sigtimedwait(self.signals, 0)
            if info is None:
                break
            name = signal.Signals(info.si_signo).name
            logger.info(f"Ignoring {name} received during shutdown")
            discarded.append(name)
        return discarded

    def wait(self) -> Optional[str]:
        # Block here too, in case install() ran on a different thread
        signal.pthread_sigmask(signal.SIG_BLOCK, self.signals)
        signum = signal.sigwait(self.signals)
        return signal.Signals(signum).name

    def wake(self, thread: threading.Thread):
        # The signal is blocked on that thread, so it is consumed by sigwait()
        if thread.ident is not None and thread.is_alive():
            signal.pthread_kill(thread.ident, next(iter(self.signals)))


class ManualTermination(TerminationSource):
    """
    Termination triggered from code.

    Used by the test suite and by anyone embedding the server in a larger
    program that has its own shutdown logic.
    """

    def __init__(self):
        self._event = threading.Event()
        self._reason: Optional[str] = None

    def trigger(self, reason: str = "manual shutdown"):
        self._reason = reason
        self._event.set()

    def wait(self) -> Optional[str]:
        self._event.wait()
        return self._reason

    def wake(self, thread: threading.Thread):
        self._event.set()


class ShutdownCoordinator:
    """
    Translates the first termination into a token cancellation.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Coordinator Thread                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   reason = source.wait()          ◄── Blocks                        │
    │        │                                                             │
    │        ├── stop() was called → exit quietly                         │
    │        │                                                             │
    │        └── otherwise → log, token.cancel(), exit                    │
    │                                                                      │
    │   (Never loops: later signals are not listened for)                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘
    """

    def __init__(self, token: CancellationToken, source: TerminationSource):
        self.token = token
        self.source = source
        self._stopping = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def thread(self) -> Optional[threading.Thread]:
        return self._thread

    def start(self):
        if self._thread is not None:
            return

        self._thread = threading.Thread(
            target=self._run, name="shutdown-coordinator", daemon=True
        )
        self._thread.start()

    def _run(self):
        reason = self.source.wait()

        if self._stopping.is_set():
            return

        logger.info(f"Received {reason}. Shutting down...")
        self.token.cancel()

    def stop(self, timeout: Optional[float] = 2.0):
        """Wake the coordinator if it is still waiting, then join it."""
        if self._thread is None:
            return

        self._stopping.set()
        if self._thread.is_alive():
            self.source.wake(self._thread)
        self._thread.join(timeout)
