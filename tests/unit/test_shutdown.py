"""
Unit tests for the cancellation token and shutdown coordinator.
"""

import signal
import threading

import pytest

from staticd.core.shutdown import (
    CancellationToken,
    ManualTermination,
    ShutdownCoordinator,
    SignalTermination,
)


class TestCancellationToken:
    def test_starts_running(self):
        assert not CancellationToken().cancelled

    def test_cancel_once(self):
        token = CancellationToken()

        assert token.cancel() is True
        assert token.cancelled
        assert token.cancel() is False
        assert token.cancelled

    def test_wait_times_out(self):
        assert CancellationToken().wait(timeout=0.01) is False

    def test_wait_sees_cancel_from_other_thread(self):
        token = CancellationToken()
        threading.Timer(0.02, token.cancel).start()

        assert token.wait(timeout=2.0) is True


class TestShutdownCoordinator:
    def test_trigger_cancels_token(self):
        token = CancellationToken()
        source = ManualTermination()
        coordinator = ShutdownCoordinator(token, source)
        coordinator.start()

        assert not token.cancelled
        source.trigger("test")

        assert token.wait(timeout=2.0)
        coordinator.thread.join(timeout=2.0)
        assert not coordinator.thread.is_alive()

    def test_runs_on_dedicated_thread(self):
        coordinator = ShutdownCoordinator(CancellationToken(), ManualTermination())
        coordinator.start()
        try:
            assert coordinator.thread is not threading.current_thread()
            assert coordinator.thread.name == "shutdown-coordinator"
        finally:
            coordinator.stop()

    def test_stop_without_termination(self):
        token = CancellationToken()
        coordinator = ShutdownCoordinator(token, ManualTermination())
        coordinator.start()

        coordinator.stop()

        assert not coordinator.thread.is_alive()
        assert not token.cancelled

    def test_start_is_idempotent(self):
        coordinator = ShutdownCoordinator(CancellationToken(), ManualTermination())
        coordinator.start()
        first = coordinator.thread
        coordinator.start()

        assert coordinator.thread is first
        coordinator.stop()

    def test_stop_before_start(self):
        ShutdownCoordinator(CancellationToken(), ManualTermination()).stop()


@pytest.mark.skipif(not hasattr(signal, "pthread_sigmask"), reason="POSIX only")
class TestSignalTermination:
    def test_install_blocks_and_uninstall_restores(self):
        source = SignalTermination([signal.SIGUSR2])
        before = signal.pthread_sigmask(signal.SIG_BLOCK, [])

        source.install()
        try:
            assert signal.SIGUSR2 in signal.pthread_sigmask(signal.SIG_BLOCK, [])
        finally:
            source.uninstall()

        assert signal.pthread_sigmask(signal.SIG_BLOCK, []) == before

    def test_wake_unblocks_waiting_coordinator(self):
        token = CancellationToken()
        source = SignalTermination([signal.SIGUSR2])
        source.install()
        try:
            coordinator = ShutdownCoordinator(token, source)
            coordinator.start()
            coordinator.stop(timeout=2.0)

            assert not coordinator.thread.is_alive()
            assert not token.cancelled
        finally:
            source.uninstall()

    def test_pending_signal_discarded(self):
        source = SignalTermination([signal.SIGUSR2])
        source.install()
        try:
            signal.pthread_kill(threading.get_ident(), signal.SIGUSR2)
            assert signal.SIGUSR2 in signal.sigpending()

            assert source.discard_pending() == ["SIGUSR2"]
            assert signal.SIGUSR2 not in signal.sigpending()
        finally:
            source.uninstall()

    def test_uninstall_swallows_repeated_signal(self):
        # Delivered with its default action, SIGUSR2 would end the test run
        source = SignalTermination([signal.SIGUSR2])
        source.install()
        try:
            signal.pthread_kill(threading.get_ident(), signal.SIGUSR2)
        finally:
            source.uninstall()

        assert signal.SIGUSR2 not in signal.sigpending()
