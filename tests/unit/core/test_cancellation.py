"""Тесты для CancelScope."""

import builtins
import time

import pytest

from src.httprpc.core.cancellation import CancelScope
from src.httprpc.core.exceptions import CancelledError, DeadlineExceededError


class TestCancelScope:
    """Test deadlines and cancellation."""

    def test_background(self):
        """Тест background scope."""
        scope = CancelScope.background()
        assert scope.deadline is None
        assert scope.remaining() is None
        assert not scope.done()
        assert scope.error() is None

    def test_with_timeout(self):
        """Тест дедлайна через timeout."""
        scope = CancelScope.with_timeout(10)
        remaining = scope.remaining()
        assert 9 < remaining <= 10
        assert not scope.expired()

    def test_with_timeout_negative(self):
        with pytest.raises(ValueError):
            CancelScope.with_timeout(-1)

    def test_expired_deadline(self):
        """Тест истекшего дедлайна."""
        scope = CancelScope.with_deadline(time.monotonic() - 1)
        assert scope.expired()
        assert scope.done()
        assert scope.remaining() == 0.0

        error = scope.error()
        assert isinstance(error, DeadlineExceededError)
        assert isinstance(error, builtins.TimeoutError)

    def test_zero_timeout_is_done(self):
        scope = CancelScope.with_timeout(0)
        assert scope.done()

    def test_cancel(self):
        """Тест явной отмены."""
        scope = CancelScope.with_cancel()
        assert not scope.done()

        scope.cancel()
        scope.cancel()  # idempotent

        assert scope.cancelled
        assert scope.done()
        assert isinstance(scope.error(), CancelledError)

    def test_cancel_wins_over_deadline(self):
        scope = CancelScope.with_deadline(time.monotonic() - 1)
        scope.cancel()
        assert isinstance(scope.error(), CancelledError)

    def test_child_inherits_earlier_deadline(self):
        """Тест что дочерний scope берет более ранний дедлайн."""
        parent = CancelScope.with_timeout(1)
        child = CancelScope.with_timeout(100, parent=parent)
        assert child.deadline == parent.deadline

        short = CancelScope.with_timeout(0.5, parent=parent)
        assert short.deadline < parent.deadline

    def test_child_without_deadline_inherits_parent(self):
        parent = CancelScope.with_timeout(5)
        child = CancelScope.with_cancel(parent)
        assert child.deadline == parent.deadline

    def test_parent_cancel_cascades(self):
        """Тест каскадной отмены."""
        parent = CancelScope.with_cancel()
        child = CancelScope.with_cancel(parent)
        grandchild = CancelScope.with_timeout(10, parent=child)

        parent.cancel()

        assert child.cancelled
        assert grandchild.cancelled

    def test_child_cancel_does_not_affect_parent(self):
        parent = CancelScope.with_cancel()
        child = CancelScope.with_cancel(parent)
        child.cancel()
        assert not parent.cancelled

    def test_cancelled_child_detaches(self):
        """Finished children do not pile up on a long-lived parent."""
        parent = CancelScope.with_cancel()
        for _ in range(1000):
            with CancelScope.with_timeout(1, parent=parent):
                pass

        assert parent._callbacks == []

    def test_release_detaches_without_cancel(self):
        parent = CancelScope.with_cancel()
        child = CancelScope.with_cancel(parent)

        child.release()
        child.release()  # idempotent
        assert parent._callbacks == []

        parent.cancel()
        assert not child.cancelled

    def test_context_manager_cancels_on_exit(self):
        with CancelScope.with_cancel() as scope:
            assert not scope.done()
        assert scope.cancelled

    def test_cancel_callbacks(self):
        """Тест callback при отмене."""
        scope = CancelScope.with_cancel()
        calls = []

        scope.add_cancel_callback(lambda: calls.append("a"))
        unregister = scope.add_cancel_callback(lambda: calls.append("b"))
        unregister()

        scope.cancel()
        assert calls == ["a"]

    def test_callback_on_cancelled_scope_runs_immediately(self):
        scope = CancelScope.with_cancel()
        scope.cancel()

        calls = []
        unregister = scope.add_cancel_callback(lambda: calls.append(1))
        unregister()

        assert calls == [1]

    def test_repr(self):
        assert "cancelled=False" in repr(CancelScope.background())
