"""
Unit tests for observers, quotes and lazy objects.
"""

from datetime import date
import pytest

from curvelib.errors import DomainError
from curvelib.observable import (
    EvaluationDate,
    LazyObject,
    Observable,
    QuoteHandle,
    SimpleQuote,
    make_quote_handle,
)


class Recorder:
    """Counts notifications."""

    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1


class SquareOfQuote(LazyObject):
    """Minimal lazy object for testing."""

    def __init__(self, quote: SimpleQuote):
        super().__init__()
        self.quote = quote
        quote.register_observer(self.update)
        self._result = None

    def _perform_calculations(self):
        self._result = self.quote.value ** 2

    @property
    def result(self):
        self.calculate()
        return self._result


class TestObservable:

    def test_notify(self):
        """Test observer notification."""
        subject = Observable()
        recorder = Recorder()
        subject.register_observer(recorder)
        subject.notify_observers()
        assert recorder.calls == 1

    def test_register_twice_is_noop(self):
        """Registering twice notifies once."""
        subject = Observable()
        recorder = Recorder()
        subject.register_observer(recorder)
        subject.register_observer(recorder)
        assert subject.observer_count == 1
        subject.notify_observers()
        assert recorder.calls == 1

    def test_unregister(self):
        """Test removing an observer."""
        subject = Observable()
        recorder = Recorder()
        subject.register_observer(recorder)
        subject.unregister_observer(recorder)
        subject.notify_observers()
        assert recorder.calls == 0


class TestQuotes:

    def test_simple_quote_notifies_on_change(self):
        """Only real changes notify."""
        quote = SimpleQuote(0.05)
        recorder = Recorder()
        quote.register_observer(recorder)
        quote.set_value(0.05)
        assert recorder.calls == 0
        quote.set_value(0.06)
        assert recorder.calls == 1
        assert quote.value == 0.06

    def test_invalid_quote(self):
        """Test reading an empty quote."""
        quote = SimpleQuote()
        assert not quote.is_valid()
        with pytest.raises(DomainError):
            quote.value

    def test_handle_forwards_quote_changes(self):
        """Handle passes on changes of its quote."""
        quote = SimpleQuote(0.05)
        handle = QuoteHandle(quote)
        recorder = Recorder()
        handle.register_observer(recorder)
        quote.set_value(0.04)
        assert recorder.calls == 1
        assert handle.value == 0.04

    def test_relink(self):
        """Relinking notifies and detaches the old quote."""
        old, new = SimpleQuote(0.05), SimpleQuote(0.07)
        handle = QuoteHandle(old)
        recorder = Recorder()
        handle.register_observer(recorder)
        handle.link_to(new)
        assert recorder.calls == 1
        assert handle.value == 0.07
        # the old quote no longer reaches the handle
        old.set_value(0.01)
        assert recorder.calls == 1

    def test_empty_handle(self):
        """Test reading an empty handle."""
        handle = QuoteHandle()
        assert handle.empty
        assert not handle.is_valid()
        with pytest.raises(DomainError):
            handle.value

    def test_make_quote_handle(self):
        """Test wrapping numbers, quotes and handles."""
        assert make_quote_handle(0.03).value == 0.03
        quote = SimpleQuote(0.02)
        assert make_quote_handle(quote).current_link is quote
        handle = QuoteHandle(quote)
        assert make_quote_handle(handle) is handle
        assert make_quote_handle(None).empty


class TestEvaluationDate:

    def test_set_notifies(self):
        """Moving the date notifies; setting it again does not."""
        today = EvaluationDate(date(2024, 1, 15))
        recorder = Recorder()
        today.register_observer(recorder)
        today.set(date(2024, 1, 15))
        assert recorder.calls == 0
        today.set(date(2024, 1, 16))
        assert recorder.calls == 1
        assert today.value == date(2024, 1, 16)


class TestLazyObject:

    def test_calculates_once(self):
        """Repeated reads calculate once."""
        quote = SimpleQuote(3.0)
        lazy = SquareOfQuote(quote)
        assert lazy.result == 9.0
        assert lazy.result == 9.0
        assert lazy._calculation_count == 1

    def test_recalculates_after_change(self):
        """Test recalculation after an input change."""
        quote = SimpleQuote(3.0)
        lazy = SquareOfQuote(quote)
        lazy.result
        quote.set_value(4.0)
        assert not lazy.is_calculated
        assert lazy.result == 16.0
        assert lazy._calculation_count == 2

    def test_forwards_notifications(self):
        """Input changes reach observers of a calculated object."""
        quote = SimpleQuote(3.0)
        lazy = SquareOfQuote(quote)
        recorder = Recorder()
        lazy.register_observer(recorder)
        lazy.result
        quote.set_value(5.0)
        assert recorder.calls == 1

    def test_notifies_once_until_read(self):
        """Observers are notified once per stale period."""
        quote = SimpleQuote(3.0)
        lazy = SquareOfQuote(quote)
        recorder = Recorder()
        lazy.register_observer(recorder)
        quote.set_value(4.0)
        assert recorder.calls == 0
        lazy.result
        quote.set_value(5.0)
        quote.set_value(6.0)
        quote.set_value(7.0)
        assert recorder.calls == 1
        assert lazy.result == 49.0
        quote.set_value(8.0)
        assert recorder.calls == 2

    def test_freeze(self):
        """Frozen objects keep results; unfreezing notifies."""
        quote = SimpleQuote(3.0)
        lazy = SquareOfQuote(quote)
        recorder = Recorder()
        lazy.register_observer(recorder)
        lazy.result
        lazy.freeze()
        quote.set_value(4.0)
        assert lazy.result == 9.0
        assert recorder.calls == 0
        lazy.unfreeze()
        assert recorder.calls == 1
        assert lazy.result == 16.0

    def test_recalculate(self):
        """Test forced recalculation."""
        recorder = Recorder()
        lazy = SquareOfQuote(SimpleQuote(2.0))
        lazy.register_observer(recorder)
        lazy.result
        lazy.recalculate()
        assert lazy._calculation_count == 2
        assert recorder.calls == 1

    def test_failed_calculation_stays_dirty(self):
        """A failed calculation is retried on the next read."""
        quote = SimpleQuote()
        lazy = SquareOfQuote(quote)
        with pytest.raises(DomainError):
            lazy.result
        assert not lazy.is_calculated
        quote.set_value(2.0)
        assert lazy.result == 4.0
