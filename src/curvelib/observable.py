"""
Observer wiring and lazy recalculation.

Every Observable keeps its own explicit list of callbacks; there is no
global registry. A callback is normally the `update` method of a
dependent object, which marks it dirty and forwards the notification to
its own observers.

Provides:
- Observable: callback list with register/unregister/notify
- SimpleQuote: mutable market value
- QuoteHandle: relinkable reference to a quote
- EvaluationDate: movable "today" shared by helpers and curves
- LazyObject: dirty flag + calculate-on-read
"""

from datetime import date
from typing import Callable, List, Optional, Union
import logging

from .errors import DomainError

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class Observable:
    """Object that notifies registered callbacks when it changes."""

    def __init__(self):
        self._observers: List[Callback] = []

    def register_observer(self, callback: Callback) -> None:
        """Register a callback; registering the same callback twice is a no-op."""
        if callback not in self._observers:
            self._observers.append(callback)

    def unregister_observer(self, callback: Callback) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def notify_observers(self) -> None:
        # copy: callbacks may (un)register while we iterate
        for callback in list(self._observers):
            callback()


class SimpleQuote(Observable):
    """
    Market quote holding a single float.

    A value of None marks the quote as invalid.
    """

    def __init__(self, value: Optional[float] = None):
        super().__init__()
        self._value = None if value is None else float(value)

    @property
    def value(self) -> float:
        if self._value is None:
            raise DomainError("invalid quote: no value set")
        return self._value

    def set_value(self, value: Optional[float]) -> None:
        """Set a new value and notify observers if it changed."""
        new_value = None if value is None else float(value)
        if new_value != self._value:
            self._value = new_value
            self.notify_observers()

    def is_valid(self) -> bool:
        return self._value is not None

    def __repr__(self) -> str:
        return f"SimpleQuote({self._value})"


class QuoteHandle(Observable):
    """
    Shared, relinkable reference to a quote.

    Observers of the handle are notified both when the linked quote
    changes value and when the handle is relinked.
    """

    def __init__(self, quote: Optional[SimpleQuote] = None):
        super().__init__()
        self._link: Optional[SimpleQuote] = None
        if quote is not None:
            self.link_to(quote, notify=False)

    def link_to(self, quote: Optional[SimpleQuote], notify: bool = True) -> None:
        if quote is self._link:
            return
        if self._link is not None:
            self._link.unregister_observer(self.notify_observers)
        self._link = quote
        if quote is not None:
            quote.register_observer(self.notify_observers)
        if notify:
            self.notify_observers()

    @property
    def empty(self) -> bool:
        return self._link is None

    @property
    def current_link(self) -> SimpleQuote:
        if self._link is None:
            raise DomainError("empty quote handle cannot be dereferenced")
        return self._link

    def is_valid(self) -> bool:
        return self._link is not None and self._link.is_valid()

    @property
    def value(self) -> float:
        return self.current_link.value

    def __repr__(self) -> str:
        return f"QuoteHandle({self._link!r})"


def make_quote_handle(quote: Union[float, SimpleQuote, QuoteHandle, None]) -> QuoteHandle:
    """Wrap a float or quote into a handle; handles pass through unchanged."""
    if isinstance(quote, QuoteHandle):
        return quote
    if isinstance(quote, SimpleQuote):
        return QuoteHandle(quote)
    if quote is None:
        return QuoteHandle()
    return QuoteHandle(SimpleQuote(quote))


class EvaluationDate(Observable):
    """
    The date at which market data is observed.

    Passed explicitly to helpers and moving curves; changing it notifies
    everything built relative to it.
    """

    def __init__(self, value: date):
        super().__init__()
        self._value = value

    @property
    def value(self) -> date:
        return self._value

    def set(self, value: date) -> None:
        if value != self._value:
            logger.debug("Evaluation date moved from %s to %s", self._value, value)
            self._value = value
            self.notify_observers()

    def __repr__(self) -> str:
        return f"EvaluationDate({self._value.isoformat()})"


class LazyObject(Observable):
    """
    Object that recomputes its results only when read after a change.

    Subclasses implement `_perform_calculations`; public read methods call
    `calculate()` first.
    """

    def __init__(self):
        super().__init__()
        self._calculated = False
        self._frozen = False
        self._calculation_count = 0

    def update(self) -> None:
        """Mark results stale; observers hear about it once per dirty transition."""
        if self._calculated:
            self._calculated = False
            if not self._frozen:
                self.notify_observers()

    def calculate(self) -> None:
        if not self._calculated and not self._frozen:
            # set first so reads made while calculating do not recurse
            self._calculated = True
            try:
                self._perform_calculations()
            except Exception:
                self._calculated = False
                raise
            self._calculation_count += 1

    def recalculate(self) -> None:
        """Force a calculation even if nothing changed, then notify."""
        was_frozen = self._frozen
        self._calculated = False
        self._frozen = False
        try:
            self.calculate()
        finally:
            self._frozen = was_frozen
        self.notify_observers()

    def freeze(self) -> None:
        """Stop recalculating (and forwarding notifications) until unfrozen."""
        self._frozen = True

    def unfreeze(self) -> None:
        """Resume recalculating; the next read recomputes."""
        if self._frozen:
            self._frozen = False
            self._calculated = False
            self.notify_observers()

    @property
    def is_calculated(self) -> bool:
        return self._calculated

    def _perform_calculations(self) -> None:
        raise NotImplementedError


__all__ = [
    "Observable",
    "SimpleQuote",
    "QuoteHandle",
    "make_quote_handle",
    "EvaluationDate",
    "LazyObject",
]
