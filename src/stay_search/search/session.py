"""Debounced search session with stale-response suppression."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Union

from ..errors import StaySearchError
from ..models import Domain, FilterSet, ResultSet
from .engine import SearchEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Searching:
    seq: int


@dataclass(frozen=True)
class Settled:
    seq: int
    result: ResultSet


@dataclass(frozen=True)
class Failed:
    seq: int
    error: Exception


SessionState = Union[Idle, Searching, Settled, Failed]


class SearchSession:
    """
    Holds the visible search state for one UI.

    Idle -> Searching(seq) -> Settled(seq, result) | Failed(seq, error).
    Each invocation takes the next sequence number when it starts; only the
    most recently started invocation may commit, whatever order responses
    arrive in. A failure keeps the last settled result visible.
    """

    def __init__(
        self,
        engine: SearchEngine,
        debounce_seconds: float | None = None,
        on_commit: Callable[[SessionState], None] | None = None,
    ) -> None:
        self.engine = engine
        self.debounce_seconds = (
            engine.settings.debounce_seconds if debounce_seconds is None else debounce_seconds
        )
        self.on_commit = on_commit
        self._lock = threading.Lock()
        self._seq = 0
        self._state: SessionState = Idle()
        self._visible: ResultSet | None = None
        self._timer: threading.Timer | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def visible(self) -> ResultSet | None:
        """Last successfully assembled result."""
        return self._visible

    @property
    def latest_seq(self) -> int:
        return self._seq

    def begin(self) -> int:
        """Start an invocation and return its sequence number."""
        with self._lock:
            self._seq += 1
            self._state = Searching(self._seq)
            return self._seq

    def commit(self, outcome: Settled | Failed) -> bool:
        """Publish an outcome unless a newer invocation has started since."""
        with self._lock:
            if outcome.seq != self._seq:
                logger.debug("Dropping stale response #%d (latest #%d)", outcome.seq, self._seq)
                return False
            self._state = outcome
            if isinstance(outcome, Settled):
                self._visible = outcome.result
        if self.on_commit:
            self.on_commit(outcome)
        return True

    def run(self, filters: FilterSet, domain: Domain | str | None = None) -> Settled | Failed:
        """Search now. Returns this invocation's outcome, committed or not."""
        seq = self.begin()
        outcome: Settled | Failed
        try:
            outcome = Settled(seq, self.engine.search(filters, domain))
        except StaySearchError as e:
            logger.warning("Search #%d failed: %s", seq, e)
            outcome = Failed(seq, e)
        except Exception as e:
            # Unexpected backend errors still settle the invocation
            logger.exception("Search #%d crashed", seq)
            outcome = Failed(seq, e)
        self.commit(outcome)
        return outcome

    def schedule(self, filters: FilterSet, domain: Domain | str | None = None) -> None:
        """Run after the debounce window; a newer schedule replaces a pending one."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_seconds, self.run, args=(filters, domain))
            self._timer.daemon = True
            self._timer.start()

    def cancel_pending(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
