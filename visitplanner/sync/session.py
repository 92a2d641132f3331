from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

from ..fragment.config import DEFAULT_FRAGMENT_CONFIG, FragmentConfig
from ..fragment.models import ControlChanges, TripPreferences
from ..fragment.resolver import apply_changes, canonicalize, parse_fragment, serialize_fragment
from ..recommendations.engine import recommend
from ..recommendations.models import Recommendation
from .history import FragmentHistory

logger = logging.getLogger(__name__)


class Controls(Protocol):
    """UI controls the session reads from and writes resolved values back to."""

    def read(self) -> dict[str, Any]: ...

    def write(self, prefs: TripPreferences) -> None: ...


RenderCallback = Callable[[TripPreferences, Recommendation], None]
RecommendFn = Callable[[TripPreferences], Recommendation]


class TripSession:
    """
    Owns the current :class:`TripPreferences` and its canonical fragment.

    Every change funnels through ``_commit``: serialize, write the fragment,
    push values to the controls, re-evaluate and render once. Fragment events
    triggered by our own writes are ignored.
    """

    def __init__(
        self,
        controls: Controls | None = None,
        render: RenderCallback | None = None,
        *,
        config: FragmentConfig = DEFAULT_FRAGMENT_CONFIG,
        recommend_fn: RecommendFn = recommend,
    ) -> None:
        self._controls = controls
        self._render = render
        self._config = config
        self._recommend = recommend_fn
        self._history: FragmentHistory | None = None
        self._writing = False

        self.preferences = TripPreferences(destination=config.default_destination)
        self.fragment = serialize_fragment(self.preferences, config=config)
        self.recommendation: Recommendation | None = None

    @classmethod
    def from_fragment(cls, fragment: str, **kwargs: Any) -> "TripSession":
        session = cls(**kwargs)
        session.load(fragment)
        return session

    # ── Fragment -> state ────────────────────────────────────────────────

    def load(self, fragment: str) -> TripPreferences:
        self.preferences = parse_fragment(fragment, config=self._config)
        self.fragment = serialize_fragment(self.preferences, config=self._config)
        self._write_controls()
        self._refresh()
        return self.preferences

    def on_fragment_change(self, fragment: str) -> bool:
        """Handle an external fragment change; returns True when state was reloaded."""
        if self._writing:
            logger.debug("Ignoring fragment event raised by our own write: %s", fragment)
            return False
        canonical = canonicalize(fragment, config=self._config)
        if canonical == self.fragment:
            logger.debug("Fragment already current, skipping re-render: %s", fragment)
            return False
        self.load(fragment)
        return True

    # ── Controls -> state ────────────────────────────────────────────────

    def on_control_change(self, changes: ControlChanges | None = None, **values: Any) -> str:
        if changes is None:
            changes = ControlChanges(**values)
        self.preferences = apply_changes(self.preferences, changes, config=self._config)
        return self._commit()

    def on_controls_changed(self) -> str:
        """Read every control and commit the result."""
        if self._controls is None:
            raise RuntimeError("TripSession has no controls to read from")
        return self.on_control_change(ControlChanges(**self._controls.read()))

    def toggle_option(self, index: int) -> str:
        """Show or hide the steps of strategy card *index* (1-based)."""
        if index < 1:
            raise ValueError(f"Option index must be >= 1, got {index}")
        options = set(self.preferences.expanded_options)
        options ^= {index}
        self.preferences = self.preferences.model_copy(update={"expanded_options": sorted(options)})
        return self._commit()

    def reset_where_when(self) -> str:
        self.preferences = self.preferences.model_copy(update={"day": "", "time": ""})
        return self._commit()

    @property
    def can_reset(self) -> bool:
        return bool(self.preferences.day or self.preferences.time)

    # ── History wiring ───────────────────────────────────────────────────

    def attach(self, history: FragmentHistory) -> None:
        """Follow *history*; attaching again to the same history is a no-op."""
        if self._history is history:
            return
        self.detach()
        history.subscribe(self.on_fragment_change)
        self._history = history
        self.load(history.current)

    def detach(self) -> None:
        if self._history is not None:
            self._history.unsubscribe(self.on_fragment_change)
            self._history = None

    # ── Internals ────────────────────────────────────────────────────────

    def _commit(self) -> str:
        self.fragment = serialize_fragment(self.preferences, config=self._config)
        if self._history is not None:
            self._writing = True
            try:
                self._history.push(self.fragment)
            finally:
                self._writing = False
        self._write_controls()
        self._refresh()
        return self.fragment

    def _write_controls(self) -> None:
        if self._controls is not None:
            self._controls.write(self.preferences)

    def _refresh(self) -> None:
        self.recommendation = self._recommend(self.preferences)
        if self._render is not None:
            self._render(self.preferences, self.recommendation)
