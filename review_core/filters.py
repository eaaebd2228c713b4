from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from functools import lru_cache
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Union

from review_core.dimensions import Dimension, as_dimension

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterState:
    active_dimension: Optional[Dimension] = None
    selected_entities: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def dimension_key(self) -> Optional[str]:
        return self.active_dimension.key if self.active_dimension is not None else None

    def allows(self, entity_name: str) -> bool:
        return not self.selected_entities or entity_name in self.selected_entities

    def to_dict(self) -> Dict[str, Any]:
        return {
            "active_dimension": self.dimension_key,
            "active_dimension_label": self.active_dimension.label if self.active_dimension is not None else None,
            "selected_entities": sorted(self.selected_entities),
        }


Listener = Callable[[FilterState], None]


def normalize_selection(values: Optional[Iterable[object]]) -> FrozenSet[str]:
    if not values:
        return frozenset()
    out = set()
    for v in values:
        if v is None:
            continue
        s = str(v).strip()
        if s:
            out.add(s)
    return frozenset(out)


class FilterBroker:
    """Shared filter state read by every chart.

    Each update builds a new frozen FilterState and swaps it in under a lock,
    so a reader always sees a whole state. Listeners run synchronously after
    the swap, outside the lock.
    """

    def __init__(self, initial: Optional[FilterState] = None):
        self._state = initial or FilterState()
        self._lock = threading.Lock()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> FilterState:
        with self._lock:
            return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _update(self, change: Callable[[FilterState], FilterState]) -> FilterState:
        with self._lock:
            previous = self._state
            new_state = change(previous)
            if new_state == previous:
                return previous
            self._state = new_state
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(new_state)
            except Exception:
                logger.exception("filter listener %r failed", listener)
        return new_state

    def set_active_dimension(self, dimension: Union[Dimension, str, None]) -> FilterState:
        """Activate ``dimension``; selecting the already-active one clears it."""
        dim = as_dimension(dimension)

        def change(state: FilterState) -> FilterState:
            if dim is not None and state.active_dimension == dim:
                return replace(state, active_dimension=None)
            return replace(state, active_dimension=dim)

        return self._update(change)

    def set_selected_entities(self, names: Optional[Iterable[object]]) -> FilterState:
        selected = normalize_selection(names)
        return self._update(lambda state: replace(state, selected_entities=selected))

    def toggle_entity(self, name: str) -> FilterState:
        def change(state: FilterState) -> FilterState:
            return replace(state, selected_entities=state.selected_entities ^ normalize_selection([name]))

        return self._update(change)

    def clear_entities(self) -> FilterState:
        return self.set_selected_entities(())

    def reset(self) -> FilterState:
        return self._update(lambda _state: FilterState())


@lru_cache(maxsize=1)
def get_filter_broker() -> FilterBroker:
    return FilterBroker()
