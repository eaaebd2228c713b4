from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import pandas as pd

from review_core.config import ENTITY_TYPES, ViewSettings
from review_core.data import prepare_context
from review_core.filters import FilterBroker, FilterState, get_filter_broker
from review_core.metrics_airlines import compute_airline_scatter
from review_core.metrics_dimensions import compute_dimension_matrix
from review_core.metrics_timeseries import compute_time_series
from review_core.summaries import country_ratings, top_entities
from review_core.timebuckets import check_bucket_mode

logger = logging.getLogger(__name__)


class ExplorerSession:
    """Chart payloads for one loaded dataset bundle, kept in step with a FilterBroker.

    Payloads are cached per filter state. Any broker change drops the cache,
    so the next read recomputes from the new state.
    """

    def __init__(
        self,
        data_ctx: Dict[str, Any],
        *,
        broker: Optional[FilterBroker] = None,
        settings: Optional[ViewSettings] = None,
    ):
        self.data_ctx = data_ctx
        self.broker = broker if broker is not None else get_filter_broker()
        self.settings = settings or ViewSettings()
        self._cache: Dict[Tuple[Any, ...], Dict[str, Any]] = {}
        self._unsubscribe: Optional[Callable[[], None]] = self.broker.subscribe(self._invalidate)

    @property
    def ready(self) -> bool:
        return int(self.data_ctx.get("loaded", len(ENTITY_TYPES))) >= len(ENTITY_TYPES)

    @property
    def error(self) -> Optional[str]:
        return self.data_ctx.get("error")

    @property
    def state(self) -> FilterState:
        return self.broker.state

    def _invalidate(self, state: FilterState) -> None:
        logger.debug("filter state changed to %s; dropping %d cached payloads", state.to_dict(), len(self._cache))
        self._cache.clear()

    def _cached(self, key: Tuple[str, ...], compute: Callable[[FilterState, Dict[str, Any]], Dict[str, Any]]) -> Dict[str, Any]:
        # Keyed by the state it was computed from: a change landing mid-compute
        # leaves the result under a key no later read asks for.
        state = self.broker.state
        cache_key = key + (state,)
        if cache_key not in self._cache:
            self._cache[cache_key] = compute(state, prepare_context(state, self.data_ctx))
        return self._cache[cache_key]

    def airline_scatter(self) -> Dict[str, Any]:
        return self._cached(
            ("airline_scatter",),
            lambda state, ctx: compute_airline_scatter(state, ctx, min_reviews=self.settings.min_airline_reviews),
        )

    def time_series(self, mode: Optional[str] = None) -> Dict[str, Any]:
        mode = check_bucket_mode(mode or self.settings.bucket_mode)
        return self._cached(("time_series", mode), lambda state, ctx: compute_time_series(state, ctx, mode=mode))

    def dimension_matrix(self) -> Dict[str, Any]:
        return self._cached(("dimension_matrix",), compute_dimension_matrix)

    def airline_choices(self) -> List[Tuple[str, int]]:
        return top_entities(self.data_ctx.get("airline"), self.settings.top_entities)

    def country_table(self) -> pd.DataFrame:
        return country_ratings(self.data_ctx.get("airport"), self.data_ctx.get("lounge"))

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._cache.clear()
